"""
Command executor for external tools.

Commands run through `subprocess.run` with a discrete
argument list (never a shell), a bounded wait, and the C
locale so diagnostics stay in the language the classifier
matches against. Failures come back as `CommandFailure`
values; nothing here raises for an expected failure.
"""
# ======================= STANDARDS =======================
from typing import Protocol
from pathlib import Path
import logging as log
import subprocess
import errno
import os

# ======================== LOCALS =========================
from .error_model import CommandFailure, CommandResult
from ._constants import GIT_TIMEOUT_S


logger = log.getLogger("gpush.git")
_root  = log.getLogger("gpush")
_root.setLevel(log.DEBUG)


def configure_logger(log_dir: str | Path) -> None:
    """Attach the debug.log file handler once per process."""
    if _root.handlers: return
    os.makedirs(log_dir, exist_ok=True)
    file_handler = log.FileHandler(str(Path(log_dir) / "debug.log"))
    fmt          = log.Formatter("gpush: %(asctime)s - %"
                 + "(levelname)s - %(message)s")
    file_handler.setFormatter(fmt)
    _root.addHandler(file_handler)


class Executor(Protocol):
    """Anything able to run one command and report its outcome."""
    def execute(self, command: str, args: list[str],
                cwd: str | None = None,
                timeout: float | None = None
               ) -> CommandResult | CommandFailure: ...


def _command_env() -> dict[str, str]:
    env = dict(os.environ)
    env["LC_ALL"] = "C"
    # never block on an interactive credential prompt
    env.setdefault("GIT_TERMINAL_PROMPT", "0")
    return env


def execute(command: str, args: list[str], cwd: str | None = None,
            timeout: float | None = None
           ) -> CommandResult | CommandFailure:
    """
    Run `command` with `args` and capture its output.

    Behavior:
    - exit 0 -> CommandResult with stdout/stderr verbatim
    - non-zero exit -> CommandFailure(reason="exit") with
      stderr verbatim
    - binary not found -> CommandFailure(reason="missing")
    - wait exceeded -> CommandFailure(reason="timeout");
      the child is killed by subprocess.run
    """
    argv = [command, *args]
    if timeout is None: timeout = GIT_TIMEOUT_S
    logger.debug("RUN: %s (cwd=%s, timeout=%ss)", " ".join(argv),
        cwd, timeout)
    try:
        proc = subprocess.run(
            argv,
            cwd=cwd,
            text=True,
            capture_output=True,
            timeout=timeout,
            env=_command_env(),
            check=False,
        )
    except subprocess.TimeoutExpired:
        logger.debug("TIMEOUT after %ss: %s", timeout, " ".join(argv))
        return CommandFailure(command, tuple(args), "timeout")
    except OSError as e:
        # a missing cwd raises ENOENT too; that is not a missing tool
        if e.errno == errno.ENOENT and (cwd is None
                or os.path.isdir(cwd)):
            logger.debug("MISSING: %s (%s)", command, e)
            return CommandFailure(command, tuple(args), "missing",
                   stderr=str(e))
        raise

    stdout = proc.stdout or ""
    stderr = proc.stderr or ""
    logger.debug("RC=%s stdout=%r stderr=%r", proc.returncode,
        stdout, stderr)
    if proc.returncode != 0:
        return CommandFailure(command, tuple(args), "exit",
               returncode=proc.returncode, stderr=stderr)
    return CommandResult(stdout=stdout, stderr=stderr)


class SubprocessExecutor:
    """Default `Executor` backed by `subprocess.run`."""

    def execute(self, command: str, args: list[str],
                cwd: str | None = None,
                timeout: float | None = None
               ) -> CommandResult | CommandFailure:
        return execute(command, args, cwd=cwd, timeout=timeout)
