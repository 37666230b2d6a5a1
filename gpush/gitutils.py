"""
Repository operations over the git CLI.

Every operation runs one git command through an `Executor`
and returns `Ok(value)` on success. On failure the raw
diagnostic is classified exactly once, here, and returned
as an `OperationError`. Nothing in this module retries or
swallows a failure.
"""
# ======================= STANDARDS =======================
import re

# ======================== LOCALS =========================
from .error_model import CommandFailure, CommandResult, ErrorKind
from .error_model import Ok, OperationError, RemoteDescriptor
from .executor import Executor, SubprocessExecutor, logger
from ._constants import DEFAULT_COMMIT_PREFIX, PUSH_TIMEOUT_S
from .classifier import classify_failure
from . import telemetry


_DEFAULT_EXECUTOR = SubprocessExecutor()
_SCP_LIKE_URL     = re.compile(r"^[\w.-]+@[^:/\s]+:")

NO_SUCH_REMOTE = "no such remote"


def _summary_line(text: str) -> str:
    """Pick the most telling line of a git diagnostic."""
    lines = [ln.strip() for ln in text.splitlines() if ln.strip()]
    for line in lines:
        if line.lower().startswith(("fatal:", "error:")): return line
    return lines[0] if lines else ""


def _fail(operation: str, failure: CommandFailure) -> OperationError:
    """Classify a raw failure into the operation's typed error."""
    kind = classify_failure(failure)
    if kind is ErrorKind.TOOL_NOT_INSTALLED:
        message = f"{failure.command} is not installed or not on PATH"
    elif kind is ErrorKind.TIMEOUT:
        message = f"{operation} timed out"
    else:
        detail  = _summary_line(failure.diagnostic())
        message = f"{operation} failed: {detail}"
    error = OperationError(kind=kind, message=message,
            cause=failure.diagnostic())
    logger.warning("%s -> %s: %s", failure.command_line,
        kind.value, failure.diagnostic())
    telemetry.emit_event(
        event_type="operation_error",
        step_id=operation,
        payload={
            "kind": kind.value,
            "reason": failure.reason,
            "returncode": failure.returncode,
            "args": list(failure.args),
            "stderr_excerpt": failure.stderr.strip()[:300],
        },
    )
    return error


def _git(path: str, args: list[str], executor: Executor | None,
         timeout: float | None = None
        ) -> CommandResult | CommandFailure:
    runner = executor or _DEFAULT_EXECUTOR
    return runner.execute("git", args, cwd=path, timeout=timeout)


def stage_all(path: str, executor: Executor | None = None,
              timeout: float | None = None
             ) -> Ok[None] | OperationError:
    out = _git(path, ["add", "."], executor, timeout)
    if isinstance(out, CommandFailure): return _fail("stage", out)
    return Ok(None)


def get_staged_diff(path: str, executor: Executor | None = None,
                    timeout: float | None = None
                   ) -> Ok[str] | OperationError:
    out = _git(path, ["diff", "--staged"], executor, timeout)
    if isinstance(out, CommandFailure): return _fail("diff", out)
    return Ok(out.stdout.strip())


def get_staged_files(path: str, executor: Executor | None = None,
                     timeout: float | None = None
                    ) -> Ok[list[str]] | OperationError:
    out = _git(path, ["diff", "--staged", "--name-only"], executor,
          timeout)
    if isinstance(out, CommandFailure):
        return _fail("list staged files", out)
    text = out.stdout.strip()
    if not text: return Ok([])
    return Ok([ln.strip() for ln in text.splitlines() if ln.strip()])


def commit(path: str, message: str, executor: Executor | None = None,
           timeout: float | None = None) -> Ok[None] | OperationError:
    if not isinstance(message, str) or not message.strip():
        return OperationError(
            kind=ErrorKind.UNKNOWN,
            message="commit failed: commit message must not be empty",
        )
    out = _git(path, ["commit", "-m", message], executor, timeout)
    if isinstance(out, CommandFailure): return _fail("commit", out)
    return Ok(None)


def push(path: str, executor: Executor | None = None,
         timeout: float | None = PUSH_TIMEOUT_S
        ) -> Ok[None] | OperationError:
    out = _git(path, ["push"], executor, timeout)
    if isinstance(out, CommandFailure): return _fail("push", out)
    return Ok(None)


def has_working_changes(path: str, executor: Executor | None = None,
                        timeout: float | None = None
                       ) -> Ok[bool] | OperationError:
    out = _git(path, ["status", "--porcelain"], executor, timeout)
    if isinstance(out, CommandFailure): return _fail("status", out)
    return Ok(bool(out.stdout.strip()))


def origin_url(path: str, executor: Executor | None = None,
               timeout: float | None = None
              ) -> Ok[str | None] | OperationError:
    """URL of `origin`, or Ok(None) when no such remote exists."""
    out = _git(path, ["remote", "get-url", "origin"], executor, timeout)
    if isinstance(out, CommandFailure):
        if out.reason == "exit" and NO_SUCH_REMOTE in out.stderr.lower():
            return Ok(None)
        return _fail("remote lookup", out)
    return Ok(out.stdout.strip() or None)


def has_remote_origin(path: str, executor: Executor | None = None,
                      timeout: float | None = None
                     ) -> Ok[bool] | OperationError:
    found = origin_url(path, executor, timeout)
    if isinstance(found, OperationError): return found
    return Ok(found.value is not None)


def remote_scheme(url: str) -> str:
    """Return "https", "ssh" or "other" for a remote URL."""
    text = url.strip()
    if text.lower().startswith("https"): return "https"
    if text.lower().startswith("ssh://"): return "ssh"
    if _SCP_LIKE_URL.match(text): return "ssh"
    return "other"


def get_remote_descriptor(path: str, executor: Executor | None = None,
                          timeout: float | None = None
                         ) -> Ok[RemoteDescriptor] | OperationError:
    found = origin_url(path, executor, timeout)
    if isinstance(found, OperationError): return found
    if found.value is None:
        return OperationError(
            kind=ErrorKind.NO_REMOTE,
            message="no remote named 'origin' is configured",
        )
    url = found.value
    return Ok(RemoteDescriptor(url=url, scheme=remote_scheme(url)))


def format_default_message(files: list[str]) -> str:
    """Fallback commit message listing the staged files."""
    return f"{DEFAULT_COMMIT_PREFIX}: {', '.join(files)}"
