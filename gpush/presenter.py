"""
Remediation presenter: turns a classified `OperationError`
into user-facing guidance.

`render` is pure formatting; `present` emits through
`utils.Output` and never raises.
"""
from dataclasses import dataclass
import os

from .error_model import ErrorKind, OperationError
from .executor import logger
from . import telemetry
from . import utils


AUTH_HELP = """\
To fix authentication issues, try:
  1. Use SSH instead of HTTPS:
     git remote set-url origin git@github.com:OWNER/REPO.git
  2. Set up the GitHub CLI:
     gh auth login
  3. Configure git credentials:
     git config --global credential.helper store"""

REMOTE_HELP = """\
To configure the remote repository:
  1. Create a repository on GitHub/GitLab
  2. Then run:
     git remote add origin <repository-url>
     git push -u origin main"""

MERGE_HELP = """\
To resolve merge conflicts:
  1. View conflicting files:
     git status
  2. Edit the files to resolve the conflicts
  3. Stage resolved files:
     git add <file>
  4. Complete the merge:
     git commit"""

UNEXPECTED = "an unexpected error occurred; rerun with DEBUG=1 " \
             "for details or report this issue"


@dataclass(frozen=True)
class Remediation:
    """Primary summary plus an optional multi-line help block."""
    summary: str
    help_block: str | None = None


REMEDIATIONS: dict[ErrorKind, Remediation] = {
    ErrorKind.AUTH_FAILED: Remediation(
        "authentication failed; check your credentials and try again",
        AUTH_HELP,
    ),
    ErrorKind.PERMISSION_DENIED: Remediation(
        "permission denied; check your repository access rights",
        AUTH_HELP,
    ),
    ErrorKind.NO_REMOTE: Remediation(
        "remote repository not configured; run: "
        "git remote add origin <url>",
        REMOTE_HELP,
    ),
    ErrorKind.REMOTE_NOT_FOUND: Remediation(
        "remote repository not found; verify the repository URL",
        REMOTE_HELP,
    ),
    ErrorKind.REMOTE_DISCONNECTED: Remediation(
        "lost connection to the remote repository; check your "
        "internet connection",
        REMOTE_HELP,
    ),
    ErrorKind.NOT_A_REPOSITORY: Remediation(
        "not a git repository; run: git init",
    ),
    ErrorKind.NO_COMMITS: Remediation(
        "no commits yet; make your first commit to proceed",
    ),
    ErrorKind.MERGE_CONFLICT: Remediation(
        "merge conflicts detected; resolve them and try again",
        MERGE_HELP,
    ),
    ErrorKind.UNCOMMITTED_CHANGES: Remediation(
        "you have uncommitted changes; commit or stash them first",
    ),
    ErrorKind.NETWORK_ERROR: Remediation(
        "network error; check your internet connection",
    ),
    ErrorKind.TOOL_NOT_INSTALLED: Remediation(
        "git is not installed; install git and try again",
    ),
    ErrorKind.TIMEOUT: Remediation(
        "operation timed out; try again",
    ),
    ErrorKind.UNKNOWN: Remediation(UNEXPECTED),
}


def debug_enabled(environ: dict[str, str] | None = None) -> bool:
    """True when the DEBUG environment variable is set truthy."""
    env = os.environ if environ is None else environ
    return utils.is_truthy(env.get("DEBUG"))


def remediation_for(kind: object) -> Remediation:
    """Lookup with a generic fallback for unmapped kinds."""
    if isinstance(kind, ErrorKind) and kind in REMEDIATIONS:
        return REMEDIATIONS[kind]
    return Remediation(UNEXPECTED)


def render(error: OperationError, debug: bool = False) -> list[str]:
    """Lines of guidance for `error`, most important first."""
    rule  = remediation_for(getattr(error, "kind", None))
    lines = [rule.summary]
    message = str(getattr(error, "message", "") or "").strip()
    if message and message != rule.summary: lines.append(message)
    if rule.help_block: lines.append(rule.help_block)
    cause = getattr(error, "cause", None)
    if debug and cause:
        lines.append(f"underlying error:\n{str(cause).strip()}")
    return lines


def present(error: OperationError, out: utils.Output | None = None,
            debug: bool | None = None) -> list[str]:
    """Emit guidance for `error`; returns the emitted lines."""
    if debug is None: debug = debug_enabled()
    try: lines = render(error, debug=debug)
    except Exception:
        logger.exception("failed to render remediation")
        lines = [UNEXPECTED]
    echo = out or utils.Output()
    try:
        echo.warn(lines[0])
        for line in lines[1:]:
            if "\n" in line: echo.info(line, prefix=False)
            else: echo.warn(line)
        kind = getattr(getattr(error, "kind", None), "value", "")
        telemetry.emit_event(
            event_type="remediation",
            step_id="present",
            payload={"kind": kind, "summary": lines[0]},
        )
    # never raise from here
    except Exception:
        logger.exception("failed to emit remediation")
    return lines
