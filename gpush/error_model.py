"""
Typed results and the closed error taxonomy for git
operations.

Repository operations return `Ok[T] | OperationError`;
callers branch with `isinstance`. Exceptions are kept for
conditions nobody can act on.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Generic, TypeVar, Union
from enum import Enum


T = TypeVar("T")


class ErrorKind(str, Enum):
    """Closed set of failure classes; one per failure."""
    # Authentication & authorization
    AUTH_FAILED         = "AUTH_FAILED"
    PERMISSION_DENIED   = "PERMISSION_DENIED"

    # Remote repository
    NO_REMOTE           = "NO_REMOTE"
    REMOTE_NOT_FOUND    = "REMOTE_NOT_FOUND"
    REMOTE_DISCONNECTED = "REMOTE_DISCONNECTED"

    # Local repository
    NOT_A_REPOSITORY    = "NOT_A_REPOSITORY"
    NO_COMMITS          = "NO_COMMITS"
    MERGE_CONFLICT      = "MERGE_CONFLICT"
    UNCOMMITTED_CHANGES = "UNCOMMITTED_CHANGES"

    # Network & system
    NETWORK_ERROR       = "NETWORK_ERROR"
    TOOL_NOT_INSTALLED  = "TOOL_NOT_INSTALLED"
    TIMEOUT             = "TIMEOUT"

    UNKNOWN             = "UNKNOWN"


@dataclass(frozen=True)
class CommandResult:
    """Captured output of a zero-exit command, untrimmed."""
    stdout: str
    stderr: str


@dataclass(frozen=True)
class CommandFailure:
    """
    Raw executor failure.

    `reason` is one of:
      - "exit": non-zero exit, `stderr` holds the diagnostic
      - "missing": the binary could not be launched
      - "timeout": the bounded wait expired
    """
    command: str
    args: tuple[str, ...]
    reason: str
    returncode: int | None = None
    stderr: str = ""

    @property
    def command_line(self) -> str:
        return " ".join((self.command, *self.args))

    def diagnostic(self) -> str:
        """Best human-readable description of what went wrong."""
        if self.reason == "missing":
            return f"{self.command}: command not found"
        if self.reason == "timeout":
            return f"{self.command_line}: timed out"
        text = self.stderr.strip()
        if text: return text
        return f"{self.command_line}: exited with code {self.returncode}"


@dataclass(frozen=True)
class RemoteDescriptor:
    url: str
    scheme: str  # "https" | "ssh" | "other"


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class OperationError:
    """Classified failure of a repository operation."""
    kind: ErrorKind
    message: str
    cause: str | None = None

    def with_message(self, message: str) -> OperationError:
        """Return a copy carrying `message`; the original is untouched."""
        return replace(self, message=message)

    def as_dict(self) -> dict[str, object]:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "cause": self.cause,
        }

    def as_record(self, step: str = "") -> dict[str, object]:
        """JSON record persisted when a run fails."""
        payload = self.as_dict()
        payload["step"] = step
        payload["schema"] = "gpush.error_record.v1"
        payload["schema_version"] = 1
        payload["generated_at"] = datetime.now(timezone.utc).isoformat(
            timespec="seconds"
        ).replace("+00:00", "Z")
        return payload


Result = Union[Ok[T], OperationError]
