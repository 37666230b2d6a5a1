"""
Push preflight state machine.

CHECKING_REMOTE -> CHECKING_SCHEME -> PUSHING -> SUCCEEDED
any state -> FAILED

A missing origin short-circuits to FAILED before the push
subprocess is spawned, and an HTTPS authentication failure
is enriched with transport-specific guidance. Callers only
ever see a terminal state.
"""
from dataclasses import dataclass, field
from enum import Enum

from .error_model import ErrorKind, Ok, OperationError
from .error_model import RemoteDescriptor
from ._constants import GIT_TIMEOUT_S, PUSH_TIMEOUT_S
from .executor import Executor, logger
from . import telemetry
from . import gitutils


HTTPS_AUTH_HELP = (
    "the remote uses HTTPS, which needs stored credentials or a "
    "token. Either switch to SSH:\n"
    "  git remote set-url origin git@github.com:OWNER/REPO.git\n"
    "or configure a credential helper:\n"
    "  git config --global credential.helper store\n"
    "  (or sign in once with: gh auth login)"
)


class PushState(str, Enum):
    CHECKING_REMOTE = "checking_remote"
    CHECKING_SCHEME = "checking_scheme"
    PUSHING         = "pushing"
    SUCCEEDED       = "succeeded"
    FAILED          = "failed"


TERMINAL_STATES = frozenset({PushState.SUCCEEDED, PushState.FAILED})


@dataclass(frozen=True)
class PushOutcome:
    """Terminal result of one preflight run."""
    state: PushState
    error: OperationError | None = None
    remote: RemoteDescriptor | None = None
    transitions: tuple[PushState, ...] = ()

    @property
    def ok(self) -> bool:
        return self.state is PushState.SUCCEEDED


def enrich_https_auth(error: OperationError) -> OperationError:
    """Attach HTTPS remediation to an auth failure message."""
    return error.with_message(f"{error.message}\n{HTTPS_AUTH_HELP}")


@dataclass
class PushPreflight:
    """Single-use push driver; one instance per workflow run."""
    path: str
    executor: Executor | None = None
    git_timeout: float = GIT_TIMEOUT_S
    push_timeout: float = PUSH_TIMEOUT_S
    state: PushState = field(init=False,
                       default=PushState.CHECKING_REMOTE)
    _transitions: list[PushState] = field(init=False,
                                    default_factory=list)
    _remote: RemoteDescriptor | None = field(init=False, default=None)

    def _enter(self, state: PushState) -> None:
        logger.debug("push preflight: %s -> %s", self.state.value,
            state.value)
        self.state = state
        self._transitions.append(state)
        telemetry.emit_event(
            event_type="push_state",
            step_id="push",
            payload={"state": state.value},
        )

    def _finish(self, error: OperationError | None = None
               ) -> PushOutcome:
        self._enter(PushState.FAILED if error else PushState.SUCCEEDED)
        return PushOutcome(
            state=self.state,
            error=error,
            remote=self._remote,
            transitions=tuple(self._transitions),
        )

    def run(self) -> PushOutcome:
        if self._transitions:
            raise RuntimeError("push preflight instances are single-use")
        self._transitions.append(self.state)

        # CHECKING_REMOTE
        found = gitutils.origin_url(self.path, self.executor,
                self.git_timeout)
        if isinstance(found, OperationError): return self._finish(found)
        if found.value is None:
            return self._finish(OperationError(
                kind=ErrorKind.NO_REMOTE,
                message="no remote named 'origin' is configured",
            ))

        # CHECKING_SCHEME
        self._enter(PushState.CHECKING_SCHEME)
        url = found.value
        self._remote = RemoteDescriptor(url=url,
                       scheme=gitutils.remote_scheme(url))

        # PUSHING
        self._enter(PushState.PUSHING)
        pushed = gitutils.push(self.path, self.executor,
                 self.push_timeout)
        if isinstance(pushed, Ok): return self._finish()
        if self._remote.scheme == "https" \
                and pushed.kind is ErrorKind.AUTH_FAILED:
            return self._finish(enrich_https_auth(pushed))
        return self._finish(pushed)
