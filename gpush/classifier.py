"""Pure diagnostic-text classification for the error taxonomy."""
from dataclasses import dataclass
from typing import Callable
import re

from .error_model import CommandFailure, ErrorKind


@dataclass(frozen=True)
class ClassificationRule:
    """Declarative diagnostic-text classification rule."""
    kind: ErrorKind
    matcher: Callable[[str], bool]


def _match_any(needles: tuple[str, ...]) -> Callable[[str], bool]:
    """Return predicate that matches if any needle is present."""
    def _matcher(text: str) -> bool:
        return any(needle in text for needle in needles)
    return _matcher


def _match_all(needles: tuple[str, ...]) -> Callable[[str], bool]:
    """Return predicate that matches if every needle is present."""
    def _matcher(text: str) -> bool:
        return all(needle in text for needle in needles)
    return _matcher


# Order is policy: first match wins. Authentication outranks
# network because handshake failures often mention both and
# credentials are the actionable part.
CLASSIFICATION_RULES: tuple[ClassificationRule, ...] = (
    ClassificationRule(
        kind=ErrorKind.AUTH_FAILED,
        matcher=_match_any(("authentication", "authorization")),
    ),
    ClassificationRule(
        kind=ErrorKind.PERMISSION_DENIED,
        matcher=_match_any(("permission denied",)),
    ),
    ClassificationRule(
        kind=ErrorKind.REMOTE_NOT_FOUND,
        matcher=_match_all(("remote", "not found")),
    ),
    ClassificationRule(
        kind=ErrorKind.MERGE_CONFLICT,
        matcher=_match_any(("merge conflict",)),
    ),
    ClassificationRule(
        kind=ErrorKind.UNCOMMITTED_CHANGES,
        matcher=_match_any(("uncommitted changes",)),
    ),
    ClassificationRule(
        kind=ErrorKind.NETWORK_ERROR,
        matcher=_match_any(("network", "connection")),
    ),
    # Refinements of the fallback; evaluated only when none
    # of the rules above matched.
    ClassificationRule(
        kind=ErrorKind.NOT_A_REPOSITORY,
        matcher=_match_any(("not a git repository",)),
    ),
    ClassificationRule(
        kind=ErrorKind.NO_COMMITS,
        matcher=_match_any(("does not have any commits yet",
                            "no commits yet")),
    ),
    ClassificationRule(
        kind=ErrorKind.REMOTE_DISCONNECTED,
        matcher=_match_any(("remote end hung up",
                            "unexpectedly disconnected")),
    ),
    ClassificationRule(
        kind=ErrorKind.REMOTE_NOT_FOUND,
        matcher=_match_any(("does not appear to be a git repository",)),
    ),
    ClassificationRule(
        kind=ErrorKind.NO_REMOTE,
        matcher=_match_any(("no upstream branch", "has no upstream")),
    ),
)


def normalize(text: str) -> str:
    """Lower-case and collapse whitespace for stable matching."""
    return re.sub(r"\s+", " ", text.strip().lower())


def classify(diagnostic: str,
             rules: tuple[ClassificationRule, ...] = CLASSIFICATION_RULES
            ) -> ErrorKind:
    """Classify diagnostic text into exactly one error kind."""
    if not diagnostic: return ErrorKind.UNKNOWN
    lowered = normalize(diagnostic)
    for rule in rules:
        if rule.matcher(lowered): return rule.kind
    return ErrorKind.UNKNOWN


def classify_failure(failure: CommandFailure) -> ErrorKind:
    """Classify a raw executor failure, launch and timeout included."""
    if failure.reason == "missing": return ErrorKind.TOOL_NOT_INSTALLED
    if failure.reason == "timeout": return ErrorKind.TIMEOUT
    return classify(failure.stderr)
