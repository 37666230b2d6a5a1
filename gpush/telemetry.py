"""
Append-only JSONL event log for one gpush run.

Each line carries the run id, the event type, the step it
came from and a payload with credentials masked. Writing is
best effort: a missing or unwritable log never affects the
git workflow.
"""
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
import logging as log
import secrets
import json
import re


logger = log.getLogger("gpush.telemetry")

EVENTS_NAME = "events.jsonl"

# (pattern, replacement) applied in order to every string
_SECRETS: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"(https?://)[^/\s@]+@"), r"\1<redacted>@"),
    (re.compile(r"(?i)\b(token|password|passwd|secret)\s*[:=]\s*"
                r"[^\s,'\"]+"), r"\1=<redacted>"),
)


@dataclass
class _Stream:
    run_id: str | None = None
    path: Path | None = None


_stream = _Stream()


def set_run_id(value: str | None = None) -> str:
    """Start a new run; a blank value gets a generated id."""
    value = (value or "").strip()
    _stream.run_id = value or secrets.token_hex(6)
    return _stream.run_id


def run_id() -> str:
    return _stream.run_id or set_run_id()


def init_event_stream(log_dir: str | Path) -> Path:
    """Send events to `<log_dir>/events.jsonl` and return that path."""
    folder = Path(log_dir).expanduser().resolve()
    folder.mkdir(parents=True, exist_ok=True)
    _stream.path = folder / EVENTS_NAME
    return _stream.path


def close_event_stream() -> None:
    _stream.path = None


def redact(value: object) -> object:
    """Mask URL credentials and token-like fields, recursively."""
    if isinstance(value, str):
        for pattern, repl in _SECRETS: value = pattern.sub(repl, value)
        return value
    if isinstance(value, dict):
        return {str(k): redact(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)): return [redact(v) for v in value]
    return value


def emit_event(event_type: str, step_id: str,
               payload: dict[str, object]) -> None:
    path = _stream.path
    if path is None: return
    line = json.dumps({
        "ts": datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ"),
        "run_id": run_id(),
        "event_type": event_type,
        "step_id": step_id,
        "payload": redact(payload),
    }, separators=(",", ":"))
    try:
        with path.open("a", encoding="utf-8") as f: f.write(line + "\n")
    # the workflow outlives its log
    except OSError as e:
        logger.debug("event not written to %s: %s", path, e)
