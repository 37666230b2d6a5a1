"""Module to keep communication with the terminal isolated."""
# ======================= STANDARDS ========================
from enum import Enum, auto as auto_enum
from dataclasses import dataclass
from typing import Protocol
from pathlib import Path
import os

# ===================== THIRD-PARTIES ======================
from tuikit.textools import wrap_text, style_text as color
from tuikit.textools import transmit as _transmit

# ======================== LOCALS ==========================
from ._constants import APP, GPUSH, I, SPEED, HOLD
from ._constants import GOOD, BAD, INFO, PROMPT, LOG_DIR_NAME

__all__ = [
    "MessageSink",
    "Output",
    "StepResult",
    "bind_console",
    "color",
    "get_log_dir",
    "is_truthy",
    "transmit",
    "wrap",
]

FALSY = {"", "0", "false", "no", "off"}


class MessageSink(Protocol):
    def add_message(self, idx: int | None, msg: str,
                    fg: str = PROMPT, prfx: bool = True
                   ) -> None: ...


_active_console: MessageSink | None = None


def bind_console(console: MessageSink | None) -> None:
    global _active_console
    _active_console = console


def is_truthy(raw: object) -> bool:
    """Set and not an explicit off value (0, false, no, off)."""
    if isinstance(raw, bool): return raw
    if raw is None: return False
    return str(raw).strip().lower() not in FALSY


def get_log_dir(path: str) -> Path:
    """
    Resolve the per-repository log directory.

    Logs live inside `.git` so they never show up in
    `git status --porcelain`. Paths without a `.git`
    directory (worktrees, submodules, non-repos) fall back
    to the user cache directory.
    """
    git_dir = Path(path) / ".git"
    if git_dir.is_dir(): log_dir = git_dir / LOG_DIR_NAME
    else:
        cache   = os.environ.get("XDG_CACHE_HOME") \
               or str(Path.home() / ".cache")
        log_dir = Path(cache) / LOG_DIR_NAME
    os.makedirs(log_dir, exist_ok=True)
    return log_dir


def wrap(text: str) -> str:
    return wrap_text(text, I, inline=True, order=APP)


def transmit(*text: str, fg: str = PROMPT, quiet: bool = False,
             prfx: bool = True, plain: bool = False,
             step_idx: int | None = None) -> None:
    if quiet: return

    msg = " ".join(map(str, text))
    # --- TUI ACTIVE: Rich owns the terminal ---
    if _active_console is not None:
        _active_console.add_message(step_idx, msg, fg=fg, prfx=prfx)
        return

    if plain:
        print(f"{APP} {msg}" if prfx else msg)
        return

    if prfx: print(GPUSH, end="")
    _transmit(msg, speed=SPEED, hold=HOLD, hue=fg)


@dataclass
class Output:
    quiet: bool = False
    plain: bool = False

    def _fit(self, msg: str, fit: bool) -> str:
        if fit and _active_console is None and not self.plain:
            return wrap(msg)
        return msg

    def success(self, msg: str, step_idx: int | None = None
               ) -> None:
        transmit(self._fit(msg, True), fg=GOOD, quiet=self.quiet,
            plain=self.plain, step_idx=step_idx)

    def info(self, msg: str, prefix: bool = True,
             step_idx: int | None = None) -> None:
        transmit(msg, fg=INFO, quiet=self.quiet, prfx=prefix,
            plain=self.plain, step_idx=step_idx)

    def prompt(self, msg: str, fit: bool = True,
               step_idx: int | None = None) -> None:
        transmit(self._fit(msg, fit), quiet=self.quiet,
            plain=self.plain, step_idx=step_idx)

    def warn(self, msg: str, fit: bool = True,
             step_idx: int | None = None) -> None:
        # warnings ignore quiet: failures must always reach the user
        transmit(self._fit(msg, fit), fg=BAD, plain=self.plain,
            step_idx=step_idx)

    def raw(self, *args: object, **kwargs: object) -> None:
        if not self.quiet: print(*args, **kwargs)  # type: ignore[call-overload]


class StepResult(Enum):
    OK    = auto_enum()
    DONE  = auto_enum()
    SKIP  = auto_enum()
    FAIL  = auto_enum()
