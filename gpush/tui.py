from __future__ import annotations

# ======================= STANDARDS =======================
from contextlib import contextmanager
from collections.abc import Iterator
from types import TracebackType
from enum import Enum

# ==================== THIRD-PARTIES ======================
from rich.console import Console, RenderableType, Group
from rich.spinner import Spinner
from rich.panel import Panel
from rich.table import Table
from rich.box import MINIMAL
from rich.live import Live
from rich.text import Text

# ======================== LOCALS =========================
from ._constants import APP
from . import utils


class StepStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    DONE    = "done"
    SKIP    = "skip"
    FAIL    = "fail"


class TUIRunner:
    """Live checklist of workflow steps with per-step messages."""

    def __init__(self, labels: list[str], enabled: bool,
                 console: Console | None = None) -> None:
        self.enabled   = enabled
        self.labels    = labels
        self.statuses  = [StepStatus.PENDING] * len(labels)
        self.console   = console or Console(stderr=True)
        self._messages: list[list[tuple[str, str, bool]]] \
                       = [[] for _ in labels]
        self._live: Live | None = None

    def add_message(self, idx: int | None, msg: str,
                    fg: str = "yellow", prfx: bool = True
                   ) -> None:
        if not self.enabled or idx is None:
            text = f"{APP} {msg}" if prfx else msg
            self.console.print(Text(text, style=fg))
            return
        self._messages[idx].append((msg, fg, prfx))
        self._refresh()

    def __enter__(self) -> TUIRunner:
        if not self.enabled: return self
        utils.bind_console(self)
        self._live = Live(self._render(), console=self.console,
                     refresh_per_second=10, transient=False)
        self._live.__enter__()
        return self

    def __exit__(self, exc_type: type[BaseException] | None,
                 exc: BaseException | None,
                 tb: TracebackType | None) -> None:
        utils.bind_console(None)
        if self._live:
            self._live.__exit__(exc_type, exc, tb)
            self._live = None

    def start(self, idx: int) -> None:
        if not self.enabled: return
        self.statuses[idx] = StepStatus.RUNNING
        self._refresh()

    def finish(self, idx: int, result: utils.StepResult) -> None:
        if not self.enabled: return
        if result in (utils.StepResult.OK, utils.StepResult.DONE):
            self.statuses[idx] = StepStatus.DONE
        elif result is utils.StepResult.SKIP:
            self.statuses[idx] = StepStatus.SKIP
        else: self.statuses[idx] = StepStatus.FAIL
        self._refresh()

    def _refresh(self) -> None:
        if self._live: self._live.update(self._render())

    def _render(self) -> Table:
        table = Table(show_header=False, box=None, pad_edge=False)
        table.add_column(justify="left")
        for i, (label, status) in enumerate(zip(self.labels,
                                            self.statuses)):
            row: RenderableType = self._row(label, status)
            if self._messages[i]:
                body = Text()
                for j, (msg, fg, prfx) in enumerate(self._messages[i]):
                    if j: body.append("\n")
                    if prfx: body.append(f"{APP} ", style="magenta")
                    body.append(msg, style=fg)
                row = Group(row, Panel(body, box=MINIMAL,
                      padding=(0, 2)))
            table.add_row(row)
        return table

    def _row(self, label: str, status: StepStatus
            ) -> Text | Spinner:
        if status == StepStatus.RUNNING:
            return Spinner("dots", text=label)
        if status == StepStatus.DONE:
            return Text(f"✔ {label}", style="green")
        if status == StepStatus.SKIP:
            return Text(f"– {label}", style="dim")
        if status == StepStatus.FAIL:
            return Text(f"✖ {label}", style="red")
        return Text(f"○ {label}", style="dim")


@contextmanager
def tui_runner(labels: list[str], enabled: bool
              ) -> Iterator[TUIRunner]:
    runner = TUIRunner(labels, enabled)
    with runner: yield runner
