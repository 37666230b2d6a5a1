from __future__ import annotations

# ======================= STANDARDS =======================
from dataclasses import dataclass, field
from typing import Callable
import time

# ==================== THIRD-PARTIES ======================
from rich.console import Console
from rich.panel import Panel
from rich.live import Live
from rich.text import Text


CUBE_FRAMES: tuple[str, ...] = (
    # front
    "┌───────────┐\n"
    "│  PUSHING  │\n"
    "│    TO     │\n"
    "│   GIT     │\n"
    "│   ...     │\n"
    "└───────────┘",
    # right tilt
    "┌───────────┐\n"
    "│  PUSHING ╱│\n"
    "│    TO   ╱ │\n"
    "│   GIT  ╱  │\n"
    "│  ...  ╱   │\n"
    "└──────╱────┘",
    # full right
    "┌───────────┐\n"
    "│╲  PUSHING │\n"
    "│ ╲   TO    │\n"
    "│  ╲  GIT   │\n"
    "│   ╲ ...   │\n"
    "└────╲──────┘",
    # left tilt
    "┌───────────┐\n"
    "│╱ PUSHING  │\n"
    "│╱   TO     │\n"
    "│╱   GIT    │\n"
    "│╱   ...    │\n"
    "└╱──────────┘",
)

SUCCESS_BANNER = (
    "Push completed!\n"
    "\n"
    "┌─────────────┐\n"
    "│  SUCCESS!   │\n"
    "│   🚀 → 🌟   │\n"
    "└─────────────┘"
)


@dataclass(frozen=True)
class AnimationConfig:
    total_spins: int = 4
    speeds: tuple[int, ...] = (120, 100, 80, 60)  # ms per frame

    def __post_init__(self) -> None:
        if self.total_spins < 1:
            raise ValueError("total spins must be at least 1")
        if not self.speeds:
            raise ValueError("speeds cannot be empty")
        object.__setattr__(self, "speeds",
            tuple(max(1, int(s)) for s in self.speeds))


@dataclass
class AnimationState:
    """Progress of one animation run; never shared across runs."""
    total_frames: int
    frame_index: int = 0
    running: bool = False
    completed: bool = False
    rendered: list[int] = field(default_factory=list)

    def stop(self) -> None:
        self.running = False


def frame_delay_ms(config: AnimationConfig, frame_index: int,
                   total_frames: int) -> int:
    """Speed ramps through `config.speeds` as progress advances."""
    progress = frame_index / max(total_frames, 1)
    idx = min(int(progress * len(config.speeds)),
          len(config.speeds) - 1)
    return config.speeds[idx]


def animate(config: AnimationConfig | None = None,
            console: Console | None = None,
            sleep: Callable[[float], None] = time.sleep,
            frames: tuple[str, ...] = CUBE_FRAMES,
            state: AnimationState | None = None
           ) -> AnimationState:
    """
    Play the push animation and finish on the success banner.

    The returned state records which frames were drawn; a
    caller may pass its own state and `stop()` it from a
    callback to cut the run short.
    """
    config  = config or AnimationConfig()
    console = console or Console()
    if state is None:
        state = AnimationState(total_frames=len(frames)
                * config.total_spins)
    state.running = True

    def _panel(body: str, style: str) -> Panel:
        return Panel(Text(body, style=style), expand=False,
               border_style=style)

    try:
        with Live(_panel(frames[0], "magenta"), console=console,
                  refresh_per_second=30, transient=True) as live:
            while state.running \
                    and state.frame_index < state.total_frames:
                i = state.frame_index
                live.update(_panel(frames[i % len(frames)], "magenta"))
                state.rendered.append(i % len(frames))
                sleep(frame_delay_ms(config, i,
                      state.total_frames) / 1000)
                state.frame_index += 1
        if state.running:
            console.print(_panel(SUCCESS_BANNER, "green"))
            state.completed = True
    finally:
        state.running = False
    return state
