"""Push animation timing and state tests."""


from io import StringIO
import unittest

from rich.console import Console

from gpush.animation import AnimationConfig, AnimationState
from gpush.animation import CUBE_FRAMES, animate, frame_delay_ms


def _console() -> tuple[Console, StringIO]:
    buf = StringIO()
    return Console(file=buf, force_terminal=False, width=60), buf


class AnimationConfigTests(unittest.TestCase):
    def test_defaults(self) -> None:
        cfg = AnimationConfig()
        self.assertEqual(cfg.total_spins, 4)
        self.assertEqual(cfg.speeds, (120, 100, 80, 60))

    def test_invalid_configs_are_rejected(self) -> None:
        with self.assertRaises(ValueError):
            AnimationConfig(total_spins=0)
        with self.assertRaises(ValueError):
            AnimationConfig(speeds=())

    def test_speeds_are_clamped_to_positive(self) -> None:
        self.assertEqual(AnimationConfig(speeds=(0, -5, 30)).speeds,
            (1, 1, 30))

    def test_delay_ramps_with_progress(self) -> None:
        cfg = AnimationConfig()
        self.assertEqual(frame_delay_ms(cfg, 0, 16), 120)
        self.assertEqual(frame_delay_ms(cfg, 5, 16), 100)
        self.assertEqual(frame_delay_ms(cfg, 15, 16), 60)


class AnimateTests(unittest.TestCase):
    def test_full_run_ends_on_banner(self) -> None:
        console, buf = _console()
        sleeps: list[float] = []
        state = animate(console=console, sleep=sleeps.append)
        total = len(CUBE_FRAMES) * 4
        self.assertTrue(state.completed)
        self.assertFalse(state.running)
        self.assertEqual(state.frame_index, total)
        self.assertEqual(len(sleeps), total)
        self.assertAlmostEqual(sleeps[0], 0.12)
        self.assertIn("SUCCESS!", buf.getvalue())

    def test_stop_cuts_run_short(self) -> None:
        console, buf = _console()
        state = AnimationState(total_frames=16)

        def _sleep(_: float) -> None:
            if state.frame_index == 1: state.stop()

        animate(console=console, sleep=_sleep, state=state)
        self.assertFalse(state.completed)
        self.assertEqual(state.rendered, [0, 1])
        self.assertNotIn("SUCCESS!", buf.getvalue())

    def test_runs_do_not_share_state(self) -> None:
        console, _ = _console()
        cfg   = AnimationConfig(total_spins=1)
        first = animate(cfg, console=console, sleep=lambda _: None)
        second = animate(cfg, console=console, sleep=lambda _: None)
        self.assertIsNot(first, second)
        self.assertEqual(first.rendered, second.rendered)
        self.assertEqual(len(first.rendered), len(CUBE_FRAMES))


if __name__ == "__main__":
    unittest.main()
