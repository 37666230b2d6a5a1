"""CLI smoke tests for stable user-facing behavior."""


from unittest.mock import Mock, patch
from pathlib import Path
import subprocess
import tempfile
import unittest
import json
import sys
import os

from gpush.cli import _build_parser, run
from gpush import telemetry
from tests._gitfixture import git_available


ROOT = Path(__file__).resolve().parent.parent


def _gpush(*argv: str, cwd: str | None = None,
           env: dict[str, str] | None = None
          ) -> subprocess.CompletedProcess[str]:
    full_env = dict(os.environ)
    full_env["PYTHONPATH"] = os.pathsep.join(
        p for p in (str(ROOT), full_env.get("PYTHONPATH")) if p)
    full_env.update(env or {})
    return subprocess.run(
        [sys.executable, "-m", "gpush", *argv],
        check=False,
        capture_output=True,
        text=True,
        cwd=cwd or str(ROOT),
        env=full_env,
    )


class CliSmokeTests(unittest.TestCase):
    def test_help_exits_zero(self) -> None:
        cp = _gpush("--help")
        self.assertEqual(cp.returncode, 0, cp.stderr)
        for flag in ("--no-ai", "--model", "--path", "--no-animation",
                     "--show-config", "--version", "--push-timeout"):
            self.assertIn(flag, cp.stdout)

    def test_version_exits_zero(self) -> None:
        cp = _gpush("--version")
        self.assertEqual(cp.returncode, 0, cp.stderr)
        self.assertIn("gpush", cp.stdout.lower())

    def test_show_config_prints_json(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            cp = _gpush("--show-config", "--path", tmp,
                 env={"XDG_CACHE_HOME": tmp, "GPUSH_MODEL": "phi"})
        self.assertEqual(cp.returncode, 0, cp.stderr)
        report = json.loads(cp.stdout)
        self.assertEqual(report["values"]["model"]["value"], "phi")
        self.assertEqual(report["values"]["model"]["source"], "env")

    @unittest.skipUnless(git_available(), "git is not installed")
    def test_outside_repo_persists_error_record(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            cp = _gpush("--path", tmp, "--plain", "--no-ai",
                 "--no-animation", env={"XDG_CACHE_HOME": tmp})
            log_dir = Path(tmp) / "gpush"
            record  = json.loads((log_dir / "last_error.json")
                      .read_text(encoding="utf-8"))
            rows = [json.loads(x) for x in (log_dir / "events.jsonl")
                    .read_text(encoding="utf-8").splitlines()]
        self.assertEqual(cp.returncode, 1)
        self.assertIn("not a git repository", cp.stdout)
        self.assertEqual(record["schema"], "gpush.error_record.v1")
        self.assertEqual(record["kind"], "NOT_A_REPOSITORY")
        self.assertEqual(record["step"], "status")
        runtime = [r for r in rows if r["event_type"] == "runtime_error"]
        self.assertTrue(runtime)
        self.assertTrue(all(r["run_id"] == record["run_id"]
                        for r in runtime))


class CliRunTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.addCleanup(telemetry.close_event_stream)
        env = patch.dict(os.environ, {"XDG_CACHE_HOME": self._tmp.name})
        env.start()
        self.addCleanup(env.stop)
        self.args = _build_parser().parse_args(["--path", self._tmp.name,
                    "--plain"])

    def _record(self) -> dict[str, object]:
        path = Path(self._tmp.name) / "gpush" / "last_error.json"
        return json.loads(path.read_text(encoding="utf-8"))

    def test_keyboard_interrupt_exits_130(self) -> None:
        stub = Mock()
        stub.orchestrate.side_effect = KeyboardInterrupt
        with patch("builtins.print"):
            self.assertEqual(run(self.args, stub), 130)

    def test_unexpected_exception_is_recorded(self) -> None:
        stub = Mock()
        stub.orchestrate.side_effect = RuntimeError("boom")
        with patch("builtins.print"):
            self.assertEqual(run(self.args, stub), 1)
        record = self._record()
        self.assertEqual(record["kind"], "UNKNOWN")
        self.assertEqual(record["message"], "boom")
        self.assertIn("RuntimeError", str(record["cause"]))

    def test_orchestrator_exit_code_is_returned(self) -> None:
        stub = Mock()
        stub.orchestrate.return_value = 0
        stub.error = None
        stub.failed_step = None
        self.assertEqual(run(self.args, stub), 0)
        path = Path(self._tmp.name) / "gpush" / "last_error.json"
        self.assertFalse(path.exists())


if __name__ == "__main__":
    unittest.main()
