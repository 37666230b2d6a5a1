"""Executor behavior around exit codes, launch failures and timeouts."""


from subprocess import CompletedProcess, TimeoutExpired
from unittest.mock import patch
import tempfile
import unittest
import errno
import os

from gpush.error_model import CommandFailure, CommandResult
from gpush.executor import SubprocessExecutor, execute


class ExecutorTests(unittest.TestCase):
    def test_zero_exit_returns_output_verbatim(self) -> None:
        cp = CompletedProcess(["git", "status"], 0, " M a.txt\n",
             "progress\n")
        with patch("gpush.executor.subprocess.run", return_value=cp):
            out = execute("git", ["status", "--porcelain"], cwd=".")
        self.assertIsInstance(out, CommandResult)
        assert isinstance(out, CommandResult)
        self.assertEqual(out.stdout, " M a.txt\n")
        self.assertEqual(out.stderr, "progress\n")

    def test_non_zero_exit_carries_stderr(self) -> None:
        cp = CompletedProcess(["git", "push"], 128, "",
             "fatal: Authentication failed\n")
        with patch("gpush.executor.subprocess.run", return_value=cp):
            out = execute("git", ["push"])
        self.assertIsInstance(out, CommandFailure)
        assert isinstance(out, CommandFailure)
        self.assertEqual(out.reason, "exit")
        self.assertEqual(out.returncode, 128)
        self.assertEqual(out.args, ("push",))
        self.assertIn("Authentication failed", out.stderr)

    def test_missing_binary_is_reported_not_raised(self) -> None:
        err = FileNotFoundError(errno.ENOENT, "No such file", "git")
        with patch("gpush.executor.subprocess.run", side_effect=err):
            out = execute("git", ["status"])
        self.assertIsInstance(out, CommandFailure)
        assert isinstance(out, CommandFailure)
        self.assertEqual(out.reason, "missing")

    def test_missing_binary_for_real(self) -> None:
        out = execute("gpush-no-such-binary-xyz", ["--version"])
        self.assertIsInstance(out, CommandFailure)
        assert isinstance(out, CommandFailure)
        self.assertEqual(out.reason, "missing")

    def test_missing_working_directory_raises(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            gone = os.path.join(tmp, "gone")
        err = FileNotFoundError(errno.ENOENT, "No such file", gone)
        with patch("gpush.executor.subprocess.run", side_effect=err):
            with self.assertRaises(FileNotFoundError):
                execute("git", ["status"], cwd=gone)

    def test_timeout_is_reported(self) -> None:
        err = TimeoutExpired(["git", "push"], 5)
        with patch("gpush.executor.subprocess.run", side_effect=err):
            out = execute("git", ["push"], timeout=5)
        self.assertIsInstance(out, CommandFailure)
        assert isinstance(out, CommandFailure)
        self.assertEqual(out.reason, "timeout")
        self.assertIsNone(out.returncode)

    def test_runs_argument_list_with_c_locale(self) -> None:
        cp = CompletedProcess(["git"], 0, "", "")
        with patch("gpush.executor.subprocess.run",
                   return_value=cp) as run:
            SubprocessExecutor().execute("git", ["commit", "-m",
                "a; rm -rf /"], cwd=".", timeout=7)
        argv = run.call_args.args[0]
        kwargs = run.call_args.kwargs
        self.assertEqual(argv, ["git", "commit", "-m", "a; rm -rf /"])
        self.assertFalse(kwargs.get("shell", False))
        self.assertEqual(kwargs["timeout"], 7)
        self.assertEqual(kwargs["env"]["LC_ALL"], "C")
        self.assertEqual(kwargs["cwd"], ".")

    def test_default_timeout_is_bounded(self) -> None:
        cp = CompletedProcess(["git"], 0, "", "")
        with patch("gpush.executor.subprocess.run",
                   return_value=cp) as run:
            execute("git", ["status"])
        self.assertIsNotNone(run.call_args.kwargs["timeout"])


if __name__ == "__main__":
    unittest.main()
