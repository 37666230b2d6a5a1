"""Integration tests for gitutils using local temporary repositories."""
from __future__ import annotations

import unittest

from gpush.error_model import ErrorKind, Ok, OperationError
from gpush import gitutils
from tests._gitfixture import GitFixture, git_available


@unittest.skipUnless(git_available(), "git is not installed")
class GitUtilsIntegrationTests(unittest.TestCase):
    def setUp(self) -> None:
        self.fix = GitFixture()
        self.addCleanup(self.fix.close)

    def test_stage_commit_push_to_local_bare_remote(self) -> None:
        repo   = self.fix.init_repo()
        remote = self.fix.published(repo)
        path   = str(repo)
        self.fix.write_file(repo, "src/app.py", "print('hi')\n")

        self.assertEqual(gitutils.has_working_changes(path), Ok(True))
        self.assertEqual(gitutils.stage_all(path), Ok(None))
        self.assertEqual(gitutils.get_staged_files(path),
            Ok(["src/app.py"]))
        diff = gitutils.get_staged_diff(path)
        assert isinstance(diff, Ok)
        self.assertIn("+print('hi')", diff.value)

        self.assertEqual(gitutils.commit(path, "feat: app"), Ok(None))
        self.assertEqual(gitutils.has_working_changes(path), Ok(False))
        self.assertEqual(gitutils.push(path), Ok(None))
        self.assertEqual(self.fix.last_subject(remote), "feat: app")

    def test_nothing_staged_yields_empty_results(self) -> None:
        repo = self.fix.init_repo()
        self.fix.published(repo)
        path = str(repo)
        self.assertEqual(gitutils.get_staged_files(path), Ok([]))
        self.assertEqual(gitutils.get_staged_diff(path), Ok(""))

    def test_commit_with_nothing_staged_fails(self) -> None:
        repo = self.fix.init_repo()
        self.fix.published(repo)
        out = gitutils.commit(str(repo), "empty")
        self.assertIsInstance(out, OperationError)
        assert isinstance(out, OperationError)
        self.assertTrue(out.message.startswith("commit failed"))

    def test_remote_descriptor_for_local_path(self) -> None:
        repo   = self.fix.init_repo()
        remote = self.fix.init_bare()
        self.assertEqual(gitutils.has_remote_origin(str(repo)),
            Ok(False))
        self.fix.add_remote(repo, "origin", remote)
        self.assertEqual(gitutils.has_remote_origin(str(repo)), Ok(True))
        out = gitutils.get_remote_descriptor(str(repo))
        assert isinstance(out, Ok)
        self.assertEqual(out.value.scheme, "other")

    def test_https_remote_scheme(self) -> None:
        repo = self.fix.init_repo()
        self.fix.add_remote(repo, "origin", "https://example.com/o/r.git")
        out = gitutils.get_remote_descriptor(str(repo))
        assert isinstance(out, Ok)
        self.assertEqual(out.value.scheme, "https")

    def test_status_outside_repository(self) -> None:
        plain_dir = self.fix.root / "plain"
        plain_dir.mkdir()
        out = gitutils.has_working_changes(str(plain_dir))
        assert isinstance(out, OperationError)
        self.assertIs(out.kind, ErrorKind.NOT_A_REPOSITORY)
        self.assertIn("not a git repository", out.cause or "")


if __name__ == "__main__":
    unittest.main()
