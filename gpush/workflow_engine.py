"""Workflow orchestration engine for gpush."""


from typing import Callable
import argparse
import sys
import os

from .error_model import OperationError
from .ai import CommitMessageClient
from .preflight import PushPreflight
from ._constants import OLLAMA_API_URL, OLLAMA_MODEL
from ._constants import AI_TIMEOUT_S, GIT_TIMEOUT_S, PUSH_TIMEOUT_S
from .executor import Executor, logger
from .tui import tui_runner
from . import animation
from . import presenter
from . import gitutils
from . import utils


StepFn = Callable[..., tuple[str | None, utils.StepResult]]


class Orchestrator:
    """
    Runs the stage -> message -> commit -> push workflow for
    one repository.

    Steps run strictly in sequence; each one either returns
    a `StepResult` or records the `OperationError` that
    stopped the run. The first error ends the run; nothing
    is retried or rolled back. After the step display
    closes, the error is handed to the presenter.

    An instance holds the state of a single run only.
    """

    def __init__(self, args: argparse.Namespace,
                 executor: Executor | None = None,
                 ai_client: CommitMessageClient | None = None,
                 animator: Callable[[], object] | None = None):
        self.args = args
        self.path = os.path.abspath(getattr(args, "path", ".") or ".")
        self.out  = utils.Output(quiet=bool(getattr(args, "quiet", False)),
                    plain=bool(getattr(args, "plain", False)))
        self.executor = executor

        self.git_timeout  = float(getattr(args, "git_timeout", None)
                          or GIT_TIMEOUT_S)
        self.push_timeout = float(getattr(args, "push_timeout", None)
                          or PUSH_TIMEOUT_S)
        self.ai_client = ai_client or CommitMessageClient(
            url=getattr(args, "ai_url", None) or OLLAMA_API_URL,
            model=getattr(args, "model", None) or OLLAMA_MODEL,
            timeout=float(getattr(args, "ai_timeout", None)
                    or AI_TIMEOUT_S),
        )
        self.animator = animator

        self.commit_msg: str | None = None
        self.pushed = False
        self.error: OperationError | None = None
        self.failed_step: str | None = None

    # ---------- Internal Utilities ----------
    def _failed(self, step: str, error: OperationError
               ) -> tuple[str, utils.StepResult]:
        self.error = error
        self.failed_step = step
        logger.error("step %r failed: %s (%s)", step,
            error.kind.value, error.message)
        return error.message, utils.StepResult.FAIL

    def _debug(self) -> bool:
        return bool(getattr(self.args, "debug", False)) \
            or presenter.debug_enabled()

    def _animation_enabled(self) -> bool:
        if getattr(self.args, "no_animation", False): return False
        if self.out.quiet or self.out.plain: return False
        return self.animator is not None or sys.stdout.isatty()

    # ---------- Workflow Plan ----------
    def _workflow_plan(self) -> tuple[list[StepFn], list[str]]:
        steps: list[StepFn] = [
            self.check_changes,
            self.stage,
            self.compose_message,
            self.commit,
            self.push,
        ]
        labels = [
            "Check working tree",
            "Stage changes",
            "Compose commit message",
            "Commit",
            "Push to remote",
        ]
        return steps, labels

    # ---------- Orchestration ----------
    def orchestrate(self) -> int:
        """
        Execute the workflow and return the process exit code.

        Returns:
            int: 0 when the push succeeded or there was nothing
            to commit, 1 when any step failed.
        """
        steps, labels = self._workflow_plan()
        use_ui = bool(not self.out.plain and not self.out.quiet
             and sys.stdout.isatty())

        with tui_runner(labels, enabled=use_ui) as ui:
            for i, step in enumerate(steps):
                ui.start(i)
                _, result = step(step_idx=i)
                ui.finish(i, result)
                if result is utils.StepResult.DONE: break
                if result is utils.StepResult.FAIL: break

        if self.error is not None:
            presenter.present(self.error, self.out, debug=self._debug())
            return 1
        # the step display must be closed before another Live starts
        if self.pushed: self.celebrate()
        return 0

    # ---------- Steps ----------
    def check_changes(self, step_idx: int | None = None
                     ) -> tuple[str | None, utils.StepResult]:
        changed = gitutils.has_working_changes(self.path,
                  self.executor, self.git_timeout)
        if isinstance(changed, OperationError):
            return self._failed("status", changed)
        if not changed.value:
            self.out.success("working directory is clean - no "
                "changes to commit", step_idx=step_idx)
            return None, utils.StepResult.DONE
        return None, utils.StepResult.OK

    def stage(self, step_idx: int | None = None
             ) -> tuple[str | None, utils.StepResult]:
        staged = gitutils.stage_all(self.path, self.executor,
                 self.git_timeout)
        if isinstance(staged, OperationError):
            return self._failed("stage", staged)
        return None, utils.StepResult.OK

    def compose_message(self, step_idx: int | None = None
                       ) -> tuple[str | None, utils.StepResult]:
        """
        Pick the commit message.

        Precedence: explicit message argument, then the
        language model draft, then "update: <files>".
        """
        files = gitutils.get_staged_files(self.path, self.executor,
                self.git_timeout)
        if isinstance(files, OperationError):
            return self._failed("message", files)
        if not files.value:
            self.out.success("nothing staged - no changes to commit",
                step_idx=step_idx)
            return None, utils.StepResult.DONE

        explicit = getattr(self.args, "message", None)
        if isinstance(explicit, str) and explicit.strip():
            self.commit_msg = explicit.strip()
            return None, utils.StepResult.OK

        drafted = ""
        if not getattr(self.args, "no_ai", False):
            diff = gitutils.get_staged_diff(self.path, self.executor,
                   self.git_timeout)
            if isinstance(diff, OperationError):
                return self._failed("message", diff)
            drafted = self.ai_client.generate_commit_message(diff.value)
            if not drafted:
                self.out.prompt("AI commit message generation failed, "
                    "falling back to default format", step_idx=step_idx)

        self.commit_msg = drafted \
            or gitutils.format_default_message(files.value)
        self.out.info(f"commit message: {self.commit_msg}",
            step_idx=step_idx)
        return None, utils.StepResult.OK

    def commit(self, step_idx: int | None = None
              ) -> tuple[str | None, utils.StepResult]:
        committed = gitutils.commit(self.path, self.commit_msg or "",
                    self.executor, self.git_timeout)
        if isinstance(committed, OperationError):
            return self._failed("commit", committed)
        return None, utils.StepResult.OK

    def push(self, step_idx: int | None = None
            ) -> tuple[str | None, utils.StepResult]:
        self.out.prompt("initiating push sequence...",
            step_idx=step_idx)
        outcome = PushPreflight(self.path, self.executor,
                  git_timeout=self.git_timeout,
                  push_timeout=self.push_timeout).run()
        if outcome.error is not None:
            return self._failed("push", outcome.error)
        self.pushed = True
        self.out.success("successfully pushed changes",
            step_idx=step_idx)
        return None, utils.StepResult.OK

    def celebrate(self) -> bool:
        """Play the success animation; False when it was skipped."""
        if not self._animation_enabled(): return False
        try:
            if self.animator is not None: self.animator()
            else: animation.animate()
        # push already succeeded
        except Exception as e:
            logger.warning("animation interrupted: %s", e)
        return True
