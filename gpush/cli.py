#!/usr/bin/env python3
"""
Primary CLI entry point for the `gpush` tool.

Stages every change in a repository, drafts a commit
message (explicit argument, local language model, or a
file-list fallback), commits, and pushes to `origin`.

Every git failure is classified once and rendered as
remediation guidance before the process exits non-zero.
The last failure is also written to `last_error.json` in
the log directory for postmortems.

Uses `main` as the safe entry point to invoke the CLI.
"""


# ======================= STANDARDS =======================
import traceback
import argparse
import json
import sys
import os

# ======================== LOCALS =========================
from .error_model import ErrorKind, OperationError
from .executor import configure_logger, logger
from .workflow_engine import Orchestrator
from . import _constants as const
from . import __version__
from . import telemetry
from . import presenter
from . import config
from . import utils


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="gpush",
        description="Stage, commit and push in one step, with "
                    "guided recovery when git fails.")
    p.add_argument("--version", action="version",
        version=f"gpush {__version__}")

    p.add_argument("message", nargs="?", default=None,
        help="commit message; skips message generation")
    p.add_argument("--path", default=".",
        help="repository to operate on (default: current directory)")
    p.add_argument("--no-ai", action="store_true",
        help="use the file-list fallback instead of the model")
    p.add_argument("--model", default=const.OLLAMA_MODEL)
    p.add_argument("--ai-url", default=const.OLLAMA_API_URL)
    p.add_argument("--ai-timeout", type=float, default=const.AI_TIMEOUT_S)
    p.add_argument("--git-timeout", type=float,
        default=const.GIT_TIMEOUT_S)
    p.add_argument("--push-timeout", type=float,
        default=const.PUSH_TIMEOUT_S)
    p.add_argument("--no-animation", action="store_true")
    p.add_argument("--plain", action="store_true")
    p.add_argument("--quiet", "-q", action="store_true")
    p.add_argument("--debug", "-d", action="store_true",
        help="show raw git diagnostics (same as DEBUG=1)")
    p.add_argument("--show-config", action="store_true")
    return p


def parse_args(argv: list[str]) -> argparse.Namespace:
    """Add and parse arguments."""
    parser = _build_parser()
    parsed = parser.parse_args(argv)
    return config.apply_layered_config(parsed, argv, parser)


def show_effective_config(args: argparse.Namespace,
                          out: utils.Output) -> int:
    """Print merged configuration with per-key sources."""
    report = config.describe(args)
    out.raw(json.dumps(report, indent=2, default=str))
    errors = [d for d in report["diagnostics"]  # type: ignore[union-attr]
              if d.get("level") == "error"]
    return 1 if errors else 0


def persist_error_record(log_dir: str, error: OperationError,
                         step: str, out: utils.Output) -> str | None:
    """Write `last_error.json` and emit a runtime_error event."""
    record = error.as_record(step)
    record["run_id"] = telemetry.run_id()
    path = os.path.join(log_dir, "last_error.json")
    try:
        os.makedirs(log_dir, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(telemetry.redact(record), f, indent=2)
    except OSError as e:
        out.warn(f"failed to persist error record: {e}")
        return None
    telemetry.emit_event(
        event_type="runtime_error",
        step_id=step or "orchestrate",
        payload={"kind": error.kind.value, "message": error.message},
    )
    logger.info("error record written to %s", path)
    return path


def _unexpected(e: BaseException) -> OperationError:
    return OperationError(
        kind=ErrorKind.UNKNOWN,
        message=str(e).strip() or type(e).__name__,
        cause="".join(traceback.format_exception(type(e), e,
              e.__traceback__)).strip(),
    )


def run(args: argparse.Namespace,
        orchestrator: Orchestrator | None = None) -> int:
    """Run one workflow and return the exit code."""
    out = utils.Output(quiet=bool(args.quiet), plain=bool(args.plain))
    target = os.path.abspath(args.path or ".")
    if os.path.isfile(target): target = os.path.dirname(target)

    log_dir = str(utils.get_log_dir(target))
    telemetry.set_run_id()
    telemetry.init_event_stream(log_dir)
    configure_logger(log_dir)
    logger.info("gpush %s started in %s", __version__, target)

    if args.show_config: return show_effective_config(args, out)

    error: OperationError | None = None
    step = "orchestrate"
    try:
        orchestrator = orchestrator or Orchestrator(args)
        code = orchestrator.orchestrate()
        error = orchestrator.error
        step  = orchestrator.failed_step or step
    except KeyboardInterrupt:
        out.raw("\n" + const.GPUSH, end="")
        out.raw(utils.color("forced exit", const.BAD))
        logger.warning("interrupted by user")
        return 130
    except Exception as e:
        logger.exception("unexpected failure")
        error = _unexpected(e)
        debug = bool(args.debug) or presenter.debug_enabled()
        presenter.present(error, out, debug=debug)
        code = 1

    if error is not None: persist_error_record(log_dir, error, step, out)
    logger.info("gpush finished with exit code %d", code)
    return code


def main() -> None:
    """
    CLI entry point for the `gpush` tool.

    Exit codes: 0 when the push succeeded or there was
    nothing to commit, 1 on any failure, 130 when
    interrupted.
    """
    try: args = parse_args(sys.argv[1:])
    except KeyboardInterrupt: sys.exit(130)
    code = run(args)
    telemetry.close_event_stream()
    sys.exit(code)
