"""
Command-line entry point.

Each pipeline stage takes one positional path:

    autoheal clean   <failures-dir>     clean every raw DOM snapshot
    autoheal payload <dom-file>         build openai_payload.json
    autoheal request <payload-file>     call the model, print its raw reply
    autoheal parse   <response-file>    validate the reply, write ai-fix.json
    autoheal apply   <fix-data-file>    apply the fix, write fix-summary.json
    autoheal revert  <target-file>      restore the target from its backup
    autoheal run     <dom-file> <response-file>

Exit codes: 0 success, 1 pipeline failure (diagnostic names the stage),
2 usage error (argparse).
"""
import argparse
import json
import logging
import sys
from typing import Optional, Sequence

from autoheal.agents.orchestrator import Orchestrator, read_response_file
from autoheal.core import config
from autoheal.core.errors import HealingError
from autoheal.services.dom_cleaner import clean_failures_directory
from autoheal.utils.logging_config import setup_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="autoheal",
        description="Repair failing Cypress tests from an LLM-proposed single-line fix.",
    )
    parser.add_argument("--output-dir", default=None, help="artifact directory (AUTOHEAL_OUTPUT_DIR)")
    parser.add_argument("--workspace", default=None, help="root for test file paths (AUTOHEAL_WORKSPACE)")
    parser.add_argument("--log-level", default=config.LOG_LEVEL)
    parser.add_argument("--no-log-file", action="store_true", help="log to stderr only")

    sub = parser.add_subparsers(dest="command", metavar="command")
    sub.required = True

    p = sub.add_parser("clean", help="clean raw DOM snapshots in a failures directory")
    p.add_argument("failures_dir")

    p = sub.add_parser("payload", help="build the model request for one failure")
    p.add_argument("dom_file")

    p = sub.add_parser("request", help="send a persisted payload to the model provider")
    p.add_argument("payload_file")

    p = sub.add_parser("parse", help="validate a raw model reply")
    p.add_argument("response_file")

    p = sub.add_parser("apply", help="apply validated fix data")
    p.add_argument("fix_data_file")

    p = sub.add_parser("revert", help="restore a file from its backup")
    p.add_argument("target_file")

    p = sub.add_parser("run", help="payload + parse + apply for one failure")
    p.add_argument("dom_file")
    p.add_argument("response_file")

    return parser


def _print_json(data) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False))


def _dispatch(args: argparse.Namespace, orchestrator: Orchestrator) -> int:
    if args.command == "clean":
        cleaned = clean_failures_directory(args.failures_dir)
        _print_json([c.cleaned_path for c in cleaned])
        return 0

    if args.command == "payload":
        prepared = orchestrator.prepare(args.dom_file)
        _print_json(prepared.metrics.model_dump())
        return 0

    if args.command == "request":
        print(orchestrator.request_from_file(args.payload_file))
        return 0

    if args.command == "parse":
        response = orchestrator.process_response_file(args.response_file)
        _print_json(response.to_json_dict())
        return 0

    if args.command == "apply":
        summary = orchestrator.apply_fix_file(args.fix_data_file)
        logger.info("Fix applied successfully!")
        _print_json(summary.result.model_dump(by_alias=True))
        return 0

    if args.command == "revert":
        if orchestrator.revert(args.target_file):
            return 0
        logger.error("[revert] no backup to restore for %s", args.target_file)
        return 1

    if args.command == "run":
        summary = orchestrator.run(args.dom_file, read_response_file(args.response_file))
        _print_json(summary.to_json_dict())
        return 0

    raise ValueError(f"Unknown command: {args.command}")


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level, log_dir=None if args.no_log_file else "logs")

    orchestrator = Orchestrator(output_dir=args.output_dir, workspace=args.workspace)
    try:
        return _dispatch(args, orchestrator)
    except HealingError as e:
        logger.error("[%s] %s: %s", e.stage, type(e).__name__, e)
        return 1
    except OSError as e:
        logger.error("[%s] %s", args.command, e)
        return 1
    finally:
        if orchestrator.client is not None:
            orchestrator.client.close()


if __name__ == "__main__":
    sys.exit(main())
