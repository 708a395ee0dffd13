"""One-shot command line run, for cron or any scheduler that can execute a process.

    python -m runverdict            # compute and push
    python -m runverdict --dry-run  # compute and print only
"""

import argparse
import sys
from typing import Sequence

from runverdict.config import settings
from runverdict.domain import RunResult
from runverdict.errors import RunVerdictError
from runverdict.runner import run_verdict
from utils.logging_utils import get_tagged_logger, setup_logging

logger = get_tagged_logger(__name__, tag="cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="runverdict", description="Push today's morning run verdict.")
    parser.add_argument("--dry-run", action="store_true", help="compute the message but do not push it")
    parser.add_argument("--log-level", default=None, help=f"override log level (default {settings.log_level})")
    parser.add_argument("--json", action="store_true", help="print the full result as JSON")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run once; exit status 0 on success, 1 on any run failure."""
    args = build_parser().parse_args(argv)
    setup_logging(level=(args.log_level or settings.log_level).upper(), job_name="run_verdict_cli")

    try:
        result = run_verdict(settings, dry_run=args.dry_run)
    except RunVerdictError as exc:
        logger.error("Run failed: %s", exc)
        result = RunResult.failure(exc)

    if args.json:
        print(result.model_dump_json(indent=2))
    elif result.ok:
        print(result.message)
    else:
        print(f"ERROR: {result.error}", file=sys.stderr)
    return 0 if result.ok else 1
