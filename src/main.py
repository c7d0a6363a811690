#!/usr/bin/env python3
"""Command-line entry point for cronloop."""

import argparse
import asyncio
import logging
import shlex
import signal
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent))

from config import settings
from cronloop import Cron, CronError, JobError, upcoming_runs
from executors import BashExecutor, ExecutionFailed

logger = logging.getLogger(__name__)


def configure_logging():
    """Configure root logging from settings."""
    handlers = [logging.StreamHandler()]
    if settings.log_file:
        handlers.append(logging.FileHandler(settings.log_file))

    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers
    )


def log_job_error(error: JobError):
    cause = error.__cause__
    if isinstance(cause, ExecutionFailed):
        logger.warning(f"Run at {error.fired_at} failed: {cause.result.error}")
    else:
        logger.error(f"Run at {error.fired_at} raised: {cause!r}")


async def run_command(cron: Cron):
    """Run the cron until SIGINT or SIGTERM, then stop it."""
    stop_requested = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop_requested.set)

    cron.start()
    logger.info(f"Next run at {cron.next_at()}")
    try:
        await stop_requested.wait()
    finally:
        logger.info("Shutting down cronloop...")
        await cron.stop()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cronloop",
        description="Run a command on a cron schedule",
        usage="%(prog)s WHEN [options] [-- COMMAND ...]"
    )
    parser.add_argument("when", help="Cron expression, seconds first (e.g. '0 */5 * * * *')")
    parser.add_argument(
        "--timezone",
        default=settings.timezone,
        help=f"Timezone the expression is evaluated in (default: {settings.timezone})"
    )
    parser.add_argument(
        "--interval",
        type=int,
        default=settings.ticker_interval_ms,
        help=f"Polling interval in milliseconds (default: {settings.ticker_interval_ms})"
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--preview", type=int, metavar="N", help="Print the next N run times and exit")
    mode.add_argument("--check", action="store_true", help="Exit 0 if now matches the expression, 1 otherwise")
    return parser


def main(argv=None) -> int:
    """Main entry point."""
    argv = list(sys.argv[1:] if argv is None else argv)
    command = []
    if "--" in argv:
        split = argv.index("--")
        argv, command = argv[:split], argv[split + 1:]

    args = build_parser().parse_args(argv)
    configure_logging()

    job = BashExecutor({"command": shlex.join(command)}) if command else None

    try:
        cron = Cron(
            args.when,
            job,
            timezone=args.timezone,
            ticker_interval_ms=args.interval,
            on_error=log_job_error
        )
    except ValueError as e:
        print(f"cronloop: {e}", file=sys.stderr)
        return 2

    try:
        if args.preview:
            for run in upcoming_runs(cron.schedule, cron.now(), args.preview):
                print(run.isoformat())
            return 0

        if args.check:
            matched = cron.check_time()
            print("match" if matched else "no match")
            return 0 if matched else 1

        if job is None:
            print(cron.next_at())
            return 0

        asyncio.run(run_command(cron))
    except CronError as e:
        print(f"cronloop: {e}", file=sys.stderr)
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
