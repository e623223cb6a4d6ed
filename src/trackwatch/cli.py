"""Command-line interface for trackwatch."""

from __future__ import annotations

import argparse
import asyncio
import sys
from collections.abc import Sequence
from pathlib import Path

from trackwatch import __version__
from trackwatch.actions import ActionRunner
from trackwatch.config import load_config, load_database_config, set_env_file
from trackwatch.errors import FatalError
from trackwatch.logging import close_target_loggers, get_logger, setup_logging
from trackwatch.store import SnapshotStore
from trackwatch.watching import CycleReport, WatchLoop

log = get_logger()

# Exit status of --once when a pipeline failed
EXIT_ACTIONS_FAILED = 2


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="trackwatch",
        description="Run commands whenever files in watched directories change",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (can be repeated)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Config file path (default: $TRACKWATCH_CONFIG or ./Config.yaml)",
    )
    parser.add_argument(
        "--env-file",
        type=Path,
        help="Env file with database settings (default: ./.env)",
    )
    parser.add_argument(
        "--db",
        help="Snapshot database path (default: $TRACKWATCH_DB or .trackwatch/snapshots.db)",
    )
    parser.add_argument(
        "--interval",
        type=float,
        help="Seconds to wait between passes (overrides config)",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Run a single pass and exit",
    )
    return parser


def run_cli(args: Sequence[str]) -> int:
    """Run the CLI with the given arguments."""
    parsed = create_parser().parse_args(args)

    if parsed.env_file:
        set_env_file(parsed.env_file)

    print(f"Monitor Tool {__version__}")
    print("reading config ... ")
    try:
        config = load_config(parsed.config)
    except FatalError as e:
        print(f"trackwatch: {e}", file=sys.stderr)
        return 1

    if parsed.verbose:
        config.logging.verbose = min(4, 2 + parsed.verbose)
    setup_logging(config.logging)
    print("config loaded ... ")

    if not config.targets:
        log.warning("No targets configured")

    db = load_database_config()
    if parsed.db:
        db.path = parsed.db
    interval = parsed.interval if parsed.interval is not None else config.interval

    reports: list[CycleReport] = []
    print("monitoring ... ")
    try:
        with SnapshotStore(db.path) as store:
            loop = WatchLoop(
                config.targets,
                store,
                runner=ActionRunner(timeout=config.command_timeout),
                interval=interval,
            )
            asyncio.run(
                loop.run(
                    max_cycles=1 if parsed.once else None,
                    on_cycle=reports.append if parsed.once else None,
                )
            )
    except FatalError as e:
        log.critical("%s", e)
        print(f"trackwatch: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        log.info("trackwatch stopped by user")
        return 0
    finally:
        close_target_loggers()

    if parsed.once and reports and not reports[-1].success:
        return EXIT_ACTIONS_FAILED
    return 0
