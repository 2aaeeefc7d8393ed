"""bucketsh CLI entry points.

This module parses process flags, opens one session against a database
file, and either runs the interactive shell or a single batch command.
"""

from __future__ import annotations

import argparse
from dataclasses import replace
from pathlib import Path
import sys
from typing import Sequence

from cli.shell import BucketShell
from core.config import BucketshConfig, parse_history_path, parse_lock_timeout
from core.constants import SUPPORTED_LOG_LEVELS
from core.errors import BucketshConfigError, BucketshStoreError
from core.logging_config import configure_logging, get_logger
from core.types import SessionOptions
from nav.session import open_session

_LOGGER = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(
        prog="bucketsh",
        description="Interactive shell for nested buckets in a DuckDB file",
    )
    parser.add_argument(
        "--lock-timeout",
        help="Seconds to wait for the database file lock (overrides BUCKETSH_LOCK_TIMEOUT)",
    )
    parser.add_argument(
        "--create",
        action="store_true",
        help="Create the database file if it does not exist",
    )
    parser.add_argument(
        "--history-file",
        help="Shell history file; empty string disables history (overrides BUCKETSH_HISTORY_FILE)",
    )
    parser.add_argument(
        "--log-level",
        choices=SUPPORTED_LOG_LEVELS,
        help="Structured log level written to stderr (overrides BUCKETSH_LOG_LEVEL)",
    )
    parser.add_argument("database", help="Database file")
    parser.add_argument(
        "command",
        nargs=argparse.REMAINDER,
        help="Optional command and arguments to run once without the interactive shell",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the bucketsh CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        config = _build_config(args)
    except BucketshConfigError as error:
        print(f"Error: {error}", file=sys.stderr)
        return 1
    configure_logging(config.log_level)
    options = SessionOptions(
        database_path=Path(args.database),
        lock_timeout_seconds=config.lock_timeout_seconds,
        create=args.create,
        history_path=config.history_path,
    )
    try:
        return run_session(options, args.database, args.command)
    except BucketshStoreError as error:
        _LOGGER.error("session_failed", path=args.database, error=str(error))
        print(f"Error: {error}", file=sys.stderr)
        return 1


def run_session(options: SessionOptions, database_name: str, command: Sequence[str]) -> int:
    """Run one shell session inside a single read-write transaction.

    Args:
        options: Session options.
        database_name: Database name shown in the prompt.
        command: Batch command tokens; empty runs the interactive shell.

    Returns:
        Exit code.
    """
    with open_session(
        options.database_path,
        options.lock_timeout_seconds,
        create=options.create,
    ) as navigator:
        shell = BucketShell(navigator, database_name, history_path=options.history_path)
        if command:
            return 0 if shell.process(command) else 1
        shell.run()
    return 0


def _build_config(args: argparse.Namespace) -> BucketshConfig:
    """Build config from environment with CLI overrides.

    Raises:
        BucketshConfigError: If environment or flag values are invalid.
    """
    config = BucketshConfig.from_env()
    if args.lock_timeout is not None:
        config = replace(config, lock_timeout_seconds=parse_lock_timeout(args.lock_timeout))
    if args.history_file is not None:
        config = replace(config, history_path=parse_history_path(args.history_file))
    if args.log_level is not None:
        config = replace(config, log_level=args.log_level)
    return config
