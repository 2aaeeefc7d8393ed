"""Runtime configuration model for bucketsh.

This module owns all environment variable parsing and validation.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path

from core.constants import (
    DEFAULT_HISTORY_PATH,
    DEFAULT_LOCK_TIMEOUT_SECONDS,
    DEFAULT_LOG_LEVEL,
    SUPPORTED_LOG_LEVELS,
)
from core.errors import BucketshConfigError


@dataclass(frozen=True)
class BucketshConfig:
    """Validated runtime configuration.

    Attributes:
        lock_timeout_seconds: Bounded wait for the database file lock.
        history_path: Shell history file, or None to disable history.
        log_level: Minimum structured log level written to stderr.
    """

    lock_timeout_seconds: float
    history_path: Path | None
    log_level: str

    @classmethod
    def from_env(cls) -> "BucketshConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            BucketshConfigError: If environment values are invalid.
        """
        timeout_value = os.getenv("BUCKETSH_LOCK_TIMEOUT", str(DEFAULT_LOCK_TIMEOUT_SECONDS))
        history_value = os.getenv("BUCKETSH_HISTORY_FILE", str(DEFAULT_HISTORY_PATH))
        log_level_value = os.getenv("BUCKETSH_LOG_LEVEL", DEFAULT_LOG_LEVEL)
        return cls(
            lock_timeout_seconds=parse_lock_timeout(timeout_value),
            history_path=parse_history_path(history_value),
            log_level=parse_log_level(log_level_value),
        )


def parse_lock_timeout(raw_value: str) -> float:
    """Parse a lock timeout value in seconds.

    Args:
        raw_value: Raw string from environment or CLI.

    Returns:
        Non-negative timeout in seconds.

    Raises:
        BucketshConfigError: If value is not a non-negative number.
    """
    try:
        timeout = float(raw_value)
    except ValueError as error:
        raise BucketshConfigError(
            "Invalid BUCKETSH_LOCK_TIMEOUT value: "
            f"expected number of seconds, got '{raw_value}'. "
            "Set BUCKETSH_LOCK_TIMEOUT to a numeric value."
        ) from error
    if timeout < 0:
        raise BucketshConfigError(
            f"Invalid BUCKETSH_LOCK_TIMEOUT value: {timeout} is negative. "
            "Use 0 to fail immediately when the database is locked."
        )
    return timeout


def parse_history_path(raw_value: str) -> Path | None:
    """Parse history file location; an empty value disables history."""
    if not raw_value.strip():
        return None
    return Path(raw_value).expanduser()


def parse_log_level(raw_value: str) -> str:
    """Normalize and validate a log level name.

    Raises:
        BucketshConfigError: If level is not supported.
    """
    level = raw_value.strip().lower()
    if level not in SUPPORTED_LOG_LEVELS:
        raise BucketshConfigError(
            f"Invalid BUCKETSH_LOG_LEVEL value: '{raw_value}'. "
            f"Use one of: {', '.join(SUPPORTED_LOG_LEVELS)}."
        )
    return level
