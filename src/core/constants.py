"""Core constants used across bucketsh modules.

This module centralizes non-domain-specific constants.
Keeping values here avoids magic literals in navigation and shell code.
"""

from __future__ import annotations

from pathlib import Path

PATH_SEPARATOR = "/"
CURRENT_SEGMENT = "."
PARENT_SEGMENT = ".."
KEY_ENCODING = "utf-8"
KEY_ENCODING_ERRORS = "surrogateescape"
VALUE_ENCODING = "utf-8"
ROOT_BUCKET_ID = 0
ENTRIES_TABLE_NAME = "entries"
BUCKET_ID_SEQUENCE_NAME = "bucket_ids"
DEFAULT_LOCK_TIMEOUT_SECONDS = 1.0
LOCK_RETRY_INTERVAL_SECONDS = 0.05
DEFAULT_HISTORY_PATH = Path("~/.bucketsh_history")
DEFAULT_LOG_LEVEL = "warning"
SUPPORTED_LOG_LEVELS = ("debug", "info", "warning", "error")
PROMPT_FORMAT = "[{database} {path}] # "
SHELL_BANNER = "bucketsh, an interactive DuckDB bucket shell"
SHELL_HELP_HINT = 'Type "help" for help.'
INTERRUPTS_TO_EXIT = 2
