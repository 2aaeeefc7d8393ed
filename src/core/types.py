"""Shared typed models.

This module defines immutable data models used by the store,
navigation, and shell layers to keep interfaces explicit and stable.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from core.constants import KEY_ENCODING, KEY_ENCODING_ERRORS, PATH_SEPARATOR


def encode_key(key: str) -> bytes:
    """Encode a shell key into raw store bytes."""
    return key.encode(KEY_ENCODING, KEY_ENCODING_ERRORS)


def decode_key(raw_key: bytes) -> str:
    """Decode raw store bytes into a shell key, preserving invalid bytes."""
    return raw_key.decode(KEY_ENCODING, KEY_ENCODING_ERRORS)


@dataclass(frozen=True)
class BucketEntry:
    """One direct child of a bucket.

    Attributes:
        key: Raw key bytes as stored.
        is_bucket: True when the key denotes a nested bucket.
    """

    key: bytes
    is_bucket: bool

    @property
    def name(self) -> str:
        """Decoded key name."""
        return decode_key(self.key)

    @property
    def label(self) -> str:
        """Listing label, with a trailing separator for buckets."""
        if self.is_bucket:
            return self.name + PATH_SEPARATOR
        return self.name


@dataclass(frozen=True)
class SessionOptions:
    """Options for one shell session against a database file.

    Attributes:
        database_path: Path to the DuckDB database file.
        lock_timeout_seconds: Bounded wait for the file lock.
        create: Create the database file when it does not exist.
        history_path: Shell history file, or None to disable history.
    """

    database_path: Path
    lock_timeout_seconds: float
    create: bool = False
    history_path: Path | None = None
