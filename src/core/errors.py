"""bucketsh exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Navigation failures carry the key that caused them so the shell can
report them without re-parsing the input path.
"""

from __future__ import annotations


class BucketshError(Exception):
    """Base exception for all bucketsh failures."""


class BucketshConfigError(BucketshError):
    """Raised for invalid runtime configuration."""


class BucketshStoreError(BucketshError):
    """Raised for storage engine and database file failures."""


class BucketshNavigationError(BucketshError):
    """Base class for failures while resolving or operating on a key."""

    def __init__(self, key: str, message: str) -> None:
        super().__init__(message)
        self.key = key


class NoSuchBucketError(BucketshNavigationError):
    """Raised when no bucket is bound under a key."""

    def __init__(self, key: str) -> None:
        super().__init__(key, f"No bucket at key '{key}'")


class NotABucketError(BucketshNavigationError):
    """Raised when a key holds a value where a bucket was expected."""

    def __init__(self, key: str) -> None:
        super().__init__(key, f"Key '{key}' is a value, not a bucket")


class NoSuchKeyError(BucketshNavigationError):
    """Raised when nothing is bound under a key."""

    def __init__(self, key: str) -> None:
        super().__init__(key, f"No data at key '{key}'")


class KeyIsBucketError(BucketshNavigationError):
    """Raised when a key holds a bucket where a value was expected."""

    def __init__(self, key: str) -> None:
        super().__init__(key, f"Key '{key}' is a bucket, not a value")


class NoValuesAtRootError(BucketshNavigationError):
    """Raised for value reads or writes against the root bucket."""

    def __init__(self, key: str) -> None:
        super().__init__(key, f"Cannot access value '{key}': the root bucket holds no values")


class AlreadyExistsError(BucketshNavigationError):
    """Raised when creating a bucket under a key that is already bound."""

    def __init__(self, key: str) -> None:
        super().__init__(key, f"Unable to create bucket at key '{key}': key already exists")
