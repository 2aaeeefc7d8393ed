"""Public SDK surface for bucketsh.

This module provides a stable import path for scripting against a
bucket database without the interactive shell. It re-exports the
session entry point, navigation helpers, and the error taxonomy.
"""

from __future__ import annotations

from core.config import BucketshConfig
from core.errors import (
    AlreadyExistsError,
    BucketshError,
    BucketshNavigationError,
    BucketshStoreError,
    KeyIsBucketError,
    NoSuchBucketError,
    NoSuchKeyError,
    NotABucketError,
    NoValuesAtRootError,
)
from core.types import BucketEntry
from nav.buckets import BucketHandle, RootBucket, SubBucket
from nav.completion import complete_buckets, complete_keys
from nav.navigator import Navigator
from nav.resolver import resolve, split_key_path
from nav.session import open_session
from store.bucket_db import BucketDatabase, open_database

__all__ = [
    "AlreadyExistsError",
    "BucketDatabase",
    "BucketEntry",
    "BucketHandle",
    "BucketshConfig",
    "BucketshError",
    "BucketshNavigationError",
    "BucketshStoreError",
    "KeyIsBucketError",
    "Navigator",
    "NoSuchBucketError",
    "NoSuchKeyError",
    "NotABucketError",
    "NoValuesAtRootError",
    "RootBucket",
    "SubBucket",
    "complete_buckets",
    "complete_keys",
    "open_database",
    "open_session",
    "resolve",
    "split_key_path",
]
