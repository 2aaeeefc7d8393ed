"""Bucket handles over positions in the nested bucket tree.

A handle is minted each time navigation descends into a bucket; it is not
a persistent identity. Two variants share one contract: ``RootBucket``
wraps the transaction and holds only sub-buckets, ``SubBucket`` wraps a
store bucket and holds both values and sub-buckets. Everything except
value access and parent linkage is implemented once in module helpers.
"""

from __future__ import annotations

from typing import Protocol

from core.constants import PATH_SEPARATOR
from core.errors import (
    AlreadyExistsError,
    KeyIsBucketError,
    NoSuchBucketError,
    NoSuchKeyError,
    NotABucketError,
    NoValuesAtRootError,
)
from core.types import BucketEntry, encode_key
from store.bucket_db import Cursor, StoreBucket, Transaction


class BucketHandle(Protocol):
    """Operations available at one level of the bucket tree."""

    def parent(self) -> "BucketHandle | None": ...

    def descend(self, key: str) -> "BucketHandle": ...

    def entries(self) -> list[BucketEntry]: ...

    def list_entries(self) -> list[str]: ...

    def list_buckets(self, with_suffix: bool) -> list[str]: ...

    def get(self, key: str) -> bytes: ...

    def put(self, key: str, value: bytes) -> None: ...

    def create_bucket(self, key: str) -> None: ...

    def remove(self, key: str) -> None: ...

    def display_path(self) -> str: ...


class _StoreScope(Protocol):
    """Store operations shared by the transaction and nested buckets."""

    def bucket(self, key: bytes) -> StoreBucket | None: ...

    def create_bucket(self, key: bytes) -> StoreBucket: ...

    def delete_bucket(self, key: bytes) -> None: ...

    def delete(self, key: bytes) -> None: ...

    def cursor(self) -> Cursor: ...


class RootBucket:
    """The top-level bucket of a transaction."""

    def __init__(self, transaction: Transaction) -> None:
        self._transaction = transaction

    def parent(self) -> BucketHandle | None:
        """Root has no parent."""
        return None

    def descend(self, key: str) -> BucketHandle:
        return _descend(self._transaction, key, PATH_SEPARATOR + key, self)

    def entries(self) -> list[BucketEntry]:
        return _read_entries(self._transaction.cursor())

    def list_entries(self) -> list[str]:
        return [entry.label for entry in self.entries()]

    def list_buckets(self, with_suffix: bool) -> list[str]:
        return _bucket_names(self.entries(), with_suffix)

    def get(self, key: str) -> bytes:
        """Root holds no values.

        Raises:
            NoValuesAtRootError: Always.
        """
        raise NoValuesAtRootError(key)

    def put(self, key: str, value: bytes) -> None:
        """Root holds no values.

        Raises:
            NoValuesAtRootError: Always.
        """
        raise NoValuesAtRootError(key)

    def create_bucket(self, key: str) -> None:
        _create_bucket(self._transaction, key)

    def remove(self, key: str) -> None:
        _remove(self._transaction, key)

    def display_path(self) -> str:
        return PATH_SEPARATOR

    def __str__(self) -> str:
        return self.display_path()

    def __repr__(self) -> str:
        return "RootBucket()"


class SubBucket:
    """A nested bucket reached by descending from its parent.

    Attributes are fixed at creation: the store bucket, the display path
    (parent path plus separator plus key), and the parent handle.
    """

    def __init__(self, bucket: StoreBucket, path: str, parent: BucketHandle) -> None:
        self._bucket = bucket
        self._path = path
        self._parent = parent

    def parent(self) -> BucketHandle | None:
        return self._parent

    def descend(self, key: str) -> BucketHandle:
        return _descend(self._bucket, key, self._path + PATH_SEPARATOR + key, self)

    def entries(self) -> list[BucketEntry]:
        return _read_entries(self._bucket.cursor())

    def list_entries(self) -> list[str]:
        return [entry.label for entry in self.entries()]

    def list_buckets(self, with_suffix: bool) -> list[str]:
        return _bucket_names(self.entries(), with_suffix)

    def get(self, key: str) -> bytes:
        """Return the value stored under key.

        Raises:
            KeyIsBucketError: If key holds a bucket.
            NoSuchKeyError: If nothing is bound under key.
        """
        raw_key = encode_key(key)
        value = self._bucket.get(raw_key)
        if value is not None:
            return value
        if self._bucket.bucket(raw_key) is not None:
            raise KeyIsBucketError(key)
        raise NoSuchKeyError(key)

    def put(self, key: str, value: bytes) -> None:
        """Store or overwrite the value under key.

        Raises:
            KeyIsBucketError: If key holds a bucket.
            BucketshStoreError: If the store rejects the key.
        """
        raw_key = encode_key(key)
        if self._bucket.bucket(raw_key) is not None:
            raise KeyIsBucketError(key)
        self._bucket.put(raw_key, value)

    def create_bucket(self, key: str) -> None:
        _create_bucket(self._bucket, key)

    def remove(self, key: str) -> None:
        _remove(self._bucket, key)

    def display_path(self) -> str:
        return self._path

    def __str__(self) -> str:
        return self.display_path()

    def __repr__(self) -> str:
        return f"SubBucket(path={self._path!r})"


def _descend(scope: _StoreScope, key: str, path: str, parent: BucketHandle) -> BucketHandle:
    """Open the sub-bucket under key, telling missing keys from values."""
    raw_key = encode_key(key)
    child = scope.bucket(raw_key)
    if child is not None:
        return SubBucket(child, path, parent)
    found_key, _ = scope.cursor().seek(raw_key)
    if found_key == raw_key:
        raise NotABucketError(key)
    raise NoSuchBucketError(key)


def _create_bucket(scope: _StoreScope, key: str) -> None:
    raw_key = encode_key(key)
    found_key, _ = scope.cursor().seek(raw_key)
    if found_key == raw_key:
        raise AlreadyExistsError(key)
    scope.create_bucket(raw_key)


def _remove(scope: _StoreScope, key: str) -> None:
    """Delete whatever the cursor finds bound under key."""
    raw_key = encode_key(key)
    found_key, value = scope.cursor().seek(raw_key)
    if found_key != raw_key:
        raise NoSuchKeyError(key)
    if value is None:
        scope.delete_bucket(raw_key)
    else:
        scope.delete(raw_key)


def _read_entries(cursor: Cursor) -> list[BucketEntry]:
    entries = []
    key, value = cursor.first()
    while key is not None:
        entries.append(BucketEntry(key=key, is_bucket=value is None))
        key, value = cursor.next()
    return entries


def _bucket_names(entries: list[BucketEntry], with_suffix: bool) -> list[str]:
    if with_suffix:
        return [entry.label for entry in entries if entry.is_bucket]
    return [entry.name for entry in entries if entry.is_bucket]
