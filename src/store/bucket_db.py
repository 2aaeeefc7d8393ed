"""DuckDB-backed nested bucket store.

All buckets live in one ``entries`` table. Each row binds a key inside a
parent bucket either to a value (``value`` set, ``child_id`` null) or to a
child bucket (``value`` null, ``child_id`` set). The root bucket has id 0
and only ever holds child buckets.
"""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
import time
from typing import Iterator

import duckdb

from core.constants import (
    BUCKET_ID_SEQUENCE_NAME,
    ENTRIES_TABLE_NAME,
    LOCK_RETRY_INTERVAL_SECONDS,
    ROOT_BUCKET_ID,
)
from core.errors import BucketshStoreError
from core.logging_config import get_logger

_LOGGER = get_logger(__name__)

CursorItem = tuple[bytes | None, bytes | None]

_SCHEMA_STATEMENTS = (
    f"CREATE SEQUENCE IF NOT EXISTS {BUCKET_ID_SEQUENCE_NAME} START 1",
    f"""
    CREATE TABLE IF NOT EXISTS {ENTRIES_TABLE_NAME} (
        bucket_id BIGINT NOT NULL,
        key BLOB NOT NULL,
        value BLOB,
        child_id BIGINT
    )
    """,
)

_LOOKUP_SQL = f"SELECT value, child_id FROM {ENTRIES_TABLE_NAME} WHERE bucket_id = ? AND key = ?"

_SUBTREE_SQL = f"""
    WITH RECURSIVE subtree(id) AS (
        SELECT CAST(? AS BIGINT)
        UNION ALL
        SELECT e.child_id
        FROM {ENTRIES_TABLE_NAME} e
        JOIN subtree s ON e.bucket_id = s.id
        WHERE e.child_id IS NOT NULL
    )
    SELECT id FROM subtree
"""


def open_database(path: Path | str, timeout: float, create: bool = False) -> "BucketDatabase":
    """Open a bucket database file.

    Args:
        path: Database file path.
        timeout: Seconds to keep retrying while another process holds the lock.
        create: Create the file when it does not exist.

    Returns:
        Open database handle.

    Raises:
        BucketshStoreError: If the file cannot be stat'ed, opened, or locked.
    """
    database_path = Path(path)
    if not create:
        try:
            database_path.stat()
        except OSError as error:
            raise BucketshStoreError(
                f"Unable to stat database file '{database_path}': {error}"
            ) from error
    connection = _connect_with_timeout(database_path, timeout)
    try:
        for statement in _SCHEMA_STATEMENTS:
            connection.execute(statement)
    except duckdb.Error as error:
        connection.close()
        raise BucketshStoreError(
            f"Unable to open database file '{database_path}': {error}"
        ) from error
    _LOGGER.info("database_opened", path=str(database_path))
    return BucketDatabase(connection, database_path)


def _connect_with_timeout(database_path: Path, timeout: float) -> duckdb.DuckDBPyConnection:
    """Connect, retrying on lock conflicts until the timeout elapses."""
    deadline = time.monotonic() + timeout
    attempts = 0
    while True:
        attempts += 1
        try:
            return duckdb.connect(str(database_path))
        except duckdb.IOException as error:
            if time.monotonic() >= deadline:
                _LOGGER.debug("database_lock_timeout", path=str(database_path), attempts=attempts)
                raise BucketshStoreError(
                    f"Unable to open database file '{database_path}': {error}"
                ) from error
            _LOGGER.debug("database_lock_wait", path=str(database_path), attempts=attempts)
            time.sleep(LOCK_RETRY_INTERVAL_SECONDS)
        except duckdb.Error as error:
            raise BucketshStoreError(
                f"Unable to open database file '{database_path}': {error}"
            ) from error


class BucketDatabase:
    """Open database file holding one DuckDB connection."""

    def __init__(self, connection: duckdb.DuckDBPyConnection, path: Path) -> None:
        self._connection = connection
        self._path = path

    @property
    def path(self) -> Path:
        """Database file path."""
        return self._path

    @contextmanager
    def update(self) -> Iterator["Transaction"]:
        """Run a read-write transaction.

        The transaction is committed on every exit path, including
        exceptions and interrupts raised inside the block.

        Yields:
            Transaction scoped to the block.

        Raises:
            BucketshStoreError: If the commit fails.
        """
        try:
            self._connection.begin()
        except duckdb.Error as error:
            raise BucketshStoreError(f"Unable to begin transaction: {error}") from error
        try:
            yield Transaction(self._connection)
        finally:
            self._commit()

    def close(self) -> None:
        """Close the underlying connection and release the file lock."""
        self._connection.close()
        _LOGGER.info("database_closed", path=str(self._path))

    def __enter__(self) -> "BucketDatabase":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _commit(self) -> None:
        try:
            self._connection.commit()
        except duckdb.Error as error:
            _LOGGER.error("transaction_commit_failed", path=str(self._path), error=str(error))
            raise BucketshStoreError(f"Unable to commit transaction: {error}") from error
        _LOGGER.info("transaction_committed", path=str(self._path))


class Transaction:
    """Read-write transaction exposing the top-level buckets.

    Top-level keys can only hold buckets, so the transaction has no
    get or put of its own.
    """

    def __init__(self, connection: duckdb.DuckDBPyConnection) -> None:
        self._root = StoreBucket(connection, ROOT_BUCKET_ID)

    def bucket(self, name: bytes) -> "StoreBucket | None":
        """Return the top-level bucket under name, or None."""
        return self._root.bucket(name)

    def create_bucket(self, name: bytes) -> "StoreBucket":
        """Create a top-level bucket."""
        return self._root.create_bucket(name)

    def delete_bucket(self, name: bytes) -> None:
        """Delete a top-level bucket and everything nested in it."""
        self._root.delete_bucket(name)

    def delete(self, name: bytes) -> None:
        """Delete a top-level value; fails for buckets like StoreBucket.delete."""
        self._root.delete(name)

    def cursor(self) -> "Cursor":
        """Cursor over the top-level buckets."""
        return self._root.cursor()


class StoreBucket:
    """One bucket inside a transaction."""

    def __init__(self, connection: duckdb.DuckDBPyConnection, bucket_id: int) -> None:
        self._connection = connection
        self._bucket_id = bucket_id

    @property
    def bucket_id(self) -> int:
        """Internal bucket id."""
        return self._bucket_id

    def get(self, key: bytes) -> bytes | None:
        """Return the value under key, or None if absent or a bucket."""
        row = self._lookup(key)
        if row is None or row[1] is not None:
            return None
        return bytes(row[0])

    def put(self, key: bytes, value: bytes) -> None:
        """Store value under key, overwriting an existing value.

        Raises:
            BucketshStoreError: If key is empty or holds a bucket.
        """
        _require_key(key)
        row = self._lookup(key)
        if row is not None and row[1] is not None:
            raise BucketshStoreError("incompatible value")
        if row is None:
            self._execute(
                f"INSERT INTO {ENTRIES_TABLE_NAME} VALUES (?, ?, ?, NULL)",
                [self._bucket_id, key, value],
            )
        else:
            self._execute(
                f"UPDATE {ENTRIES_TABLE_NAME} SET value = ? WHERE bucket_id = ? AND key = ?",
                [value, self._bucket_id, key],
            )

    def bucket(self, key: bytes) -> "StoreBucket | None":
        """Return the nested bucket under key, or None."""
        row = self._lookup(key)
        if row is None or row[1] is None:
            return None
        return StoreBucket(self._connection, int(row[1]))

    def create_bucket(self, key: bytes) -> "StoreBucket":
        """Create an empty nested bucket under key.

        Raises:
            BucketshStoreError: If key is empty or already bound.
        """
        _require_key(key)
        row = self._lookup(key)
        if row is not None:
            if row[1] is not None:
                raise BucketshStoreError("bucket already exists")
            raise BucketshStoreError("incompatible value")
        fetched = self._execute(f"SELECT nextval('{BUCKET_ID_SEQUENCE_NAME}')").fetchone()
        child_id = int(fetched[0])
        self._execute(
            f"INSERT INTO {ENTRIES_TABLE_NAME} VALUES (?, ?, NULL, ?)",
            [self._bucket_id, key, child_id],
        )
        return StoreBucket(self._connection, child_id)

    def delete_bucket(self, key: bytes) -> None:
        """Delete the nested bucket under key together with its contents.

        Raises:
            BucketshStoreError: If nothing is bound or key holds a value.
        """
        row = self._lookup(key)
        if row is None:
            raise BucketshStoreError("bucket not found")
        if row[1] is None:
            raise BucketshStoreError("incompatible value")
        subtree_ids = [int(item[0]) for item in self._execute(_SUBTREE_SQL, [row[1]]).fetchall()]
        for bucket_id in subtree_ids:
            self._execute(f"DELETE FROM {ENTRIES_TABLE_NAME} WHERE bucket_id = ?", [bucket_id])
        self._delete_row(key)

    def delete(self, key: bytes) -> None:
        """Delete the value under key; missing keys are ignored.

        Raises:
            BucketshStoreError: If key holds a bucket.
        """
        row = self._lookup(key)
        if row is None:
            return
        if row[1] is not None:
            raise BucketshStoreError("incompatible value")
        self._delete_row(key)

    def cursor(self) -> "Cursor":
        """Ordered cursor over this bucket's direct children."""
        return Cursor(self._connection, self._bucket_id)

    def _lookup(self, key: bytes) -> tuple[bytes | None, int | None] | None:
        return self._execute(_LOOKUP_SQL, [self._bucket_id, key]).fetchone()

    def _delete_row(self, key: bytes) -> None:
        self._execute(
            f"DELETE FROM {ENTRIES_TABLE_NAME} WHERE bucket_id = ? AND key = ?",
            [self._bucket_id, key],
        )

    def _execute(self, sql: str, parameters: list[object] | None = None) -> duckdb.DuckDBPyConnection:
        try:
            return self._connection.execute(sql, parameters)
        except duckdb.Error as error:
            raise BucketshStoreError(f"Bucket store query failed: {error}") from error


class Cursor:
    """Ordered cursor over one bucket, sorted by raw key bytes.

    Each step yields ``(key, value)``; ``value`` is None for bucket
    entries and ``(None, None)`` marks the end.
    """

    def __init__(self, connection: duckdb.DuckDBPyConnection, bucket_id: int) -> None:
        self._connection = connection
        self._bucket_id = bucket_id
        self._position: bytes | None = None

    def first(self) -> CursorItem:
        """Move to the first entry."""
        return self._move("", [])

    def next(self) -> CursorItem:
        """Move to the entry after the current one."""
        if self._position is None:
            return None, None
        return self._move("AND key > ?", [self._position])

    def seek(self, key: bytes) -> CursorItem:
        """Move to key, or to the next entry after where key would be."""
        return self._move("AND key >= ?", [key])

    def _move(self, condition: str, parameters: list[object]) -> CursorItem:
        sql = (
            f"SELECT key, value FROM {ENTRIES_TABLE_NAME} "
            f"WHERE bucket_id = ? {condition} ORDER BY key LIMIT 1"
        )
        try:
            row = self._connection.execute(sql, [self._bucket_id, *parameters]).fetchone()
        except duckdb.Error as error:
            raise BucketshStoreError(f"Bucket store query failed: {error}") from error
        if row is None:
            self._position = None
            return None, None
        self._position = bytes(row[0])
        value = None if row[1] is None else bytes(row[1])
        return self._position, value


def _require_key(key: bytes) -> None:
    if not key:
        raise BucketshStoreError("key required")
