"""Unit tests for the DuckDB bucket store."""

from __future__ import annotations

import duckdb
import pytest

from core.errors import BucketshStoreError
from store import bucket_db
from store.bucket_db import open_database


def test_open_database_requires_existing_file(database_path) -> None:
    """Opening a missing file without create should fail at stat."""
    with pytest.raises(BucketshStoreError, match="Unable to stat"):
        open_database(database_path, timeout=0.0)

    assert not database_path.exists()


def test_open_database_creates_file(database_path) -> None:
    """Create mode should initialize a new database file."""
    with open_database(database_path, timeout=0.0, create=True) as database:
        opened_path = database.path

    assert opened_path == database_path and database_path.exists()


def test_open_database_retries_until_lock_timeout(database_path, monkeypatch) -> None:
    """Lock conflicts should be retried until the timeout elapses."""
    attempts: list[str] = []

    def _locked_connect(path: str) -> object:
        attempts.append(path)
        raise duckdb.IOException("Could not set lock on file")

    monkeypatch.setattr(bucket_db.duckdb, "connect", _locked_connect)

    with pytest.raises(BucketshStoreError, match="Unable to open"):
        open_database(database_path, timeout=0.2, create=True)

    assert len(attempts) > 1


def test_create_bucket_and_lookup(transaction) -> None:
    """Top-level buckets should be retrievable after creation."""
    transaction.create_bucket(b"alpha")

    assert transaction.bucket(b"alpha") is not None and transaction.bucket(b"beta") is None


def test_create_bucket_rejects_existing_key(transaction) -> None:
    """Creating a bucket twice should fail."""
    transaction.create_bucket(b"alpha")

    with pytest.raises(BucketshStoreError, match="bucket already exists"):
        transaction.create_bucket(b"alpha")


def test_put_get_roundtrip_preserves_bytes(transaction) -> None:
    """Values should round-trip byte-for-byte, including empty values."""
    bucket = transaction.create_bucket(b"alpha")
    bucket.put(b"bin", b"\x00\xff\x10")
    bucket.put(b"empty", b"")

    assert bucket.get(b"bin") == b"\x00\xff\x10" and bucket.get(b"empty") == b""


def test_put_overwrites_value(transaction) -> None:
    """A second put should replace the stored value."""
    bucket = transaction.create_bucket(b"alpha")
    bucket.put(b"key", b"one")
    bucket.put(b"key", b"two")

    assert bucket.get(b"key") == b"two"


def test_put_requires_key(transaction) -> None:
    """Empty keys should be rejected."""
    bucket = transaction.create_bucket(b"alpha")

    with pytest.raises(BucketshStoreError, match="key required"):
        bucket.put(b"", b"value")


def test_put_on_bucket_key_is_incompatible(transaction) -> None:
    """Writing a value over a bucket should fail."""
    bucket = transaction.create_bucket(b"alpha")
    bucket.create_bucket(b"child")

    with pytest.raises(BucketshStoreError, match="incompatible value"):
        bucket.put(b"child", b"value")


def test_get_returns_none_for_bucket_key(transaction) -> None:
    """Bucket keys have no value."""
    bucket = transaction.create_bucket(b"alpha")
    bucket.create_bucket(b"child")

    assert bucket.get(b"child") is None


def test_cursor_orders_by_raw_bytes(transaction) -> None:
    """Cursor iteration should follow byte order and mark buckets."""
    bucket = transaction.create_bucket(b"alpha")
    bucket.put(b"b", b"2")
    bucket.create_bucket(b"a")
    bucket.put(b"\xff", b"3")
    bucket.put(b"B", b"1")
    cursor = bucket.cursor()

    items = []
    key, value = cursor.first()
    while key is not None:
        items.append((key, value))
        key, value = cursor.next()

    assert items == [(b"B", b"1"), (b"a", None), (b"b", b"2"), (b"\xff", b"3")]


def test_cursor_seek_positions_at_or_after_key(transaction) -> None:
    """Seek should land on the key or the next one after it."""
    bucket = transaction.create_bucket(b"alpha")
    bucket.put(b"a", b"1")
    bucket.put(b"c", b"3")
    cursor = bucket.cursor()

    exact = cursor.seek(b"a")
    after = cursor.seek(b"b")
    past_end = cursor.seek(b"d")

    assert exact == (b"a", b"1") and after == (b"c", b"3") and past_end == (None, None)


def test_delete_bucket_removes_nested_contents(transaction, database) -> None:
    """Deleting a bucket should remove every nested row."""
    alpha = transaction.create_bucket(b"alpha")
    child = alpha.create_bucket(b"child")
    child.put(b"key", b"value")
    child.create_bucket(b"grandchild").put(b"deep", b"value")

    transaction.delete_bucket(b"alpha")
    remaining = database._connection.execute("SELECT count(*) FROM entries").fetchone()[0]

    assert transaction.bucket(b"alpha") is None and remaining == 0


def test_delete_bucket_rejects_value_key(transaction) -> None:
    """Deleting a value as a bucket should fail."""
    bucket = transaction.create_bucket(b"alpha")
    bucket.put(b"key", b"value")

    with pytest.raises(BucketshStoreError, match="incompatible value"):
        bucket.delete_bucket(b"key")


def test_delete_bucket_missing_key(transaction) -> None:
    """Deleting a missing bucket should fail."""
    with pytest.raises(BucketshStoreError, match="bucket not found"):
        transaction.delete_bucket(b"missing")


def test_delete_value(transaction) -> None:
    """Deleting a value should remove it; missing keys are ignored."""
    bucket = transaction.create_bucket(b"alpha")
    bucket.put(b"key", b"value")

    bucket.delete(b"key")
    bucket.delete(b"missing")

    assert bucket.get(b"key") is None


def test_committed_data_survives_reopen(database_path) -> None:
    """Data written in one transaction should persist after closing."""
    with open_database(database_path, timeout=0.0, create=True) as database:
        with database.update() as transaction:
            transaction.create_bucket(b"alpha").put(b"key", b"value")

    with open_database(database_path, timeout=0.0) as database:
        with database.update() as transaction:
            bucket = transaction.bucket(b"alpha")
            value = bucket.get(b"key") if bucket is not None else None

    assert value == b"value"


def test_update_commits_when_block_raises(database_path) -> None:
    """The transaction should be committed even if the block raises."""
    with open_database(database_path, timeout=0.0, create=True) as database:
        with pytest.raises(KeyboardInterrupt):
            with database.update() as transaction:
                transaction.create_bucket(b"alpha")
                raise KeyboardInterrupt

    with open_database(database_path, timeout=0.0) as database:
        with database.update() as transaction:
            found = transaction.bucket(b"alpha")

    assert found is not None
