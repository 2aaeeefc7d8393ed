"""Session lifecycle: one database, one transaction, one navigator."""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from core.constants import DEFAULT_LOCK_TIMEOUT_SECONDS
from nav.buckets import RootBucket
from nav.navigator import Navigator
from store.bucket_db import open_database


@contextmanager
def open_session(
    database_path: Path | str,
    lock_timeout_seconds: float = DEFAULT_LOCK_TIMEOUT_SECONDS,
    create: bool = False,
) -> Iterator[Navigator]:
    """Open a database and hold one read-write transaction for the block.

    The transaction is committed and the database closed on every exit
    path of the block.

    Args:
        database_path: Database file path.
        lock_timeout_seconds: Bounded wait for the file lock.
        create: Create the database file when missing.

    Yields:
        Navigator positioned at the root bucket.

    Raises:
        BucketshStoreError: If the database cannot be opened or committed.
    """
    with open_database(database_path, lock_timeout_seconds, create=create) as database:
        with database.update() as transaction:
            yield Navigator(RootBucket(transaction))
