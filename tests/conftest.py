"""Pytest configuration for repository test runs."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Iterator

import pytest


def pytest_sessionstart() -> None:
    """Add src directory to sys.path for test imports."""
    project_root = Path(__file__).resolve().parent.parent
    src_path = project_root / "src"
    if str(src_path) not in sys.path:
        sys.path.insert(0, str(src_path))


@pytest.fixture
def database_path(tmp_path: Path) -> Path:
    """Location of a not-yet-created database file."""
    return tmp_path / "test.duckdb"


@pytest.fixture
def database(database_path: Path) -> Iterator[object]:
    """Freshly created bucket database."""
    from store.bucket_db import open_database

    with open_database(database_path, timeout=0.0, create=True) as opened:
        yield opened


@pytest.fixture
def transaction(database) -> Iterator[object]:
    """Open read-write transaction on the test database."""
    with database.update() as active:
        yield active


@pytest.fixture
def root(transaction) -> object:
    """Root bucket handle bound to the test transaction."""
    from nav.buckets import RootBucket

    return RootBucket(transaction)


@pytest.fixture
def navigator(root) -> object:
    """Navigator positioned at the root bucket."""
    from nav.navigator import Navigator

    return Navigator(root)
