"""Unit tests for root and nested bucket handles."""

from __future__ import annotations

import pytest

from core.errors import (
    AlreadyExistsError,
    BucketshStoreError,
    KeyIsBucketError,
    NoSuchBucketError,
    NoSuchKeyError,
    NotABucketError,
    NoValuesAtRootError,
)


def test_root_has_no_parent_and_displays_separator(root) -> None:
    """Root should have no parent and display as a single separator."""
    assert root.parent() is None and root.display_path() == "/" and str(root) == "/"


def test_root_rejects_values(root) -> None:
    """Value reads and writes at root should always fail."""
    root.create_bucket("alpha")

    with pytest.raises(NoValuesAtRootError):
        root.put("key", b"value")
    with pytest.raises(NoValuesAtRootError):
        root.get("alpha")
    with pytest.raises(NoValuesAtRootError):
        root.get("missing")


def test_descend_builds_display_path_and_parent(root) -> None:
    """Descending should extend the path and link back to the parent."""
    root.create_bucket("alpha")
    alpha = root.descend("alpha")
    alpha.create_bucket("beta")

    beta = alpha.descend("beta")

    assert beta.display_path() == "/alpha/beta" and beta.parent() is alpha


def test_descend_missing_key_raises_no_such_bucket(root) -> None:
    """Descending into nothing should fail with NoSuchBucketError."""
    root.create_bucket("alpha")

    with pytest.raises(NoSuchBucketError):
        root.descend("missing")
    with pytest.raises(NoSuchBucketError):
        root.descend("alpha").descend("missing")


def test_descend_value_key_raises_not_a_bucket(root) -> None:
    """Descending into a value should be distinguishable from a missing key."""
    root.create_bucket("alpha")
    alpha = root.descend("alpha")
    alpha.put("leaf", b"value")

    with pytest.raises(NotABucketError) as raised:
        alpha.descend("leaf")

    assert raised.value.key == "leaf"


def test_put_get_roundtrip(root) -> None:
    """A stored value should be read back exactly."""
    root.create_bucket("alpha")
    alpha = root.descend("alpha")

    alpha.put("key", b"\x00hello\xff")

    assert alpha.get("key") == b"\x00hello\xff"


def test_get_missing_key_raises_no_such_key(root) -> None:
    """Reading an unbound key should fail with NoSuchKeyError."""
    root.create_bucket("alpha")

    with pytest.raises(NoSuchKeyError):
        root.descend("alpha").get("missing")


def test_descend_and_get_are_mutually_exclusive(root) -> None:
    """A bucket key cannot be read as a value."""
    root.create_bucket("alpha")
    alpha = root.descend("alpha")
    alpha.create_bucket("child")

    alpha.descend("child")
    with pytest.raises(KeyIsBucketError):
        alpha.get("child")


def test_put_over_bucket_raises_key_is_bucket(root) -> None:
    """Writing a value over a bucket should fail."""
    root.create_bucket("alpha")
    alpha = root.descend("alpha")
    alpha.create_bucket("child")

    with pytest.raises(KeyIsBucketError):
        alpha.put("child", b"value")


def test_put_empty_key_passes_store_error(root) -> None:
    """Key validation should be left to the store."""
    root.create_bucket("alpha")

    with pytest.raises(BucketshStoreError):
        root.descend("alpha").put("", b"value")


def test_create_bucket_collision_raises_already_exists(root) -> None:
    """Creating a bucket over any bound key should fail."""
    root.create_bucket("alpha")
    alpha = root.descend("alpha")
    alpha.put("leaf", b"value")

    with pytest.raises(AlreadyExistsError):
        root.create_bucket("alpha")
    with pytest.raises(AlreadyExistsError):
        alpha.create_bucket("leaf")


def test_list_entries_marks_buckets_in_byte_order(root) -> None:
    """Listings should follow byte order and suffix bucket names."""
    root.create_bucket("alpha")
    alpha = root.descend("alpha")
    alpha.put("zeta", b"1")
    alpha.create_bucket("beta")
    alpha.put("Alpha", b"2")

    assert alpha.list_entries() == ["Alpha", "beta/", "zeta"]


def test_list_buckets_filters_values(root) -> None:
    """Bucket listings should omit values and honour the suffix flag."""
    root.create_bucket("alpha")
    alpha = root.descend("alpha")
    alpha.put("value", b"1")
    alpha.create_bucket("child")

    assert alpha.list_buckets(True) == ["child/"] and alpha.list_buckets(False) == ["child"]


def test_root_lists_top_level_buckets(root) -> None:
    """Root listings should contain only buckets."""
    root.create_bucket("beta")
    root.create_bucket("alpha")

    assert root.list_entries() == ["alpha/", "beta/"]


def test_remove_bucket(root) -> None:
    """Removing a bucket should make it unreachable."""
    root.create_bucket("alpha")
    alpha = root.descend("alpha")
    alpha.create_bucket("child")

    alpha.remove("child")
    root.remove("alpha")

    with pytest.raises(NoSuchBucketError):
        root.descend("alpha")


def test_remove_value(root) -> None:
    """Removing a value should make reads fail with NoSuchKeyError."""
    root.create_bucket("alpha")
    alpha = root.descend("alpha")
    alpha.put("key", b"value")

    alpha.remove("key")

    with pytest.raises(NoSuchKeyError):
        alpha.get("key")


def test_remove_missing_key_raises_no_such_key(root) -> None:
    """Removing an unbound key should fail at root and below."""
    root.create_bucket("alpha")

    with pytest.raises(NoSuchKeyError):
        root.remove("missing")
    with pytest.raises(NoSuchKeyError):
        root.descend("alpha").remove("missing")


def test_non_printable_keys_are_preserved(root) -> None:
    """Keys with invalid UTF-8 should survive decoding in listings."""
    root.create_bucket("alpha")
    alpha = root.descend("alpha")
    raw_key = b"\xff\xfe".decode("utf-8", "surrogateescape")
    alpha.put(raw_key, b"value")

    entry = alpha.entries()[0]

    assert entry.key == b"\xff\xfe" and alpha.get(entry.name) == b"value"
