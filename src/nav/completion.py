"""Tab-completion candidates and printable-name filtering.

Completion never raises: a prefix that fails to resolve simply yields no
candidates. Names that are not printable text are dropped so binary keys
cannot garble the terminal.
"""

from __future__ import annotations

from core.constants import PATH_SEPARATOR
from core.errors import BucketshError
from nav.buckets import BucketHandle
from nav.resolver import resolve


def is_printable(text: str) -> bool:
    """Whether every character of text is printable."""
    return text.isprintable()


def printable_entries(labels: list[str]) -> list[str]:
    """Keep only printable labels, preserving order."""
    return [label for label in labels if is_printable(label)]


def partial_bucket(start: BucketHandle, text: str) -> tuple[BucketHandle | None, str]:
    """Resolve the part of text up to its last separator.

    Args:
        start: Current bucket handle.
        text: Partially typed path, e.g. ``foo/ba``.

    Returns:
        The resolved handle (None if resolution failed) and the prefix to
        prepend to candidates, e.g. ``foo/``.
    """
    bucket_path, separator, _ = text.rpartition(PATH_SEPARATOR)
    if not separator:
        return start, ""
    try:
        return resolve(start, bucket_path), bucket_path + PATH_SEPARATOR
    except BucketshError:
        return None, ""


def complete_buckets(start: BucketHandle, text: str) -> list[str]:
    """Bucket-only completion candidates for text."""
    target, prefix = partial_bucket(start, text)
    if target is None:
        return []
    return [prefix + name for name in printable_entries(target.list_buckets(True))]


def complete_keys(start: BucketHandle, text: str) -> list[str]:
    """Completion candidates for text covering values and buckets."""
    target, prefix = partial_bucket(start, text)
    if target is None:
        return []
    return [prefix + name for name in printable_entries(target.list_entries())]
