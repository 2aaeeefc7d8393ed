"""Path resolution over bucket handles.

Paths are split on the separator and walked segment by segment from a
starting handle. Empty segments are skipped, so leading, trailing and
doubled separators are tolerated; a leading separator does not jump to
the root. ``..`` at the root stays at the root.
"""

from __future__ import annotations

from core.constants import CURRENT_SEGMENT, PARENT_SEGMENT, PATH_SEPARATOR
from nav.buckets import BucketHandle


def resolve(start: BucketHandle, path: str) -> BucketHandle:
    """Resolve a bucket path relative to start.

    Args:
        start: Handle the walk begins from.
        path: Slash-delimited bucket path.

    Returns:
        Handle of the bucket the path denotes.

    Raises:
        NoSuchBucketError: If a segment names no bucket.
        NotABucketError: If a segment names a value.
    """
    current = start
    for segment in path.split(PATH_SEPARATOR):
        if not segment or segment == CURRENT_SEGMENT:
            continue
        if segment == PARENT_SEGMENT:
            parent = current.parent()
            if parent is not None:
                current = parent
            continue
        current = current.descend(segment)
    return current


def split_key_path(start: BucketHandle, path: str) -> tuple[BucketHandle, str]:
    """Split a ``bucket/path/key`` string into a resolved bucket and a key.

    The key after the last separator is returned as-is; validating it is
    left to the operation that consumes it.

    Raises:
        NoSuchBucketError: If the bucket part names no bucket.
        NotABucketError: If the bucket part passes through a value.
    """
    bucket_path, separator, key = path.rpartition(PATH_SEPARATOR)
    if not separator:
        return start, path
    return resolve(start, bucket_path), key
