"""Current-position state for one shell session."""

from __future__ import annotations

from core.constants import PROMPT_FORMAT
from nav.buckets import BucketHandle
from nav.resolver import resolve, split_key_path


class Navigator:
    """Owns the current bucket handle of a session.

    The position only changes through ``change_bucket`` (committed on
    success, untouched on failure) and ``change_to_root``.
    """

    def __init__(self, root: BucketHandle) -> None:
        self._current = root

    @property
    def current(self) -> BucketHandle:
        """Handle of the current bucket."""
        return self._current

    def resolve(self, path: str) -> BucketHandle:
        """Resolve a bucket path from the current position."""
        return resolve(self._current, path)

    def split_key_path(self, path: str) -> tuple[BucketHandle, str]:
        """Split a key path from the current position."""
        return split_key_path(self._current, path)

    def change_bucket(self, path: str) -> BucketHandle:
        """Move to the bucket denoted by path.

        Raises:
            NoSuchBucketError: If the path names no bucket.
            NotABucketError: If the path passes through a value.
        """
        target = resolve(self._current, path)
        self._current = target
        return target

    def change_to_root(self) -> BucketHandle:
        """Move back to the root bucket."""
        parent = self._current.parent()
        while parent is not None:
            self._current = parent
            parent = self._current.parent()
        return self._current

    def prompt(self, database_name: str) -> str:
        """Shell prompt showing the database and current path."""
        return PROMPT_FORMAT.format(database=database_name, path=self._current.display_path())
