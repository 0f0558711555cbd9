"""Lazy key listings."""

import time
from abc import abstractmethod
from collections import deque
from typing import Iterator

from loguru import logger

from s3facade.errors import ListingError, StorageError
from s3facade.storage.base import StorageBackend


class Listing(Iterator[str]):
    """Lazy, finite, forward-only sequence of keys.

    Not restartable and not safe for concurrent use: every
    ``Bucket.list()`` call returns a fresh one.
    """

    @abstractmethod
    def has_next(self) -> bool:
        ...

    def remove(self) -> None:
        raise StorageError.illegal("Remove is not supported by a listing")


class ListIterator(Listing):
    """Pulls pages of keys from a backend on demand.

    A page may be empty and still truncated, so has_next() keeps fetching
    until it either buffers a key or the backend reports the last page.
    """

    def __init__(self, backend: StorageBackend, bucket: str, prefix: str = ""):
        self.backend = backend
        self.bucket = bucket
        self.prefix = prefix
        self._buffer: deque[str] = deque()
        self._cursor: str | None = None
        self._exhausted = False

    def __repr__(self) -> str:
        return f"ListIterator({self.bucket!r}, prefix={self.prefix!r})"

    def has_next(self) -> bool:
        while not self._buffer and not self._exhausted:
            self._load()
        return bool(self._buffer)

    def __next__(self) -> str:
        if not self.has_next():
            raise StopIteration
        return self._buffer.popleft()

    def _load(self) -> None:
        """Load the next page; on failure the state is left untouched."""
        start = time.monotonic()
        try:
            page = self.backend.list_page(self.bucket, self.prefix, self._cursor)
        except StorageError as e:
            raise ListingError(
                f"failed to load a list of objects in '{self.bucket}', prefix={self.prefix}"
            ) from e
        self._buffer.extend(page.keys)
        self._cursor = page.cursor
        # A truncated page without a cursor can't be continued
        if not page.truncated or page.cursor is None:
            self._exhausted = True
        logger.info(
            f"listed {len(page.keys)} ocket(s) with prefix '{self.prefix}' "
            f"in bucket '{self.bucket}' in {(time.monotonic() - start) * 1000:.0f}ms"
        )
