"""Read-through cache decorators.

``meta()``, ``exists()`` and full-content ``read()`` are served from a
store after the first call; ``write()`` and ``Bucket.remove()`` flush every
entry of the (bucket, key) they touch. A store belongs to the decorator
that created it and to the buckets and ockets that decorator hands out.

The default store is an unbounded dict. Any MutableMapping can be passed
instead, e.g. a bounded or thread-safe one.
"""

import io
from typing import BinaryIO, Callable, MutableMapping, TypeVar

from loguru import logger

from s3facade.facade import Bucket, Ocket, Region
from s3facade.listing import Listing
from s3facade.storage.base import Metadata

T = TypeVar("T")

CacheStore = MutableMapping[tuple[Bucket, str], dict[str, object]]


def _cache_key(ocket: Ocket) -> tuple[Bucket, str]:
    return ocket.bucket, ocket.key


def _flush(store: CacheStore, ocket: Ocket) -> None:
    if store.pop(_cache_key(ocket), None) is not None:
        logger.debug(f"cache flushed for ocket '{ocket.key}' in bucket '{ocket.bucket}'")


class CachedRegion(Region):
    def __init__(self, origin: Region, store: CacheStore | None = None):
        self.origin = origin
        self.store = {} if store is None else store

    @property
    def handle(self) -> object:
        return self.origin.handle

    def bucket(self, name: str) -> "CachedBucket":
        return CachedBucket(self.origin.bucket(name), self.store)

    def __str__(self) -> str:
        return str(self.origin)


class CachedBucket(Bucket):
    def __init__(self, origin: Bucket, store: CacheStore | None = None):
        self.origin = origin
        self.store = {} if store is None else store

    @property
    def region(self) -> CachedRegion:
        return CachedRegion(self.origin.region, self.store)

    @property
    def name(self) -> str:
        return self.origin.name

    def ocket(self, key: str) -> "CachedOcket":
        return CachedOcket(self.origin.ocket(key), self.store)

    def exists(self) -> bool:
        return self.origin.exists()

    def remove(self, key: str) -> None:
        try:
            self.origin.remove(key)
        finally:
            _flush(self.store, self.origin.ocket(key))

    def list(self, prefix: str = "") -> Listing:
        return self.origin.list(prefix)


class CachedOcket(Ocket):
    def __init__(self, origin: Ocket, store: CacheStore | None = None):
        self.origin = origin
        self.store = {} if store is None else store

    @property
    def bucket(self) -> CachedBucket:
        return CachedBucket(self.origin.bucket, self.store)

    @property
    def key(self) -> str:
        return self.origin.key

    def _cached(self, name: str, load: Callable[[], T]) -> T:
        key = _cache_key(self.origin)
        entry = self.store.get(key)
        if entry is not None and name in entry:
            logger.debug(f"cache hit: {name} of ocket '{self.key}'")
            return entry[name]  # type: ignore[return-value]
        value = load()
        entry = self.store.get(key)
        if entry is None:
            entry = {}
            self.store[key] = entry
        entry[name] = value
        return value

    def meta(self) -> Metadata:
        return self._cached("meta", self.origin.meta)

    def exists(self) -> bool:
        return self._cached("exists", self.origin.exists)

    def read(self, sink: BinaryIO) -> None:
        sink.write(self._cached("content", self._content))

    def write(self, source: BinaryIO, meta: Metadata) -> None:
        try:
            self.origin.write(source, meta)
        finally:
            _flush(self.store, self.origin)

    def _content(self) -> bytes:
        buffer = io.BytesIO()
        self.origin.read(buffer)
        return buffer.getvalue()
