"""Facade implementation over any StorageBackend."""

import time
from typing import BinaryIO

from loguru import logger

from s3facade.errors import StorageError
from s3facade.facade import Bucket, Ocket, Region
from s3facade.listing import ListIterator, Listing
from s3facade.storage.base import Metadata, StorageBackend


def _elapsed(start: float) -> str:
    return f"{(time.monotonic() - start) * 1000:.0f}ms"


class StoreRegion(Region):
    """Region backed by a StorageBackend instance."""

    def __init__(self, backend: StorageBackend):
        self.backend = backend

    @property
    def handle(self) -> StorageBackend:
        return self.backend

    def bucket(self, name: str) -> "StoreBucket":
        return StoreBucket(self, name)

    def __str__(self) -> str:
        return self.backend.name


class StoreBucket(Bucket):
    def __init__(self, region: StoreRegion, name: str):
        self._region = region
        self._name = name

    @property
    def region(self) -> StoreRegion:
        return self._region

    @property
    def name(self) -> str:
        return self._name

    @property
    def backend(self) -> StorageBackend:
        return self._region.backend

    def _checked(self) -> str:
        if not self._name:
            raise StorageError.illegal("Bucket name can't be empty")
        return self._name

    def ocket(self, key: str) -> "StoreOcket":
        return StoreOcket(self, key)

    def exists(self) -> bool:
        result = self.backend.bucket_exists(self._checked())
        logger.debug(f"Does bucket '{self._name}' exist? {result}")
        return result

    def remove(self, key: str) -> None:
        if not key:
            raise StorageError.illegal("Ocket name can't be empty")
        start = time.monotonic()
        self.backend.delete(self._checked(), key)
        logger.info(f"ocket '{key}' removed in bucket '{self._name}' in {_elapsed(start)}")

    def list(self, prefix: str = "") -> Listing:
        return ListIterator(self.backend, self._name, prefix)


class StoreOcket(Ocket):
    def __init__(self, bucket: StoreBucket, key: str):
        self._bucket = bucket
        self._key = key

    @property
    def bucket(self) -> StoreBucket:
        return self._bucket

    @property
    def key(self) -> str:
        return self._key

    def _address(self) -> tuple[StorageBackend, str, str]:
        if not self._key:
            raise StorageError.illegal("Ocket name can't be empty")
        return self._bucket.backend, self._bucket._checked(), self._key

    def meta(self) -> Metadata:
        backend, bucket, key = self._address()
        start = time.monotonic()
        meta = backend.head(bucket, key)
        logger.info(
            f"metadata loaded for ocket '{key}' in bucket '{bucket}' "
            f"in {_elapsed(start)} (etag={meta.etag})"
        )
        return meta

    def exists(self) -> bool:
        backend, bucket, key = self._address()
        return backend.exists(bucket, key)

    def read(self, sink: BinaryIO) -> None:
        backend, bucket, key = self._address()
        start = time.monotonic()
        total = 0
        for chunk in backend.get(bucket, key):
            sink.write(chunk)
            total += len(chunk)
        logger.info(
            f"loaded {total} byte(s) from ocket '{key}' in bucket '{bucket}' in {_elapsed(start)}"
        )

    def write(self, source: BinaryIO, meta: Metadata) -> None:
        backend, bucket, key = self._address()
        start = time.monotonic()
        backend.put(bucket, key, source, meta)
        logger.info(f"saved ocket '{key}' in bucket '{bucket}' in {_elapsed(start)}")
