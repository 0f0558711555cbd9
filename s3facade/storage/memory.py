"""In-memory storage backend."""

from collections import defaultdict
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from hashlib import md5
from typing import BinaryIO, Iterator

from s3facade.errors import StorageError
from s3facade.storage.base import Metadata, Page


@dataclass
class Object:
    body: bytes
    meta: Metadata


@dataclass(eq=False)
class MemoryStorage:
    """Dict-backed storage, for tests and offline use."""

    storage: dict[str, dict[str, Object]] = field(
        default_factory=lambda: defaultdict(dict)
    )
    page_size: int = 1000
    name: str = "memory"

    def _object(self, bucket: str, key: str) -> Object:
        try:
            return self.storage.get(bucket, {})[key]
        except KeyError:
            raise StorageError.not_found(f"ocket '{key}' not found in '{bucket}'") from None

    def head(self, bucket: str, key: str) -> Metadata:
        return self._object(bucket, key).meta

    def exists(self, bucket: str, key: str) -> bool:
        return key in self.storage.get(bucket, {})

    def get(self, bucket: str, key: str) -> Iterator[bytes]:
        return iter([self._object(bucket, key).body])

    def put(self, bucket: str, key: str, source: BinaryIO, meta: Metadata) -> None:
        if not bucket or not key:
            raise StorageError.illegal("Bucket and ocket names can't be empty")
        body = source.read()
        meta = replace(
            meta,
            content_length=len(body),
            last_modified=datetime.now(timezone.utc),
            etag=md5(body).hexdigest(),
        )
        self.storage[bucket][key] = Object(body=body, meta=meta)

    def delete(self, bucket: str, key: str) -> None:
        self._object(bucket, key)
        del self.storage[bucket][key]

    def list_page(self, bucket: str, prefix: str, cursor: str | None) -> Page:
        keys = sorted(
            key
            for key in self.storage.get(bucket, {})
            if key.startswith(prefix) and (cursor is None or key > cursor)
        )
        if len(keys) > self.page_size:
            page = keys[: self.page_size]
            return Page(keys=page, cursor=page[-1], truncated=True)
        return Page(keys=keys)

    def bucket_exists(self, bucket: str) -> bool:
        return bucket in self.storage

    def create_bucket(self, bucket: str) -> None:
        self.storage.setdefault(bucket, {})

    def delete_bucket(self, bucket: str) -> None:
        if bucket not in self.storage:
            raise StorageError.not_found(f"bucket '{bucket}' not found")
        del self.storage[bucket]
