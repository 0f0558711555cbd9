from pathlib import Path
from typing import BinaryIO, Iterator

import pytest

from s3facade import Bucket, Metadata, Page, StorageError, StoreRegion
from s3facade.storage import LocalStorage, MemoryStorage


class ScriptedStorage(MemoryStorage):
    """Memory storage whose listing replays a fixed list of pages."""

    def __init__(self, pages: list[Page]):
        super().__init__()
        self.pages = pages
        self.calls: list[tuple[str, str, str | None]] = []

    def list_page(self, bucket: str, prefix: str, cursor: str | None) -> Page:
        self.calls.append((bucket, prefix, cursor))
        return self.pages[len(self.calls) - 1]


class FlakyStorage(MemoryStorage):
    """Memory storage that counts calls and fails the ones it is told to."""

    def __init__(self):
        super().__init__()
        self.calls: dict[str, int] = {}
        self.pending: dict[str, list[StorageError]] = {}

    def fail(self, operation: str, times: int = 1, error: StorageError | None = None) -> None:
        """Make the next ``times`` calls of operation raise error."""
        error = error or StorageError.transient("throttled")
        self.pending[operation] = [error] * times

    def _trip(self, operation: str) -> None:
        self.calls[operation] = self.calls.get(operation, 0) + 1
        pending = self.pending.get(operation)
        if pending:
            raise pending.pop()

    def head(self, bucket: str, key: str) -> Metadata:
        self._trip("head")
        return super().head(bucket, key)

    def exists(self, bucket: str, key: str) -> bool:
        self._trip("exists")
        return super().exists(bucket, key)

    def get(self, bucket: str, key: str) -> Iterator[bytes]:
        self._trip("get")
        return super().get(bucket, key)

    def put(self, bucket: str, key: str, source: BinaryIO, meta: Metadata) -> None:
        self._trip("put")
        super().put(bucket, key, source, meta)

    def delete(self, bucket: str, key: str) -> None:
        self._trip("delete")
        super().delete(bucket, key)

    def list_page(self, bucket: str, prefix: str, cursor: str | None) -> Page:
        self._trip("list_page")
        return super().list_page(bucket, prefix, cursor)

    def bucket_exists(self, bucket: str) -> bool:
        self._trip("bucket_exists")
        return super().bucket_exists(bucket)


@pytest.fixture
def memory() -> MemoryStorage:
    return MemoryStorage(page_size=2)


@pytest.fixture
def local(tmp_path: Path) -> LocalStorage:
    return LocalStorage(tmp_path / "store", page_size=2)


@pytest.fixture(params=["memory", "local"])
def bucket(request: pytest.FixtureRequest) -> Bucket:
    """A bucket on each offline backend, with a small page size."""
    storage = request.getfixturevalue(request.param)
    storage.create_bucket("test")
    return StoreRegion(storage).bucket("test")
