"""Storage backend protocol definition."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import BinaryIO, Iterator, Protocol


@dataclass(frozen=True)
class Metadata:
    """Object metadata. Every field is optional."""

    content_type: str | None = None
    content_length: int | None = None
    content_encoding: str | None = None
    last_modified: datetime | None = None
    etag: str | None = None


@dataclass(frozen=True)
class Page:
    """One listing fetch: keys in provider order plus continuation state."""

    keys: list[str] = field(default_factory=list)
    cursor: str | None = None
    truncated: bool = False


class StorageBackend(Protocol):
    """Protocol for storage backends (S3-compatible, local filesystem, memory).

    Implementations raise StorageError with the appropriate kind; raw
    provider exceptions never cross this boundary.
    """

    name: str

    def head(self, bucket: str, key: str) -> Metadata:
        """Fetch metadata. Raises NOT_FOUND if the object is absent."""
        ...

    def exists(self, bucket: str, key: str) -> bool:
        """Check for an object with exactly this key, without reading it."""
        ...

    def get(self, bucket: str, key: str) -> Iterator[bytes]:
        """Open the content as a chunk iterator. Raises NOT_FOUND eagerly."""
        ...

    def put(self, bucket: str, key: str, source: BinaryIO, meta: Metadata) -> None:
        """Store the whole content of source, replacing any existing object."""
        ...

    def delete(self, bucket: str, key: str) -> None:
        """Delete an object."""
        ...

    def list_page(self, bucket: str, prefix: str, cursor: str | None) -> Page:
        """Fetch one page of keys starting with prefix."""
        ...

    def bucket_exists(self, bucket: str) -> bool:
        """Check if a bucket exists."""
        ...

    def create_bucket(self, bucket: str) -> None:
        ...

    def delete_bucket(self, bucket: str) -> None:
        ...
