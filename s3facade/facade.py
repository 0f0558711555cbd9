"""The three facade contracts: Region, Bucket and Ocket.

Identity, equality, hashing and ordering are defined here once, in terms
of the ``handle``, ``region``, ``name``, ``bucket`` and ``key`` properties.
Decorators forward those properties to the object they wrap, so every
stack compares exactly like the adapter at its bottom.
"""

from abc import ABC, abstractmethod
from typing import BinaryIO

from s3facade.errors import ErrorKind, StorageError
from s3facade.listing import Listing
from s3facade.storage.base import Metadata


class Region(ABC):
    """Access point bound to one backend; a factory of buckets."""

    @property
    @abstractmethod
    def handle(self) -> object:
        """The backend this region talks to."""

    @abstractmethod
    def bucket(self, name: str) -> "Bucket":
        """Get a bucket. No I/O happens until it is used."""

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Region):
            return NotImplemented
        return self.handle == other.handle

    def __hash__(self) -> int:
        return hash(self.handle)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.handle!r})"


class Bucket(ABC):
    """Named set of ockets within a region, ordered by name."""

    @property
    @abstractmethod
    def region(self) -> Region:
        ...

    @property
    @abstractmethod
    def name(self) -> str:
        ...

    @abstractmethod
    def ocket(self, key: str) -> "Ocket":
        """Get an object handle. No I/O happens until it is used."""

    @abstractmethod
    def exists(self) -> bool:
        ...

    @abstractmethod
    def remove(self, key: str) -> None:
        """Delete an object from the bucket."""

    @abstractmethod
    def list(self, prefix: str = "") -> Listing:
        """List keys starting with prefix.

        Never fails by itself; backend failures surface while iterating.
        """

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Bucket):
            return NotImplemented
        return self.name == other.name and self.region == other.region

    def __hash__(self) -> int:
        return hash((self.region, self.name))

    def __lt__(self, other: "Bucket") -> bool:
        if not isinstance(other, Bucket):
            return NotImplemented
        return self.name < other.name

    def __le__(self, other: "Bucket") -> bool:
        if not isinstance(other, Bucket):
            return NotImplemented
        return self.name <= other.name

    def __gt__(self, other: "Bucket") -> bool:
        if not isinstance(other, Bucket):
            return NotImplemented
        return self.name > other.name

    def __ge__(self, other: "Bucket") -> bool:
        if not isinstance(other, Bucket):
            return NotImplemented
        return self.name >= other.name

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


class Ocket(ABC):
    """Object addressed by (bucket, key), ordered by key.

    Holds no content; every operation goes to the backend.
    """

    @property
    @abstractmethod
    def bucket(self) -> Bucket:
        ...

    @property
    @abstractmethod
    def key(self) -> str:
        ...

    @abstractmethod
    def meta(self) -> Metadata:
        """Object metadata. Raises NOT_FOUND if the object doesn't exist."""

    @abstractmethod
    def exists(self) -> bool:
        """Check whether an object with exactly this key exists."""

    @abstractmethod
    def read(self, sink: BinaryIO) -> None:
        """Write the whole content to sink. Raises NOT_FOUND if absent."""

    @abstractmethod
    def write(self, source: BinaryIO, meta: Metadata) -> None:
        """Replace the content with everything readable from source."""

    def _identity(self) -> tuple["Bucket | None", str]:
        # Ockets without a bucket only match each other
        try:
            return self.bucket, self.key
        except StorageError as e:
            if e.kind is not ErrorKind.ILLEGAL_USAGE:
                raise
            return None, self.key

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Ocket):
            return NotImplemented
        return self.key == other.key and self._identity() == other._identity()

    def __hash__(self) -> int:
        return hash(self._identity())

    def __lt__(self, other: "Ocket") -> bool:
        if not isinstance(other, Ocket):
            return NotImplemented
        return self.key < other.key

    def __le__(self, other: "Ocket") -> bool:
        if not isinstance(other, Ocket):
            return NotImplemented
        return self.key <= other.key

    def __gt__(self, other: "Ocket") -> bool:
        if not isinstance(other, Ocket):
            return NotImplemented
        return self.key > other.key

    def __ge__(self, other: "Ocket") -> bool:
        if not isinstance(other, Ocket):
            return NotImplemented
        return self.key >= other.key

    def __str__(self) -> str:
        return self.key

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.key!r})"
