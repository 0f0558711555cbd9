"""No-op ocket."""

from typing import BinaryIO

from s3facade.errors import StorageError
from s3facade.facade import Bucket, Ocket
from s3facade.storage.base import Metadata


class EmptyOcket(Ocket):
    """Ocket with no content at all.

    The smallest legal implementation of the contract, handy as a default
    value. All empty ockets are equal to each other.
    """

    @property
    def bucket(self) -> Bucket:
        raise StorageError.illegal("An empty ocket has no bucket")

    @property
    def key(self) -> str:
        return "empty"

    def meta(self) -> Metadata:
        return Metadata()

    def exists(self) -> bool:
        return True

    def read(self, sink: BinaryIO) -> None:
        pass

    def write(self, source: BinaryIO, meta: Metadata) -> None:
        pass

    def __lt__(self, other: Ocket) -> bool:
        return False

    def __le__(self, other: Ocket) -> bool:
        return True

    def __gt__(self, other: Ocket) -> bool:
        return False

    def __ge__(self, other: Ocket) -> bool:
        return True
