"""Key-prefix scoping for buckets and their listings."""

from s3facade.facade import Bucket, Ocket, Region
from s3facade.listing import Listing


class PrefixedBucket(Bucket):
    """Bucket restricted to the keys under a fixed prefix.

    Keys are extended with the prefix on the way in and cut on the way
    out. Example::

        bucket.ocket("a/first.txt"), bucket.ocket("a/b/hello.txt"), ...
        PrefixedBucket(bucket, "a/b/").list("")  # "hello.txt", "f/2.txt"

    A listed key that would be empty after cutting (the prefix's own
    "directory marker") is skipped.
    """

    def __init__(self, origin: Bucket, prefix: str):
        self.origin = origin
        self.prefix = prefix

    @property
    def region(self) -> Region:
        return self.origin.region

    @property
    def name(self) -> str:
        return self.origin.name

    def ocket(self, key: str) -> Ocket:
        return self.origin.ocket(self.prefix + key)

    def exists(self) -> bool:
        return self.origin.exists()

    def remove(self, key: str) -> None:
        self.origin.remove(self.prefix + key)

    def list(self, prefix: str = "") -> "PrefixedListing":
        return PrefixedListing(self.origin.list(self.prefix + prefix), len(self.prefix))


class PrefixedListing(Listing):
    def __init__(self, origin: Listing, cut: int):
        self.origin = origin
        self.cut = cut
        self._head: str | None = None

    def has_next(self) -> bool:
        while self._head is None:
            if not self.origin.has_next():
                return False
            key = next(self.origin)
            name = key if len(key) < self.cut else key[self.cut :]
            if name:
                self._head = name
        return True

    def __next__(self) -> str:
        if not self.has_next():
            raise StopIteration
        head, self._head = self._head, None
        return head
