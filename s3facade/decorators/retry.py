"""Retry decorators: re-attempt operations that fail transiently."""

import time
from dataclasses import dataclass
from typing import BinaryIO, Callable, TypeVar

from loguru import logger

from s3facade.errors import is_transient as transient_by_kind
from s3facade.facade import Bucket, Ocket, Region
from s3facade.listing import Listing
from s3facade.storage.base import Metadata

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded re-attempt strategy with exponential backoff.

    ``attempts`` is the total number of calls, first one included.
    """

    attempts: int = 3
    backoff_seconds: float = 1.0
    is_transient: Callable[[BaseException], bool] = transient_by_kind
    sleep: Callable[[float], None] = time.sleep

    def __post_init__(self) -> None:
        if self.attempts < 1:
            raise ValueError(f"attempts must be at least 1, got {self.attempts}")

    def call(self, func: Callable[[], T], what: str) -> T:
        attempt = 1
        while True:
            try:
                return func()
            except Exception as e:
                if attempt >= self.attempts or not self.is_transient(e):
                    raise
                wait_time = self.backoff_seconds * 2 ** (attempt - 1)
                logger.warning(
                    f"[RETRY] {what} failed: {e}, retrying in {wait_time}s "
                    f"(attempt {attempt}/{self.attempts})..."
                )
                self.sleep(wait_time)
                attempt += 1


class RetryRegion(Region):
    def __init__(self, origin: Region, policy: RetryPolicy | None = None):
        self.origin = origin
        self.policy = policy or RetryPolicy()

    @property
    def handle(self) -> object:
        return self.origin.handle

    def bucket(self, name: str) -> "RetryBucket":
        return RetryBucket(self.origin.bucket(name), self.policy)

    def __str__(self) -> str:
        return str(self.origin)


class RetryBucket(Bucket):
    def __init__(self, origin: Bucket, policy: RetryPolicy | None = None):
        self.origin = origin
        self.policy = policy or RetryPolicy()

    @property
    def region(self) -> RetryRegion:
        return RetryRegion(self.origin.region, self.policy)

    @property
    def name(self) -> str:
        return self.origin.name

    def ocket(self, key: str) -> "RetryOcket":
        return RetryOcket(self.origin.ocket(key), self.policy)

    def exists(self) -> bool:
        return self.policy.call(self.origin.exists, f"exists() of bucket '{self.name}'")

    def remove(self, key: str) -> None:
        self.policy.call(
            lambda: self.origin.remove(key), f"remove('{key}') in bucket '{self.name}'"
        )

    def list(self, prefix: str = "") -> "RetryListing":
        return RetryListing(self.origin.list(prefix), self.policy)


class RetryOcket(Ocket):
    def __init__(self, origin: Ocket, policy: RetryPolicy | None = None):
        self.origin = origin
        self.policy = policy or RetryPolicy()

    @property
    def bucket(self) -> RetryBucket:
        return RetryBucket(self.origin.bucket, self.policy)

    @property
    def key(self) -> str:
        return self.origin.key

    def meta(self) -> Metadata:
        return self.policy.call(self.origin.meta, f"meta() of '{self.key}'")

    def exists(self) -> bool:
        return self.policy.call(self.origin.exists, f"exists() of '{self.key}'")

    def read(self, sink: BinaryIO) -> None:
        # Drop whatever a failed attempt managed to write
        position = sink.tell() if sink.seekable() else None

        def attempt() -> None:
            if position is not None:
                sink.seek(position)
                sink.truncate()
            self.origin.read(sink)

        self.policy.call(attempt, f"read() of '{self.key}'")

    def write(self, source: BinaryIO, meta: Metadata) -> None:
        # Rewind before every attempt so each one sends the same payload
        position = source.tell() if source.seekable() else None

        def attempt() -> None:
            if position is not None:
                source.seek(position)
            self.origin.write(source, meta)

        self.policy.call(attempt, f"write() of '{self.key}'")


class RetryListing(Listing):
    """Each has_next()/next() may fetch a page, so each is retried on its own."""

    def __init__(self, origin: Listing, policy: RetryPolicy | None = None):
        self.origin = origin
        self.policy = policy or RetryPolicy()

    def has_next(self) -> bool:
        return self.policy.call(self.origin.has_next, "listing has_next()")

    def __next__(self) -> str:
        return self.policy.call(self.origin.__next__, "listing next()")
