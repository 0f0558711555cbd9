"""Decorator stacks compare, hash and sort exactly like the adapter they wrap."""

import io
from typing import Callable

import pytest

from s3facade import Bucket, EmptyOcket, Metadata, Ocket, StoreRegion, TextOcket
from s3facade.decorators import CachedBucket, PrefixedBucket, RetryBucket, RetryPolicy
from s3facade.storage import MemoryStorage

Wrap = Callable[[Bucket], Bucket]

STACKS: dict[str, list[Wrap]] = {
    "bare": [],
    "retry": [RetryBucket],
    "cache": [CachedBucket],
    "cache-retry": [RetryBucket, CachedBucket],
    "retry-cache": [CachedBucket, RetryBucket],
    "deep": [RetryBucket, CachedBucket, RetryBucket, CachedBucket, CachedBucket, RetryBucket],
    "prefix-empty": [lambda b: PrefixedBucket(b, ""), CachedBucket],
}


def stack(bucket: Bucket, layers: list[Wrap]) -> Bucket:
    for layer in layers:
        bucket = layer(bucket)
    return bucket


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.mark.parametrize("layers", STACKS.values(), ids=STACKS.keys())
def test_bucket_identity(storage: MemoryStorage, layers: list[Wrap]) -> None:
    region = StoreRegion(storage)
    plain = region.bucket("beta")
    wrapped = stack(region.bucket("beta"), layers)

    assert wrapped == plain
    assert plain == wrapped
    assert hash(wrapped) == hash(plain)
    assert wrapped != region.bucket("gamma")
    assert wrapped < region.bucket("gamma")
    assert wrapped > region.bucket("alpha")
    assert wrapped.region == plain.region


@pytest.mark.parametrize("layers", STACKS.values(), ids=STACKS.keys())
def test_ocket_identity(storage: MemoryStorage, layers: list[Wrap]) -> None:
    region = StoreRegion(storage)
    plain = region.bucket("test").ocket("m")
    wrapped = stack(region.bucket("test"), layers).ocket("m")

    assert wrapped == plain
    assert plain == wrapped
    assert hash(wrapped) == hash(plain)
    assert wrapped.bucket == plain.bucket
    assert sorted([region.bucket("test").ocket("z"), wrapped, region.bucket("test").ocket("a")]) == [
        region.bucket("test").ocket("a"),
        plain,
        region.bucket("test").ocket("z"),
    ]


def test_cache_does_not_affect_equality(storage: MemoryStorage) -> None:
    region = StoreRegion(storage)
    cold = CachedBucket(region.bucket("test")).ocket("k")
    warm = CachedBucket(region.bucket("test")).ocket("k")
    warm.write(io.BytesIO(b"data"), Metadata())
    warm.read(io.BytesIO())
    assert cold == warm
    assert len({cold, warm, region.bucket("test").ocket("k")}) == 1


def test_ockets_in_other_buckets_differ(storage: MemoryStorage) -> None:
    region = StoreRegion(storage)
    assert region.bucket("one").ocket("k") != region.bucket("two").ocket("k")


def test_regions_differ_by_backend() -> None:
    first, second = MemoryStorage(), MemoryStorage()
    assert StoreRegion(first).bucket("b") != StoreRegion(second).bucket("b")
    retried = RetryBucket(StoreRegion(first).bucket("b"), RetryPolicy())
    assert retried.region == StoreRegion(first)


def test_prefixed_ocket_is_the_origin_ocket(storage: MemoryStorage) -> None:
    bucket = StoreRegion(storage).bucket("test")
    ocket: Ocket = PrefixedBucket(CachedBucket(bucket), "a/").ocket("b")
    assert ocket == bucket.ocket("a/b")
    assert str(ocket) == "a/b"


def test_empty_ocket_only_matches_empty_ockets(storage: MemoryStorage) -> None:
    named_empty = StoreRegion(storage).bucket("test").ocket("empty")
    assert named_empty != EmptyOcket()
    assert EmptyOcket() != named_empty
    assert len({named_empty, EmptyOcket(), EmptyOcket()}) == 2

    wrapped = TextOcket(EmptyOcket())
    assert wrapped == EmptyOcket()
    assert hash(wrapped) == hash(EmptyOcket())
