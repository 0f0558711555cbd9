import io
from pathlib import Path

import pytest

from s3facade import Bucket, ErrorKind, ListingError, Metadata, StorageError, StoreRegion
from s3facade.storage import LocalStorage, MemoryStorage


def read_bytes(bucket: Bucket, key: str) -> bytes:
    sink = io.BytesIO()
    bucket.ocket(key).read(sink)
    return sink.getvalue()


@pytest.mark.parametrize(
    "key,data",
    [
        ("hello.txt", b"Hello, World!"),
        ("path/to/key.bin", bytes(range(256)) * 300),
        ("empty.dat", b""),
    ],
)
def test_write_then_read(bucket: Bucket, key: str, data: bytes) -> None:
    bucket.ocket(key).write(io.BytesIO(data), Metadata(content_type="application/octet-stream"))
    assert read_bytes(bucket, key) == data


def test_write_overwrites(bucket: Bucket) -> None:
    ocket = bucket.ocket("a.txt")
    ocket.write(io.BytesIO(b"first version"), Metadata())
    ocket.write(io.BytesIO(b"v2"), Metadata())
    assert read_bytes(bucket, "a.txt") == b"v2"


def test_meta(bucket: Bucket) -> None:
    ocket = bucket.ocket("docs/readme.txt")
    ocket.write(io.BytesIO(b"12345"), Metadata(content_type="text/plain"))
    meta = ocket.meta()
    assert meta.content_length == 5
    assert meta.content_type == "text/plain"
    assert meta.etag == "827ccb0eea8a706c4c34a16891f84e7b"
    assert meta.last_modified is not None


def test_missing_ocket(bucket: Bucket) -> None:
    ocket = bucket.ocket("nope")
    assert not ocket.exists()
    with pytest.raises(StorageError) as excinfo:
        ocket.meta()
    assert excinfo.value.kind is ErrorKind.NOT_FOUND
    with pytest.raises(StorageError) as excinfo:
        ocket.read(io.BytesIO())
    assert excinfo.value.kind is ErrorKind.NOT_FOUND


def test_exists_matches_exact_key(bucket: Bucket) -> None:
    bucket.ocket("abc/def.txt").write(io.BytesIO(b"x"), Metadata())
    assert bucket.ocket("abc/def.txt").exists()
    assert not bucket.ocket("abc/de").exists()


def test_remove(bucket: Bucket) -> None:
    bucket.ocket("a/b/c.txt").write(io.BytesIO(b"x"), Metadata())
    bucket.remove("a/b/c.txt")
    assert not bucket.ocket("a/b/c.txt").exists()
    assert list(bucket.list("")) == []

    with pytest.raises(StorageError) as excinfo:
        bucket.remove("a/b/c.txt")
    assert excinfo.value.kind is ErrorKind.NOT_FOUND


def test_list_with_prefix(bucket: Bucket) -> None:
    for key in ["a/1.txt", "a/2.txt", "a/b/3.txt", "ab.txt", "b/4.txt"]:
        bucket.ocket(key).write(io.BytesIO(key.encode()), Metadata())

    assert list(bucket.list("")) == ["a/1.txt", "a/2.txt", "a/b/3.txt", "ab.txt", "b/4.txt"]
    assert list(bucket.list("a/")) == ["a/1.txt", "a/2.txt", "a/b/3.txt"]
    assert list(bucket.list("a")) == ["a/1.txt", "a/2.txt", "a/b/3.txt", "ab.txt"]
    assert list(bucket.list("c/")) == []


def test_bucket_exists(memory: MemoryStorage, local: LocalStorage) -> None:
    for storage in (memory, local):
        region = StoreRegion(storage)
        assert not region.bucket("fresh").exists()
        storage.create_bucket("fresh")
        assert region.bucket("fresh").exists()
        storage.delete_bucket("fresh")
        assert not region.bucket("fresh").exists()


def test_handles_do_no_io(memory: MemoryStorage) -> None:
    StoreRegion(memory).bucket("ghost").ocket("key")
    assert not memory.bucket_exists("ghost")


@pytest.mark.parametrize("name,key", [("", "key"), ("test", "")])
def test_empty_names_are_illegal(bucket: Bucket, name: str, key: str) -> None:
    ocket = bucket.region.bucket(name).ocket(key)
    with pytest.raises(StorageError) as excinfo:
        ocket.write(io.BytesIO(b"x"), Metadata())
    assert excinfo.value.kind is ErrorKind.ILLEGAL_USAGE


def test_local_rejects_escaping_keys(local: LocalStorage) -> None:
    ocket = StoreRegion(local).bucket("test").ocket("../outside.txt")
    with pytest.raises(StorageError) as excinfo:
        ocket.write(io.BytesIO(b"x"), Metadata())
    assert excinfo.value.kind is ErrorKind.ILLEGAL_USAGE


@pytest.mark.parametrize("prefix", ["/", "//", "//etc/", "a//b", "./a", "../"])
def test_local_listing_stays_inside_bucket(local: LocalStorage, tmp_path: Path, prefix: str) -> None:
    (tmp_path / "outside.txt").write_bytes(b"x")
    bucket = StoreRegion(local).bucket("test")
    bucket.ocket("a/inside.txt").write(io.BytesIO(b"x"), Metadata())
    assert list(bucket.list(prefix)) == []


def test_local_listing_with_absolute_prefix(local: LocalStorage, tmp_path: Path) -> None:
    (tmp_path / "outside.txt").write_bytes(b"x")
    bucket = StoreRegion(local).bucket("test")
    bucket.ocket("inside.txt").write(io.BytesIO(b"x"), Metadata())
    assert list(bucket.list(f"{tmp_path}/")) == []
    assert list(bucket.list("")) == ["inside.txt"]


def test_local_listing_ignores_links_out_of_bucket(local: LocalStorage, tmp_path: Path) -> None:
    outside = tmp_path / "outside"
    outside.mkdir()
    (outside / "secret.txt").write_bytes(b"x")
    local.create_bucket("test")
    (Path(local.base_path) / "test" / "link").symlink_to(outside, target_is_directory=True)
    assert list(StoreRegion(local).bucket("test").list("link/")) == []


def test_local_exists_does_not_read_content(
    local: LocalStorage, monkeypatch: pytest.MonkeyPatch
) -> None:
    bucket = StoreRegion(local).bucket("test")
    bucket.ocket("big.bin").write(io.BytesIO(b"x" * 100_000), Metadata())

    def refuse(*args):
        raise AssertionError("content was read")

    monkeypatch.setattr(local, "head", refuse)
    monkeypatch.setattr(local, "get", refuse)
    assert bucket.ocket("big.bin").exists()
    assert not bucket.ocket("other.bin").exists()


def test_local_layout_and_cleanup(local: LocalStorage) -> None:
    bucket = StoreRegion(local).bucket("test")
    bucket.ocket("x/y/z.json").write(io.BytesIO(b"{}"), Metadata())
    path = Path(local.base_path) / "test" / "x" / "y" / "z.json"
    assert path.read_bytes() == b"{}"
    assert bucket.ocket("x/y/z.json").meta().content_type == "application/json"

    bucket.remove("x/y/z.json")
    assert not (Path(local.base_path) / "test" / "x").exists()
    assert (Path(local.base_path) / "test").is_dir()


def test_local_listing_of_bad_bucket_fails_lazily(local: LocalStorage) -> None:
    listing = StoreRegion(local).bucket("").list("")
    with pytest.raises(ListingError) as excinfo:
        list(listing)
    assert excinfo.value.kind is ErrorKind.ILLEGAL_USAGE
