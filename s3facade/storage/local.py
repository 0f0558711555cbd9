"""Local filesystem storage backend."""

import hashlib
import mimetypes
import shutil
from datetime import datetime, timezone
from pathlib import Path
from typing import BinaryIO, Iterator

from s3facade.errors import StorageError
from s3facade.storage.base import Metadata, Page

CHUNK_SIZE = 64 * 1024


class LocalStorage:
    """Storage backend using local filesystem.

    Bucket ``b`` and key ``k`` live at ``base_path/b/k``. Metadata passed on
    write is not persisted; it is derived from the file on every head().
    """

    def __init__(self, base_path: str | Path, page_size: int = 1000):
        self.base_path = Path(base_path)
        self.base_path.mkdir(parents=True, exist_ok=True)
        self.page_size = page_size
        self.name = f"local filesystem ({self.base_path.absolute()})"

    def __repr__(self) -> str:
        return f"LocalStorage({str(self.base_path)!r})"

    def _home(self, bucket: str) -> Path:
        if not bucket:
            raise StorageError.illegal("Bucket name can't be empty")
        return self.base_path / bucket

    def _resolve(self, bucket: str, key: str) -> Path:
        """Resolve a key to a full path inside its bucket directory."""
        home = self._home(bucket)
        if not key:
            raise StorageError.illegal("Ocket name can't be empty")
        # Every segment must name a real file or directory under the bucket
        if any(part in ("", ".", "..") for part in key.split("/")):
            raise StorageError.illegal(f"Key '{key}' can't be stored as a file")
        return home / key

    def head(self, bucket: str, key: str) -> Metadata:
        path = self._resolve(bucket, key)
        if not path.is_file():
            raise StorageError.not_found(f"ocket '{key}' not found in '{bucket}'")
        try:
            stat = path.stat()
            digest = hashlib.md5()
            with path.open("rb") as f:
                for chunk in iter(lambda: f.read(CHUNK_SIZE), b""):
                    digest.update(chunk)
        except OSError as e:
            raise StorageError.permanent(f"can't stat '{path}': {e}") from e
        return Metadata(
            content_type=mimetypes.guess_type(path.name)[0],
            content_length=stat.st_size,
            last_modified=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
            etag=digest.hexdigest(),
        )

    def exists(self, bucket: str, key: str) -> bool:
        return self._resolve(bucket, key).is_file()

    def get(self, bucket: str, key: str) -> Iterator[bytes]:
        path = self._resolve(bucket, key)
        try:
            handle = path.open("rb")
        except (FileNotFoundError, IsADirectoryError, NotADirectoryError) as e:
            raise StorageError.not_found(f"ocket '{key}' not found in '{bucket}'") from e
        except OSError as e:
            raise StorageError.permanent(f"can't read '{path}': {e}") from e
        return _read_chunks(handle)

    def put(self, bucket: str, key: str, source: BinaryIO, meta: Metadata) -> None:
        """Save content to a file."""
        path = self._resolve(bucket, key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with path.open("wb") as f:
                shutil.copyfileobj(source, f)
        except OSError as e:
            raise StorageError.permanent(f"can't write '{path}': {e}") from e

    def delete(self, bucket: str, key: str) -> None:
        """Delete a file and any directories it leaves empty."""
        path = self._resolve(bucket, key)
        try:
            path.unlink()
        except (FileNotFoundError, IsADirectoryError) as e:
            raise StorageError.not_found(f"ocket '{key}' not found in '{bucket}'") from e
        except OSError as e:
            raise StorageError.permanent(f"can't delete '{path}': {e}") from e

        home = self._home(bucket)
        parent = path.parent
        while parent != home and not any(parent.iterdir()):
            parent.rmdir()
            parent = parent.parent

    def list_page(self, bucket: str, prefix: str, cursor: str | None) -> Page:
        """List files whose key starts with prefix, sorted, after cursor."""
        home = self._home(bucket)
        directory = prefix.rpartition("/")[0]
        # No stored key has such segments, so nothing can match
        if directory and any(part in ("", ".", "..") for part in directory.split("/")):
            return Page()
        search_path = home / directory
        if not search_path.is_dir():
            return Page()
        if not search_path.resolve().is_relative_to(home.resolve()):
            return Page()

        keys = []
        for path in search_path.rglob("*"):
            if not path.is_file():
                continue
            key = path.relative_to(home).as_posix()
            if key.startswith(prefix) and (cursor is None or key > cursor):
                keys.append(key)
        keys.sort()

        if len(keys) > self.page_size:
            page = keys[: self.page_size]
            return Page(keys=page, cursor=page[-1], truncated=True)
        return Page(keys=keys)

    def bucket_exists(self, bucket: str) -> bool:
        return self._home(bucket).is_dir()

    def create_bucket(self, bucket: str) -> None:
        self._home(bucket).mkdir(parents=True, exist_ok=True)

    def delete_bucket(self, bucket: str) -> None:
        home = self._home(bucket)
        if not home.is_dir():
            raise StorageError.not_found(f"bucket '{bucket}' not found")
        shutil.rmtree(home)


def _read_chunks(handle: BinaryIO) -> Iterator[bytes]:
    with handle:
        for chunk in iter(lambda: handle.read(CHUNK_SIZE), b""):
            yield chunk
