"""UTF-8 text helpers on top of any ocket."""

import io
from typing import BinaryIO

from s3facade.facade import Bucket, Ocket
from s3facade.storage.base import Metadata


class TextOcket(Ocket):
    """Unicode text ocket with supplementary read/write functions."""

    def __init__(self, origin: Ocket):
        self.origin = origin

    @property
    def bucket(self) -> Bucket:
        return self.origin.bucket

    @property
    def key(self) -> str:
        return self.origin.key

    def meta(self) -> Metadata:
        return self.origin.meta()

    def exists(self) -> bool:
        return self.origin.exists()

    def read(self, sink: BinaryIO) -> None:
        self.origin.read(sink)

    def write(self, source: BinaryIO, meta: Metadata) -> None:
        self.origin.write(source, meta)

    def read_text(self) -> str:
        """Read content as string."""
        buffer = io.BytesIO()
        self.origin.read(buffer)
        return buffer.getvalue().decode("utf-8")

    def write_text(self, text: str, content_type: str = "text/plain") -> None:
        """Write content as string, with a specified content type."""
        data = text.encode("utf-8")
        self.origin.write(
            io.BytesIO(data),
            Metadata(
                content_type=content_type,
                content_length=len(data),
                content_encoding="UTF-8",
            ),
        )
