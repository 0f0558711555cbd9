"""Storage backend implementations."""

from s3facade.storage.base import Metadata, Page, StorageBackend
from s3facade.storage.local import LocalStorage
from s3facade.storage.memory import MemoryStorage
from s3facade.storage.s3 import S3RequestsStorage

__all__ = [
    "Metadata",
    "Page",
    "StorageBackend",
    "LocalStorage",
    "MemoryStorage",
    "S3RequestsStorage",
]
