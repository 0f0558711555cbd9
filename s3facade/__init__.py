"""Facade over S3-style object stores: regions, buckets and ockets."""

from s3facade.adapter import StoreBucket, StoreOcket, StoreRegion
from s3facade.empty import EmptyOcket
from s3facade.errors import ErrorKind, ListingError, StorageError
from s3facade.facade import Bucket, Ocket, Region
from s3facade.listing import ListIterator, Listing
from s3facade.storage import Metadata, Page
from s3facade.text import TextOcket

__all__ = [
    "Bucket",
    "EmptyOcket",
    "ErrorKind",
    "ListIterator",
    "Listing",
    "ListingError",
    "Metadata",
    "Ocket",
    "Page",
    "Region",
    "StorageError",
    "StoreBucket",
    "StoreOcket",
    "StoreRegion",
    "TextOcket",
]
