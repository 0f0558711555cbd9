"""Decorators adding one cross-cutting behavior to a Region, Bucket or Ocket."""

from s3facade.decorators.cached import CachedBucket, CachedOcket, CachedRegion
from s3facade.decorators.prefixed import PrefixedBucket, PrefixedListing
from s3facade.decorators.retry import (
    RetryBucket,
    RetryListing,
    RetryOcket,
    RetryPolicy,
    RetryRegion,
)

__all__ = [
    "CachedBucket",
    "CachedOcket",
    "CachedRegion",
    "PrefixedBucket",
    "PrefixedListing",
    "RetryBucket",
    "RetryListing",
    "RetryOcket",
    "RetryPolicy",
    "RetryRegion",
]
