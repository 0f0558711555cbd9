"""Build a ready-to-use decorator stack from configuration.

The stack is, from the backend outwards: adapter, Retry, Cache and, for
buckets with a configured prefix, PrefixScope.
"""

from loguru import logger

from s3facade.adapter import StoreRegion
from s3facade.config import FacadeConfig, ProviderConfig
from s3facade.decorators import CachedRegion, PrefixedBucket, RetryPolicy, RetryRegion
from s3facade.facade import Bucket, Region
from s3facade.storage import LocalStorage, MemoryStorage, S3RequestsStorage, StorageBackend


def get_storage(provider: ProviderConfig, config: FacadeConfig) -> StorageBackend:
    """Get storage backend based on provider configuration."""
    provider.validate()
    if provider.type == "s3":
        return S3RequestsStorage(
            endpoint=provider.endpoint,
            access_key=provider.access_key,
            secret_key=provider.secret_key,
            region=provider.region,
            timeout=config.timeout_seconds,
            page_size=config.page_size,
        )
    elif provider.type == "local":
        return LocalStorage(base_path=provider.base_path, page_size=config.page_size)
    else:
        return MemoryStorage(page_size=config.page_size)


def get_region(provider: ProviderConfig, config: FacadeConfig) -> Region:
    """Get a region for the provider, wrapped as the configuration asks."""
    storage = get_storage(provider, config)
    region: Region = StoreRegion(storage)
    if config.max_retries > 0:
        region = RetryRegion(
            region,
            RetryPolicy(attempts=config.max_retries, backoff_seconds=config.backoff_seconds),
        )
    if config.cache:
        region = CachedRegion(region)
    logger.debug(f"Provider '{provider.name}' ready: {storage.name}")
    return region


def get_bucket(provider: ProviderConfig, config: FacadeConfig) -> Bucket:
    """Get the provider's configured bucket, scoped to its prefix if any."""
    if not provider.bucket:
        raise ValueError(f"Provider '{provider.name}' has no bucket configured")
    bucket = get_region(provider, config).bucket(provider.bucket)
    if provider.prefix:
        bucket = PrefixedBucket(bucket, provider.prefix)
    return bucket
