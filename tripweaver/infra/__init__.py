"""Infrastructure module - Caching and external stores."""

from tripweaver.infra.cache import CacheEntry, EnrichmentCache, normalize_key
from tripweaver.infra.redis import (
    PhotoCacheStore,
    close_redis,
    get_redis,
    init_redis,
)

__all__ = [
    # In-process cache
    "CacheEntry",
    "EnrichmentCache",
    "normalize_key",
    # Redis
    "get_redis",
    "init_redis",
    "close_redis",
    "PhotoCacheStore",
]
