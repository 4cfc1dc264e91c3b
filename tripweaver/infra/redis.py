"""Redis configuration and the optional persistent photo store."""

import json
import logging

from redis.asyncio import ConnectionPool, Redis
from redis.exceptions import RedisError

from tripweaver.core.config import settings
from tripweaver.domains.itinerary.schemas import PhotoResult

logger = logging.getLogger(__name__)

# Redis connection pool
redis_pool: ConnectionPool | None = None
redis_client: Redis | None = None


async def init_redis() -> Redis:
    """Initialize Redis connection pool and client."""
    global redis_pool, redis_client

    redis_pool = ConnectionPool.from_url(
        str(settings.REDIS_URL),
        max_connections=settings.REDIS_MAX_CONNECTIONS,
        decode_responses=True,
    )
    redis_client = Redis(connection_pool=redis_pool)

    # Test connection
    await redis_client.ping()

    return redis_client


async def get_redis() -> Redis:
    """Get Redis client instance."""
    if redis_client is None:
        return await init_redis()
    return redis_client


async def close_redis() -> None:
    """Close Redis connections."""
    global redis_pool, redis_client

    if redis_client:
        await redis_client.aclose()
        redis_client = None

    if redis_pool:
        await redis_pool.disconnect()
        redis_pool = None


class PhotoCacheStore:
    """
    Persistent photo cache shared across processes.

    Sits behind the in-process EnrichmentCache. Redis failures are logged
    and read as misses; the photo waterfall never depends on Redis.
    """

    KEY_PREFIX = "photo"

    def __init__(self, redis: Redis, ttl: int | None = None) -> None:
        self.redis = redis
        self.default_ttl = ttl or settings.REDIS_DEFAULT_TTL

    def _key(self, key: str) -> str:
        return f"{self.KEY_PREFIX}:{key}"

    async def get_photo(self, key: str) -> PhotoResult | None:
        """Get a cached photo."""
        try:
            value = await self.redis.get(self._key(key))
        except RedisError as e:
            logger.warning(f"Photo store read failed for '{key}': {e}")
            return None
        if not value:
            return None
        try:
            return PhotoResult.model_validate(json.loads(value))
        except ValueError as e:
            logger.warning(f"Discarding corrupt photo store entry '{key}': {e}")
            return None

    async def set_photo(self, key: str, photo: PhotoResult, ttl: int | None = None) -> bool:
        """Store a photo with optional TTL."""
        try:
            return bool(
                await self.redis.set(
                    self._key(key),
                    photo.model_dump_json(),
                    ex=ttl or self.default_ttl,
                )
            )
        except RedisError as e:
            logger.warning(f"Photo store write failed for '{key}': {e}")
            return False
