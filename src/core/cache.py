"""Redis-backed cache for provider lookups."""
import json
from typing import Any, Optional

from redis.asyncio import Redis

from .logger import LoggerService
from .settings import Settings


class RedisClient:
    """JSON cache over Redis. When redis is None (ENABLE_CACHE=False), all ops are no-op."""

    def __init__(
        self,
        redis: Optional[Redis],
        logger: LoggerService,
        settings: Settings,
    ):
        """Initialize Redis client.

        Args:
            redis: Redis connection, or None when ENABLE_CACHE is False (stub mode).
            logger: Logger service instance.
            settings: Settings instance.
        """
        self.redis = redis
        self.settings = settings
        self.logger = logger.get_logger(__name__)
        if redis is None:
            self.logger.debug("RedisClient initialized (Redis disabled, stub mode)")
        else:
            self.logger.debug("RedisClient initialized")

    @property
    def enabled(self) -> bool:
        return self.redis is not None

    def _get_cache_key(self, key: str) -> str:
        return f"{self.settings.REDIS_PREFIX}:{self.settings.CACHE_PREFIX}:{key}"

    async def cache_get(self, key: str) -> Optional[Any]:
        """Get a cached value.

        Args:
            key: Cache key without prefix.

        Returns:
            Decoded value, or None on a miss (or when Redis is disabled).
        """
        if self.redis is None:
            return None
        full_key = self._get_cache_key(key)
        value = await self.redis.get(full_key)
        if value is None:
            self.logger.debug("Cache miss", extra={"cache_key": full_key})
            return None
        self.logger.debug("Cache hit", extra={"cache_key": full_key})
        return json.loads(value)

    async def cache_set(
        self,
        key: str,
        value: Any,
        expire: Optional[int] = None,
    ) -> None:
        """Store a JSON-serializable value.

        Args:
            key: Cache key without prefix.
            value: Value to store.
            expire: Expiration time in seconds, defaults to CACHE_TTL.
        """
        if self.redis is None:
            return
        full_key = self._get_cache_key(key)
        await self.redis.set(
            full_key,
            json.dumps(value),
            ex=expire or self.settings.CACHE_TTL,
        )
        self.logger.debug("Cached value", extra={"cache_key": full_key})

    async def cache_delete(self, key: str) -> None:
        if self.redis is None:
            return
        await self.redis.delete(self._get_cache_key(key))

    async def ping(self) -> None:
        """Ping Redis to ensure it is reachable. No-op when Redis disabled."""
        if self.redis is None:
            return
        await self.redis.ping()
        self.logger.debug("Redis is reachable")

    async def close(self) -> None:
        """Close the Redis connection."""
        if self.redis is not None:
            await self.redis.aclose()
