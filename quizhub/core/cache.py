"""
Cache management using Redis
Provides caching utilities with fallback when Redis is unavailable
"""

import asyncio
import json
import logging
from typing import Any, Optional

import redis.asyncio as redis
from fastapi import Request
from redis.exceptions import ConnectionError, RedisError

from quizhub.core.config import settings

logger = logging.getLogger(__name__)

HOMEPAGE_CONTENT_KEY = "quizhub:homepage:content"
CATEGORIES_KEY = "quizhub:question-sets:categories"


class CacheManager:
    """
    Redis cache manager with automatic fallback

    When Redis is disabled or unreachable every read misses and every write
    is a no-op, so callers never need to branch on availability.
    """

    def __init__(self, url: Optional[str] = None, enabled: Optional[bool] = None):
        self.url = url or settings.get_redis_url()
        self.enabled = settings.REDIS_ENABLED if enabled is None else enabled
        self.redis_client: Optional[redis.Redis] = None
        self.connected = False
        self._max_connection_attempts = 3

    async def connect(self) -> bool:
        """Connect to Redis, retrying a few times before giving up"""
        if not self.enabled:
            logger.info("Redis caching is disabled")
            return False

        if self.connected:
            return True

        for attempt in range(1, self._max_connection_attempts + 1):
            try:
                self.redis_client = redis.from_url(self.url, decode_responses=True)
                await self.redis_client.ping()
                self.connected = True
                logger.info("Connected to Redis successfully")
                return True
            except (RedisError, ConnectionError) as e:
                logger.warning(
                    f"Failed to connect to Redis (attempt {attempt}/{self._max_connection_attempts}): {e}"
                )
                if attempt < self._max_connection_attempts:
                    await asyncio.sleep(1)

        logger.error("Max Redis connection attempts reached. Cache will be disabled.")
        self.connected = False
        return False

    async def disconnect(self):
        """Disconnect from Redis"""
        if self.redis_client:
            await self.redis_client.aclose()
            self.connected = False
            logger.info("Disconnected from Redis")

    async def get(self, key: str) -> Optional[Any]:
        """Get a JSON value from cache; None on miss or when Redis is unavailable"""
        if not self.connected:
            return None

        try:
            value = await self.redis_client.get(key)
        except (RedisError, ConnectionError) as e:
            logger.error(f"Redis get error for key {key}: {e}")
            self.connected = False
            return None

        if value is None:
            return None
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            return value

    async def set(self, key: str, value: Any, expire: Optional[int] = None) -> bool:
        """Store a JSON-serializable value with a TTL"""
        if not self.connected:
            return False

        try:
            await self.redis_client.setex(key, expire or settings.CACHE_TTL, json.dumps(value, default=str))
            return True
        except (RedisError, ConnectionError) as e:
            logger.error(f"Redis set error for key {key}: {e}")
            self.connected = False
            return False

    async def delete(self, *keys: str) -> bool:
        """Delete keys from cache"""
        if not self.connected or not keys:
            return False

        try:
            await self.redis_client.delete(*keys)
            return True
        except (RedisError, ConnectionError) as e:
            logger.error(f"Redis delete error for keys {keys}: {e}")
            self.connected = False
            return False


def get_cache(request: Request) -> CacheManager:
    """Dependency returning the application's cache manager"""
    return request.app.state.cache
