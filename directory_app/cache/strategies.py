"""
Cache strategies using Strategy Pattern.
Allows switching between cache backends (Redis, In-Memory, Null) for the
tool destination lookups done on every click-through.
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, Optional

logger = logging.getLogger(__name__)


def tool_url_key(tool_id: str) -> str:
    return f"tool:{tool_id}:url"


class CacheStrategy(ABC):
    """
    Abstract base class for cache strategies.

    Methods are async so a network-backed cache never changes the service
    signatures. A cache failure is a miss, never an error for the caller.
    """

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """Return the cached value or None on miss."""

    @abstractmethod
    async def set(self, key: str, value: str, ttl: int = 3600) -> bool:
        """Store value for ttl seconds."""

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Drop key; True if something was removed."""


class RedisCache(CacheStrategy):
    """Shared cache across API processes, used in production."""

    def __init__(self, redis_client):
        self.redis = redis_client

    async def get(self, key: str) -> Optional[str]:
        try:
            value = self.redis.get(key)
            return value.decode("utf-8") if value else None
        except Exception as e:
            logger.warning("Redis get %s failed: %s", key, e)
            return None

    async def set(self, key: str, value: str, ttl: int = 3600) -> bool:
        try:
            return bool(self.redis.setex(key, ttl, value))
        except Exception as e:
            logger.warning("Redis set %s failed: %s", key, e)
            return False

    async def delete(self, key: str) -> bool:
        try:
            return bool(self.redis.delete(key))
        except Exception as e:
            logger.warning("Redis delete %s failed: %s", key, e)
            return False


class InMemoryCache(CacheStrategy):
    """
    Per-process dict cache for development and tests.

    TTL is not enforced; entries live until deleted or the process exits.
    """

    def __init__(self):
        self._cache: Dict[str, str] = {}

    async def get(self, key: str) -> Optional[str]:
        return self._cache.get(key)

    async def set(self, key: str, value: str, ttl: int = 3600) -> bool:
        self._cache[key] = value
        return True

    async def delete(self, key: str) -> bool:
        return self._cache.pop(key, None) is not None


class NullCache(CacheStrategy):
    """Null Object: every lookup misses, every write is dropped."""

    async def get(self, key: str) -> Optional[str]:
        return None

    async def set(self, key: str, value: str, ttl: int = 3600) -> bool:
        return True

    async def delete(self, key: str) -> bool:
        return True
