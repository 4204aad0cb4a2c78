"""
Factory for creating key-value store instances.
Simple, clean factory with singleton caching.
"""

import logging
from enum import Enum

from .strategies import KVStoreStrategy, RedisKVStore, InMemoryKVStore
from urlpool_app.config import settings

logger = logging.getLogger(__name__)


class KVStoreBackend(Enum):
    """Available key-value store backends"""
    REDIS = "redis"
    MEMORY = "memory"


class KVStoreFactory:
    """
    Simple factory for creating key-value store instances.

    Uses Singleton Pattern - creates instance once, reuses it.
    Gets configuration from settings (not passed as parameters).

    The instance holds connections only. Counter values are never
    cached here; every request reads them from the store.
    """

    _instance: KVStoreStrategy = None  # Single cached instance

    @classmethod
    def create(cls, backend: KVStoreBackend) -> KVStoreStrategy:
        """
        Create or return cached store instance.

        Args:
            backend: Type of store backend (from enum)

        Returns:
            Singleton store instance
        """
        if cls._instance is not None:
            return cls._instance

        if backend == KVStoreBackend.REDIS:
            import redis.asyncio as redis

            # Connection is opened lazily on the first command
            redis_client = redis.from_url(
                settings.redis_url,
                encoding="utf-8",
                decode_responses=True,
                socket_connect_timeout=settings.redis_socket_timeout,
                socket_timeout=settings.redis_socket_timeout,
            )
            cls._instance = RedisKVStore(redis_client)
            logger.info("Redis key-value store initialized (%s)", settings.redis_url)

        elif backend == KVStoreBackend.MEMORY:
            cls._instance = InMemoryKVStore()
            logger.info("In-memory key-value store initialized")

        else:
            raise ValueError(f"Unknown store backend: {backend}")

        return cls._instance

    @classmethod
    def clear_instance(cls):
        """Clear cached instance (for testing)"""
        cls._instance = None
