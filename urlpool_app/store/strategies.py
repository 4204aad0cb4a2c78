"""
Key-value store strategies using Strategy Pattern.

Allows switching between different key-value backends:
- Redis: Production (shared between all app processes)
- In-Memory: Development/testing

The URL pool needs only three primitives: get, put and a prefix listing
capped at MAX_LIST_KEYS keys. There is no secondary index and no
random access by offset, so the pool shards its keys to stay under the cap.
"""

import re
import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Set

from redis.exceptions import RedisError

from urlpool_app.exceptions import StoreError

logger = logging.getLogger(__name__)

MAX_LIST_KEYS = 1000  # Hard cap on keys returned by a single listing call


class KVStoreStrategy(ABC):
    """
    Abstract base class for key-value store strategies.

    All methods are async because store operations involve I/O
    (network for Redis). Failures are raised as StoreError, never
    swallowed: the caller decides what the request returns.
    """

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """
        Get value by key.

        Args:
            key: Store key

        Returns:
            Stored value or None if the key is absent
        """
        pass

    @abstractmethod
    async def put(self, key: str, value: str) -> None:
        """
        Write value under key (last write wins).

        Args:
            key: Store key
            value: Value to store
        """
        pass

    @abstractmethod
    async def list_keys(self, prefix: str, limit: int = MAX_LIST_KEYS) -> List[str]:
        """
        List keys starting with prefix.

        Args:
            prefix: Key prefix to match
            limit: Maximum number of keys to return (capped at MAX_LIST_KEYS)

        Returns:
            Up to `limit` matching keys, sorted
        """
        pass

    async def close(self) -> None:
        """Release backend resources (no-op by default)"""
        return None


class RedisKVStore(KVStoreStrategy):
    """
    Redis implementation with async operations (redis.asyncio).

    - Shared between all app processes
    - Per-key last-write-wins, no cross-key transactions
    - Listing walks SCAN with a MATCH pattern and stops at the limit

    SCAN MATCH filters server-side after walking the keyspace, so one
    listing costs O(total keys), including reverse-lookup entries and
    every other shard. SCAN may also yield the same key more than once;
    listing de-duplicates before applying the limit.
    """

    _GLOB_SPECIAL = re.compile(r"([*?\[\]\\])")

    def __init__(self, redis_client):
        """
        Initialize Redis store.

        Args:
            redis_client: redis.asyncio.Redis instance (decode_responses=True)
        """
        self.redis = redis_client

    async def get(self, key: str) -> Optional[str]:
        try:
            return await self.redis.get(key)
        except RedisError as e:
            raise StoreError(f"Redis get failed for {key!r}: {e}") from e

    async def put(self, key: str, value: str) -> None:
        try:
            await self.redis.set(key, value)
        except RedisError as e:
            raise StoreError(f"Redis set failed for {key!r}: {e}") from e

    async def list_keys(self, prefix: str, limit: int = MAX_LIST_KEYS) -> List[str]:
        limit = min(limit, MAX_LIST_KEYS)
        pattern = self._GLOB_SPECIAL.sub(r"\\\1", prefix) + "*"
        keys: Set[str] = set()
        try:
            async for key in self.redis.scan_iter(match=pattern, count=limit):
                keys.add(key)
                if len(keys) >= limit:
                    break
        except RedisError as e:
            raise StoreError(f"Redis scan failed for prefix {prefix!r}: {e}") from e
        return sorted(keys)

    async def close(self) -> None:
        await self.redis.aclose()


class InMemoryKVStore(KVStoreStrategy):
    """
    In-memory store implementation using Python dict.

    Pros:
    - Very fast (no network overhead)
    - No external dependencies
    - Good for development and testing

    Cons:
    - Not shared between processes
    - Lost on restart

    Note: Async for interface consistency, but operations are instant.
    """

    def __init__(self, data: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(data or {})

    async def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    async def put(self, key: str, value: str) -> None:
        self._data[key] = value

    async def list_keys(self, prefix: str, limit: int = MAX_LIST_KEYS) -> List[str]:
        limit = min(limit, MAX_LIST_KEYS)
        return sorted(key for key in self._data if key.startswith(prefix))[:limit]

    def __len__(self) -> int:
        """Number of stored keys (not part of KVStoreStrategy; used by tests)"""
        return len(self._data)
