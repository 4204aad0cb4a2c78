"""
Key-value store module for the URL pool.
Implements Strategy Pattern for flexible store backends.
"""

from .strategies import KVStoreStrategy, RedisKVStore, InMemoryKVStore, MAX_LIST_KEYS
from .factory import KVStoreFactory, KVStoreBackend

__all__ = [
    "KVStoreStrategy",
    "RedisKVStore",
    "InMemoryKVStore",
    "MAX_LIST_KEYS",
    "KVStoreFactory",
    "KVStoreBackend",
]
