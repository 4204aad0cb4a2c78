"""
Random URL sampling over the sharded pool.

Two-step draw:
1. Pick a shard with probability proportional to its (estimated) size.
   A target position is drawn over the estimated total and mapped to its
   shard, so each closed shard is picked with weight SHARD_CAPACITY and the
   current shard with weight urlCount. Drawing a shard index uniformly
   instead would favour the sparse current shard.
2. List the chosen shard (never more than MAX_LIST_KEYS keys) and pick one
   key uniformly.

The total is an estimate: every closed shard is assumed to be exactly full.
"""

import random
import logging
from typing import Optional

from urlpool_app.schemas.counter import CounterState
from urlpool_app.services.shard_counter import SHARD_CAPACITY, shard_prefix
from urlpool_app.store.strategies import KVStoreStrategy, MAX_LIST_KEYS

logger = logging.getLogger(__name__)


def estimate_total(url_count: int, url_prefix: int) -> int:
    """
    Estimated number of stored URLs.

    Examples:
        estimate_total(20, 0) -> 20       (one partial shard)
        estimate_total(500, 2) -> 2500    (two full shards + 500)
    """
    return url_prefix * SHARD_CAPACITY + url_count


def draw_uniform(upper: int, rng: Optional[random.Random] = None) -> int:
    """
    Draw an integer in [0, upper).

    Raises:
        TypeError: upper is not an int
        ValueError: upper <= 0
    """
    if isinstance(upper, bool) or not isinstance(upper, int):
        raise TypeError(f"upper bound must be an int, got {type(upper).__name__}")
    if upper <= 0:
        raise ValueError(f"upper bound must be positive, got {upper}")
    return (rng or random).randrange(upper)


def select_shard(total: int, rng: Optional[random.Random] = None) -> int:
    """Shard index for a uniform draw over `total` estimated entries"""
    return draw_uniform(total, rng) // SHARD_CAPACITY


class Sampler:
    """
    Pick one stored URL at (approximately) uniform random.

    Args:
        store: Key-value store holding the URL entries
        rng: Optional random.Random (seed it in tests)
    """

    def __init__(self, store: KVStoreStrategy, rng: Optional[random.Random] = None):
        self.store = store
        self.rng = rng

    async def sample(self, state: CounterState) -> Optional[str]:
        """
        Return a random URL, or None when there is nothing to return.

        None covers an empty pool (estimated total 0), a chosen shard with
        no keys (estimate and store have diverged) and an entry that
        vanished between listing and reading.
        """
        total = estimate_total(state.url_count, state.url_prefix)
        if total <= 0:
            logger.debug("Pool is empty, nothing to sample")
            return None

        target_shard = select_shard(total, self.rng)
        keys = await self.store.list_keys(shard_prefix(target_shard), limit=MAX_LIST_KEYS)
        if not keys:
            logger.debug("Shard %d listed no keys (estimated total %d)", target_shard, total)
            return None

        key = keys[draw_uniform(len(keys), self.rng)]
        logger.debug("Sampled %s from shard %d (%d keys)", key, target_shard, len(keys))
        return await self.store.get(key)
