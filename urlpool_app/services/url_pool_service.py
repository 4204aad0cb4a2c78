import time
import random
import logging
from typing import Callable, Optional
from urllib.parse import quote

from urlpool_app.schemas.counter import CounterState
from urlpool_app.services.sampler import Sampler
from urlpool_app.services.shard_counter import ShardCounter, entry_key
from urlpool_app.services.validation import validate_submitted_url
from urlpool_app.store.strategies import KVStoreStrategy

logger = logging.getLogger(__name__)

REVERSE_LOOKUP_PREFIX = "urlKey"

# Characters encodeURIComponent leaves unescaped (besides alphanumerics)
_URI_COMPONENT_SAFE = "-_.!~*'()"


def reverse_lookup_key(url: str) -> str:
    """Key under which a URL's entry key is recorded (for a future delete path)"""
    return f"{REVERSE_LOOKUP_PREFIX}.{quote(url, safe=_URI_COMPONENT_SAFE)}"


def _now_ms() -> int:
    return int(time.time() * 1000)


class URLPoolService:
    """
    URL pool service with the key-value store injected.

    This follows the Dependency Injection pattern:
    - The store strategy is injected (not created internally)
    - Easy to test (inject an in-memory store)
    - Clock and random generator are injectable for deterministic tests

    The service keeps no state between calls; counter values always come
    from the store.
    """

    def __init__(
        self,
        store: KVStoreStrategy,
        clock: Optional[Callable[[], int]] = None,
        rng: Optional[random.Random] = None
    ):
        """
        Initialize URL pool service with dependencies.

        Args:
            store: Key-value store strategy
            clock: Returns the current time in milliseconds (default: wall clock)
            rng: Random generator for sampling (default: module-level random)
        """
        self.store = store
        self.clock = clock or _now_ms
        self.counter = ShardCounter(store)
        self.sampler = Sampler(store, rng=rng)

    async def submit(self, raw_url: str) -> str:
        """
        Add a URL to the pool.

        Process (writes are ordered, not atomic):
        1. Validate the URL (nothing is written on failure)
        2. Read counter state
        3. Write the URL entry into the current shard
        4. Write the reverse-lookup entry
        5. Advance the counter (may roll over to a new shard)

        A failure after step 3 leaves an uncounted entry behind; it is not
        repaired.

        Returns:
            Key of the new URL entry

        Raises:
            InvalidURLError: URL rejected by validation
            StoreError: a store read or write failed
        """
        url = validate_submitted_url(raw_url)

        state = await self.counter.load_state()
        key = entry_key(state.url_prefix, self.clock())

        await self.store.put(key, url)
        await self.store.put(reverse_lookup_key(url), key)

        new_state = await self.counter.record_submission(state)
        logger.debug(
            "Stored %s (shard %d now %d entries)",
            key, new_state.url_prefix, new_state.url_count,
        )
        return key

    async def get_random_url(self) -> Optional[str]:
        """
        Pick a random URL from the pool.

        Returns:
            The URL, or None when the pool has nothing to return
        """
        state = await self.counter.load_state()
        return await self.sampler.sample(state)

    async def get_stats(self) -> CounterState:
        """Current counter state (read-only)"""
        return await self.counter.load_state()
