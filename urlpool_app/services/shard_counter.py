"""
Shard counter for the URL pool.

URL entries are grouped into shards of SHARD_CAPACITY keys so that a single
prefix listing can always return a whole shard. The counter decides which
shard new entries land in and rolls over to a fresh shard when the current
one is full.

State lives only in the key-value store:
- urlPrefix: index of the current (only writable) shard
- urlCount: entries written into the current shard

Every call reads the store again. Nothing is cached between requests.

Concurrency: load_state() and record_submission() are a plain
read-modify-write. Two submissions racing on the same state both write
count + 1, so the stored count can drift below the real shard size. A
count that skips past SHARD_CAPACITY never triggers the rollover
(equality check), letting that shard grow past the cap. Both are accepted.
"""

import asyncio
import logging
from typing import Optional

from urlpool_app.exceptions import CorruptCounterError
from urlpool_app.schemas.counter import CounterState
from urlpool_app.store.strategies import KVStoreStrategy

logger = logging.getLogger(__name__)

SHARD_CAPACITY = 1000

URL_COUNT_KEY = "urlCount"
URL_PREFIX_KEY = "urlPrefix"
ENTRY_KEY_PREFIX = "url"


def entry_key(url_prefix: int, timestamp_ms: int) -> str:
    """Key of a URL entry: url.<shard>.<timestampMillis>"""
    return f"{ENTRY_KEY_PREFIX}.{url_prefix}.{timestamp_ms}"


def shard_prefix(shard_index: int) -> str:
    """Listing prefix for one shard (trailing dot keeps shard 1 away from 10)"""
    return f"{ENTRY_KEY_PREFIX}.{shard_index}."


def _parse_counter(key: str, raw: Optional[str]) -> int:
    # Missing or empty value is the bootstrap case for an empty store
    if not raw:
        return 0
    try:
        value = int(raw)
    except ValueError:
        raise CorruptCounterError(key, raw) from None
    if value < 0:
        raise CorruptCounterError(key, raw)
    return value


class ShardCounter:
    """
    Read and advance the shard counter stored in the key-value store.

    Stateless: holds the store handle only.
    """

    def __init__(self, store: KVStoreStrategy):
        self.store = store

    async def load_state(self) -> CounterState:
        """
        Read urlCount and urlPrefix (concurrently).

        Missing keys default to 0.

        Raises:
            CorruptCounterError: a key holds a non-integer or negative value
            StoreError: the store read failed
        """
        raw_count, raw_prefix = await asyncio.gather(
            self.store.get(URL_COUNT_KEY),
            self.store.get(URL_PREFIX_KEY),
        )
        return CounterState(
            url_count=_parse_counter(URL_COUNT_KEY, raw_count),
            url_prefix=_parse_counter(URL_PREFIX_KEY, raw_prefix),
        )

    async def record_submission(self, state: CounterState) -> CounterState:
        """
        Count one more entry in the current shard.

        Call only after the URL entry and its reverse-lookup entry are written.
        When the incremented count equals SHARD_CAPACITY the shard is closed:
        urlPrefix advances and urlCount resets to 0.

        Args:
            state: Counter state read at the start of the submission

        Returns:
            The state that was written back
        """
        count = state.url_count + 1

        if count == SHARD_CAPACITY:
            next_prefix = state.url_prefix + 1
            await self.store.put(URL_PREFIX_KEY, str(next_prefix))
            await self.store.put(URL_COUNT_KEY, "0")
            logger.info(
                "Shard %d closed at %d entries, rolling over to shard %d",
                state.url_prefix, SHARD_CAPACITY, next_prefix,
            )
            return CounterState(url_count=0, url_prefix=next_prefix)

        await self.store.put(URL_COUNT_KEY, str(count))
        return CounterState(url_count=count, url_prefix=state.url_prefix)
