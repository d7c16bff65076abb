"""Single-flight TTL cache for asynchronous directory lookups.

Every lookup for a key that is still fresh gets the *same* pending future,
including one that has not settled yet, so concurrent duplicate requests
coalesce into a single upstream call. Entries are reclaimed only when their
TTL runs out; there is no capacity bound and no explicit invalidation.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Generic, Hashable, TypeVar

logger = logging.getLogger("disclack.cache")

K = TypeVar("K", bound=Hashable)
T = TypeVar("T")


@dataclass
class CacheEntry(Generic[K, T]):
    key: K
    result: "asyncio.Future[T]"
    expires_at: float


class TTLCache(Generic[K, T]):
    """Keyed memoizer with a fixed per-instance TTL.

    Failed lookups stay cached until they expire, like successful ones.
    Pass ``evict_on_failure=True`` to drop them as soon as they fail so the
    next caller retries immediately.
    """

    def __init__(
        self,
        ttl: float = 60.0,
        name: str = "cache",
        evict_on_failure: bool = False,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl = ttl
        self.name = name
        self.evict_on_failure = evict_on_failure
        self._clock = clock
        self._entries: dict[K, CacheEntry[K, T]] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: K) -> bool:
        entry = self._entries.get(key)
        return entry is not None and self._clock() < entry.expires_at

    def lookup(self, key: K, producer: Callable[[K], Awaitable[T]]) -> "asyncio.Future[T]":
        """Return the shared pending result for ``key``, starting it on a miss.

        Must be called from a running event loop. The entry is stored before
        the producer settles.
        """
        now = self._clock()
        entry = self._entries.get(key)
        if entry is not None and now < entry.expires_at:
            return entry.result

        self._sweep(now)
        logger.debug(f"{self.name}: miss for {key!r}")
        result = asyncio.ensure_future(producer(key))
        self._entries[key] = CacheEntry(key=key, result=result, expires_at=now + self.ttl)
        result.add_done_callback(lambda fut: self._settled(key, fut))
        return result

    async def get(self, key: K, producer: Callable[[K], Awaitable[T]]) -> T:
        """Await the shared result for ``key``.

        Cancelling one caller does not cancel the in-flight call for others.
        """
        return await asyncio.shield(self.lookup(key, producer))

    def _settled(self, key: K, fut: "asyncio.Future[T]"):
        if fut.cancelled():
            exc: BaseException | None = asyncio.CancelledError()
        else:
            # Marks the exception as retrieved even if every waiter went away
            exc = fut.exception()
        if exc is None:
            return

        logger.debug(f"{self.name}: lookup for {key!r} failed: {exc!r}")
        if self.evict_on_failure or fut.cancelled():
            entry = self._entries.get(key)
            if entry is not None and entry.result is fut:
                del self._entries[key]

    def _sweep(self, now: float):
        expired = [k for k, e in self._entries.items() if now >= e.expires_at]
        for k in expired:
            del self._entries[k]
