"""In-memory, time-bounded, request-coalescing cache for provider results.

Every provider key maps to at most one ``CacheEntry``.  The entry holds a
single shared future: concurrent callers for the same key all receive that
future, so one upstream call serves everyone until the entry expires.

Failures are cached exactly like successes.  A failing upstream is therefore
called at most once per TTL window, and every caller in that window sees the
same exception.

The coalescing guarantee relies on ``get`` never suspending: the decision to
fetch and the recording of the new entry happen in one synchronous step on
the event loop thread.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Mapping

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 1800

Provider = Callable[[], Awaitable[Any]]


class ProviderKey(str, Enum):
    """Identifiers of the upstream data sources."""

    FASTLY = "fastly"
    RESP_TIMES = "respTimes"
    OUTAGES = "outages"
    SIZES = "sizes"


@dataclass
class CacheEntry:
    key: ProviderKey
    created_at: float
    outcome: asyncio.Future

    def age(self, now: float) -> float:
        return now - self.created_at


class TTLMemoCache:
    """Memoises provider calls per key for ``ttl`` seconds.

    Usage::

        cache = TTLMemoCache({ProviderKey.FASTLY: fetch_traffic_stats})
        stats = await cache.fetch(ProviderKey.FASTLY)

    *clock* returns seconds as a float; tests pass a fake one.
    """

    def __init__(
        self,
        providers: Mapping[ProviderKey, Provider],
        ttl: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._providers = dict(providers)
        self._ttl = ttl
        self._clock = clock
        self._entries: dict[ProviderKey, CacheEntry] = {}

    @property
    def ttl(self) -> float:
        return self._ttl

    def get(self, key: ProviderKey | str) -> asyncio.Future:
        """Return the shared future for *key*, starting a fetch if needed.

        A new fetch starts when there is no entry for *key* or the entry is
        older than the TTL.  Otherwise the existing future is returned as is,
        whether it is still pending, resolved or failed.

        Must be called from a running event loop.

        Raises:
            KeyError: *key* is not a provider identifier or has no
                registered provider.
        """
        try:
            key = ProviderKey(key)
        except ValueError:
            raise KeyError(key) from None
        provider = self._providers[key]
        now = self._clock()

        entry = self._entries.get(key)
        if entry is not None and entry.age(now) <= self._ttl:
            logger.debug("Reusing %s result (age %.1fs).", key.value, entry.age(now))
            return entry.outcome

        logger.info("Fetching %s from upstream.", key.value)
        entry = CacheEntry(key=key, created_at=now, outcome=self._invoke(key, provider))
        self._entries[key] = entry
        return entry.outcome

    async def fetch(self, key: ProviderKey | str) -> Any:
        """Await the result for *key*.

        The shared future is shielded, so cancelling one caller never cancels
        the fetch the other callers are waiting on.
        """
        return await asyncio.shield(self.get(key))

    def entry(self, key: ProviderKey | str) -> CacheEntry | None:
        """Return the current entry for *key* without touching it."""
        return self._entries.get(ProviderKey(key))

    def _invoke(self, key: ProviderKey, provider: Provider) -> asyncio.Future:
        loop = asyncio.get_running_loop()
        try:
            result = provider()
        except Exception as exc:
            outcome = loop.create_future()
            outcome.set_exception(exc)
        else:
            if inspect.isawaitable(result):
                outcome = asyncio.ensure_future(result)
            else:
                outcome = loop.create_future()
                outcome.set_result(result)
        outcome.add_done_callback(lambda fut: _log_outcome(key, fut))
        return outcome


def _log_outcome(key: ProviderKey, fut: asyncio.Future) -> None:
    if fut.cancelled():
        return
    exc = fut.exception()
    if exc is not None:
        logger.warning("Fetch for %s failed; caching the failure: %s", key.value, exc)
