"""Time-bounded memoization of probe results keyed by trigger definition."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeAlias

from autoproxy.constants.engine import DEFAULT_CACHE_SWEEP_INTERVAL_SECONDS, DEFAULT_CACHE_TTL_SECONDS
from autoproxy.constants.probes import PROBE_ABORTED_ERROR
from autoproxy.model import CacheEntry, ProbeResult
from autoproxy.triggers import Trigger, canonical_key
from autoproxy.utils.clock import Clock, now_ms

logger = logging.getLogger(__name__)

ProbeFn: TypeAlias = Callable[[Trigger], Awaitable[ProbeResult]]


@dataclass(frozen=True)
class CacheStats:
    """Snapshot of cache contents and counters."""

    size: int
    keys: tuple[str, ...]
    hits: int
    misses: int


class ProbeCache:
    """Caches probe results for ``ttl_seconds`` under a canonical trigger key.

    Concurrent lookups for the same key share one in-flight probe, so a key
    never has more than one authoritative entry.
    """

    def __init__(self, ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS, *, clock: Clock = now_ms) -> None:
        self._ttl_ms = int(ttl_seconds * 1000)
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._pending: dict[str, asyncio.Future[ProbeResult]] = {}
        self._hits = 0
        self._misses = 0
        self._sweeper: asyncio.Task[None] | None = None

    def __len__(self) -> int:
        return len(self._entries)

    async def get_or_probe(self, trigger: Trigger, probe: ProbeFn, *, use_cache: bool = True) -> ProbeResult:
        """Return a live cached result for ``trigger`` or run ``probe`` and cache its result."""
        if not use_cache:
            return await probe(trigger)

        key = canonical_key(trigger)
        if key is None:
            logger.debug("Trigger parameters not serializable; probing without cache")
            self._misses += 1
            return await probe(trigger)

        cached = self.lookup(key)
        if cached is not None:
            self._hits += 1
            logger.debug("Using cached probe result: %s", key)
            return cached

        pending = self._pending.get(key)
        if pending is not None:
            logger.debug("Joining in-flight probe: %s", key)
            return await asyncio.shield(pending)

        self._misses += 1
        task = asyncio.ensure_future(probe(trigger))
        self._pending[key] = task
        task.add_done_callback(lambda done: self._settle(key, done))
        return await asyncio.shield(task)

    def lookup(self, key: str) -> ProbeResult | None:
        """Return the cached result for ``key`` if it has not expired."""
        entry = self._entries.get(key)
        if entry is None or entry.expiry <= self._clock():
            return None
        return entry.result

    def store(self, key: str, result: ProbeResult) -> None:
        self._entries[key] = CacheEntry(result=result, expiry=self._clock() + self._ttl_ms)

    def clear(self) -> None:
        """Drop every entry immediately. In-flight probes are left to finish uncached."""
        logger.info("Clearing probe cache (%d entries)", len(self._entries))
        self._entries.clear()
        self._pending.clear()

    def sweep(self) -> int:
        """Remove expired entries and return how many were dropped."""
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if entry.expiry <= now]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.debug("Cleaned expired cache entries: %d", len(expired))
        return len(expired)

    def stats(self) -> CacheStats:
        return CacheStats(
            size=len(self._entries),
            keys=tuple(self._entries),
            hits=self._hits,
            misses=self._misses,
        )

    def start_sweeper(self, interval_seconds: float = DEFAULT_CACHE_SWEEP_INTERVAL_SECONDS) -> None:
        """Start periodic background removal of expired entries."""
        if self._sweeper is not None and not self._sweeper.done():
            return
        self._sweeper = asyncio.create_task(self._sweep_forever(interval_seconds), name="probe-cache-sweeper")

    async def stop_sweeper(self) -> None:
        if self._sweeper is None:
            return
        self._sweeper.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._sweeper
        self._sweeper = None

    async def _sweep_forever(self, interval_seconds: float) -> None:
        while True:
            await asyncio.sleep(interval_seconds)
            self.sweep()

    def _settle(self, key: str, task: asyncio.Future[ProbeResult]) -> None:
        if self._pending.get(key) is not task:
            return
        del self._pending[key]
        if task.cancelled() or task.exception() is not None:
            return
        result = task.result()
        if result.error == PROBE_ABORTED_ERROR:
            return
        self.store(key, result)
