"""In-memory query cache with TTL and single-flight loading.

One QueryCache lives for the lifetime of the application (created in the
lifespan, cleared on shutdown) and is shared by every request. All access
happens on the event loop thread, so no lock is taken; the only
suspension point is the loader's network call.

Rules:
- A READY value younger than its TTL is served without calling the loader.
- While a load is in flight for a key, other callers await the same
  result instead of starting a second load.
- A failed load marks the entry FAILED, reports the error through
  on_error, re-raises, and keeps the previous value (stale-while-error).
- Stale entries are evicted lazily on read; there is no background sweep.
"""

from __future__ import annotations

import asyncio
import dataclasses
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from app.domain.enums import EntryStatus
from app.domain.value_objects import QueryDescriptor
from app.infrastructure.cache.keys import query_key
from app.shared.telemetry.logging import get_logger
from app.shared.telemetry.tracing import TracedOperation

logger = get_logger(__name__)

LoadingListener = Callable[[bool], None]


@dataclass
class CacheEntry:
    """Cached result for one key. Mutated only by QueryCache."""

    key: str
    value: Any = None
    fetched_at: float | None = None
    expires_at: float | None = None
    status: EntryStatus = EntryStatus.IDLE
    error: BaseException | None = None

    @property
    def has_value(self) -> bool:
        return self.fetched_at is not None

    def is_fresh(self, now: float) -> bool:
        return self.expires_at is not None and now < self.expires_at


class QueryCache:
    """Cache store and fetch coordinator keyed by canonical query keys."""

    def __init__(
        self,
        default_ttl: float = 600.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize an empty cache.

        Args:
            default_ttl: TTL in seconds used when fetch() gets ttl=None.
            clock: Monotonic time source in seconds (injectable for tests).
        """
        if default_ttl <= 0:
            raise ValueError("default_ttl must be positive")
        self.default_ttl = default_ttl
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._inflight: dict[str, asyncio.Task[Any]] = {}
        self._pending: set[asyncio.Task[Any]] = set()
        self._listeners: list[LoadingListener] = []

    # -- observation -------------------------------------------------------

    def is_loading(self, key: str) -> bool:
        """Return True if a load for key is in flight."""
        return key in self._inflight

    @property
    def any_loading(self) -> bool:
        return bool(self._pending)

    def loading_keys(self) -> list[str]:
        return sorted(self._inflight)

    def add_listener(self, listener: LoadingListener) -> None:
        """Register a callback invoked with any_loading whenever it changes."""
        self._listeners.append(listener)

    def remove_listener(self, listener: LoadingListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def entry(self, key: str) -> CacheEntry | None:
        """Return a copy of the entry for key, or None."""
        current = self._entries.get(key)
        return dataclasses.replace(current) if current is not None else None

    def entries(self) -> list[CacheEntry]:
        """Return copies of all entries (for status reporting)."""
        return [dataclasses.replace(e) for e in self._entries.values()]

    def __len__(self) -> int:
        return len(self._entries)

    def now(self) -> float:
        """Current reading of the cache clock (same scale as fetched_at/expires_at)."""
        return self._clock()

    def get(self, key: str) -> Any | None:
        """Return the fresh cached value for key, or None.

        A stale entry that is not loading is evicted here (lazy eviction).
        """
        current = self._entries.get(key)
        if current is None or not current.has_value:
            return None
        if current.is_fresh(self._clock()):
            return current.value
        if not self.is_loading(key):
            del self._entries[key]
            logger.debug("Cache EXPIRED: %s", key)
        return None

    # -- fetching ----------------------------------------------------------

    async def fetch(
        self,
        descriptor: QueryDescriptor | str,
        loader: Callable[[], Awaitable[Any]],
        *,
        use_cache: bool = True,
        ttl: float | None = None,
        on_error: Callable[[BaseException], None] | None = None,
    ) -> Any:
        """Return the value for descriptor, loading it only when necessary.

        The load runs in its own task and every caller, the one that started
        it included, awaits it through asyncio.shield. Cancelling one caller
        (request timeout, client disconnect) therefore leaves the load and
        the other callers untouched.

        Args:
            descriptor: Query descriptor, or a precomputed cache key.
            loader: Zero-argument coroutine factory that performs the upstream call.
            use_cache: When False, skip the fresh-value check (forced refetch).
                An in-flight load is still joined.
            ttl: Seconds the loaded value stays fresh; default_ttl when None.
            on_error: Called once with the exception if the load fails.

        Returns:
            Cached or freshly loaded value.

        Raises:
            Exception: Whatever the loader raised.
        """
        if isinstance(descriptor, str):
            key, target = descriptor, "named"
        else:
            key, target = query_key(descriptor), descriptor.table
        ttl = self.default_ttl if ttl is None else ttl

        if use_cache:
            current = self._entries.get(key)
            if current is not None and current.has_value and current.is_fresh(self._clock()):
                logger.debug("Cache HIT: %s", key)
                return current.value

        task = self._inflight.get(key)
        if task is None:
            logger.debug("Cache MISS: %s", key)
            task = self._start_load(key, target, loader, ttl)
        else:
            logger.debug("Cache JOIN in-flight load: %s", key)
        try:
            return await asyncio.shield(task)
        except asyncio.CancelledError:
            if task.cancelled():
                logger.warning("Cache load for %s was cancelled", key)
            raise
        except Exception as exc:
            if on_error is not None:
                on_error(exc)
            raise

    def _start_load(
        self,
        key: str,
        target: str,
        loader: Callable[[], Awaitable[Any]],
        ttl: float,
    ) -> asyncio.Task[Any]:
        entry = self._entries.get(key)
        if entry is None:
            entry = CacheEntry(key=key)
            self._entries[key] = entry
        previous_status = entry.status
        entry.status = EntryStatus.LOADING
        task = asyncio.ensure_future(self._run_loader(target, loader))
        self._inflight[key] = task
        self._set_pending(task, add=True)
        # Registered before any shield() so the entry is settled when callers resume.
        task.add_done_callback(
            lambda done: self._finish_load(key, entry, done, ttl, previous_status)
        )
        return task

    @staticmethod
    async def _run_loader(target: str, loader: Callable[[], Awaitable[Any]]) -> Any:
        async with TracedOperation("cache.load", {"cache.target": target}):
            return await loader()

    def _finish_load(
        self,
        key: str,
        entry: CacheEntry,
        task: asyncio.Task[Any],
        ttl: float,
        previous_status: EntryStatus,
    ) -> None:
        if self._inflight.get(key) is task:
            del self._inflight[key]
        try:
            if task.cancelled():
                entry.status = EntryStatus.READY if entry.has_value else previous_status
                return
            exc = task.exception()
            if exc is not None:
                entry.status = EntryStatus.FAILED
                entry.error = exc
                logger.warning("Cache load failed for %s: %s", key, exc)
                return
            if self._entries.get(key) is not entry:
                # Invalidated while loading: the result only goes to waiting callers.
                logger.debug("Cache load for %s finished after invalidation; not stored", key)
                return
            now = self._clock()
            entry.value = task.result()
            entry.fetched_at = now
            entry.expires_at = now + ttl
            entry.status = EntryStatus.READY
            entry.error = None
        finally:
            self._set_pending(task, add=False)

    # -- invalidation ------------------------------------------------------

    def invalidate(self, pattern: str) -> int:
        """Remove every entry whose key contains pattern.

        In-flight loads for matching keys are detached, so the next read
        starts a fresh load instead of joining one issued before the write.

        Args:
            pattern: Substring matched against cache keys.

        Returns:
            Number of entries removed.
        """
        if not pattern:
            raise ValueError("Invalidation pattern must be a non-empty string")
        matching = [k for k in self._entries if pattern in k]
        for key in matching:
            del self._entries[key]
        for key in [k for k in self._inflight if pattern in k]:
            del self._inflight[key]
        if matching:
            logger.info("Cache INVALIDATE: %s (%s keys)", pattern, len(matching))
        return len(matching)

    def clear(self) -> None:
        """Drop every entry. In-flight loads finish but are not stored."""
        count = len(self._entries)
        self._entries.clear()
        self._inflight.clear()
        logger.info("Cache CLEARED: %s keys", count)

    def _set_pending(self, task: asyncio.Task[Any], *, add: bool) -> None:
        was_loading = self.any_loading
        if add:
            self._pending.add(task)
        else:
            self._pending.discard(task)
        if was_loading != self.any_loading:
            for listener in list(self._listeners):
                listener(self.any_loading)
