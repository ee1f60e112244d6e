"""Data access: cached reads, mutations with invalidation, Result values.

DataAccess is the boundary services talk to. Reads go through the shared
query cache (TTL + single-flight); writes go through MutationRunner, which
invalidates the affected keys only after the write succeeded. Failures
come back as Result values, are logged, and are reported to on_error.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable
from typing import Any, TypeVar

from app.application.dtos.result import Result
from app.application.interfaces.services import ICacheService, IDataApi
from app.domain.exceptions import MarketplaceException
from app.domain.value_objects import QueryDescriptor
from app.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

ErrorCallback = Callable[[BaseException], None]


class MutationRunner:
    """Run a write once, then invalidate cache entries matching each pattern."""

    def __init__(self, cache: ICacheService) -> None:
        self.cache = cache

    async def mutate(
        self,
        operation: Callable[[], Awaitable[T]],
        invalidation_patterns: Iterable[str] = (),
    ) -> T:
        """Execute operation; on success invalidate patterns, then return its result.

        Nothing is invalidated when the operation raises. There is no
        compensating action if something after the write fails.

        Raises:
            ValueError: An invalidation pattern is empty.
            Exception: Whatever operation raised.
        """
        patterns = list(invalidation_patterns)
        if any(not p for p in patterns):
            raise ValueError("Invalidation patterns must be non-empty strings")
        result = await operation()
        for pattern in patterns:
            self.cache.invalidate(pattern)
        return result


class DataAccess:
    """Cached reads and invalidating writes against the managed data API."""

    def __init__(self, cache: ICacheService, data_api: IDataApi) -> None:
        self.cache = cache
        self.data_api = data_api
        self.mutations = MutationRunner(cache)

    async def fetch(
        self,
        descriptor: QueryDescriptor,
        *,
        use_cache: bool = True,
        ttl: float | None = None,
        on_error: ErrorCallback | None = None,
    ) -> Result[Any]:
        """Read descriptor through the cache.

        Args:
            descriptor: What to read.
            use_cache: False forces an upstream call (still joins an in-flight one).
            ttl: Freshness window in seconds; cache default when None.
            on_error: Called once with the failure, if any.
        """
        return await self.fetch_with(
            descriptor,
            lambda: self.data_api.select(descriptor),
            use_cache=use_cache,
            ttl=ttl,
            on_error=on_error,
        )

    async def refetch(
        self,
        descriptor: QueryDescriptor,
        *,
        ttl: float | None = None,
        on_error: ErrorCallback | None = None,
    ) -> Result[Any]:
        """Bypass the fresh cached value and reload descriptor."""
        return await self.fetch(descriptor, use_cache=False, ttl=ttl, on_error=on_error)

    async def fetch_with(
        self,
        key: QueryDescriptor | str,
        loader: Callable[[], Awaitable[T]],
        *,
        use_cache: bool = True,
        ttl: float | None = None,
        on_error: ErrorCallback | None = None,
    ) -> Result[T]:
        """Cache an arbitrary loader under key (descriptor or named key)."""
        try:
            value = await self.cache.fetch(
                key, loader, use_cache=use_cache, ttl=ttl, on_error=on_error
            )
        except Exception as exc:
            self._log_failure("fetch", key, exc)
            return Result.failure(exc)
        return Result.success(value)

    async def mutate(
        self,
        operation: Callable[[], Awaitable[T]],
        invalidation_patterns: Iterable[str],
        *,
        on_error: ErrorCallback | None = None,
    ) -> Result[T]:
        """Run a write and invalidate patterns on success."""
        patterns = list(invalidation_patterns)
        try:
            value = await self.mutations.mutate(operation, patterns)
        except Exception as exc:
            self._log_failure("mutate", ",".join(patterns) or "-", exc)
            if on_error is not None:
                on_error(exc)
            return Result.failure(exc)
        return Result.success(value)

    def invalidate(self, pattern: str) -> int:
        return self.cache.invalidate(pattern)

    @staticmethod
    def _log_failure(operation: str, key: QueryDescriptor | str, exc: Exception) -> None:
        target = key if isinstance(key, str) else key.table
        if isinstance(exc, MarketplaceException):
            logger.warning(
                "Data %s failed for %s: %s (%s)", operation, target, exc.message, exc.kind.value
            )
        else:
            logger.error("Data %s failed for %s", operation, target, exc_info=exc)
