"""Query cache inspection and manual invalidation (admins only)."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from app.api.v1.dependencies import (
    AdminUser,
    get_loading_indicator,
    get_query_cache,
)
from app.core.limiter import limit_writes
from app.infrastructure.cache import LoadingIndicator, QueryCache
from app.schemas.cache import (
    CacheEntrySummary,
    CacheStatusResponse,
    InvalidateRequest,
    InvalidateResponse,
    LoadingIndicatorStatus,
)

router = APIRouter()


@router.get("/status", response_model=CacheStatusResponse)
def cache_status(
    _: AdminUser,
    cache: Annotated[QueryCache, Depends(get_query_cache)],
    indicator: Annotated[LoadingIndicator, Depends(get_loading_indicator)],
) -> CacheStatusResponse:
    """Entries (key, status, freshness), keys being loaded and the indicator state."""
    now = cache.now()
    entries = [
        CacheEntrySummary(
            key=e.key,
            status=e.status.value,
            fresh=e.is_fresh(now),
            age_seconds=round(now - e.fetched_at, 3) if e.fetched_at is not None else None,
            expires_in_seconds=round(e.expires_at - now, 3) if e.expires_at is not None else None,
            error=str(e.error) if e.error is not None else None,
        )
        for e in cache.entries()
    ]
    return CacheStatusResponse(
        size=len(cache),
        any_loading=cache.any_loading,
        loading_keys=cache.loading_keys(),
        indicator=LoadingIndicatorStatus(**indicator.to_dict()),
        entries=entries,
    )


@router.post("/invalidate", response_model=InvalidateResponse)
@limit_writes
async def invalidate(
    request: Request,
    body: InvalidateRequest,
    _: AdminUser,
    cache: Annotated[QueryCache, Depends(get_query_cache)],
) -> InvalidateResponse:
    """Drop every cached entry whose key contains pattern."""
    return InvalidateResponse(pattern=body.pattern, removed=cache.invalidate(body.pattern))
