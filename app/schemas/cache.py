"""Query cache inspection API schemas."""

from pydantic import BaseModel, Field


class CacheEntrySummary(BaseModel):
    key: str
    status: str
    fresh: bool
    age_seconds: float | None = None
    expires_in_seconds: float | None = None
    error: str | None = None


class LoadingIndicatorStatus(BaseModel):
    state: str
    visible: bool


class CacheStatusResponse(BaseModel):
    size: int
    any_loading: bool
    loading_keys: list[str]
    indicator: LoadingIndicatorStatus
    entries: list[CacheEntrySummary]


class InvalidateRequest(BaseModel):
    pattern: str = Field(..., min_length=1, max_length=500)


class InvalidateResponse(BaseModel):
    pattern: str
    removed: int
