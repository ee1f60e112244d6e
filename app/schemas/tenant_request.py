"""Rental application and viewing request API schemas."""

from datetime import datetime

from pydantic import BaseModel, Field

from app.schemas.common import RowModel


class ApplicationCreateRequest(BaseModel):
    """Request body for submitting a rental application."""

    property_id: str = Field(..., min_length=1)
    message: str | None = Field(default=None, max_length=5000)
    employment_status: str | None = Field(default=None, max_length=100)
    income: float | str | None = None
    credit_score: str | None = Field(default=None, max_length=50)


class ViewingRequestCreateRequest(BaseModel):
    """Request body for asking to view a property."""

    property_id: str = Field(..., min_length=1)
    proposed_date: datetime
    message: str | None = Field(default=None, max_length=5000)


class StatusUpdateRequest(BaseModel):
    status: str = Field(..., min_length=1, max_length=32)


class TenantRequestResponse(RowModel):
    id: str | None = None
    property_id: str | None = None
    user_id: str | None = None
    status: str | None = None
    created_at: str | None = None
