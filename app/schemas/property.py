"""Property API schemas."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.common import RowModel


class PropertyBase(BaseModel):
    """Listing fields an owner may set."""

    title: str | None = Field(default=None, max_length=200)
    description: str | None = Field(default=None, max_length=10_000)
    location: str | None = Field(default=None, max_length=255)
    address: str | None = Field(default=None, max_length=500)
    price: float | None = Field(default=None, ge=0)
    bedrooms: int | None = Field(default=None, ge=0)
    bathrooms: float | None = Field(default=None, ge=0)
    square_footage: int | None = Field(default=None, ge=0)
    property_type: str | None = Field(default=None, max_length=50)
    status: str | None = Field(default=None, max_length=50)
    images: list[str] | None = None
    amenities: list[str] | None = None
    nearby_amenities: list[str] | str | None = None
    year_built: int | None = None
    security_deposit: float | None = Field(default=None, ge=0)
    available_from: str | None = None

    model_config = ConfigDict(extra="forbid")


class PropertyCreateRequest(PropertyBase):
    title: str = Field(..., min_length=1, max_length=200)
    price: float = Field(..., ge=0)


class PropertyUpdateRequest(PropertyBase):
    """Partial update; only fields present in the body are written."""


class PropertyResponse(RowModel):
    id: str
    title: str | None = None
    price: float | None = None
    owner_id: str | None = None
    status: str | None = None
    created_at: str | None = None


class PropertyDetailResponse(PropertyResponse):
    image_urls: list[str] = Field(default_factory=list)


class MapPropertyItem(BaseModel):
    id: str | None
    title: str
    location: str
    address: str | None = None
    price: float
    bedrooms: int | None = None
    bathrooms: float | None = None
    square_footage: int | None = None
    property_type: str | None = None
    status: str
    coordinates: dict[str, float]
    created_at: str | None = None
    description: str | None = None
    nearby_amenities: Any = None
    year_built: int | None = None
    security_deposit: float | None = None


class MapPropertiesResponse(BaseModel):
    """Response for GET /properties/map."""

    data: list[MapPropertyItem]
    count: int
    total: int
