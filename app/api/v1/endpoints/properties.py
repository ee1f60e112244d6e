"""Property API: thin routes delegating to PropertyService."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, Response

from app.api.v1.dependencies import (
    CurrentUser,
    get_image_url_service,
    get_property_service,
)
from app.application.use_cases import ImageUrlService, PropertyService
from app.core.limiter import limit_writes
from app.schemas.property import (
    MapPropertiesResponse,
    PropertyCreateRequest,
    PropertyDetailResponse,
    PropertyResponse,
    PropertyUpdateRequest,
)

router = APIRouter()

PropertySvc = Annotated[PropertyService, Depends(get_property_service)]


@router.get("", response_model=list[PropertyResponse])
async def list_properties(
    properties: PropertySvc,
    status: str | None = None,
    property_type: str | None = None,
    location: Annotated[str | None, Query(max_length=100)] = None,
    min_price: Annotated[float | None, Query(ge=0)] = None,
    max_price: Annotated[float | None, Query(ge=0)] = None,
    min_bedrooms: Annotated[int | None, Query(ge=0)] = None,
    limit: Annotated[int | None, Query(ge=1, le=200)] = None,
    offset: Annotated[int | None, Query(ge=0)] = None,
):
    """Search listings, newest first."""
    return await properties.list_properties(
        status=status,
        property_type=property_type,
        location=location,
        min_price=min_price,
        max_price=max_price,
        min_bedrooms=min_bedrooms,
        limit=limit,
        offset=offset,
    )


@router.get("/map", response_model=MapPropertiesResponse)
async def map_properties(properties: PropertySvc):
    """Listings with coordinates; missing coordinates are geocoded and stored."""
    return await properties.map_properties()


@router.get("/mine", response_model=list[PropertyResponse])
async def my_properties(user: CurrentUser, properties: PropertySvc):
    """Listings owned by the signed-in user."""
    return await properties.list_owner_properties(user.id)


@router.get("/{property_id}", response_model=PropertyDetailResponse)
async def get_property(
    property_id: str,
    properties: PropertySvc,
    images: Annotated[ImageUrlService, Depends(get_image_url_service)],
):
    """One listing with signed image URLs."""
    row = await properties.get_property(property_id)
    return {**row, "image_urls": await images.property_image_urls(row)}


@router.post("", response_model=PropertyResponse, status_code=201)
@limit_writes
async def create_property(
    request: Request,
    body: PropertyCreateRequest,
    user: CurrentUser,
    properties: PropertySvc,
):
    """Create a listing owned by the signed-in user."""
    return await properties.create_property(user, body.model_dump(exclude_none=True))


@router.patch("/{property_id}", response_model=PropertyResponse)
@limit_writes
async def update_property(
    request: Request,
    property_id: str,
    body: PropertyUpdateRequest,
    user: CurrentUser,
    properties: PropertySvc,
):
    """Update fields of the caller's own listing."""
    return await properties.update_property(
        user, property_id, body.model_dump(exclude_unset=True)
    )


@router.delete("/{property_id}", status_code=204)
@limit_writes
async def delete_property(
    request: Request,
    property_id: str,
    user: CurrentUser,
    properties: PropertySvc,
) -> Response:
    await properties.delete_property(user, property_id)
    return Response(status_code=204)
