"""Property listings: search, detail, owner CRUD and the map listing."""

from __future__ import annotations

import asyncio
from typing import Any

from app.application.dtos.auth import AuthUser
from app.application.interfaces.services import IGeocoder
from app.application.services.data_access import DataAccess
from app.core.constants import SELECT_PROPERTY_WITH_OWNER, TABLE_PROPERTIES
from app.domain.enums import PropertyStatus
from app.domain.exceptions import PermissionDeniedException, ValidationException
from app.domain.value_objects import Coordinates, OrderBy, QueryDescriptor, QueryFilter
from app.shared.telemetry.logging import get_logger
from app.shared.utils.datetime import utc_now_iso
from app.shared.utils.sanitization import InputSanitizer

logger = get_logger(__name__)

NEWEST_FIRST = OrderBy("created_at", ascending=False)

# Columns the client may not set directly
_PROTECTED_FIELDS = frozenset({"id", "owner_id", "created_at", "updated_at"})


def _number(value: Any, cast: type = float) -> Any:
    if value is None or value == "":
        return None
    try:
        return cast(float(value)) if cast is int else cast(value)
    except (TypeError, ValueError):
        return None


def _writable(data: dict[str, Any]) -> dict[str, Any]:
    """Client-settable columns with markup stripped from text values."""
    return InputSanitizer.sanitize_dict(
        {k: v for k, v in data.items() if k not in _PROTECTED_FIELDS}
    )


def property_query(
    *,
    status: str | None = None,
    property_type: str | None = None,
    location: str | None = None,
    min_price: float | None = None,
    max_price: float | None = None,
    min_bedrooms: int | None = None,
    owner_id: str | None = None,
    limit: int | None = None,
    offset: int | None = None,
    select: str = SELECT_PROPERTY_WITH_OWNER,
) -> QueryDescriptor:
    """Build the listing query; filters are added in a fixed order so equal searches share a key."""
    filters: list[QueryFilter] = []
    if owner_id:
        filters.append(QueryFilter("owner_id", "eq", owner_id))
    if status:
        filters.append(QueryFilter("status", "eq", status))
    if property_type:
        filters.append(QueryFilter("property_type", "eq", property_type))
    if location:
        filters.append(QueryFilter("location", "ilike", f"*{location.strip()}*"))
    if min_price is not None:
        filters.append(QueryFilter("price", "gte", min_price))
    if max_price is not None:
        filters.append(QueryFilter("price", "lte", max_price))
    if min_bedrooms is not None:
        filters.append(QueryFilter("bedrooms", "gte", min_bedrooms))
    return QueryDescriptor(
        table=TABLE_PROPERTIES,
        select=select,
        filters=filters,
        order_by=NEWEST_FIRST,
        limit=limit,
        offset=offset,
    )


def property_by_id_query(property_id: str) -> QueryDescriptor:
    return QueryDescriptor(
        table=TABLE_PROPERTIES,
        select=SELECT_PROPERTY_WITH_OWNER,
        filters=[QueryFilter("id", "eq", property_id)],
        single=True,
    )


def map_item(row: dict[str, Any], coordinates: Coordinates) -> dict[str, Any]:
    """Shape a property row for the map view."""
    return {
        "id": row.get("id"),
        "title": row.get("title") or "Property",
        "location": row.get("address") or row.get("location") or "Address not specified",
        "address": row.get("address"),
        "price": _number(row.get("price")) or 0.0,
        "bedrooms": _number(row.get("bedrooms"), int),
        "bathrooms": _number(row.get("bathrooms")),
        "square_footage": _number(row.get("square_footage"), int),
        "property_type": row.get("property_type"),
        "status": row.get("status") or PropertyStatus.AVAILABLE.value,
        "coordinates": coordinates.to_dict(),
        "created_at": row.get("created_at"),
        "description": row.get("description"),
        "nearby_amenities": row.get("nearby_amenities"),
        "year_built": row.get("year_built"),
        "security_deposit": row.get("security_deposit"),
    }


def stored_coordinates(row: dict[str, Any]) -> Coordinates | None:
    lat, lng = _number(row.get("latitude")), _number(row.get("longitude"))
    if lat is None or lng is None:
        return None
    try:
        return Coordinates(lat=lat, lng=lng)
    except ValueError:
        return None


class PropertyService:
    """Listing reads (cached) and owner writes (invalidate the properties table)."""

    def __init__(
        self,
        data: DataAccess,
        geocoder: IGeocoder | None = None,
        geocode_interval: float = 1.0,
    ) -> None:
        self.data = data
        self.geocoder = geocoder
        self.geocode_interval = geocode_interval

    async def list_properties(self, **criteria: Any) -> list[dict[str, Any]]:
        """Newest-first listing with optional search criteria (see property_query)."""
        return (await self.data.fetch(property_query(**criteria))).unwrap()

    async def get_property(self, property_id: str) -> dict[str, Any]:
        """Return one property; NotFoundException if absent."""
        if not property_id:
            raise ValidationException("Property id is required", field="id")
        return (await self.data.fetch(property_by_id_query(property_id))).unwrap()

    async def list_owner_properties(self, owner_id: str) -> list[dict[str, Any]]:
        return (
            await self.data.fetch(property_query(owner_id=owner_id, select="*"))
        ).unwrap()

    async def owner_property_ids(self, owner_id: str) -> list[str]:
        return [row["id"] for row in await self.list_owner_properties(owner_id)]

    async def create_property(self, owner: AuthUser, data: dict[str, Any]) -> dict[str, Any]:
        """Create a listing owned by the caller."""
        values = _writable(data)
        if not str(values.get("title") or "").strip():
            raise ValidationException("Title is required", field="title")
        if _number(values.get("price")) is None:
            raise ValidationException("Price is required and must be a number", field="price")
        now = utc_now_iso()
        row = {
            "status": PropertyStatus.AVAILABLE.value,
            **values,
            "owner_id": owner.id,
            "created_at": now,
            "updated_at": now,
        }
        result = await self.data.mutate(
            lambda: self.data.data_api.insert(TABLE_PROPERTIES, row),
            [TABLE_PROPERTIES],
        )
        created = result.unwrap()
        logger.info("Property created by %s", owner.id)
        return created[0] if created else row

    async def _require_owner(self, user: AuthUser, property_id: str) -> dict[str, Any]:
        existing = await self.get_property(property_id)
        if existing.get("owner_id") != user.id:
            raise PermissionDeniedException(f"property:{property_id}", "modify")
        return existing

    async def update_property(
        self, user: AuthUser, property_id: str, data: dict[str, Any]
    ) -> dict[str, Any]:
        """Update the caller's own listing; stamps updated_at."""
        values = _writable(data)
        if not values:
            raise ValidationException("No fields to update", field="body")
        if "price" in values and _number(values["price"]) is None:
            raise ValidationException("Price must be a number", field="price")
        await self._require_owner(user, property_id)
        values["updated_at"] = utc_now_iso()
        filters = [QueryFilter("id", "eq", property_id), QueryFilter("owner_id", "eq", user.id)]
        result = await self.data.mutate(
            lambda: self.data.data_api.update(TABLE_PROPERTIES, values, filters),
            [TABLE_PROPERTIES],
        )
        rows = result.unwrap()
        return rows[0] if rows else {"id": property_id, **values}

    async def delete_property(self, user: AuthUser, property_id: str) -> None:
        await self._require_owner(user, property_id)
        filters = [QueryFilter("id", "eq", property_id), QueryFilter("owner_id", "eq", user.id)]
        result = await self.data.mutate(
            lambda: self.data.data_api.delete(TABLE_PROPERTIES, filters),
            [TABLE_PROPERTIES],
        )
        result.unwrap()
        logger.info("Property %s deleted by %s", property_id, user.id)

    async def map_properties(self) -> dict[str, Any]:
        """Properties with coordinates for the map view.

        Rows without stored coordinates are geocoded from their address
        (live lookup, then city table), and resolved coordinates are written
        back so the next listing does not geocode them again. Rows that
        cannot be placed are left out.
        """
        rows = (await self.data.fetch(property_query(select="*"))).unwrap()
        items: list[dict[str, Any]] = []
        resolved: dict[str, Coordinates] = {}
        lookups = 0
        for row in rows:
            coordinates = stored_coordinates(row)
            if coordinates is None and row.get("address") and self.geocoder is not None:
                if lookups and self.geocode_interval > 0:
                    await asyncio.sleep(self.geocode_interval)
                lookups += 1
                coordinates = await self.geocoder.geocode(row["address"])
                if coordinates is not None and row.get("id"):
                    resolved[row["id"]] = coordinates
            if coordinates is not None:
                items.append(map_item(row, coordinates))
        if resolved:
            await self._store_coordinates(resolved)
        logger.info("Map listing: %s/%s properties placed", len(items), len(rows))
        return {"data": items, "count": len(items), "total": len(rows)}

    async def _store_coordinates(self, resolved: dict[str, Coordinates]) -> None:
        async def write() -> int:
            for property_id, coords in resolved.items():
                await self.data.data_api.update(
                    TABLE_PROPERTIES,
                    {"latitude": coords.lat, "longitude": coords.lng},
                    [QueryFilter("id", "eq", property_id)],
                )
            return len(resolved)

        result = await self.data.mutate(write, [TABLE_PROPERTIES])
        if result.ok:
            logger.info("Stored coordinates for %s properties", result.value)
