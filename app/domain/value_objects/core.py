"""Domain value objects for the marketplace.

Value objects are immutable types that represent domain concepts with
self-validation. They have no identity, only value.
"""

from dataclasses import dataclass, field
from typing import Any

from app.core.constants import FILTER_OPERATORS


@dataclass(frozen=True)
class QueryFilter:
    """One predicate of a query: column, operator, value.

    Operator is one of FILTER_OPERATORS; negate flips it (PostgREST not.).
    """

    column: str
    operator: str
    value: Any
    negate: bool = False

    def __post_init__(self) -> None:
        if not self.column:
            raise ValueError("Filter column must be a non-empty string")
        if self.operator not in FILTER_OPERATORS:
            raise ValueError(
                f"Unknown filter operator {self.operator!r}; expected one of {sorted(FILTER_OPERATORS)}"
            )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "column": self.column,
            "operator": self.operator,
            "value": list(self.value) if isinstance(self.value, tuple) else self.value,
        }
        if self.negate:
            data["negate"] = True
        return data


@dataclass(frozen=True)
class OrderBy:
    """Ordering clause (column, ascending)."""

    column: str
    ascending: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {"column": self.column, "ascending": self.ascending}


@dataclass(frozen=True)
class QueryDescriptor:
    """Canonical description of a read against the data API.

    Used both to perform the request and to derive its cache key.
    Filters are an ordered sequence: the same predicates in another
    order form a different descriptor.
    """

    table: str
    select: str = "*"
    filters: tuple[QueryFilter, ...] = field(default_factory=tuple)
    order_by: OrderBy | None = None
    limit: int | None = None
    offset: int | None = None
    single: bool = False

    def __post_init__(self) -> None:
        if not self.table:
            raise ValueError("Table name is required for queries")
        # Accept lists from callers; keep the stored value hashable.
        if not isinstance(self.filters, tuple):
            object.__setattr__(self, "filters", tuple(self.filters))
        if self.limit is not None and self.limit < 1:
            raise ValueError("limit must be positive")
        if self.offset is not None and self.offset < 0:
            raise ValueError("offset must not be negative")

    def to_dict(self) -> dict[str, Any]:
        """Plain dict form; optional parts are omitted when unset."""
        data: dict[str, Any] = {
            "table": self.table,
            "select": self.select,
            "filters": [f.to_dict() for f in self.filters],
            "orderBy": self.order_by.to_dict() if self.order_by else None,
        }
        if self.limit is not None:
            data["limit"] = self.limit
        if self.offset is not None:
            data["offset"] = self.offset
        if self.single:
            data["single"] = True
        return data


@dataclass(frozen=True)
class Coordinates:
    """Latitude/longitude pair (best-effort geocoding result)."""

    lat: float
    lng: float

    def __post_init__(self) -> None:
        if not -90.0 <= self.lat <= 90.0:
            raise ValueError(f"Latitude out of range: {self.lat}")
        if not -180.0 <= self.lng <= 180.0:
            raise ValueError(f"Longitude out of range: {self.lng}")

    def to_dict(self) -> dict[str, float]:
        return {"lat": self.lat, "lng": self.lng}
