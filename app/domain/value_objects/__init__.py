"""Domain value objects and shared value types."""

from app.domain.value_objects.core import (
    Coordinates,
    OrderBy,
    QueryDescriptor,
    QueryFilter,
)

__all__ = [
    "Coordinates",
    "OrderBy",
    "QueryDescriptor",
    "QueryFilter",
]
