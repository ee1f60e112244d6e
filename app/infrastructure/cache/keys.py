"""Cache key builders. Single place for key format (DRY).

A query's cache key is its canonical serialization: JSON with sorted
object keys and no insignificant whitespace, so two descriptors share a
key iff their serializations are byte-equal. Keys contain the table name
verbatim, which is what substring invalidation patterns match on.
"""

import json
from typing import Any

from app.domain.value_objects import QueryDescriptor


def canonical_json(value: Any) -> str:
    """Serialize value with sorted keys and compact separators.

    Non-JSON scalars (dates, UUIDs, Decimals) are stringified.
    """
    return json.dumps(value, sort_keys=True, separators=(",", ":"), default=str)


def query_key(descriptor: QueryDescriptor) -> str:
    """Cache key for a query descriptor."""
    return canonical_json(descriptor.to_dict())


def named_key(name: str, **params: Any) -> str:
    """Cache key for a non-table lookup (e.g. a signed URL or geocode).

    Args:
        name: Lookup name; doubles as its invalidation pattern.
        **params: Lookup parameters.

    Raises:
        ValueError: If name is empty.
    """
    if not name:
        raise ValueError("Cache key name must be a non-empty string")
    return canonical_json({"name": name, "params": params})
