"""Canonical cache keys for query descriptors and named lookups."""

import json

import pytest

from app.domain.value_objects import OrderBy, QueryDescriptor, QueryFilter
from app.infrastructure.cache import canonical_json, named_key, query_key


def test_canonical_json_sorts_keys_without_whitespace() -> None:
    assert canonical_json({"b": 1, "a": [1, 2]}) == '{"a":[1,2],"b":1}'


def test_equal_descriptors_share_a_key() -> None:
    a = QueryDescriptor(
        table="properties",
        filters=[QueryFilter("status", "eq", "available")],
        order_by=OrderBy("created_at", ascending=False),
    )
    b = QueryDescriptor(
        table="properties",
        filters=(QueryFilter("status", "eq", "available"),),
        order_by=OrderBy("created_at", ascending=False),
    )
    assert query_key(a) == query_key(b)


def test_filter_order_is_significant() -> None:
    f1, f2 = QueryFilter("status", "eq", "available"), QueryFilter("bedrooms", "gte", 2)
    assert query_key(QueryDescriptor("properties", filters=[f1, f2])) != query_key(
        QueryDescriptor("properties", filters=[f2, f1])
    )


def test_key_contains_table_and_omits_unset_parts() -> None:
    key = query_key(QueryDescriptor(table="viewing_requests"))
    assert "viewing_requests" in key
    data = json.loads(key)
    assert data["orderBy"] is None
    assert "limit" not in data and "single" not in data


def test_named_key_requires_name() -> None:
    assert "property_image_url" in named_key("property_image_url", path="o/a.jpg")
    with pytest.raises(ValueError):
        named_key("")
