"""PostgREST request rendering and the data/auth HTTP clients."""

import json

import httpx
import pytest

from app.domain.exceptions import (
    AuthRequiredException,
    NotFoundException,
    UpstreamFailureException,
    ValidationException,
)
from app.domain.value_objects import OrderBy, QueryDescriptor, QueryFilter
from app.infrastructure.external.data_api import AuthClient, DataApiClient
from app.infrastructure.external.data_api.postgrest_client import filter_param, query_params

BASE = "https://project.supabase.test/rest/v1"


def client_with(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def test_query_params_render_filters_order_and_paging() -> None:
    descriptor = QueryDescriptor(
        table="properties",
        select="*, owner:profiles!owner_id(full_name)",
        filters=[
            QueryFilter("location", "ilike", "*Auckland*"),
            QueryFilter("price", "lte", 700),
            QueryFilter("id", "in", ["a", "b c"]),
        ],
        order_by=OrderBy("created_at", ascending=False),
        limit=20,
        offset=40,
    )
    assert query_params(descriptor) == [
        ("select", "*,owner:profiles!owner_id(full_name)"),
        ("location", "ilike.*Auckland*"),
        ("price", "lte.700"),
        ("id", 'in.(a,"b c")'),
        ("order", "created_at.desc"),
        ("limit", "20"),
        ("offset", "40"),
    ]


def test_filter_param_negation_and_is() -> None:
    assert filter_param(QueryFilter("latitude", "is", None, negate=True)) == ("latitude", "not.is.null")
    with pytest.raises(ValidationException):
        filter_param(QueryFilter("latitude", "is", "x"))
    with pytest.raises(ValidationException):
        filter_param(QueryFilter("id", "in", "abc"))


async def test_select_single_returns_row_or_not_found() -> None:
    async def handler(request: httpx.Request) -> httpx.Response:
        assert request.headers["apikey"] == "key"
        assert request.url.params["limit"] == "1"
        rows = [{"id": "p1"}] if request.url.params["id"] == "eq.p1" else []
        return httpx.Response(200, json=rows)

    async with client_with(handler) as http:
        api = DataApiClient(BASE, "key", http_client=http)
        one = QueryDescriptor("properties", filters=[QueryFilter("id", "eq", "p1")], single=True)
        assert await api.select(one) == {"id": "p1"}
        missing = QueryDescriptor("properties", filters=[QueryFilter("id", "eq", "p9")], single=True)
        with pytest.raises(NotFoundException):
            await api.select(missing)


async def test_upsert_sends_merge_preference() -> None:
    seen = {}

    async def handler(request: httpx.Request) -> httpx.Response:
        seen["prefer"] = request.headers["prefer"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(201, json=seen["body"])

    async with client_with(handler) as http:
        api = DataApiClient(BASE, "key", http_client=http)
        rows = await api.insert("profiles", {"id": "u1", "full_name": "Ana"}, upsert=True)
    assert rows == [{"id": "u1", "full_name": "Ana"}]
    assert seen["prefer"] == "return=representation,resolution=merge-duplicates"


async def test_update_and_delete_require_filters() -> None:
    api = DataApiClient(BASE, "key", http_client=client_with(lambda r: httpx.Response(200)))
    with pytest.raises(ValidationException):
        await api.update("properties", {"title": "x"}, [])
    with pytest.raises(ValidationException):
        await api.delete("properties", [])


async def test_rpc_posts_params_to_function_endpoint() -> None:
    seen = {}

    async def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=3)

    async with client_with(handler) as http:
        api = DataApiClient(BASE, "key", http_client=http)
        assert await api.rpc("count_listings", {"owner": "owner-1"}) == 3
        with pytest.raises(ValidationException):
            await api.rpc("")
    assert seen["url"] == f"{BASE}/rpc/count_listings"
    assert seen["body"] == {"owner": "owner-1"}


async def test_error_response_becomes_upstream_failure() -> None:
    async def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, json={"message": "column properties.foo does not exist"})

    async with client_with(handler) as http:
        api = DataApiClient(BASE, "key", http_client=http)
        with pytest.raises(UpstreamFailureException) as exc_info:
            await api.select(QueryDescriptor("properties"))
    assert exc_info.value.status_code == 400
    assert "does not exist" in exc_info.value.message


async def test_transport_error_becomes_upstream_failure() -> None:
    async def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused")

    async with client_with(handler) as http:
        api = DataApiClient(BASE, "key", http_client=http)
        with pytest.raises(UpstreamFailureException, match="connection refused"):
            await api.select(QueryDescriptor("properties"))


async def test_auth_client_resolves_user() -> None:
    async def handler(request: httpx.Request) -> httpx.Response:
        if request.headers["authorization"] != "Bearer good":
            return httpx.Response(401, json={"msg": "invalid JWT"})
        return httpx.Response(
            200,
            json={"id": "u1", "email": "u1@example.com", "user_metadata": {"role": "property_owner"}},
        )

    async with client_with(handler) as http:
        auth = AuthClient("https://project.supabase.test/auth/v1", "anon", http)
        user = await auth.get_user("good")
        assert (user.id, user.email, user.role) == ("u1", "u1@example.com", "property_owner")
        with pytest.raises(AuthRequiredException):
            await auth.get_user("expired")
        with pytest.raises(AuthRequiredException):
            await auth.get_user(None)
