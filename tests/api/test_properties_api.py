"""Property endpoints: public reads, owner writes, error mapping."""

from httpx import AsyncClient

from tests.fakes import auth


async def test_list_and_filter_properties(client: AsyncClient) -> None:
    response = await client.get("/api/v1/properties")
    assert response.status_code == 200
    assert [p["id"] for p in response.json()] == ["p1", "p2"]

    filtered = await client.get("/api/v1/properties", params={"location": "hamilton", "min_bedrooms": 1})
    assert [p["id"] for p in filtered.json()] == ["p2"]


async def test_invalid_query_is_422(client: AsyncClient) -> None:
    response = await client.get("/api/v1/properties", params={"min_price": -5})
    assert response.status_code == 422
    assert response.json()["kind"] == "validation"


async def test_property_detail_includes_signed_image_urls(client: AsyncClient) -> None:
    response = await client.get("/api/v1/properties/p1")
    assert response.status_code == 200
    body = response.json()
    assert body["title"] == "Harbour View Apartment"
    assert body["image_urls"] == ["https://storage.test/sign/property-images/owner-1/front.jpg?token=t"]


async def test_missing_property_is_404(client: AsyncClient) -> None:
    response = await client.get("/api/v1/properties/nope")
    assert response.status_code == 404
    assert response.json()["error"] == "RESOURCE_NOT_FOUND"


async def test_create_requires_sign_in(client: AsyncClient) -> None:
    response = await client.post("/api/v1/properties", json={"title": "Loft", "price": 500})
    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"
    assert response.json()["kind"] == "auth_required"

    expired = await client.post(
        "/api/v1/properties", json={"title": "Loft", "price": 500}, headers=auth("expired")
    )
    assert expired.status_code == 401


async def test_owner_create_update_delete(client: AsyncClient) -> None:
    created = await client.post(
        "/api/v1/properties",
        json={"title": "Loft", "price": 500, "bedrooms": 1},
        headers=auth("owner-token"),
    )
    assert created.status_code == 201
    property_id = created.json()["id"]
    assert created.json()["owner_id"] == "owner-1"

    listing = await client.get("/api/v1/properties")
    assert property_id in [p["id"] for p in listing.json()]

    patched = await client.patch(
        f"/api/v1/properties/{property_id}", json={"price": 550}, headers=auth("owner-token")
    )
    assert patched.status_code == 200
    assert patched.json()["price"] == 550

    forbidden = await client.delete(f"/api/v1/properties/{property_id}", headers=auth("seeker-token"))
    assert forbidden.status_code == 403

    deleted = await client.delete(f"/api/v1/properties/{property_id}", headers=auth("owner-token"))
    assert deleted.status_code == 204
    assert (await client.get(f"/api/v1/properties/{property_id}")).status_code == 404


async def test_unknown_fields_rejected(client: AsyncClient) -> None:
    response = await client.post(
        "/api/v1/properties",
        json={"title": "Loft", "price": 1, "owner_id": "someone"},
        headers=auth("owner-token"),
    )
    assert response.status_code == 422


async def test_my_properties(client: AsyncClient) -> None:
    response = await client.get("/api/v1/properties/mine", headers=auth("owner-token"))
    assert [p["id"] for p in response.json()] == ["p1"]


async def test_map_properties(client: AsyncClient) -> None:
    response = await client.get("/api/v1/properties/map")
    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 2
    assert [item["id"] for item in body["data"]] == ["p2"]


async def test_upstream_failure_is_502(client: AsyncClient, data_api) -> None:
    from app.domain.exceptions import UpstreamFailureException

    data_api.fail_with = UpstreamFailureException("data_api", "service unavailable", 503)
    response = await client.get("/api/v1/properties")
    assert response.status_code == 502
    assert response.json()["details"]["service"] == "data_api"


async def test_error_body_carries_request_id(client: AsyncClient) -> None:
    response = await client.get("/api/v1/properties/nope", headers={"X-Request-ID": "req-404"})
    assert response.status_code == 404
    assert response.headers["x-request-id"] == "req-404"
    assert response.json()["request_id"] == "req-404"
