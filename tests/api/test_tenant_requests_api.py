"""Rental application and viewing request endpoints."""

from httpx import AsyncClient

from tests.fakes import auth

SEEKER = auth("seeker-token")
OWNER = auth("owner-token")


async def test_application_lifecycle(client: AsyncClient) -> None:
    created = await client.post(
        "/api/v1/applications",
        json={"property_id": "p1", "message": "Quiet tenant", "income": 60000},
        headers=SEEKER,
    )
    assert created.status_code == 201
    application_id = created.json()["id"]
    assert created.json()["status"] == "pending"

    duplicate = await client.post("/api/v1/applications", json={"property_id": "p1"}, headers=SEEKER)
    assert duplicate.status_code == 400
    assert duplicate.json()["details"]["property_id"] == "p1"

    received = await client.get("/api/v1/applications/received", headers=OWNER)
    assert [a["id"] for a in received.json()] == [application_id]

    approved = await client.patch(
        f"/api/v1/applications/{application_id}/status", json={"status": "approved"}, headers=OWNER
    )
    assert approved.status_code == 200
    assert approved.json()["status"] == "approved"

    mine = await client.get("/api/v1/applications/mine", headers=SEEKER)
    assert mine.json()[0]["status"] == "approved"

    not_pending = await client.delete(f"/api/v1/applications/{application_id}", headers=SEEKER)
    assert not_pending.status_code == 404


async def test_seeker_cannot_review(client: AsyncClient) -> None:
    created = await client.post("/api/v1/applications", json={"property_id": "p1"}, headers=SEEKER)
    response = await client.patch(
        f"/api/v1/applications/{created.json()['id']}/status",
        json={"status": "approved"},
        headers=SEEKER,
    )
    assert response.status_code == 403


async def test_withdraw_pending_application(client: AsyncClient) -> None:
    created = await client.post("/api/v1/applications", json={"property_id": "p2"}, headers=SEEKER)
    response = await client.delete(f"/api/v1/applications/{created.json()['id']}", headers=SEEKER)
    assert response.status_code == 204
    assert (await client.get("/api/v1/applications/mine", headers=SEEKER)).json() == []


async def test_viewing_request_flow(client: AsyncClient) -> None:
    created = await client.post(
        "/api/v1/viewing-requests",
        json={"property_id": "p1", "proposed_date": "2024-06-01T10:00:00Z"},
        headers=SEEKER,
    )
    assert created.status_code == 201
    assert created.json()["proposed_date"] == "2024-06-01T10:00:00+00:00"
    request_id = created.json()["id"]

    declined = await client.patch(
        f"/api/v1/viewing-requests/{request_id}/status", json={"status": "declined"}, headers=OWNER
    )
    assert declined.json()["status"] == "declined"

    bad = await client.patch(
        f"/api/v1/viewing-requests/{request_id}/status", json={"status": "rejected"}, headers=OWNER
    )
    assert bad.status_code == 400


async def test_viewing_request_needs_date(client: AsyncClient) -> None:
    response = await client.post("/api/v1/viewing-requests", json={"property_id": "p1"}, headers=SEEKER)
    assert response.status_code == 422
