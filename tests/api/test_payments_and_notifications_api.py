"""Payout onboarding and role notification endpoints."""

from httpx import AsyncClient

from tests.fakes import auth


async def test_connect_account_then_status(client: AsyncClient) -> None:
    created = await client.post(
        "/api/v1/payments/connect-account", json={"business_type": "individual"}, headers=auth("owner-token")
    )
    assert created.status_code == 200
    assert created.json() == {
        "account_id": "acct_1",
        "already_onboarded": False,
        "onboarding_url": "https://connect.test/onboard/acct_1",
        "message": None,
    }

    status = await client.get("/api/v1/payments/account-status", headers=auth("owner-token"))
    assert status.status_code == 200
    assert status.json()["has_account"] is True
    assert status.json()["onboarding_complete"] is False


async def test_connect_account_rejects_unknown_business_type(client: AsyncClient) -> None:
    response = await client.post(
        "/api/v1/payments/connect-account", json={"business_type": "llp"}, headers=auth("owner-token")
    )
    assert response.status_code == 422


async def test_status_without_account(client: AsyncClient) -> None:
    response = await client.get("/api/v1/payments/account-status", headers=auth("seeker-token"))
    assert response.json()["has_account"] is False


async def test_role_request_is_queued_and_sent(client: AsyncClient, api_app) -> None:
    response = await client.post(
        "/api/v1/notifications/role-request",
        json={"user_name": "Sam", "business_name": "Sam Homes", "business_type": "individual"},
        headers=auth("seeker-token"),
    )
    assert response.status_code == 202
    assert response.json() == {"queued": True, "to": "admin@example.com"}
    (sent,) = api_app.state.email_sender.sent
    assert "Sam Homes" in sent.html


async def test_role_approval_requires_admin(client: AsyncClient, api_app) -> None:
    body = {"user_email": "sam@example.com", "user_name": "Sam", "new_role": "property_owner"}
    denied = await client.post("/api/v1/notifications/role-approval", json=body, headers=auth("seeker-token"))
    assert denied.status_code == 403

    accepted = await client.post("/api/v1/notifications/role-approval", json=body, headers=auth("admin-token"))
    assert accepted.status_code == 202
    assert api_app.state.email_sender.sent[-1].subject == "Your account has been upgraded to Property Owner"


async def test_role_approval_validates_email(client: AsyncClient) -> None:
    response = await client.post(
        "/api/v1/notifications/role-approval",
        json={"user_email": "not-an-email", "new_role": "admin"},
        headers=auth("admin-token"),
    )
    assert response.status_code == 422
