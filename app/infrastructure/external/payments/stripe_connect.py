"""Stripe calls over the REST API (form-encoded, bearer secret key).

Connected accounts for owner onboarding (create, onboarding link,
retrieve), payment intents for tenant rent payments (create, retrieve,
cancel), and signature checks for incoming webhook events.
"""

from __future__ import annotations

import hashlib
import hmac
import time
from typing import Any

import httpx

from app.application.dtos.payment import ConnectedAccount, PaymentIntent
from app.domain.exceptions import UpstreamFailureException
from app.infrastructure.external.http import request
from app.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

SERVICE = "stripe"

# Seconds a signed webhook timestamp may lag behind the clock
WEBHOOK_TOLERANCE_SECONDS = 300


def flatten_form(data: dict[str, Any], prefix: str = "") -> list[tuple[str, str]]:
    """Flatten nested dicts into Stripe's bracketed form keys.

    {"capabilities": {"transfers": {"requested": True}}} becomes
    [("capabilities[transfers][requested]", "true")].
    """
    pairs: list[tuple[str, str]] = []
    for key, value in data.items():
        name = f"{prefix}[{key}]" if prefix else str(key)
        if value is None:
            continue
        if isinstance(value, dict):
            pairs.extend(flatten_form(value, name))
        elif isinstance(value, bool):
            pairs.append((name, "true" if value else "false"))
        else:
            pairs.append((name, str(value)))
    return pairs


def _account_from_payload(body: dict[str, Any]) -> ConnectedAccount:
    capabilities = body.get("capabilities") or {}
    return ConnectedAccount(
        id=body["id"],
        details_submitted=bool(body.get("details_submitted")),
        charges_enabled=bool(body.get("charges_enabled")),
        payouts_enabled=bool(body.get("payouts_enabled")),
        transfers_capability=capabilities.get("transfers"),
        requirements=body.get("requirements") or {},
    )


def _intent_from_payload(body: dict[str, Any]) -> PaymentIntent:
    return PaymentIntent(
        id=body["id"],
        status=body.get("status", ""),
        amount=int(body.get("amount") or 0),
        currency=body.get("currency", ""),
        client_secret=body.get("client_secret"),
        metadata=body.get("metadata") or {},
    )


def verify_webhook_signature(
    payload: bytes,
    signature_header: str | None,
    secret: str,
    tolerance: int = WEBHOOK_TOLERANCE_SECONDS,
    now: float | None = None,
) -> bool:
    """Return True if Stripe-Signature carries a v1 HMAC-SHA256 of "<t>.<payload>".

    The header looks like "t=1492774577,v1=5257a8...,v0=..."; any v1 may match.
    Timestamps older than tolerance seconds are rejected.
    """
    if not signature_header:
        return False
    timestamp = None
    signatures = []
    for part in signature_header.split(","):
        key, _, value = part.strip().partition("=")
        if key == "t":
            timestamp = value
        elif key == "v1":
            signatures.append(value)
    if not timestamp or not timestamp.isdigit() or not signatures:
        return False
    current = time.time() if now is None else now
    if tolerance and current - int(timestamp) > tolerance:
        return False
    expected = hmac.HMAC(
        secret.encode(), timestamp.encode() + b"." + payload, hashlib.sha256
    ).hexdigest()
    return any(hmac.compare_digest(expected, sig) for sig in signatures)


class StripeConnectClient:
    """Connected accounts for property owners and payment intents for rent."""

    def __init__(
        self,
        secret_key: str | None,
        http_client: httpx.AsyncClient,
        api_base: str = "https://api.stripe.com/v1",
        country: str = "US",
    ) -> None:
        self._secret_key = secret_key
        self._client = http_client
        self.api_base = api_base.rstrip("/")
        self.country = country

    @property
    def configured(self) -> bool:
        return bool(self._secret_key)

    async def _post(self, path: str, form: dict[str, Any]) -> dict[str, Any]:
        response = await request(
            self._client,
            SERVICE,
            "POST",
            f"{self.api_base}/{path}",
            data=dict(flatten_form(form)),
            headers=self._auth_headers(),
        )
        return response.json()

    def _auth_headers(self) -> dict[str, str]:
        if not self._secret_key:
            raise UpstreamFailureException(SERVICE, "payment processor is not configured")
        return {"Authorization": f"Bearer {self._secret_key}"}

    async def create_account(
        self,
        email: str,
        user_id: str,
        business_type: str = "individual",
    ) -> ConnectedAccount:
        """Create an Express connected account that can take card payments and transfers."""
        body = await self._post(
            "accounts",
            {
                "type": "express",
                "country": self.country,
                "email": email,
                "business_type": business_type,
                "capabilities": {
                    "card_payments": {"requested": True},
                    "transfers": {"requested": True},
                },
                "metadata": {"user_id": user_id, "created_via": "rental_platform"},
            },
        )
        logger.info("Created connected account %s for user %s", body.get("id"), user_id)
        return _account_from_payload(body)

    async def create_onboarding_link(
        self, account_id: str, refresh_url: str, return_url: str
    ) -> str:
        """Return the hosted onboarding URL for account_id."""
        body = await self._post(
            "account_links",
            {
                "account": account_id,
                "refresh_url": refresh_url,
                "return_url": return_url,
                "type": "account_onboarding",
            },
        )
        url = body.get("url")
        if not url:
            raise UpstreamFailureException(SERVICE, "account link response has no url")
        return url

    async def retrieve_account(self, account_id: str) -> ConnectedAccount:
        response = await request(
            self._client,
            SERVICE,
            "GET",
            f"{self.api_base}/accounts/{account_id}",
            headers=self._auth_headers(),
        )
        return _account_from_payload(response.json())

    async def create_payment_intent(
        self,
        amount_cents: int,
        currency: str,
        metadata: dict[str, str],
        description: str,
        receipt_email: str | None = None,
    ) -> PaymentIntent:
        """Create a card payment intent; the client confirms it with client_secret."""
        if amount_cents <= 0:
            raise ValueError("amount_cents must be positive")
        body = await self._post(
            "payment_intents",
            {
                "amount": amount_cents,
                "currency": currency,
                "metadata": metadata,
                "description": description,
                "statement_descriptor_suffix": "RENTAL",
                "receipt_email": receipt_email,
            },
        )
        logger.info(
            "Created payment intent %s for application %s",
            body.get("id"),
            metadata.get("application_id"),
        )
        return _intent_from_payload(body)

    async def retrieve_payment_intent(self, intent_id: str) -> PaymentIntent:
        response = await request(
            self._client,
            SERVICE,
            "GET",
            f"{self.api_base}/payment_intents/{intent_id}",
            headers=self._auth_headers(),
        )
        return _intent_from_payload(response.json())

    async def cancel_payment_intent(self, intent_id: str) -> PaymentIntent:
        body = await self._post(f"payment_intents/{intent_id}/cancel", {})
        logger.info("Cancelled payment intent %s", intent_id)
        return _intent_from_payload(body)
