"""Managed auth client: resolve a bearer access token to a user.

Sign-up, sign-in and password reset are handled by the auth service
directly; the API only needs to know who is calling.
"""

from __future__ import annotations

import httpx

from app.application.dtos.auth import AuthUser
from app.domain.exceptions import AuthRequiredException, UpstreamFailureException
from app.infrastructure.external.http import request
from app.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


class AuthClient:
    """Looks up the user behind an access token (GET /auth/v1/user)."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        http_client: httpx.AsyncClient,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._client = http_client

    async def get_user(self, access_token: str | None) -> AuthUser:
        """Return the user for access_token.

        Raises:
            AuthRequiredException: Token missing, expired or rejected.
            UpstreamFailureException: Auth service unreachable or erroring.
        """
        if not access_token:
            raise AuthRequiredException()
        try:
            response = await request(
                self._client,
                "auth",
                "GET",
                f"{self.base_url}/user",
                headers={
                    "apikey": self._api_key,
                    "Authorization": f"Bearer {access_token}",
                },
            )
        except UpstreamFailureException as exc:
            if exc.status_code in (401, 403):
                raise AuthRequiredException("Session expired or invalid") from exc
            raise
        body = response.json()
        if not body or not body.get("id"):
            raise AuthRequiredException("Session expired or invalid")
        metadata = body.get("user_metadata") or {}
        return AuthUser(
            id=str(body["id"]),
            email=body.get("email"),
            role=metadata.get("role"),
            metadata=metadata,
        )
