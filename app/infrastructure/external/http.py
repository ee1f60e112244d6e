"""Shared httpx call helper for upstream services.

Every outbound call goes through request(): transport errors and non-2xx
responses become UpstreamFailureException with the service's own message.
No retries.
"""

from __future__ import annotations

from typing import Any

import httpx

from app.domain.exceptions import UpstreamFailureException
from app.shared.telemetry.logging import get_logger
from app.shared.telemetry.tracing import TracedOperation

logger = get_logger(__name__)


def error_message(response: httpx.Response) -> str:
    """Best-effort human message from an upstream error body."""
    try:
        body = response.json()
    except ValueError:
        return response.text[:200] or response.reason_phrase
    if isinstance(body, dict):
        err = body.get("error")
        if isinstance(err, dict) and err.get("message"):
            return str(err["message"])
        for field in ("message", "error_description", "msg", "error"):
            if body.get(field):
                return str(body[field])
    return response.reason_phrase


async def request(
    client: httpx.AsyncClient,
    service: str,
    method: str,
    url: str,
    **kwargs: Any,
) -> httpx.Response:
    """Send one request and return the 2xx response.

    Args:
        client: Shared async client.
        service: Upstream name used in errors and logs.
        method: HTTP method.
        url: Absolute URL.
        **kwargs: Passed to httpx (params, json, data, headers, content).

    Raises:
        UpstreamFailureException: On transport error or non-2xx status.
    """
    span_attributes = {"upstream.service": service, "http.method": method}
    async with TracedOperation(f"upstream.{service}", span_attributes):
        try:
            response = await client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("%s %s %s transport error: %s", service, method, url, exc)
            raise UpstreamFailureException(service, str(exc) or type(exc).__name__) from exc
        if response.is_error:
            message = error_message(response)
            logger.warning(
                "%s %s %s returned %s: %s",
                service,
                method,
                url,
                response.status_code,
                message,
            )
            raise UpstreamFailureException(service, message, response.status_code)
        return response
