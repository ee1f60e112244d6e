"""Request and correlation ID middleware.

Generates or forwards the request id and correlation id, binds both to the
request context (so every log line of the request carries them) and echoes
them on the response. Client-provided values are sanitized (length and
character set) to prevent log injection. Raw ASGI, so streaming responses
and background tasks are unaffected.
"""

import re
import uuid
from typing import Callable

from app.middleware._asgi import add_response_headers, get_header
from app.shared.context import bind_request, reset_request

# Safe for logging: alphanumeric, hyphen, underscore; max length to avoid abuse.
ID_MAX_LENGTH = 64
ID_ALLOWED_PATTERN = re.compile(r"^[a-zA-Z0-9_-]{1," + str(ID_MAX_LENGTH) + r"}$")


def sanitize_id(raw: str | None) -> str | None:
    """Return raw stripped if safe, else None."""
    if not raw:
        return None
    value = raw.strip()
    return value if ID_ALLOWED_PATTERN.match(value) else None


def RequestContextMiddleware(
    app: Callable,
    request_id_header: str = "X-Request-ID",
    correlation_id_header: str = "X-Correlation-ID",
) -> Callable:
    """Bind request/correlation ids for the request and set them on the response. Raw ASGI."""

    async def asgi_app(scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await app(scope, receive, send)
            return
        request_id = sanitize_id(get_header(scope, request_id_header)) or str(uuid.uuid4())
        correlation_id = sanitize_id(get_header(scope, correlation_id_header)) or request_id
        state = scope.setdefault("state", {})
        state["request_id"] = request_id
        state["correlation_id"] = correlation_id
        echo = [
            (request_id_header.encode(), request_id.encode()),
            (correlation_id_header.encode(), correlation_id.encode()),
        ]

        async def send_wrapper(message: dict) -> None:
            if message["type"] == "http.response.start":
                add_response_headers(message, echo, replace=True)
            await send(message)

        token = bind_request(request_id, correlation_id)
        try:
            await app(scope, receive, send_wrapper)
        finally:
            reset_request(token)

    return asgi_app
