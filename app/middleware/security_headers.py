"""Security headers middleware.

Adds security response headers to every response, and Cache-Control:
no-store to API responses (they carry per-user data and signed URLs).
Raw ASGI.
"""

from typing import Callable

from app.middleware._asgi import add_response_headers

DEFAULT_HEADERS = {
    "Strict-Transport-Security": "max-age=31536000; includeSubDomains",
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Permissions-Policy": "microphone=(), camera=()",
}
API_HEADERS = {
    "Content-Security-Policy": "default-src 'none'; frame-ancestors 'none'",
    "Cache-Control": "no-store",
}


def _encode(headers: dict[str, str]) -> list[tuple[bytes, bytes]]:
    return [(k.encode(), v.encode()) for k, v in headers.items()]


def SecurityHeadersMiddleware(
    app: Callable,
    headers: dict[str, str] | None = None,
    api_prefix: str = "/api/",
) -> Callable:
    """Set security headers on all responses and no-store on API paths. Raw ASGI."""
    common = _encode(headers if headers is not None else DEFAULT_HEADERS)
    api_only = _encode(API_HEADERS)

    async def asgi_app(scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await app(scope, receive, send)
            return
        is_api = scope.get("path", "").startswith(api_prefix)

        async def send_wrapper(message: dict) -> None:
            if message["type"] == "http.response.start":
                add_response_headers(message, common + api_only if is_api else common)
            await send(message)

        await app(scope, receive, send_wrapper)

    return asgi_app
