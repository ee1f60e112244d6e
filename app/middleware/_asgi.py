"""Raw ASGI helpers shared by the middleware (header access, JSON error replies)."""

import json
from typing import Any, Callable


def get_header(scope: dict, name: str) -> str | None:
    """Return first header value for name (case-insensitive). Headers are (bytes, bytes)."""
    want = name.lower().encode()
    for k, v in scope.get("headers", []):
        if k.lower() == want:
            return v.decode("utf-8", errors="replace")
    return None


def add_response_headers(message: dict, pairs: list[tuple[bytes, bytes]], *, replace: bool = False) -> None:
    """Add pairs to an http.response.start message; existing names win unless replace."""
    headers = list(message.get("headers", []))
    present = {h[0].lower() for h in headers}
    for name, value in pairs:
        if name.lower() in present:
            if not replace:
                continue
            headers = [h for h in headers if h[0].lower() != name.lower()]
        headers.append((name, value))
        present.add(name.lower())
    message["headers"] = headers


async def send_json_error(
    send: Callable, status: int, error: str, message: str, details: dict[str, Any]
) -> None:
    """Send a complete JSON error response in the same shape as the exception handlers."""
    body = json.dumps({"error": error, "message": message, "details": details}).encode()
    await send({
        "type": "http.response.start",
        "status": status,
        "headers": [
            (b"content-type", b"application/json"),
            (b"content-length", str(len(body)).encode()),
        ],
    })
    await send({"type": "http.response.body", "body": body, "more_body": False})
