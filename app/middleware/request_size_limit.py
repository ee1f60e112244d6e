"""Request body size limit middleware.

Rejects bodies larger than the configured maximum (avatar and listing
uploads). A declared Content-Length over the limit is refused before
reading. A body without Content-Length (chunked) is buffered up to the
limit and replayed to the app. Raw ASGI.
"""

from typing import Callable

from app.middleware._asgi import get_header, send_json_error


def RequestSizeLimitMiddleware(app: Callable, max_bytes: int) -> Callable:
    """Reject requests whose body exceeds max_bytes (413). Raw ASGI."""

    async def reject(send: Callable, actual: int) -> None:
        await send_json_error(
            send,
            413,
            "PAYLOAD_TOO_LARGE",
            f"Request body must be at most {max_bytes} bytes",
            {"max_bytes": max_bytes, "content_length": actual},
        )

    async def asgi_app(scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await app(scope, receive, send)
            return

        declared = get_header(scope, "content-length")
        if declared is not None and declared.strip().isdigit():
            if int(declared) > max_bytes:
                await reject(send, int(declared))
                return
            await app(scope, receive, send)
            return

        chunks: list[bytes] = []
        total = 0
        more_body = True
        while more_body:
            message = await receive()
            if message["type"] != "http.request":
                await app(scope, receive, send)
                return
            body = message.get("body", b"")
            total += len(body)
            if total > max_bytes:
                await reject(send, total)
                return
            chunks.append(body)
            more_body = message.get("more_body", False)

        buffered = b"".join(chunks)
        sent = False

        async def single_receive() -> dict:
            nonlocal sent
            if not sent:
                sent = True
                return {"type": "http.request", "body": buffered, "more_body": False}
            return await receive()

        await app(scope, single_receive, send)

    return asgi_app
