"""Request context management using contextvars.

Provides async-safe storage for request-scoped identifiers (request id,
correlation id, signed-in user id) so log records can be tagged without
passing the request around.

Usage:
    token = bind_request(request_id="abc", correlation_id="abc")
    ...
    reset_request(token)
"""

from contextvars import ContextVar, Token
from dataclasses import dataclass


@dataclass(frozen=True)
class RequestContext:
    """Immutable snapshot of the current request identifiers."""

    request_id: str | None = None
    correlation_id: str | None = None
    user_id: str | None = None


_EMPTY = RequestContext()
_current: ContextVar[RequestContext] = ContextVar("request_context", default=_EMPTY)


def bind_request(request_id: str, correlation_id: str | None = None) -> Token[RequestContext]:
    """Start a request context; returns a token for reset_request."""
    return _current.set(RequestContext(request_id=request_id, correlation_id=correlation_id))


def reset_request(token: Token[RequestContext]) -> None:
    _current.reset(token)


def set_current_user(user_id: str | None) -> None:
    """Record the signed-in user for the rest of this request (auth dependency)."""
    ctx = _current.get()
    _current.set(RequestContext(ctx.request_id, ctx.correlation_id, user_id))


def get_context() -> RequestContext:
    return _current.get()
