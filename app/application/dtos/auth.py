"""DTOs for the authenticated session (managed auth service)."""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class AuthUser:
    """User resolved from a bearer access token. No credentials kept."""

    id: str
    email: str | None = None
    role: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
