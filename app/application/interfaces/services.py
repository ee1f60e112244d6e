"""Service interfaces (ports) for the application layer.

Protocols define contracts for the cache and the external collaborators
(DIP). Infrastructure implements them; services depend only on these.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Sequence
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from app.application.dtos.auth import AuthUser
    from app.application.dtos.email import EmailMessage
    from app.application.dtos.payment import ConnectedAccount, PaymentIntent
    from app.application.dtos.storage import UploadResult
    from app.domain.value_objects import Coordinates, QueryDescriptor, QueryFilter

Row = dict[str, Any]


# Query cache interface
class ICacheService(Protocol):
    """Protocol for the query cache (store + single-flight fetch coordinator)."""

    def is_loading(self, key: str) -> bool:
        """Return True if a fetch for key is in flight."""
        ...

    @property
    def any_loading(self) -> bool:
        """Return True if any fetch is in flight."""
        ...

    async def fetch(
        self,
        descriptor: QueryDescriptor | str,
        loader: Callable[[], Awaitable[Any]],
        *,
        use_cache: bool = True,
        ttl: float | None = None,
        on_error: Callable[[BaseException], None] | None = None,
    ) -> Any:
        """Return cached value or load it once for all concurrent callers."""
        ...

    def invalidate(self, pattern: str) -> int:
        """Remove entries whose key contains pattern; return count removed."""
        ...


# Managed data API interface
class IDataApi(Protocol):
    """Protocol for table reads and writes against the managed data API."""

    async def select(self, descriptor: QueryDescriptor) -> list[Row] | Row:
        """Run a read; one row when descriptor.single, else a list."""
        ...

    async def insert(self, table: str, rows: Row | list[Row], *, upsert: bool = False) -> list[Row]:
        """Insert (or merge on primary key when upsert) and return stored rows."""
        ...

    async def update(self, table: str, values: Row, filters: Sequence[QueryFilter]) -> list[Row]:
        """Update rows matching filters and return them."""
        ...

    async def delete(self, table: str, filters: Sequence[QueryFilter]) -> list[Row]:
        """Delete rows matching filters and return them."""
        ...


# Managed auth interface
class IAuthService(Protocol):
    async def get_user(self, access_token: str | None) -> AuthUser:
        """Resolve a bearer access token to the signed-in user."""
        ...


# Object storage interface
class IStorageService(Protocol):
    """Protocol for bucket/path object storage with public and signed URLs."""

    async def upload(
        self,
        bucket: str,
        path: str,
        data: bytes,
        content_type: str,
        *,
        upsert: bool = False,
        public: bool = False,
    ) -> UploadResult:
        """Upload data and return where to read it from."""
        ...

    async def create_signed_url(self, bucket: str, path: str, expires_in: int | None = None) -> str:
        """Return a time-limited URL for a private object."""
        ...

    def public_url(self, bucket: str, path: str) -> str:
        """Return the permanent URL of an object in a public bucket."""
        ...

    async def list(self, bucket: str, prefix: str) -> list[dict[str, Any]]:
        """List objects under prefix, newest first."""
        ...

    async def remove(self, bucket: str, paths: list[str]) -> list[dict[str, Any]]:
        """Delete objects; returns metadata of removed objects."""
        ...


# Geocoding interface
class IGeocoder(Protocol):
    async def geocode(self, address: str | None) -> Coordinates | None:
        """Best-effort coordinates for address; None when unresolvable."""
        ...


# Email interface
class IEmailSender(Protocol):
    """Sends one rendered message through the transactional relay."""

    async def send(self, message: EmailMessage) -> None:
        """Deliver message; raise UpstreamFailureException on relay failure."""
        ...


# Payment processor interface
class IPaymentProcessor(Protocol):
    """Connected accounts for owner onboarding and payment intents for rent."""

    @property
    def configured(self) -> bool: ...

    async def create_account(
        self, email: str, user_id: str, business_type: str = "individual"
    ) -> ConnectedAccount: ...

    async def create_onboarding_link(
        self, account_id: str, refresh_url: str, return_url: str
    ) -> str: ...

    async def retrieve_account(self, account_id: str) -> ConnectedAccount: ...

    async def create_payment_intent(
        self,
        amount_cents: int,
        currency: str,
        metadata: dict[str, str],
        description: str,
        receipt_email: str | None = None,
    ) -> PaymentIntent: ...

    async def retrieve_payment_intent(self, intent_id: str) -> PaymentIntent: ...

    async def cancel_payment_intent(self, intent_id: str) -> PaymentIntent: ...
