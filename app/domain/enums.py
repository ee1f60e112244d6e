"""Domain enumerations for the marketplace.

Enums represent fixed sets of domain values (e.g. application status,
cache entry status, error kinds).
"""

from enum import Enum


class _ValuesMixin:
    """Mixin that adds a values() classmethod to str Enums."""

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid values as strings."""
        return [member.value for member in cls]


class ErrorKind(_ValuesMixin, str, Enum):
    """Error category surfaced in Result values and HTTP error bodies."""

    NOT_FOUND = "not_found"
    VALIDATION = "validation"
    UPSTREAM_FAILURE = "upstream_failure"
    AUTH_REQUIRED = "auth_required"


class EntryStatus(_ValuesMixin, str, Enum):
    """Lifecycle status of a query cache entry."""

    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


class IndicatorState(_ValuesMixin, str, Enum):
    """Global loading indicator state (debounced show/hide)."""

    IDLE = "idle"
    PENDING_SHOW = "pending_show"
    SHOWN = "shown"
    HIDING = "hiding"


class ApplicationStatus(_ValuesMixin, str, Enum):
    """Rental application status.

    Owners review with the first four; payment_pending and completed are
    set by the rent payment flow.
    """

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    WITHDRAWN = "withdrawn"
    PAYMENT_PENDING = "payment_pending"
    COMPLETED = "completed"

    @classmethod
    def review_values(cls) -> list[str]:
        return [cls.PENDING.value, cls.APPROVED.value, cls.REJECTED.value, cls.WITHDRAWN.value]


class PaymentStatus(_ValuesMixin, str, Enum):
    """Rent payment status on applications and payment records."""

    NOT_REQUIRED = "not_required"
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class RecipientType(_ValuesMixin, str, Enum):
    """Who receives one share of a rent payment."""

    PLATFORM = "platform"
    MANAGEMENT = "management"
    OWNER = "owner"


class ViewingStatus(_ValuesMixin, str, Enum):
    """Viewing request status."""

    PENDING = "pending"
    APPROVED = "approved"
    DECLINED = "declined"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class PropertyStatus(_ValuesMixin, str, Enum):
    """Listing availability."""

    AVAILABLE = "available"
    RENTED = "rented"
    UNAVAILABLE = "unavailable"


class UserRole(_ValuesMixin, str, Enum):
    """Profile role (seekers, property owners, admins)."""

    USER = "user"
    PROPERTY_SEEKER = "property_seeker"
    PROPERTY_OWNER = "property_owner"
    ADMIN = "admin"
