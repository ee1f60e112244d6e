"""Domain layer: enums and exceptions.

No dependencies on infrastructure or presentation. Used by application
and infrastructure layers.
"""

from app.domain.enums import (
    ApplicationStatus,
    EntryStatus,
    ErrorKind,
    IndicatorState,
    PaymentStatus,
    PropertyStatus,
    RecipientType,
    UserRole,
    ViewingStatus,
)
from app.domain.exceptions import (
    AuthRequiredException,
    DuplicateApplicationException,
    MarketplaceException,
    NotFoundException,
    PermissionDeniedException,
    UpstreamFailureException,
    ValidationException,
    VerificationAttemptsExceededException,
)

__all__ = [
    # Enums
    "ApplicationStatus",
    "EntryStatus",
    "ErrorKind",
    "IndicatorState",
    "PaymentStatus",
    "PropertyStatus",
    "RecipientType",
    "UserRole",
    "ViewingStatus",
    # Exceptions
    "AuthRequiredException",
    "DuplicateApplicationException",
    "MarketplaceException",
    "NotFoundException",
    "PermissionDeniedException",
    "UpstreamFailureException",
    "ValidationException",
    "VerificationAttemptsExceededException",
]
