"""Domain exceptions for the marketplace.

Defines domain-level exceptions for the four error kinds the application
surfaces (not found, validation, upstream failure, auth required). These
exceptions are independent of infrastructure concerns. Presentation layer
maps them to HTTP responses in exception handlers; the data access layer
turns them into Result values.
"""

from typing import Any

from app.domain.enums import ErrorKind


class MarketplaceException(Exception):
    """Base exception for all marketplace application errors.

    All custom exceptions should inherit from this class to allow
    consistent error handling and logging. Presentation layer maps
    these to HTTP responses using message, error_code, and details.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. field, resource_id).
        kind: Error category; subclasses set it.
    """

    kind: ErrorKind = ErrorKind.UPSTREAM_FAILURE

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON error responses."""
        return {
            "error": self.error_code,
            "kind": self.kind.value,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(MarketplaceException):
    """Raised when a required field is missing or invalid before an upstream call."""

    kind = ErrorKind.VALIDATION

    def __init__(self, message: str, field: str | None = None) -> None:
        """Initialize with message and optional field name.

        Args:
            message: Description of the validation failure.
            field: Optional field or attribute that failed validation.
        """
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class NotFoundException(MarketplaceException):
    """Raised when a queried row is absent."""

    kind = ErrorKind.NOT_FOUND

    def __init__(self, resource_type: str, resource_id: str) -> None:
        """Initialize with resource type and id.

        Args:
            resource_type: Type of resource (e.g. 'property', 'profile').
            resource_id: The ID that was not found.
        """
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            "RESOURCE_NOT_FOUND",
            {"resource_type": resource_type, "resource_id": resource_id},
        )


class UpstreamFailureException(MarketplaceException):
    """Raised on network or service-side failure of an external collaborator.

    Covers the data API, storage, geocoding, email and payment processor.
    """

    kind = ErrorKind.UPSTREAM_FAILURE

    def __init__(
        self,
        service: str,
        message: str,
        status_code: int | None = None,
    ) -> None:
        """Initialize with the failing service and reason.

        Args:
            service: Upstream name (e.g. 'data_api', 'storage', 'stripe').
            message: Reason reported by the upstream or transport.
            status_code: HTTP status returned by the upstream, if any.
        """
        details: dict[str, Any] = {"service": service}
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__(f"{service} request failed: {message}", "UPSTREAM_FAILURE", details)
        self.service = service
        self.status_code = status_code


class AuthRequiredException(MarketplaceException):
    """Raised when an operation is attempted without an authenticated session."""

    kind = ErrorKind.AUTH_REQUIRED

    def __init__(self, message: str = "Authentication required") -> None:
        """Initialize with optional message.

        Args:
            message: Description shown to the caller.
        """
        super().__init__(message, "AUTH_REQUIRED")


class PermissionDeniedException(MarketplaceException):
    """Raised when an authenticated user acts on a resource they do not own."""

    kind = ErrorKind.AUTH_REQUIRED

    def __init__(self, resource: str, action: str) -> None:
        super().__init__(
            f"Permission denied: {action} on {resource}",
            "PERMISSION_DENIED",
            {"resource": resource, "action": action},
        )


class DuplicateApplicationException(ValidationException):
    """Raised when a user already has a pending application for the property."""

    def __init__(self, property_id: str) -> None:
        super().__init__(
            "You already have a pending application for this property",
            field="property_id",
        )
        self.details["property_id"] = property_id


class VerificationAttemptsExceededException(ValidationException):
    """Raised when an email verification code was guessed wrong too many times."""

    def __init__(self, verification_id: str) -> None:
        super().__init__(
            "Too many attempts. Please request a new verification code.", field="code"
        )
        self.error_code = "TOO_MANY_ATTEMPTS"
        self.details["verification_id"] = verification_id
