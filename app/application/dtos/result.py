"""Result value returned by the data access layer instead of raising."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

from app.domain.enums import ErrorKind
from app.domain.exceptions import MarketplaceException, UpstreamFailureException

T = TypeVar("T")


@dataclass(frozen=True)
class Result(Generic[T]):
    """Outcome of a fetch or mutation: a value, or an error with its kind."""

    value: T | None = None
    error: MarketplaceException | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def kind(self) -> ErrorKind | None:
        return self.error.kind if self.error is not None else None

    @classmethod
    def success(cls, value: T) -> Result[T]:
        return cls(value=value)

    @classmethod
    def failure(cls, error: BaseException) -> Result[T]:
        """Wrap error; anything not a MarketplaceException counts as an upstream failure."""
        if not isinstance(error, MarketplaceException):
            error = UpstreamFailureException("unknown", str(error) or type(error).__name__)
        return cls(error=error)

    def unwrap(self) -> T:
        """Return the value or raise the stored error."""
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]
