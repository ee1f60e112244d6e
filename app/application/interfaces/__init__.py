"""Application interfaces (ports)."""

from app.application.interfaces.services import (
    IAuthService,
    ICacheService,
    IDataApi,
    IEmailSender,
    IGeocoder,
    IPaymentProcessor,
    IStorageService,
)

__all__ = [
    "IAuthService",
    "ICacheService",
    "IDataApi",
    "IEmailSender",
    "IGeocoder",
    "IPaymentProcessor",
    "IStorageService",
]
