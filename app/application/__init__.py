"""Application layer: interfaces, data access, use cases.

Depends only on domain and protocol definitions (DIP).
Infrastructure implements the interfaces (data API, storage, email, etc.).
"""

from app.application.interfaces import (
    IAuthService,
    ICacheService,
    IDataApi,
    IEmailSender,
    IGeocoder,
    IPaymentProcessor,
    IStorageService,
)
from app.application.services import DataAccess, MutationRunner

__all__ = [
    "DataAccess",
    "IAuthService",
    "ICacheService",
    "IDataApi",
    "IEmailSender",
    "IGeocoder",
    "IPaymentProcessor",
    "IStorageService",
    "MutationRunner",
]
