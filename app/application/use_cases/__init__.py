"""Marketplace use cases (one service per area, all reads and writes via DataAccess)."""

from app.application.use_cases.images import ImageUrlService
from app.application.use_cases.notifications import NotificationService
from app.application.use_cases.onboarding import OnboardingService
from app.application.use_cases.profiles import ProfileService
from app.application.use_cases.properties import PropertyService
from app.application.use_cases.rent_payments import PaymentService
from app.application.use_cases.tenant_requests import (
    PropertyRequestService,
    RentalApplicationService,
    ViewingRequestService,
)

__all__ = [
    "ImageUrlService",
    "NotificationService",
    "OnboardingService",
    "PaymentService",
    "ProfileService",
    "PropertyRequestService",
    "PropertyService",
    "RentalApplicationService",
    "ViewingRequestService",
]
