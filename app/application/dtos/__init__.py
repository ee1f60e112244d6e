"""Application DTOs (no dependency on HTTP or upstream payloads)."""

from app.application.dtos.auth import AuthUser
from app.application.dtos.email import EmailMessage
from app.application.dtos.payment import (
    AccountStatus,
    ConnectedAccount,
    FeeSplit,
    OnboardingResult,
    PaymentDetails,
    PaymentIntent,
    PaymentIntentResult,
    PaymentItem,
    VerificationSent,
)
from app.application.dtos.result import Result
from app.application.dtos.storage import UploadResult

__all__ = [
    "AccountStatus",
    "AuthUser",
    "ConnectedAccount",
    "EmailMessage",
    "FeeSplit",
    "OnboardingResult",
    "PaymentDetails",
    "PaymentIntent",
    "PaymentIntentResult",
    "PaymentItem",
    "Result",
    "UploadResult",
    "VerificationSent",
]
