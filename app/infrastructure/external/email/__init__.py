"""Email integration: SMTP relay sender, fixed templates."""

from app.infrastructure.external.email.smtp_sender import LogOnlyEmailSender, SmtpEmailSender
from app.infrastructure.external.email.templates import (
    format_business_type,
    payment_verification_email,
    role_approval_email,
    role_display_name,
    role_request_email,
)

__all__ = [
    "LogOnlyEmailSender",
    "SmtpEmailSender",
    "format_business_type",
    "payment_verification_email",
    "role_approval_email",
    "role_display_name",
    "role_request_email",
]
