"""Fixed HTML templates for role and payment verification emails.

User-supplied values are stripped of markup before being placed in the
template.
"""

from __future__ import annotations

from app.application.dtos.email import EmailMessage
from app.shared.utils.sanitization import InputSanitizer

_STYLE = """
  body { font-family: Arial, sans-serif; line-height: 1.6; color: #333; }
  .container { max-width: 600px; margin: 0 auto; padding: 20px; }
  .header { background: HEADER_COLOR; color: white; padding: 20px; text-align: center; border-radius: 8px 8px 0 0; }
  .content { background: #f9f9f9; padding: 20px; border: 1px solid #ddd; border-radius: 0 0 8px 8px; }
  .info-row { margin: 10px 0; padding: 10px; background: white; border-radius: 4px; }
  .label { font-weight: bold; color: #666; }
  .success-box { background: #e8f5e9; border-left: 4px solid #4CAF50; padding: 15px; margin: 20px 0; }
  .button { display: inline-block; padding: 12px 24px; background: #FF6B35; color: white; text-decoration: none; border-radius: 4px; margin-top: 20px; }
"""


def _clean(value: str | None, default: str = "Not provided") -> str:
    if not value or not value.strip():
        return default
    return InputSanitizer.sanitize_html(value.strip())


def format_business_type(value: str | None) -> str:
    """'property_management' -> 'Property Management'."""
    if not value:
        return "Not specified"
    return " ".join(word.capitalize() for word in value.replace("_", " ").split())


def _page(title: str, body: str, header_color: str = "#FF6B35") -> str:
    style = _STYLE.replace("HEADER_COLOR", header_color)
    return f"""<!DOCTYPE html>
<html>
<head><style>{style}</style></head>
<body>
  <div class="container">
    <div class="header"><h2>{title}</h2></div>
    <div class="content">{body}</div>
  </div>
</body>
</html>"""


def _row(label: str, value: str) -> str:
    return f'<div class="info-row"><span class="label">{label}:</span> {value}</div>'


def role_request_email(
    admin_email: str,
    user_email: str,
    user_name: str | None,
    business_name: str | None,
    business_type: str | None,
    additional_info: str | None,
    dashboard_url: str,
) -> EmailMessage:
    """Email to the admin asking to upgrade a user to property owner."""
    rows = "".join(
        [
            _row("Name", _clean(user_name)),
            _row("Email", _clean(user_email)),
            _row("Business Name", _clean(business_name)),
            _row("Business Type", _clean(format_business_type(business_type))),
            _row("Additional Information", _clean(additional_info)),
        ]
    )
    body = (
        "<p>A new user has requested to be upgraded to Property Owner status:</p>"
        f"{rows}"
        f'<a class="button" href="{dashboard_url}">Review in Admin Dashboard</a>'
    )
    return EmailMessage(
        to=admin_email,
        subject=f"New Property Owner Request: {_clean(user_name, user_email)}",
        html=_page("New Property Owner Role Request", body),
        text=f"{_clean(user_name, user_email)} ({user_email}) requested Property Owner status.",
    )


_ROLE_FEATURES = {
    "property_owner": (
        "List and manage your properties",
        "View analytics and insights",
        "Receive inquiries from potential renters",
        "Access to owner dashboard and tools",
    ),
    "admin": (
        "Full administrative access",
        "User management capabilities",
        "System configuration options",
        "Advanced analytics and reporting",
    ),
}


def role_display_name(new_role: str) -> str:
    return "Property Owner" if new_role == "property_owner" else "Administrator"


def role_approval_email(
    user_email: str,
    user_name: str | None,
    new_role: str,
    dashboard_url: str,
) -> EmailMessage:
    """Email to the user confirming their account was upgraded to new_role."""
    role = role_display_name(new_role)
    features = _ROLE_FEATURES.get(new_role, _ROLE_FEATURES["admin"])
    items = "".join(f"<li>{item}</li>" for item in features)
    body = (
        f"<p>Dear {_clean(user_name, 'User')},</p>"
        '<div class="success-box"><strong>Great news!</strong> Your request to become a '
        f"<strong>{role}</strong> has been approved.</div>"
        f"<p>You now have access to additional features:</p><ul>{items}</ul>"
        f'<a class="button" href="{dashboard_url}">Go to Dashboard</a>'
    )
    return EmailMessage(
        to=user_email,
        subject=f"Your account has been upgraded to {role}",
        html=_page("Your Account Has Been Upgraded!", body, header_color="#4CAF50"),
        text=f"Your request to become a {role} has been approved.",
    )


def payment_verification_email(
    to: str,
    property_title: str | None,
    code: str,
    expires_in_minutes: int,
) -> EmailMessage:
    """Email with the one-time code a tenant enters before paying."""
    title = _clean(property_title, "Property")
    body = (
        "<p>Hello!</p>"
        "<p>You're about to complete your rental payment. Please verify your email "
        "address with the code below before the payment is processed.</p>"
        f"{_row('Property', title)}{_row('Email', _clean(to))}"
        f'<div class="success-box" style="text-align:center;font-size:32px;'
        f'letter-spacing:8px;font-family:monospace"><strong>{code}</strong></div>'
        f"<p>This code expires in <strong>{expires_in_minutes} minutes</strong>. "
        "Never share it with anyone. If you didn't start this payment, ignore this "
        "email and contact support.</p>"
    )
    return EmailMessage(
        to=to,
        subject="Payment Verification Code - Rental Application",
        html=_page("Payment Verification", body, header_color="#dc2626"),
        text=(
            f"Your verification code for {title} is: {code}\n"
            f"It expires in {expires_in_minutes} minutes. Never share this code with anyone."
        ),
    )
