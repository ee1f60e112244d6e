"""Email templates and senders."""

import logging
import smtplib

import pytest

from app.application.dtos.email import EmailMessage
from app.domain.exceptions import UpstreamFailureException
from app.infrastructure.external.email import (
    LogOnlyEmailSender,
    SmtpEmailSender,
    format_business_type,
    role_approval_email,
    role_display_name,
    role_request_email,
)


def test_format_business_type() -> None:
    assert format_business_type("property_management") == "Property Management"
    assert format_business_type(None) == "Not specified"


def test_role_request_email_strips_markup() -> None:
    message = role_request_email(
        admin_email="admin@example.com",
        user_email="ana@example.com",
        user_name="Ana <script>alert(1)</script>",
        business_name=None,
        business_type="real_estate_agency",
        additional_info="<b>Ten</b> listings",
        dashboard_url="https://app.example.com/dashboard?tab=users",
    )
    assert message.to == "admin@example.com"
    assert "<script>" not in message.html
    assert "<b>" not in message.html
    assert "Real Estate Agency" in message.html
    assert "Not provided" in message.html
    assert message.subject.startswith("New Property Owner Request: Ana")


def test_role_approval_email() -> None:
    message = role_approval_email("ana@example.com", None, "property_owner", "https://app/dashboard")
    assert message.subject == "Your account has been upgraded to Property Owner"
    assert "Dear User" in message.html
    assert "List and manage your properties" in message.html
    assert role_display_name("admin") == "Administrator"


class RecordingSMTP:
    instances: list["RecordingSMTP"] = []
    fail_on_send = False

    def __init__(self, host, port, timeout=None):
        self.host, self.port = host, port
        self.calls = []
        RecordingSMTP.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def starttls(self):
        self.calls.append("starttls")

    def login(self, username, password):
        self.calls.append(("login", username))

    def send_message(self, mime):
        if self.fail_on_send:
            raise smtplib.SMTPRecipientsRefused({mime["To"]: (550, b"no such user")})
        self.calls.append(("send", mime["To"], mime["Subject"]))


@pytest.fixture
def smtp(monkeypatch):
    RecordingSMTP.instances = []
    RecordingSMTP.fail_on_send = False
    monkeypatch.setattr(smtplib, "SMTP", RecordingSMTP)
    return RecordingSMTP


MESSAGE = EmailMessage(to="ana@example.com", subject="Hello", html="<p>Hi</p>", text="Hi")


async def test_smtp_sender_sends_over_tls(smtp) -> None:
    sender = SmtpEmailSender("smtp.example.com", 587, "noreply@example.com", "user", "pw")
    await sender.send(MESSAGE)
    (conn,) = smtp.instances
    assert conn.calls == ["starttls", ("login", "user"), ("send", "ana@example.com", "Hello")]


async def test_smtp_failure_is_upstream_failure(smtp) -> None:
    smtp.fail_on_send = True
    sender = SmtpEmailSender("smtp.example.com", 25, "noreply@example.com", use_tls=False)
    with pytest.raises(UpstreamFailureException) as exc_info:
        await sender.send(MESSAGE)
    assert exc_info.value.details["service"] == "email"


async def test_log_only_sender_logs(caplog) -> None:
    with caplog.at_level(logging.INFO, logger="app.infrastructure.external.email.smtp_sender"):
        await LogOnlyEmailSender().send(MESSAGE)
    assert "would send to ana@example.com" in caplog.text
