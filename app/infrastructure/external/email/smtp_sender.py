"""Transactional email senders: SMTP relay and log-only fallback."""

from __future__ import annotations

import asyncio
import logging
import smtplib
from email.message import EmailMessage as MimeMessage

from app.application.dtos.email import EmailMessage
from app.domain.exceptions import UpstreamFailureException
from app.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


class SmtpEmailSender:
    """Sends HTML email through an SMTP relay.

    smtplib is blocking; each send runs in a worker thread via asyncio.to_thread.
    """

    def __init__(
        self,
        host: str,
        port: int,
        from_address: str,
        username: str = "",
        password: str = "",
        use_tls: bool = True,
        timeout: float = 15.0,
    ) -> None:
        self.host = host
        self.port = port
        self.from_address = from_address
        self.username = username
        self._password = password
        self.use_tls = use_tls
        self.timeout = timeout

    def _build(self, message: EmailMessage) -> MimeMessage:
        mime = MimeMessage()
        mime["From"] = self.from_address
        mime["To"] = message.to
        mime["Subject"] = message.subject
        mime.set_content(message.text or "This message requires an HTML-capable email client.")
        mime.add_alternative(message.html, subtype="html")
        return mime

    def _send_sync(self, mime: MimeMessage) -> None:
        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
            if self.use_tls:
                smtp.starttls()
            if self.username:
                smtp.login(self.username, self._password)
            smtp.send_message(mime)

    async def send(self, message: EmailMessage) -> None:
        """Deliver message through the relay.

        Raises:
            UpstreamFailureException: Connection, auth or delivery failure.
        """
        mime = self._build(message)
        try:
            await asyncio.to_thread(self._send_sync, mime)
        except (smtplib.SMTPException, OSError) as exc:
            logger.warning("SMTP send to %s failed: %s", message.to, exc)
            raise UpstreamFailureException("email", str(exc) or type(exc).__name__) from exc
        logger.info("Email sent to %s (subject=%r)", message.to, message.subject[:80])


class LogOnlyEmailSender:
    """IEmailSender implementation that logs instead of sending email.

    Used when no SMTP relay is configured (local development, tests).
    """

    async def send(self, message: EmailMessage) -> None:
        logger.info(
            "Email: would send to %s (subject=%r)",
            message.to,
            message.subject[:80],
        )
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("Email body (first 500 chars): %s", message.html[:500])
