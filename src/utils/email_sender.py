"""Outgoing email.

``EmailSender.send`` never raises: it returns an ``EmailResult`` the caller
inspects, so each call site decides whether a failed notification matters.
"""

import logging
import smtplib
from dataclasses import dataclass
from email.message import EmailMessage
from typing import Optional

from config import Settings

logger = logging.getLogger(__name__)


@dataclass
class EmailResult:
    success: bool
    error: Optional[str] = None


class EmailSender:
    """Sends HTML email over SMTP with STARTTLS."""

    def __init__(self, settings: Settings):
        self.settings = settings

    def send(self, to: str, subject: str, html: str) -> EmailResult:
        """Send one HTML email.

        Args:
            to: Recipient address.
            subject: Subject line.
            html: HTML body.

        Returns:
            EmailResult with ``success`` and, on failure, the error text.
        """
        s = self.settings
        if not s.smtp_host or not s.email_from:
            logger.error("SMTP is not configured; cannot email %s", to)
            return EmailResult(success=False, error="SMTP is not configured")

        msg = EmailMessage()
        msg["Subject"] = subject
        msg["From"] = s.email_from
        msg["To"] = to
        msg.set_content("This message requires an HTML capable email client.")
        msg.add_alternative(html, subtype="html")

        try:
            with smtplib.SMTP(s.smtp_host, s.smtp_port, timeout=10) as server:
                server.starttls()
                if s.smtp_user:
                    server.login(s.smtp_user, s.smtp_password)
                server.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            logger.error("Error sending email to %s: %s", to, e)
            return EmailResult(success=False, error=str(e))

        logger.info("Email sent to %s: %s", to, subject)
        return EmailResult(success=True)
