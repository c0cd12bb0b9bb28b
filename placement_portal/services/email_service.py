"""
Email Service - outbound mail over SMTP.

Disabled when `smtp_host` is empty; `send()` then logs and returns False.
"""

import logging
import smtplib
from email.message import EmailMessage
from email.utils import formataddr
from html import escape
from typing import Optional

from placement_portal.core.config import get_settings

logger = logging.getLogger(__name__)


class EmailService:
    def __init__(self, settings=None):
        self.settings = settings or get_settings()

    @property
    def enabled(self) -> bool:
        return bool(self.settings.smtp_host)

    def build_message(self, to: str, subject: str, text: str, html: Optional[str] = None) -> EmailMessage:
        message = EmailMessage()
        message["From"] = formataddr((self.settings.from_name, self.settings.from_email))
        message["To"] = to
        message["Subject"] = subject
        message.set_content(text)
        if html:
            message.add_alternative(html, subtype="html")
        return message

    def send(self, to: str, subject: str, text: str, html: Optional[str] = None) -> bool:
        if not self.enabled:
            logger.debug("SMTP not configured, skipping email to %s", to)
            return False

        message = self.build_message(to, subject, text, html)
        with smtplib.SMTP(self.settings.smtp_host, self.settings.smtp_port, timeout=10) as smtp:
            if self.settings.smtp_use_tls:
                smtp.starttls()
            if self.settings.smtp_user:
                smtp.login(self.settings.smtp_user, self.settings.smtp_password)
            smtp.send_message(message)
        logger.info("Email sent to %s: %s", to, subject)
        return True


def render_notification_email(first_name: str, title: str, message: str) -> str:
    """HTML body for a notification email; every value is escaped."""
    return (
        '<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">'
        f'<h1 style="color: #2563eb;">{escape(title)}</h1>'
        f"<p>Hi {escape(first_name or 'there')},</p>"
        f"<p>{escape(message)}</p>"
        "<p>Best regards,<br>Placement Cell Team</p>"
        "</div>"
    )
