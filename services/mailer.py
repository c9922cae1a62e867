"""Outbound email senders."""

from __future__ import annotations

import logging
import smtplib
import ssl
from abc import ABC, abstractmethod
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Mapping

from flask import current_app

logger = logging.getLogger(__name__)


class EmailDeliveryError(Exception):
    """Raised when an email could not be handed to the mail server."""


class EmailSender(ABC):
    """Interface for email backends."""

    @abstractmethod
    def send(self, to: str, subject: str, body: str) -> None:
        """Deliver an HTML email."""


class SmtpEmailSender(EmailSender):
    """Send mail through an SMTP server using STARTTLS."""

    def __init__(
        self,
        host: str,
        port: int,
        username: str | None,
        password: str | None,
        from_address: str,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.from_address = from_address

    def send(self, to: str, subject: str, body: str) -> None:
        message = MIMEMultipart("alternative")
        message["Subject"] = subject
        message["From"] = f"Bookloop Services <{self.from_address}>"
        message["To"] = to
        message.attach(MIMEText(body, "html"))

        try:
            with smtplib.SMTP(self.host, self.port, timeout=30) as server:
                server.starttls(context=ssl.create_default_context())
                if self.username and self.password:
                    server.login(self.username, self.password)
                server.sendmail(self.from_address, [to], message.as_string())
        except (smtplib.SMTPException, OSError) as exc:
            logger.error("Email to %s failed: %s", to, exc)
            raise EmailDeliveryError("Could not send email. Please try again later.") from exc

        logger.info("Email '%s' sent to %s", subject, to)


class LoggingEmailSender(EmailSender):
    """Write emails to the log; used when no SMTP host is configured."""

    def send(self, to: str, subject: str, body: str) -> None:
        logger.info("Email to %s: %s\n%s", to, subject, body)


def build_email_sender(config: Mapping) -> EmailSender:
    host = config.get("EMAIL_HOST")
    if not host:
        return LoggingEmailSender()
    return SmtpEmailSender(
        host=host,
        port=int(config.get("EMAIL_PORT", 587)),
        username=config.get("EMAIL_USER"),
        password=config.get("EMAIL_PASS"),
        from_address=config.get("EMAIL_FROM"),
    )


def get_email_sender() -> EmailSender:
    return current_app.extensions["email_sender"]


def password_reset_email(reset_url: str) -> tuple[str, str]:
    """Return the subject and HTML body of a password reset email."""

    subject = "Reset Your Password - Bookloop"
    body = (
        "<h2>Reset Your Password</h2>"
        "<p>You recently requested to reset your password for your Bookloop "
        "account. Use the link below to reset it.</p>"
        f'<p><a href="{reset_url}">Reset Password</a></p>'
        "<p>If you didn't request a password reset, you can safely ignore this "
        "email. This link is valid for one hour.</p>"
    )
    return subject, body
