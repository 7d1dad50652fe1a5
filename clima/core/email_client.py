# clima/core/email_client.py
from __future__ import annotations

"""
Email client utilities for the Clima backend.

Responsibilities:
  - Provide one `Mailer` interface for services to use.
  - Deliver through SendGrid when SENDGRID_API_KEY is set.
  - Fall back to SMTP (TLS or SSL) otherwise.

Typical .env configuration:

    SENDGRID_API_KEY=SG.xxxxx
    MAIL_FROM_EMAIL=no-reply@clima.example
    MAIL_FROM_NAME=Clima

or, without SendGrid:

    SMTP_HOST=smtp.gmail.com
    SMTP_PORT=465
    SMTP_USERNAME=clima@gmail.com
    SMTP_PASSWORD=app-password
    SMTP_USE_TLS=false
    SMTP_USE_SSL=true
"""

import logging
import smtplib
from dataclasses import dataclass
from email.message import EmailMessage
from typing import Protocol

from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail

from clima.core.config import Settings
from clima.core.errors import MailDeliveryError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OutgoingEmail:
    to_email: str
    subject: str
    text_body: str
    html_body: str | None = None


class Mailer(Protocol):
    def send(self, message: OutgoingEmail) -> None:
        """Deliver one message or raise MailDeliveryError."""


class SendGridMailer:
    """Transactional email through the SendGrid v3 API."""

    def __init__(self, api_key: str, from_email: str, from_name: str | None = None):
        self.client = SendGridAPIClient(api_key)
        self.from_email = from_email
        self.from_name = from_name

    def send(self, message: OutgoingEmail) -> None:
        mail = Mail(
            from_email=(self.from_email, self.from_name) if self.from_name else self.from_email,
            to_emails=message.to_email,
            subject=message.subject,
            plain_text_content=message.text_body,
            html_content=message.html_body,
        )
        try:
            response = self.client.send(mail)
        except Exception as exc:
            logger.error("SendGrid delivery to %s failed: %s", message.to_email, exc)
            raise MailDeliveryError() from exc

        if response.status_code >= 400:
            logger.error(
                "SendGrid rejected mail to %s with status %s",
                message.to_email,
                response.status_code,
            )
            raise MailDeliveryError()
        logger.info("Email sent to %s via SendGrid", message.to_email)


class SmtpMailer:
    """
    SMTP delivery, TLS or SSL.

    NOTE:
      - You should NOT enable both TLS and SSL at the same time.
      - Typical configs:
          * SSL: SMTP_PORT=465, SMTP_USE_SSL=true,  SMTP_USE_TLS=false
          * TLS: SMTP_PORT=587, SMTP_USE_SSL=false, SMTP_USE_TLS=true
    """

    def __init__(
        self,
        host: str,
        port: int,
        username: str | None,
        password: str | None,
        from_email: str | None = None,
        from_name: str | None = None,
        use_tls: bool = True,
        use_ssl: bool = False,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        # Fallback: if from_email is not set, default to username
        self.from_email = from_email or username or ""
        self.from_name = from_name
        self.use_tls = use_tls
        self.use_ssl = use_ssl

    def _create_smtp_client(self) -> smtplib.SMTP:
        if self.use_ssl:
            return smtplib.SMTP_SSL(self.host, self.port, timeout=30)

        server = smtplib.SMTP(self.host, self.port, timeout=30)
        if self.use_tls:
            try:
                server.starttls()
            except (OSError, smtplib.SMTPException):
                server.close()
                raise
        return server

    def _build_message(self, message: OutgoingEmail) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = (
            f"{self.from_name} <{self.from_email}>" if self.from_name else self.from_email
        )
        msg["To"] = message.to_email
        msg["Subject"] = message.subject

        # Always add a plain-text part
        msg.set_content(message.text_body)
        if message.html_body:
            msg.add_alternative(message.html_body, subtype="html")
        return msg

    def send(self, message: OutgoingEmail) -> None:
        msg = self._build_message(message)
        try:
            server = self._create_smtp_client()
        except (OSError, smtplib.SMTPException) as exc:
            logger.error("Could not connect to SMTP server %s: %s", self.host, exc)
            raise MailDeliveryError() from exc

        try:
            if self.username and self.password:
                server.login(self.username, self.password)
            server.send_message(msg)
        except (OSError, smtplib.SMTPException) as exc:
            logger.error("SMTP delivery to %s failed: %s", message.to_email, exc)
            raise MailDeliveryError() from exc
        finally:
            try:
                server.quit()
            except (OSError, smtplib.SMTPException):
                # Connection is being torn down anyway.
                pass
        logger.info("Email sent to %s via SMTP", message.to_email)


class UnconfiguredMailer:
    """Used when neither SendGrid nor SMTP is configured; every send fails."""

    def send(self, message: OutgoingEmail) -> None:
        logger.error("No mail transport configured; cannot email %s", message.to_email)
        raise MailDeliveryError("Email delivery is not configured.")


def build_mailer(settings: Settings) -> Mailer:
    """Pick the mail transport from settings: SendGrid, then SMTP."""
    if settings.SENDGRID_API_KEY:
        if not settings.MAIL_FROM_EMAIL:
            raise RuntimeError("MAIL_FROM_EMAIL is required when SENDGRID_API_KEY is set.")
        return SendGridMailer(
            settings.SENDGRID_API_KEY,
            settings.MAIL_FROM_EMAIL,
            settings.MAIL_FROM_NAME,
        )

    if settings.SMTP_HOST:
        return SmtpMailer(
            host=settings.SMTP_HOST,
            port=settings.SMTP_PORT,
            username=settings.SMTP_USERNAME,
            password=settings.SMTP_PASSWORD,
            from_email=settings.MAIL_FROM_EMAIL,
            from_name=settings.MAIL_FROM_NAME,
            use_tls=settings.SMTP_USE_TLS,
            use_ssl=settings.SMTP_USE_SSL,
        )

    logger.warning("No mail transport configured (SENDGRID_API_KEY / SMTP_HOST).")
    return UnconfiguredMailer()
