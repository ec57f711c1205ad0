"""
Outgoing mail for account verification and password reset.

Delivery goes through aiosmtplib. When SMTP is not configured the message is
logged and skipped, which keeps local development working without a server.
"""

import logging
from email.message import EmailMessage

import aiosmtplib
from fastapi import Request

from ..config import Settings
from ..core.exceptions import MailDeliveryError

logger = logging.getLogger(__name__)


class Mailer:
    def __init__(self, settings: Settings):
        self.host = settings.smtp_host
        self.port = settings.smtp_port
        self.username = settings.smtp_user
        self.password = settings.smtp_password
        self.sender = settings.email_from

    @property
    def is_configured(self) -> bool:
        return bool(self.host)

    async def send_email(self, to: str, subject: str, html: str) -> None:
        if not self.is_configured:
            logger.info("SMTP not configured, skipping email to %s: %s", to, subject)
            return

        message = EmailMessage()
        message["From"] = self.sender
        message["To"] = to
        message["Subject"] = subject
        message.set_content("This message requires an HTML capable mail client.")
        message.add_alternative(html, subtype="html")

        try:
            await aiosmtplib.send(
                message,
                hostname=self.host,
                port=self.port,
                username=self.username,
                password=self.password,
                use_tls=self.port == 465,
                start_tls=self.port == 587,
            )
        except (aiosmtplib.SMTPException, OSError) as exc:
            raise MailDeliveryError(f"Failed to send email to {to}") from exc
        logger.info("Email sent to %s: %s", to, subject)


def verification_email(link: str, hours: float) -> str:
    return f"""
      <h1>Verify your email</h1>
      <p>Welcome to HostelMS. Please confirm your email address by clicking the link below:</p>
      <p><a href="{link}">Verify Email</a></p>
      <p>This link will expire in {hours:.1f} hour(s).</p>
    """


def password_reset_email(link: str, hours: float) -> str:
    return f"""
      <h1>Password Reset Request</h1>
      <p>You have requested a password reset. Please click the link below to reset your password:</p>
      <p><a href="{link}">Reset Password</a></p>
      <p>This link will expire in {hours:.1f} hour(s).</p>
      <p>If you did not request this, please ignore this email.</p>
    """


def get_mailer(request: Request) -> Mailer:
    return request.app.state.mailer
