# stylist/services/email_service.py
# SMTP email service for verification and password reset links

import smtplib
import ssl
from email.message import EmailMessage
import logging
from typing import Optional

from stylist.exceptions import EmailDeliveryError

logger = logging.getLogger(__name__)


class EmailService:
    def __init__(
        self,
        host: Optional[str],
        port: int,
        user: Optional[str],
        password: Optional[str],
        sender: Optional[str],
        client_url: str,
        verification_expire_hours: int = 24,
        reset_expire_minutes: int = 10,
    ):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.sender = sender
        self.client_url = client_url
        self.verification_expire_hours = verification_expire_hours
        self.reset_expire_minutes = reset_expire_minutes

    @classmethod
    def from_settings(cls, settings) -> "EmailService":
        return cls(
            host=settings.smtp_host,
            port=settings.smtp_port,
            user=settings.smtp_user,
            password=settings.smtp_pass,
            sender=settings.email_from,
            client_url=settings.client_url,
            verification_expire_hours=settings.verification_token_expire_hours,
            reset_expire_minutes=settings.password_reset_expire_minutes,
        )

    def verification_url(self, token: str) -> str:
        return f"{self.client_url}/verify-email?token={token}"

    def reset_url(self, token: str) -> str:
        return f"{self.client_url}/reset-password?token={token}"

    def send_verification_email(self, to_email: str, token: str) -> None:
        body = f"""
Hello!

Thank you for signing up! Please verify your email address by clicking the link below:

{self.verification_url(token)}

This link will expire in {self.verification_expire_hours} hours.

If you didn't create an account with us, please ignore this email.
        """
        self._send(to_email, "Verify Your Email", body.strip())
        logger.info(f"Verification email sent to {to_email}")

    def send_password_reset_email(self, to_email: str, token: str) -> None:
        body = f"""
Hello,

We received a request to reset your password. Use the link below to choose a new one:

{self.reset_url(token)}

This link will expire in {self.reset_expire_minutes} minutes.

If you didn't request a password reset, please ignore this email.
        """
        self._send(to_email, "Reset Your Password", body.strip())
        logger.info(f"Password reset email sent to {to_email}")

    def _send(self, to_email: str, subject: str, body: str) -> None:
        if not self.host or not self.sender:
            raise EmailDeliveryError("SMTP is not configured")

        msg = EmailMessage()
        msg["From"] = self.sender
        msg["To"] = to_email
        msg["Subject"] = subject
        msg.set_content(body)

        try:
            context = ssl.create_default_context()
            with smtplib.SMTP(self.host, self.port) as server:
                server.starttls(context=context)
                if self.user and self.password:
                    server.login(self.user, self.password)
                server.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            raise EmailDeliveryError(f"Failed to send email to {to_email}: {e}") from e
