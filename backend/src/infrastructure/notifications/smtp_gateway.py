"""SMTP notification gateway.

Sends NotificationMessage objects through a standard SMTP relay with
STARTTLS and optional authentication.

Configuration (via Settings):
    SMTP_HOST: SMTP server hostname
    SMTP_PORT: SMTP server port (default: 587)
    SMTP_USERNAME: SMTP authentication username
    SMTP_PASSWORD: SMTP authentication password
    SMTP_USE_TLS: Use STARTTLS (default: True)
    SMTP_FROM_EMAIL: Sender address
    SMTP_TIMEOUT_SECONDS: Socket timeout for the whole exchange
"""

import logging
import smtplib
import ssl
from email.message import EmailMessage
from typing import Optional

from config import Settings
from domain.errors import TransientNotifyError
from domain.notifications import NotificationMessage, NotificationPort

logger = logging.getLogger(__name__)


class SMTPGateway(NotificationPort):
    """Deliver notifications directly over SMTP."""

    def __init__(
        self,
        host: Optional[str],
        port: int = 587,
        username: Optional[str] = None,
        password: Optional[str] = None,
        use_tls: bool = True,
        from_email: str = "noreply@reviewflow.local",
        timeout_seconds: int = 10,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.from_email = from_email
        self.timeout_seconds = timeout_seconds

    @classmethod
    def from_settings(cls, settings: Settings) -> "SMTPGateway":
        return cls(
            host=settings.SMTP_HOST,
            port=settings.SMTP_PORT,
            username=settings.SMTP_USERNAME,
            password=settings.SMTP_PASSWORD,
            use_tls=settings.SMTP_USE_TLS,
            from_email=settings.SMTP_FROM_EMAIL,
            timeout_seconds=settings.SMTP_TIMEOUT_SECONDS,
        )

    def is_configured(self) -> bool:
        return bool(self.host)

    def build_email(self, message: NotificationMessage) -> EmailMessage:
        """Render a multipart/alternative email (plain text + HTML)."""
        if any(c in message.subject for c in ("\r", "\n")):
            raise ValueError("Subject must not contain line breaks")

        email = EmailMessage()
        email["From"] = self.from_email
        email["To"] = ", ".join(message.recipients)
        email["Subject"] = message.subject
        email.set_content(message.text or "")
        if message.html:
            email.add_alternative(message.html, subtype="html")
        return email

    def send(self, message: NotificationMessage) -> None:
        """Send a message over SMTP.

        Raises:
            TransientNotifyError: If SMTP is not configured or the relay fails
        """
        if not self.is_configured():
            raise TransientNotifyError("SMTP not configured (missing SMTP_HOST)")

        try:
            message.validate()
            email = self.build_email(message)
        except ValueError as e:
            raise TransientNotifyError(f"Invalid message: {e}")

        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout_seconds) as server:
                if self.use_tls:
                    server.starttls(context=ssl.create_default_context())
                if self.username and self.password:
                    server.login(self.username, self.password)
                server.send_message(email, from_addr=self.from_email, to_addrs=message.recipients)
        except smtplib.SMTPAuthenticationError as e:
            logger.error(f"SMTP auth error: {e}")
            raise TransientNotifyError(f"SMTP authentication failed: {e}")
        except smtplib.SMTPRecipientsRefused as e:
            logger.error(f"SMTP recipients refused: {e}")
            raise TransientNotifyError(f"Recipients refused: {e}")
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"SMTP error sending {message.template}: {e}")
            raise TransientNotifyError(f"SMTP error: {e}")

        logger.info(
            f"SMTP: {message.template} sent to {len(message.recipients)} recipient(s)",
            extra={"template": message.template},
        )
