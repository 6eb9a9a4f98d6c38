"""Email delivery.

SMTPEmailTransport opens one SMTP connection per message. Without an SMTP
host configured, LoggingEmailTransport is used and emails are only logged.
"""

import smtplib
from email.message import EmailMessage
from email.utils import formataddr
from threading import RLock
from typing import Optional, Union

from membership_service.logging_config import get_logger
from membership_service.models import EmailConfig

logger = get_logger(__name__)


class EmailDeliveryError(Exception):
    """Raised when an email could not be handed to the SMTP server."""

    pass


class SMTPEmailTransport:
    """Send emails through an SMTP server.

    Args:
        config: SMTP settings
    """

    def __init__(self, config: EmailConfig):
        self.config = config
        self._lock = RLock()
        self._closed = False

    @property
    def sender(self) -> str:
        if self.config.from_name:
            return formataddr((self.config.from_name, self.config.from_email))
        return self.config.from_email

    def _create_message(self, to: str, subject: str, html_body: str, text_body: str) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self.sender
        message["To"] = to
        message["Subject"] = subject
        message.set_content(text_body)
        message.add_alternative(html_body, subtype="html")
        return message

    def _connect(self) -> smtplib.SMTP:
        if self.config.use_ssl:
            return smtplib.SMTP_SSL(self.config.host, self.config.port, timeout=self.config.timeout)
        server = smtplib.SMTP(self.config.host, self.config.port, timeout=self.config.timeout)
        if self.config.use_tls:
            server.starttls()
        return server

    def send(self, to: str, subject: str, html_body: str, text_body: str = "") -> None:
        """Send one email.

        Raises:
            EmailDeliveryError: If the transport is closed or SMTP fails
        """
        with self._lock:
            if self._closed:
                raise EmailDeliveryError("Email transport is closed")

        message = self._create_message(to, subject, html_body, text_body)
        try:
            server = self._connect()
            try:
                if self.config.username and self.config.password:
                    server.login(self.config.username, self.config.password)
                server.send_message(message, to_addrs=[to])
            finally:
                server.quit()
        except (smtplib.SMTPException, OSError) as e:
            logger.error(
                "email_send_failed",
                to=to,
                subject=subject,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise EmailDeliveryError(f"Failed to send email to {to}: {e}") from e

        logger.info("email_sent", to=to, subject=subject)

    def close(self) -> None:
        """Stop accepting new messages."""
        with self._lock:
            if not self._closed:
                self._closed = True
                logger.info("email_transport_closed", host=self.config.host)


class LoggingEmailTransport:
    """Stand-in transport used when SMTP is not configured."""

    def __init__(self):
        self.skipped = 0

    def send(self, to: str, subject: str, html_body: str, text_body: str = "") -> None:
        self.skipped += 1
        logger.warning("email_skipped", to=to, subject=subject, reason="email transport not configured")

    def close(self) -> None:
        logger.info("email_transport_closed", skipped=self.skipped)


EmailTransport = Union[SMTPEmailTransport, LoggingEmailTransport]


def create_email_transport(config: Optional[EmailConfig]) -> EmailTransport:
    """Pick the transport for the configured SMTP settings."""
    if config is not None and config.is_configured:
        logger.info("email_transport_initialized", host=config.host, port=config.port)
        return SMTPEmailTransport(config)
    logger.warning("email_transport_disabled", message="SMTP host not configured, emails are logged only")
    return LoggingEmailTransport()
