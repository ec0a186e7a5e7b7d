"""SMTP mail transport with exponential backoff retry logic"""

import smtplib
from email.message import EmailMessage

from enrollment_gateway.config import settings
from enrollment_gateway.infrastructure.observability.metrics import mail_failure_counter, mail_latency_histogram
from enrollment_gateway.utils.retry import call_with_retries


class MailClient:
    """Client for delivering assembled messages through an SMTP relay"""

    def __init__(
        self,
        host: str | None = None,
        port: int | None = None,
        username: str | None = None,
        password: str | None = None,
        use_tls: bool | None = None,
        timeout: float | None = None,
    ):
        self.host = host or settings.smtp_host
        self.port = port or settings.smtp_port
        self.username = settings.smtp_username if username is None else username
        self.password = settings.smtp_password if password is None else password
        self.use_tls = settings.smtp_use_tls if use_tls is None else use_tls
        self.timeout = timeout or settings.smtp_timeout_seconds
        self.max_retries = settings.mail_max_retries
        self.backoff_base = settings.mail_backoff_base

    def send(self, message: EmailMessage) -> None:
        """
        Send a message, retrying connection and transient SMTP failures.

        Retry strategy:
        - Exponential backoff: base, 2*base, 4*base...
        - Retries on network errors and SMTP errors, up to mail_max_retries attempts
        - Re-raises the last error when all attempts fail

        Bcc recipients are taken from the message and stripped from the sent headers.
        """
        call_with_retries(
            lambda: self._deliver(message),
            retry_on=(smtplib.SMTPException, OSError),
            max_attempts=self.max_retries,
            backoff_base=self.backoff_base,
            description=f"Mail to {message['To']}",
        )

    def _deliver(self, message: EmailMessage) -> None:
        try:
            with mail_latency_histogram.time():
                with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
                    if self.use_tls:
                        smtp.starttls()
                    if self.username:
                        smtp.login(self.username, self.password)
                    smtp.send_message(message)
        except (smtplib.SMTPException, OSError):
            mail_failure_counter.inc()
            raise
