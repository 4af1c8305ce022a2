"""SendGrid email delivery client for outreach.

Usage:
    >>> client = SendGridClient(api_key="SG...", from_email="me@studio.dev")
    >>> result = await client.send_email(
    ...     to_email="owner@acmeplumbing.com",
    ...     subject="I built something for Acme Plumbing",
    ...     text_content="Hey, ...",
    ... )
    >>> result.success
    True
"""

import asyncio
import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional

from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Content, Email, Mail, Personalization, To

from ..errors import MailAuthError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30
EMAIL_REGEX = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")
AUTH_STATUS_CODES = (401, 403)


@dataclass
class SendResult:
    """Result of sending an email.

    Attributes:
        to_email: Recipient email address.
        success: Whether SendGrid accepted the message.
        message_id: SendGrid message ID, when returned.
        status_code: HTTP status code from the API.
        sent_at: Timestamp of acceptance.
        error: Error message if the send failed.
    """

    to_email: str
    success: bool
    message_id: Optional[str] = None
    status_code: int = 0
    sent_at: Optional[datetime] = None
    error: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "to_email": self.to_email,
            "success": self.success,
            "message_id": self.message_id,
            "status_code": self.status_code,
            "sent_at": self.sent_at.isoformat() if self.sent_at else None,
            "error": self.error,
        }


class SendGridClient:
    """Thin async wrapper around ``SendGridAPIClient``.

    Per-message problems (invalid address, rejected message, timeout) come
    back as a failed ``SendResult``. Credential rejections raise
    ``MailAuthError`` because every further message would fail the same way.
    """

    def __init__(
        self,
        api_key: str,
        from_email: str,
        from_name: Optional[str] = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        """Initialize SendGrid client.

        Args:
            api_key: SendGrid API key.
            from_email: Sender email address.
            from_name: Sender display name.
            timeout_seconds: Bound on each send call.

        Raises:
            ValueError: If the API key or sender address is missing.
        """
        if not api_key:
            raise ValueError("SendGrid API key required. Set SENDGRID_API_KEY.")
        if not from_email:
            raise ValueError("Sender address required. Set SENDGRID_FROM_EMAIL.")
        self.from_email = from_email
        self.from_name = from_name or None
        self.timeout_seconds = timeout_seconds
        self._client = SendGridAPIClient(api_key=api_key)

    def validate_email(self, email: str) -> bool:
        """Check the format of an email address."""
        if not email or not isinstance(email, str):
            return False
        return bool(EMAIL_REGEX.match(email.strip()))

    def _build_mail(self, to_email: str, subject: str, text_content: str) -> Mail:
        mail = Mail()
        mail.from_email = Email(self.from_email, self.from_name)
        personalization = Personalization()
        personalization.add_to(To(to_email))
        mail.add_personalization(personalization)
        mail.subject = subject
        mail.add_content(Content("text/plain", text_content))
        return mail

    async def send_email(self, to_email: str, subject: str, text_content: str) -> SendResult:
        """Send one plain text email.

        Returns:
            SendResult describing the outcome.

        Raises:
            MailAuthError: If SendGrid rejects the API key.
        """
        to_email = (to_email or "").strip()
        if not self.validate_email(to_email):
            return SendResult(
                to_email=to_email,
                success=False,
                error=f"Invalid email address: {to_email}",
            )

        mail = self._build_mail(to_email, subject, text_content)
        loop = asyncio.get_running_loop()
        try:
            response = await asyncio.wait_for(
                loop.run_in_executor(None, lambda: self._client.send(mail)),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.error("Timed out sending email to %s", to_email)
            return SendResult(
                to_email=to_email,
                success=False,
                error=f"Send timed out after {self.timeout_seconds}s",
            )
        except Exception as e:
            status_code = getattr(e, "status_code", None)
            if status_code in AUTH_STATUS_CODES:
                raise MailAuthError(f"SendGrid authentication failed: {e}") from e
            logger.error("Failed to send email to %s: %s", to_email, e)
            return SendResult(
                to_email=to_email,
                success=False,
                status_code=status_code or 0,
                error=str(e),
            )

        status_code = response.status_code
        message_id = None
        if hasattr(response, "headers") and response.headers:
            message_id = response.headers.get("X-Message-Id")

        if status_code in AUTH_STATUS_CODES:
            raise MailAuthError(f"SendGrid authentication failed: status {status_code}")
        if status_code not in (200, 201, 202):
            return SendResult(
                to_email=to_email,
                success=False,
                status_code=status_code,
                message_id=message_id,
                error=f"SendGrid returned status code {status_code}",
            )

        logger.info("Email sent: to=%s, message_id=%s", to_email, message_id)
        return SendResult(
            to_email=to_email,
            success=True,
            status_code=status_code,
            message_id=message_id,
            sent_at=datetime.now(timezone.utc),
        )
