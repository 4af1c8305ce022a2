"""Outreach attempt model for the append-only email log."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from .job import new_id


class OutreachStatus(str, Enum):
    """Delivery outcome of one outreach attempt."""

    SENT = "sent"
    FAILED = "failed"


def normalize_email(email: Optional[str]) -> str:
    """Return ``email`` trimmed and lower-cased for comparisons."""
    return (email or "").strip().lower()


@dataclass
class OutreachAttempt:
    """One delivery attempt to one recipient. Never mutated once logged.

    Attributes:
        email: Recipient address as found on the lead.
        business_name: Name of the lead's business.
        template_id: Id of the email template used.
        status: Delivery outcome.
        sent_at: ISO timestamp of delivery, None when the attempt failed.
        error: Failure detail, None when delivered.
        source_file: Leads file the recipient came from.
        id: Generated unique id, the upsert conflict key.
    """

    email: str
    business_name: str
    template_id: str
    status: OutreachStatus = OutreachStatus.FAILED
    sent_at: Optional[str] = None
    error: Optional[str] = None
    source_file: str = ""
    id: str = field(default_factory=new_id)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "id": self.id,
            "email": self.email,
            "business_name": self.business_name,
            "template_id": self.template_id,
            "sent_at": self.sent_at,
            "status": self.status.value,
            "error": self.error,
            "source_file": self.source_file,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "OutreachAttempt":
        return cls(
            id=data["id"],
            email=data.get("email") or "",
            business_name=data.get("business_name") or "",
            template_id=data.get("template_id") or "",
            status=OutreachStatus(data.get("status") or OutreachStatus.FAILED.value),
            sent_at=data.get("sent_at"),
            error=data.get("error"),
            source_file=data.get("source_file") or "",
        )
