"""Daily target state: the recurring query/location and per-day counters."""

from dataclasses import dataclass, field
from typing import Any, Optional

DEFAULT_SCRAPE_LIMIT = 60
DEFAULT_GENERATE_LIMIT = 25
DEFAULT_EMAIL_LIMIT = 25


@dataclass
class DailyLimits:
    """Per-day caps for each counted stage."""

    scrape: int = DEFAULT_SCRAPE_LIMIT
    generate: int = DEFAULT_GENERATE_LIMIT
    email: int = DEFAULT_EMAIL_LIMIT

    def to_dict(self) -> dict[str, int]:
        return {"scrape": self.scrape, "generate": self.generate, "email": self.email}

    @classmethod
    def from_dict(cls, data: Optional[dict[str, Any]]) -> "DailyLimits":
        data = data or {}
        return cls(
            scrape=int(data.get("scrape", DEFAULT_SCRAPE_LIMIT)),
            generate=int(data.get("generate", DEFAULT_GENERATE_LIMIT)),
            email=int(data.get("email", DEFAULT_EMAIL_LIMIT)),
        )


@dataclass
class DailyTargetState:
    """Singleton record driving ``daily-run``.

    Attributes:
        query: Active search query, None until ``daily-set``.
        location: Active search location, None until ``daily-set``.
        last_run: ISO local date of the last counter reset.
        leads_scraped_today: New leads scraped since the last reset.
        websites_generated_today: Sites generated since the last reset.
        emails_sent_today: Emails delivered since the last reset.
        daily_limits: Per-day caps.
    """

    query: Optional[str] = None
    location: Optional[str] = None
    last_run: Optional[str] = None
    leads_scraped_today: int = 0
    websites_generated_today: int = 0
    emails_sent_today: int = 0
    daily_limits: DailyLimits = field(default_factory=DailyLimits)

    @property
    def has_target(self) -> bool:
        return bool(self.query) and bool(self.location)

    def reset_counters(self, today: str) -> None:
        """Zero all counters and mark ``today`` as the current day."""
        self.last_run = today
        self.leads_scraped_today = 0
        self.websites_generated_today = 0
        self.emails_sent_today = 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "query": self.query,
            "location": self.location,
            "last_run": self.last_run,
            "leads_scraped_today": self.leads_scraped_today,
            "websites_generated_today": self.websites_generated_today,
            "emails_sent_today": self.emails_sent_today,
            "daily_limits": self.daily_limits.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Optional[dict[str, Any]]) -> "DailyTargetState":
        data = data or {}
        return cls(
            query=data.get("query"),
            location=data.get("location"),
            last_run=data.get("last_run"),
            leads_scraped_today=int(data.get("leads_scraped_today") or 0),
            websites_generated_today=int(data.get("websites_generated_today") or 0),
            emails_sent_today=int(data.get("emails_sent_today") or 0),
            daily_limits=DailyLimits.from_dict(data.get("daily_limits")),
        )
