"""Shared dependencies handed to every pipeline stage."""

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Callable, Optional

from ..config import Config
from ..integrations import AiSiteGenerator, GooglePlacesClient, SendGridClient, WebsiteFetcher
from ..storage import LocalJsonStore, RecordStore, build_record_store


def local_now() -> datetime:
    """Current time as an aware datetime in the machine's local timezone."""
    return datetime.now().astimezone()


@dataclass
class PipelineContext:
    """Everything a stage needs beyond its payload.

    External clients are created lazily from ``config`` the first time a
    stage asks for them, after validating the configuration they need. Tests
    inject fakes instead.

    Attributes:
        config: Configuration for this run.
        store: Record store for jobs, leads, websites, outreach and audit data.
        local: Local store for templates, daily state and site files.
        now: Clock returning an aware datetime; its timezone defines "today".
        places_client: Scrape data source.
        fetcher: Homepage fetcher for enrichment.
        mail_client: Outreach mail transport.
        site_generator: Generator for the ``ai-premium`` site style.
    """

    config: Config
    store: RecordStore
    local: LocalJsonStore
    now: Callable[[], datetime] = local_now
    places_client: Optional[Any] = None
    fetcher: Optional[Any] = None
    mail_client: Optional[Any] = None
    site_generator: Optional[Any] = None
    _owned: list = field(default_factory=list, repr=False)

    @classmethod
    def from_config(cls, cfg: Config, **overrides: Any) -> "PipelineContext":
        """Build a context with the record store ``cfg`` selects."""
        store, local = build_record_store(cfg)
        return cls(config=cfg, store=store, local=local, **overrides)

    def today(self) -> str:
        """ISO date of the current local calendar day."""
        return self.now().date().isoformat()

    def utc_timestamp(self) -> str:
        return self.now().astimezone(timezone.utc).isoformat()

    def local_date_of(self, timestamp: Optional[str]) -> Optional[date]:
        """Local calendar date of an ISO timestamp, None if unparseable."""
        if not timestamp:
            return None
        try:
            moment = datetime.fromisoformat(timestamp)
        except ValueError:
            return None
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=timezone.utc)
        return moment.astimezone(self.now().tzinfo).date()

    def get_places_client(self):
        if self.places_client is None:
            self.config.validate_for_scraping()
            self.places_client = GooglePlacesClient(
                api_key=self.config.GOOGLE_MAPS_API_KEY,
                timeout_seconds=self.config.PLACES_TIMEOUT_SECONDS,
                page_delay_seconds=self.config.PLACES_PAGE_DELAY_SECONDS,
            )
        return self.places_client

    def get_fetcher(self):
        if self.fetcher is None:
            self.fetcher = WebsiteFetcher(timeout_seconds=self.config.HTTP_TIMEOUT_SECONDS)
            self._owned.append(self.fetcher)
        return self.fetcher

    def get_mail_client(self):
        if self.mail_client is None:
            self.config.validate_for_email()
            self.mail_client = SendGridClient(
                api_key=self.config.SENDGRID_API_KEY,
                from_email=self.config.SENDGRID_FROM_EMAIL,
                from_name=self.config.SENDGRID_FROM_NAME,
                timeout_seconds=self.config.SEND_TIMEOUT_SECONDS,
            )
        return self.mail_client

    def get_site_generator(self):
        if self.site_generator is None:
            self.config.validate_for_generation()
            self.site_generator = AiSiteGenerator(
                api_key=self.config.OPENAI_API_KEY,
                model=self.config.OPENAI_MODEL,
                timeout_seconds=self.config.OPENAI_TIMEOUT_SECONDS,
            )
        return self.site_generator

    async def close(self) -> None:
        """Close clients this context created and the record store."""
        for client in self._owned:
            client.close()
        self._owned.clear()
        await self.store.close()
