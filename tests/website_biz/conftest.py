"""Shared fixtures and fakes for the website-biz tests.

External services (Google Places, homepages, SendGrid, OpenAI) are replaced
by in-memory fakes injected into a ``PipelineContext`` whose local store lives
in pytest's ``tmp_path``.
"""

import os
import sys
from datetime import datetime, timedelta, timezone
from typing import Optional

import pytest

# Ensure repo root is on sys.path so imports work correctly
ROOT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), "../.."))
SRC_DIR = os.path.join(ROOT_DIR, "src")
if SRC_DIR not in sys.path:
    sys.path.insert(0, SRC_DIR)

from website_biz.config import Config
from website_biz.errors import MailAuthError
from website_biz.integrations import PlaceResult, SendResult
from website_biz.models import Lead
from website_biz.stages import PipelineContext
from website_biz.storage import LocalJsonStore

# Every variable Config reads, cleared before each test builds one
CONFIG_ENV = [
    "APP_ENV", "DEBUG", "LOG_LEVEL", "WEBSITE_BIZ_DATA_DIR", "DATABASE_URL",
    "DATABASE_POOL_SIZE", "DATABASE_MAX_OVERFLOW", "GOOGLE_MAPS_API_KEY",
    "SCRAPE_MAX_RESULTS", "PLACES_TIMEOUT_SECONDS", "PLACES_PAGE_DELAY_SECONDS",
    "PLACES_DETAILS_DELAY_SECONDS", "HTTP_TIMEOUT_SECONDS", "ENRICH_DELAY_SECONDS",
    "OPENAI_API_KEY", "OPENAI_MODEL", "OPENAI_TIMEOUT_SECONDS", "SITES_BASE_URL",
    "DEFAULT_TEMPLATE_STYLE", "SENDGRID_API_KEY", "SENDGRID_FROM_EMAIL",
    "SENDGRID_FROM_NAME", "SEND_TIMEOUT_SECONDS", "SEND_DAILY_LIMIT", "SENDER_NAME",
    "OUTREACH_RETRY_FAILED", "DAILY_GENERATE_SITES", "WORKER_POLL_SECONDS",
    "WORKER_TOKEN", "API_HOST", "API_PORT",
]

CENTRAL = timezone(timedelta(hours=-6))


class FakeClock:
    """Settable clock in a fixed non-UTC timezone."""

    def __init__(self, moment: Optional[datetime] = None):
        self.moment = moment or datetime(2026, 3, 10, 9, 0, tzinfo=CENTRAL)

    def __call__(self) -> datetime:
        return self.moment

    def advance(self, **kwargs) -> None:
        self.moment = self.moment + timedelta(**kwargs)


class FakePlacesClient:
    """In-memory stand-in for ``GooglePlacesClient``."""

    def __init__(self, places: Optional[list[PlaceResult]] = None, details: Optional[dict] = None):
        self.places = places or []
        self.details = details or {}
        self.searches: list[str] = []
        self.detail_calls: list[str] = []

    async def text_search(self, text: str, max_pages: int = 3):
        self.searches.append(text)
        for place in self.places:
            yield PlaceResult(
                place_id=place.place_id,
                name=place.name,
                address=place.address,
                rating=place.rating,
                review_count=place.review_count,
            )

    async def place_details(self, place_id: str) -> dict:
        self.detail_calls.append(place_id)
        return self.details.get(place_id, {})


class FakeFetcher:
    """Serves canned homepage HTML; URLs in ``broken`` raise."""

    def __init__(self, pages: Optional[dict[str, str]] = None, broken: tuple = ()):
        self.pages = pages or {}
        self.broken = set(broken)
        self.fetched: list[str] = []
        self.closed = False

    async def fetch(self, url: str) -> str:
        self.fetched.append(url)
        if url in self.broken:
            raise ConnectionError(f"connection refused: {url}")
        return self.pages.get(url, "")

    def close(self) -> None:
        self.closed = True


class FakeMailer:
    """Records outgoing mail; addresses in ``failing`` are rejected."""

    def __init__(self, failing: tuple = (), auth_error: bool = False):
        self.failing = set(failing)
        self.auth_error = auth_error
        self.sent: list[dict] = []

    async def send_email(self, to_email: str, subject: str, text_content: str) -> SendResult:
        if self.auth_error:
            raise MailAuthError("SendGrid authentication failed: status 401")
        if to_email in self.failing:
            return SendResult(to_email=to_email, success=False, status_code=400,
                              error="SendGrid returned status code 400")
        self.sent.append({"to": to_email, "subject": subject, "body": text_content})
        return SendResult(to_email=to_email, success=True, status_code=202)


class FakeSiteGenerator:
    def __init__(self, html: str = "<html><body><h1>{{business_name}}</h1><img src=\"{{HERO_IMAGE}}\"></body></html>"):
        self.html = html
        self.prompts: list[str] = []

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        return self.html


def make_lead(
    name: str,
    address: str = "",
    email: str = "",
    website_url: str = "",
    website: str = "",
    city: str = "Austin",
    industry: str = "plumbers",
) -> Lead:
    return Lead(
        name=name,
        address=address or f"{len(name)} Main St, {city}",
        email=email,
        website_url=website_url,
        website=website,
        city=city,
        industry=industry,
    )


@pytest.fixture
def make_config(tmp_path, monkeypatch):
    """Factory building a ``Config`` from a clean environment plus overrides."""

    def _make(**env) -> Config:
        for name in CONFIG_ENV:
            monkeypatch.delenv(name, raising=False)
        monkeypatch.setenv("WEBSITE_BIZ_DATA_DIR", str(tmp_path / "data"))
        monkeypatch.setenv("PLACES_DETAILS_DELAY_SECONDS", "0")
        monkeypatch.setenv("ENRICH_DELAY_SECONDS", "0")
        for name, value in env.items():
            monkeypatch.setenv(name, str(value))
        return Config()

    return _make


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def local_store(tmp_path):
    return LocalJsonStore(tmp_path / "data")


@pytest.fixture
def make_ctx(make_config, local_store, clock):
    """Factory building a context on the local store with fake clients."""

    def _make(config_env: Optional[dict] = None, **overrides) -> PipelineContext:
        cfg = make_config(**(config_env or {}))
        options = {
            "places_client": FakePlacesClient(),
            "fetcher": FakeFetcher(),
            "mail_client": FakeMailer(),
            "site_generator": FakeSiteGenerator(),
        }
        options.update(overrides)
        return PipelineContext(
            config=cfg, store=local_store, local=local_store, now=clock, **options
        )

    return _make
