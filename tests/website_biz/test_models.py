"""Unit tests for the record models and identity helpers."""

import pytest

from website_biz.models import (
    DailyTargetState,
    EmailStatus,
    Job,
    JobStatus,
    JobType,
    Lead,
    OutreachAttempt,
    OutreachStatus,
    lead_identity_key,
    leads_file_name,
    normalize_email,
    slugify,
)
from website_biz.storage import source_file_name


class TestIdentityKeys:
    """Tests for lead identity normalization."""

    @pytest.mark.unit
    def test_case_and_punctuation_insensitive(self):
        a = lead_identity_key("Joe's Plumbing", "12 Main St., Austin")
        b = lead_identity_key("JOE S  PLUMBING", "12 main st austin")
        assert a == b

    @pytest.mark.unit
    def test_address_distinguishes_branches(self):
        a = lead_identity_key("Acme Dental", "1 First St")
        b = lead_identity_key("Acme Dental", "2 Second St")
        assert a != b

    @pytest.mark.unit
    def test_missing_parts(self):
        assert lead_identity_key(None, None) == "|"

    @pytest.mark.unit
    def test_slugify(self):
        assert slugify("Joe's Plumbing & Co.") == "joe-s-plumbing-co"
        assert slugify("  ") == ""

    @pytest.mark.unit
    def test_leads_file_name(self):
        assert leads_file_name("Plumbers", "Austin, TX") == "leads-plumbers-austin-tx.json"

    @pytest.mark.unit
    @pytest.mark.parametrize("ref", [
        "leads-plumbers-austin.json",
        "/var/data/leads-plumbers-austin.json",
        "data/leads-plumbers-austin.json",
    ])
    def test_source_file_name_normalizes_paths(self, ref):
        assert source_file_name(ref) == "leads-plumbers-austin.json"


class TestLead:
    """Tests for the Lead dataclass."""

    @pytest.mark.unit
    def test_slug_derived_from_name_and_city(self):
        lead = Lead(name="Acme Plumbing", address="1 Main St", city="Austin TX")
        assert lead.slug == "acme-plumbing-austin-tx"

    @pytest.mark.unit
    def test_from_dict_tolerates_nulls_and_unknown_keys(self):
        lead = Lead.from_dict({
            "name": "Acme",
            "address": None,
            "email": None,
            "email_status": None,
            "socials": None,
            "legacy_field": "ignored",
        })
        assert lead.address == ""
        assert lead.email == ""
        assert lead.email_status == EmailStatus.PENDING
        assert lead.socials == {}

    @pytest.mark.unit
    def test_to_dict_serializes_enum(self):
        lead = Lead(name="Acme", email_status=EmailStatus.SCRAPED)
        assert lead.to_dict()["email_status"] == "scraped"
        assert Lead.from_dict(lead.to_dict()) == lead


class TestJob:
    """Tests for the Job dataclass and enums."""

    @pytest.mark.unit
    def test_new_job_is_queued(self):
        job = Job(type="scrape", payload={"query": "plumbers"})
        assert job.status == JobStatus.QUEUED
        assert job.started_at is None
        assert job.id

    @pytest.mark.unit
    def test_ids_are_unique(self):
        assert len({Job(type="scrape").id for _ in range(50)}) == 50

    @pytest.mark.unit
    def test_terminal_statuses(self):
        assert JobStatus.DONE.is_terminal
        assert JobStatus.FAILED.is_terminal
        assert not JobStatus.RUNNING.is_terminal

    @pytest.mark.unit
    def test_job_types(self):
        assert JobType.values() == [
            "scrape", "enrich", "generate-site", "send", "daily-set", "daily-run",
        ]

    @pytest.mark.unit
    def test_unknown_type_survives_storage_form(self):
        job = Job.from_dict(Job(type="frobnicate").to_dict())
        assert job.type == "frobnicate"


class TestOutreachAndDaily:
    """Tests for outreach attempts and the daily state."""

    @pytest.mark.unit
    def test_normalize_email(self):
        assert normalize_email("  Owner@Acme.COM ") == "owner@acme.com"
        assert normalize_email(None) == ""

    @pytest.mark.unit
    def test_attempt_defaults_to_failed(self):
        attempt = OutreachAttempt(email="a@b.co", business_name="Acme", template_id="default")
        assert attempt.status == OutreachStatus.FAILED
        assert attempt.sent_at is None

    @pytest.mark.unit
    def test_daily_state_defaults(self):
        state = DailyTargetState.from_dict(None)
        assert not state.has_target
        assert state.daily_limits.to_dict() == {"scrape": 60, "generate": 25, "email": 25}

    @pytest.mark.unit
    def test_reset_counters(self):
        state = DailyTargetState(query="q", location="l", last_run="2026-03-09",
                                 leads_scraped_today=10, emails_sent_today=4)
        state.reset_counters("2026-03-10")
        assert state.last_run == "2026-03-10"
        assert state.leads_scraped_today == 0
        assert state.emails_sent_today == 0
        assert state.query == "q"
