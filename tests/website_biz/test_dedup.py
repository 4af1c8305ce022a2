"""Unit tests for lead merging and outreach recipient deduplication."""

import pytest

from website_biz.dedup import contacted_emails, eligible_for_outreach, merge_new_leads
from website_biz.models import OutreachAttempt, OutreachStatus

from conftest import make_lead


def attempt(email: str, status: OutreachStatus) -> OutreachAttempt:
    return OutreachAttempt(
        email=email,
        business_name="Somebody",
        template_id="default",
        status=status,
        sent_at="2026-03-01T10:00:00+00:00" if status == OutreachStatus.SENT else None,
    )


class TestMergeNewLeads:
    """Tests for merging scrape results into a persisted lead set."""

    @pytest.mark.unit
    def test_result_is_superset_of_existing(self):
        existing = [make_lead("Acme Plumbing", email="owner@acme.com"), make_lead("Best Pipes")]
        found = [make_lead("Acme Plumbing"), make_lead("City Drains")]

        merged = merge_new_leads(existing, found)

        assert merged.leads[:2] == existing
        assert merged.leads[0].email == "owner@acme.com"
        assert [lead.name for lead in merged.added] == ["City Drains"]
        assert merged.new_count == 1

    @pytest.mark.unit
    def test_identity_ignores_case_and_punctuation(self):
        existing = [make_lead("Joe's Plumbing", address="12 Main St.")]
        found = [make_lead("JOES PLUMBING", address="12 main st")]
        # "joe s plumbing" differs from "joes plumbing", so this one is new
        assert merge_new_leads(existing, found).new_count == 1

        found = [make_lead("joe's plumbing", address="12 MAIN ST")]
        assert merge_new_leads(existing, found).new_count == 0

    @pytest.mark.unit
    def test_duplicates_within_found_count_once(self):
        found = [make_lead("Acme"), make_lead("Acme"), make_lead("Best")]
        assert merge_new_leads([], found).new_count == 2

    @pytest.mark.unit
    def test_limit_caps_new_leads(self):
        found = [make_lead(f"Shop {i}") for i in range(10)]
        merged = merge_new_leads([make_lead("Existing")], found, limit=3)
        assert merged.new_count == 3
        assert len(merged.leads) == 4

    @pytest.mark.unit
    def test_zero_limit_adds_nothing(self):
        assert merge_new_leads([], [make_lead("Acme")], limit=0).new_count == 0


class TestOutreachEligibility:
    """Tests for choosing who may be emailed."""

    @pytest.mark.unit
    def test_requires_email_and_website(self):
        leads = [
            make_lead("No Email", website_url="https://sites.dev/a.html"),
            make_lead("No Site", email="nosite@x.co"),
            make_lead("Ready", email="ready@x.co", website_url="https://sites.dev/r.html"),
        ]
        assert [lead.name for lead in eligible_for_outreach(leads, [])] == ["Ready"]

    @pytest.mark.unit
    def test_logged_addresses_blocked_case_insensitively(self):
        leads = [make_lead("Acme", email="Owner@Acme.com", website_url="u")]
        log = [attempt("owner@acme.com", OutreachStatus.SENT)]
        assert eligible_for_outreach(leads, log) == []

    @pytest.mark.unit
    def test_failed_attempts_block_by_default(self):
        leads = [make_lead("Acme", email="owner@acme.com", website_url="u")]
        log = [attempt("owner@acme.com", OutreachStatus.FAILED)]
        assert eligible_for_outreach(leads, log) == []
        assert len(eligible_for_outreach(leads, log, retry_failed=True)) == 1

    @pytest.mark.unit
    def test_retry_failed_still_blocks_delivered(self):
        log = [attempt("a@x.co", OutreachStatus.FAILED), attempt("a@x.co", OutreachStatus.SENT),
               attempt("b@x.co", OutreachStatus.FAILED)]
        assert contacted_emails(log, retry_failed=True) == {"a@x.co"}
        assert contacted_emails(log) == {"a@x.co", "b@x.co"}

    @pytest.mark.unit
    def test_shared_address_selected_once(self):
        leads = [
            make_lead("Acme North", email="info@acme.com", website_url="u1"),
            make_lead("Acme South", email="INFO@acme.com", website_url="u2"),
        ]
        assert [lead.name for lead in eligible_for_outreach(leads, [])] == ["Acme North"]
