"""Tests for the local JSON record store."""

import asyncio
import json
import threading

import pytest

from website_biz.errors import StorageError
from website_biz.models import DailyTargetState, Job, JobStatus, OutreachAttempt, WebsiteArtifact
from website_biz.storage import LocalJsonStore

from conftest import make_lead


class TestLocalJobs:
    """Tests for job persistence and claiming."""

    @pytest.mark.asyncio
    async def test_insert_and_get(self, local_store):
        job = await local_store.insert_job(Job(type="scrape", payload={"query": "plumbers"}))
        loaded = await local_store.get_job(job.id)
        assert loaded == job
        assert await local_store.get_job("missing") is None

    @pytest.mark.asyncio
    async def test_list_newest_first(self, local_store):
        ids = [(await local_store.insert_job(Job(type="enrich"))).id for _ in range(4)]
        listed = await local_store.list_jobs(limit=3)
        assert [job.id for job in listed] == list(reversed(ids))[:3]

    @pytest.mark.asyncio
    async def test_claim_oldest_queued(self, local_store):
        first = await local_store.insert_job(Job(type="scrape"))
        second = await local_store.insert_job(Job(type="enrich"))

        claimed = await local_store.claim_next_job("2026-03-10T15:00:00+00:00")
        assert claimed.id == first.id
        assert claimed.status == JobStatus.RUNNING
        assert claimed.started_at == "2026-03-10T15:00:00+00:00"

        assert (await local_store.claim_next_job("t")).id == second.id
        assert await local_store.claim_next_job("t") is None

    @pytest.mark.asyncio
    async def test_transition_requires_status(self, local_store):
        job = await local_store.insert_job(Job(type="scrape"))
        assert await local_store.transition_job(job.id, JobStatus.RUNNING,
                                                {"status": JobStatus.DONE}) is None

        await local_store.claim_next_job("t")
        done = await local_store.transition_job(
            job.id, JobStatus.RUNNING, {"status": JobStatus.DONE, "result": {"count": 1}}
        )
        assert done.status == JobStatus.DONE
        assert done.result == {"count": 1}

    @pytest.mark.unit
    def test_concurrent_claims_never_share_a_job(self, tmp_path):
        """Test that workers in separate threads with separate store objects
        claim each job exactly once."""
        data_dir = tmp_path / "shared"
        seed = LocalJsonStore(data_dir)
        job_ids = [asyncio.run(seed.insert_job(Job(type="scrape"))).id for _ in range(12)]

        claimed: list[str] = []
        guard = threading.Lock()

        def worker():
            store = LocalJsonStore(data_dir)

            async def drain():
                while True:
                    job = await store.claim_next_job("t")
                    if job is None:
                        return
                    with guard:
                        claimed.append(job.id)

            asyncio.run(drain())

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert sorted(claimed) == sorted(job_ids)


class TestLocalLeads:
    """Tests for lead files."""

    @pytest.mark.asyncio
    async def test_upsert_appends_and_updates(self, local_store):
        a, b = make_lead("Acme Plumbing"), make_lead("Best Pipes")
        await local_store.upsert_leads("leads-plumbers-austin.json", [a, b])

        a.email = "owner@acme.com"
        c = make_lead("City Drains")
        await local_store.upsert_leads("/any/dir/leads-plumbers-austin.json", [a, c])

        leads = await local_store.list_leads("leads-plumbers-austin.json")
        assert [lead.name for lead in leads] == ["Acme Plumbing", "Best Pipes", "City Drains"]
        assert leads[0].email == "owner@acme.com"
        assert await local_store.list_lead_files() == ["leads-plumbers-austin.json"]

    @pytest.mark.asyncio
    async def test_missing_file_is_empty(self, local_store):
        assert await local_store.list_leads("leads-nothing.json") == []
        assert await local_store.list_lead_files() == []

    @pytest.mark.asyncio
    async def test_corrupt_file_raises(self, local_store, tmp_path):
        path = tmp_path / "data" / "leads-broken.json"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("[{not json", encoding="utf-8")
        with pytest.raises(StorageError, match="Corrupt JSON"):
            await local_store.list_leads("leads-broken.json")

    @pytest.mark.asyncio
    async def test_writes_are_valid_json(self, local_store, tmp_path):
        await local_store.upsert_leads("leads-x.json", [make_lead("Acme")])
        data = json.loads((tmp_path / "data" / "leads-x.json").read_text(encoding="utf-8"))
        assert data[0]["name"] == "Acme"
        assert not list((tmp_path / "data").glob(".leads-x.json.*"))


class TestLocalDocuments:
    """Tests for websites, outreach, artifacts and the daily state."""

    @pytest.mark.asyncio
    async def test_website_upsert_replaces_by_slug(self, local_store):
        await local_store.upsert_website(WebsiteArtifact(slug="acme", business_name="Acme",
                                                         template_style="neo-glass"))
        await local_store.upsert_website(WebsiteArtifact(slug="acme", business_name="Acme",
                                                         template_style="minimal-luxe"))
        websites = await local_store.list_websites()
        assert len(websites) == 1
        assert (await local_store.get_website("acme")).template_style == "minimal-luxe"
        assert await local_store.get_website("other") is None

    @pytest.mark.asyncio
    async def test_outreach_log_keeps_order(self, local_store):
        first = OutreachAttempt(email="a@x.co", business_name="A", template_id="default")
        second = OutreachAttempt(email="b@x.co", business_name="B", template_id="default")
        await local_store.upsert_outreach([first])
        await local_store.upsert_outreach([second, first])
        log = await local_store.list_outreach()
        assert [a.email for a in log] == ["a@x.co", "b@x.co"]

    @pytest.mark.asyncio
    async def test_artifacts_are_additive(self, local_store):
        await local_store.write_artifact("leads", "leads-x.json", {"total": 1})
        await local_store.write_artifact("leads", "leads-x.json", {"total": 2})
        await local_store.write_artifact("website", "acme", {})
        rows = await local_store.list_artifacts("leads")
        assert [row["data"]["total"] for row in rows] == [1, 2]

    @pytest.mark.asyncio
    async def test_daily_state_round_trip(self, local_store):
        assert not (await local_store.load_daily_state()).has_target
        await local_store.save_daily_state(DailyTargetState(query="q", location="l"))
        assert (await local_store.load_daily_state()).query == "q"

    @pytest.mark.unit
    def test_write_site(self, local_store):
        path = local_store.write_site("acme-austin", "<html></html>")
        assert path.name == "acme-austin.html"
        assert path.read_text(encoding="utf-8") == "<html></html>"
