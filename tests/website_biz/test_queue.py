"""Tests for the job queue lifecycle."""

import pytest

from website_biz.models import JobStatus
from website_biz.queue import JobQueue


class FixedClock:
    def __init__(self):
        self.tick = 0

    def __call__(self) -> str:
        self.tick += 1
        return f"2026-03-10T10:00:{self.tick:02d}+00:00"


@pytest.fixture
def queue(local_store):
    return JobQueue(local_store, now=FixedClock())


class TestJobQueue:
    """Tests for create, claim, complete and fail."""

    @pytest.mark.asyncio
    async def test_create_is_queued(self, queue):
        job = await queue.create("scrape", {"query": "plumbers", "location": "Austin"})
        assert job.status == JobStatus.QUEUED
        assert job.created_at == "2026-03-10T10:00:01+00:00"
        assert (await queue.get(job.id)).payload == {"query": "plumbers", "location": "Austin"}

    @pytest.mark.asyncio
    async def test_fifo_claim(self, queue):
        first = await queue.create("scrape", {})
        second = await queue.create("enrich", {})
        assert (await queue.claim_next()).id == first.id
        assert (await queue.claim_next()).id == second.id
        assert await queue.claim_next() is None

    @pytest.mark.asyncio
    async def test_complete_records_result(self, queue):
        job = await queue.create("enrich", {"leadsFile": "leads-x.json"})
        await queue.claim_next()
        done = await queue.complete(job.id, {"processed": 3})

        assert done.status == JobStatus.DONE
        assert done.result == {"processed": 3}
        assert done.finished_at is not None
        assert done.error is None

    @pytest.mark.asyncio
    async def test_fail_records_error(self, queue):
        job = await queue.create("send", {})
        await queue.claim_next()
        failed = await queue.fail(job.id, "SENDGRID_API_KEY is required for email delivery")

        assert failed.status == JobStatus.FAILED
        assert failed.error == "SENDGRID_API_KEY is required for email delivery"
        assert failed.result is None

    @pytest.mark.asyncio
    async def test_terminal_jobs_are_not_changed(self, queue):
        job = await queue.create("scrape", {})
        await queue.claim_next()
        await queue.complete(job.id, {"ok": True})

        assert await queue.fail(job.id, "late failure") is None
        assert await queue.complete(job.id, {"again": True}) is None
        stored = await queue.get(job.id)
        assert stored.status == JobStatus.DONE
        assert stored.result == {"ok": True}

    @pytest.mark.asyncio
    async def test_queued_jobs_cannot_complete(self, queue):
        job = await queue.create("scrape", {})
        assert await queue.complete(job.id, {}) is None
        assert (await queue.get(job.id)).status == JobStatus.QUEUED

    @pytest.mark.asyncio
    async def test_unknown_id(self, queue):
        assert await queue.get("nope") is None
        assert await queue.complete("nope", {}) is None

    @pytest.mark.asyncio
    async def test_list_newest_first(self, queue):
        jobs = [await queue.create("scrape", {"n": i}) for i in range(3)]
        listed = await queue.list(limit=2)
        assert [job.id for job in listed] == [jobs[2].id, jobs[1].id]
