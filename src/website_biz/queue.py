"""Durable job queue on top of a record store."""

import logging
from typing import Any, Callable, Optional

from .models import Job, JobStatus, utc_now_iso
from .storage import RecordStore

logger = logging.getLogger(__name__)


class JobQueue:
    """FIFO queue of pipeline jobs.

    Jobs move ``queued -> running -> done|failed`` and never back. ``complete``
    and ``fail`` only act on running jobs; on any other job they are no-ops
    that return None. There are no automatic retries: a failed job is
    terminal and a retry is a new ``create``.

    Args:
        store: Record store holding the jobs.
        now: Clock returning ISO timestamps; overridable for tests.

    Example:
        >>> queue = JobQueue(store)
        >>> job = await queue.create("enrich", {"leadsFile": "leads-plumbers-austin.json"})
        >>> claimed = await queue.claim_next()
        >>> await queue.complete(claimed.id, {"processed": 3})
    """

    def __init__(self, store: RecordStore, now: Callable[[], str] = utc_now_iso):
        self.store = store
        self.now = now

    async def create(self, job_type: str, payload: Optional[dict[str, Any]] = None) -> Job:
        """Enqueue a new job.

        Args:
            job_type: Stage name to dispatch to.
            payload: Stage parameters.

        Returns:
            The queued job.
        """
        job = Job(type=job_type, payload=dict(payload or {}), created_at=self.now())
        await self.store.insert_job(job)
        logger.info("Created job %s (%s)", job.id, job.type, extra={"job_id": job.id})
        return job

    async def get(self, job_id: str) -> Optional[Job]:
        return await self.store.get_job(job_id)

    async def list(self, limit: int = 25) -> list[Job]:
        """Return up to ``limit`` jobs, most recently created first."""
        return await self.store.list_jobs(limit)

    async def claim_next(self) -> Optional[Job]:
        """Atomically move the oldest queued job to running.

        Returns:
            The claimed job, or None when the queue is idle.
        """
        job = await self.store.claim_next_job(self.now())
        if job is not None:
            logger.info("Claimed job %s (%s)", job.id, job.type, extra={"job_id": job.id})
        return job

    async def complete(self, job_id: str, result: Any = None) -> Optional[Job]:
        """Mark a running job done with its result."""
        job = await self.store.transition_job(
            job_id,
            JobStatus.RUNNING,
            {"status": JobStatus.DONE, "finished_at": self.now(), "result": result},
        )
        if job is None:
            logger.debug("Ignoring complete for job %s: not running", job_id)
        return job

    async def fail(self, job_id: str, error: str) -> Optional[Job]:
        """Mark a running job failed with ``error``."""
        job = await self.store.transition_job(
            job_id,
            JobStatus.RUNNING,
            {"status": JobStatus.FAILED, "finished_at": self.now(), "error": error},
        )
        if job is None:
            logger.debug("Ignoring fail for job %s: not running", job_id)
        return job
