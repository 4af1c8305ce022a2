"""Remote-first record store with per-operation fallback to the local store."""

import logging
from typing import Any, Awaitable, Callable, Optional, TypeVar

from ..models import Job, JobStatus, Lead, OutreachAttempt, WebsiteArtifact
from .base import RecordStore
from .local import LocalJsonStore

logger = logging.getLogger(__name__)

T = TypeVar("T")


class FallbackRecordStore(RecordStore):
    """Prefer the remote backend and fall back to the local one on any failure.

    Each operation is tried against ``remote`` when it reports itself
    available. If the remote call raises, the failure is logged at WARNING
    and the same operation runs against ``local``. Nothing is queued for
    later replication, so records written during an outage stay local. To
    keep such records reachable, lookups that come back empty from the
    remote (a missing job, no leads for a file, nothing to claim) are also
    tried against the local store, and listings (jobs, lead files, websites,
    the outreach log) always combine both backends. The outreach log in
    particular must include sends made during an outage, otherwise those
    addresses would be contacted again and miss the daily count.

    Failures of the local store propagate to the caller.

    Args:
        remote: Preferred backend.
        local: Authoritative fallback backend.
    """

    name = "fallback"

    def __init__(self, remote: RecordStore, local: LocalJsonStore):
        self.remote = remote
        self.local = local

    async def is_available(self) -> bool:
        return True

    async def close(self) -> None:
        await self.remote.close()
        await self.local.close()

    def _log_fallback(self, operation: str, error: Exception) -> None:
        logger.warning(
            "Remote store failed during %s, falling back to local: %s",
            operation,
            error,
            extra={"operation": operation, "backend": self.remote.name},
        )

    async def _call(
        self,
        operation: str,
        call: Callable[[RecordStore], Awaitable[T]],
        retry_local_if: Optional[Callable[[T], bool]] = None,
    ) -> T:
        if await self.remote.is_available():
            try:
                result = await call(self.remote)
            except Exception as e:
                self._log_fallback(operation, e)
            else:
                if retry_local_if is None or not retry_local_if(result):
                    return result
        return await call(self.local)

    async def _merged(
        self,
        operation: str,
        call: Callable[[RecordStore], Awaitable[list[T]]],
        key: Callable[[T], Any],
    ) -> list[T]:
        """Remote rows followed by the local rows the remote does not hold."""
        remote_rows: list[T] = []
        if await self.remote.is_available():
            try:
                remote_rows = await call(self.remote)
            except Exception as e:
                self._log_fallback(operation, e)
        local_rows = await call(self.local)
        seen = {key(row) for row in remote_rows}
        return list(remote_rows) + [row for row in local_rows if key(row) not in seen]

    # Jobs

    async def insert_job(self, job: Job) -> Job:
        return await self._call("insert_job", lambda s: s.insert_job(job))

    async def get_job(self, job_id: str) -> Optional[Job]:
        return await self._call("get_job", lambda s: s.get_job(job_id), _is_none)

    async def list_jobs(self, limit: int = 25) -> list[Job]:
        jobs = await self._merged("list_jobs", lambda s: s.list_jobs(limit), _job_id)
        jobs.sort(key=lambda job: job.created_at or "", reverse=True)
        return jobs[: max(0, limit)]

    async def patch_job(self, job_id: str, changes: dict[str, Any]) -> Optional[Job]:
        return await self._call(
            "patch_job", lambda s: s.patch_job(job_id, changes), _is_none
        )

    async def transition_job(
        self, job_id: str, from_status: JobStatus, changes: dict[str, Any]
    ) -> Optional[Job]:
        return await self._call(
            "transition_job",
            lambda s: s.transition_job(job_id, from_status, changes),
            _is_none,
        )

    async def claim_next_job(self, started_at: str) -> Optional[Job]:
        return await self._call(
            "claim_next_job", lambda s: s.claim_next_job(started_at), _is_none
        )

    # Leads

    async def list_lead_files(self) -> list[str]:
        files = await self._merged("list_lead_files", lambda s: s.list_lead_files(), str)
        return sorted(files)

    async def list_leads(self, source_file: str) -> list[Lead]:
        return await self._call(
            "list_leads", lambda s: s.list_leads(source_file), _is_empty
        )

    async def upsert_leads(self, source_file: str, leads: list[Lead]) -> None:
        await self._call("upsert_leads", lambda s: s.upsert_leads(source_file, leads))

    # Websites

    async def list_websites(self) -> list[WebsiteArtifact]:
        return await self._merged("list_websites", lambda s: s.list_websites(), _website_slug)

    async def get_website(self, slug: str) -> Optional[WebsiteArtifact]:
        return await self._call("get_website", lambda s: s.get_website(slug), _is_none)

    async def upsert_website(self, website: WebsiteArtifact) -> None:
        await self._call("upsert_website", lambda s: s.upsert_website(website))

    # Outreach

    async def list_outreach(self) -> list[OutreachAttempt]:
        return await self._merged("list_outreach", lambda s: s.list_outreach(), _attempt_id)

    async def upsert_outreach(self, attempts: list[OutreachAttempt]) -> None:
        await self._call("upsert_outreach", lambda s: s.upsert_outreach(attempts))

    # Audit

    async def write_artifact(self, kind: str, key: str, data: Any) -> None:
        await self._call("write_artifact", lambda s: s.write_artifact(kind, key, data))


def _is_none(result: Any) -> bool:
    return result is None


def _is_empty(result: Any) -> bool:
    return not result


def _job_id(job: Job) -> str:
    return job.id


def _website_slug(website: WebsiteArtifact) -> str:
    return website.slug


def _attempt_id(attempt: OutreachAttempt) -> str:
    return attempt.id
