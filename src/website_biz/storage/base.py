"""Record store interface shared by the local and remote backends."""

import os
from abc import ABC, abstractmethod
from typing import Any, Optional

from ..models import Job, JobStatus, Lead, OutreachAttempt, WebsiteArtifact


def source_file_name(leads_file: str) -> str:
    """Normalize a leads file reference to its bare file name.

    Callers may pass an absolute path, a path relative to the data directory
    or just the name; all of them address the same record set.
    """
    return os.path.basename(str(leads_file).rstrip("/\\"))


class RecordStore(ABC):
    """Persistence for jobs, leads, websites, outreach attempts and audit artifacts.

    Every method is a coroutine. Implementations must make
    ``claim_next_job`` and ``transition_job`` single conditional updates so
    that concurrent callers never both win the same job.
    """

    name = "store"

    async def is_available(self) -> bool:
        """Return True when the backend is configured and may be tried."""
        return True

    async def close(self) -> None:
        """Release any connections held by the backend."""
        return None

    # Jobs

    @abstractmethod
    async def insert_job(self, job: Job) -> Job:
        """Persist a new job."""

    @abstractmethod
    async def get_job(self, job_id: str) -> Optional[Job]:
        """Return the job with ``job_id`` or None."""

    @abstractmethod
    async def list_jobs(self, limit: int = 25) -> list[Job]:
        """Return up to ``limit`` jobs, newest first."""

    @abstractmethod
    async def patch_job(self, job_id: str, changes: dict[str, Any]) -> Optional[Job]:
        """Apply ``changes`` to a job unconditionally.

        Returns:
            The updated job, or None when it does not exist.
        """

    @abstractmethod
    async def transition_job(
        self, job_id: str, from_status: JobStatus, changes: dict[str, Any]
    ) -> Optional[Job]:
        """Apply ``changes`` only if the job is currently in ``from_status``.

        Returns:
            The updated job, or None when the job does not exist or is in
            another status.
        """

    @abstractmethod
    async def claim_next_job(self, started_at: str) -> Optional[Job]:
        """Flip the oldest queued job to running.

        Args:
            started_at: ISO timestamp recorded as the job's start.

        Returns:
            The claimed job, or None when nothing is queued.
        """

    # Leads

    @abstractmethod
    async def list_lead_files(self) -> list[str]:
        """Return the names of all known leads files."""

    @abstractmethod
    async def list_leads(self, source_file: str) -> list[Lead]:
        """Return the leads of one leads file in stored order."""

    @abstractmethod
    async def upsert_leads(self, source_file: str, leads: list[Lead]) -> None:
        """Insert or update leads keyed by ``(source_file, identity key)``.

        Known leads are updated in place, new ones are appended in the order
        given. Stored leads missing from ``leads`` are left untouched.
        """

    # Websites

    @abstractmethod
    async def list_websites(self) -> list[WebsiteArtifact]:
        """Return all website artifacts."""

    @abstractmethod
    async def get_website(self, slug: str) -> Optional[WebsiteArtifact]:
        """Return the website artifact for ``slug`` or None."""

    @abstractmethod
    async def upsert_website(self, website: WebsiteArtifact) -> None:
        """Insert or replace the website artifact keyed by slug."""

    # Outreach

    @abstractmethod
    async def list_outreach(self) -> list[OutreachAttempt]:
        """Return the whole outreach log in append order."""

    @abstractmethod
    async def upsert_outreach(self, attempts: list[OutreachAttempt]) -> None:
        """Insert outreach attempts keyed by attempt id."""

    # Audit

    @abstractmethod
    async def write_artifact(self, kind: str, key: str, data: Any) -> None:
        """Append an audit record of stage output."""
