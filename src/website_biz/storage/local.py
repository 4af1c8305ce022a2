"""Local JSON document store.

Each record family lives in one JSON file under the data directory:

    jobs.json               ordered job queue
    leads-<slug>.json       one file per query/location scrape
    outreach-log.json       append-only outreach log
    websites/index.json     website artifacts
    websites/<slug>.html    generated sites
    artifacts.json          audit history
    daily-state.json        daily target state
    templates.json          email templates

Every operation is a load-modify-save cycle under a single cross-process
``filelock.FileLock``, and every save writes a temporary file that is then
renamed over the original, so readers never observe a half-written document.
"""

import asyncio
import json
import logging
import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Callable, Iterator, Optional, TypeVar

from filelock import FileLock, Timeout

from ..errors import StorageError
from ..models import (
    DailyTargetState,
    Job,
    JobStatus,
    Lead,
    OutreachAttempt,
    WebsiteArtifact,
    utc_now_iso,
)
from .base import RecordStore, source_file_name

logger = logging.getLogger(__name__)

T = TypeVar("T")

JOBS_FILE = "jobs.json"
OUTREACH_LOG_FILE = "outreach-log.json"
ARTIFACTS_FILE = "artifacts.json"
DAILY_STATE_FILE = "daily-state.json"
TEMPLATES_FILE = "templates.json"
SITES_DIR = "websites"
WEBSITE_INDEX_FILE = f"{SITES_DIR}/index.json"
LOCK_FILE = ".store.lock"

DEFAULT_LOCK_TIMEOUT = 30.0


class LocalJsonStore(RecordStore):
    """Record store backed by JSON files in a data directory.

    Args:
        data_dir: Directory holding the documents. Created on first write.
        lock_timeout: Seconds to wait for the store lock before failing.

    Example:
        >>> store = LocalJsonStore("/tmp/website-biz")
        >>> job = await store.insert_job(Job(type="scrape"))
    """

    name = "local"

    def __init__(self, data_dir, lock_timeout: float = DEFAULT_LOCK_TIMEOUT):
        self.data_dir = Path(data_dir)
        self.lock_timeout = lock_timeout
        self._lock: Optional[FileLock] = None

    @property
    def sites_dir(self) -> Path:
        return self.data_dir / SITES_DIR

    # Low-level document access

    def _ensure_dirs(self) -> None:
        self.sites_dir.mkdir(parents=True, exist_ok=True)

    @contextmanager
    def _locked(self) -> Iterator[None]:
        if self._lock is None:
            self._ensure_dirs()
            self._lock = FileLock(str(self.data_dir / LOCK_FILE), timeout=self.lock_timeout)
        try:
            with self._lock:
                yield
        except Timeout as e:
            raise StorageError(f"Timed out waiting for store lock in {self.data_dir}") from e

    def _path(self, name: str) -> Path:
        return self.data_dir / name

    def _read(self, name: str, default: Any) -> Any:
        path = self._path(name)
        if not path.exists():
            return default
        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except json.JSONDecodeError as e:
            raise StorageError(f"Corrupt JSON document {path}: {e}") from e
        except OSError as e:
            raise StorageError(f"Cannot read {path}: {e}") from e

    def _write(self, name: str, data: Any) -> None:
        path = self._path(name)
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(prefix=f".{path.name}.", dir=str(path.parent))
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            os.replace(tmp_path, path)
        except OSError as e:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise StorageError(f"Cannot write {path}: {e}") from e

    async def _run(self, func: Callable[[], T]) -> T:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, func)

    # Jobs

    async def insert_job(self, job: Job) -> Job:
        def _insert() -> Job:
            with self._locked():
                jobs = self._read(JOBS_FILE, [])
                jobs.append(job.to_dict())
                self._write(JOBS_FILE, jobs)
            return job

        return await self._run(_insert)

    async def get_job(self, job_id: str) -> Optional[Job]:
        def _get() -> Optional[Job]:
            with self._locked():
                jobs = self._read(JOBS_FILE, [])
            for row in jobs:
                if row.get("id") == job_id:
                    return Job.from_dict(row)
            return None

        return await self._run(_get)

    async def list_jobs(self, limit: int = 25) -> list[Job]:
        def _list() -> list[Job]:
            with self._locked():
                jobs = self._read(JOBS_FILE, [])
            return [Job.from_dict(row) for row in reversed(jobs)][: max(0, limit)]

        return await self._run(_list)

    def _update_job(
        self, job_id: str, changes: dict[str, Any], from_status: Optional[JobStatus]
    ) -> Optional[Job]:
        with self._locked():
            jobs = self._read(JOBS_FILE, [])
            for row in jobs:
                if row.get("id") != job_id:
                    continue
                if from_status is not None and row.get("status") != from_status.value:
                    return None
                row.update(_serialize_changes(changes))
                self._write(JOBS_FILE, jobs)
                return Job.from_dict(row)
        return None

    async def patch_job(self, job_id: str, changes: dict[str, Any]) -> Optional[Job]:
        return await self._run(lambda: self._update_job(job_id, changes, None))

    async def transition_job(
        self, job_id: str, from_status: JobStatus, changes: dict[str, Any]
    ) -> Optional[Job]:
        return await self._run(lambda: self._update_job(job_id, changes, from_status))

    async def claim_next_job(self, started_at: str) -> Optional[Job]:
        def _claim() -> Optional[Job]:
            with self._locked():
                jobs = self._read(JOBS_FILE, [])
                for row in jobs:
                    if row.get("status") == JobStatus.QUEUED.value:
                        row["status"] = JobStatus.RUNNING.value
                        row["started_at"] = started_at
                        self._write(JOBS_FILE, jobs)
                        return Job.from_dict(row)
            return None

        return await self._run(_claim)

    # Leads

    async def list_lead_files(self) -> list[str]:
        def _files() -> list[str]:
            if not self.data_dir.exists():
                return []
            return sorted(
                p.name for p in self.data_dir.glob("leads-*.json") if p.is_file()
            )

        return await self._run(_files)

    async def list_leads(self, source_file: str) -> list[Lead]:
        name = source_file_name(source_file)

        def _list() -> list[Lead]:
            with self._locked():
                rows = self._read(name, [])
            return [Lead.from_dict(row) for row in rows]

        return await self._run(_list)

    async def upsert_leads(self, source_file: str, leads: list[Lead]) -> None:
        name = source_file_name(source_file)

        def _upsert() -> None:
            with self._locked():
                rows = self._read(name, [])
                positions = {
                    Lead.from_dict(row).identity_key: i for i, row in enumerate(rows)
                }
                for lead in leads:
                    key = lead.identity_key
                    if key in positions:
                        rows[positions[key]] = lead.to_dict()
                    else:
                        positions[key] = len(rows)
                        rows.append(lead.to_dict())
                self._write(name, rows)

        await self._run(_upsert)

    # Websites

    async def list_websites(self) -> list[WebsiteArtifact]:
        def _list() -> list[WebsiteArtifact]:
            with self._locked():
                rows = self._read(WEBSITE_INDEX_FILE, [])
            return [WebsiteArtifact.from_dict(row) for row in rows]

        return await self._run(_list)

    async def get_website(self, slug: str) -> Optional[WebsiteArtifact]:
        for website in await self.list_websites():
            if website.slug == slug:
                return website
        return None

    async def upsert_website(self, website: WebsiteArtifact) -> None:
        def _upsert() -> None:
            with self._locked():
                rows = self._read(WEBSITE_INDEX_FILE, [])
                rows = [row for row in rows if row.get("slug") != website.slug]
                rows.append(website.to_dict())
                self._write(WEBSITE_INDEX_FILE, rows)

        await self._run(_upsert)

    def write_site(self, slug: str, html: str) -> Path:
        """Write a generated site document and return its path."""
        path = self.sites_dir / f"{slug}.html"
        with self._locked():
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(html, encoding="utf-8")
        return path

    # Outreach

    async def list_outreach(self) -> list[OutreachAttempt]:
        def _list() -> list[OutreachAttempt]:
            with self._locked():
                rows = self._read(OUTREACH_LOG_FILE, [])
            return [OutreachAttempt.from_dict(row) for row in rows]

        return await self._run(_list)

    async def upsert_outreach(self, attempts: list[OutreachAttempt]) -> None:
        def _upsert() -> None:
            with self._locked():
                rows = self._read(OUTREACH_LOG_FILE, [])
                positions = {row.get("id"): i for i, row in enumerate(rows)}
                for attempt in attempts:
                    if attempt.id in positions:
                        rows[positions[attempt.id]] = attempt.to_dict()
                    else:
                        positions[attempt.id] = len(rows)
                        rows.append(attempt.to_dict())
                self._write(OUTREACH_LOG_FILE, rows)

        await self._run(_upsert)

    # Audit

    async def write_artifact(self, kind: str, key: str, data: Any) -> None:
        def _append() -> None:
            with self._locked():
                rows = self._read(ARTIFACTS_FILE, [])
                rows.append(
                    {"kind": kind, "key": key, "data": data, "created_at": utc_now_iso()}
                )
                self._write(ARTIFACTS_FILE, rows)

        await self._run(_append)

    async def list_artifacts(self, kind: Optional[str] = None) -> list[dict[str, Any]]:
        def _list() -> list[dict[str, Any]]:
            with self._locked():
                rows = self._read(ARTIFACTS_FILE, [])
            return [row for row in rows if kind is None or row.get("kind") == kind]

        return await self._run(_list)

    # Local-only documents

    async def load_daily_state(self) -> DailyTargetState:
        def _load() -> DailyTargetState:
            with self._locked():
                return DailyTargetState.from_dict(self._read(DAILY_STATE_FILE, None))

        return await self._run(_load)

    async def save_daily_state(self, state: DailyTargetState) -> None:
        def _save() -> None:
            with self._locked():
                self._write(DAILY_STATE_FILE, state.to_dict())

        await self._run(_save)

    def update_templates(
        self, mutate: Callable[[list[dict[str, Any]]], T]
    ) -> tuple[list[dict[str, Any]], T]:
        """Run ``mutate`` on the stored template list and save the result.

        Returns:
            The saved template list and whatever ``mutate`` returned.
        """
        with self._locked():
            templates = self._read(TEMPLATES_FILE, [])
            outcome = mutate(templates)
            self._write(TEMPLATES_FILE, templates)
        return templates, outcome

    def read_templates(self) -> list[dict[str, Any]]:
        with self._locked():
            return self._read(TEMPLATES_FILE, [])


def _serialize_changes(changes: dict[str, Any]) -> dict[str, Any]:
    return {
        key: value.value if isinstance(value, JobStatus) else value
        for key, value in changes.items()
    }
