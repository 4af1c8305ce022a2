"""Job model for the pipeline work queue."""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional


class JobStatus(str, Enum):
    """Lifecycle status of a job.

    Transitions only ever follow ``queued -> running -> done|failed``.
    """

    QUEUED = "queued"
    RUNNING = "running"
    DONE = "done"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.DONE, JobStatus.FAILED)


class JobType(str, Enum):
    """Pipeline stage a job dispatches to."""

    SCRAPE = "scrape"
    ENRICH = "enrich"
    GENERATE_SITE = "generate-site"
    SEND = "send"
    DAILY_SET = "daily-set"
    DAILY_RUN = "daily-run"

    @classmethod
    def values(cls) -> list[str]:
        return [member.value for member in cls]


def utc_now_iso() -> str:
    """Return the current UTC time as an ISO 8601 string."""
    return datetime.now(timezone.utc).isoformat()


def new_id() -> str:
    return str(uuid.uuid4())


@dataclass
class Job:
    """A queued unit of pipeline work.

    Attributes:
        id: Opaque unique identifier assigned at creation.
        type: Stage name, normally one of ``JobType``. Kept as a plain string
            so that jobs with unknown types can still be stored and failed.
        payload: Stage-specific parameters, opaque to the queue.
        status: Current lifecycle status.
        created_at: ISO timestamp of creation.
        started_at: ISO timestamp of the claim, None while queued.
        finished_at: ISO timestamp of completion or failure.
        error: Failure message, only set when status is failed.
        result: Stage output, only set when status is done.
    """

    type: str
    payload: dict[str, Any] = field(default_factory=dict)
    id: str = field(default_factory=new_id)
    status: JobStatus = JobStatus.QUEUED
    created_at: str = field(default_factory=utc_now_iso)
    started_at: Optional[str] = None
    finished_at: Optional[str] = None
    error: Optional[str] = None
    result: Optional[Any] = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "id": self.id,
            "type": self.type,
            "payload": self.payload,
            "status": self.status.value,
            "created_at": self.created_at,
            "started_at": self.started_at,
            "finished_at": self.finished_at,
            "error": self.error,
            "result": self.result,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Job":
        """Build a job from its stored dictionary form."""
        return cls(
            id=data["id"],
            type=data["type"],
            payload=data.get("payload") or {},
            status=JobStatus(data.get("status", JobStatus.QUEUED.value)),
            created_at=data.get("created_at") or utc_now_iso(),
            started_at=data.get("started_at"),
            finished_at=data.get("finished_at"),
            error=data.get("error"),
            result=data.get("result"),
        )
