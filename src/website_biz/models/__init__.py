"""Website-biz data models.

Dataclasses for the records the pipeline moves around, plus the SQLAlchemy
tables backing the remote record store.
"""

from .daily import DailyLimits, DailyTargetState
from .job import Job, JobStatus, JobType, new_id, utc_now_iso
from .lead import (
    EmailStatus,
    Lead,
    lead_identity_key,
    leads_file_name,
    normalize_key_part,
    slugify,
)
from .outreach import OutreachAttempt, OutreachStatus, normalize_email
from .tables import ArtifactRow, Base, JobRow, LeadRow, OutreachRow, WebsiteRow
from .website import WebsiteArtifact

__all__ = [
    # Records
    "DailyLimits",
    "DailyTargetState",
    "EmailStatus",
    "Job",
    "JobStatus",
    "JobType",
    "Lead",
    "OutreachAttempt",
    "OutreachStatus",
    "WebsiteArtifact",
    # Helpers
    "lead_identity_key",
    "leads_file_name",
    "new_id",
    "normalize_email",
    "normalize_key_part",
    "slugify",
    "utc_now_iso",
    # Tables
    "Base",
    "ArtifactRow",
    "JobRow",
    "LeadRow",
    "OutreachRow",
    "WebsiteRow",
]
