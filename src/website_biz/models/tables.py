"""SQLAlchemy tables for the remote record store.

Only the fields the pipeline reads and writes are mapped. Timestamps are kept
as ISO strings so rows round-trip to the same dictionaries the local JSON
store holds.
"""

from typing import Any, Optional

from sqlalchemy import JSON, Integer, String, Text, UniqueConstraint
from sqlalchemy.ext.asyncio import AsyncAttrs
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(AsyncAttrs, DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass


class JobRow(Base):
    """Persisted queue entry.

    ``seq`` records insertion order, so jobs created within the same
    timestamp are still claimed first in, first out.
    """

    __tablename__ = "website_biz_jobs"

    seq: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    id: Mapped[str] = mapped_column(String(36), unique=True, nullable=False)
    type: Mapped[str] = mapped_column(String(50), nullable=False)
    payload: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    status: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    created_at: Mapped[str] = mapped_column(String(40), nullable=False, index=True)
    started_at: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)
    finished_at: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)
    error: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    result: Mapped[Optional[Any]] = mapped_column(JSON, nullable=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.type,
            "payload": self.payload or {},
            "status": self.status,
            "created_at": self.created_at,
            "started_at": self.started_at,
            "finished_at": self.finished_at,
            "error": self.error,
            "result": self.result,
        }


class LeadRow(Base):
    """One lead of one leads file, keyed by ``(source_file, lead_key)``."""

    __tablename__ = "website_biz_leads"
    __table_args__ = (
        UniqueConstraint("source_file", "lead_key", name="uq_website_biz_leads_source_key"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    source_file: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    lead_key: Mapped[str] = mapped_column(String(512), nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    website_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    data: Mapped[dict] = mapped_column(JSON, nullable=False)
    updated_at: Mapped[str] = mapped_column(String(40), nullable=False)


class WebsiteRow(Base):
    """Generated website, keyed by lead slug."""

    __tablename__ = "website_biz_websites"

    slug: Mapped[str] = mapped_column(String(255), primary_key=True)
    business_name: Mapped[str] = mapped_column(String(255), nullable=False)
    city: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    industry: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    template_style: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    file_path: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    source_file: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    created_at: Mapped[str] = mapped_column(String(40), nullable=False)

    def to_dict(self) -> dict:
        return {
            "slug": self.slug,
            "business_name": self.business_name,
            "city": self.city or "",
            "industry": self.industry or "",
            "template_style": self.template_style or "",
            "file_path": self.file_path or "",
            "source_file": self.source_file or "",
            "created_at": self.created_at,
        }


class OutreachRow(Base):
    """Outreach log entry, keyed by attempt id."""

    __tablename__ = "website_biz_outreach"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    business_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    template_id: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    sent_at: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    error: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    source_file: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    logged_at: Mapped[str] = mapped_column(String(40), nullable=False)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "email": self.email,
            "business_name": self.business_name or "",
            "template_id": self.template_id or "",
            "sent_at": self.sent_at,
            "status": self.status,
            "error": self.error,
            "source_file": self.source_file or "",
        }


class ArtifactRow(Base):
    """Additive audit record of stage output."""

    __tablename__ = "website_biz_artifacts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    kind: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    key: Mapped[str] = mapped_column(String(255), nullable=False)
    data: Mapped[Any] = mapped_column(JSON, nullable=False)
    created_at: Mapped[str] = mapped_column(String(40), nullable=False)
