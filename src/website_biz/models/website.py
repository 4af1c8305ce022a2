"""Website artifact model, one generated site per lead slug."""

from dataclasses import dataclass, field
from typing import Any

from .job import utc_now_iso


@dataclass
class WebsiteArtifact:
    """A generated website for a lead.

    Attributes:
        slug: Lead slug, unique key of the artifact.
        business_name: Name of the business the site is for.
        city: Business city.
        industry: Business industry.
        template_style: Site style used for generation.
        file_path: Location of the written HTML document.
        source_file: Leads file the lead came from.
        created_at: ISO timestamp of (re)generation.
    """

    slug: str
    business_name: str
    city: str = ""
    industry: str = ""
    template_style: str = ""
    file_path: str = ""
    source_file: str = ""
    created_at: str = field(default_factory=utc_now_iso)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "slug": self.slug,
            "business_name": self.business_name,
            "city": self.city,
            "industry": self.industry,
            "template_style": self.template_style,
            "file_path": self.file_path,
            "source_file": self.source_file,
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "WebsiteArtifact":
        return cls(
            slug=data["slug"],
            business_name=data.get("business_name") or "",
            city=data.get("city") or "",
            industry=data.get("industry") or "",
            template_style=data.get("template_style") or "",
            file_path=data.get("file_path") or "",
            source_file=data.get("source_file") or "",
            created_at=data.get("created_at") or utc_now_iso(),
        )
