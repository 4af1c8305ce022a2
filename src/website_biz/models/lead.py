"""Lead model for scraped local businesses."""

import re
from dataclasses import asdict, dataclass, field, fields
from enum import Enum
from typing import Any, Optional

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


class EmailStatus(str, Enum):
    """Outcome of contact enrichment for a lead."""

    PENDING = "pending"
    SCRAPED = "scraped"
    NOT_FOUND = "not_found"


def slugify(value: str) -> str:
    """Lower-case ``value`` and collapse non-alphanumeric runs into '-'.

    Example:
        >>> slugify("Joe's Plumbing & Co.")
        'joe-s-plumbing-co'
    """
    return _NON_ALNUM.sub("-", (value or "").lower()).strip("-")


def normalize_key_part(value: Optional[str]) -> str:
    """Normalize a name or address for identity comparison.

    Case-insensitive, with every run of non-alphanumeric characters collapsed
    to a single space, so punctuation and spacing differences compare equal.
    """
    return _NON_ALNUM.sub(" ", (value or "").lower()).strip()


def lead_identity_key(name: Optional[str], address: Optional[str]) -> str:
    """Return the stable identity key for a business."""
    return f"{normalize_key_part(name)}|{normalize_key_part(address)}"


def leads_file_name(query: str, location: str) -> str:
    """Return the leads file name for a query/location pair."""
    return f"leads-{slugify(f'{query}-{location}')}.json"


@dataclass
class Lead:
    """A scraped business lead.

    Attributes:
        id: Source place identifier.
        name: Business name.
        address: Formatted street address.
        phone: Formatted phone number.
        website: The business's own site, if any.
        rating: Star rating from the source.
        reviews: Number of reviews.
        industry: Search query the lead was found with.
        city: Search location the lead was found with.
        slug: Artifact key derived from name and city.
        email: Primary contact email found during enrichment.
        email_secondary: Second distinct email, if any.
        email_status: Enrichment outcome.
        socials: Social profile URLs keyed by network.
        website_url: Pointer to the generated website, empty until generated.
        enriched: Whether enrichment has run.
    """

    name: str
    address: str = ""
    id: str = ""
    phone: str = ""
    website: str = ""
    rating: Optional[float] = None
    reviews: int = 0
    industry: str = ""
    city: str = ""
    slug: str = ""
    email: str = ""
    email_secondary: str = ""
    email_status: EmailStatus = EmailStatus.PENDING
    socials: dict[str, str] = field(default_factory=dict)
    website_url: str = ""
    enriched: bool = False

    def __post_init__(self) -> None:
        if not self.slug:
            self.slug = f"{slugify(self.name)}-{slugify(self.city)}".strip("-")

    @property
    def identity_key(self) -> str:
        return lead_identity_key(self.name, self.address)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary representation."""
        data = asdict(self)
        data["email_status"] = self.email_status.value
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Lead":
        """Build a lead from a stored record, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        values = {k: v for k, v in data.items() if k in known}
        values["email_status"] = EmailStatus(values.get("email_status") or "pending")
        values["socials"] = dict(values.get("socials") or {})
        for key in ("address", "id", "phone", "website", "industry", "city",
                    "email", "email_secondary", "website_url"):
            if values.get(key) is None:
                values[key] = ""
        values["reviews"] = values.get("reviews") or 0
        values["enriched"] = bool(values.get("enriched"))
        return cls(**values)
