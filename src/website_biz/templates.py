"""Outreach email templates with ``{{token}}`` personalization.

Templates are stored in the local data directory (``templates.json``) and
seeded with a single default template on first use.

Usage:
    >>> templates = ensure_templates(store)
    >>> template = get_default_template(store)
    >>> render(template.subject, {"business_name": "Acme Plumbing"})
    'I built something for Acme Plumbing'
"""

import re
import uuid
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from .errors import TemplateError
from .models import utc_now_iso
from .storage import LocalJsonStore

TOKEN_PATTERN = re.compile(r"\{\{\s*([a-zA-Z0-9_]+)\s*\}\}")

PLACEHOLDERS = [
    "business_name",
    "city",
    "industry",
    "website_url",
    "phone",
    "rating",
    "reviews",
    "sender_name",
]

DEFAULT_TEMPLATE_ID = "default"
DEFAULT_TEMPLATE_NAME = "Cold intro"
DEFAULT_SUBJECT = "I built something for {{business_name}}"
DEFAULT_BODY = (
    "Hey,\n\n"
    "I noticed {{business_name}} in {{city}} could use a stronger web presence.\n\n"
    "I put together a free preview, no commitment:\n"
    "{{website_url}}\n\n"
    "If you like it, I can get it live on a real domain for you.\n\n"
    "Best,\n"
    "{{sender_name}}"
)


@dataclass
class EmailTemplate:
    """A stored outreach email template.

    Attributes:
        id: Template id, recorded on each outreach attempt.
        name: Display name, matched case-insensitively.
        subject: Subject line with ``{{token}}`` placeholders.
        body: Plain text body with ``{{token}}`` placeholders.
        is_default: Whether send uses this template.
        created_at: ISO creation timestamp.
    """

    name: str
    subject: str
    body: str
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    is_default: bool = False
    created_at: str = field(default_factory=utc_now_iso)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "subject": self.subject,
            "body": self.body,
            "is_default": self.is_default,
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "EmailTemplate":
        return cls(
            id=data.get("id") or str(uuid.uuid4()),
            name=data.get("name") or "",
            subject=data.get("subject") or "",
            body=data.get("body") or "",
            is_default=bool(data.get("is_default")),
            created_at=data.get("created_at") or utc_now_iso(),
        )


def _seed() -> list[dict[str, Any]]:
    return [
        EmailTemplate(
            id=DEFAULT_TEMPLATE_ID,
            name=DEFAULT_TEMPLATE_NAME,
            subject=DEFAULT_SUBJECT,
            body=DEFAULT_BODY,
            is_default=True,
        ).to_dict()
    ]


def _seed_if_empty(rows: list[dict[str, Any]]) -> None:
    if not rows:
        rows.extend(_seed())


def ensure_templates(store: LocalJsonStore) -> list[EmailTemplate]:
    """Return the stored templates, seeding the default one if none exist."""
    rows, _ = store.update_templates(_seed_if_empty)
    return [EmailTemplate.from_dict(row) for row in rows]


def list_templates(store: LocalJsonStore) -> list[EmailTemplate]:
    return ensure_templates(store)


def get_default_template(store: LocalJsonStore) -> EmailTemplate:
    """Return the default template, or the first one if none is marked."""
    templates = ensure_templates(store)
    for template in templates:
        if template.is_default:
            return template
    return templates[0]


def add_template(store: LocalJsonStore, name: str, subject: str, body: str) -> EmailTemplate:
    """Store a new, non-default template.

    Raises:
        TemplateError: If name, subject or body is empty.
    """
    if not name or not subject or not body:
        raise TemplateError("template name, subject and body are required")
    template = EmailTemplate(name=name, subject=subject, body=body)

    def _add(rows: list[dict[str, Any]]) -> None:
        _seed_if_empty(rows)
        rows.append(template.to_dict())

    store.update_templates(_add)
    return template


def set_default_template(store: LocalJsonStore, name: str) -> EmailTemplate:
    """Make the template called ``name`` (case-insensitive) the default.

    Raises:
        TemplateError: ``template_not_found: <name>`` if no template matches.
    """
    wanted = name.lower()

    def _set(rows: list[dict[str, Any]]) -> Optional[dict[str, Any]]:
        _seed_if_empty(rows)
        if not any((row.get("name") or "").lower() == wanted for row in rows):
            return None
        chosen = None
        for row in rows:
            row["is_default"] = (row.get("name") or "").lower() == wanted
            if row["is_default"] and chosen is None:
                chosen = row
        return chosen

    _, chosen = store.update_templates(_set)
    if chosen is None:
        raise TemplateError(f"template_not_found: {name}")
    return EmailTemplate.from_dict(chosen)


def delete_template(store: LocalJsonStore, name: str) -> list[EmailTemplate]:
    """Delete every template called ``name`` (case-insensitive).

    If the default template was deleted, the first remaining one becomes the
    default.

    Returns:
        The remaining templates.

    Raises:
        TemplateError: ``cannot_delete_last_template`` if nothing would remain.
    """
    wanted = name.lower()

    def _delete(rows: list[dict[str, Any]]) -> bool:
        _seed_if_empty(rows)
        remaining = [row for row in rows if (row.get("name") or "").lower() != wanted]
        if not remaining:
            return False
        if not any(row.get("is_default") for row in remaining):
            remaining[0]["is_default"] = True
        rows[:] = remaining
        return True

    rows, deleted = store.update_templates(_delete)
    if not deleted:
        raise TemplateError("cannot_delete_last_template")
    return [EmailTemplate.from_dict(row) for row in rows]


def render(text: str, variables: Mapping[str, Any]) -> str:
    """Replace ``{{key}}`` tokens in ``text``.

    Known keys are replaced with their value, missing or empty values with an
    empty string. Unknown tokens are removed as well.
    """

    def _replace(match: re.Match) -> str:
        value = variables.get(match.group(1))
        return "" if value is None else str(value)

    return TOKEN_PATTERN.sub(_replace, text or "")
