"""Deduplication rules for leads and outreach recipients."""

from dataclasses import dataclass
from typing import Iterable, Optional

from .models import Lead, OutreachAttempt, OutreachStatus, normalize_email


@dataclass
class MergeResult:
    """Outcome of merging freshly found leads into a persisted lead set."""

    leads: list[Lead]
    added: list[Lead]

    @property
    def new_count(self) -> int:
        return len(self.added)


def merge_new_leads(
    existing: list[Lead], found: Iterable[Lead], limit: Optional[int] = None
) -> MergeResult:
    """Append the leads of ``found`` whose identity key is not yet known.

    Existing leads are returned unchanged, including anything enrichment or
    site generation already wrote on them. Duplicates within ``found`` count
    once.

    Args:
        existing: Persisted leads in stored order.
        found: Newly discovered leads.
        limit: Maximum number of leads to append, None for no cap.

    Returns:
        The merged lead list and the leads that were appended.
    """
    seen = {lead.identity_key for lead in existing}
    added: list[Lead] = []
    for lead in found:
        if limit is not None and len(added) >= limit:
            break
        key = lead.identity_key
        if key in seen:
            continue
        seen.add(key)
        added.append(lead)
    return MergeResult(leads=list(existing) + added, added=added)


def contacted_emails(
    log: Iterable[OutreachAttempt], retry_failed: bool = False
) -> set[str]:
    """Return the normalized addresses outreach must not target again.

    Args:
        log: The full outreach log, across all days.
        retry_failed: When True, addresses whose every attempt failed are
            not blocked. When False, any logged address is blocked.
    """
    attempted: set[str] = set()
    delivered: set[str] = set()
    for attempt in log:
        email = normalize_email(attempt.email)
        if not email:
            continue
        attempted.add(email)
        if attempt.status == OutreachStatus.SENT:
            delivered.add(email)
    return delivered if retry_failed else attempted


def eligible_for_outreach(
    leads: Iterable[Lead], log: Iterable[OutreachAttempt], retry_failed: bool = False
) -> list[Lead]:
    """Select leads that may receive an outreach email.

    A lead qualifies with a non-empty email, a generated website_url and an
    email that is not blocked by the outreach log. Each address qualifies at
    most once per call, even when several leads share it.
    """
    blocked = contacted_emails(log, retry_failed=retry_failed)
    eligible = []
    for lead in leads:
        email = normalize_email(lead.email)
        if not email or not (lead.website_url or "").strip():
            continue
        if email in blocked:
            continue
        blocked.add(email)
        eligible.append(lead)
    return eligible
