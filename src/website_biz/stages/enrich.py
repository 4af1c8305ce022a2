"""Enrich stage: find contact emails and social profiles on lead homepages."""

import asyncio
import logging
import re
from typing import Any

from ..models import EmailStatus
from ..storage import source_file_name
from .context import PipelineContext

logger = logging.getLogger(__name__)

MAILTO_PATTERN = re.compile(r"mailto:([^\s\"'<>?#,]+)", re.IGNORECASE)
EMAIL_PATTERN = re.compile(r"\b[a-zA-Z0-9._%+\-]+@[a-zA-Z0-9.\-]+\.[a-zA-Z]{2,}\b")
IGNORED_EMAIL_PARTS = ("example.", ".png", ".jpg", ".jpeg", ".gif", ".webp", ".svg")

SOCIAL_PATTERNS = {
    "instagram": re.compile(r"instagram\.com/([\w.]+)", re.IGNORECASE),
    "facebook": re.compile(r"facebook\.com/([\w.]+)", re.IGNORECASE),
    "linkedin": re.compile(r"linkedin\.com/(?:company|in)/([\w-]+)", re.IGNORECASE),
    "tiktok": re.compile(r"tiktok\.com/@([\w.]+)", re.IGNORECASE),
}
SAMPLE_SIZE = 50


def extract_emails(html: str) -> list[str]:
    """Return distinct lower-cased emails found in ``html``, mailto links first.

    Image file names that look like addresses and ``example.`` domains are
    dropped.
    """
    candidates = [m.lower() for m in MAILTO_PATTERN.findall(html or "")]
    candidates += [m.lower() for m in EMAIL_PATTERN.findall(html or "")]
    emails: list[str] = []
    for email in candidates:
        if email in emails or any(part in email for part in IGNORED_EMAIL_PARTS):
            continue
        emails.append(email)
    return emails


def extract_socials(html: str) -> dict[str, str]:
    """Return canonical profile URLs keyed by network."""
    socials = {}
    for network, pattern in SOCIAL_PATTERNS.items():
        match = pattern.search(html or "")
        if match:
            handle = match.group(1)
            if network == "linkedin":
                socials[network] = f"https://linkedin.com/company/{handle}"
            elif network == "tiktok":
                socials[network] = f"https://tiktok.com/@{handle}"
            else:
                socials[network] = f"https://{network}.com/{handle}"
    return socials


async def enrich_leads(ctx: PipelineContext, leads_file: str) -> dict[str, Any]:
    """Fetch each pending lead's homepage and record contact details.

    Leads already enriched with a final email status are skipped. A homepage
    that cannot be fetched counts as having no contact details; it never
    fails the stage.

    Returns:
        ``{"total", "processed", "withEmail"}``.
    """
    name = source_file_name(leads_file)
    leads = await ctx.store.list_leads(name)
    fetcher = ctx.get_fetcher()
    delay = ctx.config.ENRICH_DELAY_SECONDS

    processed = 0
    for lead in leads:
        if lead.enriched and lead.email_status != EmailStatus.PENDING:
            continue
        processed += 1

        html = ""
        if lead.website:
            try:
                html = await fetcher.fetch(lead.website)
            except Exception as e:
                logger.warning("Could not fetch %s for %s: %s", lead.website, lead.name, e)

        emails = extract_emails(html)
        lead.email = emails[0] if emails else ""
        lead.email_secondary = emails[1] if len(emails) > 1 else ""
        lead.email_status = EmailStatus.SCRAPED if emails else EmailStatus.NOT_FOUND
        lead.socials = {**lead.socials, **extract_socials(html)}
        lead.enriched = True

        if delay:
            await asyncio.sleep(delay)

    if processed:
        await ctx.store.upsert_leads(name, leads)
    await ctx.store.write_artifact(
        "leads",
        name,
        {"total": len(leads), "sample": [lead.to_dict() for lead in leads[:SAMPLE_SIZE]]},
    )

    with_email = sum(1 for lead in leads if lead.email)
    logger.info(
        "Enriched %s: %d processed, %d with email",
        name,
        processed,
        with_email,
        extra={"leads_file": name},
    )
    return {"total": len(leads), "processed": processed, "withEmail": with_email}
