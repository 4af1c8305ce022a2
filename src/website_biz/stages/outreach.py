"""Send stage: deliver the default outreach template to eligible leads."""

import logging
from typing import Any, Iterable, Optional

from ..dedup import eligible_for_outreach
from ..errors import MailTransportError
from ..models import Lead, OutreachAttempt, OutreachStatus
from ..storage import source_file_name
from ..templates import get_default_template, render
from .context import PipelineContext

logger = logging.getLogger(__name__)

LOG_SAMPLE_SIZE = 100


def count_sent_today(ctx: PipelineContext, log: Iterable[OutreachAttempt]) -> int:
    """Count delivered attempts whose sent_at falls on today's local date.

    Failed attempts never count.
    """
    today = ctx.now().date()
    return sum(
        1
        for attempt in log
        if attempt.status == OutreachStatus.SENT and ctx.local_date_of(attempt.sent_at) == today
    )


def template_variables(ctx: PipelineContext, lead: Lead) -> dict[str, str]:
    return {
        "business_name": lead.name,
        "city": lead.city,
        "industry": lead.industry,
        "website_url": lead.website_url,
        "phone": lead.phone or "",
        "rating": str(lead.rating) if lead.rating else "",
        "reviews": str(lead.reviews) if lead.reviews else "",
        "sender_name": ctx.config.SENDER_NAME,
    }


async def send_outreach(
    ctx: PipelineContext, leads_file: str, daily_limit: Optional[int] = None
) -> dict[str, Any]:
    """Email eligible leads of ``leads_file`` within today's send budget.

    Every attempt, delivered or not, is appended to the outreach log. A
    single failed delivery is recorded and the stage moves on; missing mail
    configuration or rejected credentials fail the stage.

    Args:
        ctx: Pipeline context.
        leads_file: Leads file to take recipients from.
        daily_limit: Emails allowed per local day; defaults to
            SEND_DAILY_LIMIT.

    Returns:
        ``{"sent", "attempted", "remaining"}`` with remaining the budget left
        for today after this run.

    Raises:
        ConfigError: If SendGrid is not configured.
        MailAuthError: If SendGrid rejects the credentials.
    """
    mailer = ctx.get_mail_client()
    name = source_file_name(leads_file)
    limit = ctx.config.SEND_DAILY_LIMIT if daily_limit is None else int(daily_limit)

    leads = await ctx.store.list_leads(name)
    log = await ctx.store.list_outreach()
    remaining = max(0, limit - count_sent_today(ctx, log))
    eligible = eligible_for_outreach(
        leads, log, retry_failed=ctx.config.OUTREACH_RETRY_FAILED
    )[:remaining]

    template = get_default_template(ctx.local) if eligible else None
    attempts: list[OutreachAttempt] = []
    sent = 0
    try:
        for lead in eligible:
            variables = template_variables(ctx, lead)
            attempt = OutreachAttempt(
                email=lead.email,
                business_name=lead.name,
                template_id=template.id,
                source_file=name,
            )
            try:
                result = await mailer.send_email(
                    to_email=lead.email,
                    subject=render(template.subject, variables),
                    text_content=render(template.body, variables),
                )
            except MailTransportError as e:
                attempt.error = str(e)
                attempts.append(attempt)
                raise
            except Exception as e:
                logger.warning("Send to %s failed: %s", lead.email, e)
                attempt.error = str(e)
            else:
                if result.success:
                    attempt.status = OutreachStatus.SENT
                    attempt.sent_at = ctx.utc_timestamp()
                    sent += 1
                else:
                    logger.warning("Send to %s failed: %s", lead.email, result.error)
                    attempt.error = result.error
            attempts.append(attempt)
    finally:
        if attempts:
            await ctx.store.upsert_outreach(attempts)

    if attempts:
        full_log = log + attempts
        await ctx.store.write_artifact(
            "outreach",
            name,
            {"total": len(full_log), "sample": [a.to_dict() for a in full_log[-LOG_SAMPLE_SIZE:]]},
        )

    logger.info(
        "Outreach for %s: %d sent of %d attempted",
        name,
        sent,
        len(eligible),
        extra={"leads_file": name},
    )
    return {"sent": sent, "attempted": len(eligible), "remaining": max(0, remaining - sent)}
