"""Daily quota controller for the recurring ``daily-run`` pipeline.

The daily target state is a singleton kept in the local data directory. Its
counters reset once per local calendar day, on the first ``daily-run`` whose
date differs from ``last_run``, and each stage's reported delta is added to
the matching counter. The state is saved after every stage, so a later
stage failing never rolls back an earlier counter.
"""

import logging
from typing import Any, Optional

from .errors import ConfigError, InvalidPayloadError
from .models import DailyLimits, DailyTargetState
from .stages import PipelineContext, enrich_leads, generate_site, scrape_leads, send_outreach

logger = logging.getLogger(__name__)


async def set_daily_target(
    ctx: PipelineContext,
    query: str,
    location: str,
    limits: Optional[dict[str, Any]] = None,
) -> dict[str, Any]:
    """Store the query/location that ``daily-run`` works on.

    Counters and ``last_run`` are kept. Limits default to 60/25/25 and are
    only replaced when ``limits`` is given.

    Returns:
        The saved daily state.
    """
    if not query or not location:
        raise InvalidPayloadError("daily-set requires query and location")
    state = await ctx.local.load_daily_state()
    state.query = query
    state.location = location
    if limits:
        state.daily_limits = DailyLimits.from_dict({**state.daily_limits.to_dict(), **limits})
    await ctx.local.save_daily_state(state)
    logger.info("Daily target set to %s in %s", query, location)
    return state.to_dict()


async def get_daily_state(ctx: PipelineContext) -> DailyTargetState:
    return await ctx.local.load_daily_state()


async def roll_day(ctx: PipelineContext, state: DailyTargetState) -> bool:
    """Reset the counters if the local date moved past ``last_run``.

    Returns:
        True if the counters were reset.
    """
    today = ctx.today()
    if state.last_run == today:
        return False
    logger.info("New day %s (last run %s), resetting daily counters", today, state.last_run)
    state.reset_counters(today)
    await ctx.local.save_daily_state(state)
    return True


async def _generate_sites(
    ctx: PipelineContext, state: DailyTargetState, leads_file: str
) -> dict[str, Any]:
    budget = max(0, state.daily_limits.generate - state.websites_generated_today)
    leads = await ctx.store.list_leads(leads_file)
    candidates = [i for i, lead in enumerate(leads) if lead.email and not lead.website_url]

    generated = 0
    errors = []
    for index in candidates[:budget]:
        try:
            result = await generate_site(ctx, leads_file, index)
        except Exception as e:
            logger.warning("Site generation failed for lead %d of %s: %s", index, leads_file, e)
            errors.append({"index": index, "slug": leads[index].slug, "error": str(e)})
            continue
        if not result.get("skipped"):
            generated += 1
            state.websites_generated_today += 1
            await ctx.local.save_daily_state(state)

    return {"generated": generated, "attempted": min(budget, len(candidates)), "errors": errors}


async def run_daily(ctx: PipelineContext) -> dict[str, Any]:
    """Run scrape, enrich, optional site generation and send for the daily target.

    Returns:
        The result of each stage plus the saved state.

    Raises:
        ConfigError: ``daily_target_not_set`` if no query/location is stored.
    """
    state = await ctx.local.load_daily_state()
    if not state.has_target:
        raise ConfigError("daily_target_not_set")
    await roll_day(ctx, state)

    scrape_budget = max(0, state.daily_limits.scrape - state.leads_scraped_today)
    scrape = await scrape_leads(ctx, state.query, state.location, max_results=scrape_budget)
    state.leads_scraped_today += scrape["newCount"]
    await ctx.local.save_daily_state(state)

    enrich = await enrich_leads(ctx, scrape["outFile"])

    result: dict[str, Any] = {"scrape": scrape, "enrich": enrich}
    if ctx.config.DAILY_GENERATE_SITES:
        result["generate"] = await _generate_sites(ctx, state, scrape["outFile"])

    outreach = await send_outreach(ctx, scrape["outFile"], daily_limit=state.daily_limits.email)
    state.emails_sent_today += outreach["sent"]
    await ctx.local.save_daily_state(state)

    result["outreach"] = outreach
    result["state"] = state.to_dict()
    logger.info(
        "Daily run complete: %d new leads, %d emails sent today",
        state.leads_scraped_today,
        state.emails_sent_today,
    )
    return result
