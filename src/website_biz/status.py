"""Read-only summaries of pipeline state for the CLI and HTTP API."""

from typing import Any

from .models import OutreachStatus
from .stages import PipelineContext
from .templates import ensure_templates


async def get_status(ctx: PipelineContext) -> dict[str, Any]:
    """Summarize leads files, websites, outreach, templates and the daily state."""
    leads_summary = []
    for name in await ctx.store.list_lead_files():
        leads = await ctx.store.list_leads(name)
        leads_summary.append({
            "file": name,
            "total": len(leads),
            "withEmail": sum(1 for lead in leads if lead.email),
            "enriched": sum(1 for lead in leads if lead.enriched),
            "websites": sum(1 for lead in leads if lead.website_url),
        })

    websites = await ctx.store.list_websites()
    log = await ctx.store.list_outreach()
    templates = ensure_templates(ctx.local)
    default = next((t for t in templates if t.is_default), None)
    daily = await ctx.local.load_daily_state()

    return {
        "leadsSummary": leads_summary,
        "websites": len(websites),
        "outreachTotal": sum(1 for a in log if a.status == OutreachStatus.SENT),
        "templates": len(templates),
        "defaultTemplate": default.name if default else None,
        "daily": daily.to_dict() if daily.has_target or daily.last_run else None,
    }


async def get_history(ctx: PipelineContext, limit_per_file: int = 20) -> dict[str, Any]:
    """Return lead samples per file (newest file name first), websites and the outreach log."""
    leads = []
    for name in sorted(await ctx.store.list_lead_files(), reverse=True):
        rows = await ctx.store.list_leads(name)
        leads.append({
            "file": name,
            "total": len(rows),
            "sample": [
                {
                    "name": lead.name,
                    "industry": lead.industry,
                    "city": lead.city,
                    "email": lead.email or None,
                    "phone": lead.phone or None,
                    "website_url": lead.website_url or None,
                    "enriched": lead.enriched,
                }
                for lead in rows[: max(0, limit_per_file)]
            ],
        })

    return {
        "leads": leads,
        "websites": [w.to_dict() for w in await ctx.store.list_websites()],
        "outreach": [a.to_dict() for a in await ctx.store.list_outreach()],
    }
