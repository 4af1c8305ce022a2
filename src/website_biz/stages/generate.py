"""Generate-site stage: build a demo website for one lead."""

import asyncio
import logging
from typing import Any, Optional

from ..errors import LeadNotFoundError
from ..models import WebsiteArtifact
from ..sites import AI_PREMIUM, ai_site_prompt, build_site, fill_ai_placeholders, resolve_style
from ..storage import source_file_name
from .context import PipelineContext

logger = logging.getLogger(__name__)


async def generate_site(
    ctx: PipelineContext,
    leads_file: str,
    index: Any,
    template_style: Optional[str] = None,
    force: bool = False,
) -> dict[str, Any]:
    """Generate and store the website for the lead at ``index``.

    A lead that already has a website (a website_url on the lead or an
    artifact for its slug) is skipped unless ``force`` is set, in which case
    the artifact is overwritten in place.

    Args:
        ctx: Pipeline context.
        leads_file: Leads file holding the lead.
        index: Zero-based position of the lead in the file.
        template_style: Site style; defaults to DEFAULT_TEMPLATE_STYLE.
        force: Regenerate even if a site exists.

    Returns:
        ``{"skipped": True, "reason": "already_generated", "website"}`` or
        ``{"skipped": False, "website", "slug", "templateStyle", "filePath"}``.

    Raises:
        LeadNotFoundError: If ``index`` does not address a lead.
        ConfigError: If ``ai-premium`` is requested without an OpenAI key.
    """
    name = source_file_name(leads_file)
    leads = await ctx.store.list_leads(name)
    try:
        position = int(index)
    except (TypeError, ValueError):
        raise LeadNotFoundError() from None
    if position < 0 or position >= len(leads):
        raise LeadNotFoundError()
    lead = leads[position]

    existing = await ctx.store.get_website(lead.slug)
    if not force and (lead.website_url or existing):
        return {
            "skipped": True,
            "reason": "already_generated",
            "website": lead.website_url or existing.file_path,
        }

    style = resolve_style(template_style or ctx.config.DEFAULT_TEMPLATE_STYLE)
    if style == AI_PREMIUM:
        generator = ctx.get_site_generator()
        document = fill_ai_placeholders(await generator.generate(ai_site_prompt(lead)), lead)
    else:
        document = build_site(style, lead)

    loop = asyncio.get_running_loop()
    path = await loop.run_in_executor(None, lambda: ctx.local.write_site(lead.slug, document))

    website = WebsiteArtifact(
        slug=lead.slug,
        business_name=lead.name,
        city=lead.city,
        industry=lead.industry,
        template_style=style,
        file_path=str(path),
        source_file=name,
        created_at=ctx.utc_timestamp(),
    )
    await ctx.store.upsert_website(website)

    base_url = ctx.config.SITES_BASE_URL
    lead.website_url = f"{base_url}/{lead.slug}.html" if base_url else str(path)
    await ctx.store.upsert_leads(name, [lead])
    await ctx.store.write_artifact("website", lead.slug, website.to_dict())

    logger.info(
        "Generated %s site for %s",
        style,
        lead.name,
        extra={"slug": lead.slug, "leads_file": name},
    )
    return {
        "skipped": False,
        "website": lead.website_url,
        "slug": lead.slug,
        "templateStyle": style,
        "filePath": str(path),
    }
