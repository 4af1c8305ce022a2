"""Scrape stage: discover local businesses and merge them into a leads file."""

import asyncio
import logging
from contextlib import aclosing
from typing import Any, Optional

from ..dedup import merge_new_leads
from ..errors import InvalidPayloadError
from ..models import Lead, lead_identity_key, leads_file_name
from .context import PipelineContext

logger = logging.getLogger(__name__)


async def scrape_leads(
    ctx: PipelineContext,
    query: str,
    location: str,
    max_results: Optional[int] = None,
) -> dict[str, Any]:
    """Search for businesses and append the unseen ones to the leads file.

    The leads file for a query/location pair only ever grows: leads whose
    identity key is already stored are skipped before their details are
    fetched, and stored leads are never rewritten by a scrape.

    Args:
        ctx: Pipeline context.
        query: Business type to search for, e.g. ``"plumbers"``.
        location: Place to search in, e.g. ``"Austin"``.
        max_results: Maximum number of new leads to add. Defaults to
            SCRAPE_MAX_RESULTS. Zero skips the search entirely.

    Returns:
        ``{"outFile", "count", "newCount"}`` where count is the size of the
        merged file.

    Raises:
        InvalidPayloadError: If query or location is empty.
        ConfigError: If a search is needed and no API key is configured.
        googlemaps.exceptions.ApiError: If the Places API fails.
    """
    if not query or not location:
        raise InvalidPayloadError("scrape requires query and location")

    limit = ctx.config.SCRAPE_MAX_RESULTS if max_results is None else int(max_results)
    limit = max(0, limit)
    out_file = leads_file_name(query, location)
    existing = await ctx.store.list_leads(out_file)

    found: list[Lead] = []
    if limit > 0:
        client = ctx.get_places_client()
        seen = {lead.identity_key for lead in existing}
        delay = ctx.config.PLACES_DETAILS_DELAY_SECONDS

        async with aclosing(client.text_search(f"{query} in {location}")) as places:
            async for place in places:
                if len(found) >= limit:
                    break
                if lead_identity_key(place.name, place.address) in seen:
                    continue
                place.apply_details(await client.place_details(place.place_id))
                lead = Lead(
                    id=place.place_id,
                    name=place.name,
                    address=place.address,
                    phone=place.phone,
                    website=place.website,
                    rating=place.rating,
                    reviews=place.review_count,
                    industry=query,
                    city=location,
                )
                if lead.identity_key not in seen:
                    seen.add(lead.identity_key)
                    found.append(lead)
                if delay:
                    await asyncio.sleep(delay)

    merged = merge_new_leads(existing, found, limit)
    await ctx.store.upsert_leads(out_file, merged.added)

    logger.info(
        "Scraped %s: %d new, %d total",
        out_file,
        merged.new_count,
        len(merged.leads),
        extra={"leads_file": out_file, "new_count": merged.new_count},
    )
    return {"outFile": out_file, "count": len(merged.leads), "newCount": merged.new_count}
