"""Synchronous actions shared by the CLI and ``POST /api/run``.

Unlike queued jobs, actions run inline and return their result directly.
Parameter names match the job payload fields.
"""

from typing import Any, Optional

from . import quota, templates
from .config import check_environment, parse_bool
from .errors import InvalidPayloadError, UnknownActionError
from .stages import PipelineContext, enrich_leads, generate_site, scrape_leads, send_outreach
from .status import get_history, get_status

ACTIONS = [
    "check",
    "status",
    "history",
    "scrape",
    "enrich",
    "generate-site",
    "send",
    "template-list",
    "template-add",
    "template-default",
    "template-delete",
    "daily-set",
    "daily-run",
]


def _param(params: dict[str, Any], key: str) -> Any:
    value = params.get(key)
    if value is None or value == "":
        raise InvalidPayloadError(f"params.{key} is required")
    return value


def _optional_int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise InvalidPayloadError(f"expected an integer, got {value!r}") from e


async def run_action(
    ctx: PipelineContext, action: str, params: Optional[dict[str, Any]] = None
) -> Any:
    """Run ``action`` with ``params`` and return its JSON-serializable result.

    Raises:
        UnknownActionError: If ``action`` is not one of ``ACTIONS``.
    """
    params = params or {}

    if action == "check":
        return check_environment()
    if action == "status":
        return await get_status(ctx)
    if action == "history":
        return await get_history(ctx, _optional_int(params.get("limitPerFile")) or 20)
    if action == "scrape":
        return await scrape_leads(
            ctx,
            _param(params, "query"),
            _param(params, "location"),
            max_results=_optional_int(params.get("maxResults")),
        )
    if action == "enrich":
        return await enrich_leads(ctx, _param(params, "leadsFile"))
    if action == "generate-site":
        return await generate_site(
            ctx,
            _param(params, "leadsFile"),
            _param(params, "index"),
            template_style=params.get("templateStyle"),
            force=parse_bool(params.get("forceRegenerate")),
        )
    if action == "send":
        return await send_outreach(
            ctx, _param(params, "leadsFile"), daily_limit=_optional_int(params.get("dailyLimit"))
        )
    if action == "template-list":
        return [t.to_dict() for t in templates.list_templates(ctx.local)]
    if action == "template-add":
        template = templates.add_template(
            ctx.local, _param(params, "name"), _param(params, "subject"), _param(params, "body")
        )
        return template.to_dict()
    if action == "template-default":
        return templates.set_default_template(ctx.local, _param(params, "name")).to_dict()
    if action == "template-delete":
        remaining = templates.delete_template(ctx.local, _param(params, "name"))
        return [t.to_dict() for t in remaining]
    if action == "daily-set":
        return await quota.set_daily_target(
            ctx, _param(params, "query"), _param(params, "location")
        )
    if action == "daily-run":
        return await quota.run_daily(ctx)
    raise UnknownActionError(action)
