"""Pipeline stages.

Each stage is a coroutine taking a ``PipelineContext`` plus its parameters
and returning a JSON-serializable result dictionary.
"""

from .context import PipelineContext, local_now
from .enrich import enrich_leads, extract_emails, extract_socials
from .generate import generate_site
from .outreach import count_sent_today, send_outreach
from .scrape import scrape_leads

__all__ = [
    "PipelineContext",
    "count_sent_today",
    "enrich_leads",
    "extract_emails",
    "extract_socials",
    "generate_site",
    "local_now",
    "scrape_leads",
    "send_outreach",
]
