"""Fetch business homepages for contact enrichment."""

import asyncio
import logging
from typing import Optional

import requests
from requests.exceptions import RequestException

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 8.0
BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0 Safari/537.36"
)


class WebsiteFetcher:
    """Download page HTML with a bounded timeout.

    Any request failure or non-2xx response yields an empty string, since a
    missing homepage simply means no contact details were found.

    Attributes:
        timeout_seconds: Connect and read timeout per request.
        session: Requests session for connection pooling.
    """

    def __init__(self, timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS):
        self.timeout_seconds = timeout_seconds
        self.session = requests.Session()
        self.session.headers.update({
            "User-Agent": BROWSER_USER_AGENT,
            "Accept": "text/html,application/xhtml+xml",
            "Accept-Language": "en-US,en;q=0.9",
        })

    def close(self) -> None:
        """Close the requests session and release resources."""
        self.session.close()

    def fetch_html(self, url: Optional[str]) -> str:
        """Return the body of ``url`` or an empty string."""
        if not url:
            return ""
        try:
            response = self.session.get(url, timeout=self.timeout_seconds)
        except RequestException as e:
            logger.debug("Fetching %s failed: %s", url, e)
            return ""
        if not response.ok:
            logger.debug("Fetching %s returned %s", url, response.status_code)
            return ""
        return response.text or ""

    async def fetch(self, url: Optional[str]) -> str:
        """Async wrapper around ``fetch_html``."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, lambda: self.fetch_html(url))
