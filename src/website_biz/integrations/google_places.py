"""Google Maps Places API client for lead scraping.

Wraps the blocking ``googlemaps`` client with text search pagination and
Place Details lookups, run in the default executor.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, AsyncIterator, Optional

import googlemaps

logger = logging.getLogger(__name__)

MAX_PAGES = 3  # Text search stops handing out page tokens after 60 results
DEFAULT_TIMEOUT_SECONDS = 20
DEFAULT_PAGE_DELAY_SECONDS = 2.5
DETAIL_FIELDS = [
    "name",
    "formatted_phone_number",
    "website",
    "formatted_address",
    "rating",
    "user_ratings_total",
]
OK_STATUSES = ("OK", "ZERO_RESULTS")


@dataclass
class PlaceResult:
    """A business found by text search, optionally completed by Place Details.

    Attributes:
        place_id: Unique Google Places identifier.
        name: Business name.
        address: Formatted address.
        phone: Formatted phone number.
        website: Business website URL.
        rating: Average star rating (0.0-5.0).
        review_count: Number of user reviews.
    """

    place_id: str
    name: str
    address: str = ""
    phone: str = ""
    website: str = ""
    rating: Optional[float] = None
    review_count: int = 0

    @classmethod
    def from_search(cls, data: dict[str, Any]) -> "PlaceResult":
        return cls(
            place_id=data.get("place_id", ""),
            name=data.get("name", ""),
            address=data.get("formatted_address", data.get("vicinity", "")) or "",
            rating=data.get("rating"),
            review_count=data.get("user_ratings_total") or 0,
        )

    def apply_details(self, details: dict[str, Any]) -> "PlaceResult":
        """Overlay Place Details fields onto the search result."""
        self.name = details.get("name") or self.name
        self.address = details.get("formatted_address") or self.address
        self.phone = details.get("formatted_phone_number") or ""
        self.website = details.get("website") or ""
        self.rating = details.get("rating") or self.rating
        self.review_count = details.get("user_ratings_total") or self.review_count
        return self


class GooglePlacesClient:
    """Client for Places text search with pagination.

    ``googlemaps`` raises ``ApiError``, ``TransportError`` and ``Timeout``;
    they are not caught here so that a scrape fails as a whole.

    Example:
        >>> client = GooglePlacesClient(api_key="...")
        >>> async for place in client.text_search("plumbers in Austin"):
        ...     details = await client.place_details(place.place_id)
    """

    def __init__(
        self,
        api_key: str,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        page_delay_seconds: float = DEFAULT_PAGE_DELAY_SECONDS,
    ) -> None:
        """Initialize the Places client.

        Args:
            api_key: Google Maps API key.
            timeout_seconds: Bound on every HTTP request, retries included.
            page_delay_seconds: Wait before using a next_page_token, which
                Google only activates after a short delay.

        Raises:
            ValueError: If no API key is provided.
        """
        if not api_key:
            raise ValueError("Google Maps API key required. Set GOOGLE_MAPS_API_KEY.")
        self.page_delay_seconds = page_delay_seconds
        self._client = googlemaps.Client(
            key=api_key, timeout=timeout_seconds, retry_timeout=timeout_seconds
        )

    async def _run(self, func):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, func)

    async def text_search(
        self, text: str, max_pages: int = MAX_PAGES
    ) -> AsyncIterator[PlaceResult]:
        """Yield text search results page by page.

        Args:
            text: Free-text query, e.g. ``"plumbers in Austin"``.
            max_pages: Maximum number of result pages to fetch.
        """
        token: Optional[str] = None
        for page_num in range(max_pages):
            if page_num == 0:
                response = await self._run(lambda: self._client.places(query=text))
            else:
                await asyncio.sleep(self.page_delay_seconds)
                response = await self._run(
                    lambda t=token: self._client.places(page_token=t)
                )

            status = response.get("status", "OK")
            if status not in OK_STATUSES:
                logger.warning("Places text search stopped with status %s", status)
                return

            results = response.get("results", [])
            logger.debug("Page %d: %d results", page_num + 1, len(results))
            for data in results:
                yield PlaceResult.from_search(data)

            token = response.get("next_page_token")
            if not token:
                return

    async def place_details(self, place_id: str) -> dict[str, Any]:
        """Fetch the contact fields of one place."""
        response = await self._run(
            lambda: self._client.place(place_id, fields=DETAIL_FIELDS)
        )
        return response.get("result", {}) or {}
