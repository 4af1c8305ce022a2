"""Clients for the external services the pipeline stages call."""

from .google_places import GooglePlacesClient, PlaceResult
from .openai_sites import AiSiteGenerator
from .sendgrid import SendGridClient, SendResult
from .web_fetch import WebsiteFetcher

__all__ = [
    "AiSiteGenerator",
    "GooglePlacesClient",
    "PlaceResult",
    "SendGridClient",
    "SendResult",
    "WebsiteFetcher",
]
