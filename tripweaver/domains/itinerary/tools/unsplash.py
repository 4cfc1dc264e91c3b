"""Unsplash search client - first stock photo tier."""

import logging

from tripweaver.core.config import settings
from tripweaver.domains.itinerary.models import PhotoSource
from tripweaver.domains.itinerary.schemas import PhotoResult
from tripweaver.domains.itinerary.tools.base import BaseAsyncAPIClient

logger = logging.getLogger(__name__)


class UnsplashClient(BaseAsyncAPIClient):
    """Async client for the Unsplash photo search API."""

    tool_name = "unsplash"

    def __init__(self, access_key: str | None = None, **kwargs):
        self.access_key = access_key or settings.UNSPLASH_ACCESS_KEY
        super().__init__("https://api.unsplash.com", **kwargs)

    @property
    def is_configured(self) -> bool:
        return bool(self.access_key)

    async def _get_headers(self) -> dict[str, str]:
        return {
            "Accept-Version": "v1",
            "Authorization": f"Client-ID {self.access_key}",
        }

    async def search_photo(self, term: str) -> PhotoResult | None:
        """Return the top landscape photo for a search term."""
        response = await self.get(
            "/search/photos",
            params={"query": term, "per_page": 1, "orientation": "landscape"},
        )
        results = response.get("results") or []
        if not results:
            return None

        photo = results[0]
        urls = photo.get("urls") or {}
        if not urls.get("regular"):
            return None
        user = (photo.get("user") or {}).get("name")
        return PhotoResult(
            url=urls["regular"],
            thumb=urls.get("small") or urls["regular"],
            source=PhotoSource.UNSPLASH,
            attribution=f"Photo by {user} on Unsplash" if user else None,
            attribution_url=(photo.get("links") or {}).get("html"),
        )


async def unsplash_photo(term: str) -> PhotoResult | None:
    """Stock tier backed by Unsplash."""
    client = UnsplashClient()
    if not client.is_configured:
        logger.debug("Unsplash access key not configured, skipping")
        return None
    async with client:
        return await client.search_photo(term)
