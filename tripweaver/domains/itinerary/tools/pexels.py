"""Pexels search client - second stock photo tier."""

import logging

from tripweaver.core.config import settings
from tripweaver.domains.itinerary.models import PhotoSource
from tripweaver.domains.itinerary.schemas import PhotoResult
from tripweaver.domains.itinerary.tools.base import BaseAsyncAPIClient

logger = logging.getLogger(__name__)


class PexelsClient(BaseAsyncAPIClient):
    """Async client for the Pexels photo search API."""

    tool_name = "pexels"

    def __init__(self, api_key: str | None = None, **kwargs):
        self.api_key = api_key or settings.PEXELS_API_KEY
        super().__init__("https://api.pexels.com/v1", **kwargs)

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def _get_headers(self) -> dict[str, str]:
        return {"Authorization": self.api_key}

    async def search_photo(self, term: str) -> PhotoResult | None:
        """Return the top landscape photo for a search term."""
        response = await self.get(
            "/search",
            params={"query": term, "per_page": 1, "orientation": "landscape"},
        )
        photos = response.get("photos") or []
        if not photos:
            return None

        photo = photos[0]
        src = photo.get("src") or {}
        if not src.get("large"):
            return None
        photographer = photo.get("photographer")
        return PhotoResult(
            url=src["large"],
            thumb=src.get("medium") or src["large"],
            source=PhotoSource.PEXELS,
            attribution=f"Photo by {photographer} on Pexels" if photographer else None,
            attribution_url=photo.get("url"),
        )


async def pexels_photo(term: str) -> PhotoResult | None:
    """Stock tier backed by Pexels."""
    client = PexelsClient()
    if not client.is_configured:
        logger.debug("Pexels API key not configured, skipping")
        return None
    async with client:
        return await client.search_photo(term)
