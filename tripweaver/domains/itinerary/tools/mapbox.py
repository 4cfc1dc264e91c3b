"""Mapbox Geocoding client - the primary place geocoder."""

import logging
from urllib.parse import quote

from tripweaver.core.config import settings
from tripweaver.domains.itinerary.schemas import ResolvedPlace
from tripweaver.domains.itinerary.tools.base import BaseAsyncAPIClient

logger = logging.getLogger(__name__)

DEFAULT_TYPES = "poi,address,place"


def feature_country_code(feature: dict) -> str | None:
    """Country code of a Mapbox feature, from properties or its context chain."""
    code = (feature.get("properties") or {}).get("country_code")
    if not code:
        for ctx in feature.get("context") or []:
            if isinstance(ctx, dict) and str(ctx.get("id", "")).startswith("country"):
                code = ctx.get("short_code")
                break
    if not code and str(feature.get("id", "")).startswith("country"):
        code = (feature.get("properties") or {}).get("short_code")
    return code.lower() if isinstance(code, str) and code else None


def parse_feature(feature: dict) -> ResolvedPlace | None:
    """Convert a GeoJSON feature into a ResolvedPlace."""
    place_id = feature.get("id")
    if not place_id:
        return None

    center = feature.get("center") or []
    lng, lat = (center[0], center[1]) if len(center) == 2 else (None, None)
    place_types = feature.get("place_type") or []

    return ResolvedPlace(
        place_id=str(place_id),
        name=feature.get("text") or feature.get("place_name") or "",
        lat=lat,
        lng=lng,
        description=feature.get("place_name"),
        country_code=feature_country_code(feature),
        category=(feature.get("properties") or {}).get("category")
        or (place_types[0] if place_types else None),
        provider="mapbox",
    )


class MapboxGeocodingClient(BaseAsyncAPIClient):
    """Async client for the Mapbox forward geocoding API."""

    tool_name = "mapbox"

    def __init__(self, access_token: str | None = None, **kwargs):
        self.access_token = access_token or settings.MAPBOX_ACCESS_TOKEN
        super().__init__(settings.MAPBOX_BASE_URL, **kwargs)

    @property
    def is_configured(self) -> bool:
        return bool(self.access_token)

    async def _get_headers(self) -> dict[str, str]:
        """Get headers for API requests."""
        return {"Accept": "application/json"}

    async def search(
        self,
        query: str,
        country_code: str | None = None,
        limit: int = 5,
        language: str = "en",
    ) -> list[ResolvedPlace]:
        """Forward-geocode a free-text query, best candidates first."""
        params = {
            "access_token": self.access_token,
            "types": DEFAULT_TYPES,
            "limit": limit,
            "language": language,
        }
        if country_code:
            params["country"] = country_code.lower()

        response = await self.get(f"/{quote(query, safe='')}.json", params=params)

        places = []
        for feature in response.get("features") or []:
            place = parse_feature(feature)
            if place:
                places.append(place)

        logger.debug(f"Mapbox: '{query}' -> {len(places)} candidates")
        return places


async def mapbox_geocode(query: str, country_code: str | None = None) -> list[ResolvedPlace]:
    """Geocoder tier backed by Mapbox."""
    client = MapboxGeocodingClient()
    if not client.is_configured:
        logger.debug("Mapbox access token not configured, skipping")
        return []
    async with client:
        return await client.search(query, country_code=country_code)
