"""Google Places client.

Serves two waterfall roles:
- secondary geocoder when Mapbox has no match;
- venue photo tier, searching around resolved coordinates.
"""

import logging

from pydantic import BaseModel

from tripweaver.core.config import settings
from tripweaver.domains.itinerary.models import PhotoSource
from tripweaver.domains.itinerary.schemas import PhotoResult, ResolvedPlace
from tripweaver.domains.itinerary.tools.base import APIClientError, BaseAsyncAPIClient

logger = logging.getLogger(__name__)

PHOTO_URL = "https://maps.googleapis.com/maps/api/place/photo"
VENUE_SEARCH_RADIUS_M = 2000


# ============ Output Schemas ============


class PlaceInfo(BaseModel):
    """Information about a place."""

    place_id: str
    name: str
    formatted_address: str | None = None
    location: dict[str, float]
    types: list[str] | None = None
    rating: float | None = None
    user_ratings_total: int | None = None
    photo_references: list[str] = []

    def to_resolved_place(self) -> ResolvedPlace:
        return ResolvedPlace(
            place_id=self.place_id,
            name=self.name,
            lat=self.location.get("lat"),
            lng=self.location.get("lng"),
            description=self.formatted_address,
            category=self.types[0] if self.types else None,
            rating=self.rating,
            provider="google_places",
        )


# ============ Google Places API Client ============


class GooglePlacesClient(BaseAsyncAPIClient):
    """Async client for the Google Places web service."""

    tool_name = "google_places"

    def __init__(self, api_key: str | None = None, **kwargs):
        self.api_key = api_key or settings.GOOGLE_PLACES_API_KEY
        super().__init__("https://maps.googleapis.com/maps/api", **kwargs)

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def _get_headers(self) -> dict[str, str]:
        """Get headers for API requests."""
        return {"Accept": "application/json"}

    def photo_url(self, photo_reference: str, max_width: int = 800) -> str:
        """Build the media URL for a photo reference."""
        return (
            f"{PHOTO_URL}?maxwidth={max_width}"
            f"&photo_reference={photo_reference}&key={self.api_key}"
        )

    async def search_places(
        self,
        query: str,
        location: str | None = None,
        radius: int = 5000,
        region: str | None = None,
        language: str = "en",
    ) -> list[PlaceInfo]:
        """Search for places by text query."""
        params = {
            "query": query,
            "language": language,
            "key": self.api_key,
        }

        if location:
            params["location"] = location
            params["radius"] = radius
        if region:
            params["region"] = region

        response = await self.get("/place/textsearch/json", params=params)

        if response.get("status") not in ["OK", "ZERO_RESULTS"]:
            raise APIClientError(
                f"Places API error: {response.get('status')}",
                tool_name=self.tool_name,
                details={"error_message": response.get("error_message")},
            )

        places = []
        for result in response.get("results", []):
            places.append(
                PlaceInfo(
                    place_id=result.get("place_id", ""),
                    name=result.get("name", ""),
                    formatted_address=result.get("formatted_address"),
                    location=result.get("geometry", {}).get("location", {}),
                    types=result.get("types"),
                    rating=result.get("rating"),
                    user_ratings_total=result.get("user_ratings_total"),
                    photo_references=[
                        p["photo_reference"]
                        for p in result.get("photos") or []
                        if p.get("photo_reference")
                    ],
                )
            )

        return places


# ============ Waterfall Tiers ============


async def google_places_geocode(
    query: str, country_code: str | None = None
) -> list[ResolvedPlace]:
    """Secondary geocoder tier backed by Places text search."""
    client = GooglePlacesClient()
    if not client.is_configured:
        logger.debug("Google Places API key not configured, skipping")
        return []
    async with client:
        places = await client.search_places(query, region=country_code)
    return [p.to_resolved_place() for p in places if p.place_id]


async def google_venue_photo(query: str, lat: float, lng: float) -> PhotoResult | None:
    """Venue photo tier: first photo of a place matching the query near lat/lng."""
    client = GooglePlacesClient()
    if not client.is_configured:
        logger.debug("Google Places API key not configured, skipping venue photos")
        return None
    async with client:
        places = await client.search_places(
            query,
            location=f"{lat},{lng}",
            radius=VENUE_SEARCH_RADIUS_M,
        )
        for place in places:
            if place.photo_references:
                ref = place.photo_references[0]
                return PhotoResult(
                    url=client.photo_url(ref, 800),
                    thumb=client.photo_url(ref, 400),
                    source=PhotoSource.VENUE,
                    attribution=place.name,
                )
    return None
