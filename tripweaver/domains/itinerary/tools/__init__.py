"""Provider clients for place enrichment.

This module provides async clients for external API integrations:
- MapboxGeocodingClient: Primary geocoder
- GooglePlacesClient: Secondary geocoder and venue photos
- UnsplashClient / PexelsClient: Stock photos
- Fallback: Error classification, provider health, placeholder photos
"""

from tripweaver.domains.itinerary.tools.base import (
    APIClientError,
    AuthenticationError,
    BaseAsyncAPIClient,
    ProviderTimeoutError,
    RateLimitError,
    ToolError,
)
from tripweaver.domains.itinerary.tools.fallback import (
    ToolErrorType,
    ToolHealthStatus,
    classify_error,
    placeholder_photo,
    tool_health,
)
from tripweaver.domains.itinerary.tools.google_places import (
    GooglePlacesClient,
    google_places_geocode,
    google_venue_photo,
)
from tripweaver.domains.itinerary.tools.mapbox import MapboxGeocodingClient, mapbox_geocode
from tripweaver.domains.itinerary.tools.pexels import PexelsClient, pexels_photo
from tripweaver.domains.itinerary.tools.unsplash import UnsplashClient, unsplash_photo

__all__ = [
    # Clients
    "BaseAsyncAPIClient",
    "GooglePlacesClient",
    "MapboxGeocodingClient",
    "PexelsClient",
    "UnsplashClient",
    # Provider functions
    "google_places_geocode",
    "google_venue_photo",
    "mapbox_geocode",
    "pexels_photo",
    "unsplash_photo",
    # Error Classes
    "ToolError",
    "APIClientError",
    "RateLimitError",
    "AuthenticationError",
    "ProviderTimeoutError",
    # Fallback System
    "ToolErrorType",
    "ToolHealthStatus",
    "classify_error",
    "placeholder_photo",
    "tool_health",
]
