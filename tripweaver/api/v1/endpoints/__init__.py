"""API v1 endpoints."""

from tripweaver.api.v1.endpoints import health, itinerary, places

__all__ = ["health", "itinerary", "places"]
