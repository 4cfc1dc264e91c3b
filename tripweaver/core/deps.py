"""FastAPI dependencies.

This module provides injectable dependencies for:
- The process-wide ItineraryService (shared caches and provider health)
"""

from typing import Annotated

from fastapi import Depends

from tripweaver.domains.itinerary.services import ItineraryService

_itinerary_service: ItineraryService | None = None


def set_itinerary_service(service: ItineraryService | None) -> None:
    """Install the service built at startup (or reset it with None)."""
    global _itinerary_service
    _itinerary_service = service


def get_itinerary_service() -> ItineraryService:
    """Dependency for getting the shared ItineraryService."""
    global _itinerary_service
    if _itinerary_service is None:
        _itinerary_service = ItineraryService()
    return _itinerary_service


ItineraryServiceDep = Annotated[ItineraryService, Depends(get_itinerary_service)]
