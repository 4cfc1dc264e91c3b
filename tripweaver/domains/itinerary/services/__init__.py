"""
TripWeaver - Itinerary Services
Reply parsing, normalization and place enrichment
"""

from tripweaver.domains.itinerary.services.enrichment import EnrichmentOrchestrator
from tripweaver.domains.itinerary.services.extractor import (
    extract,
    extract_trip_title,
    summarize_reply,
)
from tripweaver.domains.itinerary.services.itinerary_service import ItineraryService
from tripweaver.domains.itinerary.services.normalizer import normalize
from tripweaver.domains.itinerary.services.photo_resolver import PhotoResolver
from tripweaver.domains.itinerary.services.place_resolver import PlaceResolver

__all__ = [
    "EnrichmentOrchestrator",
    "ItineraryService",
    "PhotoResolver",
    "PlaceResolver",
    "extract",
    "extract_trip_title",
    "normalize",
    "summarize_reply",
]
