"""Services for the Itinerary domain - Business logic layer."""

import logging
from datetime import date

from tripweaver.domains.itinerary.schemas import (
    DailyPlan,
    ParsedReply,
    PlaceHints,
    PlaceLookupResponse,
)
from tripweaver.domains.itinerary.services.enrichment import EnrichmentOrchestrator
from tripweaver.domains.itinerary.services.extractor import (
    extract,
    extract_trip_title,
    summarize_reply,
)
from tripweaver.domains.itinerary.services.normalizer import normalize
from tripweaver.domains.itinerary.services.photo_resolver import PhotoResolver
from tripweaver.domains.itinerary.services.place_resolver import (
    PlaceResolver,
    clean_title,
)

logger = logging.getLogger(__name__)


class ItineraryService:
    """Service for Itinerary business logic.

    Ties the pipeline together: assistant reply in, renderable itinerary out,
    enrichment running in the background against the current itinerary.
    """

    def __init__(
        self,
        place_resolver: PlaceResolver | None = None,
        photo_resolver: PhotoResolver | None = None,
        orchestrator: EnrichmentOrchestrator | None = None,
    ) -> None:
        """Initialize service with its resolvers.

        Args:
            place_resolver: Geocoder waterfall
            photo_resolver: Photo waterfall with its cache
            orchestrator: Background enrichment, built from the resolvers
                when omitted
        """
        self.place_resolver = place_resolver or PlaceResolver()
        self.photo_resolver = photo_resolver or PhotoResolver()
        self.orchestrator = orchestrator or EnrichmentOrchestrator(
            place_resolver=self.place_resolver,
            photo_resolver=self.photo_resolver,
        )

    @property
    def plans(self) -> list[DailyPlan] | None:
        """Current itinerary, None until a reply carried one."""
        return self.orchestrator.plans or None

    # ==================== Reply Processing ====================

    def process_reply(self, raw_text: str, today: date | None = None) -> ParsedReply:
        """
        Split an assistant reply into prose and itinerary.

        Args:
            raw_text: Complete assistant reply
            today: Anchor for synthesized dates

        Returns:
            ParsedReply whose ``plans`` is None when the reply holds no itinerary
        """
        summary = summarize_reply(raw_text)
        raw_days = extract(raw_text)
        plans = normalize(raw_days, today=today) if raw_days is not None else None
        return ParsedReply(
            summary=summary,
            trip_title=extract_trip_title(summary),
            plans=plans,
        )

    async def apply_reply(self, raw_text: str, today: date | None = None) -> ParsedReply:
        """
        Process a reply and, when it carries an itinerary, make it current.

        The previous itinerary is replaced wholesale and its pending
        enrichment cancelled. A reply without an itinerary changes nothing.
        """
        parsed = self.process_reply(raw_text, today=today)
        if parsed.plans is None:
            logger.debug("Reply has no itinerary; keeping current state")
            return parsed

        self.orchestrator.enrich(parsed.plans)
        return parsed

    # ==================== Place Lookup ====================

    async def lookup_place(
        self, query: str, hints: PlaceHints | None = None
    ) -> PlaceLookupResponse:
        """
        Resolve a free-text place and its photo.

        Provider failures degrade to a placeholder photo with no place data.
        """
        cleaned = clean_title(query) or query.strip()
        place = await self.place_resolver.resolve_place(cleaned, hints)
        photo = await self.photo_resolver.resolve_photo(
            cleaned, resolved_place=place, hints=hints
        )

        response = PlaceLookupResponse(
            query=query,
            photo_url=photo.url,
            thumb_url=photo.thumb,
            photo_source=photo.source,
            photo_attribution=photo.attribution,
        )
        if place is not None:
            response.place_id = place.place_id
            response.name = place.name
            response.lat = place.lat
            response.lng = place.lng
            response.description = place.description
            response.rating = place.rating
            response.reviews = place.reviews
            response.booking_url = place.booking_url
        return response
