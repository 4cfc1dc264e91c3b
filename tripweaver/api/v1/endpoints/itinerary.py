"""Itinerary API endpoints."""

from fastapi import APIRouter, status

from tripweaver.core.deps import ItineraryServiceDep
from tripweaver.domains.itinerary.schemas import ParseReplyRequest

router = APIRouter()


@router.post(
    "/parse",
    status_code=status.HTTP_200_OK,
    summary="Parse an assistant reply into an itinerary",
    description="""
    Split a raw assistant reply into its conversational summary and the
    normalized itinerary embedded in it.

    - `plans` is `null` when the reply carries no itinerary
    - items get stable ids, ISO start/end from `timeRange`, hotels first
    - enrichment is not run here; use `/places` per item
    """,
)
async def parse_reply(
    request: ParseReplyRequest,
    service: ItineraryServiceDep,
) -> dict:
    """Parse a reply without touching the service's current itinerary."""
    return service.process_reply(request.text).to_json()
