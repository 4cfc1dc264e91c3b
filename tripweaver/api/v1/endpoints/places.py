"""Place lookup endpoints."""

from fastapi import APIRouter, Query

from tripweaver.core.deps import ItineraryServiceDep
from tripweaver.core.exceptions import BadRequestError
from tripweaver.domains.itinerary.schemas import PlaceHints, PlaceLookupResponse

router = APIRouter()


@router.get(
    "",
    response_model=PlaceLookupResponse,
    response_model_by_alias=True,
    summary="Resolve a place and its photo",
)
async def lookup_place(
    service: ItineraryServiceDep,
    query: str = Query("", description="Free-text place, e.g. 'Visit Louvre'"),
    city: str | None = Query(None),
    country: str | None = Query(None),
    country_code: str | None = Query(None, alias="countryCode"),
) -> PlaceLookupResponse:
    """
    Resolve a free-text place to coordinates, details and a photo.

    Provider outages degrade to a placeholder photo, never to an error.
    """
    if not query.strip():
        raise BadRequestError("query is required")

    hints = PlaceHints(city=city, country=country, country_code=country_code)
    return await service.lookup_place(query, hints)
