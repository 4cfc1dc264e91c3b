"""API v1 main router - aggregates all domain routers."""

from fastapi import APIRouter

from tripweaver.api.v1.endpoints import health, itinerary, places

api_router = APIRouter()

# Include health check endpoint
api_router.include_router(
    health.router,
    tags=["Health"],
)

# Include itinerary endpoints
api_router.include_router(
    itinerary.router,
    prefix="/itinerary",
    tags=["Itinerary"],
)

# Include place lookup endpoints
api_router.include_router(
    places.router,
    prefix="/places",
    tags=["Places"],
)
