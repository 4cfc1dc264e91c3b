"""FastAPI main application entry point."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from tripweaver.api.v1.router import api_router
from tripweaver.core.config import settings
from tripweaver.core.deps import set_itinerary_service
from tripweaver.core.logging import setup_logging
from tripweaver.domains.itinerary.services import ItineraryService, PhotoResolver
from tripweaver.infra.redis import PhotoCacheStore, close_redis, init_redis

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan manager for startup and shutdown events."""
    # Startup
    setup_logging()
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")
    logger.info(f"Environment: {settings.ENVIRONMENT}")

    store = None
    if settings.PHOTO_CACHE_REDIS_ENABLED:
        try:
            store = PhotoCacheStore(await init_redis())
            logger.info("Redis photo store connected")
        except Exception as e:
            logger.warning(f"Redis connection failed, using in-process cache only: {e}")

    service = ItineraryService(photo_resolver=PhotoResolver(store=store))
    set_itinerary_service(service)

    yield

    # Shutdown
    logger.info("Shutting down...")
    service.orchestrator.cancel()
    set_itinerary_service(None)
    if store is not None:
        await close_redis()


def create_application() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Itinerary normalization and place enrichment API",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Include API routers
    app.include_router(api_router, prefix="/api/v1")

    return app


# Create application instance
app = create_application()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "tripweaver.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )
