"""Merkel Vision — FastAPI application factory."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from merkel_vision.config import settings
from merkel_vision.infrastructure.api.dependencies import AppContainer
from merkel_vision.infrastructure.api.errors import register_error_handlers
from merkel_vision.infrastructure.api.routes_auth import router as auth_router
from merkel_vision.infrastructure.api.routes_dashboard import router as dashboard_router
from merkel_vision.infrastructure.api.routes_geocoding import router as geocoding_router
from merkel_vision.infrastructure.api.routes_health import router as health_router
from merkel_vision.infrastructure.api.routes_locations import router as locations_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    container: AppContainer = app.state.container
    if not await container.map_provider.load():
        logger.warning("Map provider not available on startup; map area will be degraded")
    yield
    container.close()


def create_app(container: AppContainer | None = None) -> FastAPI:
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(
        title="Merkel Vision",
        description="Save, search and map your places",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.container = container or AppContainer(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)

    # Register routers
    app.include_router(health_router, prefix="/api")
    app.include_router(auth_router, prefix="/api")
    app.include_router(locations_router, prefix="/api")
    app.include_router(geocoding_router, prefix="/api")
    app.include_router(dashboard_router, prefix="/api")

    return app


app = create_app()
