"""Health check endpoint."""

from fastapi import APIRouter, Depends
from sqlalchemy import text

from merkel_vision.infrastructure.api.dependencies import AppContainer, get_container

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(container: AppContainer = Depends(get_container)):
    """Check API, database and map provider availability."""
    if container.session_factory is None:
        db_status = "not configured"
    else:
        try:
            async with container.session_factory() as session:
                result = await session.execute(text("SELECT 1"))
                result.scalar()
            db_status = "connected"
        except Exception as e:
            db_status = f"error: {e}"

    map_loaded = container.map_provider.is_loaded()

    return {
        "status": "ok" if db_status == "connected" and map_loaded else "degraded",
        "database": db_status,
        "map": "loaded" if map_loaded else "unavailable",
        "geocoder": "available" if container.geocoding.is_available else "unavailable",
        "service": "Merkel Vision",
    }
