"""Facility Router — FastAPI application factory."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from facility_router.adapters.persistence.database import engine
from facility_router.config import settings
from facility_router.infrastructure.api.dependencies import audit_dispatcher
from facility_router.infrastructure.api.routes_assignment import router as assignment_router
from facility_router.infrastructure.api.routes_classification import (
    router as classification_router,
)
from facility_router.infrastructure.api.routes_health import router as health_router

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    try:
        async with engine.begin():
            pass  # Connection pool warmed up
        logger.info("Database connection established")
    except Exception as e:
        logger.warning("Database not available on startup: %s", e)
    audit_dispatcher.start()
    yield
    await audit_dispatcher.stop()
    await engine.dispose()


def create_app() -> FastAPI:
    app = FastAPI(
        title="Facility Router",
        description="Hybrid rule/LLM ticket classification and round-robin assignment",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.include_router(health_router, prefix="/api")
    app.include_router(classification_router, prefix="/api")
    app.include_router(assignment_router, prefix="/api")

    return app


app = create_app()
