"""Health check endpoint."""

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from facility_router.adapters.persistence.database import get_session
from facility_router.infrastructure.api.dependencies import audit_dispatcher

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(session: AsyncSession = Depends(get_session)):
    """Check API, database connectivity and the audit worker."""
    try:
        result = await session.execute(text("SELECT 1"))
        result.scalar()
        db_status = "connected"
    except Exception as e:
        db_status = f"error: {e}"

    return {
        "status": "ok" if db_status == "connected" else "degraded",
        "database": db_status,
        "audit": {
            "running": audit_dispatcher.running,
            "delivered": audit_dispatcher.delivered,
            "dropped": audit_dispatcher.dropped,
            "failures": audit_dispatcher.failures,
        },
        "service": "Facility Router - ticket classification and assignment",
    }
