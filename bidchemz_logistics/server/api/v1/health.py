"""
Health Check Endpoints.

This module provides basic system status endpoints (health, version)
used for monitoring and deployment verification.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, status
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from bidchemz_logistics.core.database import get_session
from bidchemz_logistics.core.database.base import utc_now
from bidchemz_logistics.core.logging_config import get_logger
from bidchemz_logistics.server.core import constant
from bidchemz_logistics.server.core.config import settings

logger = get_logger(__name__)

router = APIRouter()


@router.get(
    "/health",
    summary="Health Check",
    description="Check the operational status of the API server and its database connection.",
    response_description="Status object.",
    responses={
        200: {"description": "Server and database are reachable"},
        401: {"description": "Monitoring secret missing or wrong"},
        503: {"description": "Database is unreachable"},
    },
)
async def health_check(
    x_monitoring_secret: Optional[str] = Header(default=None),
    session: AsyncSession = Depends(get_session),
):
    """
    Health check endpoint.

    Runs a trivial query against the database. When ``MONITORING_SECRET`` is
    configured the caller must echo it in ``X-Monitoring-Secret``.
    """
    if settings.monitoring_secret and x_monitoring_secret != settings.monitoring_secret:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")

    timestamp = utc_now().isoformat()
    try:
        await session.execute(text("SELECT 1"))
    except Exception as e:
        logger.error(f"Health check database query failed: {e}")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "unhealthy", "database": "unreachable", "timestamp": timestamp},
        )
    return {"status": "ok", "database": "ok", "timestamp": timestamp}


@router.get(
    "/version",
    summary="Get Version",
    description="Retrieve version information for the API server.",
    response_description="Version object.",
)
async def version():
    """
    Get API version.

    Returns the current semantic version of the API and supported schema version.
    """
    return {"version": constant.VERSION, "schema_version": constant.SCHEMA_VERSION}
