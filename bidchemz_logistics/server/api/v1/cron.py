"""
Scheduler hook for the background jobs.

An external scheduler calls this endpoint every few minutes with
``Authorization: Bearer <CRON_SECRET>``.
"""

from __future__ import annotations

import hmac
from typing import Any, Dict, Optional

from fastapi import APIRouter, Header, HTTPException, status

from bidchemz_logistics.core.database import async_session_maker
from bidchemz_logistics.core.logging_config import get_logger
from bidchemz_logistics.server.core.config import settings
from bidchemz_logistics.services.background_jobs import run_all_jobs
from bidchemz_logistics.services.security import extract_bearer_token

logger = get_logger(__name__)

router = APIRouter(tags=["cron"])


@router.post(
    "/background-jobs",
    summary="Run Background Jobs",
    description="Expire quotes, warn about closing bidding windows, send low-balance alerts and retry failed webhooks.",
    response_description="Per-job outcome; one failing job does not stop the others.",
    responses={401: {"description": "Missing or wrong cron secret"}},
)
async def run_background_jobs(authorization: Optional[str] = Header(default=None)) -> Dict[str, Any]:
    token = extract_bearer_token(authorization)
    if token is None or not hmac.compare_digest(token, settings.cron_secret):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")

    report = await run_all_jobs(async_session_maker)
    failed = [job["name"] for job in report["jobs"] if job["status"] == "rejected"]
    if failed:
        logger.warning(f"Background jobs failed: {', '.join(failed)}")
    return {"success": True, **report}
