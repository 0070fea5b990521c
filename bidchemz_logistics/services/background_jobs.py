"""
Periodic maintenance jobs.

An external scheduler calls ``POST /api/v1/cron/background-jobs`` which runs
every job once. Each job gets its own session and commits on its own, so one
failing job never rolls back the work of the others.
"""

from __future__ import annotations

import time
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from bidchemz_logistics.core.database.base import utc_isoformat, utc_now
from bidchemz_logistics.core.database.repositories.wallets import LeadWalletRepository
from bidchemz_logistics.core.logging_config import get_logger
from bidchemz_logistics.core.monitoring import log_background_job

from . import quote_timer, webhooks
from .wallet import check_low_balance

logger = get_logger(__name__)

Job = Callable[[AsyncSession], Awaitable[Any]]


async def expire_quotes(session: AsyncSession) -> int:
    return await quote_timer.check_expired_quotes(session)


async def send_quote_expiry_warnings(session: AsyncSession) -> int:
    return await quote_timer.send_expiry_warnings(session)


async def check_low_balance_alerts(session: AsyncSession) -> int:
    """Alert every partner whose wallet sits at or under its threshold."""
    wallets = await LeadWalletRepository(session).list_alerting()
    alerted = 0
    for wallet in wallets:
        if await check_low_balance(session, wallet):
            alerted += 1
    logger.info(f"Checked {len(wallets)} wallets for low balance alerts")
    return alerted


async def retry_failed_webhooks(session: AsyncSession) -> int:
    return await webhooks.retry_failed_webhooks(session)


JOBS: List[Tuple[str, Job]] = [
    ("expire_quotes", expire_quotes),
    ("send_quote_expiry_warnings", send_quote_expiry_warnings),
    ("check_low_balance_alerts", check_low_balance_alerts),
    ("retry_failed_webhooks", retry_failed_webhooks),
]


async def run_all_jobs(
    session_maker: async_sessionmaker[AsyncSession],
    jobs: Optional[List[Tuple[str, Job]]] = None,
) -> Dict[str, Any]:
    """Run each job once and report which ones fulfilled or were rejected."""
    report: List[Dict[str, Any]] = []
    for name, job in jobs or JOBS:
        started = time.perf_counter()
        async with session_maker() as session:
            try:
                result = await job(session)
                await session.commit()
                entry = {"name": name, "status": "fulfilled", "result": result}
            except Exception as e:
                await session.rollback()
                logger.error(f"Background job {name} failed: {e}", exc_info=True)
                entry = {"name": name, "status": "rejected", "error": str(e)}
        log_background_job(name, entry["status"], (time.perf_counter() - started) * 1000)
        report.append(entry)
    return {"timestamp": utc_isoformat(utc_now()), "jobs": report}
