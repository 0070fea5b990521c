"""Unit tests for the periodic maintenance jobs."""

from datetime import timedelta

import pytest
from sqlmodel import select

from bidchemz_logistics.core.database import create_sessionmaker, utc_now
from bidchemz_logistics.core.database.entities.notifications import Notification
from bidchemz_logistics.core.database.entities.quotes import Quote
from bidchemz_logistics.core.models.domain.enums import QuoteStatus
from bidchemz_logistics.services import background_jobs


@pytest.fixture
def session_maker(test_engine):
    return create_sessionmaker(test_engine)


async def test_runs_every_job_and_reports(session_maker):
    report = await background_jobs.run_all_jobs(session_maker)

    assert report["timestamp"].endswith("Z")
    assert [job["name"] for job in report["jobs"]] == [
        "expire_quotes",
        "send_quote_expiry_warnings",
        "check_low_balance_alerts",
        "retry_failed_webhooks",
    ]
    assert all(job["status"] == "fulfilled" for job in report["jobs"])
    assert all(job["result"] == 0 for job in report["jobs"])


async def test_failing_job_does_not_stop_the_others(session_maker):
    async def broken(session):
        raise RuntimeError("mailer unavailable")

    async def healthy(session):
        return "ok"

    report = await background_jobs.run_all_jobs(session_maker, jobs=[("broken", broken), ("healthy", healthy)])

    assert report["jobs"] == [
        {"name": "broken", "status": "rejected", "error": "mailer unavailable"},
        {"name": "healthy", "status": "fulfilled", "result": "ok"},
    ]


async def test_expire_quotes_commits(session, session_maker, make_user, make_quote):
    quote = await make_quote(
        await make_user(), status=QuoteStatus.MATCHING, expires_at=utc_now() - timedelta(minutes=1)
    )

    # release the shared connection before the jobs open their own sessions
    await session.commit()
    report = await background_jobs.run_all_jobs(session_maker, jobs=[("expire_quotes", background_jobs.expire_quotes)])

    assert report["jobs"][0]["result"] == 1
    async with session_maker() as fresh:
        stored = await fresh.get(Quote, quote.id)
        assert stored.status == QuoteStatus.EXPIRED


async def test_low_balance_alerts(session, session_maker, make_partner):
    low = await make_partner(balance=200.0)
    await make_partner(balance=5000.0)
    await session.commit()

    alerted = await background_jobs.run_all_jobs(
        session_maker, jobs=[("check_low_balance_alerts", background_jobs.check_low_balance_alerts)]
    )

    assert alerted["jobs"][0]["result"] == 1
    async with session_maker() as fresh:
        notes = (await fresh.execute(select(Notification))).scalars().all()
        assert [n.user_id for n in notes] == [low.id]
