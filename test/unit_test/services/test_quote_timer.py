"""Unit tests for the quote countdown timer."""

from datetime import timedelta

import pytest
from sqlmodel import select

from bidchemz_logistics.core.database import utc_now
from bidchemz_logistics.core.database.entities.audit_logs import AuditLog
from bidchemz_logistics.core.database.entities.notifications import Notification
from bidchemz_logistics.core.database.entities.offers import Offer
from bidchemz_logistics.core.errors import NotFoundError, ValidationFailedError
from bidchemz_logistics.core.models.domain.enums import OfferStatus, QuoteStatus
from bidchemz_logistics.services import quote_timer
from bidchemz_logistics.services.quote_timer import get_remaining_time


async def _offer(session, quote, partner, status=OfferStatus.PENDING) -> Offer:
    now = utc_now()
    offer = Offer(
        quote_id=quote.id,
        partner_id=partner.id,
        price=45000.0,
        transit_days=3,
        offer_valid_until=now + timedelta(days=2),
        pickup_available_from=now + timedelta(days=1),
        status=status,
    )
    session.add(offer)
    await session.commit()
    return offer


class TestRemainingTime:
    async def test_counts_down_in_whole_minutes(self, make_user, make_quote):
        now = utc_now()
        quote = await make_quote(await make_user(), expires_at=now + timedelta(minutes=10, seconds=30))

        remaining = get_remaining_time(quote, now)
        assert remaining.remaining_minutes == 10
        assert remaining.remaining_ms == 630_000
        assert remaining.has_expired is False

    async def test_clamps_at_zero_once_expired(self, make_user, make_quote):
        now = utc_now()
        quote = await make_quote(await make_user(), expires_at=now - timedelta(minutes=5))

        remaining = get_remaining_time(quote, now)
        assert remaining.remaining_minutes == 0
        assert remaining.remaining_ms < 0
        assert remaining.has_expired is True

    async def test_missing_expiry_counts_as_expired(self, make_user, make_quote):
        quote = await make_quote(await make_user(), expires_at=None)
        remaining = get_remaining_time(quote)
        assert remaining.has_expired is True
        assert remaining.expires_at is None


class TestStartAndExtend:
    async def test_start_opens_window_and_moves_to_matching(self, session, make_user, make_quote):
        quote = await make_quote(await make_user())
        before = utc_now()

        started = await quote_timer.start_quote_timer(session, quote.id, minutes=30)

        assert started.status == QuoteStatus.MATCHING
        assert timedelta(minutes=29) < started.expires_at - before <= timedelta(minutes=30, seconds=5)
        audit = (await session.execute(select(AuditLog).where(AuditLog.action == "QUOTE_TIMER_STARTED"))).scalar_one()
        assert audit.changes["duration_minutes"] == 30

    async def test_start_defaults_to_configured_minutes(self, session, make_user, make_quote):
        quote = await make_quote(await make_user())
        started = await quote_timer.start_quote_timer(session, quote.id)
        assert get_remaining_time(started).remaining_minutes in (59, 60)

    async def test_start_unknown_quote(self, session):
        with pytest.raises(NotFoundError):
            await quote_timer.start_quote_timer(session, "missing")

    async def test_extend_pushes_expiry(self, session, make_user, make_quote):
        quote = await make_quote(await make_user())
        previous = quote.expires_at

        extended = await quote_timer.extend_quote_timer(session, quote.id, 15, user_id="admin-1")

        assert extended.expires_at == previous + timedelta(minutes=15)

    @pytest.mark.parametrize("minutes", [0, -5])
    async def test_extend_rejects_non_positive_minutes(self, session, make_user, make_quote, minutes):
        quote = await make_quote(await make_user())
        with pytest.raises(ValidationFailedError):
            await quote_timer.extend_quote_timer(session, quote.id, minutes)

    async def test_extend_requires_a_started_timer(self, session, make_user, make_quote):
        quote = await make_quote(await make_user(), expires_at=None)
        with pytest.raises(ValidationFailedError, match="not been started"):
            await quote_timer.extend_quote_timer(session, quote.id, 10)


class TestExpiry:
    async def test_expire_quote_expires_pending_offers(self, session, make_user, make_partner, make_quote):
        quote = await make_quote(await make_user(), status=QuoteStatus.OFFERS_AVAILABLE)
        pending = await _offer(session, quote, await make_partner())
        withdrawn = await _offer(session, quote, await make_partner(), status=OfferStatus.WITHDRAWN)

        expired = await quote_timer.expire_quote(session, quote.id)

        assert expired.status == QuoteStatus.EXPIRED
        await session.refresh(pending)
        await session.refresh(withdrawn)
        assert pending.status == OfferStatus.EXPIRED
        assert withdrawn.status == OfferStatus.WITHDRAWN

    @pytest.mark.parametrize("status", [QuoteStatus.SELECTED, QuoteStatus.CANCELLED])
    async def test_closed_quotes_are_left_alone(self, session, make_user, make_quote, status):
        quote = await make_quote(await make_user(), status=status)
        assert await quote_timer.expire_quote(session, quote.id) is None
        assert quote.status == status

    async def test_unknown_quote_is_ignored(self, session):
        assert await quote_timer.expire_quote(session, "missing") is None

    async def test_check_expired_only_touches_open_overdue_quotes(self, session, make_user, make_quote):
        trader = await make_user()
        past = utc_now() - timedelta(minutes=1)
        overdue = await make_quote(trader, status=QuoteStatus.MATCHING, expires_at=past)
        with_offers = await make_quote(trader, status=QuoteStatus.OFFERS_AVAILABLE, expires_at=past)
        submitted = await make_quote(trader, status=QuoteStatus.SUBMITTED, expires_at=past)
        running = await make_quote(trader, status=QuoteStatus.MATCHING)

        assert await quote_timer.check_expired_quotes(session) == 2

        assert overdue.status == QuoteStatus.EXPIRED
        assert with_offers.status == QuoteStatus.EXPIRED
        assert submitted.status == QuoteStatus.SUBMITTED
        assert running.status == QuoteStatus.MATCHING


class TestExpiryWarnings:
    async def test_warns_partners_with_pending_offers(self, session, make_user, make_partner, make_quote):
        quote = await make_quote(
            await make_user(), status=QuoteStatus.OFFERS_AVAILABLE, expires_at=utc_now() + timedelta(minutes=5)
        )
        partner = await make_partner()
        await _offer(session, quote, partner)
        await _offer(session, quote, await make_partner(), status=OfferStatus.WITHDRAWN)

        assert await quote_timer.send_expiry_warnings(session) == 1

        notes = (await session.execute(select(Notification))).scalars().all()
        assert [n.user_id for n in notes] == [partner.id]
        assert notes[0].type == "OFFER_EXPIRING"

    async def test_quotes_outside_the_window_are_skipped(self, session, make_user, make_partner, make_quote):
        quote = await make_quote(
            await make_user(), status=QuoteStatus.OFFERS_AVAILABLE, expires_at=utc_now() + timedelta(minutes=30)
        )
        await _offer(session, quote, await make_partner())

        assert await quote_timer.send_expiry_warnings(session, warning_minutes=10) == 0

    async def test_repeated_runs_warn_once_per_window(self, session, make_user, make_partner, make_quote):
        quote = await make_quote(
            await make_user(), status=QuoteStatus.OFFERS_AVAILABLE, expires_at=utc_now() + timedelta(minutes=5)
        )
        await _offer(session, quote, await make_partner())

        sent = [await quote_timer.send_expiry_warnings(session) for _ in range(5)]

        assert sent == [1, 0, 0, 0, 0]
        notes = (await session.execute(select(Notification))).scalars().all()
        assert len(notes) == 1
        assert quote.expiry_warning_sent_at is not None

    async def test_extending_the_timer_rearms_the_warning(self, session, make_user, make_partner, make_quote):
        quote = await make_quote(
            await make_user(), status=QuoteStatus.OFFERS_AVAILABLE, expires_at=utc_now() + timedelta(minutes=5)
        )
        await _offer(session, quote, await make_partner())
        assert await quote_timer.send_expiry_warnings(session) == 1

        extended = await quote_timer.extend_quote_timer(session, quote.id, 3)

        assert extended.expiry_warning_sent_at is None
        assert await quote_timer.send_expiry_warnings(session) == 1
