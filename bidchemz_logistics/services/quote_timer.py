"""
Quote countdown timer.

A quote's bidding window is its ``expires_at`` column. Nothing is scheduled
in-process: the background jobs call ``check_expired_quotes`` and
``send_expiry_warnings`` periodically, so the timer survives restarts and
works across workers.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from bidchemz_logistics.core.database.base import as_utc, utc_now
from bidchemz_logistics.core.database.entities.quotes import Quote
from bidchemz_logistics.core.database.repositories.offers import OfferRepository
from bidchemz_logistics.core.database.repositories.quotes import QuoteRepository
from bidchemz_logistics.core.errors import NotFoundError, ValidationFailedError
from bidchemz_logistics.core.logging_config import get_logger
from bidchemz_logistics.core.models.domain.enums import OfferStatus, QuoteStatus
from bidchemz_logistics.server.core.config import settings

from .audit import record_audit
from .notifications import notify_offer_expiring

logger = get_logger(__name__)

CLOSED_STATUSES = (QuoteStatus.SELECTED, QuoteStatus.CANCELLED)


@dataclass
class RemainingTime:
    expires_at: Optional[datetime]
    remaining_ms: int
    remaining_minutes: int
    has_expired: bool


def get_remaining_time(quote: Quote, now: Optional[datetime] = None) -> RemainingTime:
    """Time left on a quote's bidding window.

    A quote without ``expires_at`` reports zero remaining and counts as expired.
    """
    if quote.expires_at is None:
        return RemainingTime(expires_at=None, remaining_ms=0, remaining_minutes=0, has_expired=True)
    expires_at = as_utc(quote.expires_at)
    now = as_utc(now) if now else utc_now()
    remaining_ms = int((expires_at - now).total_seconds() * 1000)
    return RemainingTime(
        expires_at=expires_at,
        remaining_ms=remaining_ms,
        remaining_minutes=max(0, math.floor(remaining_ms / 60000)),
        has_expired=remaining_ms <= 0,
    )


async def _get_quote(session: AsyncSession, quote_id: str) -> Quote:
    quote = await QuoteRepository(session).get_by_id(quote_id)
    if quote is None:
        raise NotFoundError("Quote", quote_id)
    return quote


async def start_quote_timer(session: AsyncSession, quote_id: str, minutes: Optional[int] = None) -> Quote:
    """Open the bidding window for ``minutes`` and move the quote to MATCHING."""
    minutes = minutes or settings.quote_timing.timer_minutes
    quote = await _get_quote(session, quote_id)
    quote.expires_at = utc_now() + timedelta(minutes=minutes)
    quote.expiry_warning_sent_at = None
    quote.status = QuoteStatus.MATCHING
    quote = await QuoteRepository(session).update(quote)

    await record_audit(
        session,
        action="QUOTE_TIMER_STARTED",
        entity="QUOTE",
        entity_id=quote.id,
        quote_id=quote.id,
        changes={"expires_at": quote.expires_at.isoformat(), "duration_minutes": minutes},
    )
    logger.info(f"Quote timer started for {quote.quote_number}: {minutes} minutes")
    return quote


async def extend_quote_timer(
    session: AsyncSession, quote_id: str, minutes: int, user_id: Optional[str] = None
) -> Quote:
    if minutes <= 0:
        raise ValidationFailedError("Extension must be a positive number of minutes")
    quote = await _get_quote(session, quote_id)
    if quote.expires_at is None:
        raise ValidationFailedError("Quote timer has not been started")

    previous = as_utc(quote.expires_at)
    quote.expires_at = previous + timedelta(minutes=minutes)
    quote.expiry_warning_sent_at = None
    quote = await QuoteRepository(session).update(quote)

    await record_audit(
        session,
        action="QUOTE_TIMER_EXTENDED",
        entity="QUOTE",
        entity_id=quote.id,
        user_id=user_id,
        quote_id=quote.id,
        changes={
            "old_expires_at": previous.isoformat(),
            "new_expires_at": quote.expires_at.isoformat(),
            "additional_minutes": minutes,
        },
    )
    logger.info(f"Quote timer extended for {quote.quote_number} by {minutes} minutes")
    return quote


async def expire_quote(session: AsyncSession, quote_id: str) -> Optional[Quote]:
    """Close a quote's bidding window and expire its pending offers.

    Unknown, selected and cancelled quotes are left alone and ``None`` is
    returned.
    """
    quote = await QuoteRepository(session).get_by_id(quote_id)
    if quote is None or quote.status in CLOSED_STATUSES:
        return None

    quote.status = QuoteStatus.EXPIRED
    quote = await QuoteRepository(session).update(quote)
    expired_offers = await OfferRepository(session).set_status_for_pending(quote.id, OfferStatus.EXPIRED)

    await record_audit(
        session,
        action="QUOTE_EXPIRED",
        entity="QUOTE",
        entity_id=quote.id,
        quote_id=quote.id,
        changes={"expired_at": utc_now().isoformat(), "expired_offers": expired_offers},
    )
    logger.info(f"Quote {quote.quote_number} expired ({expired_offers} pending offers expired)")
    return quote


async def check_expired_quotes(session: AsyncSession) -> int:
    """Expire every open quote whose window has passed; returns how many were expired."""
    quotes = await QuoteRepository(session).list_expired_open(utc_now())
    expired = 0
    for quote in quotes:
        if await expire_quote(session, quote.id) is not None:
            expired += 1
    if expired:
        logger.info(f"Expired {expired} quotes")
    return expired


async def send_expiry_warnings(session: AsyncSession, warning_minutes: Optional[int] = None) -> int:
    """Warn partners with pending offers on quotes closing within ``warning_minutes``.

    Each bidding window is warned about once: the quote is stamped with
    ``expiry_warning_sent_at`` and later runs skip it until the timer is
    started or extended again. Returns the number of partners warned.
    """
    warning_minutes = warning_minutes or settings.quote_timing.warning_minutes
    now = utc_now()
    repo = QuoteRepository(session)
    quotes: List[Quote] = await repo.list_expiring_between(now, now + timedelta(minutes=warning_minutes))
    offers = OfferRepository(session)
    warned = 0
    for quote in quotes:
        remaining = get_remaining_time(quote, now).remaining_minutes
        for offer in await offers.list_pending_for_quote(quote.id):
            try:
                await notify_offer_expiring(session, offer.partner_id, quote, remaining)
                warned += 1
            except NotFoundError:
                logger.warning(f"Partner {offer.partner_id} of offer {offer.id} no longer exists")
        quote.expiry_warning_sent_at = now
        await repo.update(quote)
    return warned
