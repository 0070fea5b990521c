"""
Freight request lifecycle.

Creating a quote stores it, tells the external marketplace about it, notifies
every matching partner and, when at least one partner matched, opens the
bidding window.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Any, Dict, List, Tuple

from sqlalchemy import delete, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from bidchemz_logistics.core.database.base import as_utc, utc_now
from bidchemz_logistics.core.database.entities.documents import Document
from bidchemz_logistics.core.database.entities.offers import Offer
from bidchemz_logistics.core.database.entities.quotes import Quote
from bidchemz_logistics.core.database.entities.shipments import Shipment
from bidchemz_logistics.core.database.repositories.quotes import QuoteRepository
from bidchemz_logistics.core.errors import NotFoundError, ValidationFailedError
from bidchemz_logistics.core.logging_config import get_logger
from bidchemz_logistics.core.models.domain.enums import QuoteStatus, WebhookEvent
from bidchemz_logistics.core.monitoring import log_quote_event
from bidchemz_logistics.server.core.config import settings

from .audit import record_audit
from .matching import MatchedPartner, find_matching_partners, notify_matched_partners
from .quote_timer import start_quote_timer
from .security import generate_quote_number
from .webhooks import send_webhook

logger = get_logger(__name__)

ACCEPTING_OFFERS = (QuoteStatus.SUBMITTED, QuoteStatus.MATCHING, QuoteStatus.OFFERS_AVAILABLE)


def is_accepting_offers(quote: Quote) -> bool:
    """True while partners may still bid on ``quote``."""
    if quote.status not in ACCEPTING_OFFERS:
        return False
    return quote.expires_at is None or as_utc(quote.expires_at) > utc_now()


async def _unique_quote_number(repo: QuoteRepository) -> str:
    number = generate_quote_number()
    while await repo.quote_number_exists(number):
        number = generate_quote_number()
    return number


async def create_quote(
    session: AsyncSession, trader_id: str, data: Dict[str, Any]
) -> Tuple[Quote, List[MatchedPartner]]:
    """Store a new freight request and run partner matching for it.

    Args:
        session: Database session; the caller commits.
        trader_id: Owner of the request.
        data: Cargo, route and handling fields of the request.

    Returns:
        The stored quote and the partners it was offered to.
    """
    if data.get("is_hazardous") and not data.get("hazard_class"):
        raise ValidationFailedError("Hazard class is required for hazardous cargo")

    repo = QuoteRepository(session)
    now = utc_now()
    quote = Quote(
        **data,
        quote_number=await _unique_quote_number(repo),
        trader_id=trader_id,
        status=QuoteStatus.SUBMITTED,
        expires_at=now + timedelta(hours=settings.quote_timing.expiry_hours),
        submitted_at=now,
    )
    quote = await repo.create(quote)

    await record_audit(
        session,
        action="CREATE",
        entity="QUOTE",
        entity_id=quote.id,
        user_id=trader_id,
        quote_id=quote.id,
        changes={"quote_number": quote.quote_number},
    )
    await send_webhook(
        session,
        WebhookEvent.QUOTE_REQUESTED,
        {
            "quote_id": quote.id,
            "quote_number": quote.quote_number,
            "trader_id": trader_id,
            "cargo_name": quote.cargo_name,
            "pickup_city": quote.pickup_city,
            "delivery_city": quote.delivery_city,
        },
    )

    partners = await find_matching_partners(session, quote.id)
    if partners:
        await notify_matched_partners(session, quote, partners)
        quote = await start_quote_timer(session, quote.id)

    log_quote_event(quote.id, "created", matched_partners=len(partners))
    logger.info(f"Quote {quote.quote_number} created by {trader_id}, {len(partners)} partners matched")
    return quote, partners


async def delete_quote(session: AsyncSession, quote_id: str, user_id: str) -> List[str]:
    """Remove a quote with its offers, shipments and documents.

    Returns the encrypted blob paths of the removed documents for the caller to
    shred after commit.
    """
    quote = await QuoteRepository(session).get_by_id(quote_id)
    if quote is None:
        raise NotFoundError("Quote")

    shipment_ids = list((await session.execute(select(Shipment.id).where(Shipment.quote_id == quote_id))).scalars())
    stmt = select(Document).where(Document.quote_id == quote_id)
    if shipment_ids:
        stmt = select(Document).where(or_(Document.quote_id == quote_id, Document.shipment_id.in_(shipment_ids)))
    blob_paths = []
    for document in (await session.execute(stmt)).scalars().all():
        blob_paths.append(document.storage_path)
        await session.delete(document)

    await session.execute(delete(Shipment).where(Shipment.quote_id == quote_id))
    await session.execute(delete(Offer).where(Offer.quote_id == quote_id))
    quote_number = quote.quote_number
    await session.delete(quote)
    await session.flush()

    await record_audit(
        session,
        action="DELETE",
        entity="QUOTE",
        entity_id=quote_id,
        user_id=user_id,
        changes={"quote_number": quote_number},
    )
    logger.info(f"Quote {quote_number} deleted by {user_id}")
    return blob_paths
