"""
Offer submission and selection.

Submitting an offer charges the partner's lead fee in the same unit of work
that stores the offer. Selecting an offer books the shipment; the lead fee is
charged there only when no debit exists yet for that offer.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Dict

from sqlalchemy.ext.asyncio import AsyncSession

from bidchemz_logistics.core.database.base import utc_now
from bidchemz_logistics.core.database.entities.offers import Offer
from bidchemz_logistics.core.database.entities.quotes import Quote
from bidchemz_logistics.core.database.entities.shipments import Shipment
from bidchemz_logistics.core.database.entities.users import User
from bidchemz_logistics.core.database.repositories.offers import OfferRepository
from bidchemz_logistics.core.database.repositories.quotes import QuoteRepository
from bidchemz_logistics.core.database.repositories.shipments import ShipmentRepository
from bidchemz_logistics.core.database.repositories.users import UserRepository
from bidchemz_logistics.core.database.repositories.wallets import LeadWalletRepository
from bidchemz_logistics.core.errors import (
    ConflictError,
    InsufficientBalanceError,
    NotFoundError,
    PermissionDeniedError,
    ValidationFailedError,
)
from bidchemz_logistics.core.logging_config import get_logger
from bidchemz_logistics.core.models.domain.enums import (
    OfferStatus,
    QuoteStatus,
    ShipmentStatus,
    SubscriptionTier,
    TransactionType,
    WebhookEvent,
)
from bidchemz_logistics.core.monitoring import log_lead_charged, log_quote_event

from .audit import record_audit
from .pricing import PricingBreakdown, lead_cost_for_quote, lead_type_for_tier
from .quotes import is_accepting_offers
from .security import generate_shipment_number
from .wallet import charge_lead_fee, check_low_balance
from .webhooks import send_webhook

logger = get_logger(__name__)


@dataclass
class SubmittedOffer:
    offer: Offer
    lead_cost: float
    new_balance: float


@dataclass
class SelectedOffer:
    offer: Offer
    shipment: Shipment
    lead_cost: float
    charged: bool


async def partner_tier(session: AsyncSession, partner_id: str) -> SubscriptionTier:
    capability = await UserRepository(session).get_capability(partner_id)
    return capability.subscription_tier if capability else SubscriptionTier.FREE


async def quote_lead_cost(session: AsyncSession, quote: Quote, partner_id: str) -> PricingBreakdown:
    """The lead fee ``partner_id`` pays for ``quote`` under the active pricing."""
    return await lead_cost_for_quote(session, quote, await partner_tier(session, partner_id))


async def submit_offer(session: AsyncSession, partner: User, quote_id: str, data: Dict[str, Any]) -> SubmittedOffer:
    """Store a partner's bid and charge the lead fee.

    On insufficient balance the unit of work is rolled back, a
    ``LEAD_PAYMENT_FAILED`` webhook is sent and committed on its own, and the
    error is re-raised.

    Raises:
        NotFoundError: unknown quote.
        ConflictError: the partner already has a live offer on the quote.
        ValidationFailedError: the quote is closed or the partner has no wallet.
        InsufficientBalanceError: the wallet cannot cover the lead fee.
    """
    quote = await QuoteRepository(session).get_by_id(quote_id)
    if quote is None:
        raise NotFoundError("Quote")

    offers = OfferRepository(session)
    if await offers.find_active_for_partner(quote_id, partner.id) is not None:
        raise ConflictError("You have already submitted an offer for this quote")
    if not is_accepting_offers(quote):
        raise ValidationFailedError("Quote is no longer accepting offers")

    wallet = await LeadWalletRepository(session).get_by_user(partner.id)
    if wallet is None:
        raise ValidationFailedError("Lead wallet not found. Please contact support.")

    tier = await partner_tier(session, partner.id)
    pricing = await lead_cost_for_quote(session, quote, tier)
    lead_cost = pricing.final_cost
    lead_type = lead_type_for_tier(tier)
    balance_before = wallet.balance
    partner_id = partner.id

    offer = await offers.create(
        Offer(**data, quote_id=quote.id, partner_id=partner_id, expires_at=data.get("offer_valid_until"))
    )
    try:
        await charge_lead_fee(session, wallet, amount=lead_cost, quote=quote, offer_id=offer.id, lead_type=lead_type)
    except InsufficientBalanceError as e:
        await session.rollback()
        await send_webhook(
            session,
            WebhookEvent.LEAD_PAYMENT_FAILED,
            {
                "partner_id": partner_id,
                "quote_id": quote_id,
                "required_amount": e.required,
                "available_balance": e.available,
                "reason": "Insufficient wallet balance",
            },
        )
        # the failure webhook log must outlive the rolled back offer
        await session.commit()
        raise

    await record_audit(
        session,
        action="SUBMIT_OFFER",
        entity="OFFER",
        entity_id=offer.id,
        user_id=partner_id,
        quote_id=quote.id,
        changes={
            "price": offer.price,
            "lead_cost": lead_cost,
            "wallet_balance_before": balance_before,
            "wallet_balance_after": wallet.balance,
        },
    )

    if quote.status in (QuoteStatus.SUBMITTED, QuoteStatus.MATCHING):
        quote.status = QuoteStatus.OFFERS_AVAILABLE
        quote = await QuoteRepository(session).update(quote)

    await send_webhook(
        session,
        WebhookEvent.QUOTE_OFFERS_AVAILABLE,
        {
            "quote_id": quote.id,
            "quote_number": quote.quote_number,
            "offers_count": await offers.count_pending_for_quote(quote.id),
            "latest_offer_id": offer.id,
            "latest_offer_price": offer.price,
        },
    )
    await check_low_balance(session, wallet)
    log_lead_charged(partner_id, quote.id, lead_cost, lead_type.value)
    logger.info(f"Offer {offer.id} submitted on {quote.quote_number}, lead fee ₹{lead_cost:.2f}")
    return SubmittedOffer(offer=offer, lead_cost=lead_cost, new_balance=wallet.balance)


async def select_offer(session: AsyncSession, trader: User, offer_id: str) -> SelectedOffer:
    """Accept an offer on the trader's quote and book the shipment.

    Raises:
        NotFoundError: unknown offer.
        PermissionDeniedError: the quote belongs to another trader.
        ValidationFailedError: the offer is no longer pending, or the partner has no wallet.
        InsufficientBalanceError: the lead fee is still owed and the wallet cannot cover it.
    """
    offers = OfferRepository(session)
    offer = await offers.get_by_id(offer_id)
    if offer is None:
        raise NotFoundError("Offer")
    quote = await QuoteRepository(session).get_by_id(offer.quote_id)
    if quote is None:
        raise NotFoundError("Quote")
    if quote.trader_id != trader.id:
        raise PermissionDeniedError("Access denied")
    if offer.status != OfferStatus.PENDING:
        raise ValidationFailedError("Offer already processed")

    wallets = LeadWalletRepository(session)
    wallet = await wallets.get_by_user(offer.partner_id)
    if wallet is None:
        raise ValidationFailedError("Partner does not have a lead wallet")

    tier = await partner_tier(session, offer.partner_id)
    lead_cost = (await lead_cost_for_quote(session, quote, tier)).final_cost
    charged = False
    if not await wallets.has_transaction_for_offer(offer.id, TransactionType.DEBIT):
        await charge_lead_fee(
            session, wallet, amount=lead_cost, quote=quote, offer_id=offer.id, lead_type=lead_type_for_tier(tier)
        )
        charged = True

    now = utc_now()
    offer.status = OfferStatus.ACCEPTED
    offer.is_selected = True
    offer.selected_at = now
    offer = await offers.update(offer)
    rejected = await offers.set_status_for_pending(quote.id, OfferStatus.REJECTED, exclude_offer_id=offer.id)

    quote.status = QuoteStatus.SELECTED
    quote = await QuoteRepository(session).update(quote)

    shipments = ShipmentRepository(session)
    shipment_number = generate_shipment_number()
    while await shipments.count({"shipment_number": shipment_number}):
        shipment_number = generate_shipment_number()
    shipment = await shipments.create(
        Shipment(
            shipment_number=shipment_number,
            quote_id=quote.id,
            offer_id=offer.id,
            trader_id=quote.trader_id,
            partner_id=offer.partner_id,
            status=ShipmentStatus.BOOKED,
            current_location=quote.pickup_city,
            estimated_delivery=now + timedelta(days=offer.transit_days),
            tracking_events=[
                {
                    "status": ShipmentStatus.BOOKED.value,
                    "location": quote.pickup_city,
                    "timestamp": now.isoformat(),
                    "description": "Shipment booked via BidChemz Logistics",
                }
            ],
        )
    )

    await record_audit(
        session,
        action="SELECT_OFFER",
        entity="OFFER",
        entity_id=offer.id,
        user_id=trader.id,
        quote_id=quote.id,
        shipment_id=shipment.id,
        changes={
            "partner_id": offer.partner_id,
            "lead_cost": lead_cost,
            "lead_fee_charged": charged,
            "rejected_offers": rejected,
        },
    )
    await send_webhook(
        session,
        WebhookEvent.OFFER_SELECTED,
        {
            "quote_id": quote.id,
            "quote_number": quote.quote_number,
            "offer_id": offer.id,
            "partner_id": offer.partner_id,
            "price": offer.price,
            "shipment_id": shipment.id,
            "shipment_number": shipment.shipment_number,
        },
    )
    log_quote_event(quote.id, "selected", offer_id=offer.id, shipment_id=shipment.id)
    logger.info(f"Offer {offer.id} selected on {quote.quote_number}, shipment {shipment.shipment_number} booked")
    return SelectedOffer(offer=offer, shipment=shipment, lead_cost=lead_cost, charged=charged)


async def withdraw_offer(session: AsyncSession, partner: User, offer_id: str) -> Offer:
    """Mark the partner's own, unselected offer as WITHDRAWN."""
    offers = OfferRepository(session)
    offer = await offers.get_by_id(offer_id)
    if offer is None:
        raise NotFoundError("Offer")
    if offer.partner_id != partner.id:
        raise PermissionDeniedError("Cannot withdraw other partner offers")
    if offer.is_selected:
        raise ValidationFailedError("Cannot withdraw selected offers")
    offer.status = OfferStatus.WITHDRAWN
    offer = await offers.update(offer)
    await record_audit(
        session,
        action="WITHDRAW_OFFER",
        entity="OFFER",
        entity_id=offer.id,
        user_id=partner.id,
        quote_id=offer.quote_id,
    )
    return offer


async def delete_offer(session: AsyncSession, offer_id: str, user_id: str) -> None:
    """Hard-delete an offer that never turned into a shipment."""
    offers = OfferRepository(session)
    offer = await offers.get_by_id(offer_id)
    if offer is None:
        raise NotFoundError("Offer")
    if await ShipmentRepository(session).get_by_offer(offer_id) is not None:
        raise ConflictError("Offer has a shipment and cannot be deleted")
    quote_id = offer.quote_id
    await offers.delete(offer_id)
    await record_audit(session, action="DELETE", entity="OFFER", entity_id=offer_id, user_id=user_id, quote_id=quote_id)
