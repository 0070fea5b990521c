"""
API endpoints for partner offers.

Submitting an offer charges the partner's lead fee; selecting one books the
shipment. Partners manage only their own offers, traders only see offers on
their own quotes.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from bidchemz_logistics.core.database import get_session
from bidchemz_logistics.core.database.entities.offers import Offer
from bidchemz_logistics.core.database.entities.quotes import Quote
from bidchemz_logistics.core.database.entities.users import User
from bidchemz_logistics.core.database.repositories.offers import OfferRepository
from bidchemz_logistics.core.database.repositories.quotes import QuoteRepository
from bidchemz_logistics.core.logging_config import get_logger
from bidchemz_logistics.core.models.domain.enums import OfferStatus, UserRole
from bidchemz_logistics.core.models.io.auth import MessageResponse
from bidchemz_logistics.core.models.io.offers import (
    LeadCostPreview,
    LeadCostRequest,
    OfferCreate,
    OfferListResponse,
    OfferRead,
    OfferSelectResponse,
    OfferSubmitResponse,
    OfferUpdate,
)
from bidchemz_logistics.core.models.io.shipments import ShipmentRead
from bidchemz_logistics.server.dependencies import get_current_user, require_partner, require_trader
from bidchemz_logistics.services import offers as offer_service
from bidchemz_logistics.services.audit import record_audit
from bidchemz_logistics.services.wallet import get_or_create_wallet

logger = get_logger(__name__)

router = APIRouter(tags=["offers"])


async def _get_offer(session: AsyncSession, offer_id: str) -> Offer:
    offer = await OfferRepository(session).get_by_id(offer_id)
    if offer is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Offer not found")
    return offer


async def _can_view(session: AsyncSession, user: User, offer: Offer) -> bool:
    role = UserRole(user.role)
    if role == UserRole.ADMIN:
        return True
    if role == UserRole.LOGISTICS_PARTNER:
        return offer.partner_id == user.id
    quote = await QuoteRepository(session).get_by_id(offer.quote_id)
    return quote is not None and quote.trader_id == user.id


@router.get(
    "",
    response_model=OfferListResponse,
    summary="List Offers",
    description="Partners see their own offers, traders the offers on their quotes, admins every offer.",
    response_description="Offers, newest first.",
)
async def list_offers(
    quote_id: Optional[str] = Query(default=None),
    status_filter: Optional[OfferStatus] = Query(default=None, alias="status"),
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> OfferListResponse:
    role = UserRole(user.role)
    if role == UserRole.TRADER:
        stmt = select(Offer).join(Quote, Quote.id == Offer.quote_id).where(Quote.trader_id == user.id)
        if quote_id:
            stmt = stmt.where(Offer.quote_id == quote_id)
        if status_filter:
            stmt = stmt.where(Offer.status == status_filter)
        result = await session.execute(stmt.order_by(Offer.created_at.desc()))
        offers = list(result.scalars().all())
    else:
        partner_id = user.id if role == UserRole.LOGISTICS_PARTNER else None
        offers = await OfferRepository(session).search(partner_id=partner_id, quote_id=quote_id, status=status_filter)
    return OfferListResponse(offers=[OfferRead.model_validate(o) for o in offers])


@router.post(
    "",
    response_model=OfferSubmitResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Submit Offer",
    description="Bid on an open quote. The lead fee is debited from the partner's wallet in the same transaction.",
    response_description="The stored offer, the fee charged and the remaining wallet balance.",
    responses={
        201: {"description": "Offer submitted and lead fee charged"},
        400: {"description": "Quote closed, wallet missing or insufficient balance"},
        403: {"description": "Only logistics partners can submit offers"},
        404: {"description": "Quote not found"},
        409: {"description": "Partner already has an offer on this quote"},
    },
)
async def submit_offer(
    data: OfferCreate,
    partner: User = Depends(require_partner),
    session: AsyncSession = Depends(get_session),
) -> OfferSubmitResponse:
    result = await offer_service.submit_offer(session, partner, data.quote_id, data.to_entity_fields())
    await session.commit()
    await session.refresh(result.offer)
    return OfferSubmitResponse(
        offer=OfferRead.model_validate(result.offer),
        lead_cost_deducted=result.lead_cost,
        new_wallet_balance=result.new_balance,
    )


@router.post(
    "/cost",
    response_model=LeadCostPreview,
    summary="Preview Lead Cost",
    description="What bidding on a quote would cost the calling partner, next to the current wallet balance.",
    responses={404: {"description": "Quote not found"}},
)
async def preview_lead_cost(
    data: LeadCostRequest,
    partner: User = Depends(require_partner),
    session: AsyncSession = Depends(get_session),
) -> LeadCostPreview:
    quote = await QuoteRepository(session).get_by_id(data.quote_id)
    if quote is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Quote not found")

    tier = await offer_service.partner_tier(session, partner.id)
    lead_cost = (await offer_service.quote_lead_cost(session, quote, partner.id)).final_cost
    wallet = await get_or_create_wallet(session, partner.id)
    balance = wallet.balance
    await session.commit()
    return LeadCostPreview(
        quote_id=quote.id,
        lead_cost=lead_cost,
        wallet_balance=balance,
        has_insufficient_balance=balance < lead_cost,
        subscription_tier=tier,
    )


@router.get(
    "/{offer_id}",
    response_model=OfferRead,
    summary="Get Offer",
    responses={
        403: {"description": "Not the offer's partner or the quote's trader"},
        404: {"description": "Offer not found"},
    },
)
async def get_offer(
    offer_id: str,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> OfferRead:
    offer = await _get_offer(session, offer_id)
    if not await _can_view(session, user, offer):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied")
    return OfferRead.model_validate(offer)


@router.patch(
    "/{offer_id}",
    response_model=OfferRead,
    summary="Update Offer",
    description=(
        "Partners edit price, transit days or remarks of their own unselected offers; "
        "admins may also set the status."
    ),
    responses={
        400: {"description": "Offer already selected"},
        403: {"description": "Not allowed to edit this offer"},
        404: {"description": "Offer not found"},
    },
)
async def update_offer(
    offer_id: str,
    data: OfferUpdate,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> OfferRead:
    offer = await _get_offer(session, offer_id)
    role = UserRole(user.role)
    if role == UserRole.LOGISTICS_PARTNER:
        if offer.partner_id != user.id:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Cannot edit other partner offers")
        if offer.is_selected:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Cannot edit selected offers")
        if data.status is not None:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only admins can change offer status")
    elif role != UserRole.ADMIN:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Unauthorized")

    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    for key, value in changes.items():
        setattr(offer, key, value)
    offer = await OfferRepository(session).update(offer)
    await record_audit(
        session,
        action="UPDATE_OFFER",
        entity="OFFER",
        entity_id=offer.id,
        user_id=user.id,
        quote_id=offer.quote_id,
        changes={key: str(value) for key, value in changes.items()},
    )
    await session.commit()
    await session.refresh(offer)
    return OfferRead.model_validate(offer)


@router.delete(
    "/{offer_id}",
    response_model=MessageResponse,
    summary="Withdraw or Delete Offer",
    description="Partners withdraw their own unselected offers; admins delete offers that have no shipment.",
    responses={
        400: {"description": "Offer already selected"},
        403: {"description": "Not allowed to remove this offer"},
        404: {"description": "Offer not found"},
        409: {"description": "Offer has a shipment"},
    },
)
async def delete_offer(
    offer_id: str,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> MessageResponse:
    role = UserRole(user.role)
    if role == UserRole.LOGISTICS_PARTNER:
        await offer_service.withdraw_offer(session, user, offer_id)
        message = "Offer withdrawn successfully"
    elif role == UserRole.ADMIN:
        await offer_service.delete_offer(session, offer_id, user.id)
        message = "Offer deleted successfully"
    else:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Unauthorized")
    await session.commit()
    return MessageResponse(message=message)


@router.post(
    "/{offer_id}/select",
    response_model=OfferSelectResponse,
    summary="Select Offer",
    description=(
        "Accept an offer on the trader's own quote. "
        "Other pending offers are rejected and a shipment is booked."
    ),
    response_description="The accepted offer, the booked shipment and the lead fee outcome.",
    responses={
        400: {"description": "Offer already processed, partner wallet missing or insufficient balance"},
        403: {"description": "Quote belongs to another trader"},
        404: {"description": "Offer not found"},
    },
)
async def select_offer(
    offer_id: str,
    trader: User = Depends(require_trader),
    session: AsyncSession = Depends(get_session),
) -> OfferSelectResponse:
    result = await offer_service.select_offer(session, trader, offer_id)
    await session.commit()
    await session.refresh(result.offer)
    await session.refresh(result.shipment)
    return OfferSelectResponse(
        offer=OfferRead.model_validate(result.offer),
        shipment=ShipmentRead.model_validate(result.shipment),
        lead_cost=result.lead_cost,
        lead_fee_charged=result.charged,
    )
