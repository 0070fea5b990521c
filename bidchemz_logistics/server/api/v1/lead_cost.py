"""Lead cost calculator endpoint."""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from bidchemz_logistics.core.database import get_session
from bidchemz_logistics.core.database.entities.users import User
from bidchemz_logistics.core.database.repositories.quotes import QuoteRepository
from bidchemz_logistics.core.models.io.offers import LeadCostBreakdown, LeadCostRequest
from bidchemz_logistics.server.dependencies import require_partner
from bidchemz_logistics.services.offers import partner_tier
from bidchemz_logistics.services.pricing import lead_cost_for_quote, lead_type_for_tier

router = APIRouter(tags=["lead-cost"])


@router.post(
    "/calculate-lead-cost",
    response_model=LeadCostBreakdown,
    summary="Calculate Lead Cost",
    description="Full pricing breakdown of the lead fee the calling partner would pay for a quote.",
    response_description="Every multiplier applied, the final cost and a human-readable explanation.",
    responses={403: {"description": "Only logistics partners"}, 404: {"description": "Quote not found"}},
)
async def calculate_lead_cost(
    data: LeadCostRequest,
    partner: User = Depends(require_partner),
    session: AsyncSession = Depends(get_session),
) -> LeadCostBreakdown:
    quote = await QuoteRepository(session).get_by_id(data.quote_id)
    if quote is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Quote not found")

    tier = await partner_tier(session, partner.id)
    breakdown = await lead_cost_for_quote(session, quote, tier)
    return LeadCostBreakdown(
        quote_id=quote.id,
        subscription_tier=tier,
        lead_type=lead_type_for_tier(tier).value,
        **asdict(breakdown),
    )
