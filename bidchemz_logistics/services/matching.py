"""
Partner matching.

Picks the logistics partners that can carry a quote: one pass over active,
verified partners, keeping those whose declared capability covers the cargo
and whose lead wallet is funded. Premium partners come first.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from bidchemz_logistics.core.database.entities.partner_capabilities import PartnerCapability
from bidchemz_logistics.core.database.entities.quotes import Quote
from bidchemz_logistics.core.database.entities.wallets import LeadWallet
from bidchemz_logistics.core.database.repositories.users import UserRepository
from bidchemz_logistics.core.errors import NotFoundError
from bidchemz_logistics.core.logging_config import get_logger
from bidchemz_logistics.core.models.domain.enums import SubscriptionTier

from .notifications import notify_partner_new_lead

logger = get_logger(__name__)

TIER_PRIORITY: Dict[str, int] = {
    SubscriptionTier.PREMIUM.value: 0,
    SubscriptionTier.STANDARD.value: 1,
    SubscriptionTier.FREE.value: 2,
}


@dataclass
class MatchedPartner:
    partner_id: str
    email: str
    company_name: Optional[str]
    subscription_tier: str


def _value(member) -> Optional[str]:
    return getattr(member, "value", member)


def capability_covers(quote: Quote, capability: PartnerCapability) -> bool:
    """True when ``capability`` satisfies every cargo requirement of ``quote``."""
    if quote.is_hazardous and _value(quote.hazard_class) not in (capability.dg_classes or []):
        return False

    states = capability.service_states or []
    if quote.pickup_state not in states or quote.delivery_state not in states:
        return False

    if _value(quote.packaging_type) not in (capability.packaging_capabilities or []):
        return False

    preferred = quote.preferred_vehicle_types or []
    if preferred and not set(preferred) & set(capability.fleet_types or []):
        return False

    if quote.temperature_controlled and not capability.temperature_controlled:
        return False

    return True


async def _funded_partner_ids(session: AsyncSession, partner_ids: List[str]) -> set[str]:
    if not partner_ids:
        return set()
    stmt = select(LeadWallet.user_id).where(LeadWallet.user_id.in_(partner_ids), LeadWallet.balance > 0)
    result = await session.execute(stmt)
    return {row[0] for row in result.all()}


async def find_matching_partners(session: AsyncSession, quote_id: str) -> List[MatchedPartner]:
    """Partners able to take ``quote_id``, ordered PREMIUM, STANDARD, FREE.

    Raises:
        NotFoundError: the quote does not exist.
    """
    quote = await session.get(Quote, quote_id)
    if quote is None:
        raise NotFoundError("Quote", quote_id)

    candidates = await UserRepository(session).list_matchable_partners()
    capable = [
        (user, capability)
        for user, capability in candidates
        if capability is not None and capability_covers(quote, capability)
    ]
    funded = await _funded_partner_ids(session, [user.id for user, _ in capable])

    matches = [
        MatchedPartner(
            partner_id=user.id,
            email=user.email,
            company_name=user.company_name,
            subscription_tier=_value(capability.subscription_tier),
        )
        for user, capability in capable
        if user.id in funded
    ]
    # sorted() is stable, so partners within a tier keep their signup order
    matches = sorted(matches, key=lambda m: TIER_PRIORITY.get(m.subscription_tier, len(TIER_PRIORITY)))

    logger.info(f"Quote {quote.quote_number}: {len(matches)} of {len(candidates)} partners matched")
    return matches


async def notify_matched_partners(session: AsyncSession, quote: Quote, partners: List[MatchedPartner]) -> int:
    """Send the new-lead notification to each partner; returns how many were reached."""
    notified = 0
    for partner in partners:
        try:
            if await notify_partner_new_lead(session, partner.partner_id, quote):
                notified += 1
        except Exception as e:
            logger.error(f"Failed to notify partner {partner.partner_id} about quote {quote.id}: {e}")
    return notified
