"""
Logistics partner self-service endpoints.

Capabilities decide which quotes a partner is matched with; activity is the
partner's recent offers, shipments and lead fees.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from bidchemz_logistics.core.database import get_session
from bidchemz_logistics.core.database.entities.partner_capabilities import PartnerCapability
from bidchemz_logistics.core.database.entities.users import User
from bidchemz_logistics.core.database.repositories.offers import OfferRepository
from bidchemz_logistics.core.database.repositories.shipments import ShipmentRepository
from bidchemz_logistics.core.database.repositories.users import UserRepository
from bidchemz_logistics.core.logging_config import get_logger
from bidchemz_logistics.core.models.io.offers import OfferRead
from bidchemz_logistics.core.models.io.partner import PartnerActivity, PartnerCapabilityRead, PartnerCapabilityUpdate
from bidchemz_logistics.core.models.io.shipments import ShipmentRead
from bidchemz_logistics.core.models.io.wallet import LeadTransactionRead
from bidchemz_logistics.server.dependencies import require_partner
from bidchemz_logistics.services import wallet as wallet_service
from bidchemz_logistics.services.audit import record_audit

logger = get_logger(__name__)

router = APIRouter(tags=["partner"])


@router.get(
    "/capabilities",
    response_model=PartnerCapabilityRead,
    summary="Get Capabilities",
    responses={404: {"description": "Capabilities not declared yet"}},
)
async def get_capabilities(
    partner: User = Depends(require_partner),
    session: AsyncSession = Depends(get_session),
) -> PartnerCapabilityRead:
    capability = await UserRepository(session).get_capability(partner.id)
    if capability is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Capabilities not found")
    return PartnerCapabilityRead.model_validate(capability)


@router.put(
    "/capabilities",
    response_model=PartnerCapabilityRead,
    summary="Set Capabilities",
    description=(
        "Replace the partner's hazard classes, service states, fleet and packaging coverage. "
        "The subscription tier is admin-managed and left untouched."
    ),
)
async def put_capabilities(
    data: PartnerCapabilityUpdate,
    partner: User = Depends(require_partner),
    session: AsyncSession = Depends(get_session),
) -> PartnerCapabilityRead:
    capability = await UserRepository(session).get_capability(partner.id)
    fields = data.to_entity_fields()
    if capability is None:
        capability = PartnerCapability(user_id=partner.id, **fields)
    else:
        for key, value in fields.items():
            setattr(capability, key, value)
    session.add(capability)
    await session.flush()
    await record_audit(
        session,
        action="UPDATE_CAPABILITIES",
        entity="PARTNER_CAPABILITY",
        entity_id=capability.id,
        user_id=partner.id,
        changes=fields,
    )
    await session.commit()
    await session.refresh(capability)
    logger.info(f"Partner {partner.id} updated capabilities")
    return PartnerCapabilityRead.model_validate(capability)


@router.get(
    "/activity",
    response_model=PartnerActivity,
    summary="Partner Activity",
    description="Most recent offers, shipments and lead fee transactions of the partner.",
)
async def get_activity(
    limit: int = Query(default=10, ge=1, le=50),
    partner: User = Depends(require_partner),
    session: AsyncSession = Depends(get_session),
) -> PartnerActivity:
    offers = await OfferRepository(session).search(partner_id=partner.id, limit=limit)
    shipments = await ShipmentRepository(session).search(partner_id=partner.id, limit=limit)
    wallet = await wallet_service.get_wallet(session, partner.id)
    transactions = await wallet_service.transaction_history(session, wallet, limit=limit) if wallet else []
    return PartnerActivity(
        offers=[OfferRead.model_validate(o) for o in offers],
        shipments=[ShipmentRead.model_validate(s) for s in shipments],
        transactions=[LeadTransactionRead.model_validate(t) for t in transactions],
        wallet_balance=wallet.balance if wallet else None,
    )
