"""
Admin endpoints: platform statistics, user moderation and lead pricing.

Every route here requires the ADMIN role.
"""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from bidchemz_logistics.core.database import get_session
from bidchemz_logistics.core.database.entities.partner_capabilities import PartnerCapability
from bidchemz_logistics.core.database.entities.payment_requests import PaymentRequest
from bidchemz_logistics.core.database.entities.users import User
from bidchemz_logistics.core.database.repositories.offers import OfferRepository
from bidchemz_logistics.core.database.repositories.quotes import QuoteRepository
from bidchemz_logistics.core.database.repositories.shipments import ShipmentRepository
from bidchemz_logistics.core.database.repositories.users import UserRepository
from bidchemz_logistics.core.database.repositories.wallets import LeadWalletRepository
from bidchemz_logistics.core.logging_config import get_logger
from bidchemz_logistics.core.models.domain.enums import PaymentRequestStatus, UserRole
from bidchemz_logistics.core.models.io.admin import (
    AdminUserUpdate,
    PlatformStats,
    PricingConfigRead,
    PricingConfigUpdate,
    QuantityRangeModel,
)
from bidchemz_logistics.core.models.io.auth import UserRead
from bidchemz_logistics.server.dependencies import require_admin
from bidchemz_logistics.services.audit import record_audit
from bidchemz_logistics.services.pricing import (
    PricingTable,
    QuantityRange,
    get_active_pricing,
    get_active_pricing_config,
    publish_pricing,
)

logger = get_logger(__name__)

router = APIRouter(tags=["admin"], dependencies=[Depends(require_admin)])


def _table_read(table: PricingTable) -> PricingConfigRead:
    return PricingConfigRead(
        base_lead_cost=table.base_lead_cost,
        hazard_multipliers=dict(table.hazard),
        distance_multipliers=dict(table.distance),
        quantity_ranges=[QuantityRangeModel(**r.to_dict()) for r in table.quantity_ranges],
        vehicle_multipliers=dict(table.vehicle),
        urgency_multiplier=table.urgency,
        tier_multipliers=dict(table.tier),
    )


@router.get(
    "/stats",
    response_model=PlatformStats,
    summary="Platform Statistics",
    description="User, quote, offer and shipment counts with gross merchandise value and lead revenue.",
)
async def get_stats(session: AsyncSession = Depends(get_session)) -> PlatformStats:
    role_rows = await session.execute(select(User.role, func.count(User.id)).group_by(User.role))
    pending = await session.execute(
        select(func.count())
        .select_from(PaymentRequest)
        .where(PaymentRequest.status == PaymentRequestStatus.PENDING)
    )
    quotes = QuoteRepository(session)
    offers = OfferRepository(session)
    return PlatformStats(
        users_by_role={UserRole(role).value: int(count) for role, count in role_rows.all()},
        quotes_by_status=await quotes.count_by_status(),
        total_quotes=await quotes.count(),
        total_offers=await offers.count(),
        total_shipments=await ShipmentRepository(session).count(),
        gross_merchandise_value=await offers.accepted_gmv(),
        lead_revenue=await LeadWalletRepository(session).total_debited(),
        pending_payment_requests=int(pending.scalar_one()),
    )


@router.get(
    "/users",
    response_model=List[UserRead],
    summary="List Users",
    description="Accounts, newest first, optionally filtered by role.",
)
async def list_users(
    role: Optional[UserRole] = Query(default=None),
    limit: int = Query(default=100, ge=1, le=500),
    session: AsyncSession = Depends(get_session),
) -> List[UserRead]:
    users = await UserRepository(session).list_by_role(role, limit=limit)
    return [UserRead.model_validate(u) for u in users]


@router.patch(
    "/users/{user_id}",
    response_model=UserRead,
    summary="Moderate User",
    description="Activate, deactivate or verify an account; for partners, also set the subscription tier.",
    responses={
        400: {"description": "Subscription tier given for a non-partner"},
        404: {"description": "User not found"},
    },
)
async def update_user(
    user_id: str,
    data: AdminUserUpdate,
    admin: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> UserRead:
    repo = UserRepository(session)
    user = await repo.get_by_id(user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    tier = changes.pop("subscription_tier", None)
    if tier is not None:
        if UserRole(user.role) != UserRole.LOGISTICS_PARTNER:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Subscription tiers only apply to logistics partners",
            )
        capability = await repo.get_capability(user.id) or PartnerCapability(user_id=user.id)
        capability.subscription_tier = tier
        session.add(capability)

    for key, value in changes.items():
        setattr(user, key, value)
    user = await repo.update(user)
    await record_audit(
        session,
        action="ADMIN_UPDATE_USER",
        entity="USER",
        entity_id=user.id,
        user_id=admin.id,
        changes={**changes, **({"subscription_tier": tier.value} if tier is not None else {})},
    )
    await session.commit()
    await session.refresh(user)
    return UserRead.model_validate(user)


@router.get(
    "/pricing-config",
    response_model=PricingConfigRead,
    summary="Get Pricing Config",
    description="The active lead pricing table, or the built-in defaults when none has been published.",
)
async def get_pricing_config(session: AsyncSession = Depends(get_session)) -> PricingConfigRead:
    config = await get_active_pricing_config(session)
    read = _table_read(await get_active_pricing(session))
    if config is not None:
        read.id = config.id
        read.created_by = config.created_by
        read.created_at = config.created_at
    return read


@router.put(
    "/pricing-config",
    response_model=PricingConfigRead,
    summary="Publish Pricing Config",
    description=(
        "Store a new pricing table and make it the only active one. "
        "Missing multipliers fall back to the defaults."
    ),
)
async def put_pricing_config(
    data: PricingConfigUpdate,
    admin: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> PricingConfigRead:
    table = PricingTable(
        base_lead_cost=data.base_lead_cost,
        hazard=data.hazard_multipliers,
        distance=data.distance_multipliers,
        quantity_ranges=tuple(
            QuantityRange(minimum=r.min, maximum=r.max, multiplier=r.multiplier) for r in data.quantity_ranges
        ),
        vehicle=data.vehicle_multipliers,
        urgency=data.urgency_multiplier,
        tier=data.tier_multipliers,
    )
    config = await publish_pricing(session, table, created_by=admin.id)
    await record_audit(
        session,
        action="UPDATE_PRICING",
        entity="PRICING_CONFIG",
        entity_id=config.id,
        user_id=admin.id,
        changes={"base_lead_cost": data.base_lead_cost},
    )
    await session.commit()
    await session.refresh(config)

    read = _table_read(PricingTable.from_config(config))
    read.id = config.id
    read.created_by = config.created_by
    read.created_at = config.created_at
    return read
