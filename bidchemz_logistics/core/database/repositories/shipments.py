"""Shipment repository."""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..entities.shipments import Shipment
from .base import AsyncQueryBuilder, SQLModelRepository


class ShipmentRepository(SQLModelRepository[Shipment]):
    """Repository for shipments."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Shipment)

    async def get_by_offer(self, offer_id: str) -> Optional[Shipment]:
        result = await self.session.execute(select(Shipment).where(Shipment.offer_id == offer_id))
        return result.scalars().first()

    async def get_by_quote(self, quote_id: str) -> Optional[Shipment]:
        result = await self.session.execute(select(Shipment).where(Shipment.quote_id == quote_id))
        return result.scalars().first()

    async def search(
        self,
        *,
        trader_id: Optional[str] = None,
        partner_id: Optional[str] = None,
        status: Optional[str] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> List[Shipment]:
        filters = {"trader_id": trader_id, "partner_id": partner_id, "status": status}
        stmt = AsyncQueryBuilder.apply_filters(select(Shipment), Shipment, filters)
        stmt = AsyncQueryBuilder.apply_pagination(stmt.order_by(Shipment.created_at.desc()), limit, offset)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
