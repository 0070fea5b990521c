"""
Offer repository.

Queries over partner offers, including the duplicate-bid check and the bulk
status transitions used on selection and expiry.
"""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy import func, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from bidchemz_logistics.core.models.domain.enums import OfferStatus

from ..entities.offers import Offer
from .base import AsyncQueryBuilder, SQLModelRepository


class OfferRepository(SQLModelRepository[Offer]):
    """Repository for offers."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Offer)

    async def find_active_for_partner(self, quote_id: str, partner_id: str) -> Optional[Offer]:
        """A partner's existing offer on a quote, ignoring withdrawn ones."""
        stmt = select(Offer).where(
            Offer.quote_id == quote_id,
            Offer.partner_id == partner_id,
            Offer.status != OfferStatus.WITHDRAWN,
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def search(
        self,
        *,
        partner_id: Optional[str] = None,
        quote_id: Optional[str] = None,
        status: Optional[OfferStatus] = None,
        limit: Optional[int] = None,
    ) -> List[Offer]:
        filters = {"partner_id": partner_id, "quote_id": quote_id, "status": status}
        stmt = AsyncQueryBuilder.apply_filters(select(Offer), Offer, filters).order_by(Offer.created_at.desc())
        stmt = AsyncQueryBuilder.apply_pagination(stmt, limit, None)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_pending_for_quote(self, quote_id: str) -> List[Offer]:
        return await self.search(quote_id=quote_id, status=OfferStatus.PENDING)

    async def count_pending_for_quote(self, quote_id: str) -> int:
        return await self.count({"quote_id": quote_id, "status": OfferStatus.PENDING})

    async def set_status_for_pending(
        self, quote_id: str, status: OfferStatus, exclude_offer_id: Optional[str] = None
    ) -> int:
        """Move every pending offer of a quote to ``status``; returns rows changed."""
        stmt = update(Offer).where(Offer.quote_id == quote_id, Offer.status == OfferStatus.PENDING)
        if exclude_offer_id is not None:
            stmt = stmt.where(Offer.id != exclude_offer_id)
        result = await self.session.execute(
            stmt.values(status=status).execution_options(synchronize_session="fetch")
        )
        return result.rowcount or 0

    async def accepted_gmv(self) -> float:
        """Sum of prices over accepted offers."""
        stmt = select(func.coalesce(func.sum(Offer.price), 0.0)).where(Offer.status == OfferStatus.ACCEPTED)
        result = await self.session.execute(stmt)
        return float(result.scalar_one())
