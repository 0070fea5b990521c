"""
Quote repository.

Queries over freight requests: role-scoped listings with totals, and the
expiry windows used by the quote timer jobs.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Sequence

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from bidchemz_logistics.core.models.domain.enums import QuoteStatus

from ..entities.quotes import Quote
from .base import AsyncQueryBuilder, SQLModelRepository

OPEN_STATUSES: Sequence[QuoteStatus] = (QuoteStatus.MATCHING, QuoteStatus.OFFERS_AVAILABLE)


class QuoteRepository(SQLModelRepository[Quote]):
    """Repository for quotes."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Quote)

    async def quote_number_exists(self, quote_number: str) -> bool:
        result = await self.session.execute(select(Quote.id).where(Quote.quote_number == quote_number))
        return result.first() is not None

    async def search(
        self,
        *,
        trader_id: Optional[str] = None,
        status: Optional[QuoteStatus] = None,
        limit: int = 50,
        offset: int = 0,
        newest_first: bool = True,
    ) -> tuple[List[Quote], int]:
        """Return one page of quotes and the total number of matches."""
        filters = {"trader_id": trader_id, "status": status}
        total = await self.count(filters)

        stmt = AsyncQueryBuilder.apply_filters(select(Quote), Quote, filters)
        stmt = stmt.order_by(Quote.created_at.desc() if newest_first else Quote.created_at.asc())
        stmt = AsyncQueryBuilder.apply_pagination(stmt, limit, offset)
        result = await self.session.execute(stmt)
        return list(result.scalars().all()), total

    async def list_expired_open(self, now: datetime) -> List[Quote]:
        """Open quotes whose ``expires_at`` has passed."""
        stmt = select(Quote).where(
            Quote.status.in_(OPEN_STATUSES),
            Quote.expires_at.is_not(None),
            Quote.expires_at <= now,
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_expiring_between(self, start: datetime, end: datetime) -> List[Quote]:
        """Open, not yet warned quotes expiring in ``(start, end]``."""
        stmt = select(Quote).where(
            Quote.status.in_(OPEN_STATUSES),
            Quote.expires_at > start,
            Quote.expires_at <= end,
            Quote.expiry_warning_sent_at.is_(None),
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count_by_status(self) -> dict[str, int]:
        stmt = select(Quote.status, func.count(Quote.id)).group_by(Quote.status)
        result = await self.session.execute(stmt)
        return {QuoteStatus(status).value: int(count) for status, count in result.all()}
