"""
Lead wallet repository.

Balance changes go through conditional ``UPDATE`` statements so concurrent
requests cannot overdraw a wallet.
"""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy import func, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from bidchemz_logistics.core.models.domain.enums import TransactionType

from ..entities.wallets import LeadTransaction, LeadWallet
from .base import SQLModelRepository


class LeadWalletRepository(SQLModelRepository[LeadWallet]):
    """Repository for lead wallets and their ledger."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, LeadWallet)

    async def get_by_user(self, user_id: str) -> Optional[LeadWallet]:
        result = await self.session.execute(select(LeadWallet).where(LeadWallet.user_id == user_id))
        return result.scalars().first()

    async def try_debit(self, wallet: LeadWallet, amount: float) -> bool:
        """Subtract ``amount`` only if the balance still covers it.

        Returns False when the guard fails. ``wallet`` is refreshed either way.
        """
        stmt = (
            update(LeadWallet)
            .where(LeadWallet.id == wallet.id, LeadWallet.balance >= amount)
            .values(balance=LeadWallet.balance - amount)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.refresh(wallet)
        return (result.rowcount or 0) == 1

    async def credit(self, wallet: LeadWallet, amount: float) -> None:
        stmt = (
            update(LeadWallet)
            .where(LeadWallet.id == wallet.id)
            .values(balance=LeadWallet.balance + amount)
            .execution_options(synchronize_session=False)
        )
        await self.session.execute(stmt)
        await self.session.refresh(wallet)

    async def add_transaction(self, transaction: LeadTransaction) -> LeadTransaction:
        self.session.add(transaction)
        await self.session.flush()
        return transaction

    async def has_transaction_for_offer(self, offer_id: str, transaction_type: TransactionType) -> bool:
        stmt = select(LeadTransaction.id).where(
            LeadTransaction.offer_id == offer_id,
            LeadTransaction.transaction_type == transaction_type,
        )
        result = await self.session.execute(stmt)
        return result.first() is not None

    async def recent_transactions(self, wallet_id: str, limit: int = 50) -> List[LeadTransaction]:
        stmt = (
            select(LeadTransaction)
            .where(LeadTransaction.wallet_id == wallet_id)
            .order_by(LeadTransaction.created_at.desc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_alerting(self) -> List[LeadWallet]:
        """Wallets with alerts enabled whose balance sits at or under the threshold."""
        stmt = select(LeadWallet).where(
            LeadWallet.low_balance_alert == True,  # noqa: E712
            LeadWallet.balance <= LeadWallet.alert_threshold,
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def total_debited(self) -> float:
        stmt = select(func.coalesce(func.sum(LeadTransaction.amount), 0.0)).where(
            LeadTransaction.transaction_type == TransactionType.DEBIT
        )
        result = await self.session.execute(stmt)
        return float(result.scalar_one())
