"""
Lead wallet accounting.

Every balance change writes a ``LeadTransaction`` in the same unit of work.
Debits are guarded by a conditional update, so a wallet never goes negative
even when two offers are submitted at the same time.
"""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from bidchemz_logistics.core.database.entities.quotes import Quote
from bidchemz_logistics.core.database.entities.wallets import DEFAULT_ALERT_THRESHOLD, LeadTransaction, LeadWallet
from bidchemz_logistics.core.database.repositories.wallets import LeadWalletRepository
from bidchemz_logistics.core.errors import InsufficientBalanceError, NotFoundError, ValidationFailedError
from bidchemz_logistics.core.logging_config import get_logger
from bidchemz_logistics.core.models.domain.enums import LeadType, TransactionType

from .audit import record_audit
from .notifications import notify_low_balance

logger = get_logger(__name__)

MAX_ALERT_THRESHOLD = 1_000_000.0


async def get_wallet(session: AsyncSession, user_id: str) -> Optional[LeadWallet]:
    return await LeadWalletRepository(session).get_by_user(user_id)


async def get_or_create_wallet(session: AsyncSession, user_id: str) -> LeadWallet:
    repo = LeadWalletRepository(session)
    wallet = await repo.get_by_user(user_id)
    if wallet is None:
        wallet = await repo.create(LeadWallet(user_id=user_id, alert_threshold=DEFAULT_ALERT_THRESHOLD))
        logger.info(f"Created lead wallet for user {user_id}")
    return wallet


async def charge_lead_fee(
    session: AsyncSession,
    wallet: LeadWallet,
    *,
    amount: float,
    quote: Quote,
    offer_id: str,
    lead_type: LeadType,
) -> LeadTransaction:
    """Debit a lead fee and record the DEBIT transaction.

    Raises:
        InsufficientBalanceError: the balance no longer covers ``amount``.
    """
    repo = LeadWalletRepository(session)
    if not await repo.try_debit(wallet, amount):
        logger.warning(
            f"Insufficient balance: user {wallet.user_id}, required ₹{amount:.2f}, available ₹{wallet.balance:.2f}"
        )
        raise InsufficientBalanceError(required=amount, available=wallet.balance)

    transaction = await repo.add_transaction(
        LeadTransaction(
            wallet_id=wallet.id,
            offer_id=offer_id,
            transaction_type=TransactionType.DEBIT,
            amount=amount,
            balance_after=wallet.balance,
            description=f"Lead fee for quote {quote.quote_number}",
            lead_id=quote.id,
            lead_type=lead_type,
            hazard_category=quote.hazard_class.value if quote.hazard_class else None,
            quantity=quote.quantity,
            vehicle_type=(quote.preferred_vehicle_types or [None])[0],
        )
    )
    logger.info(f"Lead fee deducted: user {wallet.user_id}, amount ₹{amount:.2f}, quote {quote.id}")
    return transaction


async def credit_wallet(
    session: AsyncSession,
    wallet: LeadWallet,
    amount: float,
    *,
    description: str,
    transaction_type: TransactionType = TransactionType.CREDIT,
    offer_id: Optional[str] = None,
) -> LeadTransaction:
    if amount <= 0:
        raise ValidationFailedError("Amount must be greater than 0")
    repo = LeadWalletRepository(session)
    await repo.credit(wallet, amount)
    transaction = await repo.add_transaction(
        LeadTransaction(
            wallet_id=wallet.id,
            offer_id=offer_id,
            transaction_type=transaction_type,
            amount=amount,
            balance_after=wallet.balance,
            description=description,
        )
    )
    logger.info(f"Wallet credited: user {wallet.user_id}, amount ₹{amount:.2f} ({transaction_type.value})")
    return transaction


async def recharge_wallet(session: AsyncSession, user_id: str, amount: float) -> LeadTransaction:
    wallet = await get_or_create_wallet(session, user_id)
    return await credit_wallet(
        session, wallet, amount, description="Wallet recharge", transaction_type=TransactionType.RECHARGE
    )


async def refund_lead_fee(session: AsyncSession, user_id: str, offer_id: str, amount: float) -> LeadTransaction:
    """Return a previously charged lead fee; an offer is refunded at most once."""
    repo = LeadWalletRepository(session)
    wallet = await repo.get_by_user(user_id)
    if wallet is None:
        raise NotFoundError("Lead wallet")
    if not await repo.has_transaction_for_offer(offer_id, TransactionType.DEBIT):
        raise ValidationFailedError("No lead fee was charged for this offer")
    if await repo.has_transaction_for_offer(offer_id, TransactionType.REFUND):
        raise ValidationFailedError("Lead fee already refunded")
    return await credit_wallet(
        session,
        wallet,
        amount,
        description=f"Refund of lead fee for offer {offer_id}",
        transaction_type=TransactionType.REFUND,
        offer_id=offer_id,
    )


async def check_low_balance(session: AsyncSession, wallet: LeadWallet) -> bool:
    """Alert the owner when the balance is at or below the threshold.

    Returns True when an alert was sent.
    """
    if not wallet.low_balance_alert or wallet.balance > wallet.alert_threshold:
        return False
    await notify_low_balance(session, wallet.user_id, wallet.balance, wallet.alert_threshold)
    await record_audit(
        session,
        action="LOW_BALANCE_ALERT",
        entity="LEAD_WALLET",
        entity_id=wallet.id,
        user_id=wallet.user_id,
        changes={"balance": wallet.balance, "threshold": wallet.alert_threshold},
    )
    return True


async def update_alert_settings(
    session: AsyncSession,
    wallet: LeadWallet,
    *,
    alert_threshold: Optional[float] = None,
    low_balance_alert: Optional[bool] = None,
) -> LeadWallet:
    if alert_threshold is not None:
        if alert_threshold < 0 or alert_threshold > MAX_ALERT_THRESHOLD:
            raise ValidationFailedError("Alert threshold must be between 0 and 1,000,000")
        wallet.alert_threshold = alert_threshold
    if low_balance_alert is not None:
        wallet.low_balance_alert = low_balance_alert
    return await LeadWalletRepository(session).update(wallet)


async def transaction_history(session: AsyncSession, wallet: LeadWallet, limit: int = 50) -> List[LeadTransaction]:
    return await LeadWalletRepository(session).recent_transactions(wallet.id, limit=limit)
