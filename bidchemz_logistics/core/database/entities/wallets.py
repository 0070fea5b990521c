"""
Lead wallet entity models.

Every logistics partner owns one prepaid wallet. Each balance change is
recorded as a lead transaction in the same database transaction.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import Field

from bidchemz_logistics.core.models.domain.enums import LeadType, TransactionType

from ..base import Base, UTCDateTime, new_id, utc_now

DEFAULT_ALERT_THRESHOLD = 1000.0


class LeadWallet(Base, table=True):
    """Entity for partner lead wallets.

    Table: lead_wallets
    """

    __tablename__ = "lead_wallets"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    user_id: str = Field(foreign_key="users.id", max_length=64, unique=True, index=True)
    balance: float = Field(default=0.0)
    currency: str = Field(default="INR", max_length=8)
    low_balance_alert: bool = Field(default=True)
    alert_threshold: float = Field(default=DEFAULT_ALERT_THRESHOLD)

    created_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now}, sa_type=UTCDateTime)

    def __repr__(self) -> str:
        return f"LeadWallet(user_id={self.user_id}, balance={self.balance})"


class LeadTransaction(Base, table=True):
    """Entity for wallet ledger entries.

    ``(offer_id, transaction_type)`` is unique so an offer is debited (and
    refunded) at most once.

    Table: lead_transactions
    """

    __tablename__ = "lead_transactions"
    __table_args__ = (UniqueConstraint("offer_id", "transaction_type", name="uq_lead_transactions_offer_type"),)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    wallet_id: str = Field(foreign_key="lead_wallets.id", max_length=64, index=True)
    offer_id: Optional[str] = Field(default=None, max_length=64, index=True)
    transaction_type: TransactionType
    amount: float
    balance_after: Optional[float] = Field(default=None)
    description: str = Field(default="")

    # Lead metadata, filled in for DEBIT entries
    lead_id: Optional[str] = Field(default=None, max_length=64, description="Quote the lead belongs to")
    lead_type: Optional[LeadType] = Field(default=None)
    hazard_category: Optional[str] = Field(default=None, max_length=32)
    quantity: Optional[float] = Field(default=None)
    vehicle_type: Optional[str] = Field(default=None, max_length=32)

    created_at: datetime = Field(default_factory=utc_now, index=True, sa_type=UTCDateTime)

    def __repr__(self) -> str:
        return f"LeadTransaction(id={self.id}, type={self.transaction_type}, amount={self.amount})"
