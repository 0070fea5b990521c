"""Lead wallet and payment request I/O models."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from bidchemz_logistics.core.models.domain.enums import (
    LeadType,
    PaymentMethod,
    PaymentRequestStatus,
    TransactionType,
)


class LeadTransactionRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    offer_id: Optional[str] = None
    transaction_type: TransactionType
    amount: float
    balance_after: Optional[float] = None
    description: Optional[str] = None
    lead_id: Optional[str] = None
    lead_type: Optional[LeadType] = None
    hazard_category: Optional[str] = None
    quantity: Optional[float] = None
    vehicle_type: Optional[str] = None
    created_at: datetime


class WalletRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    balance: float
    currency: str
    low_balance_alert: bool
    alert_threshold: float
    updated_at: datetime


class WalletResponse(BaseModel):
    wallet: WalletRead
    transactions: List[LeadTransactionRead]


class WalletSettingsUpdate(BaseModel):
    low_balance_alert: Optional[bool] = None
    alert_threshold: Optional[float] = Field(default=None, description="Between 0 and 1,000,000")


class PaymentRequestCreate(BaseModel):
    """Offline wallet top-up reported by a partner."""

    amount: float = Field(gt=0)
    payment_method: PaymentMethod
    reference_number: Optional[str] = Field(default=None, max_length=128)
    transaction_id: Optional[str] = Field(default=None, max_length=128)
    payment_date: Optional[datetime] = None
    request_notes: Optional[str] = None


class PaymentRequestReview(BaseModel):
    status: PaymentRequestStatus
    review_notes: Optional[str] = None


class PaymentRequestRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    amount: float
    payment_method: PaymentMethod
    reference_number: Optional[str] = None
    transaction_id: Optional[str] = None
    payment_date: Optional[datetime] = None
    request_notes: Optional[str] = None
    status: PaymentRequestStatus
    reviewed_by: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    review_notes: Optional[str] = None
    created_at: datetime
