"""
Payment request entity models.

Partners top up their lead wallet offline (bank transfer, UPI, cheque) and
file a payment request; an administrator approves or rejects it.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import Field

from bidchemz_logistics.core.models.domain.enums import PaymentMethod, PaymentRequestStatus

from ..base import Base, UTCDateTime, new_id, utc_now


class PaymentRequest(Base, table=True):
    """Entity for wallet top-up requests.

    Table: payment_requests
    """

    __tablename__ = "payment_requests"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    user_id: str = Field(foreign_key="users.id", max_length=64, index=True)
    amount: float = Field(gt=0)
    payment_method: PaymentMethod
    reference_number: Optional[str] = Field(default=None, max_length=128)
    transaction_id: Optional[str] = Field(default=None, max_length=128)
    payment_date: Optional[datetime] = Field(default=None, sa_type=UTCDateTime)
    request_notes: Optional[str] = Field(default=None)

    status: PaymentRequestStatus = Field(default=PaymentRequestStatus.PENDING, index=True)
    reviewed_by: Optional[str] = Field(default=None, max_length=64)
    reviewed_at: Optional[datetime] = Field(default=None, sa_type=UTCDateTime)
    review_notes: Optional[str] = Field(default=None)

    created_at: datetime = Field(default_factory=utc_now, index=True, sa_type=UTCDateTime)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now}, sa_type=UTCDateTime)
