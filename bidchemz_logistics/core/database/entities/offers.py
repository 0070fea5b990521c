"""
Offer entity models.

An offer is a partner's bid against a quote. Submitting one costs the partner
a lead fee debited from the lead wallet.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import Field

from bidchemz_logistics.core.models.domain.enums import OfferStatus

from ..base import Base, UTCDateTime, new_id, utc_now


class OfferBase(Base):
    """Base fields for offer entity."""

    price: float = Field(gt=0, description="Quoted freight price in INR")
    transit_days: int = Field(gt=0)
    offer_valid_until: datetime = Field(sa_type=UTCDateTime)
    pickup_available_from: datetime = Field(sa_type=UTCDateTime)

    insurance_included: bool = Field(default=False)
    tracking_included: bool = Field(default=True)
    customs_clearance: bool = Field(default=False)
    value_added_services: Optional[str] = Field(default=None)
    terms: Optional[str] = Field(default=None)
    remarks: Optional[str] = Field(default=None)


class Offer(OfferBase, table=True):
    """Entity for partner offers.

    Table: offers
    """

    __tablename__ = "offers"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    quote_id: str = Field(foreign_key="quotes.id", max_length=64, index=True)
    partner_id: str = Field(foreign_key="users.id", max_length=64, index=True)

    status: OfferStatus = Field(default=OfferStatus.PENDING, index=True)
    is_selected: bool = Field(default=False)
    selected_at: Optional[datetime] = Field(default=None, sa_type=UTCDateTime)
    expires_at: Optional[datetime] = Field(default=None, sa_type=UTCDateTime)

    created_at: datetime = Field(default_factory=utc_now, index=True, sa_type=UTCDateTime)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now}, sa_type=UTCDateTime)

    def __repr__(self) -> str:
        return f"Offer(id={self.id}, quote_id={self.quote_id}, status={self.status})"
