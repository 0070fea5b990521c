"""
Quote (freight request) entity models.

A quote is a trader's request to move a chemical cargo between two addresses.
It carries everything partners need to price the job: cargo and hazard data,
pickup and delivery blocks, packaging and vehicle preferences.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlmodel import JSON, Field

from bidchemz_logistics.core.models.domain.enums import HazardClass, PackagingType, QuoteStatus

from ..base import Base, UTCDateTime, new_id, utc_now


class QuoteBase(Base):
    """Base fields for quote entity."""

    # Cargo
    cargo_name: str = Field(max_length=255)
    cas_number: Optional[str] = Field(default=None, max_length=32)
    quantity: float = Field(gt=0)
    quantity_unit: str = Field(max_length=16)
    is_hazardous: bool = Field(default=False)
    hazard_class: Optional[HazardClass] = Field(default=None)
    un_number: Optional[str] = Field(default=None, max_length=16)

    # Dates
    cargo_ready_date: datetime = Field(sa_type=UTCDateTime)
    estimated_delivery_date: Optional[datetime] = Field(default=None, sa_type=UTCDateTime)

    # Pickup
    pickup_address: str
    pickup_city: str = Field(max_length=128)
    pickup_state: str = Field(max_length=128)
    pickup_pincode: str = Field(max_length=16)
    pickup_contact_name: Optional[str] = Field(default=None, max_length=128)
    pickup_contact_phone: Optional[str] = Field(default=None, max_length=32)

    # Delivery
    delivery_address: str
    delivery_city: str = Field(max_length=128)
    delivery_state: str = Field(max_length=128)
    delivery_pincode: str = Field(max_length=16)
    delivery_contact_name: Optional[str] = Field(default=None, max_length=128)
    delivery_contact_phone: Optional[str] = Field(default=None, max_length=32)

    # Handling requirements
    packaging_type: PackagingType
    packaging_details: Optional[str] = Field(default=None)
    temperature_controlled: bool = Field(default=False)
    temperature_min: Optional[float] = Field(default=None)
    temperature_max: Optional[float] = Field(default=None)
    preferred_vehicle_types: List[str] = Field(default_factory=list, sa_type=JSON)
    is_urgent: bool = Field(default=False)

    # Commercial
    insurance_required: bool = Field(default=False)
    msds_available: bool = Field(default=False)
    payment_terms: Optional[str] = Field(default=None, max_length=64)
    additional_notes: Optional[str] = Field(default=None)


class Quote(QuoteBase, table=True):
    """Entity for freight requests.

    Table: quotes
    """

    __tablename__ = "quotes"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    quote_number: str = Field(max_length=64, unique=True, index=True)
    trader_id: str = Field(foreign_key="users.id", max_length=64, index=True)
    status: QuoteStatus = Field(default=QuoteStatus.SUBMITTED, index=True)

    # External marketplace bid reference, when the request came from one
    bid_id: Optional[str] = Field(default=None, max_length=128, index=True)

    expires_at: Optional[datetime] = Field(default=None, index=True, sa_type=UTCDateTime)
    submitted_at: Optional[datetime] = Field(default=None, sa_type=UTCDateTime)
    # Set once partners were warned that the current bidding window is closing
    expiry_warning_sent_at: Optional[datetime] = Field(default=None, sa_type=UTCDateTime)

    created_at: datetime = Field(default_factory=utc_now, index=True, sa_type=UTCDateTime)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now}, sa_type=UTCDateTime)

    def __repr__(self) -> str:
        return f"Quote(id={self.id}, number={self.quote_number}, status={self.status})"
