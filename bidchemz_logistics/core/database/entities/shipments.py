"""
Shipment entity models.

A shipment is booked when a trader selects an offer. Tracking events are kept
as an append-only JSON list of ``{status, location, timestamp, description}``.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlmodel import JSON, Field

from bidchemz_logistics.core.models.domain.enums import ShipmentStatus

from ..base import Base, UTCDateTime, new_id, utc_now


class Shipment(Base, table=True):
    """Entity for booked shipments.

    Table: shipments
    """

    __tablename__ = "shipments"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    shipment_number: str = Field(max_length=64, unique=True, index=True)
    quote_id: str = Field(foreign_key="quotes.id", max_length=64, index=True)
    offer_id: str = Field(foreign_key="offers.id", max_length=64, unique=True)
    trader_id: str = Field(foreign_key="users.id", max_length=64, index=True)
    partner_id: str = Field(foreign_key="users.id", max_length=64, index=True)

    status: ShipmentStatus = Field(default=ShipmentStatus.BOOKED, index=True)
    current_location: Optional[str] = Field(default=None, max_length=255)
    estimated_delivery: Optional[datetime] = Field(default=None, sa_type=UTCDateTime)
    actual_pickup_date: Optional[datetime] = Field(default=None, sa_type=UTCDateTime)
    actual_delivery_date: Optional[datetime] = Field(default=None, sa_type=UTCDateTime)
    tracking_events: List[Dict[str, Any]] = Field(default_factory=list, sa_type=JSON)

    rating: Optional[int] = Field(default=None, ge=1, le=5)
    review: Optional[str] = Field(default=None)

    created_at: datetime = Field(default_factory=utc_now, index=True, sa_type=UTCDateTime)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now}, sa_type=UTCDateTime)

    def __repr__(self) -> str:
        return f"Shipment(id={self.id}, number={self.shipment_number}, status={self.status})"
