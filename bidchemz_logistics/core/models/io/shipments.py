"""Shipment I/O models for API requests and responses."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from bidchemz_logistics.core.models.domain.enums import ShipmentStatus


class ShipmentRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    shipment_number: str
    quote_id: str
    offer_id: str
    trader_id: str
    partner_id: str
    status: ShipmentStatus
    current_location: Optional[str] = None
    estimated_delivery: Optional[datetime] = None
    actual_pickup_date: Optional[datetime] = None
    actual_delivery_date: Optional[datetime] = None
    tracking_events: List[Dict[str, Any]] = Field(default_factory=list)
    rating: Optional[int] = None
    review: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class ShipmentUpdate(BaseModel):
    """Tracking update posted by the carrying partner or an admin."""

    status: Optional[ShipmentStatus] = None
    current_location: Optional[str] = Field(default=None, max_length=255)
    notes: Optional[str] = None


class ShipmentReview(BaseModel):
    rating: int = Field(ge=1, le=5)
    review: Optional[str] = None


class ShipmentTracking(BaseModel):
    shipment_number: str
    status: ShipmentStatus
    current_location: Optional[str] = None
    estimated_delivery: Optional[datetime] = None
    tracking_events: List[Dict[str, Any]]


class ShipmentListResponse(BaseModel):
    shipments: List[ShipmentRead]
    total: int
