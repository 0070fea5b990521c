"""Offer I/O models for API requests and responses."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from bidchemz_logistics.core.models.domain.enums import OfferStatus, SubscriptionTier

from .shipments import ShipmentRead


class OfferCreate(BaseModel):
    """Schema for a partner's bid on a quote."""

    quote_id: str = Field(min_length=1)
    price: float = Field(gt=0, description="Quoted freight price in INR")
    transit_days: int = Field(gt=0)
    offer_valid_until: datetime
    pickup_available_from: datetime
    insurance_included: bool = False
    tracking_included: bool = True
    customs_clearance: bool = False
    value_added_services: Optional[str] = None
    terms: Optional[str] = None
    remarks: Optional[str] = None

    def to_entity_fields(self) -> dict:
        return self.model_dump(exclude={"quote_id"})


class OfferUpdate(BaseModel):
    """Partner edits to an unselected offer; admins may also set the status."""

    status: Optional[OfferStatus] = None
    price: Optional[float] = Field(default=None, gt=0)
    transit_days: Optional[int] = Field(default=None, gt=0)
    remarks: Optional[str] = None


class OfferRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    quote_id: str
    partner_id: str
    price: float
    transit_days: int
    offer_valid_until: datetime
    pickup_available_from: datetime
    insurance_included: bool
    tracking_included: bool
    customs_clearance: bool
    value_added_services: Optional[str] = None
    terms: Optional[str] = None
    remarks: Optional[str] = None
    status: OfferStatus
    is_selected: bool
    selected_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    created_at: datetime


class OfferSubmitResponse(BaseModel):
    offer: OfferRead
    lead_cost_deducted: float
    new_wallet_balance: float
    message: str = "Offer submitted successfully"


class OfferSelectResponse(BaseModel):
    offer: OfferRead
    shipment: ShipmentRead
    lead_cost: float
    lead_fee_charged: bool
    message: str = "Offer selected successfully"


class OfferListResponse(BaseModel):
    offers: List[OfferRead]


class LeadCostRequest(BaseModel):
    quote_id: str = Field(min_length=1)


class LeadCostPreview(BaseModel):
    quote_id: str
    lead_cost: float
    wallet_balance: float
    has_insufficient_balance: bool
    subscription_tier: SubscriptionTier


class LeadCostBreakdown(BaseModel):
    quote_id: str
    subscription_tier: SubscriptionTier
    lead_type: str
    base_price: float
    hazard_multiplier: float
    distance_multiplier: float
    quantity_multiplier: float
    vehicle_multiplier: float
    urgency_multiplier: float
    tier_discount: float
    final_cost: float
    breakdown: List[str]
