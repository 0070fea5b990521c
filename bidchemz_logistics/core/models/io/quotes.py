"""
Quote I/O models for API requests and responses.

``QuoteCreate`` carries every cargo, route and handling field a trader fills
in; ``QuoteRead`` adds the server-managed lifecycle fields.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from bidchemz_logistics.core.models.domain.enums import HazardClass, PackagingType, QuoteStatus, VehicleType


class QuoteCreate(BaseModel):
    """Schema for submitting a freight request."""

    cargo_name: str = Field(min_length=1, max_length=255)
    cas_number: Optional[str] = Field(default=None, max_length=32)
    quantity: float = Field(gt=0)
    quantity_unit: str = Field(min_length=1, max_length=16, description="e.g. MT, KL, drums")
    is_hazardous: bool = False
    hazard_class: Optional[HazardClass] = None
    un_number: Optional[str] = Field(default=None, max_length=16)

    cargo_ready_date: datetime
    estimated_delivery_date: Optional[datetime] = None

    pickup_address: str = Field(min_length=1)
    pickup_city: str = Field(min_length=1, max_length=128)
    pickup_state: str = Field(min_length=1, max_length=128)
    pickup_pincode: str = Field(min_length=1, max_length=16)
    pickup_contact_name: Optional[str] = None
    pickup_contact_phone: Optional[str] = None

    delivery_address: str = Field(min_length=1)
    delivery_city: str = Field(min_length=1, max_length=128)
    delivery_state: str = Field(min_length=1, max_length=128)
    delivery_pincode: str = Field(min_length=1, max_length=16)
    delivery_contact_name: Optional[str] = None
    delivery_contact_phone: Optional[str] = None

    packaging_type: PackagingType
    packaging_details: Optional[str] = None
    temperature_controlled: bool = False
    temperature_min: Optional[float] = None
    temperature_max: Optional[float] = None
    preferred_vehicle_types: List[VehicleType] = Field(default_factory=list)
    is_urgent: bool = False

    insurance_required: bool = False
    msds_available: bool = False
    payment_terms: Optional[str] = None
    additional_notes: Optional[str] = None

    @model_validator(mode="after")
    def check_temperature_range(self) -> "QuoteCreate":
        if (
            self.temperature_min is not None
            and self.temperature_max is not None
            and self.temperature_min > self.temperature_max
        ):
            raise ValueError("temperature_min must not exceed temperature_max")
        return self

    def to_entity_fields(self) -> dict:
        """Field values ready for the ``Quote`` entity (vehicle types as plain strings)."""
        data = self.model_dump()
        data["preferred_vehicle_types"] = [v.value for v in self.preferred_vehicle_types]
        return data


class QuoteUpdate(BaseModel):
    """Admin edits to a quote."""

    status: Optional[QuoteStatus] = None
    expires_at: Optional[datetime] = None
    additional_notes: Optional[str] = None
    bid_id: Optional[str] = None


class QuoteRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    quote_number: str
    trader_id: str
    status: QuoteStatus
    bid_id: Optional[str] = None

    cargo_name: str
    cas_number: Optional[str] = None
    quantity: float
    quantity_unit: str
    is_hazardous: bool
    hazard_class: Optional[HazardClass] = None
    un_number: Optional[str] = None
    cargo_ready_date: datetime
    estimated_delivery_date: Optional[datetime] = None

    pickup_address: str
    pickup_city: str
    pickup_state: str
    pickup_pincode: str
    pickup_contact_name: Optional[str] = None
    pickup_contact_phone: Optional[str] = None
    delivery_address: str
    delivery_city: str
    delivery_state: str
    delivery_pincode: str
    delivery_contact_name: Optional[str] = None
    delivery_contact_phone: Optional[str] = None

    packaging_type: PackagingType
    packaging_details: Optional[str] = None
    temperature_controlled: bool
    temperature_min: Optional[float] = None
    temperature_max: Optional[float] = None
    preferred_vehicle_types: List[str] = Field(default_factory=list)
    is_urgent: bool
    insurance_required: bool
    msds_available: bool
    payment_terms: Optional[str] = None
    additional_notes: Optional[str] = None

    expires_at: Optional[datetime] = None
    submitted_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class QuoteCreateResponse(BaseModel):
    quote: QuoteRead
    matched_partners: int
    message: str = "Freight request created successfully"


class QuoteListResponse(BaseModel):
    quotes: List[QuoteRead]
    total: int
    limit: int
    offset: int


class PaginationMeta(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int
    has_more: bool


class QuotePage(BaseModel):
    data: List[QuoteRead]
    pagination: PaginationMeta


class QuoteTimerRead(BaseModel):
    quote_id: str
    status: QuoteStatus
    expires_at: Optional[datetime] = None
    remaining_minutes: int
    has_expired: bool


class QuoteTimerExtend(BaseModel):
    additional_minutes: int = Field(gt=0, le=24 * 60)


class MatchedPartnerRead(BaseModel):
    partner_id: str
    email: str
    company_name: Optional[str] = None
    subscription_tier: str
