"""Admin dashboard I/O models."""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from bidchemz_logistics.core.models.domain.enums import SubscriptionTier


class PlatformStats(BaseModel):
    users_by_role: Dict[str, int]
    quotes_by_status: Dict[str, int]
    total_quotes: int
    total_offers: int
    total_shipments: int
    gross_merchandise_value: float = Field(description="Sum of accepted offer prices")
    lead_revenue: float = Field(description="Sum of lead fees debited")
    pending_payment_requests: int


class AdminUserUpdate(BaseModel):
    is_active: Optional[bool] = None
    is_verified: Optional[bool] = None
    subscription_tier: Optional[SubscriptionTier] = Field(
        default=None, description="Only applies to logistics partners"
    )


class QuantityRangeModel(BaseModel):
    min: float = Field(ge=0)
    max: Optional[float] = None
    multiplier: float = Field(gt=0)


class PricingConfigUpdate(BaseModel):
    """A new pricing table; replaces the active one."""

    base_lead_cost: float = Field(gt=0)
    hazard_multipliers: Dict[str, float] = Field(default_factory=dict)
    distance_multipliers: Dict[str, float] = Field(default_factory=dict)
    quantity_ranges: List[QuantityRangeModel] = Field(default_factory=list)
    vehicle_multipliers: Dict[str, float] = Field(default_factory=dict)
    urgency_multiplier: float = Field(default=1.3, gt=0)
    tier_multipliers: Dict[str, float] = Field(default_factory=dict)


class PricingConfigRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: Optional[str] = None
    is_active: bool = True
    base_lead_cost: float
    hazard_multipliers: Dict[str, float]
    distance_multipliers: Dict[str, float]
    quantity_ranges: List[QuantityRangeModel]
    vehicle_multipliers: Dict[str, float]
    urgency_multiplier: float
    tier_multipliers: Dict[str, float]
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
