"""Partner capability and activity I/O models."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from bidchemz_logistics.core.models.domain.enums import HazardClass, PackagingType, SubscriptionTier, VehicleType

from .offers import OfferRead
from .shipments import ShipmentRead
from .wallet import LeadTransactionRead


class PartnerCapabilityUpdate(BaseModel):
    """What a partner can carry and where; replaces the stored capability."""

    dg_classes: List[HazardClass] = Field(default_factory=list)
    service_states: List[str] = Field(default_factory=list)
    fleet_types: List[VehicleType] = Field(default_factory=list)
    packaging_capabilities: List[PackagingType] = Field(default_factory=list)
    temperature_controlled: bool = False
    fleet_size: int = Field(default=0, ge=0)

    def to_entity_fields(self) -> dict:
        """Enum members flattened to the plain strings stored in the JSON columns."""
        return {
            "dg_classes": [c.value for c in self.dg_classes],
            "service_states": [s.strip() for s in self.service_states if s.strip()],
            "fleet_types": [v.value for v in self.fleet_types],
            "packaging_capabilities": [p.value for p in self.packaging_capabilities],
            "temperature_controlled": self.temperature_controlled,
            "fleet_size": self.fleet_size,
        }


class PartnerCapabilityRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    dg_classes: List[str]
    service_states: List[str]
    fleet_types: List[str]
    packaging_capabilities: List[str]
    temperature_controlled: bool
    fleet_size: int
    subscription_tier: SubscriptionTier
    updated_at: datetime


class PartnerActivity(BaseModel):
    offers: List[OfferRead]
    shipments: List[ShipmentRead]
    transactions: List[LeadTransactionRead]
    wallet_balance: Optional[float] = None
