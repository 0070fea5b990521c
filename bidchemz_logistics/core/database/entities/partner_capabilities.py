"""
Partner capability entity models.

A capability row describes what a logistics partner can carry and where. The
matching service reads it to decide which partners see a new quote.
"""

from __future__ import annotations

from datetime import datetime
from typing import List

from sqlmodel import JSON, Field

from bidchemz_logistics.core.models.domain.enums import SubscriptionTier

from ..base import Base, UTCDateTime, new_id, utc_now


class PartnerCapability(Base, table=True):
    """Entity for a partner's service coverage.

    List columns hold enum values as plain strings (hazard classes, state
    names, vehicle and packaging types).

    Table: partner_capabilities
    """

    __tablename__ = "partner_capabilities"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    user_id: str = Field(foreign_key="users.id", max_length=64, unique=True, index=True)

    dg_classes: List[str] = Field(default_factory=list, sa_type=JSON)
    service_states: List[str] = Field(default_factory=list, sa_type=JSON)
    fleet_types: List[str] = Field(default_factory=list, sa_type=JSON)
    packaging_capabilities: List[str] = Field(default_factory=list, sa_type=JSON)
    temperature_controlled: bool = Field(default=False)
    fleet_size: int = Field(default=0, ge=0)
    subscription_tier: SubscriptionTier = Field(default=SubscriptionTier.FREE)

    created_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now}, sa_type=UTCDateTime)

    def __repr__(self) -> str:
        return f"PartnerCapability(user_id={self.user_id}, tier={self.subscription_tier})"
