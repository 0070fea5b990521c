"""
Pricing configuration entity models.

Administrators publish a new row to change lead pricing; only the most recent
active row is used.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlmodel import JSON, Field

from ..base import Base, UTCDateTime, new_id, utc_now


class PricingConfig(Base, table=True):
    """Entity for lead pricing multipliers.

    ``quantity_ranges`` holds ``{"min", "max", "multiplier"}`` objects where
    ``max`` may be null for an open-ended range.

    Table: pricing_configs
    """

    __tablename__ = "pricing_configs"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    is_active: bool = Field(default=True, index=True)

    base_lead_cost: float = Field(gt=0)
    hazard_multipliers: Dict[str, float] = Field(default_factory=dict, sa_type=JSON)
    distance_multipliers: Dict[str, float] = Field(default_factory=dict, sa_type=JSON)
    quantity_ranges: List[Dict[str, Any]] = Field(default_factory=list, sa_type=JSON)
    vehicle_multipliers: Dict[str, float] = Field(default_factory=dict, sa_type=JSON)
    urgency_multiplier: float = Field(default=1.3)
    tier_multipliers: Dict[str, float] = Field(default_factory=dict, sa_type=JSON)

    created_by: Optional[str] = Field(default=None, max_length=64)
    created_at: datetime = Field(default_factory=utc_now, index=True, sa_type=UTCDateTime)
