"""
Lead pricing calculator.

The fee a partner pays to bid on a quote is::

    base * hazard * distance * quantity * vehicle * urgency * tier

rounded half-up to two decimals. The multipliers come from the newest active
``PricingConfig`` row, or from ``FALLBACK_PRICING`` when none exists. This is
the only place lead fees are computed; offer submission, the cost preview and
offer selection all call into it.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from bidchemz_logistics.core.database.entities.pricing_configs import PricingConfig
from bidchemz_logistics.core.database.entities.quotes import Quote
from bidchemz_logistics.core.logging_config import get_logger
from bidchemz_logistics.core.models.domain.enums import LeadType, SubscriptionTier

logger = get_logger(__name__)

NON_HAZARDOUS = "NON_HAZARDOUS"

SAME_STATE = "SAME_STATE"
SHORT = "SHORT"
MEDIUM = "MEDIUM"
LONG = "LONG"

# Known state pairs; lookups try both directions and default to MEDIUM.
STATE_DISTANCES: Dict[str, Dict[str, str]] = {
    "Maharashtra": {
        "Gujarat": SHORT,
        "Karnataka": SHORT,
        "Goa": SHORT,
        "Delhi": MEDIUM,
        "Tamil Nadu": LONG,
        "West Bengal": LONG,
    },
    "Gujarat": {
        "Maharashtra": SHORT,
        "Rajasthan": SHORT,
        "Delhi": MEDIUM,
        "Karnataka": MEDIUM,
    },
    "Karnataka": {
        "Maharashtra": SHORT,
        "Goa": SHORT,
        "Tamil Nadu": SHORT,
        "Kerala": SHORT,
        "Andhra Pradesh": SHORT,
    },
    "Delhi": {
        "Haryana": SHORT,
        "Uttar Pradesh": SHORT,
        "Punjab": SHORT,
        "Rajasthan": SHORT,
        "Maharashtra": MEDIUM,
        "Gujarat": MEDIUM,
    },
}

# Used when the distance table lacks the resolved class
DEFAULT_DISTANCE_MULTIPLIER = 1.3


@dataclass(frozen=True)
class QuantityRange:
    """Half-open quantity band ``[minimum, maximum)``; ``maximum=None`` is unbounded."""

    minimum: float
    maximum: Optional[float]
    multiplier: float

    def contains(self, quantity: float) -> bool:
        return quantity >= self.minimum and (self.maximum is None or quantity < self.maximum)

    def to_dict(self) -> Dict[str, Any]:
        return {"min": self.minimum, "max": self.maximum, "multiplier": self.multiplier}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "QuantityRange":
        maximum = data.get("max")
        return cls(
            minimum=float(data.get("min", 0)),
            maximum=None if maximum is None else float(maximum),
            multiplier=float(data["multiplier"]),
        )


@dataclass(frozen=True)
class PricingTable:
    """Every input of the lead-fee formula except the quote itself."""

    base_lead_cost: float
    hazard: Mapping[str, float]
    distance: Mapping[str, float]
    quantity_ranges: Tuple[QuantityRange, ...]
    vehicle: Mapping[str, float]
    urgency: float
    tier: Mapping[str, float]

    @classmethod
    def from_config(cls, config: PricingConfig) -> "PricingTable":
        ranges = tuple(QuantityRange.from_dict(r) for r in config.quantity_ranges or [])
        return cls(
            base_lead_cost=config.base_lead_cost,
            hazard={**FALLBACK_PRICING.hazard, **(config.hazard_multipliers or {})},
            distance={**FALLBACK_PRICING.distance, **(config.distance_multipliers or {})},
            quantity_ranges=ranges or FALLBACK_PRICING.quantity_ranges,
            vehicle={**FALLBACK_PRICING.vehicle, **(config.vehicle_multipliers or {})},
            urgency=config.urgency_multiplier,
            tier={**FALLBACK_PRICING.tier, **(config.tier_multipliers or {})},
        )

    def to_config(self, created_by: Optional[str] = None) -> PricingConfig:
        """Build an (unsaved) active ``PricingConfig`` row from this table."""
        return PricingConfig(
            is_active=True,
            base_lead_cost=self.base_lead_cost,
            hazard_multipliers=dict(self.hazard),
            distance_multipliers=dict(self.distance),
            quantity_ranges=[r.to_dict() for r in self.quantity_ranges],
            vehicle_multipliers=dict(self.vehicle),
            urgency_multiplier=self.urgency,
            tier_multipliers=dict(self.tier),
            created_by=created_by,
        )


FALLBACK_PRICING = PricingTable(
    base_lead_cost=500.0,
    hazard={
        NON_HAZARDOUS: 1.0,
        "CLASS_1": 2.5,
        "CLASS_2": 1.8,
        "CLASS_3": 1.6,
        "CLASS_4": 1.5,
        "CLASS_5": 1.7,
        "CLASS_6": 1.9,
        "CLASS_7": 2.0,
        "CLASS_8": 1.6,
        "CLASS_9": 1.3,
    },
    distance={SAME_STATE: 1.0, SHORT: 1.3, MEDIUM: 1.6, LONG: 2.0},
    quantity_ranges=(
        QuantityRange(0, 10, 1.5),
        QuantityRange(10, 50, 1.2),
        QuantityRange(50, 100, 1.0),
        QuantityRange(100, 500, 0.9),
        QuantityRange(500, None, 0.8),
    ),
    vehicle={
        "TRUCK": 1.0,
        "CONTAINER": 1.1,
        "TANKER": 1.3,
        "ISO_TANK": 1.5,
        "FLATBED": 1.1,
        "REFRIGERATED": 1.4,
    },
    urgency=1.3,
    tier={"PREMIUM": 0.7, "STANDARD": 0.85, "FREE": 1.0},
)


@dataclass(frozen=True)
class PricingParams:
    """The quote and partner attributes the lead fee depends on."""

    hazard_class: Optional[str]
    quantity: float
    pickup_state: str
    delivery_state: str
    vehicle_types: Sequence[str] = ()
    subscription_tier: str = SubscriptionTier.FREE.value
    is_urgent: bool = False


@dataclass
class PricingBreakdown:
    base_price: float
    hazard_multiplier: float
    distance_multiplier: float
    quantity_multiplier: float
    vehicle_multiplier: float
    urgency_multiplier: float
    tier_discount: float
    final_cost: float
    breakdown: List[str] = field(default_factory=list)


def _value(member: Any) -> Optional[str]:
    if member is None:
        return None
    return getattr(member, "value", member)


def _normalise_state(state: str) -> str:
    return " ".join(state.split()).title()


def _round_half_up(amount: float) -> float:
    return math.floor(amount * 100 + 0.5) / 100


def distance_class(pickup_state: str, delivery_state: str) -> str:
    """Classify a route as SAME_STATE, SHORT, MEDIUM or LONG."""
    pickup = _normalise_state(pickup_state)
    delivery = _normalise_state(delivery_state)
    if pickup == delivery:
        return SAME_STATE
    return STATE_DISTANCES.get(pickup, {}).get(delivery) or STATE_DISTANCES.get(delivery, {}).get(pickup) or MEDIUM


def hazard_multiplier(hazard_class: Optional[str], table: PricingTable = FALLBACK_PRICING) -> float:
    return table.hazard.get(_value(hazard_class) or NON_HAZARDOUS, 1.0)


def distance_multiplier(pickup_state: str, delivery_state: str, table: PricingTable = FALLBACK_PRICING) -> float:
    return table.distance.get(distance_class(pickup_state, delivery_state), DEFAULT_DISTANCE_MULTIPLIER)


def quantity_multiplier(quantity: float, table: PricingTable = FALLBACK_PRICING) -> float:
    for band in table.quantity_ranges:
        if band.contains(quantity):
            return band.multiplier
    return 1.0


def vehicle_multiplier(vehicle_types: Sequence[str], table: PricingTable = FALLBACK_PRICING) -> float:
    """Highest multiplier among the requested vehicles; 1.0 when none were requested."""
    if not vehicle_types:
        return 1.0
    return max(table.vehicle.get(_value(v), 1.0) for v in vehicle_types)


def tier_multiplier(tier: str, table: PricingTable = FALLBACK_PRICING) -> float:
    return table.tier.get(_value(tier), 1.0)


def calculate_lead_cost(params: PricingParams, table: PricingTable = FALLBACK_PRICING) -> float:
    """Compute the lead fee for ``params`` against ``table``."""
    return get_pricing_breakdown(params, table).final_cost


def get_pricing_breakdown(params: PricingParams, table: PricingTable = FALLBACK_PRICING) -> PricingBreakdown:
    """Compute the lead fee together with every factor and a readable explanation."""
    hazard = hazard_multiplier(params.hazard_class, table)
    distance = distance_multiplier(params.pickup_state, params.delivery_state, table)
    quantity = quantity_multiplier(params.quantity, table)
    vehicle = vehicle_multiplier(params.vehicle_types, table)
    urgency = table.urgency if params.is_urgent else 1.0
    tier = tier_multiplier(params.subscription_tier, table)

    cost = table.base_lead_cost * hazard * distance * quantity * vehicle * urgency * tier
    final_cost = _round_half_up(cost)

    lines = [
        f"Base lead cost: ₹{table.base_lead_cost:.2f}",
        f"Hazard ({_value(params.hazard_class) or NON_HAZARDOUS}): x{hazard}",
        f"Distance ({distance_class(params.pickup_state, params.delivery_state)}): x{distance}",
        f"Quantity ({params.quantity}): x{quantity}",
        f"Vehicle: x{vehicle}",
    ]
    if params.is_urgent:
        lines.append(f"Urgent delivery: x{urgency}")
    lines.append(f"{_value(params.subscription_tier)} tier: x{tier}")
    lines.append(f"Final lead cost: ₹{final_cost:.2f}")

    return PricingBreakdown(
        base_price=table.base_lead_cost,
        hazard_multiplier=hazard,
        distance_multiplier=distance,
        quantity_multiplier=quantity,
        vehicle_multiplier=vehicle,
        urgency_multiplier=urgency,
        tier_discount=tier,
        final_cost=final_cost,
        breakdown=lines,
    )


def lead_type_for_tier(tier: Optional[str]) -> LeadType:
    """Premium partners buy exclusive leads; everybody else buys shared ones."""
    return LeadType.EXCLUSIVE if _value(tier) == SubscriptionTier.PREMIUM.value else LeadType.SHARED


def params_for_quote(quote: Quote, tier: Optional[str] = None) -> PricingParams:
    """Pricing inputs for ``quote`` as seen by a partner on ``tier`` (FREE when unknown)."""
    return PricingParams(
        hazard_class=_value(quote.hazard_class) if quote.is_hazardous else None,
        quantity=quote.quantity,
        pickup_state=quote.pickup_state,
        delivery_state=quote.delivery_state,
        vehicle_types=tuple(quote.preferred_vehicle_types or ()),
        subscription_tier=_value(tier) or SubscriptionTier.FREE.value,
        is_urgent=quote.is_urgent,
    )


async def get_active_pricing_config(session: AsyncSession) -> Optional[PricingConfig]:
    stmt = (
        select(PricingConfig)
        .where(PricingConfig.is_active == True)  # noqa: E712
        .order_by(PricingConfig.created_at.desc())
        .limit(1)
    )
    result = await session.execute(stmt)
    return result.scalars().first()


async def get_active_pricing(session: AsyncSession) -> PricingTable:
    """Load the newest active pricing table, falling back to the built-in defaults."""
    config = await get_active_pricing_config(session)
    if config is None:
        logger.warning("No active pricing config found, using fallback pricing")
        return FALLBACK_PRICING
    return PricingTable.from_config(config)


async def lead_cost_for_quote(session: AsyncSession, quote: Quote, tier: Optional[str] = None) -> PricingBreakdown:
    """Price ``quote`` for a partner on ``tier`` using the active pricing table."""
    table = await get_active_pricing(session)
    return get_pricing_breakdown(params_for_quote(quote, tier), table)


async def publish_pricing(
    session: AsyncSession, table: PricingTable, created_by: Optional[str] = None
) -> PricingConfig:
    """Deactivate every pricing row and store ``table`` as the new active one."""
    await session.execute(
        update(PricingConfig)
        .where(PricingConfig.is_active == True)  # noqa: E712
        .values(is_active=False)
        .execution_options(synchronize_session="fetch")
    )
    config = table.to_config(created_by=created_by)
    session.add(config)
    await session.flush()
    logger.info(f"Published pricing config {config.id} (base ₹{table.base_lead_cost:.2f})")
    return config
