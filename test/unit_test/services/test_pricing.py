"""Unit tests for the lead pricing calculator."""

import pytest

from bidchemz_logistics.core.models.domain.enums import LeadType
from bidchemz_logistics.services import pricing
from bidchemz_logistics.services.pricing import (
    FALLBACK_PRICING,
    PricingParams,
    PricingTable,
    QuantityRange,
    calculate_lead_cost,
    distance_class,
    get_pricing_breakdown,
)


def _params(**overrides) -> PricingParams:
    fields = dict(
        hazard_class="CLASS_3",
        quantity=20,
        pickup_state="Maharashtra",
        delivery_state="Gujarat",
        vehicle_types=("TANKER",),
        subscription_tier="STANDARD",
        is_urgent=False,
    )
    fields.update(overrides)
    return PricingParams(**fields)


class TestDistanceClass:
    def test_same_state(self):
        assert distance_class("Gujarat", "Gujarat") == pricing.SAME_STATE

    def test_known_pair_is_symmetric(self):
        assert distance_class("Maharashtra", "Gujarat") == pricing.SHORT
        assert distance_class("Gujarat", "Maharashtra") == pricing.SHORT

    def test_pair_only_listed_in_reverse(self):
        # Only Karnataka lists Kerala
        assert distance_class("Kerala", "Karnataka") == pricing.SHORT

    def test_unknown_pair_defaults_to_medium(self):
        assert distance_class("Assam", "Bihar") == pricing.MEDIUM

    def test_state_names_are_normalised(self):
        assert distance_class("  maharashtra ", "TAMIL   NADU") == pricing.LONG


class TestMultipliers:
    @pytest.mark.parametrize(
        "quantity,expected",
        [(0, 1.5), (9.99, 1.5), (10, 1.2), (49, 1.2), (50, 1.0), (100, 0.9), (499, 0.9), (500, 0.8), (10_000, 0.8)],
    )
    def test_quantity_bands_are_half_open(self, quantity, expected):
        assert pricing.quantity_multiplier(quantity) == expected

    def test_non_hazardous_multiplier(self):
        assert pricing.hazard_multiplier(None) == 1.0

    def test_unknown_hazard_class_is_neutral(self):
        assert pricing.hazard_multiplier("CLASS_42") == 1.0

    def test_vehicle_multiplier_takes_the_highest(self):
        assert pricing.vehicle_multiplier(["TRUCK", "ISO_TANK", "TANKER"]) == 1.5

    def test_no_vehicle_preference_is_neutral(self):
        assert pricing.vehicle_multiplier([]) == 1.0

    def test_tier_discounts(self):
        assert pricing.tier_multiplier("PREMIUM") == 0.7
        assert pricing.tier_multiplier("STANDARD") == 0.85
        assert pricing.tier_multiplier("FREE") == 1.0


class TestCalculateLeadCost:
    def test_fallback_example(self):
        # 500 * 1.6 * 1.3 * 1.2 * 1.3 * 0.85
        assert calculate_lead_cost(_params()) == 1379.04

    def test_urgent_applies_urgency_multiplier(self):
        breakdown = get_pricing_breakdown(_params(is_urgent=True))
        assert breakdown.urgency_multiplier == 1.3
        assert breakdown.final_cost == round(1379.04 * 1.3, 2)

    def test_non_urgent_urgency_is_neutral(self):
        assert get_pricing_breakdown(_params()).urgency_multiplier == 1.0

    def test_plain_cargo_same_state(self):
        params = _params(
            hazard_class=None,
            quantity=75,
            pickup_state="Gujarat",
            delivery_state="Gujarat",
            vehicle_types=(),
            subscription_tier="FREE",
        )
        assert calculate_lead_cost(params) == 500.0

    def test_rounds_half_up_to_two_decimals(self):
        table = PricingTable(
            base_lead_cost=0.125,
            hazard={},
            distance={pricing.SAME_STATE: 1.0},
            quantity_ranges=(QuantityRange(0, None, 1.0),),
            vehicle={},
            urgency=1.0,
            tier={},
        )
        params = _params(hazard_class=None, pickup_state="Goa", delivery_state="Goa", vehicle_types=())
        assert calculate_lead_cost(params, table) == 0.13

    def test_breakdown_lists_every_factor(self):
        lines = get_pricing_breakdown(_params(is_urgent=True)).breakdown
        assert lines[0].startswith("Base lead cost")
        assert any("CLASS_3" in line for line in lines)
        assert any("SHORT" in line for line in lines)
        assert any("Urgent" in line for line in lines)
        assert lines[-1] == "Final lead cost: ₹1792.75"

    def test_custom_table_overrides_fallback(self):
        table = PricingTable(
            base_lead_cost=100.0,
            hazard=FALLBACK_PRICING.hazard,
            distance=FALLBACK_PRICING.distance,
            quantity_ranges=FALLBACK_PRICING.quantity_ranges,
            vehicle=FALLBACK_PRICING.vehicle,
            urgency=2.0,
            tier=FALLBACK_PRICING.tier,
        )
        assert calculate_lead_cost(_params(), table) == round(1379.04 / 5, 2)


class TestLeadType:
    def test_premium_buys_exclusive_leads(self):
        assert pricing.lead_type_for_tier("PREMIUM") == LeadType.EXCLUSIVE

    @pytest.mark.parametrize("tier", ["STANDARD", "FREE", None])
    def test_other_tiers_buy_shared_leads(self, tier):
        assert pricing.lead_type_for_tier(tier) == LeadType.SHARED


class TestActivePricing:
    async def test_falls_back_without_config(self, session):
        assert await pricing.get_active_pricing(session) is FALLBACK_PRICING

    async def test_publish_replaces_the_active_table(self, session):
        first = await pricing.publish_pricing(session, FALLBACK_PRICING, created_by="admin-1")
        custom = PricingTable.from_config(first)
        second_table = PricingTable(
            base_lead_cost=800.0,
            hazard=custom.hazard,
            distance=custom.distance,
            quantity_ranges=custom.quantity_ranges,
            vehicle=custom.vehicle,
            urgency=custom.urgency,
            tier=custom.tier,
        )
        second = await pricing.publish_pricing(session, second_table, created_by="admin-1")
        await session.commit()

        await session.refresh(first)
        assert first.is_active is False
        assert second.is_active is True
        active = await pricing.get_active_pricing(session)
        assert active.base_lead_cost == 800.0

    async def test_partial_config_falls_back_per_multiplier(self, session):
        from bidchemz_logistics.core.database.entities.pricing_configs import PricingConfig

        session.add(PricingConfig(base_lead_cost=1000.0, hazard_multipliers={"CLASS_3": 2.0}, urgency_multiplier=1.5))
        await session.commit()

        table = await pricing.get_active_pricing(session)
        assert table.base_lead_cost == 1000.0
        assert table.hazard["CLASS_3"] == 2.0
        assert table.hazard["CLASS_1"] == 2.5
        assert table.quantity_ranges == FALLBACK_PRICING.quantity_ranges

    async def test_lead_cost_for_quote_uses_quote_fields(self, session, make_user, make_quote):
        trader = await make_user()
        quote = await make_quote(trader)

        breakdown = await pricing.lead_cost_for_quote(session, quote, "STANDARD")
        assert breakdown.final_cost == 1379.04

    async def test_non_hazardous_quote_ignores_stale_hazard_class(self, session, make_user, make_quote):
        trader = await make_user()
        quote = await make_quote(trader, is_hazardous=False)

        params = pricing.params_for_quote(quote)
        assert params.hazard_class is None
        assert params.subscription_tier == "FREE"
