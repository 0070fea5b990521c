"""API tests for partner offers and lead-cost endpoints."""

import pytest
from sqlmodel import select

from bidchemz_logistics.core.database.entities.offers import Offer
from bidchemz_logistics.core.models.domain.enums import SubscriptionTier, UserRole

FREE_TIER_LEAD_COST = 1622.4


@pytest.fixture
def marketplace(make_user, make_partner, make_quote):
    async def _build(**partner_kwargs):
        trader = await make_user()
        partner = await make_partner(**partner_kwargs)
        quote = await make_quote(trader)
        return trader, partner, quote

    return _build


async def _submit(client, auth_headers, partner, quote, offer_payload, **overrides):
    return await client.post(
        "/api/v1/offers", json={**offer_payload, "quote_id": quote.id, **overrides}, headers=auth_headers(partner)
    )


async def test_submit_charges_lead_fee(client, marketplace, auth_headers, offer_payload):
    _, partner, quote = await marketplace()

    response = await _submit(client, auth_headers, partner, quote, offer_payload)

    assert response.status_code == 201
    body = response.json()
    assert body["lead_cost_deducted"] == FREE_TIER_LEAD_COST
    assert body["new_wallet_balance"] == pytest.approx(5000.0 - FREE_TIER_LEAD_COST)
    assert body["offer"]["status"] == "PENDING"
    assert body["offer"]["remarks"] == "Tanker with ADR-trained driver"


async def test_second_offer_conflicts(client, marketplace, auth_headers, offer_payload):
    _, partner, quote = await marketplace()
    await _submit(client, auth_headers, partner, quote, offer_payload)

    response = await _submit(client, auth_headers, partner, quote, offer_payload)

    assert response.status_code == 409


async def test_insufficient_balance_reports_amounts(client, session, marketplace, auth_headers, offer_payload):
    _, partner, quote = await marketplace(balance=100.0)
    partner_id, quote_id = partner.id, quote.id
    headers = auth_headers(partner)

    response = await client.post("/api/v1/offers", json={**offer_payload, "quote_id": quote_id}, headers=headers)

    assert response.status_code == 400
    assert response.json() == {
        "detail": "Insufficient wallet balance",
        "required": FREE_TIER_LEAD_COST,
        "available": 100.0,
    }
    offers = (await session.execute(select(Offer).where(Offer.partner_id == partner_id))).scalars().all()
    assert offers == []


async def test_traders_cannot_submit(client, marketplace, auth_headers, offer_payload):
    trader, _, quote = await marketplace()
    response = await _submit(client, auth_headers, trader, quote, offer_payload)
    assert response.status_code == 403


async def test_invalid_offer_body(client, marketplace, auth_headers, offer_payload):
    _, partner, quote = await marketplace()
    response = await _submit(client, auth_headers, partner, quote, offer_payload, price=-5)
    assert response.status_code == 400


async def test_listing_is_scoped_by_role(client, make_user, make_partner, make_quote, auth_headers, offer_payload):
    trader, other_trader = await make_user(), await make_user()
    first, second = await make_partner(), await make_partner()
    quote = await make_quote(trader)
    other_quote = await make_quote(other_trader)
    await _submit(client, auth_headers, first, quote, offer_payload)
    await _submit(client, auth_headers, second, quote, offer_payload)
    await _submit(client, auth_headers, first, other_quote, offer_payload)
    admin = await make_user(UserRole.ADMIN)

    async def count(user, **params):
        response = await client.get("/api/v1/offers", params=params, headers=auth_headers(user))
        return len(response.json()["offers"])

    assert await count(trader) == 2
    assert await count(other_trader) == 1
    assert await count(first) == 2
    assert await count(first, quote_id=quote.id) == 1
    assert await count(admin) == 3


async def test_get_offer_visibility(client, make_user, marketplace, make_partner, auth_headers, offer_payload):
    trader, partner, quote = await marketplace()
    offer_id = (await _submit(client, auth_headers, partner, quote, offer_payload)).json()["offer"]["id"]
    rival = await make_partner()
    stranger = await make_user()

    assert (await client.get(f"/api/v1/offers/{offer_id}", headers=auth_headers(trader))).status_code == 200
    assert (await client.get(f"/api/v1/offers/{offer_id}", headers=auth_headers(partner))).status_code == 200
    assert (await client.get(f"/api/v1/offers/{offer_id}", headers=auth_headers(rival))).status_code == 403
    assert (await client.get(f"/api/v1/offers/{offer_id}", headers=auth_headers(stranger))).status_code == 403
    assert (await client.get("/api/v1/offers/missing", headers=auth_headers(trader))).status_code == 404


async def test_partner_edits_own_offer(client, marketplace, make_partner, auth_headers, offer_payload):
    _, partner, quote = await marketplace()
    offer_id = (await _submit(client, auth_headers, partner, quote, offer_payload)).json()["offer"]["id"]
    rival = await make_partner()

    edited = await client.patch(f"/api/v1/offers/{offer_id}", json={"price": 39500}, headers=auth_headers(partner))
    status_change = await client.patch(
        f"/api/v1/offers/{offer_id}", json={"status": "ACCEPTED"}, headers=auth_headers(partner)
    )
    foreign = await client.patch(f"/api/v1/offers/{offer_id}", json={"price": 1}, headers=auth_headers(rival))

    assert edited.json()["price"] == 39500
    assert status_change.status_code == 403
    assert foreign.status_code == 403


async def test_select_books_shipment_without_second_charge(
    client, marketplace, make_partner, auth_headers, offer_payload
):
    trader, partner, quote = await marketplace()
    rival = await make_partner()
    offer_id = (await _submit(client, auth_headers, partner, quote, offer_payload)).json()["offer"]["id"]
    rival_offer_id = (await _submit(client, auth_headers, rival, quote, offer_payload)).json()["offer"]["id"]

    response = await client.post(f"/api/v1/offers/{offer_id}/select", headers=auth_headers(trader))

    assert response.status_code == 200
    body = response.json()
    assert body["lead_fee_charged"] is False
    assert body["offer"]["status"] == "ACCEPTED"
    assert body["offer"]["is_selected"] is True
    assert body["shipment"]["offer_id"] == offer_id
    assert body["shipment"]["status"] == "BOOKED"

    rival_offer = await client.get(f"/api/v1/offers/{rival_offer_id}", headers=auth_headers(rival))
    assert rival_offer.json()["status"] == "REJECTED"

    again = await client.post(f"/api/v1/offers/{offer_id}/select", headers=auth_headers(trader))
    assert again.status_code == 400
    assert again.json()["detail"] == "Offer already processed"


async def test_select_on_foreign_quote_is_denied(client, make_user, marketplace, auth_headers, offer_payload):
    _, partner, quote = await marketplace()
    offer_id = (await _submit(client, auth_headers, partner, quote, offer_payload)).json()["offer"]["id"]
    stranger = await make_user()

    response = await client.post(f"/api/v1/offers/{offer_id}/select", headers=auth_headers(stranger))

    assert response.status_code == 403


async def test_withdraw_and_admin_delete(client, make_user, marketplace, auth_headers, offer_payload):
    trader, partner, quote = await marketplace()
    offer_id = (await _submit(client, auth_headers, partner, quote, offer_payload)).json()["offer"]["id"]
    admin = await make_user(UserRole.ADMIN)

    trader_attempt = await client.delete(f"/api/v1/offers/{offer_id}", headers=auth_headers(trader))
    withdrawn = await client.delete(f"/api/v1/offers/{offer_id}", headers=auth_headers(partner))
    deleted = await client.delete(f"/api/v1/offers/{offer_id}", headers=auth_headers(admin))

    assert trader_attempt.status_code == 403
    assert withdrawn.json()["message"] == "Offer withdrawn successfully"
    assert deleted.json()["message"] == "Offer deleted successfully"
    assert (await client.get(f"/api/v1/offers/{offer_id}", headers=auth_headers(admin))).status_code == 404


async def test_lead_cost_preview(client, marketplace, auth_headers):
    _, partner, quote = await marketplace(balance=1000.0)

    response = await client.post("/api/v1/offers/cost", json={"quote_id": quote.id}, headers=auth_headers(partner))

    assert response.json() == {
        "quote_id": quote.id,
        "lead_cost": FREE_TIER_LEAD_COST,
        "wallet_balance": 1000.0,
        "has_insufficient_balance": True,
        "subscription_tier": "FREE",
    }


async def test_calculate_lead_cost_breakdown(client, marketplace, auth_headers):
    _, partner, quote = await marketplace(tier=SubscriptionTier.STANDARD)

    response = await client.post(
        "/api/v1/calculate-lead-cost", json={"quote_id": quote.id}, headers=auth_headers(partner)
    )

    body = response.json()
    assert response.status_code == 200
    assert body["final_cost"] == 1379.04
    assert body["lead_type"] == "SHARED"
    assert body["subscription_tier"] == "STANDARD"
    assert body["breakdown"][-1] == "Final lead cost: ₹1379.04"


async def test_calculate_lead_cost_unknown_quote(client, make_partner, auth_headers):
    partner = await make_partner()
    response = await client.post(
        "/api/v1/calculate-lead-cost", json={"quote_id": "missing"}, headers=auth_headers(partner)
    )
    assert response.status_code == 404
