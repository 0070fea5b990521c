"""Request payloads shared by the API tests."""

from __future__ import annotations

from datetime import timedelta

import pytest
import pytest_asyncio

from bidchemz_logistics.core.database import utc_now


@pytest.fixture
def quote_payload() -> dict:
    """A CLASS_3 shipment the default partner fixture can carry."""
    return {
        "cargo_name": "Toluene",
        "cas_number": "108-88-3",
        "quantity": 18,
        "quantity_unit": "MT",
        "is_hazardous": True,
        "hazard_class": "CLASS_3",
        "un_number": "UN1294",
        "cargo_ready_date": (utc_now() + timedelta(days=3)).isoformat(),
        "pickup_address": "Plot 4, Dahej SEZ",
        "pickup_city": "Dahej",
        "pickup_state": "Gujarat",
        "pickup_pincode": "392130",
        "delivery_address": "TTC Industrial Area, Turbhe",
        "delivery_city": "Navi Mumbai",
        "delivery_state": "Maharashtra",
        "delivery_pincode": "400705",
        "packaging_type": "DRUMS",
        "preferred_vehicle_types": ["TANKER"],
    }


@pytest.fixture
def offer_payload() -> dict:
    now = utc_now()
    return {
        "price": 42000,
        "transit_days": 2,
        "offer_valid_until": (now + timedelta(days=1)).isoformat(),
        "pickup_available_from": (now + timedelta(days=3)).isoformat(),
        "remarks": "Tanker with ADR-trained driver",
    }


@pytest_asyncio.fixture
async def booked(client, make_user, make_partner, make_quote, auth_headers, offer_payload):
    """A trader and partner with a selected offer; yields ``(trader, partner, shipment_json)``."""
    trader = await make_user()
    partner = await make_partner()
    quote = await make_quote(trader)
    submitted = await client.post(
        "/api/v1/offers", json={**offer_payload, "quote_id": quote.id}, headers=auth_headers(partner)
    )
    offer_id = submitted.json()["offer"]["id"]
    selected = await client.post(f"/api/v1/offers/{offer_id}/select", headers=auth_headers(trader))
    return trader, partner, selected.json()["shipment"]
