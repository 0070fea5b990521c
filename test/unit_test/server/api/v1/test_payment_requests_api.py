"""API tests for offline wallet top-up requests."""

import pytest

from bidchemz_logistics.core.models.domain.enums import UserRole

TOP_UP = {"amount": 10000, "payment_method": "UPI", "reference_number": "UPI-4471-2209"}


@pytest.fixture
def people(make_user, make_partner):
    async def _build():
        return await make_partner(balance=500.0), await make_user(UserRole.ADMIN)

    return _build


async def test_partner_files_request(client, people, auth_headers):
    partner, _ = await people()

    response = await client.post("/api/v1/payment-requests", json=TOP_UP, headers=auth_headers(partner))

    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "PENDING"
    assert body["user_id"] == partner.id
    assert body["reviewed_by"] is None


async def test_invalid_request_body(client, people, auth_headers):
    partner, _ = await people()

    zero = await client.post("/api/v1/payment-requests", json={**TOP_UP, "amount": 0}, headers=auth_headers(partner))
    no_method = await client.post("/api/v1/payment-requests", json={"amount": 100}, headers=auth_headers(partner))

    assert zero.status_code == 400
    assert no_method.status_code == 400


async def test_admin_approval_credits_wallet(client, people, auth_headers):
    partner, admin = await people()
    request_id = (await client.post("/api/v1/payment-requests", json=TOP_UP, headers=auth_headers(partner))).json()[
        "id"
    ]

    reviewed = await client.put(
        f"/api/v1/payment-requests/{request_id}",
        json={"status": "APPROVED", "review_notes": "Matched bank statement"},
        headers=auth_headers(admin),
    )
    wallet = await client.get("/api/v1/wallet", headers=auth_headers(partner))

    assert reviewed.status_code == 200
    assert reviewed.json()["status"] == "APPROVED"
    assert reviewed.json()["reviewed_by"] == admin.id
    assert wallet.json()["wallet"]["balance"] == 10500.0

    again = await client.put(
        f"/api/v1/payment-requests/{request_id}", json={"status": "REJECTED"}, headers=auth_headers(admin)
    )
    assert again.status_code == 400
    assert again.json()["detail"] == "Payment request has already been reviewed"


async def test_pending_is_not_a_review_outcome(client, people, auth_headers):
    partner, admin = await people()
    request_id = (await client.post("/api/v1/payment-requests", json=TOP_UP, headers=auth_headers(partner))).json()[
        "id"
    ]

    response = await client.put(
        f"/api/v1/payment-requests/{request_id}", json={"status": "PENDING"}, headers=auth_headers(admin)
    )

    assert response.status_code == 400


async def test_partners_cannot_review(client, people, auth_headers):
    partner, _ = await people()
    request_id = (await client.post("/api/v1/payment-requests", json=TOP_UP, headers=auth_headers(partner))).json()[
        "id"
    ]

    response = await client.put(
        f"/api/v1/payment-requests/{request_id}", json={"status": "APPROVED"}, headers=auth_headers(partner)
    )

    assert response.status_code == 403


async def test_visibility(client, people, make_partner, auth_headers):
    partner, admin = await people()
    other = await make_partner()
    request_id = (await client.post("/api/v1/payment-requests", json=TOP_UP, headers=auth_headers(partner))).json()[
        "id"
    ]

    assert len((await client.get("/api/v1/payment-requests", headers=auth_headers(partner))).json()) == 1
    assert (await client.get("/api/v1/payment-requests", headers=auth_headers(other))).json() == []
    assert len((await client.get("/api/v1/payment-requests", headers=auth_headers(admin))).json()) == 1
    assert (
        await client.get(f"/api/v1/payment-requests/{request_id}", headers=auth_headers(other))
    ).status_code == 403
    assert (await client.get("/api/v1/payment-requests/missing", headers=auth_headers(admin))).status_code == 404
