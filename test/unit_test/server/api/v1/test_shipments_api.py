"""API tests for shipment tracking."""

from bidchemz_logistics.core.models.domain.enums import UserRole


async def test_parties_see_the_shipment(client, booked, make_user, make_partner, auth_headers):
    trader, partner, shipment = booked
    outsider_trader, outsider_partner = await make_user(), await make_partner()
    url = f"/api/v1/shipments/{shipment['id']}"

    assert (await client.get(url, headers=auth_headers(trader))).status_code == 200
    assert (await client.get(url, headers=auth_headers(partner))).status_code == 200
    assert (await client.get(url, headers=auth_headers(outsider_trader))).status_code == 403
    assert (await client.get(url, headers=auth_headers(outsider_partner))).status_code == 403


async def test_listing_scoped_by_role(client, booked, make_user, auth_headers):
    trader, partner, shipment = booked
    outsider = await make_user()

    mine = (await client.get("/api/v1/shipments", headers=auth_headers(trader))).json()
    carried = (await client.get("/api/v1/shipments", headers=auth_headers(partner))).json()
    none = (await client.get("/api/v1/shipments", headers=auth_headers(outsider))).json()

    assert [s["id"] for s in mine["shipments"]] == [shipment["id"]]
    assert carried["total"] == 1
    assert none == {"shipments": [], "total": 0}


async def test_partner_posts_tracking_update(client, booked, auth_headers):
    trader, partner, shipment = booked
    url = f"/api/v1/shipments/{shipment['id']}"

    response = await client.patch(
        url, json={"status": "IN_TRANSIT", "current_location": "Vapi checkpost"}, headers=auth_headers(partner)
    )

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "IN_TRANSIT"
    assert body["current_location"] == "Vapi checkpost"
    assert body["actual_pickup_date"] is not None
    assert body["tracking_events"][-1]["description"] == "Status updated to IN_TRANSIT"

    tracking = (await client.get(f"{url}/track", headers=auth_headers(trader))).json()
    assert tracking["status"] == "IN_TRANSIT"
    assert tracking["tracking_events"][-1]["location"] == "Vapi checkpost"


async def test_trader_cannot_post_updates(client, booked, auth_headers):
    trader, _, shipment = booked

    response = await client.patch(
        f"/api/v1/shipments/{shipment['id']}", json={"status": "DELIVERED"}, headers=auth_headers(trader)
    )

    assert response.status_code == 403
    assert response.json()["detail"] == "You can only update your own shipments"


async def test_review_after_delivery(client, booked, auth_headers):
    trader, partner, shipment = booked
    url = f"/api/v1/shipments/{shipment['id']}"

    early = await client.post(f"{url}/review", json={"rating": 5}, headers=auth_headers(trader))
    assert early.status_code == 400
    assert early.json()["detail"] == "Only delivered shipments can be reviewed"

    await client.patch(url, json={"status": "DELIVERED"}, headers=auth_headers(partner))
    out_of_range = await client.post(f"{url}/review", json={"rating": 6}, headers=auth_headers(trader))
    reviewed = await client.post(
        f"{url}/review", json={"rating": 4, "review": "On time, seals intact"}, headers=auth_headers(trader)
    )

    assert out_of_range.status_code == 400
    assert reviewed.json()["rating"] == 4
    assert reviewed.json()["review"] == "On time, seals intact"


async def test_admin_deletes_shipment(client, booked, make_user, auth_headers):
    trader, _, shipment = booked
    admin = await make_user(UserRole.ADMIN)
    url = f"/api/v1/shipments/{shipment['id']}"

    assert (await client.delete(url, headers=auth_headers(trader))).status_code == 403
    assert (await client.delete(url, headers=auth_headers(admin))).status_code == 200
    assert (await client.get(url, headers=auth_headers(admin))).status_code == 404
