from decimal import Decimal

from conftest import login, make_user

from consignments.extensions import db
from consignments.models import Booking, Transaction
from consignments.services import BookingService


def _create(client, fleet, **overrides):
    payload = {
        "asset_id": fleet.asset_id,
        "renter_id": fleet.renter.renter_id,
        "start_date": "2026-06-01",
        "end_date": "2026-06-08",
    }
    payload.update(overrides)
    return client.post("/api/bookings", json=payload)


def test_price_adds_cleaning_and_ten_percent_platform_fee():
    subtotal, fee, total = BookingService.price(Decimal("200"), 7, Decimal("75"))
    assert subtotal == Decimal("1400.00")
    assert fee == Decimal("140.00")
    assert total == Decimal("1615.00")


def test_price_rounds_to_cents():
    subtotal, fee, total = BookingService.price(Decimal("99.99"), 3, Decimal("0"))
    assert subtotal == Decimal("299.97")
    assert fee == Decimal("30.00")
    assert total == Decimal("329.97")


def test_create_booking_uses_asset_rates_and_records_pending_income(app, manager_client, fleet):
    response = _create(manager_client, fleet)
    assert response.status_code == 201
    booking = response.get_json()["booking"]

    assert booking["total_nights"] == 7
    assert booking["nightly_rate"] == 200.0
    assert booking["subtotal"] == 1400.0
    assert booking["cleaning_fee"] == 75.0
    assert booking["platform_fee"] == 140.0
    assert booking["total_amount"] == 1615.0
    assert booking["status"] == "inquiry"
    assert booking["owner_id"] == fleet.owner.owner_id
    assert booking["booking_number"].startswith("BK-")
    assert booking["assets"]["name"] == "2021 Winnebago View"

    with app.app_context():
        rows = Transaction.query.filter_by(booking_id=booking["id"]).all()
        assert len(rows) == 1
        assert rows[0].transaction_type == "rental_income"
        assert rows[0].status == "pending"
        assert rows[0].amount == Decimal("1615.00")
        assert rows[0].transaction_date.isoformat() == "2026-06-01"


def test_explicit_total_nights_and_rate_override_defaults(manager_client, fleet):
    response = _create(manager_client, fleet, total_nights=3, nightly_rate="150", cleaning_fee=0)
    booking = response.get_json()["booking"]
    assert booking["subtotal"] == 450.0
    assert booking["platform_fee"] == 45.0
    assert booking["total_amount"] == 495.0


def test_end_date_must_follow_start_date(manager_client, fleet):
    response = _create(manager_client, fleet, end_date="2026-06-01")
    assert response.status_code == 400


def test_unknown_asset_is_404(manager_client, fleet):
    response = _create(manager_client, fleet, asset_id=99999)
    assert response.status_code == 404
    assert response.get_json()["error"] == "Asset not found"


def test_mixed_case_completion_completes_rental_income(app, manager_client, fleet):
    booking_id = _create(manager_client, fleet).get_json()["booking"]["id"]
    response = manager_client.patch("/api/bookings", json={"id": booking_id, "status": "Completed"})
    assert response.get_json()["booking"]["status"] == "completed"
    with app.app_context():
        statuses = {row.status for row in Transaction.query.filter_by(booking_id=booking_id)}
        assert statuses == {"completed"}


def test_completing_booking_completes_rental_income(app, manager_client, fleet):
    booking_id = _create(manager_client, fleet).get_json()["booking"]["id"]

    response = manager_client.patch("/api/bookings", json={"id": str(booking_id), "status": "completed"})
    assert response.status_code == 200
    assert response.get_json()["booking"]["status"] == "completed"

    with app.app_context():
        statuses = {row.status for row in Transaction.query.filter_by(booking_id=booking_id)}
        assert statuses == {"completed"}


def test_any_status_may_follow_any_other(manager_client, fleet):
    booking_id = _create(manager_client, fleet, status="completed").get_json()["booking"]["id"]
    response = manager_client.patch("/api/bookings", json={"id": booking_id, "status": "inquiry"})
    assert response.status_code == 200
    assert response.get_json()["booking"]["status"] == "inquiry"


def test_invalid_status_rejected(manager_client, fleet):
    booking_id = _create(manager_client, fleet).get_json()["booking"]["id"]
    response = manager_client.patch("/api/bookings", json={"id": booking_id, "status": "teleported"})
    assert response.status_code == 400


def test_renter_booking_is_pinned_to_own_profile(app, renter_client, fleet):
    other = make_user(app, "other-renter@test.com", "renter")
    response = _create(renter_client, fleet, renter_id=other.renter_id, status="completed")
    assert response.status_code == 201
    booking = response.get_json()["booking"]
    assert booking["renter_id"] == fleet.renter.renter_id
    assert booking["status"] == "inquiry"


def test_renter_only_lists_own_bookings(app, manager_client, renter_client, fleet):
    other = make_user(app, "other-renter@test.com", "renter")
    _create(manager_client, fleet)
    _create(manager_client, fleet, renter_id=other.renter_id)

    bookings = renter_client.get("/api/bookings").get_json()["bookings"]
    assert len(bookings) == 1
    assert bookings[0]["renter_id"] == fleet.renter.renter_id

    assert len(manager_client.get("/api/bookings").get_json()["bookings"]) == 2


def test_single_booking_visible_only_to_its_parties(app, manager_client, owner_client, renter_client, fleet):
    other = make_user(app, "other-renter@test.com", "renter")
    mine = _create(manager_client, fleet).get_json()["booking"]["id"]
    theirs = _create(manager_client, fleet, renter_id=other.renter_id).get_json()["booking"]["id"]

    assert renter_client.get(f"/api/bookings/{mine}").status_code == 200
    assert renter_client.get(f"/api/bookings/{theirs}").status_code == 403
    assert owner_client.get(f"/api/bookings/{theirs}").status_code == 200
    assert manager_client.get(f"/api/bookings/{theirs}").status_code == 200

    rival = make_user(app, "rival@test.com", "owner", business_name="Rival RVs")
    assert login(app, rival.email).get(f"/api/bookings/{mine}").status_code == 403


def test_owner_cannot_create_bookings(owner_client, fleet):
    assert _create(owner_client, fleet).status_code == 403


def test_cancel_sets_status(app, manager_client, fleet):
    booking_id = _create(manager_client, fleet).get_json()["booking"]["id"]
    response = manager_client.delete(f"/api/bookings?id={booking_id}")
    assert response.status_code == 200
    with app.app_context():
        assert db.session.get(Booking, booking_id).status == "cancelled"


def test_cancel_requires_id_and_existing_booking(manager_client, fleet):
    assert manager_client.delete("/api/bookings").status_code == 400
    assert manager_client.delete("/api/bookings?id=424242").status_code == 404


def test_crm_sync_skipped_without_token(manager_client, fleet):
    crm_sync = _create(manager_client, fleet).get_json()["crm_sync"]
    assert crm_sync == {"status": "skipped", "crm_id": None, "error": "HubSpot is not configured."}


def test_crm_failure_is_reported_and_booking_kept(app, manager_client, fleet, hubspot):
    hubspot.respond("POST", "/crm/v3/objects/deals", {"message": "Pipeline locked"}, status_code=500)

    response = _create(manager_client, fleet)
    assert response.status_code == 201
    body = response.get_json()
    assert body["crm_sync"]["status"] == "failed"
    assert "Pipeline locked" in body["crm_sync"]["error"]

    with app.app_context():
        booking = db.session.get(Booking, body["booking"]["id"])
        assert booking is not None
        assert booking.hubspot_deal_id is None


def test_booking_sync_creates_deal_and_links_renter(app, manager_client, fleet, hubspot):
    hubspot.respond(
        "POST",
        "/crm/v3/objects/contacts/search",
        {"results": [{"id": "c-77", "properties": {"email": fleet.renter.email}}]},
    )
    body = _create(manager_client, fleet).get_json()
    assert body["crm_sync"]["status"] == "synced"
    deal_id = body["crm_sync"]["crm_id"]

    deal_call = hubspot.calls_to("POST", "/crm/v3/objects/deals")[0]
    assert deal_call["json"]["properties"]["dealname"].startswith(body["booking"]["booking_number"])
    assert deal_call["json"]["properties"]["dealstage"] == "appointmentscheduled"
    assert hubspot.calls_to("PUT", f"/crm/v3/objects/deals/{deal_id}/associations/contacts/c-77")

    response = manager_client.patch("/api/bookings", json={"id": body["booking"]["id"], "status": "confirmed"})
    assert response.get_json()["crm_sync"]["crm_id"] == deal_id
    update_call = hubspot.calls_to("PATCH", f"/crm/v3/objects/deals/{deal_id}")[0]
    assert update_call["json"]["properties"]["dealstage"] == "qualifiedtobuy"
