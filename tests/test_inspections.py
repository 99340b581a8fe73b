import pytest

from consignments.models import DamageReport, Inspection
from consignments.services import BookingService, InspectionService


@pytest.fixture()
def booking_id(app, fleet):
    with app.app_context():
        booking = BookingService.create_booking(
            {
                "asset_id": fleet.asset_id,
                "renter_id": fleet.renter.renter_id,
                "start_date": "2026-07-01",
                "end_date": "2026-07-05",
            }
        )
        return booking.id


@pytest.mark.parametrize(
    "cost, severity",
    [(None, "minor"), ("0", "minor"), ("500", "minor"), ("500.01", "major"), (2500, "major")],
)
def test_severity_threshold(cost, severity):
    assert InspectionService.severity_for(cost) == severity


def test_damage_creates_exactly_one_report(app, manager_client, booking_id):
    response = manager_client.post(
        "/api/inspections",
        json={
            "booking_id": booking_id,
            "inspection_type": "checkout",
            "damages_found": True,
            "damage_description": "Cracked rear bumper",
            "estimated_repair_cost": 750,
            "mileage": 48210,
        },
    )
    assert response.status_code == 201
    body = response.get_json()
    report = body["damage_report"]
    assert report["severity"] == "major"
    assert report["status"] == "reported"
    assert report["title"] == "Damage found during checkout"
    assert report["description"] == "Cracked rear bumper"
    assert report["report_number"].startswith("DMG-")
    assert report["inspection_id"] == body["inspection"]["id"]

    with app.app_context():
        assert DamageReport.query.filter_by(inspection_id=body["inspection"]["id"]).count() == 1


def test_minor_damage(manager_client, booking_id):
    body = manager_client.post(
        "/api/inspections",
        json={"booking_id": booking_id, "inspection_type": "checkin", "damages_found": "true", "estimated_repair_cost": "120"},
    ).get_json()
    assert body["damage_report"]["severity"] == "minor"


def test_clean_inspection_has_no_report(app, manager_client, booking_id):
    body = manager_client.post(
        "/api/inspections",
        json={"booking_id": booking_id, "inspection_type": "checkin", "damages_found": False},
    ).get_json()
    assert body["damage_report"] is None
    with app.app_context():
        assert Inspection.query.count() == 1
        assert DamageReport.query.count() == 0


def test_rejects_unknown_type_and_booking(manager_client, booking_id):
    bad_type = manager_client.post("/api/inspections", json={"booking_id": booking_id, "inspection_type": "midway"})
    assert bad_type.status_code == 400
    missing = manager_client.post("/api/inspections", json={"booking_id": 9999, "inspection_type": "checkin"})
    assert missing.status_code == 404


def test_lists_reports_by_asset(manager_client, fleet, booking_id):
    manager_client.post(
        "/api/inspections",
        json={"booking_id": booking_id, "inspection_type": "checkout", "damages_found": True, "estimated_repair_cost": 40},
    )
    reports = manager_client.get(f"/api/inspections/damage-reports?asset_id={fleet.asset_id}").get_json()["damage_reports"]
    assert len(reports) == 1
    inspections = manager_client.get(f"/api/inspections?booking_id={booking_id}").get_json()["inspections"]
    assert [row["inspection_type"] for row in inspections] == ["checkout"]
