from datetime import date

import pytest
from conftest import PASSWORD

from consignments.models import Remittance
from consignments.services import BookingService, ExpenseService, MaintenanceService, ReportingService


@pytest.fixture()
def activity(app, fleet):
    today = date.today()
    with app.app_context():
        BookingService.create_booking(
            {
                "asset_id": fleet.asset_id,
                "renter_id": fleet.renter.renter_id,
                "start_date": date.fromordinal(today.toordinal() - 7).isoformat(),
                "end_date": today.isoformat(),
                "status": "completed",
            }
        )
        BookingService.create_booking(
            {"asset_id": fleet.asset_id, "start_date": "2027-01-01", "end_date": "2027-01-03", "status": "confirmed"}
        )
        expense = ExpenseService.create_expense(
            {"asset_id": fleet.asset_id, "category": "cleaning", "amount": 100, "description": "Turnover"}
        )
        ExpenseService.update_expense(expense.id, {"status": "approved"})
        MaintenanceService.create_request(
            {"asset_id": fleet.asset_id, "title": "Check tires", "description": "Pre-season check"}
        )
    return fleet


def test_dashboard_counters(manager_client, activity):
    summary = manager_client.get("/api/reports/dashboard").get_json()
    assert summary["assets"] == {"total": 1, "by_status": {"available": 1}, "available": 1}
    assert summary["bookings"] == {"total": 2, "active": 1, "completed": 1}
    assert summary["revenue"] == 1615.0
    assert summary["open_maintenance"] == 1
    assert summary["owners"] == 1


def test_financials_summary(app, manager_client, activity):
    report = manager_client.get("/api/reports/financials").get_json()
    assert report["total_revenue"] == 1615.0
    assert report["platform_fees"] == 140.0
    assert report["total_expenses"] == 100.0
    assert report["paid_remittances"] == 0.0
    assert report["net_profit"] == 1515.0
    assert len(report["monthly_revenue"]) == 6
    assert report["monthly_revenue"][-1] == {"month": date.today().strftime("%Y-%m"), "revenue": 1615.0}
    assert {row["transaction_type"] for row in report["recent_transactions"]} == {"rental_income", "cleaning"}


def test_financials_month_window_wraps_year(ctx):
    report = ReportingService.financials(today=date(2026, 2, 15))
    assert [row["month"] for row in report["monthly_revenue"]] == [
        "2025-09",
        "2025-10",
        "2025-11",
        "2025-12",
        "2026-01",
        "2026-02",
    ]


def test_owner_earnings_scoped_to_caller(app, manager_client, owner_client, activity):
    earnings = owner_client.get("/api/reports/owner-earnings?owner_id=999").get_json()
    assert earnings["owner_id"] == activity.owner.owner_id
    assert earnings["gross_revenue"] == 1615.0
    assert earnings["platform_fee"] == 161.5
    assert earnings["expenses"] == 100.0
    assert earnings["net_income"] == 1353.5
    assert earnings["owner_earnings"] == pytest.approx(947.45)

    assert manager_client.get("/api/reports/owner-earnings?owner_id=999").status_code == 404


def test_platform_stats_are_public(app, activity):
    stats = app.test_client().get("/api/platform-stats").get_json()
    assert stats == {"total_rvs": 1, "total_owners": 1, "total_renters": 1, "completed_trips": 1}


def test_renter_cannot_read_reports(renter_client, activity):
    assert renter_client.get("/api/reports/dashboard").status_code == 403
    assert renter_client.get("/api/reports/owner-earnings").status_code == 403


def test_manager_pages_render(app, manager_client, activity):
    for path in ("/manager/dashboard", "/manager/financials", "/manager/remittances"):
        response = manager_client.get(path)
        assert response.status_code == 200, path
    assert b"Check tires" in manager_client.get("/manager/dashboard").data


def test_manager_remittance_form_calculates_then_sends(app, manager_client, activity):
    form = {
        "owner_id": activity.owner.owner_id,
        "period_start": date.today().replace(day=1).isoformat(),
        "period_end": date.today().isoformat(),
    }
    preview = manager_client.post("/manager/remittances", data=dict(form, action="calculate"))
    assert preview.status_code == 200
    assert b"Owner payout" in preview.data
    with app.app_context():
        assert Remittance.query.count() == 0

    sent = manager_client.post("/manager/remittances", data=dict(form, action="send"))
    assert sent.status_code == 302
    with app.app_context():
        assert Remittance.query.count() == 1


def test_owner_and_renter_pages(app, owner_client, activity):
    portal = owner_client.get("/owner/portal")
    assert portal.status_code == 200
    assert b"Reyes RV Rentals" in portal.data
    assert owner_client.get("/manager/dashboard").status_code == 403

    renter_web = app.test_client()
    renter_web.post("/login", data={"email": activity.renter.email, "password": PASSWORD})
    browse = renter_web.get("/renter/browse?rv_type=Class+C")
    assert b"2021 Winnebago View" in browse.data
    assert b"2021 Winnebago View" not in renter_web.get("/renter/browse?rv_type=Fifth+Wheel").data
    assert renter_web.get("/renter/bookings").status_code == 200


def test_landing_page(app, activity):
    response = app.test_client().get("/")
    assert response.status_code == 200
    assert b"Completed trips" in response.data
