import pytest
import requests
from conftest import FAKE_HUBSPOT_URL, FakeHubSpotSession

from consignments.extensions import db
from consignments.integrations.hubspot import (
    HubSpotClient,
    HubSpotConfig,
    HubSpotError,
    booking_status_for,
    deal_stage_for,
    maintenance_status_for,
    ticket_stage_for,
)
from consignments.models import Booking, MaintenanceRequest, Owner, User
from consignments.services import BookingService, MaintenanceService

ONBOARDING_FORM = {
    "firstName": "Casey",
    "lastName": "Morgan",
    "email": "Casey@Example.com",
    "phone": "555-0199",
    "city": "Bend",
    "state": "OR",
    "rvYear": "2019",
    "rvMake": "Airstream",
    "rvModel": "Flying Cloud",
    "rvType": "Travel Trailer",
    "vin": "1STC9AJ25KJ123456",
    "basePrice": "150",
}


def _client(session, token="test-token"):
    return HubSpotClient(HubSpotConfig(access_token=token, api_url=FAKE_HUBSPOT_URL), session=session)


class ExplodingSession:
    def request(self, *args, **kwargs):
        raise requests.ConnectionError("connection refused")


# Client and mappings

def test_stage_mappings_round_trip_and_defaults():
    assert deal_stage_for("confirmed") == "qualifiedtobuy"
    assert deal_stage_for("completed") == "closedwon"
    assert deal_stage_for("checked_out") == "closedwon"
    assert deal_stage_for("mystery") == "appointmentscheduled"
    assert booking_status_for("closedwon") == "completed"
    assert booking_status_for("closedlost") == "cancelled"
    assert booking_status_for("unknown") == "inquiry"
    assert ticket_stage_for("in_progress") == "3"
    assert ticket_stage_for("other") == "1"
    assert maintenance_status_for(4) == "completed"
    assert maintenance_status_for("99") == "requested"


def test_config_from_app_config():
    config = HubSpotConfig.from_app_config({"HUBSPOT_ACCESS_TOKEN": "", "HUBSPOT_API_URL": "https://api.example/"})
    assert config.enabled is False
    assert config.api_url == "https://api.example"
    assert config.timeout == 10.0


def test_client_sends_bearer_token_and_returns_first_search_hit():
    session = FakeHubSpotSession()
    session.respond("POST", "/crm/v3/objects/contacts/search", {"results": [{"id": "1"}, {"id": "2"}]})
    contact = _client(session).get_contact_by_email("a@b.test")

    assert contact == {"id": "1"}
    call = session.calls[0]
    assert call["headers"]["Authorization"] == "Bearer test-token"
    assert call["json"]["filterGroups"][0]["filters"][0] == {"propertyName": "email", "operator": "EQ", "value": "a@b.test"}


def test_client_raises_on_error_status():
    session = FakeHubSpotSession()
    session.respond("POST", "/crm/v3/objects/deals", {"message": "Property dealstage invalid"}, status_code=400)
    with pytest.raises(HubSpotError) as excinfo:
        _client(session).create_deal({"dealname": "x"})
    assert excinfo.value.status_code == 400
    assert "Property dealstage invalid" in excinfo.value.message


def test_client_wraps_transport_errors():
    with pytest.raises(HubSpotError, match="connection refused"):
        _client(ExplodingSession()).list_contacts()


def test_disabled_client_never_calls_out():
    session = FakeHubSpotSession()
    with pytest.raises(HubSpotError):
        _client(session, token=None).create_contact({"email": "x@y.test"})
    assert session.calls == []


# Sync endpoints

def test_sync_requires_configuration(manager_client, fleet):
    response = manager_client.post("/api/sync/hubspot", json={"type": "owner", "id": fleet.owner.owner_id})
    assert response.status_code == 503
    assert response.get_json()["crm_sync"]["status"] == "skipped"


def test_sync_validates_type_and_id(manager_client, fleet, hubspot):
    assert manager_client.post("/api/sync/hubspot", json={"type": "renter", "id": 1}).status_code == 400
    missing = manager_client.post("/api/sync/hubspot", json={"type": "booking", "id": 999})
    assert missing.status_code == 404
    assert missing.get_json()["error"] == "Booking not found"


def test_sync_of_owner_without_email_is_client_error(manager_client, hubspot):
    owner_id = manager_client.post("/api/owners", json={"business_name": "No Inbox RVs"}).get_json()["owner"]["id"]
    response = manager_client.post("/api/sync/hubspot", json={"type": "owner", "id": owner_id})
    assert response.status_code == 400
    assert response.get_json()["crm_sync"] == {
        "status": "skipped",
        "crm_id": None,
        "error": "Owner has no e-mail address.",
    }
    assert hubspot.calls == []


def test_owner_sync_creates_contact_and_stores_id(app, manager_client, fleet, hubspot):
    response = manager_client.post("/api/sync/hubspot", json={"type": "owner", "id": fleet.owner.owner_id})
    assert response.status_code == 200
    hubspot_id = response.get_json()["hubspotId"]

    created = hubspot.calls_to("POST", "/crm/v3/objects/contacts")[-1]
    assert created["path"] == "/crm/v3/objects/contacts"
    assert created["json"]["properties"]["email"] == "owner@test.com"
    assert created["json"]["properties"]["firstname"] == "Dana"
    assert created["json"]["properties"]["user_role"] == "owner"
    with app.app_context():
        assert db.session.get(Owner, fleet.owner.owner_id).hubspot_contact_id == hubspot_id


def test_owner_sync_updates_existing_contact(manager_client, fleet, hubspot):
    hubspot.respond("POST", "/crm/v3/objects/contacts/search", {"results": [{"id": "c-1"}]})
    response = manager_client.post("/api/sync/hubspot", json={"type": "owner", "id": fleet.owner.owner_id})
    assert response.get_json()["hubspotId"] == "c-1"
    assert hubspot.calls_to("PATCH", "/crm/v3/objects/contacts/c-1")
    assert not [call for call in hubspot.calls if call["path"] == "/crm/v3/objects/contacts"]


def test_sync_failure_is_500(manager_client, fleet, hubspot):
    hubspot.respond("POST", "/crm/v3/objects/contacts/search", {"message": "rate limited"}, status_code=429)
    response = manager_client.post("/api/sync/hubspot", json={"type": "owner", "id": fleet.owner.owner_id})
    assert response.status_code == 500
    assert response.get_json()["error"] == "Sync failed"
    assert response.get_json()["crm_sync"]["status"] == "failed"


def test_bulk_sync_counts_each_kind(app, manager_client, fleet, hubspot):
    with app.app_context():
        BookingService.create_booking(
            {"asset_id": fleet.asset_id, "start_date": "2026-08-01", "end_date": "2026-08-04", "status": "active"}
        )
        BookingService.create_booking(
            {"asset_id": fleet.asset_id, "start_date": "2026-09-01", "end_date": "2026-09-04", "status": "inquiry"}
        )
        MaintenanceService.create_request(
            {"asset_id": fleet.asset_id, "title": "Leaky roof vent", "description": "Drips in rain"}
        )

    body = manager_client.get("/api/sync/hubspot").get_json()
    assert body["synced"] == {"owners": 1, "bookings": 1, "maintenance": 1}
    assert body["failed"] == {"owners": 0, "bookings": 0, "maintenance": 0}


def test_maintenance_ticket_follows_status(app, manager_client, fleet, hubspot):
    created = manager_client.post(
        "/api/maintenance",
        json={"asset_id": fleet.asset_id, "title": "Generator won't start", "description": "Cranks, no fire", "priority": "HIGH"},
    ).get_json()
    assert created["crm_sync"]["status"] == "synced"
    ticket_call = hubspot.calls_to("POST", "/crm/v3/objects/tickets")[0]
    assert ticket_call["json"]["properties"]["hs_pipeline_stage"] == "1"
    assert ticket_call["json"]["properties"]["hs_ticket_priority"] == "HIGH"
    assert ticket_call["json"]["properties"]["asset_name"] == "2021 Winnebago View"

    request_id = created["maintenance_request"]["id"]
    updated = manager_client.patch("/api/maintenance", json={"id": request_id, "status": "completed"}).get_json()
    assert updated["maintenance_request"]["completion_date"] is not None
    ticket_id = created["crm_sync"]["crm_id"]
    patch_call = hubspot.calls_to("PATCH", f"/crm/v3/objects/tickets/{ticket_id}")[0]
    assert patch_call["json"]["properties"]["hs_pipeline_stage"] == "4"


# Webhooks

def test_deal_webhook_updates_booking_found_by_number(app, fleet, hubspot):
    with app.app_context():
        booking = BookingService.create_booking(
            {"asset_id": fleet.asset_id, "start_date": "2026-08-01", "end_date": "2026-08-04"},
            booking_number="BK-1767225600000-7",
        )
        booking_id = booking.id
    hubspot.objects["/crm/v3/objects/deals/555"] = {
        "id": "555",
        "properties": {"dealname": "BK-1767225600000-7 - 2021 Winnebago View", "dealstage": "closedwon"},
    }

    response = app.test_client().post(
        "/api/webhooks/hubspot",
        json=[
            {"subscriptionType": "deal.propertyChange", "objectId": 555},
            {"subscriptionType": "company.creation", "objectId": 1},
        ],
    )
    assert response.status_code == 200
    assert response.get_json() == {"success": True, "processed": 1}
    with app.app_context():
        assert db.session.get(Booking, booking_id).status == "completed"


def test_ticket_webhook_matches_subject(app, fleet, hubspot):
    with app.app_context():
        row = MaintenanceService.create_request(
            {"asset_id": fleet.asset_id, "title": "Awning motor sticking", "description": "Stalls halfway"}
        )
        request_id = row.id
    hubspot.objects["/crm/v3/objects/tickets/77"] = {
        "properties": {"subject": "Awning motor sticking", "hs_pipeline_stage": "3"}
    }

    response = app.test_client().post(
        "/api/webhooks/hubspot", json={"subscriptionType": "ticket.propertyChange", "objectId": 77}
    )
    assert response.get_json()["processed"] == 1
    with app.app_context():
        assert db.session.get(MaintenanceRequest, request_id).status == "in_progress"


def test_contact_webhook_updates_profile_and_business(app, fleet, hubspot):
    hubspot.objects["/crm/v3/objects/contacts/9"] = {
        "properties": {
            "email": "OWNER@test.com",
            "firstname": "Dana",
            "lastname": "Reyes-Park",
            "phone": "555-0101",
            "user_role": "owner",
            "company": "Reyes Fleet Co",
        }
    }
    app.test_client().post("/api/webhooks/hubspot", json=[{"subscriptionType": "contact.propertyChange", "objectId": 9}])

    with app.app_context():
        profile = db.session.get(User, fleet.owner.id)
        assert profile.full_name == "Dana Reyes-Park"
        assert profile.phone == "555-0101"
        assert profile.owner.business_name == "Reyes Fleet Co"


def test_webhook_crm_failure_is_500(app, hubspot):
    hubspot.respond("GET", "/crm/v3/objects/deals/13", {"message": "gone"}, status_code=404)
    response = app.test_client().post(
        "/api/webhooks/hubspot", json=[{"subscriptionType": "deal.creation", "objectId": 13}]
    )
    assert response.status_code == 500
    assert response.get_json() == {"error": "Failed to process webhook"}


def test_webhook_rejects_non_list_body(app):
    response = app.test_client().post("/api/webhooks/hubspot", data="nope", content_type="text/plain")
    assert response.status_code == 400


# Onboarding

def test_onboarding_creates_pending_owner_and_asset_without_crm(app):
    response = app.test_client().post("/api/onboard/owner", json=ONBOARDING_FORM)
    assert response.status_code == 201
    body = response.get_json()
    assert body["owner"]["status"] == "pending_approval"
    assert body["owner"]["business_name"] == "Casey Morgan"
    assert body["owner"]["revenue_split_percentage"] == 70.0
    assert body["asset"]["name"] == "2019 Airstream Flying Cloud"
    assert body["asset"]["status"] == "pending_approval"
    assert body["asset"]["base_price_per_night"] == 150.0
    assert body["hubspot"] == {"contactId": None, "dealId": None}
    assert body["crm_sync"]["contact"]["status"] == "skipped"
    assert body["crm_sync"]["deal"]["status"] == "skipped"


def test_onboarding_pushes_contact_and_deal(app, hubspot):
    body = app.test_client().post("/api/onboard/owner", json=ONBOARDING_FORM).get_json()
    contact_id = body["hubspot"]["contactId"]
    deal_id = body["hubspot"]["dealId"]
    assert contact_id and deal_id

    contact_call = [call for call in hubspot.calls if call["path"] == "/crm/v3/objects/contacts"][0]
    assert contact_call["json"]["properties"]["email"] == "casey@example.com"
    assert contact_call["json"]["properties"]["onboarding_status"] == "pending_review"

    deal_call = hubspot.calls_to("POST", "/crm/v3/objects/deals")[0]
    assert deal_call["json"]["properties"]["amount"] == 4500.0
    assert deal_call["json"]["properties"]["dealstage"] == "appointmentscheduled"
    assert deal_call["json"]["properties"]["dealname"].startswith("New Owner Onboarding - Casey Morgan")
    assert hubspot.calls_to("PUT", f"/crm/v3/objects/deals/{deal_id}/associations/contacts/{contact_id}")

    with app.app_context():
        assert Owner.query.filter_by(contact_email="casey@example.com").one().hubspot_contact_id == contact_id


def test_onboarding_requires_core_fields(app):
    form = dict(ONBOARDING_FORM, basePrice="")
    response = app.test_client().post("/api/onboard/owner", json=form)
    assert response.status_code == 400
    assert response.get_json()["error"] == "Name, email, RV details and base price are required"


# Webhook subscriptions

def test_client_manages_webhook_subscriptions():
    session = FakeHubSpotSession()
    session.respond("GET", "/webhooks/v3/subscriptions", {"results": [{"eventType": "deal.creation"}]})
    client = _client(session)

    assert client.list_webhook_subscriptions()["results"][0]["eventType"] == "deal.creation"
    client.create_webhook_subscription("contact.propertyChange", property_name="phone")
    assert session.calls[-1]["json"] == {"eventType": "contact.propertyChange", "active": True, "propertyName": "phone"}


def test_crm_webhooks_command_creates_missing_subscriptions(app, hubspot):
    hubspot.respond(
        "GET",
        "/webhooks/v3/subscriptions",
        {"results": [{"eventType": "deal.propertyChange"}, {"eventType": "company.creation"}]},
    )
    result = app.test_cli_runner().invoke(args=["crm-webhooks"])
    assert result.exit_code == 0, result.output
    assert "SKIP deal.propertyChange already subscribed" in result.output
    assert "company.creation" not in result.output

    created = [call["json"]["eventType"] for call in hubspot.calls_to("POST", "/webhooks/v3/subscriptions")]
    assert created == [
        "contact.creation",
        "contact.propertyChange",
        "deal.creation",
        "ticket.creation",
        "ticket.propertyChange",
    ]


def test_crm_webhooks_command_reports_crm_errors(app, hubspot):
    hubspot.respond("GET", "/webhooks/v3/subscriptions", {"message": "missing scopes"}, status_code=403)
    result = app.test_cli_runner().invoke(args=["crm-webhooks"])
    assert result.exit_code != 0
    assert "missing scopes" in result.output


def test_crm_webhooks_command_needs_token(app):
    result = app.test_cli_runner().invoke(args=["crm-webhooks"])
    assert result.exit_code != 0
    assert "HUBSPOT_ACCESS_TOKEN" in result.output
