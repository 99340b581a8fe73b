"""
Pytest fixtures for the consignment backend tests.

Each test gets a fresh app backed by in-memory SQLite, a temporary upload
directory and, on request, a HubSpot client wired to a recording fake session.
"""

import json
from types import SimpleNamespace

import pytest

from consignments import create_app
from consignments.extensions import db
from consignments.integrations.hubspot import HubSpotClient, HubSpotConfig
from consignments.services import AssetService, AuthService

PASSWORD = "Password123!"
FAKE_HUBSPOT_URL = "https://hubspot.test"


class FakeResponse:
    def __init__(self, status_code=200, payload=None):
        self.status_code = status_code
        self._payload = payload
        self.content = b"" if payload is None else json.dumps(payload).encode()
        self.text = self.content.decode()

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON body")
        return self._payload


class FakeHubSpotSession:
    """Stands in for ``requests.Session``: records calls, answers from a route table."""

    def __init__(self):
        self.calls = []
        self.routes = {}
        self.objects = {}
        self._next_id = 1000

    def respond(self, method, path, payload=None, status_code=200):
        self.routes[(method, path)] = FakeResponse(status_code, payload)

    def calls_to(self, method, path_prefix):
        return [call for call in self.calls if call["method"] == method and call["path"].startswith(path_prefix)]

    def request(self, method, url, headers=None, json=None, params=None, timeout=None):
        path = url[len(FAKE_HUBSPOT_URL):]
        self.calls.append({"method": method, "path": path, "json": json, "headers": headers, "params": params})
        if (method, path) in self.routes:
            return self.routes[(method, path)]
        if path.endswith("/search"):
            return FakeResponse(200, {"results": []})
        if method == "GET" and path in self.objects:
            return FakeResponse(200, self.objects[path])
        if method == "POST":
            self._next_id += 1
            return FakeResponse(201, {"id": str(self._next_id), "properties": (json or {}).get("properties", {})})
        if method == "PUT":
            return FakeResponse(200, None)
        return FakeResponse(200, {"id": path.rsplit("/", 1)[-1]})


@pytest.fixture()
def app(tmp_path):
    """Create application for testing."""
    app = create_app("testing")
    app.config.update(
        {
            "UPLOAD_DIR": str(tmp_path / "uploads"),
            "MEDIA_BASE_URL": "/media",
        }
    )
    with app.app_context():
        db.create_all()

    yield app

    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def ctx(app):
    """Pushed app context for service-level tests."""
    with app.app_context():
        yield app


@pytest.fixture()
def hubspot(app):
    """Enable CRM sync against a recording fake transport."""
    session = FakeHubSpotSession()
    config = HubSpotConfig(access_token="test-token", api_url=FAKE_HUBSPOT_URL, timeout=1)
    app.extensions["hubspot"] = HubSpotClient(config, session=session)
    return session


def make_user(app, email, role, full_name="Test User", business_name=None):
    with app.app_context():
        user = AuthService.register_user(full_name, email, PASSWORD, role, business_name=business_name)
        return SimpleNamespace(
            id=user.id,
            email=user.email,
            owner_id=user.owner.id if user.owner else None,
            renter_id=user.renter.id if user.renter else None,
        )


def login(app, email):
    client = app.test_client()
    response = client.post("/api/auth/login", json={"email": email, "password": PASSWORD})
    assert response.status_code == 200, response.get_json()
    return client


@pytest.fixture()
def manager(app):
    return make_user(app, "manager@test.com", "manager", full_name="Fleet Manager")


@pytest.fixture()
def manager_client(app, manager):
    return login(app, manager.email)


@pytest.fixture()
def fleet(app):
    """One owner (70 % split) with an available RV at 200/night, plus a renter."""
    owner = make_user(app, "owner@test.com", "owner", full_name="Dana Reyes", business_name="Reyes RV Rentals")
    renter = make_user(app, "renter@test.com", "renter", full_name="Jordan Lee")
    with app.app_context():
        asset = AssetService.create_asset(
            {
                "owner_id": owner.owner_id,
                "name": "2021 Winnebago View",
                "rv_type": "Class C",
                "base_price_per_night": 200,
                "cleaning_fee": 75,
                "status": "available",
            }
        )
        asset_id = asset.id
    return SimpleNamespace(owner=owner, renter=renter, asset_id=asset_id)


@pytest.fixture()
def owner_client(app, fleet):
    return login(app, fleet.owner.email)


@pytest.fixture()
def renter_client(app, fleet):
    return login(app, fleet.renter.email)
