from conftest import PASSWORD, make_user

from consignments.models import Owner, Renter


def test_signup_owner_creates_owner_record(app):
    client = app.test_client()
    response = client.post(
        "/api/auth/signup",
        json={
            "full_name": "Riley Owner",
            "email": "Riley@Test.com",
            "password": "hunter22",
            "role": "owner",
            "business_name": "Riley Rigs",
        },
    )
    assert response.status_code == 201
    user = response.get_json()["user"]
    assert user["email"] == "riley@test.com"
    assert user["role"] == "owner"
    assert user["owner_id"]

    with app.app_context():
        owner = Owner.query.filter_by(user_id=user["id"]).one()
        assert owner.business_name == "Riley Rigs"
        assert float(owner.revenue_split_percentage) == 70.0
        assert float(owner.platform_fee_percentage) == 10.0

    me = client.get("/api/auth/me").get_json()["user"]
    assert me["id"] == user["id"]


def test_signup_renter_creates_renter_record(app):
    response = app.test_client().post(
        "/api/auth/signup", json={"email": "r@test.com", "password": "secret1", "role": "renter"}
    )
    user_id = response.get_json()["user"]["id"]
    with app.app_context():
        assert Renter.query.filter_by(user_id=user_id).count() == 1


def test_signup_rejections(app):
    client = app.test_client()
    make_user(app, "taken@test.com", "renter")
    duplicate = client.post("/api/auth/signup", json={"email": "TAKEN@test.com", "password": "secret1"})
    assert duplicate.status_code == 409
    short = client.post("/api/auth/signup", json={"email": "new@test.com", "password": "123"})
    assert short.status_code == 400
    bad_role = client.post("/api/auth/signup", json={"email": "new@test.com", "password": "secret1", "role": "root"})
    assert bad_role.status_code == 400


def test_login_logout_and_me(app):
    make_user(app, "pat@test.com", "renter")
    client = app.test_client()

    assert client.get("/api/auth/me").status_code == 401
    assert client.get("/api/auth/me").get_json() == {"user": None}

    wrong = client.post("/api/auth/login", json={"email": "pat@test.com", "password": "nope"})
    assert wrong.status_code == 401
    assert wrong.get_json() == {"error": "Invalid credentials."}

    ok = client.post("/api/auth/login", json={"email": "PAT@test.com", "password": PASSWORD})
    assert ok.status_code == 200
    assert ok.get_json()["user"]["renter_id"]
    assert client.get("/api/auth/me").status_code == 200

    client.post("/api/auth/logout")
    assert client.get("/api/auth/me").status_code == 401


def test_web_login_lands_on_role_portal(app, fleet, manager):
    client = app.test_client()
    response = client.post("/login", data={"email": fleet.owner.email, "password": PASSWORD})
    assert response.status_code == 302
    assert response.headers["Location"].endswith("/owner/portal")

    manager_web = app.test_client()
    response = manager_web.post("/login", data={"email": manager.email, "password": PASSWORD})
    assert response.headers["Location"].endswith("/manager/dashboard")


def test_web_login_failure_flashes_and_redirects(app):
    response = app.test_client().post("/login", data={"email": "ghost@test.com", "password": "x"})
    assert response.status_code == 302
    assert response.headers["Location"].endswith("/login")


def test_web_signup_logs_in(app):
    client = app.test_client()
    response = client.post(
        "/signup",
        data={"full_name": "Web Renter", "email": "web@test.com", "password": "secret1", "role": "renter"},
    )
    assert response.status_code == 302
    assert response.headers["Location"].endswith("/renter/browse")
    assert client.get("/renter/browse").status_code == 200


def test_pages_require_login(app):
    response = app.test_client().get("/manager/dashboard")
    assert response.status_code == 302
    assert "/login" in response.headers["Location"]
