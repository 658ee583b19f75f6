from tests.fixtures import ADMIN_EMAIL, UNKNOWN_ID

NEW_ADMIN = {
    "email": "grace@example.com",
    "password": "compilers-rule-1952",
    "first_name": "Grace",
    "last_name": "Hopper",
}


def create_administrator(client, auth_headers, **fields):
    body = {**NEW_ADMIN, **fields}
    resp = client.post("/api/administrators", json=body, headers=auth_headers)
    assert resp.status_code == 201, resp.json()
    return resp.json()["data"]


def test_requires_auth(client):
    assert client.get("/api/administrators").status_code == 401
    assert client.post("/api/administrators", json=NEW_ADMIN).status_code == 401


def test_create_administrator(client, auth_headers):
    resp = client.post("/api/administrators", json=NEW_ADMIN, headers=auth_headers)

    assert resp.status_code == 201
    body = resp.json()
    assert body["message"] == "Administrator created successfully"
    assert body["data"]["email"] == NEW_ADMIN["email"]
    assert body["data"]["is_active"] is True
    assert "password" not in body["data"]


def test_create_duplicate_email(client, auth_headers):
    resp = client.post("/api/administrators", json={**NEW_ADMIN, "email": ADMIN_EMAIL}, headers=auth_headers)
    assert resp.status_code == 409
    assert resp.json()["message"] == "Administrator with this email already exists"


def test_create_validation(client, auth_headers):
    resp = client.post("/api/administrators", json={**NEW_ADMIN, "password": "short"}, headers=auth_headers)
    assert resp.status_code == 400
    assert [detail["field"] for detail in resp.json()["details"]] == ["password"]

    resp = client.post("/api/administrators", json={**NEW_ADMIN, "email": "not-an-email"}, headers=auth_headers)
    assert resp.status_code == 400

    resp = client.post("/api/administrators", json={**NEW_ADMIN, "first_name": "   "}, headers=auth_headers)
    assert resp.status_code == 400


def test_list_and_get(client, auth_headers, administrator):
    created = create_administrator(client, auth_headers)

    listing = client.get("/api/administrators", headers=auth_headers).json()
    assert listing["count"] == 2
    assert {item["email"] for item in listing["data"]} == {ADMIN_EMAIL, NEW_ADMIN["email"]}

    resp = client.get(f"/api/administrators/{created['id']}", headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json()["data"]["first_name"] == "Grace"

    profile = client.get(f"/api/administrators/profile/{administrator.id}", headers=auth_headers)
    assert profile.json()["message"] == "Administrator profile received successfully"


def test_get_unknown(client, auth_headers):
    resp = client.get(f"/api/administrators/{UNKNOWN_ID}", headers=auth_headers)
    assert resp.status_code == 404
    assert resp.json()["message"] == "Administrator not found"


def test_update(client, auth_headers):
    created = create_administrator(client, auth_headers)

    resp = client.patch(
        f"/api/administrators/{created['id']}",
        json={"first_name": "  Rear Admiral  "},
        headers=auth_headers,
    )
    assert resp.status_code == 200
    assert resp.json()["data"]["first_name"] == "Rear Admiral"
    assert resp.json()["data"]["last_name"] == "Hopper"


def test_update_email_collision(client, auth_headers):
    created = create_administrator(client, auth_headers)
    resp = client.patch(
        f"/api/administrators/{created['id']}",
        json={"email": ADMIN_EMAIL},
        headers=auth_headers,
    )
    assert resp.status_code == 409


def test_update_rejects_unknown_fields(client, auth_headers, administrator):
    resp = client.patch(
        f"/api/administrators/{administrator.id}",
        json={"status": "deactivated"},
        headers=auth_headers,
    )
    assert resp.status_code == 400


def test_password_change_allows_new_login(client, auth_headers):
    created = create_administrator(client, auth_headers)
    client.patch(
        f"/api/administrators/{created['id']}",
        json={"password": "a-brand-new-secret"},
        headers=auth_headers,
    )

    old = client.post("/api/auth/login", json={"email": NEW_ADMIN["email"], "password": NEW_ADMIN["password"]})
    assert old.status_code == 401

    new = client.post("/api/auth/login", json={"email": NEW_ADMIN["email"], "password": "a-brand-new-secret"})
    assert new.status_code == 200


def test_delete_is_soft(client, auth_headers):
    created = create_administrator(client, auth_headers)

    resp = client.delete(f"/api/administrators/{created['id']}", headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json()["message"] == "Administrator deleted successfully"

    assert client.get(f"/api/administrators/{created['id']}", headers=auth_headers).status_code == 404
    assert client.delete(f"/api/administrators/{created['id']}", headers=auth_headers).status_code == 404
    assert client.get("/api/administrators", headers=auth_headers).json()["count"] == 1

    login = client.post("/api/auth/login", json={"email": NEW_ADMIN["email"], "password": NEW_ADMIN["password"]})
    assert login.status_code == 401

    # The address stays reserved after deactivation
    again = client.post("/api/administrators", json=NEW_ADMIN, headers=auth_headers)
    assert again.status_code == 409
