"""Registration, login and token handling over HTTP."""

from sqlalchemy import select

from vetclinic.core.identity import find_by_username
from vetclinic.db.models.owner import Owner

REGISTER = "/api/v1/auth/register"


def _register(client, username="shaggy", email="shaggy@mystery.inc", password="scooby1"):
    return client.post(
        REGISTER,
        json={
            "username": username,
            "email": email,
            "password": password,
            "first_name": "Shaggy",
            "last_name": "Rogers",
            "phone_number": "555-0200",
        },
    )


def test_register_creates_identity_and_owner(client, db):
    response = _register(client)

    assert response.status_code == 200
    body = response.json()
    assert body["username"] == "shaggy"
    assert body["role"] == "StandardUser"
    assert body["token_type"] == "bearer"

    owner = db.execute(select(Owner).where(Owner.email == "shaggy@mystery.inc")).scalar_one()
    assert str(owner.owner_id) == body["owner_id"]
    assert owner.user_id == find_by_username(db, "shaggy").user_id

    me = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {body['access_token']}"})
    assert me.status_code == 200
    assert me.json()["owner_id"] == body["owner_id"]
    assert me.json()["is_administrator"] is False


def test_duplicate_username_is_rejected(client):
    assert _register(client).status_code == 200

    response = _register(client, username="SHAGGY", email="other@mystery.inc")

    assert response.status_code == 400
    assert response.json()["detail"] == "User already exists!"


def test_failed_profile_step_rolls_back_identity(client, db, alice):
    # alice@example.com is already taken by an owner profile.
    response = _register(client, username="copycat", email="alice@example.com")

    assert response.status_code == 500
    assert response.json()["detail"] == "Registration failed."
    assert find_by_username(db, "copycat") is None

    # The username stays free for a corrected retry.
    assert _register(client, username="copycat", email="copycat@example.com").status_code == 200


def test_register_validates_payload(client):
    assert _register(client, password="123").status_code == 422


def test_login_and_logout(client, alice):
    bad = client.post("/api/v1/auth/login", json={"username": "alice", "password": "nope"})
    assert bad.status_code == 401
    assert bad.json()["detail"] == "Invalid username or password"

    good = client.post("/api/v1/auth/login", json={"username": "Alice", "password": "secret123"})
    assert good.status_code == 200
    assert good.json()["owner_id"] == str(alice.owner.owner_id)
    headers = {"Authorization": f"Bearer {good.json()['access_token']}"}

    assert client.get("/api/v1/auth/me", headers=headers).status_code == 200
    assert client.post("/api/v1/auth/logout", headers=headers).status_code == 204
    assert client.get("/api/v1/auth/me", headers=headers).status_code == 401


def test_admin_login_has_no_owner(client, admin):
    response = client.post("/api/v1/auth/login", json={"username": "admin", "password": "secret123"})

    assert response.status_code == 200
    assert response.json()["role"] == "Administrator"
    assert response.json()["owner_id"] is None


def test_protected_routes_require_a_token(client):
    assert client.get("/api/v1/pets").status_code == 401
    assert client.get("/api/v1/pets", headers={"Authorization": "Token abc"}).status_code == 401
    assert client.get("/api/v1/pets", headers={"Authorization": "Bearer unknown"}).status_code == 401
