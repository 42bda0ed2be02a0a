from __future__ import annotations

import uuid

from fastapi.testclient import TestClient

from eventhub.auth.policy import Capability, has_capability
from eventhub.auth.tokens import create_access_token, verify_access_token
from eventhub.models import User, UserRole


def register(
    client: TestClient,
    email: str,
    password: str = "StrongPass123",
    name: str = "Test User",
    role: str | None = None,
):
    payload = {"email": email, "password": password, "name": name}
    if role is not None:
        payload["role"] = role
    return client.post("/api/auth/register", json=payload)


def login(client: TestClient, email: str, password: str = "StrongPass123"):
    return client.post(
        "/api/auth/login",
        json={"email": email, "password": password},
    )


def auth_headers(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def make_user(client: TestClient, email: str, name: str = "Test User", role: str = "user") -> str:
    resp = register(client, email, name=name, role=role)
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]["token"]


def test_register_returns_user_and_token(client: TestClient):
    resp = register(client, "reg1@example.com", name="Reg One")
    assert resp.status_code == 201
    body = resp.json()
    assert body["success"] is True
    assert body["message"] == "User registered successfully"

    user = body["data"]["user"]
    assert user["email"] == "reg1@example.com"
    assert user["name"] == "Reg One"
    assert user["role"] == "user"
    assert "password_hash" not in user
    assert "password" not in user
    assert body["data"]["token"]


def test_register_then_login_works(client: TestClient):
    register(client, "reg2@example.com")

    resp = login(client, "reg2@example.com")
    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["data"]["token"]
    assert body["data"]["user"]["email"] == "reg2@example.com"


def test_password_is_stored_hashed(client: TestClient, db_session):
    register(client, "hash@example.com", password="StrongPass123")

    user = db_session.query(User).filter_by(email="hash@example.com").one()
    assert user.password_hash != "StrongPass123"
    assert user.password_hash.startswith("$argon2")


def test_email_is_case_normalized(client: TestClient):
    resp = register(client, "Mixed.Case@Example.COM")
    assert resp.status_code == 201
    assert resp.json()["data"]["user"]["email"] == "mixed.case@example.com"

    assert login(client, "MIXED.CASE@example.com").status_code == 200


def test_duplicate_email_conflicts_and_keeps_first_user(client: TestClient, db_session):
    first = register(client, "dup@example.com", name="First Person")
    assert first.status_code == 201

    second = register(client, "DUP@example.com", name="Second Person", password="OtherPass999")
    assert second.status_code == 409
    body = second.json()
    assert body["success"] is False
    assert "already exists" in body["error"]

    users = db_session.query(User).filter_by(email="dup@example.com").all()
    assert len(users) == 1
    assert users[0].name == "First Person"
    assert login(client, "dup@example.com").status_code == 200
    assert login(client, "dup@example.com", password="OtherPass999").status_code == 401


def test_login_rejects_bad_credentials(client: TestClient):
    register(client, "bad@example.com")

    wrong_password = login(client, "bad@example.com", password="nope-nope")
    assert wrong_password.status_code == 401
    assert wrong_password.json() == {"success": False, "error": "Invalid email or password"}

    unknown = login(client, "ghost@example.com")
    assert unknown.status_code == 401
    assert unknown.json()["error"] == "Invalid email or password"


def test_register_validation_details(client: TestClient):
    resp = client.post(
        "/api/auth/register",
        json={"email": "not-an-email", "password": "123", "name": "A"},
    )
    assert resp.status_code == 400
    body = resp.json()
    assert body["success"] is False
    assert body["error"] == "Validation failed"
    fields = {d["field"] for d in body["details"]}
    assert {"email", "password", "name"} <= fields


def test_register_rejects_unknown_role(client: TestClient):
    resp = register(client, "role@example.com", role="superuser")
    assert resp.status_code == 400


def test_profile_requires_token(client: TestClient):
    resp = client.get("/api/auth/profile")
    assert resp.status_code == 401
    assert resp.json()["success"] is False
    assert resp.headers["WWW-Authenticate"] == "Bearer"


def test_profile_get_and_update(client: TestClient):
    token = make_user(client, "prof@example.com", name="Old Name")

    resp = client.get("/api/auth/profile", headers=auth_headers(token))
    assert resp.status_code == 200
    assert resp.json()["data"]["user"]["name"] == "Old Name"

    upd = client.put(
        "/api/auth/profile",
        json={"name": "New Name", "email": "Prof2@Example.com"},
        headers=auth_headers(token),
    )
    assert upd.status_code == 200
    user = upd.json()["data"]["user"]
    assert user["name"] == "New Name"
    assert user["email"] == "prof2@example.com"


def test_profile_update_requires_a_field(client: TestClient):
    token = make_user(client, "empty@example.com")
    resp = client.put("/api/auth/profile", json={}, headers=auth_headers(token))
    assert resp.status_code == 400


def test_profile_email_collision_conflicts(client: TestClient):
    make_user(client, "taken@example.com")
    token = make_user(client, "mover@example.com")

    resp = client.put(
        "/api/auth/profile",
        json={"email": "taken@example.com"},
        headers=auth_headers(token),
    )
    assert resp.status_code == 409
    assert resp.json()["error"] == "Email is already taken"


def test_expired_token_is_rejected(client: TestClient):
    register(client, "late@example.com")
    user_id = uuid.UUID(login(client, "late@example.com").json()["data"]["user"]["id"])
    token = create_access_token(user_id, "late@example.com", UserRole.USER, ttl_seconds=-60)

    resp = client.get("/api/auth/profile", headers=auth_headers(token))
    assert resp.status_code == 401
    assert resp.json()["error"] == "Token expired"


def test_tampered_token_is_rejected(client: TestClient):
    token = make_user(client, "tamper@example.com")
    resp = client.get("/api/auth/profile", headers=auth_headers(token[:-2] + "xx"))
    assert resp.status_code == 401
    assert resp.json()["error"] == "Invalid token"


def test_token_carries_id_email_and_role():
    user_id = uuid.uuid4()
    principal = verify_access_token(create_access_token(user_id, "a@example.com", UserRole.ADMIN))
    assert principal.user_id == user_id
    assert principal.email == "a@example.com"
    assert principal.role == UserRole.ADMIN


def test_capabilities_by_role():
    assert has_capability(UserRole.USER, Capability.RSVP)
    assert not has_capability(UserRole.USER, Capability.MANAGE_EVENTS)
    assert not has_capability(UserRole.USER, Capability.VIEW_RSVP_SUMMARY)
    for capability in Capability:
        assert has_capability(UserRole.ADMIN, capability)


def test_rbac_user_blocked_from_admin_routes(client: TestClient):
    token = make_user(client, "plain@example.com")

    ev = client.post(
        "/api/events",
        json={"title": "Nope"},
        headers=auth_headers(token),
    )
    assert ev.status_code == 403
    assert ev.json() == {"success": False, "error": "Insufficient permissions"}

    assert client.get("/api/admin/users", headers=auth_headers(token)).status_code == 403
    summary = client.get(f"/api/events/{uuid.uuid4()}/rsvp-summary", headers=auth_headers(token))
    assert summary.status_code == 403


def test_rbac_admin_allowed(client: TestClient):
    token = make_user(client, "admin@example.com", role="admin")

    users = client.get("/api/admin/users", headers=auth_headers(token))
    assert users.status_code == 200
    data = users.json()["data"]
    assert data["pagination"]["total"] == 1
    assert data["users"][0]["role"] == "admin"


def test_admin_cannot_delete_self(client: TestClient):
    token = make_user(client, "self@example.com", role="admin")
    me = client.get("/api/auth/profile", headers=auth_headers(token)).json()["data"]["user"]

    resp = client.delete(f"/api/admin/users/{me['id']}", headers=auth_headers(token))
    assert resp.status_code == 400


def test_unknown_route_uses_envelope(client: TestClient):
    resp = client.get("/api/nowhere")
    assert resp.status_code == 404
    assert resp.json() == {"success": False, "error": "Route /api/nowhere not found"}


def test_admin_users_list_requires_token(client: TestClient):
    resp = client.get("/api/admin/users")
    assert resp.status_code == 401
    assert resp.json()["error"] == "Access token required"
