from datetime import timedelta

from sqlalchemy import select

from conftest import auth_header, register
from family_ledger.api.routers import auth as auth_routes
from family_ledger.core.security import create_access_token, hash_password, verify_password
from family_ledger.models.user import User


def test_register_stores_hash_and_returns_tokens(client, db) -> None:
    body = register(client, "bob", password="plain-text-pw")

    assert body["success"] is True
    assert body["user"]["username"] == "bob"
    assert body["user"]["role"] == "member"
    assert "password" not in body["user"]
    assert "passwordHash" not in body["user"]
    assert body["accessToken"] and body["refreshToken"]

    stored = db.scalar(select(User).where(User.username == "bob"))
    assert stored.password_hash != "plain-text-pw"
    assert verify_password("plain-text-pw", stored.password_hash)
    assert stored.refresh_token == body["refreshToken"]


def test_register_rejects_duplicates_and_missing_fields(client) -> None:
    register(client, "bob")

    dup = client.post(
        "/api/auth/register",
        json={"name": "Other", "username": "bob2", "email": "bob@example.com", "password": "x"},
    )
    assert dup.status_code == 400
    assert dup.json() == {"success": False, "message": "Username or email already exists"}

    missing = client.post("/api/auth/register", json={"username": "carol"})
    assert missing.status_code == 400
    body = missing.json()
    assert body["success"] is False
    assert "password" in body["fields"]


def test_register_validates_username_length_and_email(client) -> None:
    short = client.post(
        "/api/auth/register",
        json={"name": "A", "username": "ab", "email": "ab@example.com", "password": "x"},
    )
    bad_email = client.post(
        "/api/auth/register",
        json={"name": "A", "username": "abc", "email": "not-an-email", "password": "x"},
    )

    assert short.status_code == 400
    assert "username" in short.json()["fields"]
    assert bad_email.status_code == 400
    assert "email" in bad_email.json()["fields"]


def test_register_rejects_blank_name(client) -> None:
    resp = client.post(
        "/api/auth/register",
        json={"name": "   ", "username": "abc", "email": "abc@example.com", "password": "x"},
    )

    assert resp.status_code == 400
    assert "name" in resp.json()["fields"]


def test_register_losing_insert_race_is_a_conflict(client, db, monkeypatch) -> None:
    def hash_after_rival_commits(password: str) -> str:
        # Runs between the duplicate pre-check and the insert.
        db.add(User(name="Rival", username="carol", email="carol@example.com", password_hash=hash_password("x")))
        db.commit()
        return hash_password(password)

    monkeypatch.setattr(auth_routes, "hash_password", hash_after_rival_commits)

    resp = client.post(
        "/api/auth/register",
        json={"name": "Carol", "username": "carol", "email": "carol2@example.com", "password": "pw"},
    )

    assert resp.status_code == 400
    assert resp.json() == {"success": False, "message": "Username or email already exists"}
    assert db.scalar(select(User).where(User.email == "carol2@example.com")) is None


def test_only_admins_can_register_admins_after_bootstrap(client, admin) -> None:
    assert admin["user"]["role"] == "admin"

    anonymous = client.post(
        "/api/auth/register",
        json={"name": "Eve", "username": "eve", "email": "eve@example.com", "password": "x", "role": "admin"},
    )
    assert anonymous.status_code == 403

    promoted = register(client, "dave", role="admin", token=admin["accessToken"])
    assert promoted["user"]["role"] == "admin"


def test_login_success_updates_last_login(client) -> None:
    register(client, "bob", password="pw-123")

    resp = client.post("/api/auth/login", json={"username": "bob", "password": "pw-123"})

    assert resp.status_code == 200
    body = resp.json()
    assert body["message"] == "Login successful"
    assert body["user"]["lastLogin"] is not None
    assert body["accessToken"]


def test_login_with_wrong_password_issues_no_token(client) -> None:
    register(client, "bob", password="pw-123")

    resp = client.post("/api/auth/login", json={"username": "bob", "password": "wrong"})
    unknown = client.post("/api/auth/login", json={"username": "nobody", "password": "pw-123"})

    assert resp.status_code == 401
    assert resp.json() == {"success": False, "message": "Invalid credentials"}
    assert "accessToken" not in resp.json()
    assert unknown.status_code == 401


def test_login_of_deactivated_user_is_forbidden(client, db) -> None:
    register(client, "bob", password="pw-123")
    user = db.scalar(select(User).where(User.username == "bob"))
    user.is_active = False
    db.commit()

    resp = client.post("/api/auth/login", json={"username": "bob", "password": "pw-123"})

    assert resp.status_code == 403


def test_refresh_issues_new_access_token_only_for_current_refresh_token(client) -> None:
    first = register(client, "bob", password="pw-123")

    ok = client.post("/api/auth/refresh", json={"refreshToken": first["refreshToken"]})
    assert ok.status_code == 200
    new_access = ok.json()["accessToken"]
    assert client.get("/api/auth/me", headers=auth_header(new_access)).status_code == 200

    # Logging out clears the stored token, so the old refresh token stops working.
    client.post("/api/auth/logout", headers=auth_header(first["accessToken"]))
    stale = client.post("/api/auth/refresh", json={"refreshToken": first["refreshToken"]})
    assert stale.status_code == 401

    garbage = client.post("/api/auth/refresh", json={"refreshToken": "garbage"})
    assert garbage.status_code == 401

    missing = client.post("/api/auth/refresh", json={})
    assert missing.status_code == 400


def test_refresh_for_deactivated_user_is_forbidden(client, db) -> None:
    body = register(client, "bob")
    user = db.scalar(select(User).where(User.username == "bob"))
    user.is_active = False
    db.commit()

    resp = client.post("/api/auth/refresh", json={"refreshToken": body["refreshToken"]})

    assert resp.status_code == 403


def test_logout_clears_stored_refresh_token(client, db) -> None:
    body = register(client, "bob")

    resp = client.post("/api/auth/logout", headers=auth_header(body["accessToken"]))

    assert resp.status_code == 200
    assert resp.json()["message"] == "Logout successful"
    user = db.scalar(select(User).where(User.username == "bob"))
    assert user.refresh_token is None


def test_me_returns_profile_without_secrets(client) -> None:
    body = register(client, "bob")

    resp = client.get("/api/auth/me", headers=auth_header(body["accessToken"]))

    assert resp.status_code == 200
    profile = resp.json()["user"]
    assert profile["username"] == "bob"
    assert profile["email"] == "bob@example.com"
    assert set(profile) == {"id", "name", "username", "email", "role", "isActive", "lastLogin", "createdAt"}


def test_password_change_requires_current_password(client) -> None:
    body = register(client, "bob", password="old-pw")
    headers = auth_header(body["accessToken"])

    wrong = client.put(
        "/api/auth/password",
        json={"currentPassword": "nope", "newPassword": "new-pw"},
        headers=headers,
    )
    assert wrong.status_code == 401

    ok = client.put(
        "/api/auth/password",
        json={"currentPassword": "old-pw", "newPassword": "new-pw"},
        headers=headers,
    )
    assert ok.status_code == 200

    assert client.post("/api/auth/login", json={"username": "bob", "password": "old-pw"}).status_code == 401
    assert client.post("/api/auth/login", json={"username": "bob", "password": "new-pw"}).status_code == 200


def test_gate_without_header(client) -> None:
    resp = client.get("/api/transactions")

    assert resp.status_code == 401
    assert resp.json() == {"success": False, "message": "Authentication required. Please log in."}

    basic = client.get("/api/transactions", headers={"Authorization": "Basic Ym9iOnB3"})
    assert basic.status_code == 401
    assert basic.json()["message"] == "Authentication required. Please log in."


def test_gate_with_invalid_or_expired_token(client) -> None:
    body = register(client, "bob")
    expired = create_access_token(body["user"]["id"], "member", expires_delta=timedelta(minutes=-1))

    for token in ("garbage", expired):
        resp = client.get("/api/transactions", headers=auth_header(token))
        assert resp.status_code == 401
        assert resp.json()["message"] == "Invalid or expired token. Please log in again."


def test_gate_with_token_for_missing_user(client) -> None:
    token = create_access_token(999, "member")

    resp = client.get("/api/transactions", headers=auth_header(token))

    assert resp.status_code == 401
    assert resp.json()["message"] == "User not found. Please log in again."


def test_deactivated_user_is_rejected_even_with_valid_access_token(client, db) -> None:
    body = register(client, "bob")
    headers = auth_header(body["accessToken"])
    assert client.get("/api/transactions", headers=headers).status_code == 200

    user = db.scalar(select(User).where(User.username == "bob"))
    user.is_active = False
    db.commit()

    for path in ("/api/transactions", "/api/categories", "/api/auth/me"):
        resp = client.get(path, headers=headers)
        assert resp.status_code == 403
        assert "deactivated" in resp.json()["message"]


def test_health_is_public_and_reports_optional_identity(client) -> None:
    anonymous = client.get("/api/health")
    assert anonymous.status_code == 200
    assert anonymous.json()["status"] == "OK"
    assert anonymous.json()["authenticated"] is False

    body = register(client, "bob")
    known = client.get("/api/health", headers=auth_header(body["accessToken"]))
    assert known.json()["authenticated"] is True

    # A bad token never turns the public endpoint into an error.
    bad = client.get("/api/health", headers=auth_header("garbage"))
    assert bad.status_code == 200
    assert bad.json()["authenticated"] is False
