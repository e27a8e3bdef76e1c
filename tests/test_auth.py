# File: tests/test_auth.py

from datetime import timedelta

from fastapi.testclient import TestClient

from portfolio_api.core.security import create_access_token, create_refresh_token, decode_token
from portfolio_api.main import create_application


def _login(client, username="admin", password="admin123"):
    return client.post("/api/auth/login", json={"username": username, "password": password})


def test_login_returns_tokens_without_password(client):
    resp = _login(client)
    assert resp.status_code == 200
    data = resp.json()
    assert data["message"] == "Login successful"
    assert data["accessToken"]
    assert data["refreshToken"]
    assert data["expiresIn"] == "24h"
    assert data["user"]["username"] == "admin"
    assert data["user"]["role"] == "admin"
    assert "password" not in data["user"]


def test_login_wrong_password_and_unknown_user_look_the_same(client):
    wrong = _login(client, password="not-the-password")
    unknown = _login(client, username="nobody")
    assert wrong.status_code == unknown.status_code == 401
    assert wrong.json() == unknown.json()
    assert wrong.json()["message"] == "Invalid username or password"


def test_login_rejects_short_password(client):
    resp = _login(client, password="123")
    assert resp.status_code == 400
    body = resp.json()
    assert body["error"] == "Validation error"
    assert any(d["field"] == "password" for d in body["details"])


def test_me_and_verify(client, admin_headers):
    me = client.get("/api/auth/me", headers=admin_headers)
    assert me.status_code == 200
    assert me.json()["user"]["username"] == "admin"

    verify = client.get("/api/auth/verify", headers=admin_headers)
    assert verify.status_code == 200
    assert verify.json()["valid"] is True
    assert verify.json()["user"]["role"] == "admin"


def test_missing_token(client):
    resp = client.get("/api/auth/me")
    assert resp.status_code == 401
    assert resp.json()["message"] == "No token provided"


def test_malformed_token(client):
    resp = client.get("/api/auth/verify", headers={"Authorization": "Bearer not.a.jwt"})
    assert resp.status_code == 401
    assert resp.json()["error"] == "Invalid token"


def test_expired_token(client, store, config):
    user = store.get_user_by_username("admin")
    token = create_access_token(user, config, expires_delta=timedelta(seconds=-10))
    resp = client.get("/api/auth/verify", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401
    assert resp.json()["error"] == "Token expired"


def test_refresh_issues_new_access_token(client):
    refresh_token = _login(client).json()["refreshToken"]
    resp = client.post("/api/auth/refresh", json={"refreshToken": refresh_token})
    assert resp.status_code == 200
    new_token = resp.json()["accessToken"]

    verify = client.get("/api/auth/verify", headers={"Authorization": f"Bearer {new_token}"})
    assert verify.status_code == 200


def test_refresh_rejects_access_token(client):
    access_token = _login(client).json()["accessToken"]
    resp = client.post("/api/auth/refresh", json={"refreshToken": access_token})
    assert resp.status_code == 401
    assert resp.json()["message"] == "Invalid or expired refresh token"


def test_refresh_token_cannot_call_api(client, store, config):
    token = create_refresh_token(store.get_user_by_username("admin"), config)
    resp = client.get("/api/auth/verify", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401


def test_refresh_for_deleted_user(client, config):
    token = create_refresh_token({"id": 999}, config)
    resp = client.post("/api/auth/refresh", json={"refreshToken": token})
    assert resp.status_code == 401
    assert resp.json()["message"] == "User not found"


def test_logout(client, admin_headers):
    resp = client.post("/api/auth/logout", headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json()["message"] == "Logout successful"


def test_non_admin_is_forbidden(client, store, config):
    user = store.add_user({"username": "viewer", "password": "x", "role": "viewer"})
    token = create_access_token(user, config)
    resp = client.post(
        "/api/projects",
        json={"title": "t", "description": "d", "technologies": "x"},
        headers={"Authorization": f"Bearer {token}"},
    )
    assert resp.status_code == 403
    assert resp.json()["message"] == "Admin privileges required"


def test_app_config_drives_token_expiry_and_secret(config, store, storage):
    config.jwt_expiration = "30m"
    config.jwt_secret = "app-specific-secret"
    app = create_application(config=config, store=store, storage=storage)
    with TestClient(app) as client:
        data = _login(client).json()
        assert data["expiresIn"] == "30m"

        claims = decode_token(data["accessToken"], config)
        assert claims["exp"] - claims["iat"] == 30 * 60

        verify = client.get(
            "/api/auth/verify", headers={"Authorization": f"Bearer {data['accessToken']}"}
        )
        assert verify.status_code == 200
