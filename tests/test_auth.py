"""
Tests for registration, login, token verification and re-authentication.
"""

import pytest

from bookkeeper.common.exceptions import CredentialsRequiredError, InvalidCredentialsError
from bookkeeper.core.config import settings
from bookkeeper.services import user_service

# Matches the operator created by the `user` fixture
OPERATOR_MOBILE = "9000000001"
OPERATOR_PASSWORD = "secret123"


class TestAuthRoutes:

    def test_register_first_user_only(self, client):
        resp = client.post(
            "/api/v1/auth/register",
            json={"mobile": "9000000009", "password": "firstpass", "name": "First"},
        )
        assert resp.status_code == 201
        assert resp.json()["user_id"].startswith("ADM-")

        resp = client.post(
            "/api/v1/auth/register",
            json={"mobile": "9000000010", "password": "secondpass", "name": "Second"},
        )
        assert resp.status_code == 403

    def test_login_and_verify(self, client, user):
        resp = client.post(
            "/api/v1/auth/login", json={"mobile": OPERATOR_MOBILE, "password": OPERATOR_PASSWORD}
        )
        assert resp.status_code == 200
        token = resp.json()["access_token"]
        assert resp.json()["user"]["user_id"] == user.user_id

        resp = client.post("/api/v1/auth/verify", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 200
        assert resp.json()["valid"] is True

    def test_login_with_wrong_password(self, client, user):
        resp = client.post("/api/v1/auth/login", json={"mobile": OPERATOR_MOBILE, "password": "nope-nope"})
        assert resp.status_code == 401

    def test_oauth2_token_form(self, client, user):
        resp = client.post(
            "/api/v1/auth/token", data={"username": OPERATOR_MOBILE, "password": OPERATOR_PASSWORD}
        )
        assert resp.status_code == 200
        assert resp.json()["token_type"] == "bearer"

    def test_garbage_token_rejected(self, client):
        resp = client.post("/api/v1/auth/verify", headers={"Authorization": "Bearer not-a-jwt"})
        assert resp.status_code == 401
        assert resp.json()["detail"] == "Invalid token"

    def test_health(self, client):
        assert client.get("/health").json()["status"] == "healthy"


class TestReauthenticate:

    def test_missing_fields(self, db, user):
        with pytest.raises(CredentialsRequiredError):
            user_service.reauthenticate(db, OPERATOR_MOBILE, None)
        with pytest.raises(CredentialsRequiredError):
            user_service.reauthenticate(db, None, OPERATOR_PASSWORD)

    def test_wrong_password(self, db, user):
        with pytest.raises(InvalidCredentialsError):
            user_service.reauthenticate(db, OPERATOR_MOBILE, "wrong-password")

    def test_unknown_mobile(self, db, user):
        with pytest.raises(InvalidCredentialsError):
            user_service.reauthenticate(db, "9999999999", OPERATOR_PASSWORD)

    def test_success(self, db, user):
        assert user_service.reauthenticate(db, OPERATOR_MOBILE, OPERATOR_PASSWORD).id == user.id


class TestDefaultAdmin:

    def test_created_once(self, db, monkeypatch):
        monkeypatch.setattr(settings, "DEFAULT_ADMIN_MOBILE", "9000000100")
        monkeypatch.setattr(settings, "DEFAULT_ADMIN_PASSWORD", "adminpass")

        first = user_service.ensure_default_admin(db)
        second = user_service.ensure_default_admin(db)

        assert first.id == second.id
        assert user_service.count_users(db) == 1

    def test_skipped_without_configuration(self, db, monkeypatch):
        monkeypatch.setattr(settings, "DEFAULT_ADMIN_MOBILE", None)
        assert user_service.ensure_default_admin(db) is None
