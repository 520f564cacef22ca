"""
Authentication and session tests.

Verifies:
- Register/login/logout issue and revoke opaque session tokens
- Tokens work from the Authorization header and the auth cookie
- Suspension, expiry and logout all end a session
- Login throttling locks an account after repeated failures
- Admin endpoints require an admin
"""

from datetime import timedelta

import pytest

from puantaj.extensions import db
from puantaj.models import SessionToken, User
from puantaj.services import auth_service, session_service
from puantaj.services.session_sweeper import SessionSweeper
from puantaj.time_utils import utcnow

from conftest import auth_headers, get_auth_token


PROTECTED_ENDPOINTS = [
    ("get", "/api/auth/user"),
    ("get", "/api/customers"),
    ("get", "/api/customer-tasks"),
    ("get", "/api/customer-quotes"),
    ("get", "/api/customer-payments"),
    ("get", "/api/contractor-payments"),
    ("get", "/api/personnel-payments"),
    ("get", "/api/transactions"),
    ("get", "/api/contractors"),
    ("get", "/api/personnel"),
    ("get", "/api/timesheets"),
    ("get", "/api/projects"),
    ("get", "/api/notes"),
    ("post", "/api/notes"),
    ("get", "/api/financial-summary"),
    ("get", "/api/admin/users"),
]


# =============================================================================
# REGISTER / LOGIN / LOGOUT
# =============================================================================


class TestAuthFlow:
    def test_register_returns_session(self, client, db_session):
        resp = client.post(
            "/api/auth/register",
            json={"email": "Yeni@Puantaj.Test", "password": "Sifre1234", "first_name": "Can"},
        )
        assert resp.status_code == 201
        assert resp.json["user"]["email"] == "yeni@puantaj.test"
        assert "password_hash" not in resp.json["user"]
        assert len(resp.json["token"]) == 64
        assert "auth_token=" in resp.headers.get("Set-Cookie", "")

    def test_register_duplicate_email(self, client, user):
        resp = client.post("/api/auth/register", json={"email": "owner@puantaj.test", "password": "Password123"})
        assert resp.status_code == 409

    @pytest.mark.parametrize("password", ["short1", "onlyletters", "12345678"])
    def test_register_weak_password(self, client, db_session, password):
        resp = client.post("/api/auth/register", json={"email": "weak@puantaj.test", "password": password})
        assert resp.status_code == 400

    def test_login_and_fetch_user(self, client, user):
        token = get_auth_token(client, "owner@puantaj.test", "Password123")
        assert token

        resp = client.get("/api/auth/user", headers=auth_headers(token))
        assert resp.status_code == 200
        assert resp.json["id"] == user.id

    def test_login_wrong_password(self, client, user):
        resp = client.post("/api/auth/login", json={"email": "owner@puantaj.test", "password": "WrongPass1"})
        assert resp.status_code == 401
        assert resp.json["error"] == "Invalid credentials"

    def test_logout_ends_session(self, client, headers):
        resp = client.post("/api/auth/logout", headers=headers)
        assert resp.status_code == 200
        assert client.get("/api/auth/user", headers=headers).status_code == 401

        resp = client.post("/api/auth/logout", headers=headers)
        assert resp.status_code == 401

    def test_cookie_authenticates(self, client, user):
        resp = client.post("/api/auth/login", json={"email": "owner@puantaj.test", "password": "Password123"})
        assert resp.status_code == 200

        # The test client keeps the cookie set by login
        resp = client.get("/api/auth/user")
        assert resp.status_code == 200
        assert resp.json["email"] == "owner@puantaj.test"

    def test_change_password_revokes_sessions(self, client, user, headers):
        resp = client.post(
            "/api/auth/change-password",
            json={"current_password": "Password123", "new_password": "Yenisifre42"},
            headers=headers,
        )
        assert resp.status_code == 200
        assert client.get("/api/auth/user", headers=headers).status_code == 401
        assert get_auth_token(client, "owner@puantaj.test", "Yenisifre42")


# =============================================================================
# SESSION LIFECYCLE
# =============================================================================


class TestSessionLifecycle:
    @pytest.mark.parametrize("method,path", PROTECTED_ENDPOINTS)
    def test_protected_endpoints_require_token(self, client, db_session, method, path):
        assert getattr(client, method)(path).status_code == 401
        assert getattr(client, method)(path, headers=auth_headers("not-a-token")).status_code == 401

    def test_suspension_ends_sessions(self, client, user, token, headers):
        assert client.get("/api/auth/user", headers=headers).status_code == 200

        auth_service.set_user_status(user.id, "SUSPENDED")

        assert session_service.resolve_session(token) is None
        assert db.session.query(SessionToken).filter_by(user_id=user.id).count() == 0
        assert client.get("/api/auth/user", headers=headers).status_code == 401

    def test_suspended_user_cannot_log_in(self, client, user):
        auth_service.set_user_status(user.id, "SUSPENDED")
        resp = client.post("/api/auth/login", json={"email": "owner@puantaj.test", "password": "Password123"})
        assert resp.status_code == 403

    def test_sessions_resolved_after_status_flip_are_rejected(self, client, user, token):
        # Suspend by writing the column directly, bypassing the service cleanup
        user.status = "SUSPENDED"
        db.session.commit()

        assert session_service.resolve_session(token) is None
        assert db.session.query(SessionToken).filter_by(user_id=user.id).count() == 0

    def test_expired_session_is_rejected_and_deleted(self, client, user, token, headers):
        session = db.session.query(SessionToken).filter_by(user_id=user.id).one()
        session.expires_at = utcnow() - timedelta(seconds=1)
        db.session.commit()

        assert client.get("/api/auth/user", headers=headers).status_code == 401
        assert db.session.query(SessionToken).count() == 0

    def test_sweeper_removes_only_expired_rows(self, app, user):
        _, live_token = session_service.create_session(user.id)
        expired, _ = session_service.create_session(user.id)
        expired.expires_at = utcnow() - timedelta(days=1)
        db.session.commit()

        sweeper = SessionSweeper(app, 0)
        assert sweeper.enabled is False
        assert sweeper.sweep_once() == 1

        db.session.expire_all()
        assert db.session.query(SessionToken).count() == 1
        assert session_service.resolve_session(live_token) is not None

    def test_tokens_are_stored_hashed(self, user, token):
        stored = db.session.query(SessionToken).filter_by(user_id=user.id).one()
        assert stored.token_hash != token
        assert stored.token_hash == session_service.hash_token(token)


# =============================================================================
# LOGIN THROTTLING
# =============================================================================


class TestLoginThrottle:
    def test_lockout_after_max_failures(self, client, app, user):
        max_attempts = app.config["LOGIN_MAX_FAILED_ATTEMPTS"]
        for _ in range(max_attempts - 1):
            resp = client.post("/api/auth/login", json={"email": "owner@puantaj.test", "password": "Nope12345"})
            assert resp.status_code == 401

        resp = client.post("/api/auth/login", json={"email": "owner@puantaj.test", "password": "Nope12345"})
        assert resp.status_code == 429

        # Correct password is refused while locked
        resp = client.post("/api/auth/login", json={"email": "OWNER@puantaj.test", "password": "Password123"})
        assert resp.status_code == 429
        assert resp.json["locked"] is True

        status = client.get("/api/auth/lockout-status/owner@puantaj.test").json
        assert status["locked"] is True
        assert status["failed_attempts"] == max_attempts

    def test_warning_near_lockout(self, client, app, user):
        max_attempts = app.config["LOGIN_MAX_FAILED_ATTEMPTS"]
        for _ in range(max_attempts - 3):
            resp = client.post("/api/auth/login", json={"email": "owner@puantaj.test", "password": "Nope12345"})
        assert resp.status_code == 401
        assert resp.json["warning"] == "3 attempts remaining before account lockout"

    def test_success_clears_failures(self, client, user):
        client.post("/api/auth/login", json={"email": "owner@puantaj.test", "password": "Nope12345"})
        assert get_auth_token(client, "owner@puantaj.test", "Password123")

        status = client.get("/api/auth/lockout-status/owner@puantaj.test").json
        assert status["failed_attempts"] == 0


# =============================================================================
# ADMIN
# =============================================================================


class TestAdmin:
    def test_regular_user_gets_403(self, client, headers):
        assert client.get("/api/admin/users", headers=headers).status_code == 403

    def test_admin_lists_users(self, client, admin_headers, user):
        resp = client.get("/api/admin/users", headers=admin_headers)
        assert resp.status_code == 200
        assert resp.json["count"] == 2

    def test_admin_suspends_user(self, client, admin_headers, user, headers):
        resp = client.patch(f"/api/admin/users/{user.id}/status", json={"status": "suspended"}, headers=admin_headers)
        assert resp.status_code == 200
        assert resp.json["user"]["status"] == "SUSPENDED"
        assert client.get("/api/customers", headers=headers).status_code == 401

    def test_admin_cannot_suspend_self(self, client, admin_user, admin_headers):
        resp = client.patch(
            f"/api/admin/users/{admin_user.id}/status", json={"status": "SUSPENDED"}, headers=admin_headers
        )
        assert resp.status_code == 409

    def test_role_change(self, client, admin_headers, user):
        resp = client.patch(f"/api/admin/users/{user.id}/role", json={"role": "admin"}, headers=admin_headers)
        assert resp.status_code == 200
        assert db.session.get(User, user.id).has_admin_access

    def test_invalid_status_rejected(self, client, admin_headers, user):
        resp = client.patch(f"/api/admin/users/{user.id}/status", json={"status": "BANNED"}, headers=admin_headers)
        assert resp.status_code == 400


class TestHealth:
    def test_health_reports_database_and_sweeper(self, client, db_session):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json["status"] == "healthy"
        assert resp.json["checks"]["session_sweeper"] == {"enabled": False, "running": False}
