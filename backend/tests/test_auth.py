"""
Authentication tests.

Verifies:
- Employees are approved on registration; admins are not
- Unapproved accounts cannot log in, except the special employee pair
- Logout and withdrawn approval end sessions
"""

from datetime import timedelta

import pytest

from shopdesk.extensions import db
from shopdesk.models import SessionToken
from shopdesk.models.auth import ROLE_ADMIN, ROLE_EMPLOYEE
from shopdesk.services.auth_service import (
    AlreadyExistsError,
    InvalidCredentialsError,
    NotApprovedError,
    PasswordValidationError,
    hash_password,
    verify_password,
)
from shopdesk.services.session_service import hash_token
from shopdesk.time_utils import utcnow

from conftest import auth_headers


class TestPasswords:

    def test_hash_and_verify(self):
        hashed = hash_password("Correct-Horse", rounds=4)
        assert hashed != "Correct-Horse"
        assert verify_password("Correct-Horse", hashed)
        assert not verify_password("wrong-horse", hashed)

    def test_malformed_hash_is_mismatch(self):
        assert not verify_password("anything", "not-a-bcrypt-hash")

    def test_short_password_rejected(self):
        with pytest.raises(PasswordValidationError):
            hash_password("short", rounds=4)


class TestAccessGate:

    def test_register_employee_is_approved(self, services):
        user, token = services.access.register("new@shop.local", "Password1!", ROLE_EMPLOYEE)
        assert user.is_approved is True
        assert token

    def test_register_admin_waits_for_approval(self, services):
        user, token = services.access.register("boss@shop.local", "Password1!", ROLE_ADMIN)
        assert user.is_approved is False
        assert token is None

    def test_duplicate_username(self, services, employee_user):
        with pytest.raises(AlreadyExistsError):
            services.access.register(employee_user.username, "Password1!")

    def test_wrong_password(self, services, employee_user):
        with pytest.raises(InvalidCredentialsError):
            services.access.login(employee_user.username, "nope-nope")

    def test_unknown_user(self, services):
        with pytest.raises(InvalidCredentialsError):
            services.access.login("ghost@shop.local", "Password1!")

    def test_unapproved_cannot_login(self, services):
        services.access.register("pending@shop.local", "Password1!", ROLE_ADMIN)
        with pytest.raises(NotApprovedError):
            services.access.login("pending@shop.local", "Password1!")

    def test_special_pair_bypasses_approval(self, app, services):
        username = app.config["SPECIAL_EMPLOYEE_USERNAME"]
        password = app.config["SPECIAL_EMPLOYEE_PASSWORD"]
        services.access.create_user(username, password, ROLE_EMPLOYEE, is_approved=False)
        db.session.commit()

        user, token = services.access.login(username, password)

        assert user.is_approved is False
        assert token
        assert user.last_login_at is not None

    def test_withdrawn_approval_revokes_sessions(self, services, employee_user):
        _, token = services.access.login(employee_user.username, "Employee123!")
        assert services.sessions.validate(token) is not None

        services.access.set_approval(employee_user.id, False)

        assert services.sessions.validate(token) is None


class TestSessions:

    def test_expired_token(self, services, employee_user, db_session):
        _, token = services.access.login(employee_user.username, "Employee123!")
        record = db_session.query(SessionToken).filter_by(token_hash=hash_token(token)).one()
        record.expires_at = utcnow() - timedelta(minutes=1)
        db_session.commit()

        assert services.sessions.validate(token) is None

    def test_token_stored_hashed(self, services, employee_user, db_session):
        _, token = services.access.login(employee_user.username, "Employee123!")
        assert db_session.query(SessionToken).filter_by(token_hash=token).count() == 0
        assert db_session.query(SessionToken).filter_by(token_hash=hash_token(token)).count() == 1

    def test_cleanup_removes_old_revoked(self, services, employee_user, db_session):
        _, token = services.access.login(employee_user.username, "Employee123!")
        services.access.logout(token)
        record = db_session.query(SessionToken).one()
        record.created_at = utcnow() - timedelta(days=31)
        db_session.commit()

        assert services.sessions.cleanup_expired() == 1
        assert db_session.query(SessionToken).count() == 0


class TestAuthApi:

    def test_register_and_me(self, client, db_session):
        resp = client.post("/api/auth/register", json={
            "username": "cashier@shop.local",
            "password": "Password1!",
        })
        assert resp.status_code == 201
        assert resp.json["role"] == "employee"
        assert resp.json["isApproved"] is True

        me = client.get("/api/auth/me", headers=auth_headers(resp.json["token"]))
        assert me.status_code == 200
        assert me.json["user"]["username"] == "cashier@shop.local"

    def test_register_duplicate(self, client, employee_user):
        resp = client.post("/api/auth/register", json={
            "username": employee_user.username,
            "password": "Password1!",
        })
        assert resp.status_code == 400
        assert resp.json["error"] == "User already exists"

    def test_register_missing_fields(self, client, db_session):
        resp = client.post("/api/auth/register", json={"username": "x@shop.local"})
        assert resp.status_code == 400

    def test_register_unknown_role(self, client, db_session):
        resp = client.post("/api/auth/register", json={
            "username": "x@shop.local",
            "password": "Password1!",
            "role": "owner",
        })
        assert resp.status_code == 400

    def test_login_not_approved(self, client, db_session):
        client.post("/api/auth/register", json={
            "username": "boss@shop.local",
            "password": "Password1!",
            "role": "admin",
        })
        resp = client.post("/api/auth/login", json={
            "username": "boss@shop.local",
            "password": "Password1!",
        })
        assert resp.status_code == 401
        assert resp.json["error"] == "User not approved"

    def test_login_bad_password(self, client, employee_user):
        resp = client.post("/api/auth/login", json={
            "username": employee_user.username,
            "password": "wrong-password",
        })
        assert resp.status_code == 401
        assert resp.json["error"] == "Invalid username or password"

    def test_login_returns_token(self, client, employee_user):
        resp = client.post("/api/auth/login", json={
            "username": employee_user.username,
            "password": "Employee123!",
        })
        assert resp.status_code == 200
        assert resp.json["token"]
        assert resp.json["role"] == "employee"

    def test_logout(self, client, employee_headers):
        assert client.post("/api/auth/logout", headers=employee_headers).status_code == 200
        assert client.get("/api/auth/me", headers=employee_headers).status_code == 401

    @pytest.mark.parametrize("body", [
        {"username": 12345, "password": "Password1!"},
        {"username": "typed@shop.local", "password": 12345678},
        {"username": ["a@shop.local"], "password": "Password1!"},
        {"username": "typed@shop.local", "password": "Password1!", "role": 1},
    ])
    def test_register_non_string_fields(self, client, db_session, body):
        resp = client.post("/api/auth/register", json=body)
        assert resp.status_code == 400

    @pytest.mark.parametrize("body", [
        {"username": 5, "password": "Password1!"},
        {"username": "employee@shop.local", "password": {"raw": "x"}},
    ])
    def test_login_non_string_fields(self, client, employee_user, body):
        resp = client.post("/api/auth/login", json=body)
        assert resp.status_code == 400
        assert "must be a string" in resp.json["error"]

    def test_register_admin_gets_no_token(self, client, db_session):
        resp = client.post("/api/auth/register", json={
            "username": "pending-boss@shop.local",
            "password": "Password1!",
            "role": "admin",
        })
        assert resp.status_code == 201
        assert resp.json["isApproved"] is False
        assert resp.json["token"] is None
