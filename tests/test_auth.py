"""
Auth tests.

Tests cover:
  - Password hashing (bcrypt) and generation
  - JWT token generation / verification / expiry
  - Password strength policy
  - Auth API: login, me, register, change-password, validate / generate password
  - JWT middleware: missing, malformed and orphaned tokens
"""

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from gcg_hub.core.exceptions import (
    InvalidCredentialsError,
    TokenExpiredError,
    TokenInvalidError,
    UserNotFoundError,
    ValidationError,
    WrongCurrentPasswordError,
)
from gcg_hub.models import db
from gcg_hub.models.auth import User
from gcg_hub.services import auth_service
from gcg_hub.services.jwt_service import decode_access_token, generate_access_token
from gcg_hub.utils.crypto import generate_password, hash_password, verify_password

from conftest import ADMIN_PASSWORD, USER_PASSWORD


# ═══════════════════════════════════════════════════════════════
# BLOCK 1: Crypto
# ═══════════════════════════════════════════════════════════════

class TestCrypto:
    def test_hash_and_verify(self):
        h = hash_password("Secret123!", rounds=4)
        assert h != "Secret123!"
        assert verify_password("Secret123!", h)

    def test_wrong_password(self):
        h = hash_password("Secret123!", rounds=4)
        assert not verify_password("Secret124!", h)

    def test_empty_hash(self):
        assert not verify_password("anything", None)
        assert not verify_password("anything", "")

    def test_malformed_hash(self):
        assert not verify_password("anything", "not-a-bcrypt-hash")

    def test_generated_password_is_strong(self):
        for _ in range(20):
            pw = generate_password()
            assert len(pw) == 12
            result = auth_service.check_password_strength(pw)
            assert result["valid"]
            assert result["strength"] == 4


# ═══════════════════════════════════════════════════════════════
# BLOCK 2: JWT
# ═══════════════════════════════════════════════════════════════

class TestJWTService:
    def test_roundtrip_subject(self, app):
        token = generate_access_token(42)
        assert decode_access_token(token) == 42

    def test_expired_token(self, app):
        now = datetime.now(timezone.utc)
        token = jwt.encode(
            {"sub": "1", "type": "access", "iat": now - timedelta(hours=2), "exp": now - timedelta(hours=1)},
            app.config["JWT_SECRET_KEY"],
            algorithm="HS256",
        )
        with pytest.raises(TokenExpiredError):
            decode_access_token(token)

    def test_wrong_signature(self, app):
        token = jwt.encode(
            {"sub": "1", "type": "access", "exp": datetime.now(timezone.utc) + timedelta(hours=1)},
            "another-secret-key-that-is-long-enough-for-hs256",
            algorithm="HS256",
        )
        with pytest.raises(TokenInvalidError):
            decode_access_token(token)

    def test_wrong_token_type(self, app):
        token = jwt.encode(
            {"sub": "1", "type": "refresh", "exp": datetime.now(timezone.utc) + timedelta(hours=1)},
            app.config["JWT_SECRET_KEY"],
            algorithm="HS256",
        )
        with pytest.raises(TokenInvalidError):
            decode_access_token(token)

    def test_garbage_token(self, app):
        with pytest.raises(TokenInvalidError):
            decode_access_token("not.a.token")


# ═══════════════════════════════════════════════════════════════
# BLOCK 3: Password policy
# ═══════════════════════════════════════════════════════════════

class TestPasswordPolicy:
    def test_too_short(self):
        result = auth_service.check_password_strength("Ab1!")
        assert result["valid"] is False
        assert "at least 6 characters" in result["message"]

    def test_single_class_is_weak(self):
        result = auth_service.check_password_strength("abcdefgh")
        assert result["valid"] is False
        assert result["strength"] == 1
        assert "too weak" in result["message"]

    def test_two_classes_is_enough(self):
        result = auth_service.check_password_strength("abcdef12")
        assert result == {"valid": True, "strength": 2, "message": None}

    def test_enforce_raises(self):
        with pytest.raises(ValidationError):
            auth_service.enforce_password_policy("short")


# ═══════════════════════════════════════════════════════════════
# BLOCK 4: Auth service
# ═══════════════════════════════════════════════════════════════

class TestAuthService:
    def test_authenticate_by_username(self, admin_user):
        token, identity = auth_service.authenticate("admin", ADMIN_PASSWORD)
        assert identity.id == admin_user.id
        assert identity.is_admin
        assert decode_access_token(token) == admin_user.id

    def test_authenticate_by_email(self, regular_user):
        _, identity = auth_service.authenticate("user1@example.com", USER_PASSWORD)
        assert identity.username == "user1"
        assert identity.division == "Divisi Pelaporan"

    def test_unknown_user_and_bad_password_look_the_same(self, admin_user):
        with pytest.raises(InvalidCredentialsError) as unknown:
            auth_service.authenticate("ghost", ADMIN_PASSWORD)
        with pytest.raises(InvalidCredentialsError) as wrong:
            auth_service.authenticate("admin", "Wrong123!")
        assert str(unknown.value) == str(wrong.value)

    def test_missing_credentials(self):
        with pytest.raises(ValidationError, match="required"):
            auth_service.authenticate("", "")

    def test_verify_deleted_user(self, regular_user):
        token = generate_access_token(regular_user.id)
        db.session.delete(regular_user)
        db.session.commit()
        with pytest.raises(UserNotFoundError):
            auth_service.verify(token)

    def test_verify_reads_current_attributes(self, regular_user):
        token = generate_access_token(regular_user.id)
        regular_user.division = "Divisi Baru"
        db.session.commit()
        assert auth_service.verify(token).division == "Divisi Baru"

    def test_change_password(self, regular_user):
        identity = auth_service.Identity.from_user(regular_user)
        auth_service.change_password(identity, USER_PASSWORD, "NewPass123!")
        assert verify_password("NewPass123!", db.session.get(User, regular_user.id).password_hash)

    def test_change_password_wrong_current(self, regular_user):
        identity = auth_service.Identity.from_user(regular_user)
        with pytest.raises(WrongCurrentPasswordError):
            auth_service.change_password(identity, "Nope123!", "NewPass123!")

    def test_change_password_weak_new(self, regular_user):
        identity = auth_service.Identity.from_user(regular_user)
        with pytest.raises(ValidationError, match="at least 6"):
            auth_service.change_password(identity, USER_PASSWORD, "a1")


# ═══════════════════════════════════════════════════════════════
# BLOCK 5: Auth API
# ═══════════════════════════════════════════════════════════════

class TestAuthAPI:
    def test_login_success(self, client, admin_user):
        res = client.post("/api/auth/login", json={"username": "admin", "password": ADMIN_PASSWORD})
        assert res.status_code == 200
        data = res.get_json()
        assert data["token_type"] == "Bearer"
        assert data["user"]["role"] == "ADMIN"
        assert "password_hash" not in data["user"]

        me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {data['token']}"})
        assert me.status_code == 200
        assert me.get_json()["user"]["username"] == "admin"

    def test_login_bad_password(self, client, admin_user):
        res = client.post("/api/auth/login", json={"username": "admin", "password": "Wrong123!"})
        assert res.status_code == 401
        assert res.get_json()["error"] == "Invalid credentials"

    def test_login_missing_fields(self, client):
        res = client.post("/api/auth/login", json={})
        assert res.status_code == 400

    def test_me_without_token(self, client):
        res = client.get("/api/auth/me")
        assert res.status_code == 401
        assert res.get_json()["error"] == "Access token required"

    def test_me_with_garbage_token(self, client):
        res = client.get("/api/auth/me", headers={"Authorization": "Bearer garbage"})
        assert res.status_code == 401
        assert res.get_json()["error"] == "Invalid token"

    def test_me_after_user_deleted(self, client, regular_user):
        headers = {"Authorization": f"Bearer {generate_access_token(regular_user.id)}"}
        db.session.delete(regular_user)
        db.session.commit()
        res = client.get("/api/auth/me", headers=headers)
        assert res.status_code == 401
        assert res.get_json()["error"] == "User not found"

    def test_register_as_admin(self, client, admin_headers):
        res = client.post("/api/auth/register", headers=admin_headers, json={
            "username": "auditor",
            "email": "Auditor@Example.com",
            "password": "Audit123!",
            "name": "Auditor",
            "directorate": "Direktorat Keuangan",
        })
        assert res.status_code == 201
        user = res.get_json()["user"]
        assert user["role"] == "USER"
        assert user["email"] == "Auditor@example.com"

    def test_register_requires_admin(self, client, user_headers):
        res = client.post("/api/auth/register", headers=user_headers, json={
            "username": "x", "email": "x@example.com", "password": "Xx12345!", "name": "X",
        })
        assert res.status_code == 403

    def test_register_duplicate_username(self, client, admin_headers, regular_user):
        res = client.post("/api/auth/register", headers=admin_headers, json={
            "username": "user1", "email": "other@example.com", "password": "Other123!", "name": "Other",
        })
        assert res.status_code == 409
        assert res.get_json()["error"] == "Username already exists"

    def test_register_missing_fields(self, client, admin_headers):
        res = client.post("/api/auth/register", headers=admin_headers, json={"username": "x"})
        assert res.status_code == 400
        body = res.get_json()
        assert body["code"] == "ERR_VALIDATION_REQUIRED"
        assert set(body["details"]) == {"email", "password", "name"}

    def test_register_bad_email(self, client, admin_headers):
        res = client.post("/api/auth/register", headers=admin_headers, json={
            "username": "x", "email": "not-an-email", "password": "Xx12345!", "name": "X",
        })
        assert res.status_code == 400

    def test_change_password_api(self, client, regular_user, user_headers):
        res = client.post("/api/auth/change-password", headers=user_headers, json={
            "current_password": "Wrong123!", "new_password": "Better123!",
        })
        assert res.status_code == 400
        assert res.get_json()["error"] == "Current password is incorrect"

        res = client.post("/api/auth/change-password", headers=user_headers, json={
            "current_password": USER_PASSWORD, "new_password": "Better123!",
        })
        assert res.status_code == 200
        login = client.post("/api/auth/login", json={"username": "user1", "password": "Better123!"})
        assert login.status_code == 200

    def test_validate_password(self, client):
        res = client.post("/api/auth/validate-password", json={"password": "abc"})
        assert res.status_code == 200
        assert res.get_json()["valid"] is False

        res = client.post("/api/auth/validate-password", json={})
        assert res.status_code == 400

    def test_generate_password(self, client):
        res = client.post("/api/auth/generate-password")
        assert res.status_code == 200
        data = res.get_json()
        assert len(data["password"]) == 12
        assert data["strength"] == 4
