"""End-to-end tests for /api/v1/auth through the HTTP surface."""

from __future__ import annotations

from datetime import timedelta

import pytest
from bson import ObjectId

from shared.datetime_utils import utcnow

AUTH = "/api/v1/auth"


def _bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def _register(client, full_name="Jane Doe", email="jane@x.com", password="secret1"):
    return client.post(
        f"{AUTH}/register",
        json={"fullName": full_name, "email": email, "password": password},
    )


def _login(client, email="jane@x.com", password="secret1"):
    return client.post(f"{AUTH}/login", json={"email": email, "password": password})


def _verified_token(client, email_provider, email="jane@x.com") -> str:
    assert _register(client, email=email).status_code == 201
    code = email_provider.last_code(email)
    assert client.post(f"{AUTH}/verify-otp", json={"email": email, "otp": code}).status_code == 200
    resp = _login(client, email=email)
    assert resp.status_code == 200
    return resp.json()["data"]["token"]


class TestRegisterVerifyLogin:
    def test_happy_path(self, client, users, email_provider):
        resp = _register(client)
        assert resp.status_code == 201
        body = resp.json()
        assert body["success"] is True
        user_id = body["data"]["userId"]
        assert ObjectId.is_valid(user_id)

        code = email_provider.last_code("jane@x.com")
        resp = client.post(f"{AUTH}/verify-otp", json={"email": "jane@x.com", "otp": code})
        assert resp.status_code == 200
        assert resp.json() == {
            "success": True,
            "message": "Email verified successfully! You can now login.",
        }
        assert users.docs[ObjectId(user_id)].is_verified is True

        resp = _login(client)
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["user"]["email"] == "jane@x.com"
        assert data["user"]["isVerified"] is True
        assert "passwordHash" not in data["user"]
        assert "password" not in data["user"]

        resp = client.get(f"{AUTH}/verify-user", headers=_bearer(data["token"]))
        assert resp.status_code == 200
        assert resp.json()["data"]["user"]["id"] == user_id

        resp = client.get(f"{AUTH}/verify-user")
        assert resp.status_code == 401
        assert resp.json()["message"] == "Access denied. No token provided."

    def test_code_verifies_exactly_once(self, client, email_provider):
        _register(client)
        code = email_provider.last_code("jane@x.com")
        first = client.post(f"{AUTH}/verify-otp", json={"email": "jane@x.com", "otp": code})
        second = client.post(f"{AUTH}/verify-otp", json={"email": "jane@x.com", "otp": code})
        assert first.status_code == 200
        assert second.status_code == 400
        assert second.json()["success"] is False

    def test_login_before_verification(self, client):
        _register(client)
        resp = _login(client)
        assert resp.status_code == 401
        assert resp.json()["message"] == "Please verify your email first"


class TestRegistrationValidation:
    def test_duplicate_email(self, client, users):
        assert _register(client).status_code == 201
        resp = _register(client, full_name="Other", email="JANE@x.com", password="another1")
        assert resp.status_code == 400
        assert resp.json()["success"] is False
        assert resp.json()["code"] == "conflict"
        assert len(users.docs) == 1

    def test_short_password(self, client, users):
        resp = _register(client, password="12345")
        assert resp.status_code == 400
        body = resp.json()
        assert body["message"] == "Validation failed!"
        assert "password" in body["errors"]
        assert users.docs == {}

    def test_missing_field(self, client):
        resp = client.post(f"{AUTH}/register", json={"email": "jane@x.com", "password": "secret1"})
        assert resp.status_code == 400
        assert resp.json()["success"] is False
        assert "fullName" in resp.json()["errors"]

    def test_email_failure_still_registers(self, client, users, email_provider):
        email_provider.error = RuntimeError("smtp down")
        resp = _register(client)
        assert resp.status_code == 201
        assert len(users.docs) == 1


class TestOtpLifecycle:
    def test_expired_code_rejected(self, client, users, otps, email_provider):
        user_id = ObjectId(_register(client).json()["data"]["userId"])
        code = email_provider.last_code("jane@x.com")
        otps.expire(user_id, utcnow() - timedelta(seconds=1))

        resp = client.post(f"{AUTH}/verify-otp", json={"email": "jane@x.com", "otp": code})
        assert resp.status_code == 400
        assert resp.json()["message"] == "Invalid or expired OTP code"
        assert users.docs[user_id].is_verified is False

    def test_resend_invalidates_original(self, client, mocker):
        mocker.patch(
            "services.auth_service.generate_otp_code",
            side_effect=["111111", "222222"],
        )
        _register(client)
        assert client.post(f"{AUTH}/resend-otp", json={"email": "jane@x.com"}).status_code == 200

        old = client.post(f"{AUTH}/verify-otp", json={"email": "jane@x.com", "otp": "111111"})
        assert old.status_code == 400
        new = client.post(f"{AUTH}/verify-otp", json={"email": "jane@x.com", "otp": "222222"})
        assert new.status_code == 200

    def test_resend_for_verified_user(self, client, email_provider):
        _verified_token(client, email_provider)
        resp = client.post(f"{AUTH}/resend-otp", json={"email": "jane@x.com"})
        assert resp.status_code == 400
        assert resp.json()["message"] == "User is already verified"

    @pytest.mark.parametrize("path", ["verify-otp", "resend-otp"])
    def test_unknown_user_404(self, client, path):
        resp = client.post(f"{AUTH}/{path}", json={"email": "ghost@x.com", "otp": "123456"})
        assert resp.status_code == 404
        assert resp.json()["message"] == "User not found"


class TestLogin:
    def test_unknown_and_wrong_password_look_the_same(self, client, email_provider):
        _verified_token(client, email_provider)
        unknown = _login(client, email="ghost@x.com")
        wrong = _login(client, password="wrong-password")
        assert unknown.status_code == wrong.status_code == 401
        assert unknown.json() == wrong.json()

    def test_blocked_user_cannot_login_and_token_stops_working(
        self, client, users, email_provider
    ):
        token = _verified_token(client, email_provider)
        user = next(iter(users.docs.values()))
        users.docs[user.id] = user.model_copy(update={"is_blocked": True})

        resp = _login(client)
        assert resp.status_code == 400
        assert resp.json()["message"] == "Account is blocked. Contact admin."

        resp = client.get(f"{AUTH}/verify-user", headers=_bearer(token))
        assert resp.status_code == 403

    def test_invalid_token(self, client):
        resp = client.get(f"{AUTH}/verify-user", headers=_bearer("garbage"))
        assert resp.status_code == 401
        assert resp.json()["message"] == "Invalid token."

    def test_admin_login_rejects_regular_user(self, client, email_provider):
        _verified_token(client, email_provider)
        resp = client.post(
            f"{AUTH}/admin-login", json={"email": "jane@x.com", "password": "secret1"}
        )
        assert resp.status_code == 400
        assert resp.json()["message"] == "Access denied. Admin only."

    def test_admin_login(self, client, make_admin):
        make_admin()
        resp = client.post(
            f"{AUTH}/admin-login",
            json={"email": "admin@example.com", "password": "admin-pass"},
        )
        assert resp.status_code == 200
        assert resp.json()["data"]["user"]["role"] == "admin"

    def test_admin_login_blocked_admin(self, client, make_admin):
        make_admin(is_blocked=True)
        resp = client.post(
            f"{AUTH}/admin-login",
            json={"email": "admin@example.com", "password": "wrong-pass"},
        )
        assert resp.status_code == 400
        assert resp.json()["message"] == "Account is blocked."


class TestPasswordReset:
    def test_forgot_then_reset(self, client, email_provider):
        _verified_token(client, email_provider)
        resp = client.post(f"{AUTH}/forgot-password", json={"email": "jane@x.com"})
        assert resp.status_code == 200
        token = email_provider.last_reset_token("jane@x.com")

        resp = client.post(f"{AUTH}/reset-password/{token}", json={"password": "newsecret"})
        assert resp.status_code == 200
        assert _login(client, password="newsecret").status_code == 200
        assert _login(client).status_code == 401

    def test_forgot_unknown_user(self, client):
        resp = client.post(f"{AUTH}/forgot-password", json={"email": "ghost@x.com"})
        assert resp.status_code == 404

    def test_reset_with_bad_token(self, client):
        resp = client.post(f"{AUTH}/reset-password/not-a-token", json={"password": "newsecret"})
        assert resp.status_code == 400
        assert resp.json()["message"] == "Invalid reset token"


class TestDeleteAccount:
    def test_delete_own_account_cascades(self, client, users, owned, email_provider):
        token = _verified_token(client, email_provider)
        user_id = next(iter(users.docs))
        owned.add("profiles", user_id)
        owned.add("projects", user_id)
        owned.add("comments", user_id)

        resp = client.delete(f"{AUTH}/delete-account/{user_id}", headers=_bearer(token))
        assert resp.status_code == 200
        assert users.docs == {}
        assert all(docs == [] for docs in owned.docs.values())

        resp = client.get(f"{AUTH}/verify-user", headers=_bearer(token))
        assert resp.status_code == 401

    def test_cannot_delete_someone_else(self, client, users, email_provider, make_user):
        token = _verified_token(client, email_provider)
        other = make_user(email="bob@x.com")
        resp = client.delete(f"{AUTH}/delete-account/{other.id}", headers=_bearer(token))
        assert resp.status_code == 403
        assert other.id in users.docs

    def test_requires_token(self, client):
        resp = client.delete(f"{AUTH}/delete-account/{ObjectId()}")
        assert resp.status_code == 401

    def test_admin_role_rejected(self, client, make_admin):
        admin = make_admin()
        token = client.post(
            f"{AUTH}/admin-login",
            json={"email": "admin@example.com", "password": "admin-pass"},
        ).json()["data"]["token"]
        resp = client.delete(f"{AUTH}/delete-account/{admin.id}", headers=_bearer(token))
        assert resp.status_code == 403
        assert resp.json()["message"] == "Access denied. Insufficient permissions."


def test_request_id_header(client):
    resp = client.post(f"{AUTH}/forgot-password", json={"email": "ghost@x.com"})
    assert resp.headers["X-Request-ID"].startswith("req_")
