"""
Component tests for token handling, profile, logout and admin user endpoints.
"""
import uuid

from jose import jwt
from sqlalchemy.exc import OperationalError

from app.core import auth
from app.models.user import User
from app.routers import users as users_routes
from tests.conftest import API, auth_headers, make_token


class TestTokens:
    def test_unknown_subject_is_provisioned_as_customer(self, client, session):
        newcomer = User(id=uuid.uuid4(), email="carol@ares.shop", name="x")
        headers = auth_headers(newcomer)

        response = client.get(f"{API}/profile", headers=headers)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["id"] == str(newcomer.id)
        assert data["name"] == "carol"
        assert data["role"] == "customer"
        assert session.get(User, newcomer.id) is not None

    def test_expired_token_is_rejected(self, client, customer):
        token = make_token(customer, expires_in=-60)

        response = client.get(
            f"{API}/profile", headers={"Authorization": f"Bearer {token}"}
        )

        assert response.status_code == 401
        assert response.headers["www-authenticate"] == "Bearer"

    def test_token_signed_with_wrong_secret(self, client, customer):
        token = jwt.encode(
            {"sub": str(customer.id), "email": customer.email}, "wrong", algorithm="HS256"
        )

        response = client.get(
            f"{API}/status", headers={"Authorization": f"Bearer {token}"}
        )

        assert response.status_code == 401
        assert response.json()["message"] == "Invalid or expired token"


class TestProfile:
    def test_read_profile(self, client, customer):
        response = client.get(f"{API}/profile", headers=auth_headers(customer))

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Profile retrieved successfully"
        assert body["data"]["email"] == "alice@ares.shop"
        assert body["data"]["is_admin"] is False

    def test_partial_update(self, client, customer):
        headers = auth_headers(customer)

        response = client.put(
            f"{API}/profile",
            json={"city": "Colombo", "phone": "0771234567"},
            headers=headers,
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["city"] == "Colombo"
        assert data["phone"] == "0771234567"
        assert data["name"] == "alice"

    def test_role_cannot_be_changed(self, client, customer):
        response = client.put(
            f"{API}/profile", json={"role": "admin"}, headers=auth_headers(customer)
        )

        assert response.status_code == 422
        assert "role" in response.json()["errors"]


class TestLogout:
    def test_logout_revokes_token(self, client, customer):
        headers = auth_headers(customer, jti="session-1")

        logout = client.post(f"{API}/logout", headers=headers)
        after = client.get(f"{API}/cart", headers=headers)

        assert logout.status_code == 200
        assert logout.json()["message"] == "Logged out successfully"
        assert after.status_code == 401
        assert after.json()["message"] == "Token has been revoked"

    def test_other_sessions_stay_valid(self, client, customer):
        client.post(f"{API}/logout", headers=auth_headers(customer, jti="session-1"))

        response = client.get(
            f"{API}/cart", headers=auth_headers(customer, jti="session-2")
        )

        assert response.status_code == 200

    def test_logout_requires_token(self, client):
        assert client.post(f"{API}/logout").status_code == 401


class TestStatus:
    def test_status_reports_user(self, client, customer):
        response = client.get(f"{API}/status", headers=auth_headers(customer))

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["status"] == "ACTIVE"
        assert data["authenticated_user"] == "alice@ares.shop"


class TestAdminUsers:
    def test_admin_lists_users(self, client, admin, customer, other_customer):
        response = client.get(
            f"{API}/users", params={"per_page": 2}, headers=auth_headers(admin)
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert len(data["users"]) == 2
        assert data["pagination"]["total"] == 3
        assert data["pagination"]["last_page"] == 2

    def test_admin_gets_single_user(self, client, admin, customer):
        response = client.get(
            f"{API}/users/{customer.id}", headers=auth_headers(admin)
        )

        assert response.status_code == 200
        assert response.json()["data"]["email"] == "alice@ares.shop"

    def test_unknown_user_is_404(self, client, admin):
        response = client.get(f"{API}/users/{uuid.uuid4()}", headers=auth_headers(admin))

        assert response.status_code == 404

    def test_customer_cannot_list_users(self, client, customer):
        response = client.get(f"{API}/users", headers=auth_headers(customer))

        assert response.status_code == 403
        assert response.json()["message"] == "Admin access required"


def _db_down(*args, **kwargs):
    raise OperationalError("SELECT 1", {}, Exception("connection refused"))


class TestStorageFailures:
    def test_user_lookup_failure_uses_error_envelope(
        self, client, customer, monkeypatch
    ):
        monkeypatch.setattr(auth.user_repo, "get_by_id", _db_down)

        response = client.get(f"{API}/profile", headers=auth_headers(customer))

        assert response.status_code == 500
        body = response.json()
        assert body["success"] is False
        assert body["error"]["code"] == "storage_error"

    def test_revocation_check_failure_uses_error_envelope(
        self, client, customer, monkeypatch
    ):
        monkeypatch.setattr(auth.user_repo, "is_token_revoked", _db_down)

        response = client.get(
            f"{API}/status", headers=auth_headers(customer, jti="session-1")
        )

        assert response.status_code == 500
        assert response.json()["error"]["code"] == "storage_error"

    def test_profile_update_failure_uses_error_envelope(
        self, client, customer, monkeypatch
    ):
        monkeypatch.setattr(users_routes.service.repo, "update", _db_down)

        response = client.put(
            f"{API}/profile", json={"city": "Kandy"}, headers=auth_headers(customer)
        )

        assert response.status_code == 500
        assert response.json()["error"]["code"] == "storage_error"

    def test_logout_failure_uses_error_envelope(self, client, customer, monkeypatch):
        monkeypatch.setattr(users_routes.service.repo, "revoke_token", _db_down)

        response = client.post(
            f"{API}/logout", headers=auth_headers(customer, jti="session-1")
        )

        assert response.status_code == 500
        assert response.json()["error"]["code"] == "storage_error"
