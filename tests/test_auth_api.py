"""
Tests for registration, login, token handling, role gating and user administration.
"""

from datetime import timedelta

import pytest
from jose import JWTError

from realevr.models.user import UserRole
from realevr.schemas.auth import RegisterRequest
from realevr.services.auth import AuthService
from realevr.storage.memory import MemStorage
from realevr.utils.auth import create_access_token, hash_password, verify_password, verify_token
from tests.conftest import TEST_PASSWORD, UserFactory


def registration(**overrides) -> dict:
    data = {
        "username": "nakato",
        "password": "kampala2024",
        "confirmPassword": "kampala2024",
        "email": "Nakato@Example.com",
        "fullName": "Sarah Nakato",
    }
    data.update(overrides)
    return data


class TestPasswordsAndTokens:

    def test_hash_and_verify(self):
        hashed = hash_password("secret123")
        assert hashed != "secret123"
        assert verify_password("secret123", hashed)
        assert not verify_password("wrong-one", hashed)

    def test_short_password_rejected(self):
        with pytest.raises(ValueError):
            hash_password("abc")

    def test_token_round_trip(self):
        token = create_access_token(user_id=7, username="grace", role=UserRole.PROPERTY_MANAGER)
        payload = verify_token(token)
        assert (payload.user_id, payload.username, payload.role) == (7, "grace", "property_manager")

    def test_tampered_token(self):
        token = create_access_token(user_id=7, username="grace", role=UserRole.USER)
        header, payload, _ = token.split(".")
        with pytest.raises(JWTError):
            verify_token(f"{header}.{payload}.{'A' * 43}")


class TestRegistrationAndLogin:

    def test_register(self, client):
        response = client.post("/api/register", json=registration())
        assert response.status_code == 201
        body = response.json()
        assert body["tokenType"] == "bearer"
        assert body["expiresIn"] > 0
        assert body["user"]["role"] == "user"
        assert body["user"]["email"] == "nakato@example.com"
        assert body["user"]["membershipPlan"] == "basic"
        assert "password" not in body["user"]

        me = client.get("/api/user", headers={"Authorization": f"Bearer {body['accessToken']}"})
        assert me.json()["username"] == "nakato"

    def test_register_ignores_requested_role(self, client):
        response = client.post("/api/register", json=registration(role="admin"))
        assert response.json()["user"]["role"] == "user"

    def test_duplicate_username(self, client):
        client.post("/api/register", json=registration())
        response = client.post("/api/register", json=registration())
        assert response.status_code == 409
        assert response.json()["code"] == "CONFLICT"

    @pytest.mark.parametrize("overrides", [
        {"confirmPassword": "different1"},
        {"password": "abc", "confirmPassword": "abc"},
        {"email": "not-an-email"},
        {"username": "ab"},
    ])
    def test_register_validation(self, client, overrides):
        response = client.post("/api/register", json=registration(**overrides))
        assert response.status_code == 400

    def test_login(self, client, regular_user):
        response = client.post("/api/login", json={"username": "visitor", "password": TEST_PASSWORD})
        assert response.status_code == 200
        assert response.json()["user"]["id"] == regular_user.id

    def test_login_wrong_password(self, client, regular_user):
        response = client.post("/api/login", json={"username": "visitor", "password": "nope-nope"})
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid username or password"
        assert response.headers["www-authenticate"] == "Bearer"

    def test_login_unknown_user(self, client):
        response = client.post("/api/login", json={"username": "ghost", "password": TEST_PASSWORD})
        assert response.status_code == 401

    def test_logout(self, client):
        assert client.post("/api/logout").status_code == 204


class TestCurrentUser:

    def test_requires_token(self, client):
        response = client.get("/api/user")
        assert response.status_code == 401
        assert response.json()["message"] == "Authentication token required"

    def test_garbage_token(self, client):
        response = client.get("/api/user", headers={"Authorization": "Bearer not.a.token"})
        assert response.status_code == 401

    def test_expired_token(self, client, regular_user):
        token = create_access_token(
            user_id=regular_user.id,
            username=regular_user.username,
            role=regular_user.role,
            expires_delta=timedelta(minutes=-5)
        )
        response = client.get("/api/user", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401
        assert response.json()["message"] == "Token has expired"

    def test_token_for_missing_user(self, client):
        token = create_access_token(user_id=404, username="gone", role=UserRole.ADMIN)
        response = client.get("/api/user", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401


class TestUserAdministration:

    def test_list_users(self, client, admin_headers, regular_user):
        response = client.get("/api/users", headers=admin_headers)
        assert response.status_code == 200
        assert {u["username"] for u in response.json()} == {"admin", "visitor"}

    @pytest.mark.parametrize("headers_fixture", ["user_headers", "manager_headers"])
    def test_list_users_admin_only(self, client, request, headers_fixture):
        response = client.get("/api/users", headers=request.getfixturevalue(headers_fixture))
        assert response.status_code == 403
        assert response.json()["code"] == "FORBIDDEN"

    def test_change_role(self, client, admin_headers, regular_user):
        response = client.patch(
            f"/api/users/{regular_user.id}/role",
            json={"role": "property_manager"},
            headers=admin_headers
        )
        assert response.status_code == 200
        assert response.json()["role"] == "property_manager"

        headers = UserFactory.auth_headers(regular_user)
        created = client.post(
            "/api/amenities",
            json={"name": "Sauna", "icon": "hot-tub", "description": "Private sauna"},
            headers=headers
        )
        assert created.status_code == 403

    def test_invalid_role(self, client, admin_headers, regular_user):
        response = client.patch(f"/api/users/{regular_user.id}/role", json={"role": "owner"}, headers=admin_headers)
        assert response.status_code == 400

    def test_update_user(self, client, admin_headers, regular_user):
        response = client.patch(
            f"/api/users/{regular_user.id}",
            json={"isVerified": True, "membershipPlan": "enterprise"},
            headers=admin_headers
        )
        assert response.status_code == 200
        body = response.json()
        assert body["isVerified"] is True
        assert body["membershipPlan"] == "enterprise"

    def test_empty_user_update(self, client, admin_headers, regular_user):
        response = client.patch(f"/api/users/{regular_user.id}", json={}, headers=admin_headers)
        assert response.status_code == 400

    @pytest.mark.parametrize("field", ["role", "isVerified"])
    def test_null_for_required_field(self, client, admin_headers, regular_user, field):
        response = client.patch(f"/api/users/{regular_user.id}", json={field: None}, headers=admin_headers)
        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"

        users = client.get("/api/users", headers=admin_headers).json()
        visitor = next(u for u in users if u["username"] == "visitor")
        assert visitor["role"] == "user"
        assert visitor["isVerified"] is False

    def test_update_unknown_user(self, client, admin_headers):
        response = client.patch("/api/users/999/role", json={"role": "admin"}, headers=admin_headers)
        assert response.status_code == 404


class TestAuthService:

    async def test_bootstrap_admin_created_once(self):
        storage = MemStorage(None, seed=False)
        await storage.load()
        service = AuthService(storage)

        created = await service.ensure_bootstrap_admin("root", "rootpass1")
        assert created.role == UserRole.ADMIN
        assert await service.ensure_bootstrap_admin("root", "otherpass") is None
        assert len(await storage.list_users()) == 1

    async def test_bootstrap_admin_needs_credentials(self):
        storage = MemStorage(None, seed=False)
        await storage.load()
        assert await AuthService(storage).ensure_bootstrap_admin(None, None) is None

    async def test_activate_membership(self):
        storage = MemStorage(None, seed=False)
        await storage.load()
        service = AuthService(storage)
        user, _ = await service.register(RegisterRequest(**registration()))

        updated = await service.activate_membership(user.id, user.membership_plan, days=10)
        assert (updated.membership_end_date - updated.membership_start_date).days == 10
