"""Integration tests for auth API endpoints."""

from datetime import timedelta

from authentication.auth import create_access_token, create_refresh_token
from models.config import settings

API = "/api/v1/auth"


class TestRegister:
    """Test cases for /api/v1/auth/register."""

    def test_register_new_user(self, client):
        response = client.post(
            f"{API}/register",
            json={"name": "New Person", "email": "new@example.com", "password": "secret1"},
        )

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["data"]["username"] == "newperson"
        assert body["data"]["email"] == "new@example.com"
        assert body["data"]["token"]
        assert "hashed_password" not in body["data"]
        assert settings.REFRESH_COOKIE_NAME in response.cookies

    def test_refresh_cookie_is_http_only(self, client):
        response = client.post(
            f"{API}/register",
            json={"name": "New Person", "email": "new@example.com", "password": "secret1"},
        )
        cookie_header = response.headers["set-cookie"].lower()
        assert "httponly" in cookie_header
        assert "samesite=strict" in cookie_header

    def test_register_duplicate_email(self, client, test_user):
        response = client.post(
            f"{API}/register",
            json={"name": "Copy", "email": "test@example.com", "password": "secret1"},
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "User already exists"

    def test_register_short_password(self, client):
        response = client.post(
            f"{API}/register",
            json={"name": "New Person", "email": "new@example.com", "password": "123"},
        )
        assert response.status_code == 400
        assert response.json()["detail"].startswith("body.password:")

    def test_register_invalid_email(self, client):
        response = client.post(
            f"{API}/register",
            json={"name": "New Person", "email": "not-an-email", "password": "secret1"},
        )
        assert response.status_code == 400
        assert "correlation_id" in response.json()


class TestLogin:
    """Test cases for /api/v1/auth/login."""

    def test_login_success(self, client, test_user):
        response = client.post(
            f"{API}/login",
            json={"email": "test@example.com", "password": "testpassword123"},
        )

        assert response.status_code == 200
        assert response.json()["data"]["id"] == test_user.id
        assert settings.REFRESH_COOKIE_NAME in response.cookies

    def test_login_wrong_password(self, client, test_user):
        response = client.post(
            f"{API}/login",
            json={"email": "test@example.com", "password": "wrong-password"},
        )

        assert response.status_code == 401
        body = response.json()
        assert body["detail"] == "Invalid email or password"
        assert body["error"] == "invalid_credentials"
        assert response.headers["www-authenticate"] == "Bearer"


class TestVerifyAndRefresh:
    """Test cases for /verify and /refresh."""

    def test_verify_with_bearer(self, client, test_user, auth_headers):
        response = client.get(f"{API}/verify", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["success"] is True
        assert response.json()["user"]["id"] == test_user.id

    def test_verify_without_credentials(self, client):
        response = client.get(f"{API}/verify")
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid token"

    def test_verify_uses_refresh_cookie(self, client, test_user):
        client.cookies.set(settings.REFRESH_COOKIE_NAME, create_refresh_token(test_user.id))

        response = client.get(f"{API}/verify")

        assert response.status_code == 200
        assert response.json()["user"]["token"]

    def test_refresh(self, client, test_user):
        client.cookies.set(settings.REFRESH_COOKIE_NAME, create_refresh_token(test_user.id))

        response = client.post(f"{API}/refresh")

        assert response.status_code == 200
        assert response.json()["data"]["id"] == test_user.id

    def test_refresh_without_cookie(self, client):
        response = client.post(f"{API}/refresh")

        assert response.status_code == 401
        assert response.json()["error"] == "missing_token"

    def test_refresh_with_invalid_cookie(self, client):
        client.cookies.set(settings.REFRESH_COOKIE_NAME, "garbage")

        response = client.post(f"{API}/refresh")

        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid refresh token"

    def test_logout_clears_cookie(self, client):
        response = client.post(f"{API}/logout")

        assert response.status_code == 200
        assert response.json()["message"] == "Logged out successfully"
        assert settings.REFRESH_COOKIE_NAME in response.headers["set-cookie"]


class TestProtectedRoutes:
    """Error codes on protected endpoints."""

    def test_missing_token(self, client):
        response = client.get("/api/v1/users/profile")

        assert response.status_code == 401
        assert response.json()["error"] == "missing_token"
        assert response.json()["detail"] == "No auth token, access denied"

    def test_expired_token(self, client, test_user):
        token = create_access_token(test_user.id, expires_delta=timedelta(hours=-1))

        response = client.get(
            "/api/v1/users/profile", headers={"Authorization": f"Bearer {token}"}
        )

        assert response.status_code == 401
        assert response.json()["error"] == "token_expired"

    def test_invalid_token(self, client):
        response = client.get(
            "/api/v1/users/profile", headers={"Authorization": "Bearer nonsense"}
        )
        assert response.status_code == 401
        assert response.json()["error"] == "invalid_token"

    def test_refresh_token_is_not_an_access_token(self, client, test_user):
        token = create_refresh_token(test_user.id)
        response = client.get(
            "/api/v1/users/profile", headers={"Authorization": f"Bearer {token}"}
        )
        assert response.json()["error"] == "invalid_token"

    def test_deleted_user(self, client, db_session, test_user, auth_headers):
        db_session.delete(test_user)
        db_session.commit()

        response = client.get("/api/v1/users/profile", headers=auth_headers)

        assert response.status_code == 401
        assert response.json()["error"] == "user_not_found"
