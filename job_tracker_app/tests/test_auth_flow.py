"""
Test the authentication flow pipeline.
"""
from datetime import timedelta

import pytest
from fastapi import status

from backend.security import (
    create_access_token,
    decode_access_token,
    get_password_hash,
    verify_password,
)


class TestAuthenticationFlow:
    """Test the complete authentication pipeline."""

    def test_user_registration_success(self, test_client, test_user_data):
        """Test successful user registration."""
        response = test_client.post("/api/auth/register", json=test_user_data)

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["email"] == test_user_data["email"]
        assert data["is_active"] is True
        assert "id" in data
        assert "hashed_password" not in data  # Password should not be returned

    def test_registration_normalizes_email(self, test_client):
        response = test_client.post("/api/auth/register", json={"email": "  Jane@Example.COM ", "password": "secret123"})

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["email"] == "jane@example.com"

    def test_user_registration_duplicate_email(self, test_client, test_user_data):
        """Test registration with duplicate email fails."""
        # Register first user
        response = test_client.post("/api/auth/register", json=test_user_data)
        assert response.status_code == status.HTTP_200_OK

        # Try to register again with same email, different case
        duplicate = dict(test_user_data, email=test_user_data["email"].upper())
        response = test_client.post("/api/auth/register", json=duplicate)
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert "already registered" in response.json()["detail"]

    @pytest.mark.parametrize("payload, message", [
        ({"email": "not-an-email", "password": "secret123"}, "Please enter a valid email address."),
        ({"email": "short@example.com", "password": "12345"}, "Password should be at least 6 characters."),
    ])
    def test_registration_rejects_bad_input(self, test_client, payload, message):
        response = test_client.post("/api/auth/register", json=payload)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["detail"] == message

    def test_user_login_success(self, test_client, test_user_data):
        """Test successful user login."""
        # Register user first
        test_client.post("/api/auth/register", json=test_user_data)

        # Login
        login_data = {
            "username": test_user_data["email"],
            "password": test_user_data["password"]
        }
        response = test_client.post("/api/auth/login", data=login_data)

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert "access_token" in data
        assert data["token_type"] == "bearer"

    def test_user_login_invalid_credentials(self, test_client, test_user_data):
        """Test login with invalid credentials fails."""
        # Register user first
        test_client.post("/api/auth/register", json=test_user_data)

        # Try login with wrong password
        login_data = {
            "username": test_user_data["email"],
            "password": "wrongpassword"
        }
        response = test_client.post("/api/auth/login", data=login_data)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert "Incorrect email or password" in response.json()["detail"]

    def test_login_unknown_email(self, test_client):
        response = test_client.post("/api/auth/login", data={"username": "nobody@example.com", "password": "whatever"})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_protected_endpoint_without_token(self, test_client):
        """Test accessing protected endpoint without authentication token."""
        response = test_client.get("/api/applications/")
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_protected_endpoint_with_valid_token(self, test_client, auth_headers):
        """Test accessing protected endpoint with valid token."""
        response = test_client.get("/api/applications/", headers=auth_headers)
        assert response.status_code == status.HTTP_200_OK
        assert response.json() == []

    def test_protected_endpoint_with_invalid_token(self, test_client):
        """Test accessing protected endpoint with invalid token."""
        headers = {"Authorization": "Bearer invalid-token"}
        response = test_client.get("/api/applications/", headers=headers)
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_token_contains_user_info(self, test_client, test_user_data, auth_headers):
        """Test that JWT token identifies the signed-in user."""
        response = test_client.get("/api/auth/me", headers=auth_headers)

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["email"] == test_user_data["email"]

    def test_expired_token_rejected(self, test_client, test_user):
        token = create_access_token(data={"sub": test_user.id}, expires_delta=timedelta(minutes=-1))

        response = test_client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_token_for_deleted_user_rejected(self, test_client):
        token = create_access_token(data={"sub": "00000000-0000-0000-0000-000000000000"})

        response = test_client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_logout_clears_cookie(self, test_client):
        response = test_client.post("/api/auth/logout")

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {"success": True, "redirect": "/login"}
        assert "job_tracker_session" in response.headers.get("set-cookie", "")


class TestPasswordHashing:
    """bcrypt hashing of account passwords."""

    def test_hash_and_verify(self):
        hashed = get_password_hash("correct horse battery staple")

        assert hashed.startswith("$2")
        assert verify_password("correct horse battery staple", hashed)
        assert not verify_password("wrong", hashed)

    def test_hashes_are_salted(self):
        assert get_password_hash("secret123") != get_password_hash("secret123")

    def test_long_passwords_are_not_truncated(self):
        base = "x" * 80
        hashed = get_password_hash(base + "a")

        assert not verify_password(base + "b", hashed)

    def test_garbage_hash_does_not_verify(self):
        assert verify_password("secret123", "not-a-bcrypt-hash") is False


class TestAccessTokens:
    def test_round_trip_subject(self):
        token = create_access_token(data={"sub": "user-123"})

        assert decode_access_token(token) == "user-123"

    def test_tampered_token(self):
        header, payload, _ = create_access_token(data={"sub": "user-123"}).split(".")

        assert decode_access_token(f"{header}.{payload}.{'A' * 43}") is None
