"""Endpoint tests for OTP login, logout and session introspection."""

from datetime import timedelta
from unittest.mock import patch

import pytest
import requests

from app.core.config import settings
from app.core.security import session_from_token
from tests.helpers import make_response

REQUEST = "app.services.backend_api.requests.request"

LOGIN_PAYLOAD = {"token": "backend-jwt", "user": {"userId": 12, "role": "TSMWA_EDITOR"}}


class TestOtpLogin:
    def test_request_otp_forwards_phone(self, client):
        with patch(REQUEST, return_value=make_response({"message": "OTP sent successfully"})) as request:
            response = client.post("/auth/request-otp", json={"phone": "9876543210"})

        assert response.json() == {"status": "otp_sent", "message": "OTP sent successfully"}
        assert request.call_args.args[1].endswith("/api/auth/request_otp")

    def test_request_otp_backend_error(self, client):
        with patch(REQUEST, return_value=make_response({"message": "User not found"}, status_code=404)):
            response = client.post("/auth/request-otp", json={"phone": "9876543210"})

        assert response.status_code == 404
        assert response.json()["detail"] == "User not found"

    def test_request_otp_validates_phone(self, client):
        response = client.post("/auth/request-otp", json={"phone": "123"})

        assert response.status_code == 422

    def test_verify_sets_session_cookie(self, client):
        with patch(REQUEST, return_value=make_response(LOGIN_PAYLOAD)):
            response = client.post("/auth/verify-otp", json={"phone": "9876543210", "otp": "123456"})

        assert response.json() == {"status": "authenticated", "role": "TSMWA_EDITOR", "redirect": "/tsmwa"}

        cookie = response.cookies.get(settings.SESSION_COOKIE_NAME)
        session = session_from_token(cookie)
        assert session.subject == "12"
        assert session.role == "TSMWA_EDITOR"
        assert session.token == "backend-jwt"

    def test_verify_honours_local_callback(self, client):
        body = {"phone": "9876543210", "otp": "123456", "callbackUrl": "/tsmwa/vehicles"}

        with patch(REQUEST, return_value=make_response(LOGIN_PAYLOAD)):
            response = client.post("/auth/verify-otp", json=body)

        assert response.json()["redirect"] == "/tsmwa/vehicles"

    @pytest.mark.parametrize("callback", [
        "//evil.example/admin",
        "/\\evil.example",
        "/\\/evil.example",
        "https://evil.example/admin",
        "/admin\n/x",
        "tsmwa/vehicles",
    ])
    def test_verify_ignores_foreign_callback(self, client, callback):
        body = {"phone": "9876543210", "otp": "123456", "callbackUrl": callback}

        with patch(REQUEST, return_value=make_response(LOGIN_PAYLOAD)):
            response = client.post("/auth/verify-otp", json=body)

        assert response.json()["redirect"] == "/tsmwa"

    def test_wrong_otp(self, client):
        with patch(REQUEST, return_value=make_response({"message": "Invalid OTP"}, status_code=400)):
            response = client.post("/auth/verify-otp", json={"phone": "9876543210", "otp": "000000"})

        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid OTP"
        assert settings.SESSION_COOKIE_NAME not in response.cookies

    def test_login_service_unreachable(self, client):
        with patch(REQUEST, side_effect=requests.ConnectionError("refused")):
            response = client.post("/auth/verify-otp", json={"phone": "9876543210", "otp": "123456"})

        assert response.status_code == 502
        assert settings.SESSION_COOKIE_NAME not in response.cookies

    def test_malformed_login_response(self, client):
        with patch(REQUEST, return_value=make_response({"token": "x"})):
            response = client.post("/auth/verify-otp", json={"phone": "9876543210", "otp": "123456"})

        assert response.status_code == 502


class TestSession:
    def test_login_page_reports_expiry(self, client):
        response = client.get("/login", params={"callbackUrl": "/admin/users", "expired": "true"})

        body = response.json()
        assert body["callbackUrl"] == "/admin/users"
        assert body["expired"] is True
        assert body["message"]

    def test_session_without_token(self, client):
        assert client.get("/auth/session").json() == {"status": "unauthenticated"}

    def test_session_with_token(self, client, auth_headers):
        body = client.get("/auth/session", headers=auth_headers("ADMIN_VIEWER")).json()

        assert body["status"] == "authenticated"
        assert body["role"] == "ADMIN_VIEWER"
        assert body["expires_at"]

    def test_expired_session_is_unauthenticated(self, client, auth_headers):
        headers = auth_headers("ADMIN", expires_delta=timedelta(seconds=-30))

        assert client.get("/auth/session", headers=headers).json() == {"status": "unauthenticated"}

    def test_logout_clears_cookie(self, client, auth_headers):
        response = client.post("/auth/logout", headers=auth_headers("ADMIN"))

        assert response.json() == {"status": "unauthenticated"}
        assert f'{settings.SESSION_COOKIE_NAME}=""' in response.headers["set-cookie"]
