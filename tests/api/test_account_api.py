"""Tests for the delete-account endpoint."""

from unittest.mock import AsyncMock, patch

import jwt
import pytest
from fastapi.testclient import TestClient

from b4_platform.api.v1.endpoints.account import get_account_service
from b4_platform.core.exceptions import ConfigurationError, ValidationError
from b4_platform.main import app

DELETE_URL = "/api/v1/account/delete"


class TestDeleteAccountEndpoint:

    @pytest.fixture
    def mock_service(self):
        service = AsyncMock()
        app.dependency_overrides[get_account_service] = lambda: service
        return service

    def test_missing_header(self, test_client: TestClient, mock_service) -> None:
        response = test_client.post(DELETE_URL, json={"deleteType": "soft"})

        assert response.status_code == 401
        assert response.json() == {"error": "No authorization header"}
        mock_service.soft_delete.assert_not_awaited()

    def test_invalid_token(self, test_client: TestClient, mock_service) -> None:
        with patch(
            "b4_platform.core.jwt.JWTVerifier.verify_token",
            new=AsyncMock(side_effect=jwt.InvalidTokenError("bad signature")),
        ):
            response = test_client.post(
                DELETE_URL, json={"deleteType": "soft"}, headers={"Authorization": "Bearer forged"}
            )

        assert response.status_code == 401
        assert response.json() == {"error": "Unauthorized - invalid token"}

    def test_invalid_delete_type(self, test_client: TestClient, auth_headers: dict, mock_service) -> None:
        response = test_client.post(DELETE_URL, json={"deleteType": "archive"}, headers=auth_headers)

        assert response.status_code == 400
        assert response.json() == {"error": 'Invalid request. Use deleteType "soft" or "hard"'}

    def test_body_is_not_json(self, test_client: TestClient, auth_headers: dict, mock_service) -> None:
        response = test_client.post(
            DELETE_URL,
            content=b"deleteType=soft",
            headers={**auth_headers, "Content-Type": "text/plain"},
        )

        assert response.status_code == 400

    def test_soft_delete(self, test_client: TestClient, auth_headers: dict, mock_service) -> None:
        mock_service.soft_delete.return_value = "Account deactivated successfully"

        response = test_client.post(DELETE_URL, json={"deleteType": "soft"}, headers=auth_headers)

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Account deactivated successfully"}
        assert mock_service.soft_delete.await_args.args[0].email == "maya@b4platform.io"

    def test_send_confirmation(self, test_client: TestClient, auth_headers: dict, mock_service) -> None:
        mock_service.send_confirmation.return_value = "Confirmation code sent to your email"

        response = test_client.post(
            DELETE_URL, json={"action": "send_confirmation"}, headers=auth_headers
        )

        assert response.status_code == 200
        assert response.json()["message"] == "Confirmation code sent to your email"
        mock_service.hard_delete.assert_not_awaited()

    def test_hard_delete_with_wrong_code(self, test_client: TestClient, auth_headers: dict, mock_service) -> None:
        mock_service.hard_delete.side_effect = ValidationError("Invalid or expired confirmation code")

        response = test_client.post(
            DELETE_URL,
            json={"deleteType": "hard", "confirmationCode": "111111"},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid or expired confirmation code"}
        assert mock_service.hard_delete.await_args.args[1] == "111111"

    def test_email_not_configured(self, test_client: TestClient, auth_headers: dict, mock_service) -> None:
        mock_service.send_confirmation.side_effect = ConfigurationError("Email service not configured")

        response = test_client.post(
            DELETE_URL, json={"action": "send_confirmation"}, headers=auth_headers
        )

        assert response.status_code == 500
        assert response.json() == {"error": "Email service not configured"}
