"""Tests for the admin review endpoints."""

from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock, patch
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from b4_platform.api.v1.endpoints.admin import (
    get_application_review_service,
    get_dashboard_service,
    get_journey_review_service,
    get_opportunity_review_service,
)
from b4_platform.core.constants import ReviewDecision
from b4_platform.core.exceptions import InvalidTransitionError, NotesRequiredError
from b4_platform.main import app


def _journey(status: str):
    return SimpleNamespace(
        id=uuid4(),
        user_id="5b1f6a52-3c2e-4d1b-9a51-0d6f3f0c9a11",
        journey_type="skill_ptc",
        current_phase=5,
        status=status,
        started_at=datetime(2026, 2, 1, tzinfo=timezone.utc),
        completed_at=datetime(2026, 3, 1, tzinfo=timezone.utc),
        approved_at=datetime(2026, 3, 2, tzinfo=timezone.utc) if status == "approved" else None,
        admin_notes=None,
        updated_at=None,
    )


class TestAdminAccess:

    @pytest.fixture
    def no_role_grant(self):
        with patch(
            "b4_platform.core.auth.UserRoleRepository.has_role",
            new=AsyncMock(return_value=False),
        ) as has_role:
            yield has_role

    def test_regular_user_is_forbidden(
        self, test_client: TestClient, auth_headers: dict, no_role_grant
    ) -> None:
        app.dependency_overrides[get_journey_review_service] = lambda: AsyncMock()

        response = test_client.get("/api/v1/admin/journeys", headers=auth_headers)

        assert response.status_code == 403
        assert response.json()["detail"] == "Insufficient permissions. Required role: admin"
        no_role_grant.assert_awaited_once()

    def test_role_grant_makes_admin(self, test_client: TestClient, auth_headers: dict) -> None:
        mock_service = AsyncMock()
        mock_service.list_pending.return_value = [_journey("completed")]
        app.dependency_overrides[get_journey_review_service] = lambda: mock_service

        with patch(
            "b4_platform.core.auth.UserRoleRepository.has_role",
            new=AsyncMock(return_value=True),
        ):
            response = test_client.get("/api/v1/admin/journeys", headers=auth_headers)

        assert response.status_code == 200
        assert len(response.json()["data"]["items"]) == 1

    def test_admin_token_skips_role_lookup(self, test_client: TestClient, admin_headers: dict) -> None:
        mock_service = AsyncMock()
        mock_service.list_pending.return_value = []
        app.dependency_overrides[get_journey_review_service] = lambda: mock_service

        with patch("b4_platform.core.auth.UserRoleRepository.has_role", new=AsyncMock()) as has_role:
            response = test_client.get("/api/v1/admin/journeys", headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["message"] == "Retrieved 0 journeys"
        has_role.assert_not_awaited()


class TestAdminReviewEndpoints:

    def test_approve_journey(self, test_client: TestClient, admin_headers: dict) -> None:
        journey_id = uuid4()
        mock_service = AsyncMock()
        mock_service.review.return_value = _journey("approved")
        app.dependency_overrides[get_journey_review_service] = lambda: mock_service

        # Execute
        response = test_client.post(
            f"/api/v1/admin/journeys/{journey_id}/review",
            json={"decision": "approve"},
            headers=admin_headers,
        )

        # Assert
        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Journey approved"
        assert body["data"]["status"] == "approved"
        admin, reviewed_id, decision, notes = mock_service.review.await_args.args
        assert admin.is_admin is True
        assert reviewed_id == journey_id
        assert decision == ReviewDecision.APPROVE
        assert notes is None

    def test_reject_without_notes(self, test_client: TestClient, admin_headers: dict) -> None:
        mock_service = AsyncMock()
        mock_service.review.side_effect = NotesRequiredError("Notes are required when rejecting")
        app.dependency_overrides[get_journey_review_service] = lambda: mock_service

        response = test_client.post(
            f"/api/v1/admin/journeys/{uuid4()}/review",
            json={"decision": "reject", "notes": ""},
            headers=admin_headers,
        )

        assert response.status_code == 400
        detail = response.json()["detail"]
        assert detail["title"] == "Validation Failed"
        assert detail["detail"] == "Notes are required when rejecting"

    def test_unknown_decision(self, test_client: TestClient, admin_headers: dict) -> None:
        app.dependency_overrides[get_journey_review_service] = lambda: AsyncMock()

        response = test_client.post(
            f"/api/v1/admin/journeys/{uuid4()}/review",
            json={"decision": "maybe"},
            headers=admin_headers,
        )

        assert response.status_code == 422

    def test_reviewing_a_decided_idea_is_conflict(self, test_client: TestClient, admin_headers: dict) -> None:
        mock_service = AsyncMock()
        mock_service.review.side_effect = InvalidTransitionError(
            "Idea is already approved", current="approved", requested="rejected"
        )
        app.dependency_overrides[get_opportunity_review_service] = lambda: mock_service

        response = test_client.post(
            f"/api/v1/admin/opportunities/{uuid4()}/review",
            json={"decision": "reject", "notes": "Too late"},
            headers=admin_headers,
        )

        assert response.status_code == 409

    def test_list_applications_by_role(self, test_client: TestClient, admin_headers: dict) -> None:
        mock_service = AsyncMock()
        mock_service.list_pending.return_value = [{"email": "noa@example.com", "role": "partner"}]
        app.dependency_overrides[get_application_review_service] = lambda: mock_service

        response = test_client.get(
            "/api/v1/admin/applications?role=partner&search=noa", headers=admin_headers
        )

        assert response.status_code == 200
        assert response.json()["data"]["items"][0]["role"] == "partner"
        mock_service.list_pending.assert_awaited_once_with(role="partner", search="noa")

    def test_analytics(self, test_client: TestClient, admin_headers: dict) -> None:
        mock_service = AsyncMock()
        mock_service.get_admin_analytics.return_value = {"total_users": 12, "pending_reviews": 3}
        app.dependency_overrides[get_dashboard_service] = lambda: mock_service

        response = test_client.get("/api/v1/admin/analytics", headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["data"]["total_users"] == 12
