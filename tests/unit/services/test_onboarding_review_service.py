"""Unit tests for onboarding (natural role) reviews."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, Mock

import pytest

from b4_platform.core.exceptions import InvalidTransitionError, NotFoundError
from b4_platform.services.email_service import COBUILDER_APPROVED
from b4_platform.services.review.onboarding_review_service import OnboardingReviewService


async def _apply(instance, **changes):
    for key, value in changes.items():
        setattr(instance, key, value)
    return instance


@pytest.fixture
def email_service():
    return Mock(is_configured=True, send_notification_email=AsyncMock(return_value=True))


@pytest.fixture
def auth_admin():
    return Mock(get_user_contact=AsyncMock(return_value={"email": "maya@example.com", "name": "Maya Levi"}))


class TestOnboardingReviewService:

    @pytest.fixture
    def state(self):
        return SimpleNamespace(
            user_id="user-1",
            primary_role="cobuilder",
            journey_status="pending_approval",
            retry_count=0,
        )

    @pytest.fixture
    def service(self, mock_session, state, email_service, auth_admin):
        service = OnboardingReviewService(
            mock_session, email_service=email_service, auth_admin=auth_admin
        )
        service.state_repo = Mock(
            get_by_user=AsyncMock(return_value=state),
            update_instance=AsyncMock(side_effect=_apply),
        )
        service.natural_role_repo = Mock(
            get_by_user=AsyncMock(return_value=SimpleNamespace(is_ready=True))
        )
        service.profile_repo = Mock(get_by_user=AsyncMock(return_value=None))
        service.certification_repo = Mock(upsert=AsyncMock())
        service.notifications = Mock(notify_admins=AsyncMock(), notify_user=AsyncMock())
        return service

    @pytest.mark.asyncio
    async def test_ready_cobuilder_approval_certifies(self, service, admin_user, email_service):
        result = await service.review(admin_user, "user-1", "approve")

        assert result.journey_status == "approved"
        assert service.certification_repo.upsert.await_args.kwargs["certification_type"] == "cobuilder_b4"
        assert email_service.send_notification_email.await_args.kwargs["email_type"] == COBUILDER_APPROVED

    @pytest.mark.asyncio
    async def test_entrepreneur_approval(self, service, state, admin_user, email_service):
        state.primary_role = "entrepreneur"

        result = await service.review(admin_user, "user-1", "approve")

        assert result.journey_status == "entrepreneur_approved"
        service.certification_repo.upsert.assert_not_awaited()
        email_service.send_notification_email.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_rejection_passes_notes_to_user(self, service, admin_user):
        result = await service.review(admin_user, "user-1", "reject", notes="Add examples")

        assert result.journey_status == "rejected"
        message = service.notifications.notify_user.await_args.args[3]
        assert message.endswith("Admin notes: Add examples")

    @pytest.mark.asyncio
    async def test_not_pending(self, service, state, admin_user):
        state.journey_status = "in_progress"

        with pytest.raises(InvalidTransitionError):
            await service.review(admin_user, "user-1", "approve")

    @pytest.mark.asyncio
    async def test_unknown_user(self, service, admin_user):
        service.state_repo.get_by_user.return_value = None

        with pytest.raises(NotFoundError):
            await service.review(admin_user, "ghost", "approve")
