"""Unit tests for learning journey review and the certifications it grants."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, Mock
from uuid import uuid4

import pytest

from b4_platform.core.constants import BoostType, JourneyType, ScaleType, UserStatus
from b4_platform.core.exceptions import (
    InvalidTransitionError,
    NotesRequiredError,
    NotFoundError,
    ValidationError,
)
from b4_platform.services.review.certification_rules import (
    CERTIFICATION_RULES,
    certification_rule,
)
from b4_platform.services.review.journey_review_service import JourneyReviewService


async def _apply(instance, **changes):
    for key, value in changes.items():
        setattr(instance, key, value)
    return instance


class TestCertificationRules:

    def test_skill_ptc_boosts_co_builder(self):
        rule = CERTIFICATION_RULES[JourneyType.SKILL_PTC]
        assert rule.certification_type == "cobuilder_b4"
        assert rule.display_label == "Vaccinated Co Builder"
        assert rule.state_changes() == {
            "user_status": UserStatus.BOOSTED.value,
            "boost_type": BoostType.BOOSTED_CO_BUILDER.value,
        }

    def test_idea_ptc_boosts_initiator(self):
        rule = certification_rule("idea_ptc")
        assert rule.certification_type == "initiator_b4"
        assert rule.state_changes()["boost_type"] == "boosted_initiator"

    def test_scaling_path_leaves_boost_type_alone(self):
        changes = certification_rule("scaling_path").state_changes()
        assert changes == {
            "user_status": UserStatus.SCALED.value,
            "scale_type": ScaleType.PERSONAL_PROMISE.value,
        }
        assert "boost_type" not in changes

    def test_unknown_journey_type(self):
        with pytest.raises(ValidationError):
            certification_rule("bad")


class TestJourneyReviewService:

    @pytest.fixture
    def journey(self):
        return SimpleNamespace(
            id=uuid4(),
            user_id="user-1",
            journey_type="skill_ptc",
            status="pending_approval",
            admin_notes=None,
        )

    @pytest.fixture
    def service(self, mock_session, journey):
        service = JourneyReviewService(mock_session)
        service.journey_repo = Mock(
            get_by_id=AsyncMock(return_value=journey),
            update_instance=AsyncMock(side_effect=_apply),
        )
        service.certification_repo = Mock(upsert=AsyncMock())
        service.state_repo = Mock(
            get_by_user=AsyncMock(return_value=SimpleNamespace(user_status=None, boost_type=None)),
            update_instance=AsyncMock(side_effect=_apply),
        )
        service.notifications = Mock(notify_user=AsyncMock())
        return service

    @pytest.mark.asyncio
    async def test_approve_grants_certification_and_status(
        self, service, journey, admin_user, mock_session
    ):
        result = await service.review(admin_user, journey.id, "approve")

        assert result.status == "approved"
        assert result.approved_by == admin_user.id
        service.certification_repo.upsert.assert_awaited_once_with(
            user_id="user-1",
            certification_type="cobuilder_b4",
            display_label="Vaccinated Co Builder",
            verified=True,
        )
        state_kwargs = service.state_repo.update_instance.await_args.kwargs
        assert state_kwargs == {"user_status": "boosted", "boost_type": "boosted_co_builder"}

        args = service.notifications.notify_user.await_args.args
        assert args[0] == "user-1"
        assert args[1] == "journey_approved"
        assert "SKILL PTC" in args[3]
        assert "Vaccinated Co Builder" in args[3]
        mock_session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_reject_requires_notes(self, service, journey, admin_user, mock_session):
        with pytest.raises(NotesRequiredError):
            await service.review(admin_user, journey.id, "reject", notes="   ")

        service.journey_repo.get_by_id.assert_not_awaited()
        mock_session.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_reject_with_notes(self, service, journey, admin_user):
        result = await service.review(admin_user, journey.id, "reject", notes="Add portfolio links")

        assert result.status == "rejected"
        assert result.admin_notes == "Add portfolio links"
        service.certification_repo.upsert.assert_not_awaited()
        assert service.notifications.notify_user.await_args.args[1] == "journey_rejected"

    @pytest.mark.asyncio
    async def test_only_pending_journeys_can_be_reviewed(
        self, service, journey, admin_user, mock_session
    ):
        journey.status = "approved"

        with pytest.raises(InvalidTransitionError):
            await service.review(admin_user, journey.id, "approve")

        service.certification_repo.upsert.assert_not_awaited()
        mock_session.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_unknown_journey(self, service, admin_user):
        service.journey_repo.get_by_id.return_value = None

        with pytest.raises(NotFoundError):
            await service.review(admin_user, uuid4(), "approve")

    @pytest.mark.asyncio
    async def test_approve_without_onboarding_state(self, service, journey, admin_user):
        service.state_repo.get_by_user.return_value = None

        result = await service.review(admin_user, journey.id, "approve")

        assert result.status == "approved"
        service.state_repo.update_instance.assert_not_awaited()
