"""Unit tests for the onboarding wizard service."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, Mock

import pytest

from b4_platform.core.constants import ExperienceCategory, PrimaryRole
from b4_platform.core.exceptions import InvalidTransitionError, ValidationError
from b4_platform.schemas.onboarding import (
    EntrepreneurialCategoryInput,
    PracticeAnswer,
)
from b4_platform.services.onboarding_service import OnboardingService


async def _apply(instance, **changes):
    for key, value in changes.items():
        setattr(instance, key, value)
    return instance


def _state(**overrides):
    state = dict(
        user_id="user-1",
        primary_role=None,
        potential_role=None,
        current_step=1,
        journey_status="in_progress",
        onboarding_completed=False,
        retry_count=0,
    )
    state.update(overrides)
    return SimpleNamespace(**state)


def _natural_role(**overrides):
    natural_role = dict(
        description=None,
        status="pending",
        promise_check=None,
        practice_check=None,
        training_check=None,
        consulting_check=None,
        is_ready=False,
    )
    natural_role.update(overrides)
    return SimpleNamespace(**natural_role)


class TestOnboardingService:

    @pytest.fixture
    def state(self):
        return _state()

    @pytest.fixture
    def natural_role(self):
        return _natural_role()

    @pytest.fixture
    def service(self, mock_session, state, natural_role):
        service = OnboardingService(mock_session)
        service.state_repo = Mock(
            get_by_user=AsyncMock(return_value=state),
            update_instance=AsyncMock(side_effect=_apply),
        )
        service.natural_role_repo = Mock(
            get_by_user=AsyncMock(return_value=natural_role),
            update_instance=AsyncMock(side_effect=_apply),
        )
        service.entrepreneurial_repo = Mock(
            get_by_user=AsyncMock(return_value=SimpleNamespace(is_completed=False)),
            update_instance=AsyncMock(side_effect=_apply),
        )
        service.profile_repo = Mock(upsert=AsyncMock())
        service.notifications = Mock(notify_user=AsyncMock(), notify_admins=AsyncMock())
        return service

    @pytest.mark.asyncio
    async def test_select_path_sets_role_and_advances(self, service, current_user, mock_session):
        state = await service.select_path(current_user, PrimaryRole.COBUILDER)

        assert state.primary_role == "cobuilder"
        assert state.potential_role == "potential_co_builder"
        assert state.current_step == 2
        assert service.notifications.notify_user.await_args.args[1] == "onboarding_path_selected"
        mock_session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_select_path_never_moves_step_backwards(self, service, state, current_user):
        state.current_step = 6

        result = await service.select_path(current_user, "entrepreneur")

        assert result.current_step == 6
        assert result.potential_role == "potential_entrepreneur"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", ["pending_approval", "approved", "entrepreneur_approved"])
    async def test_select_path_is_fixed_after_submission(
        self, service, state, current_user, mock_session, status
    ):
        state.primary_role = "cobuilder"
        state.journey_status = status

        with pytest.raises(InvalidTransitionError):
            await service.select_path(current_user, PrimaryRole.ENTREPRENEUR)

        assert state.primary_role == "cobuilder"
        service.state_repo.update_instance.assert_not_awaited()
        mock_session.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_rejected_user_can_choose_again(self, service, state, current_user):
        state.primary_role = "cobuilder"
        state.journey_status = "rejected"

        result = await service.select_path(current_user, PrimaryRole.ENTREPRENEUR)

        assert result.primary_role == "entrepreneur"

    @pytest.mark.asyncio
    async def test_missing_state_is_created_at_step_one(self, service, current_user):
        created = _state()
        service.state_repo.get_by_user.return_value = None
        service.state_repo.get_or_create = AsyncMock(return_value=created)

        await service.get_or_create_state(current_user.id)

        key, = service.state_repo.get_or_create.await_args.args
        kwargs = service.state_repo.get_or_create.await_args.kwargs
        assert key == {"user_id": current_user.id}
        assert kwargs["current_step"] == 1
        assert kwargs["journey_status"] == "in_progress"

    @pytest.mark.asyncio
    async def test_step_ahead_of_current_is_rejected(self, service, state, current_user, mock_session):
        state.primary_role = "cobuilder"
        state.current_step = 2

        with pytest.raises(InvalidTransitionError):
            await service.answer_practice(current_user, PracticeAnswer(has_experience=True))

        service.natural_role_repo.update_instance.assert_not_awaited()
        mock_session.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_step_of_other_path_is_rejected(self, service, state, current_user):
        state.primary_role = "entrepreneur"
        state.current_step = 3

        with pytest.raises(InvalidTransitionError):
            await service.define_natural_role(current_user, "Facilitator")

    @pytest.mark.asyncio
    async def test_blank_natural_role_is_rejected(self, service, current_user):
        with pytest.raises(ValidationError):
            await service.define_natural_role(current_user, "   ")

    @pytest.mark.asyncio
    async def test_define_natural_role(self, service, state, natural_role, current_user):
        state.primary_role = "cobuilder"
        state.current_step = 2

        result = await service.define_natural_role(current_user, "  Workshop facilitator ")

        assert natural_role.description == "Workshop facilitator"
        assert natural_role.status == "defined"
        assert result.current_step == 3

    @pytest.mark.asyncio
    async def test_promise_no_keeps_user_on_step_three(self, service, state, natural_role, current_user):
        state.primary_role = "cobuilder"
        state.current_step = 3

        result = await service.answer_promise(current_user, False)

        assert result.current_step == 3
        assert natural_role.promise_check is False
        assert natural_role.status == "not_ready"

    @pytest.mark.asyncio
    async def test_guidance_only_after_promise_no(self, service, state, natural_role, current_user):
        state.primary_role = "cobuilder"
        state.current_step = 3
        natural_role.promise_check = True

        with pytest.raises(InvalidTransitionError):
            await service.request_guidance(current_user)

    @pytest.mark.asyncio
    async def test_practice_help_notifies_admins(self, service, state, natural_role, current_user):
        state.primary_role = "cobuilder"
        state.current_step = 4

        result = await service.answer_practice(
            current_user, PracticeAnswer(has_experience=False, needs_help=True)
        )

        assert result.current_step == 5
        assert natural_role.practice_needs_help is True
        kwargs = service.notifications.notify_admins.await_args.kwargs
        assert kwargs["notification_type"] == "practice_help"
        assert kwargs["user_email"] == current_user.email

    @pytest.mark.asyncio
    async def test_complete_onboarding_submits_for_approval(
        self, service, state, natural_role, current_user
    ):
        state.primary_role = "cobuilder"
        state.current_step = 9
        natural_role.promise_check = True
        natural_role.practice_check = True
        natural_role.training_check = False
        natural_role.consulting_check = True

        result = await service.complete_onboarding(current_user)

        assert result.onboarding_completed is True
        assert result.journey_status == "pending_approval"
        assert natural_role.is_ready is False
        assert service.notifications.notify_admins.await_args.kwargs["notification_type"] == "journey_completed"

    @pytest.mark.asyncio
    async def test_complete_onboarding_twice_changes_nothing(self, service, state, current_user):
        state.primary_role = "cobuilder"
        state.current_step = 9
        state.onboarding_completed = True
        state.journey_status = "pending_approval"

        result = await service.complete_onboarding(current_user)

        assert result is state
        service.notifications.notify_admins.assert_not_awaited()
        service.state_repo.update_instance.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_rejected_onboarding_resubmission_counts_retry(
        self, service, state, natural_role, current_user
    ):
        state.primary_role = "cobuilder"
        state.current_step = 9
        state.onboarding_completed = True
        state.journey_status = "rejected"

        result = await service.complete_onboarding(current_user)

        assert result.journey_status == "pending_approval"
        assert result.retry_count == 1

    @pytest.mark.asyncio
    async def test_entrepreneurial_category_without_experience_clears_details(
        self, service, state, current_user
    ):
        state.primary_role = "entrepreneur"
        state.current_step = 4
        data = EntrepreneurialCategoryInput(
            has_experience=False, needs_help=True, role="Lead", count=6
        )

        result = await service.save_entrepreneurial_category(current_user, "team", data)

        columns = service.entrepreneurial_repo.update_instance.await_args.kwargs
        assert columns["has_led_team"] is False
        assert columns["team_size"] is None
        assert columns["team_role"] is None
        assert columns["team_needs_help"] is True
        assert result.current_step == 5
        assert service.notifications.notify_admins.await_args.kwargs["notification_type"] == "team_help"

    def test_category_columns_with_experience(self):
        data = EntrepreneurialCategoryInput(
            has_experience=True, description="Two SaaS launches", count=2,
            stage="launched", users_count="1k-10k",
        )

        columns = data.to_columns(ExperienceCategory.PRODUCT)

        assert columns == {
            "has_built_product": True,
            "product_description": "Two SaaS launches",
            "product_needs_help": False,
            "product_count": 2,
            "product_stage": "launched",
            "product_users_count": "1k-10k",
        }
