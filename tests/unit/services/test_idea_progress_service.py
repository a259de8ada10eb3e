"""Unit tests for IdeaProgressService."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, Mock
from uuid import uuid4

import pytest

from b4_platform.core.exceptions import (
    InvalidTransitionError,
    PermissionDeniedError,
    PhaseLockedError,
    ValidationError,
)
from b4_platform.schemas.journeys import PhaseProgressInput
from b4_platform.services.idea_progress_service import IdeaProgressService, episode_index

LAST_VALIDATION_PHASE = {
    "product_iterations": "v2 onboarding",
    "process_improvements": "Weekly retros",
    "lessons_learned": "Talk to users earlier",
}


async def _apply(instance, **changes):
    for key, value in changes.items():
        setattr(instance, key, value)
    return instance


def _completed(*numbers):
    return [SimpleNamespace(phase_number=n, is_completed=True) for n in numbers]


class TestEpisodeIndex:

    def test_order(self):
        assert episode_index("development") == 0
        assert episode_index("validation") == 1
        assert episode_index("growth") == 2
        assert episode_index("completed") == 3


class TestIdeaProgressService:

    @pytest.fixture
    def idea(self, current_user):
        return SimpleNamespace(
            id=uuid4(),
            creator_id=current_user.id,
            title="Robot baristas",
            review_status="approved",
            is_looking_for_cobuilders=True,
            current_episode="validation",
        )

    @pytest.fixture
    def service(self, mock_session, idea):
        service = IdeaProgressService(mock_session)
        service.idea_repo = Mock(
            get_by_id=AsyncMock(return_value=idea),
            update_instance=AsyncMock(side_effect=_apply),
        )

        async def _upsert(idea_id, episode, phase_number, **fields):
            return SimpleNamespace(phase_number=phase_number, is_completed=False, **fields)

        service.progress_repo = Mock(
            list_for_episode=AsyncMock(return_value=[]),
            get_phase=AsyncMock(return_value=None),
            upsert=AsyncMock(side_effect=_upsert),
            update_instance=AsyncMock(side_effect=_apply),
        )
        service.application_repo = Mock(
            get_one=AsyncMock(return_value=None),
            create=AsyncMock(return_value=SimpleNamespace(status="pending")),
        )
        service.notifications = Mock(notify_user=AsyncMock())
        return service

    @pytest.mark.asyncio
    async def test_last_phase_advances_episode(self, service, idea, current_user):
        service.progress_repo.list_for_episode.return_value = _completed(0, 1)

        result = await service.complete_phase(
            current_user.id, idea.id, "validation", 2,
            PhaseProgressInput(responses=LAST_VALIDATION_PHASE),
        )

        assert result.current_episode == "growth"
        assert result.validation_completed_at is not None

    @pytest.mark.asyncio
    async def test_growth_completion_finishes_the_idea(self, service, idea, current_user):
        idea.current_episode = "growth"
        service.progress_repo.list_for_episode.return_value = _completed(0, 1, 2)

        result = await service.complete_phase(
            current_user.id, idea.id, "growth", 3,
            PhaseProgressInput(responses={
                "org_structure": "Flat",
                "hiring_plan": "Two engineers",
                "culture_values": "Ownership",
            }),
        )

        assert result.current_episode == "completed"

    @pytest.mark.asyncio
    async def test_middle_phase_keeps_episode(self, service, idea, current_user):
        result = await service.complete_phase(
            current_user.id, idea.id, "validation", 0,
            PhaseProgressInput(responses={
                "hypothesis_testing": "Pricing",
                "customer_feedback": "Too slow",
                "pivot_decisions": "None yet",
            }),
        )

        assert result.current_episode == "validation"
        service.idea_repo.update_instance.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_future_episode_is_locked(self, service, idea, current_user):
        with pytest.raises(PhaseLockedError):
            await service.save_phase_progress(
                current_user.id, idea.id, "growth", 0, PhaseProgressInput()
            )

    @pytest.mark.asyncio
    async def test_earlier_episode_is_read_only(self, service, idea, current_user):
        with pytest.raises(InvalidTransitionError, match="development episode is completed"):
            await service.save_phase_progress(
                current_user.id, idea.id, "development", 0,
                PhaseProgressInput(responses={"problem_statement": "Rewritten"}),
            )

        service.progress_repo.upsert.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_finished_idea_rejects_growth_edits(self, service, idea, current_user):
        idea.current_episode = "completed"

        with pytest.raises(InvalidTransitionError):
            await service.check_editable(current_user.id, idea.id, "growth", 3)

    @pytest.mark.asyncio
    async def test_locked_phase(self, service, idea, current_user):
        with pytest.raises(PhaseLockedError):
            await service.save_phase_progress(
                current_user.id, idea.id, "validation", 1, PhaseProgressInput()
            )
        service.progress_repo.upsert.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unapproved_idea_journey_is_closed(self, service, idea, current_user):
        idea.review_status = "pending"

        with pytest.raises(InvalidTransitionError):
            await service.check_editable(current_user.id, idea.id, None, 0)

    @pytest.mark.asyncio
    async def test_only_creator_can_edit(self, service, idea):
        with pytest.raises(PermissionDeniedError):
            await service.check_editable("someone-else", idea.id, "validation", 0)

    @pytest.mark.asyncio
    async def test_unknown_episode(self, service, idea, current_user):
        with pytest.raises(ValidationError):
            await service.check_editable(current_user.id, idea.id, "maturity", 0)

    @pytest.mark.asyncio
    async def test_check_editable_resolves_episode(self, service, idea, current_user):
        episode = await service.check_editable(current_user.id, idea.id, "validation", 0)

        assert episode.value == "validation"

    @pytest.mark.asyncio
    async def test_cannot_apply_to_own_idea(self, service, idea, current_user):
        with pytest.raises(ValidationError):
            await service.apply_to_idea(current_user, idea.id, Mock())

    @pytest.mark.asyncio
    async def test_duplicate_application(self, service, idea, current_user):
        idea.creator_id = "another-founder"
        service.application_repo.get_one.return_value = SimpleNamespace(status="pending")

        with pytest.raises(InvalidTransitionError):
            await service.apply_to_idea(current_user, idea.id, Mock())

        service.application_repo.create.assert_not_awaited()
