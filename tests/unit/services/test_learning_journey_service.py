"""Unit tests for LearningJourneyService."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, Mock
from uuid import uuid4

import pytest

from b4_platform.core.exceptions import (
    InvalidTransitionError,
    NotFoundError,
    PermissionDeniedError,
    PhaseLockedError,
    ValidationError,
)
from b4_platform.schemas.journeys import PhaseProgressInput
from b4_platform.services.learning_journey_service import (
    LearningJourneyService,
    build_phase_states,
    journey_label,
)
from b4_platform.services.phase_machine import journey_machine

PHASE_0_ANSWERS = {
    "identify_skills": "Facilitation",
    "skill_examples": "Three design sprints",
    "skill_passion": "Workshops",
}


async def _apply(instance, **changes):
    for key, value in changes.items():
        setattr(instance, key, value)
    return instance


def _row(phase_number, is_completed=False, responses=None, completed_tasks=None):
    return SimpleNamespace(
        phase_number=phase_number,
        is_completed=is_completed,
        responses=responses or {},
        completed_tasks=completed_tasks or [],
        uploaded_files=[],
    )


class TestHelpers:

    def test_journey_label(self):
        assert journey_label("skill_ptc") == "SKILL PTC"
        assert journey_label("scaling_path") == "SCALING PATH"

    def test_phase_states_unlock_after_completion(self):
        machine = journey_machine("skill_ptc")

        states = build_phase_states(machine, [_row(0, True, PHASE_0_ANSWERS)])

        assert [s.accessible for s in states] == [True, True, False, False]
        assert states[0].is_completed
        assert states[0].missing_tasks == []
        assert states[1].missing_tasks == ["core_methodology", "framework_basics", "self_assessment"]


class TestLearningJourneyService:

    @pytest.fixture
    def journey(self, current_user):
        return SimpleNamespace(
            id=uuid4(),
            user_id=current_user.id,
            journey_type="skill_ptc",
            status="in_progress",
            current_phase=0,
        )

    @pytest.fixture
    def storage(self):
        return Mock(
            upload_bytes=AsyncMock(),
            get_signed_url=AsyncMock(return_value="https://project.supabase.co/signed"),
        )

    @pytest.fixture
    def service(self, mock_session, journey, storage):
        service = LearningJourneyService(mock_session, storage=storage)
        service.journey_repo = Mock(
            get_by_id=AsyncMock(return_value=journey),
            update_instance=AsyncMock(side_effect=_apply),
        )

        async def _upsert(journey_id, phase_number, **fields):
            return SimpleNamespace(phase_number=phase_number, is_completed=False, **fields)

        service.phase_repo = Mock(
            list_for_journey=AsyncMock(return_value=[]),
            get_phase=AsyncMock(return_value=None),
            upsert=AsyncMock(side_effect=_upsert),
            update_instance=AsyncMock(side_effect=_apply),
            get_or_create=AsyncMock(return_value=SimpleNamespace(uploaded_files=[])),
        )
        service.notifications = Mock(notify_admins=AsyncMock())
        return service

    @pytest.mark.asyncio
    async def test_start_returns_existing_journey(self, service, journey, current_user):
        service.journey_repo.get_for_user = AsyncMock(return_value=journey)
        service.journey_repo.get_or_create = AsyncMock()

        result = await service.start_journey(current_user.id, "skill_ptc")

        assert result is journey
        service.journey_repo.get_or_create.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_save_first_phase(self, service, journey, current_user):
        data = PhaseProgressInput(responses={"identify_skills": "Facilitation"})

        row = await service.save_phase_response(current_user.id, journey.id, 0, data)

        assert row.phase_name == "Skills Assessment"
        assert row.responses == {"identify_skills": "Facilitation"}
        assert "uploaded_files" not in service.phase_repo.upsert.await_args.kwargs

    @pytest.mark.asyncio
    async def test_locked_phase_is_rejected(self, service, journey, current_user, mock_session):
        with pytest.raises(PhaseLockedError):
            await service.save_phase_response(current_user.id, journey.id, 1, PhaseProgressInput())

        service.phase_repo.upsert.assert_not_awaited()
        mock_session.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_other_users_journey_is_not_found(self, service, journey):
        with pytest.raises(NotFoundError):
            await service.save_phase_response("someone-else", journey.id, 0, PhaseProgressInput())

    @pytest.mark.asyncio
    async def test_pending_journey_cannot_be_edited(self, service, journey, current_user):
        journey.status = "pending_approval"

        with pytest.raises(InvalidTransitionError):
            await service.save_phase_response(current_user.id, journey.id, 0, PhaseProgressInput())

    @pytest.mark.asyncio
    async def test_complete_phase_with_missing_tasks(self, service, journey, current_user, mock_session):
        data = PhaseProgressInput(responses={"identify_skills": "Facilitation"})

        with pytest.raises(ValidationError, match="skill_examples"):
            await service.complete_phase(current_user.id, journey.id, 0, data)

        service.phase_repo.update_instance.assert_not_awaited()
        mock_session.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_complete_phase_unlocks_next(self, service, journey, current_user):
        row = await service.complete_phase(
            current_user.id, journey.id, 0, PhaseProgressInput(responses=PHASE_0_ANSWERS)
        )

        assert row.is_completed is True
        assert journey.current_phase == 1

    @pytest.mark.asyncio
    async def test_completed_phase_keeps_required_answers(self, service, journey, current_user):
        service.phase_repo.get_phase.return_value = _row(0, True, PHASE_0_ANSWERS)
        data = PhaseProgressInput(responses=dict(PHASE_0_ANSWERS, skill_passion=""))

        with pytest.raises(ValidationError):
            await service.save_phase_response(current_user.id, journey.id, 0, data)

    @pytest.mark.asyncio
    async def test_submit_requires_every_phase(self, service, journey, current_user):
        service.phase_repo.list_for_journey.return_value = [_row(0, True), _row(1, True)]

        with pytest.raises(ValidationError, match="Train"):
            await service.submit_for_approval(current_user, journey.id)

    @pytest.mark.asyncio
    async def test_submit_notifies_admins(self, service, journey, current_user):
        service.phase_repo.list_for_journey.return_value = [_row(n, True) for n in range(4)]

        result = await service.submit_for_approval(current_user, journey.id)

        assert result.status == "pending_approval"
        kwargs = service.notifications.notify_admins.await_args.kwargs
        assert kwargs["notification_type"] == "journey_approval_request"
        assert kwargs["step_name"] == "SKILL PTC Journey"

    @pytest.mark.asyncio
    async def test_upload_document_records_file(self, service, journey, current_user, storage):
        uploaded = await service.upload_phase_document(
            current_user.id, journey.id, 0, "../notes/plan.pdf", b"%PDF-1.4", "application/pdf"
        )

        assert uploaded.name == "plan.pdf"
        assert uploaded.path == f"{current_user.id}/{journey.id}/0/plan.pdf"
        assert uploaded.size == 8
        storage.upload_bytes.assert_awaited_once()
        files = service.phase_repo.update_instance.await_args.kwargs["uploaded_files"]
        assert files[0]["path"] == uploaded.path

    @pytest.mark.asyncio
    async def test_empty_upload_rejected(self, service, journey, current_user):
        with pytest.raises(ValidationError):
            await service.upload_phase_document(current_user.id, journey.id, 0, "plan.pdf", b"")

    @pytest.mark.asyncio
    async def test_document_url_outside_journey_is_denied(self, service, journey, current_user, storage):
        with pytest.raises(PermissionDeniedError):
            await service.get_document_url(current_user.id, journey.id, "other-user/x/0/plan.pdf")
        with pytest.raises(PermissionDeniedError):
            await service.get_document_url(
                current_user.id, journey.id, f"{current_user.id}/{journey.id}/../../secret"
            )

        storage.get_signed_url.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_document_url(self, service, journey, current_user):
        path = f"{current_user.id}/{journey.id}/0/plan.pdf"

        result = await service.get_document_url(current_user.id, journey.id, path)

        assert result.signed_url == "https://project.supabase.co/signed"
        assert result.expires_in == 3600
