"""Learning journey service.

A user runs each journey type (Skill PTC, Idea PTC, Scaling Path) at most
once. Phases unlock strictly in order and a phase only completes when every
task in its catalog entry is answered. Once every phase is completed the
journey is submitted for admin approval.
"""

from datetime import datetime, timezone
from pathlib import PurePosixPath
from typing import List, Optional, Set
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from b4_platform.core.constants import JourneyType, LearningJourneyStatus
from b4_platform.core.exceptions import (
    InvalidTransitionError,
    NotFoundError,
    PermissionDeniedError,
    PhaseLockedError,
    ValidationError,
)
from b4_platform.database.models import JourneyPhaseResponse, LearningJourney
from b4_platform.repositories.learning_journey_repository import (
    JourneyPhaseResponseRepository,
    LearningJourneyRepository,
)
from b4_platform.schemas.auth import CurrentUser
from b4_platform.schemas.journeys import (
    DocumentUrl,
    JourneyProgress,
    LearningJourneyOut,
    PhaseProgressInput,
    PhaseState,
    UploadedFile,
)
from b4_platform.services.base_service import BaseService
from b4_platform.services.notification_service import NotificationService
from b4_platform.services.phase_machine import PhaseMachine, journey_machine
from b4_platform.services.storage_service import StorageService

# Statuses in which the user may still edit phase answers
EDITABLE_STATUSES = {
    LearningJourneyStatus.NOT_STARTED.value,
    LearningJourneyStatus.IN_PROGRESS.value,
    LearningJourneyStatus.REJECTED.value,
}

DOCUMENT_URL_TTL_SECONDS = 3600


def journey_label(journey_type: str) -> str:
    """``skill_ptc`` -> ``SKILL PTC``."""
    return journey_type.replace("_", " ").upper()


def build_phase_states(
    machine: PhaseMachine,
    saved: List,
) -> List[PhaseState]:
    """Merge a phase catalog with saved rows into per-phase UI state."""
    by_number = {row.phase_number: row for row in saved}
    completed = {row.phase_number for row in saved if row.is_completed}

    states = []
    for phase in machine.phases:
        row = by_number.get(phase.number)
        responses = dict(row.responses or {}) if row else {}
        completed_tasks = list(row.completed_tasks or []) if row else []
        states.append(
            PhaseState(
                number=phase.number,
                name=phase.name,
                accessible=machine.can_access(phase.number, completed),
                is_completed=phase.number in completed,
                responses=responses,
                completed_tasks=completed_tasks,
                uploaded_files=list(getattr(row, "uploaded_files", None) or []) if row else [],
                missing_tasks=machine.missing_tasks(phase.number, responses, completed_tasks),
            )
        )
    return states


class LearningJourneyService(BaseService):
    """Starts, fills in and submits learning journeys."""

    def __init__(self, session: AsyncSession, storage: Optional[StorageService] = None):
        super().__init__(session)
        self.journey_repo = LearningJourneyRepository(session)
        self.phase_repo = JourneyPhaseResponseRepository(session)
        self.notifications = NotificationService(session)
        self._storage = storage

    @property
    def storage(self) -> StorageService:
        if self._storage is None:
            self._storage = StorageService()
        return self._storage

    async def _get_owned_journey(self, user_id: str, journey_id: UUID) -> LearningJourney:
        journey = await self.journey_repo.get_by_id(journey_id)
        if journey is None or journey.user_id != user_id:
            raise NotFoundError(f"Learning journey {journey_id} not found")
        return journey

    async def _completed_phases(self, journey_id: UUID) -> Set[int]:
        rows = await self.phase_repo.list_for_journey(journey_id)
        return {row.phase_number for row in rows if row.is_completed}

    @staticmethod
    def _require_editable(journey: LearningJourney) -> None:
        if journey.status not in EDITABLE_STATUSES:
            raise InvalidTransitionError(
                f"Journey is {journey.status} and can no longer be edited",
                current=journey.status,
            )

    async def _require_unlocked(
        self, machine: PhaseMachine, journey: LearningJourney, phase_number: int
    ) -> None:
        machine.get_phase(phase_number)
        completed = await self._completed_phases(journey.id)
        if not machine.can_access(phase_number, completed):
            raise PhaseLockedError(
                f"Phase {phase_number} is locked until phase {phase_number - 1} is completed",
                requested=str(phase_number),
            )

    async def list_journeys(self, user_id: str) -> List[LearningJourney]:
        return await self.journey_repo.list_for_user(user_id)

    async def start_journey(self, user_id: str, journey_type: JourneyType) -> LearningJourney:
        """Start a journey, or return the one the user already has of this type."""
        journey_type = JourneyType(journey_type)

        async with self.transaction():
            journey = await self.journey_repo.get_for_user(user_id, journey_type.value)
            if journey is not None:
                return journey

            journey = await self.journey_repo.get_or_create(
                {"user_id": user_id, "journey_type": journey_type.value},
                status=LearningJourneyStatus.IN_PROGRESS.value,
                current_phase=0,
                started_at=datetime.now(timezone.utc),
            )

        self.logger.info(f"User {user_id} started the {journey_type.value} journey")
        return journey

    async def _save(
        self,
        user_id: str,
        journey: LearningJourney,
        machine: PhaseMachine,
        phase_number: int,
        data: PhaseProgressInput,
    ) -> JourneyPhaseResponse:
        self._require_editable(journey)
        await self._require_unlocked(machine, journey, phase_number)

        existing = await self.phase_repo.get_phase(journey.id, phase_number)
        if existing is not None and existing.is_completed:
            missing = machine.missing_tasks(phase_number, data.responses, data.completed_tasks)
            if missing:
                raise ValidationError(
                    f"Phase {phase_number} is completed; required answers cannot be removed: {', '.join(missing)}"
                )

        fields = {
            "user_id": user_id,
            "phase_name": machine.get_phase(phase_number).name,
            "responses": dict(data.responses),
            "completed_tasks": list(data.completed_tasks),
            "notes": data.notes,
        }
        if data.uploaded_files is not None:
            fields["uploaded_files"] = [f.model_dump(mode="json") for f in data.uploaded_files]

        return await self.phase_repo.upsert(journey.id, phase_number, **fields)

    async def save_phase_response(
        self,
        user_id: str,
        journey_id: UUID,
        phase_number: int,
        data: PhaseProgressInput,
    ) -> JourneyPhaseResponse:
        """Upsert the answers of an unlocked phase.

        Raises:
            NotFoundError: If the journey is not the user's
            PhaseLockedError: If the previous phase is not completed
            InvalidTransitionError: If the journey is awaiting or past approval
        """
        async with self.transaction():
            journey = await self._get_owned_journey(user_id, journey_id)
            machine = journey_machine(journey.journey_type)
            return await self._save(user_id, journey, machine, phase_number, data)

    async def complete_phase(
        self,
        user_id: str,
        journey_id: UUID,
        phase_number: int,
        data: Optional[PhaseProgressInput] = None,
    ) -> JourneyPhaseResponse:
        """Validate every task of a phase, mark it completed and unlock the next one.

        Raises:
            ValidationError: If a task is still unanswered; nothing is written
        """
        async with self.transaction():
            journey = await self._get_owned_journey(user_id, journey_id)
            machine = journey_machine(journey.journey_type)

            if data is not None:
                row = await self._save(user_id, journey, machine, phase_number, data)
            else:
                self._require_editable(journey)
                await self._require_unlocked(machine, journey, phase_number)
                row = await self.phase_repo.get_phase(journey.id, phase_number)
                if row is None:
                    raise ValidationError(f"Phase {phase_number} has no saved answers")

            missing = machine.missing_tasks(phase_number, row.responses, row.completed_tasks)
            if missing:
                raise ValidationError(
                    f"Phase {phase_number} is incomplete, missing: {', '.join(missing)}"
                )

            if not row.is_completed:
                row = await self.phase_repo.update_instance(
                    row, is_completed=True, completed_at=datetime.now(timezone.utc)
                )
            await self.journey_repo.update_instance(
                journey, current_phase=max(journey.current_phase, phase_number + 1)
            )

        self.logger.info(
            f"Phase {phase_number} of journey {journey_id} completed",
            extra={"journey_type": journey.journey_type, "user_id": user_id}
        )
        return row

    async def submit_for_approval(self, user: CurrentUser, journey_id: UUID) -> LearningJourney:
        """Send a fully completed journey to the admin team.

        Raises:
            ValidationError: If any phase is not completed
            InvalidTransitionError: If the journey is already pending or approved
        """
        async with self.transaction():
            journey = await self._get_owned_journey(user.id, journey_id)
            self._require_editable(journey)

            machine = journey_machine(journey.journey_type)
            completed = await self._completed_phases(journey.id)
            if not machine.all_completed(completed):
                remaining = [p.name for p in machine.phases if p.number not in completed]
                raise ValidationError(f"Complete every phase before submitting: {', '.join(remaining)}")

            journey = await self.journey_repo.update_instance(
                journey,
                status=LearningJourneyStatus.PENDING_APPROVAL.value,
                completed_at=datetime.now(timezone.utc),
            )
            await self.notifications.notify_admins(
                user_id=user.id,
                notification_type="journey_approval_request",
                user_name=user.display_name,
                user_email=user.email,
                step_name=f"{journey_label(journey.journey_type)} Journey",
                message=(
                    f"User has completed their {journey_label(journey.journey_type)} "
                    f"journey and is awaiting approval."
                ),
            )

        self.logger.info(f"Journey {journey_id} submitted for approval by {user.id}")
        return journey

    async def get_journey_progress(self, user_id: str, journey_id: UUID) -> JourneyProgress:
        journey = await self._get_owned_journey(user_id, journey_id)
        machine = journey_machine(journey.journey_type)
        rows = await self.phase_repo.list_for_journey(journey.id)
        phases = build_phase_states(machine, rows)
        return JourneyProgress(
            journey=LearningJourneyOut.model_validate(journey),
            phases=phases,
            all_completed=all(phase.is_completed for phase in phases),
        )

    async def upload_phase_document(
        self,
        user_id: str,
        journey_id: UUID,
        phase_number: int,
        filename: str,
        content: bytes,
        content_type: Optional[str] = None,
    ) -> UploadedFile:
        """Store a document under ``<user_id>/<journey_id>/<phase>/<name>``
        and record it on the phase response."""
        name = PurePosixPath((filename or "").replace("\\", "/")).name.strip()
        if not name:
            raise ValidationError("A file name is required")
        if not content:
            raise ValidationError(f"File '{name}' is empty")

        async with self.transaction():
            journey = await self._get_owned_journey(user_id, journey_id)
            machine = journey_machine(journey.journey_type)
            self._require_editable(journey)
            await self._require_unlocked(machine, journey, phase_number)

            path = f"{user_id}/{journey_id}/{phase_number}/{name}"
            await self.storage.upload_bytes(
                path, content, content_type=content_type or "application/octet-stream", upsert=True
            )
            uploaded = UploadedFile(
                name=name,
                path=path,
                size=len(content),
                content_type=content_type,
                uploaded_at=datetime.now(timezone.utc),
            )

            row = await self.phase_repo.get_or_create(
                {"journey_id": journey.id, "phase_number": phase_number},
                user_id=user_id,
                phase_name=machine.get_phase(phase_number).name,
                responses={},
                completed_tasks=[],
                uploaded_files=[],
                is_completed=False,
            )
            files = [f for f in row.uploaded_files or [] if f.get("path") != path]
            files.append(uploaded.model_dump(mode="json"))
            await self.phase_repo.update_instance(row, uploaded_files=files)

        self.logger.info(f"Uploaded {path}", extra={"size": len(content)})
        return uploaded

    async def get_document_url(self, user_id: str, journey_id: UUID, path: str) -> DocumentUrl:
        """Signed download URL for one of the user's own journey documents."""
        await self._get_owned_journey(user_id, journey_id)
        if not path.startswith(f"{user_id}/{journey_id}/") or ".." in path.split("/"):
            raise PermissionDeniedError("Document does not belong to this journey")

        signed_url = await self.storage.get_signed_url(path, expires_in=DOCUMENT_URL_TTL_SECONDS)
        return DocumentUrl(path=path, signed_url=signed_url, expires_in=DOCUMENT_URL_TTL_SECONDS)
