"""Startup idea service: ideas, co-builder applications and episode progress.

An approved idea runs through three episodes (development, validation,
growth). Within an episode phases unlock strictly in order; completing the
last phase of the idea's current episode moves the idea to the next one.
"""

from datetime import datetime, timezone
from typing import Any, Hashable, List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from b4_platform.core.config import settings
from b4_platform.core.constants import (
    EPISODES_COMPLETED,
    ApplicationStatus,
    Episode,
    IdeaReviewStatus,
)
from b4_platform.core.database import async_session_maker
from b4_platform.core.exceptions import (
    InvalidTransitionError,
    NotFoundError,
    PermissionDeniedError,
    PhaseLockedError,
    ValidationError,
)
from b4_platform.database.models import IdeaJourneyProgress, StartupApplication, StartupIdea
from b4_platform.repositories.startup_idea_repository import (
    IdeaJourneyProgressRepository,
    StartupApplicationRepository,
    StartupIdeaRepository,
)
from b4_platform.schemas.auth import CurrentUser
from b4_platform.schemas.ideas import IdeaApplicationCreate, StartupIdeaCreate
from b4_platform.schemas.journeys import EpisodeProgress, PhaseProgressInput
from b4_platform.services.autosave import DebouncedAutoSaver
from b4_platform.services.base_service import BaseService
from b4_platform.services.learning_journey_service import build_phase_states
from b4_platform.services.notification_service import NotificationService
from b4_platform.services.phase_machine import NEXT_EPISODE, PhaseMachine, episode_machine
from b4_platform.utils.logging import get_logger

LOGGER = get_logger(__name__)

EPISODE_ORDER = [Episode.DEVELOPMENT, Episode.VALIDATION, Episode.GROWTH]


def episode_index(episode: str) -> int:
    """Position of an episode; ``completed`` sorts after growth."""
    if episode == EPISODES_COMPLETED:
        return len(EPISODE_ORDER)
    return EPISODE_ORDER.index(Episode(episode))


class IdeaProgressService(BaseService):
    """Ideas, applications to ideas, and per-episode phase progress."""

    def __init__(self, session: AsyncSession):
        super().__init__(session)
        self.idea_repo = StartupIdeaRepository(session)
        self.progress_repo = IdeaJourneyProgressRepository(session)
        self.application_repo = StartupApplicationRepository(session)
        self.notifications = NotificationService(session)

    async def _get_idea(self, idea_id: UUID) -> StartupIdea:
        idea = await self.idea_repo.get_by_id(idea_id)
        if idea is None:
            raise NotFoundError(f"Startup idea {idea_id} not found")
        return idea

    async def _get_owned_idea(self, user_id: str, idea_id: UUID) -> StartupIdea:
        idea = await self._get_idea(idea_id)
        if idea.creator_id != user_id:
            raise PermissionDeniedError("Only the idea creator can edit its journey")
        return idea

    # ---------------------------------------------------------------- ideas

    async def create_idea(self, user_id: str, data: StartupIdeaCreate) -> StartupIdea:
        """Propose a startup idea; it waits for admin review."""
        async with self.transaction():
            idea = await self.idea_repo.create(
                creator_id=user_id,
                title=data.title.strip(),
                description=data.description.strip(),
                sector=data.sector,
                roles_needed=data.roles_needed,
                is_looking_for_cobuilders=True,
                status="active",
                review_status=IdeaReviewStatus.PENDING.value,
                current_episode=Episode.DEVELOPMENT.value,
            )
        self.logger.info(f"User {user_id} proposed idea '{idea.title}'")
        return idea

    async def list_my_ideas(self, user_id: str) -> List[StartupIdea]:
        return await self.idea_repo.list_by_creator(user_id)

    async def list_open_ideas(self) -> List[StartupIdea]:
        """Approved ideas still looking for co-builders."""
        ideas = await self.idea_repo.list_by_review_status([IdeaReviewStatus.APPROVED.value])
        return [idea for idea in ideas if idea.is_looking_for_cobuilders]

    async def get_idea(self, idea_id: UUID) -> StartupIdea:
        return await self._get_idea(idea_id)

    async def apply_to_idea(
        self, user: CurrentUser, idea_id: UUID, data: IdeaApplicationCreate
    ) -> StartupApplication:
        """Apply as a co-builder to someone else's approved idea.

        Raises:
            ValidationError: If the user applies to their own idea
            InvalidTransitionError: If the idea is not open or the user already applied
        """
        async with self.transaction():
            idea = await self._get_idea(idea_id)
            if idea.creator_id == user.id:
                raise ValidationError("You cannot apply to your own idea")
            if idea.review_status != IdeaReviewStatus.APPROVED.value or not idea.is_looking_for_cobuilders:
                raise InvalidTransitionError(
                    "This idea is not accepting applications", current=idea.review_status
                )
            existing = await self.application_repo.get_one(startup_id=idea.id, applicant_id=user.id)
            if existing is not None:
                raise InvalidTransitionError(
                    "You have already applied to this idea", current=existing.status
                )

            application = await self.application_repo.create(
                startup_id=idea.id,
                applicant_id=user.id,
                status=ApplicationStatus.PENDING.value,
                **data.model_dump(),
            )
            await self.notifications.notify_user(
                idea.creator_id,
                "application_received",
                "New Co-Builder Application",
                f"{user.display_name} applied to join \"{idea.title}\".",
                link="/opportunities",
            )
        return application

    async def list_applications(self, user: CurrentUser, idea_id: UUID) -> List[StartupApplication]:
        idea = await self._get_idea(idea_id)
        if idea.creator_id != user.id and not user.is_admin:
            raise PermissionDeniedError("Only the idea creator can see its applications")
        return await self.application_repo.list_for_idea(idea.id)

    # ------------------------------------------------------------- episodes

    @staticmethod
    def _resolve_episode(episode: Optional[str]) -> Episode:
        if not episode:
            return Episode.DEVELOPMENT
        try:
            return Episode(episode)
        except ValueError as e:
            raise ValidationError(f"Unknown episode '{episode}'") from e

    @staticmethod
    def _require_episode_open(idea: StartupIdea, episode: Episode) -> None:
        if idea.review_status != IdeaReviewStatus.APPROVED.value:
            raise InvalidTransitionError(
                "The idea journey opens once the idea is approved", current=idea.review_status
            )
        if episode_index(episode.value) < episode_index(idea.current_episode):
            raise InvalidTransitionError(
                f"The {episode.value} episode is completed and read-only",
                current=idea.current_episode,
                requested=episode.value,
            )
        if episode_index(episode.value) > episode_index(idea.current_episode):
            raise PhaseLockedError(
                f"The {episode.value} episode is locked until {idea.current_episode} is completed",
                current=idea.current_episode,
                requested=episode.value,
            )

    async def _require_unlocked(
        self, machine: PhaseMachine, idea: StartupIdea, episode: Episode, phase_number: int
    ) -> None:
        machine.get_phase(phase_number)
        rows = await self.progress_repo.list_for_episode(idea.id, episode.value)
        completed = {row.phase_number for row in rows if row.is_completed}
        if not machine.can_access(phase_number, completed):
            raise PhaseLockedError(
                f"Phase {phase_number} is locked until phase {phase_number - 1} is completed",
                requested=str(phase_number),
            )

    async def get_episode_progress(
        self, user: CurrentUser, idea_id: UUID, episode: Optional[str] = None
    ) -> EpisodeProgress:
        episode = self._resolve_episode(episode)
        idea = await self._get_idea(idea_id)
        if idea.creator_id != user.id and not user.is_admin:
            raise PermissionDeniedError("Only the idea creator can view its journey")

        machine = episode_machine(episode.value)
        rows = await self.progress_repo.list_for_episode(idea.id, episode.value)
        phases = build_phase_states(machine, rows)
        return EpisodeProgress(
            startup_id=idea.id,
            episode=episode,
            current_episode=idea.current_episode,
            phases=phases,
            all_completed=all(phase.is_completed for phase in phases),
        )

    async def _save(
        self,
        user_id: str,
        idea: StartupIdea,
        episode: Episode,
        phase_number: int,
        data: PhaseProgressInput,
    ) -> IdeaJourneyProgress:
        machine = episode_machine(episode.value)
        self._require_episode_open(idea, episode)
        await self._require_unlocked(machine, idea, episode, phase_number)

        existing = await self.progress_repo.get_phase(idea.id, episode.value, phase_number)
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
        }
        return await self.progress_repo.upsert(idea.id, episode.value, phase_number, **fields)

    async def save_phase_progress(
        self,
        user_id: str,
        idea_id: UUID,
        episode: Optional[str],
        phase_number: int,
        data: PhaseProgressInput,
    ) -> IdeaJourneyProgress:
        """Upsert one phase of an episode; creator only, unlocked phases only."""
        episode = self._resolve_episode(episode)
        async with self.transaction():
            idea = await self._get_owned_idea(user_id, idea_id)
            return await self._save(user_id, idea, episode, phase_number, data)

    async def check_editable(
        self, user_id: str, idea_id: UUID, episode: Optional[str], phase_number: int
    ) -> Episode:
        """Run the save checks without writing; used before scheduling an auto-save."""
        episode = self._resolve_episode(episode)
        idea = await self._get_owned_idea(user_id, idea_id)
        self._require_episode_open(idea, episode)
        await self._require_unlocked(episode_machine(episode.value), idea, episode, phase_number)
        return episode

    async def complete_phase(
        self,
        user_id: str,
        idea_id: UUID,
        episode: Optional[str],
        phase_number: int,
        data: Optional[PhaseProgressInput] = None,
    ) -> StartupIdea:
        """Mark a phase completed; the last phase moves the idea to the next episode.

        Returns:
            The idea, with ``current_episode`` possibly advanced
        """
        episode = self._resolve_episode(episode)
        machine = episode_machine(episode.value)

        async with self.transaction():
            idea = await self._get_owned_idea(user_id, idea_id)
            if data is not None:
                row = await self._save(user_id, idea, episode, phase_number, data)
            else:
                self._require_episode_open(idea, episode)
                await self._require_unlocked(machine, idea, episode, phase_number)
                row = await self.progress_repo.get_phase(idea.id, episode.value, phase_number)
                if row is None:
                    raise ValidationError(f"Phase {phase_number} has no saved answers")

            missing = machine.missing_tasks(phase_number, row.responses, row.completed_tasks)
            if missing:
                raise ValidationError(f"Phase {phase_number} is incomplete, missing: {', '.join(missing)}")

            now = datetime.now(timezone.utc)
            if not row.is_completed:
                await self.progress_repo.update_instance(row, is_completed=True, completed_at=now)

            if machine.is_last_phase(phase_number) and idea.current_episode == episode.value:
                next_episode = NEXT_EPISODE[episode]
                idea = await self.idea_repo.update_instance(
                    idea,
                    current_episode=next_episode.value if next_episode else EPISODES_COMPLETED,
                    **{f"{episode.value}_completed_at": now},
                )
                self.logger.info(
                    f"Idea {idea.id} finished the {episode.value} episode",
                    extra={"current_episode": idea.current_episode}
                )
        return idea


async def persist_autosaved_progress(key: Hashable, payload: Any) -> None:
    """Save callback of the shared auto-saver; runs in its own session."""
    user_id, idea_id, episode, phase_number = key
    async with async_session_maker() as session:
        await IdeaProgressService(session).save_phase_progress(
            user_id, idea_id, episode, phase_number, payload
        )
    LOGGER.debug(f"Auto-saved phase {phase_number} of {episode} for idea {idea_id}")


idea_autosaver = DebouncedAutoSaver(
    persist_autosaved_progress, delay=settings.autosave_debounce_seconds
)
