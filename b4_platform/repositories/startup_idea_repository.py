"""Repositories for startup ideas, their episode progress and applications."""

from typing import List, Optional, Sequence, Tuple
from uuid import UUID

from sqlalchemy import and_, case, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from b4_platform.database.models import (
    EntrepreneurJourneyResponse,
    IdeaJourneyProgress,
    StartupApplication,
    StartupIdea,
)
from b4_platform.repositories.base_repository import BaseRepository


class StartupIdeaRepository(BaseRepository[StartupIdea]):
    """Repository for StartupIdea operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, StartupIdea)

    async def list_by_creator(self, creator_id: str) -> List[StartupIdea]:
        return await self.get_all(
            filters={"creator_id": creator_id},
            order_by=[StartupIdea.created_at.desc()],
        )

    async def list_by_review_status(self, review_statuses: List[str]) -> List[StartupIdea]:
        return await self.get_all(
            filters={"review_status": review_statuses},
            order_by=[StartupIdea.created_at.asc()],
        )


class IdeaJourneyProgressRepository(BaseRepository[IdeaJourneyProgress]):
    """Repository for IdeaJourneyProgress operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, IdeaJourneyProgress)

    async def get_phase(
        self, startup_id: UUID, episode: str, phase_number: int
    ) -> Optional[IdeaJourneyProgress]:
        return await self.get_one(startup_id=startup_id, episode=episode, phase_number=phase_number)

    async def list_for_episode(self, startup_id: UUID, episode: str) -> List[IdeaJourneyProgress]:
        return await self.get_all(
            filters={"startup_id": startup_id, "episode": episode},
            order_by=[IdeaJourneyProgress.phase_number.asc()],
        )

    async def upsert(
        self, startup_id: UUID, episode: str, phase_number: int, **fields
    ) -> IdeaJourneyProgress:
        """Write phase progress keyed by (startup_id, phase_number, episode)."""
        return await self.upsert_by_key(
            {"startup_id": startup_id, "phase_number": phase_number, "episode": episode}, **fields
        )


class StartupApplicationRepository(BaseRepository[StartupApplication]):
    """Repository for StartupApplication operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, StartupApplication)

    async def list_for_idea(self, startup_id: UUID) -> List[StartupApplication]:
        return await self.get_all(
            filters={"startup_id": startup_id},
            order_by=[StartupApplication.created_at.desc()],
        )


class EntrepreneurJourneyResponseRepository(BaseRepository[EntrepreneurJourneyResponse]):
    """Repository for EntrepreneurJourneyResponse operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, EntrepreneurJourneyResponse)

    async def count_by_completion(self, fields: Sequence[str]) -> Tuple[int, int]:
        """Count rows with every answer in ``fields`` filled and rows with only some.

        An answer is filled when it is neither NULL nor the empty string.

        Returns:
            (completed, in_progress)
        """
        answered = sum(
            case((func.coalesce(getattr(self.model, field), "") != "", 1), else_=0)
            for field in fields
        )
        query = select(
            func.count().filter(answered == len(fields)),
            func.count().filter(and_(answered > 0, answered < len(fields))),
        ).select_from(self.model)
        try:
            result = await self.session.execute(query)
            completed, in_progress = result.one()
            return completed, in_progress
        except SQLAlchemyError as e:
            self.logger.error(
                f"Error counting {self.model.__name__} by completion: {str(e)}",
                exc_info=True
            )
            raise
