"""Repositories for user submissions reviewed by admins (trainings, NR decoder)."""

from typing import List

from sqlalchemy.ext.asyncio import AsyncSession

from b4_platform.database.models import NRDecoderSubmission, TrainingOpportunity
from b4_platform.repositories.base_repository import BaseRepository


class TrainingOpportunityRepository(BaseRepository[TrainingOpportunity]):
    """Repository for TrainingOpportunity operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, TrainingOpportunity)

    async def list_recent(self) -> List[TrainingOpportunity]:
        return await self.get_all(order_by=[TrainingOpportunity.created_at.desc()])


class NRDecoderSubmissionRepository(BaseRepository[NRDecoderSubmission]):
    """Repository for NRDecoderSubmission operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, NRDecoderSubmission)

    async def list_recent(self) -> List[NRDecoderSubmission]:
        return await self.get_all(order_by=[NRDecoderSubmission.created_at.desc()])

    async def list_for_user(self, user_id: str) -> List[NRDecoderSubmission]:
        return await self.get_all(
            filters={"user_id": user_id},
            order_by=[NRDecoderSubmission.created_at.desc()],
        )
