"""Repositories for learning journeys, their phase responses and certifications."""

from typing import List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from b4_platform.database.models import (
    JourneyPhaseResponse,
    LearningJourney,
    UserCertification,
)
from b4_platform.repositories.base_repository import BaseRepository


class LearningJourneyRepository(BaseRepository[LearningJourney]):
    """Repository for LearningJourney operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, LearningJourney)

    async def get_for_user(self, user_id: str, journey_type: str) -> Optional[LearningJourney]:
        return await self.get_one(user_id=user_id, journey_type=journey_type)

    async def list_for_user(self, user_id: str) -> List[LearningJourney]:
        return await self.get_all(
            filters={"user_id": user_id},
            order_by=[LearningJourney.created_at.asc()],
        )

    async def list_by_status(self, statuses: List[str], limit: int = 200) -> List[LearningJourney]:
        """List journeys in any of the given statuses, most recently updated first."""
        return await self.get_all(
            limit=limit,
            filters={"status": statuses},
            order_by=[LearningJourney.updated_at.desc()],
        )


class JourneyPhaseResponseRepository(BaseRepository[JourneyPhaseResponse]):
    """Repository for JourneyPhaseResponse operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, JourneyPhaseResponse)

    async def get_phase(self, journey_id: UUID, phase_number: int) -> Optional[JourneyPhaseResponse]:
        return await self.get_one(journey_id=journey_id, phase_number=phase_number)

    async def list_for_journey(self, journey_id: UUID) -> List[JourneyPhaseResponse]:
        return await self.get_all(
            filters={"journey_id": journey_id},
            order_by=[JourneyPhaseResponse.phase_number.asc()],
        )

    async def upsert(self, journey_id: UUID, phase_number: int, **fields) -> JourneyPhaseResponse:
        """Write a phase response keyed by (journey_id, phase_number)."""
        return await self.upsert_by_key(
            {"journey_id": journey_id, "phase_number": phase_number}, **fields
        )


class UserCertificationRepository(BaseRepository[UserCertification]):
    """Repository for UserCertification operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, UserCertification)

    async def list_for_user(self, user_id: str) -> List[UserCertification]:
        return await self.get_all(
            filters={"user_id": user_id},
            order_by=[UserCertification.earned_at.desc()],
        )

    async def upsert(
        self,
        user_id: str,
        certification_type: str,
        display_label: str,
        verified: bool = True,
    ) -> UserCertification:
        """Grant a certification, keyed by (user_id, certification_type).

        Re-running an approval refreshes the label and verification flag
        instead of inserting a duplicate.
        """
        return await self.upsert_by_key(
            {"user_id": user_id, "certification_type": certification_type},
            display_label=display_label,
            verified=verified,
        )
