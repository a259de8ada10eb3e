"""Repositories for onboarding state, Natural Role, entrepreneurial experience and profiles."""

from typing import List, Optional, Tuple

from sqlalchemy import or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from b4_platform.database.models import (
    EntrepreneurialOnboarding,
    NaturalRole,
    OnboardingState,
    Profile,
)
from b4_platform.repositories.base_repository import BaseRepository
from b4_platform.utils.logging import get_logger

LOGGER = get_logger(__name__)


class OnboardingStateRepository(BaseRepository[OnboardingState]):
    """Repository for OnboardingState operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, OnboardingState)

    async def get_by_user(self, user_id: str) -> Optional[OnboardingState]:
        return await self.get_one(user_id=user_id)

    async def list_pending_approvals(
        self, search: Optional[str] = None
    ) -> List[Tuple[OnboardingState, Optional[Profile], Optional[NaturalRole]]]:
        """List completed onboardings waiting for an admin decision.

        Args:
            search: Optional case-insensitive match on profile name or skills

        Returns:
            Tuples of (state, profile, natural role), oldest first
        """
        try:
            query = (
                select(OnboardingState, Profile, NaturalRole)
                .outerjoin(Profile, Profile.user_id == OnboardingState.user_id)
                .outerjoin(NaturalRole, NaturalRole.user_id == OnboardingState.user_id)
                .where(OnboardingState.journey_status == "pending_approval")
                .where(OnboardingState.onboarding_completed.is_(True))
                .order_by(OnboardingState.updated_at.asc())
            )
            if search:
                pattern = f"%{search.strip()}%"
                query = query.where(
                    or_(Profile.full_name.ilike(pattern), Profile.primary_skills.ilike(pattern))
                )

            result = await self.session.execute(query)
            return [tuple(row) for row in result.all()]
        except SQLAlchemyError as e:
            self.logger.error(f"Error listing pending onboarding approvals: {str(e)}", exc_info=True)
            raise


class NaturalRoleRepository(BaseRepository[NaturalRole]):
    """Repository for NaturalRole operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, NaturalRole)

    async def get_by_user(self, user_id: str) -> Optional[NaturalRole]:
        return await self.get_one(user_id=user_id)


class EntrepreneurialOnboardingRepository(BaseRepository[EntrepreneurialOnboarding]):
    """Repository for EntrepreneurialOnboarding operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, EntrepreneurialOnboarding)

    async def get_by_user(self, user_id: str) -> Optional[EntrepreneurialOnboarding]:
        return await self.get_one(user_id=user_id)


class ProfileRepository(BaseRepository[Profile]):
    """Repository for Profile operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, Profile)

    async def get_by_user(self, user_id: str) -> Optional[Profile]:
        return await self.get_one(user_id=user_id)

    async def upsert(self, user_id: str, **fields) -> Profile:
        """Create the profile for a user or update the existing one."""
        return await self.upsert_by_key({"user_id": user_id}, **fields)
