"""Repository for account deletion confirmation codes and per-user cleanup."""

from datetime import datetime
from typing import Dict, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from b4_platform.database.models import (
    AccountDeletionToken,
    AdminNotification,
    EntrepreneurialOnboarding,
    EntrepreneurJourneyResponse,
    LearningJourney,
    NaturalRole,
    NRDecoderSubmission,
    OnboardingState,
    Profile,
    StartupApplication,
    StartupIdea,
    TrainingOpportunity,
    UserCertification,
    UserNotification,
    UserRole,
)
from b4_platform.repositories.base_repository import BaseRepository

# Owned rows removed by a permanent deletion, as (model, owner column).
# Order matters: applications go before the ideas they reference.
USER_OWNED_TABLES = (
    (Profile, "user_id"),
    (OnboardingState, "user_id"),
    (NaturalRole, "user_id"),
    (EntrepreneurialOnboarding, "user_id"),
    (UserRole, "user_id"),
    (UserNotification, "user_id"),
    (AdminNotification, "user_id"),
    (EntrepreneurJourneyResponse, "user_id"),
    (StartupApplication, "applicant_id"),
    (StartupIdea, "creator_id"),
    (LearningJourney, "user_id"),
    (UserCertification, "user_id"),
    (TrainingOpportunity, "user_id"),
    (NRDecoderSubmission, "user_id"),
    (AccountDeletionToken, "user_id"),
)


class AccountDeletionTokenRepository(BaseRepository[AccountDeletionToken]):
    """Repository for AccountDeletionToken operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, AccountDeletionToken)

    async def delete_unused(self, user_id: str) -> int:
        """Remove codes the user requested earlier but never used."""
        try:
            stmt = (
                delete(AccountDeletionToken)
                .where(AccountDeletionToken.user_id == user_id)
                .where(AccountDeletionToken.used_at.is_(None))
            )
            result = await self.session.execute(stmt)
            return result.rowcount or 0
        except SQLAlchemyError as e:
            self.logger.error(f"Error clearing deletion codes for {user_id}: {str(e)}", exc_info=True)
            raise

    async def find_valid(
        self, user_id: str, token_hash: str, now: datetime
    ) -> Optional[AccountDeletionToken]:
        """Find an unused, unexpired code matching the hash."""
        try:
            query = (
                select(AccountDeletionToken)
                .where(AccountDeletionToken.user_id == user_id)
                .where(AccountDeletionToken.token_hash == token_hash)
                .where(AccountDeletionToken.used_at.is_(None))
                .where(AccountDeletionToken.expires_at > now)
                .limit(1)
            )
            result = await self.session.execute(query)
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            self.logger.error(f"Error verifying deletion code for {user_id}: {str(e)}", exc_info=True)
            raise

    async def purge_user_data(self, user_id: str) -> Dict[str, int]:
        """Delete every row owned by a user.

        Returns:
            Deleted row count per table name
        """
        deleted: Dict[str, int] = {}
        try:
            for model, owner_column in USER_OWNED_TABLES:
                stmt = delete(model).where(getattr(model, owner_column) == user_id)
                result = await self.session.execute(stmt)
                deleted[model.__tablename__] = result.rowcount or 0
            return deleted
        except SQLAlchemyError as e:
            self.logger.error(f"Error purging data for {user_id}: {str(e)}", exc_info=True)
            raise
