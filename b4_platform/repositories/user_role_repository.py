"""Repository for granted application roles."""

from typing import List

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from b4_platform.database.models import UserRole
from b4_platform.repositories.base_repository import BaseRepository


def is_duplicate_key_error(error: Exception) -> bool:
    """Tell whether a database error is a unique-constraint violation."""
    return isinstance(error, IntegrityError) or "duplicate" in str(error).lower()


class UserRoleRepository(BaseRepository[UserRole]):
    """Repository for UserRole operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, UserRole)

    async def has_role(self, user_id: str, role: str) -> bool:
        return await self.get_one(user_id=user_id, role=role) is not None

    async def list_roles(self, user_id: str) -> List[str]:
        rows = await self.get_all(filters={"user_id": user_id})
        return [row.role for row in rows]

    async def grant_role(self, user_id: str, role: str) -> bool:
        """Grant a role, treating an existing grant as success.

        The insert runs in a savepoint so a duplicate-key violation does not
        poison the surrounding transaction.

        Returns:
            True if a new row was inserted, False if the role already existed
        """
        if await self.has_role(user_id, role):
            return False
        try:
            async with self.session.begin_nested():
                self.session.add(UserRole(user_id=user_id, role=role))
            return True
        except SQLAlchemyError as e:
            if is_duplicate_key_error(e):
                self.logger.info(f"Role '{role}' already granted to {user_id}")
                return False
            self.logger.error(f"Error granting role '{role}' to {user_id}: {str(e)}", exc_info=True)
            raise
