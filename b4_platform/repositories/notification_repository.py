"""Repositories for admin and user notifications."""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from b4_platform.database.models import AdminNotification, UserNotification
from b4_platform.repositories.base_repository import BaseRepository


class AdminNotificationRepository(BaseRepository[AdminNotification]):
    """Repository for AdminNotification operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, AdminNotification)

    async def list_recent(
        self,
        notification_type: Optional[str] = None,
        unread_only: bool = False,
        search: Optional[str] = None,
        limit: int = 200,
    ) -> List[AdminNotification]:
        """List admin notifications, newest first.

        Args:
            notification_type: Restrict to one notification type
            unread_only: Only return notifications not yet marked read
            search: Case-insensitive match on user name or email
            limit: Maximum number of rows
        """
        try:
            query = select(AdminNotification)
            if notification_type:
                query = query.where(AdminNotification.notification_type == notification_type)
            if unread_only:
                query = query.where(AdminNotification.is_read.is_(False))
            if search:
                pattern = f"%{search.strip()}%"
                query = query.where(
                    or_(
                        AdminNotification.user_name.ilike(pattern),
                        AdminNotification.user_email.ilike(pattern),
                    )
                )
            query = query.order_by(AdminNotification.created_at.desc()).limit(limit)
            result = await self.session.execute(query)
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            self.logger.error(f"Error listing admin notifications: {str(e)}", exc_info=True)
            raise

    async def count_unread(self) -> int:
        return await self.count(filters={"is_read": False})


class UserNotificationRepository(BaseRepository[UserNotification]):
    """Repository for UserNotification operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, UserNotification)

    async def list_for_user(
        self, user_id: str, unread_only: bool = False, limit: int = 50
    ) -> List[UserNotification]:
        filters = {"user_id": user_id}
        if unread_only:
            filters["is_read"] = False
        return await self.get_all(
            limit=limit,
            filters=filters,
            order_by=[UserNotification.created_at.desc()],
        )

    async def list_created_after(self, user_id: str, after: datetime) -> List[UserNotification]:
        """List a user's notifications created strictly after a timestamp, oldest first."""
        try:
            query = (
                select(UserNotification)
                .where(UserNotification.user_id == user_id)
                .where(UserNotification.created_at > after)
                .order_by(UserNotification.created_at.asc())
            )
            result = await self.session.execute(query)
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            self.logger.error(f"Error polling notifications for {user_id}: {str(e)}", exc_info=True)
            raise

    async def count_unread(self, user_id: str) -> int:
        return await self.count(filters={"user_id": user_id, "is_read": False})

    async def mark_all_read(self, user_id: str) -> int:
        """Mark every unread notification of a user as read.

        Returns:
            Number of updated rows
        """
        try:
            stmt = (
                update(UserNotification)
                .where(UserNotification.user_id == user_id)
                .where(UserNotification.is_read.is_(False))
                .values(is_read=True)
            )
            result = await self.session.execute(stmt)
            return result.rowcount or 0
        except SQLAlchemyError as e:
            self.logger.error(f"Error marking notifications read for {user_id}: {str(e)}", exc_info=True)
            raise
