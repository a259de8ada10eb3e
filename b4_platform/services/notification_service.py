"""Notification service for user and admin notifications.

``notify_user`` and ``notify_admins`` only stage rows in the session; the
calling service commits them together with the change they announce.
"""

from typing import List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from b4_platform.core.exceptions import NotFoundError
from b4_platform.database.models import AdminNotification, UserNotification
from b4_platform.repositories.notification_repository import (
    AdminNotificationRepository,
    UserNotificationRepository,
)
from b4_platform.services.base_service import BaseService


class NotificationService(BaseService):
    """Writes and reads admin and user notifications."""

    def __init__(self, session: AsyncSession):
        super().__init__(session)
        self.user_repo = UserNotificationRepository(session)
        self.admin_repo = AdminNotificationRepository(session)

    async def notify_user(
        self,
        user_id: str,
        notification_type: str,
        title: str,
        message: str,
        link: Optional[str] = None,
    ) -> UserNotification:
        notification = await self.user_repo.create(
            user_id=user_id,
            notification_type=notification_type,
            title=title,
            message=message,
            link=link,
            is_read=False,
        )
        self.logger.info(
            f"Queued user notification '{notification_type}' for {user_id}",
            extra={"notification_type": notification_type, "user_id": user_id}
        )
        return notification

    async def notify_admins(
        self,
        user_id: str,
        notification_type: str,
        message: Optional[str] = None,
        user_name: Optional[str] = None,
        user_email: Optional[str] = None,
        step_name: Optional[str] = None,
        nr_description: Optional[str] = None,
    ) -> AdminNotification:
        notification = await self.admin_repo.create(
            user_id=user_id,
            notification_type=notification_type,
            user_name=user_name,
            user_email=user_email,
            step_name=step_name,
            nr_description=nr_description,
            message=message,
            is_read=False,
        )
        self.logger.info(
            f"Queued admin notification '{notification_type}' about {user_id}",
            extra={"notification_type": notification_type, "user_id": user_id}
        )
        return notification

    # User-facing

    async def list_for_user(
        self, user_id: str, unread_only: bool = False, limit: int = 50
    ) -> List[UserNotification]:
        return await self.user_repo.list_for_user(user_id, unread_only=unread_only, limit=limit)

    async def unread_count(self, user_id: str) -> int:
        return await self.user_repo.count_unread(user_id)

    async def mark_read(self, user_id: str, notification_id: UUID) -> UserNotification:
        """Mark one of the user's own notifications read.

        Raises:
            NotFoundError: If the notification does not exist or belongs to
                someone else
        """
        async with self.transaction():
            notification = await self.user_repo.get_by_id(notification_id)
            if not notification or notification.user_id != user_id:
                raise NotFoundError(f"Notification {notification_id} not found")
            if not notification.is_read:
                await self.user_repo.update_instance(notification, is_read=True)
        return notification

    async def mark_all_read(self, user_id: str) -> int:
        async with self.transaction():
            updated = await self.user_repo.mark_all_read(user_id)
        self.logger.info(f"Marked {updated} notifications read for {user_id}")
        return updated

    # Admin-facing

    async def list_admin_notifications(
        self,
        notification_type: Optional[str] = None,
        unread_only: bool = False,
        search: Optional[str] = None,
        limit: int = 200,
    ) -> List[AdminNotification]:
        return await self.admin_repo.list_recent(
            notification_type=notification_type,
            unread_only=unread_only,
            search=search,
            limit=limit,
        )

    async def admin_unread_count(self) -> int:
        return await self.admin_repo.count_unread()

    async def mark_admin_notification_read(self, notification_id: UUID) -> AdminNotification:
        async with self.transaction():
            notification = await self.admin_repo.get_by_id(notification_id)
            if not notification:
                raise NotFoundError(f"Admin notification {notification_id} not found")
            await self.admin_repo.update_instance(notification, is_read=True)
        return notification
