import asyncio
import json
from datetime import datetime, timezone
from typing import AsyncGenerator, Callable, Optional, Set

from sqlalchemy.ext.asyncio import AsyncSession

from b4_platform.core.database import async_session_maker
from b4_platform.repositories.notification_repository import UserNotificationRepository
from b4_platform.schemas.notifications import (
    NotificationEvent,
    NotificationEventType,
    UserNotificationOut,
)
from b4_platform.utils.logging import get_logger

LOGGER = get_logger(__name__)


class NotificationStreamManager:
    """Streams a user's new notifications and unread count as Server-Sent Events.

    Every poll opens a short-lived session, emits one ``notification:created``
    event per row inserted since the previous poll and a
    ``notification:unread`` event when the unread count changes. Clients use
    the events to refetch, never as the source of truth.
    """

    def __init__(
        self,
        poll_interval: float = 2.0,
        session_factory: Callable[[], AsyncSession] = async_session_maker,
    ):
        self.poll_interval = poll_interval
        self.session_factory = session_factory

    async def stream_user_events(
        self,
        user_id: str,
        max_polls: Optional[int] = None,
    ) -> AsyncGenerator[str, None]:
        """Stream SSE events for one user until the client disconnects.

        Args:
            user_id: Owner of the notifications
            max_polls: Stop after this many polls (None streams forever)
        """
        last_seen = datetime.now(timezone.utc)
        emitted: Set[str] = set()
        last_unread: Optional[int] = None
        polls = 0

        try:
            while max_polls is None or polls < max_polls:
                polls += 1
                yield self._format_sse(self._event(
                    NotificationEventType.HEARTBEAT, user_id, {"message": "keep-alive"}
                ))

                async with self.session_factory() as session:
                    repo = UserNotificationRepository(session)
                    created = await repo.list_created_after(user_id, last_seen)
                    unread = await repo.count_unread(user_id)

                for notification in created:
                    key = str(notification.id)
                    if key in emitted:
                        continue
                    emitted.add(key)
                    if notification.created_at and notification.created_at > last_seen:
                        last_seen = notification.created_at
                    yield self._format_sse(self._event(
                        NotificationEventType.NOTIFICATION_CREATED,
                        user_id,
                        UserNotificationOut.model_validate(notification).model_dump(mode="json"),
                    ))

                if unread != last_unread:
                    last_unread = unread
                    yield self._format_sse(self._event(
                        NotificationEventType.NOTIFICATION_UNREAD, user_id, {"unread_count": unread}
                    ))

                if max_polls is None or polls < max_polls:
                    await asyncio.sleep(self.poll_interval)

        except asyncio.CancelledError:
            LOGGER.info(f"Notification stream cancelled for user {user_id}")
            raise
        except Exception as e:
            LOGGER.error(f"Error in notification stream for {user_id}: {e}", exc_info=True)
            yield self._format_sse(self._event(
                NotificationEventType.ERROR, user_id, {"message": f"Stream error: {str(e)}"}
            ))

    @staticmethod
    def _event(event_type: NotificationEventType, user_id: str, data: dict) -> NotificationEvent:
        return NotificationEvent(
            event_type=event_type,
            user_id=user_id,
            timestamp=datetime.now(timezone.utc),
            data=data,
        )

    def _format_sse(self, event: NotificationEvent) -> str:
        """Format a NotificationEvent as a raw SSE message."""
        data = event.model_dump(mode="json")
        return f"event: {data['event_type']}\ndata: {json.dumps(data)}\n\n"
