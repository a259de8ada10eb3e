from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from b4_platform.core.auth import get_current_user, get_current_user_from_query
from b4_platform.core.config import settings
from b4_platform.core.database import get_async_session
from b4_platform.core.exceptions import AppError
from b4_platform.schemas.auth import CurrentUser
from b4_platform.schemas.common import ApiResponse
from b4_platform.schemas.notifications import UserNotificationOut
from b4_platform.services.notification_service import NotificationService
from b4_platform.services.notification_stream import NotificationStreamManager
from b4_platform.utils.logging import get_logger
from b4_platform.utils.responses import create_api_response, http_error_from

LOGGER = get_logger(__name__)

router = APIRouter()


async def get_notification_service(
    db_session: Annotated[AsyncSession, Depends(get_async_session)]
) -> NotificationService:
    return NotificationService(db_session)


def get_stream_manager() -> NotificationStreamManager:
    return NotificationStreamManager(poll_interval=settings.platform.notification_poll_interval)


@router.get(
    "/",
    response_model=ApiResponse,
    summary="List my notifications",
    operation_id="list_user_notifications",
)
async def list_notifications(
    request: Request,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[NotificationService, Depends(get_notification_service)],
    unread_only: bool = Query(False),
    limit: int = Query(50, ge=1, le=200),
):
    notifications = await service.list_for_user(current_user.id, unread_only=unread_only, limit=limit)
    return create_api_response(
        data=[UserNotificationOut.model_validate(n) for n in notifications],
        message=f"Retrieved {len(notifications)} notifications",
        request=request,
    )


@router.get(
    "/unread-count",
    response_model=ApiResponse,
    summary="Count my unread notifications",
    operation_id="count_unread_user_notifications",
)
async def unread_count(
    request: Request,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[NotificationService, Depends(get_notification_service)],
):
    count = await service.unread_count(current_user.id)
    return create_api_response(data={"unread": count}, message="Unread count", request=request)


@router.post(
    "/read-all",
    response_model=ApiResponse,
    summary="Mark all my notifications read",
    operation_id="mark_all_user_notifications_read",
)
async def mark_all_read(
    request: Request,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[NotificationService, Depends(get_notification_service)],
):
    try:
        updated = await service.mark_all_read(current_user.id)
    except AppError as e:
        raise http_error_from(e, request)
    return create_api_response(
        data={"updated": updated}, message="Notifications marked read", request=request
    )


@router.post(
    "/{notification_id}/read",
    response_model=ApiResponse,
    summary="Mark a notification read",
    operation_id="mark_user_notification_read",
)
async def mark_read(
    request: Request,
    notification_id: UUID,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[NotificationService, Depends(get_notification_service)],
):
    try:
        notification = await service.mark_read(current_user.id, notification_id)
    except AppError as e:
        raise http_error_from(e, request)
    return create_api_response(
        data=UserNotificationOut.model_validate(notification),
        message="Notification marked read",
        request=request,
    )


@router.get(
    "/stream",
    summary="Stream notification events via SSE",
    operation_id="stream_user_notifications",
)
async def stream_notifications(
    user: Annotated[CurrentUser, Depends(get_current_user_from_query)],
    stream_manager: Annotated[NotificationStreamManager, Depends(get_stream_manager)],
) -> StreamingResponse:
    """Heartbeats, new notifications and unread count changes for the current user."""
    return StreamingResponse(
        stream_manager.stream_user_events(user.id),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",  # Disable proxy buffering (Nginx)
        },
    )
