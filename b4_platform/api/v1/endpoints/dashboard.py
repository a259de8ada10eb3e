from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from b4_platform.core.auth import get_current_user
from b4_platform.core.database import get_async_session
from b4_platform.core.exceptions import AppError
from b4_platform.schemas.auth import CurrentUser
from b4_platform.schemas.common import ApiResponse
from b4_platform.services.dashboard_service import DashboardService
from b4_platform.utils.logging import get_logger
from b4_platform.utils.responses import create_api_response, http_error_from

LOGGER = get_logger(__name__)

router = APIRouter()


async def get_dashboard_service(
    db_session: Annotated[AsyncSession, Depends(get_async_session)]
) -> DashboardService:
    return DashboardService(db_session)


@router.get(
    "/",
    response_model=ApiResponse,
    summary="Get my dashboard",
    description="Onboarding state, certifications, journeys, ideas and unread notifications",
    operation_id="get_user_dashboard",
)
async def get_dashboard(
    request: Request,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[DashboardService, Depends(get_dashboard_service)],
):
    try:
        dashboard = await service.get_user_dashboard(current_user.id)
    except AppError as e:
        raise http_error_from(e, request)
    return create_api_response(data=dashboard, message="Dashboard retrieved", request=request)
