"""Public join form. Visitors may apply without an account."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from b4_platform.core.database import get_async_session
from b4_platform.core.exceptions import AppError
from b4_platform.schemas.common import ApiResponse
from b4_platform.schemas.notifications import ApplicationSubmissionRequest
from b4_platform.services.review.application_review_service import ApplicationReviewService
from b4_platform.utils.logging import get_logger
from b4_platform.utils.responses import create_api_response, http_error_from

LOGGER = get_logger(__name__)

router = APIRouter()


async def get_application_service(
    db_session: Annotated[AsyncSession, Depends(get_async_session)]
) -> ApplicationReviewService:
    return ApplicationReviewService(db_session)


@router.post(
    "/",
    response_model=ApiResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Submit a join application",
    operation_id="submit_join_application",
)
async def submit_application(
    request: Request,
    payload: ApplicationSubmissionRequest,
    service: Annotated[ApplicationReviewService, Depends(get_application_service)],
):
    """The middleware attaches the user when a valid bearer token was sent."""
    user = getattr(request.state, "user", None)
    try:
        await service.submit_application(payload, user_id=user.id if user else None)
    except AppError as e:
        raise http_error_from(e, request)
    return create_api_response(
        data={"role": payload.role, "email": payload.email},
        message="Application submitted",
        request=request,
    )
