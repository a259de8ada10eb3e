"""Admin review endpoints.

Every route requires the admin role, from the token or from ``user_roles``.
Reviewers never update optimistically: each decision returns the stored
record so the console can refetch its list.
"""

from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from b4_platform.core.auth import require_admin
from b4_platform.core.database import get_async_session
from b4_platform.core.exceptions import AppError
from b4_platform.schemas.auth import CurrentUser
from b4_platform.schemas.common import ApiResponse
from b4_platform.schemas.journeys import LearningJourneyOut
from b4_platform.schemas.notifications import AdminNotificationOut
from b4_platform.schemas.onboarding import OnboardingStateResponse
from b4_platform.schemas.reviews import (
    NRDecoderOut,
    NRDecoderReviewRequest,
    ReviewRequest,
    StartupIdeaOut,
    TrainingOut,
    TrainingReviewRequest,
)
from b4_platform.services.dashboard_service import DashboardService
from b4_platform.services.notification_service import NotificationService
from b4_platform.services.review.application_review_service import ApplicationReviewService
from b4_platform.services.review.journey_review_service import JourneyReviewService
from b4_platform.services.review.onboarding_review_service import OnboardingReviewService
from b4_platform.services.review.opportunity_review_service import OpportunityReviewService
from b4_platform.services.review.submission_review_service import (
    NRDecoderReviewService,
    TrainingReviewService,
)
from b4_platform.utils.logging import get_logger
from b4_platform.utils.responses import create_api_response, http_error_from

LOGGER = get_logger(__name__)

router = APIRouter()


async def get_journey_review_service(
    db_session: Annotated[AsyncSession, Depends(get_async_session)]
) -> JourneyReviewService:
    return JourneyReviewService(db_session)


async def get_onboarding_review_service(
    db_session: Annotated[AsyncSession, Depends(get_async_session)]
) -> OnboardingReviewService:
    return OnboardingReviewService(db_session)


async def get_application_review_service(
    db_session: Annotated[AsyncSession, Depends(get_async_session)]
) -> ApplicationReviewService:
    return ApplicationReviewService(db_session)


async def get_opportunity_review_service(
    db_session: Annotated[AsyncSession, Depends(get_async_session)]
) -> OpportunityReviewService:
    return OpportunityReviewService(db_session)


async def get_training_review_service(
    db_session: Annotated[AsyncSession, Depends(get_async_session)]
) -> TrainingReviewService:
    return TrainingReviewService(db_session)


async def get_nr_decoder_review_service(
    db_session: Annotated[AsyncSession, Depends(get_async_session)]
) -> NRDecoderReviewService:
    return NRDecoderReviewService(db_session)


async def get_notification_service(
    db_session: Annotated[AsyncSession, Depends(get_async_session)]
) -> NotificationService:
    return NotificationService(db_session)


async def get_dashboard_service(
    db_session: Annotated[AsyncSession, Depends(get_async_session)]
) -> DashboardService:
    return DashboardService(db_session)


# ------------------------------------------------------------ learning journeys

@router.get(
    "/journeys",
    response_model=ApiResponse,
    summary="List learning journeys for review",
    operation_id="admin_list_learning_journeys",
)
async def list_journeys(
    request: Request,
    admin: Annotated[CurrentUser, Depends(require_admin)],
    service: Annotated[JourneyReviewService, Depends(get_journey_review_service)],
):
    journeys = await service.list_pending()
    return create_api_response(
        data=[LearningJourneyOut.model_validate(j) for j in journeys],
        message=f"Retrieved {len(journeys)} journeys",
        request=request,
    )


@router.post(
    "/journeys/{journey_id}/review",
    response_model=ApiResponse,
    summary="Approve or reject a learning journey",
    operation_id="admin_review_learning_journey",
)
async def review_journey(
    request: Request,
    journey_id: UUID,
    payload: ReviewRequest,
    admin: Annotated[CurrentUser, Depends(require_admin)],
    service: Annotated[JourneyReviewService, Depends(get_journey_review_service)],
):
    """Rejections need notes; approval grants the journey's certification."""
    try:
        journey = await service.review(admin, journey_id, payload.decision, payload.notes)
    except AppError as e:
        raise http_error_from(e, request)
    return create_api_response(
        data=LearningJourneyOut.model_validate(journey),
        message=f"Journey {journey.status}",
        request=request,
    )


# ------------------------------------------------------------------ onboarding

@router.get(
    "/onboarding",
    response_model=ApiResponse,
    summary="List onboardings pending approval",
    operation_id="admin_list_pending_onboarding",
)
async def list_pending_onboarding(
    request: Request,
    admin: Annotated[CurrentUser, Depends(require_admin)],
    service: Annotated[OnboardingReviewService, Depends(get_onboarding_review_service)],
    search: Optional[str] = Query(None, description="Filter by name or skills"),
):
    pending = await service.list_pending(search=search)
    return create_api_response(
        data=pending, message=f"Retrieved {len(pending)} pending onboardings", request=request
    )


@router.post(
    "/onboarding/{user_id}/review",
    response_model=ApiResponse,
    summary="Approve or reject an onboarding",
    operation_id="admin_review_onboarding",
)
async def review_onboarding(
    request: Request,
    user_id: str,
    payload: ReviewRequest,
    admin: Annotated[CurrentUser, Depends(require_admin)],
    service: Annotated[OnboardingReviewService, Depends(get_onboarding_review_service)],
):
    try:
        state = await service.review(admin, user_id, payload.decision, payload.notes)
    except AppError as e:
        raise http_error_from(e, request)
    return create_api_response(
        data=OnboardingStateResponse.model_validate(state),
        message=f"Onboarding {state.journey_status}",
        request=request,
    )


# ---------------------------------------------------------------- applications

@router.get(
    "/applications",
    response_model=ApiResponse,
    summary="List join-form applications",
    operation_id="admin_list_applications",
)
async def list_applications(
    request: Request,
    admin: Annotated[CurrentUser, Depends(require_admin)],
    service: Annotated[ApplicationReviewService, Depends(get_application_review_service)],
    role: str = Query("all", description="all, entrepreneur, cobuilder or partner"),
    search: Optional[str] = Query(None, description="Filter by name or email"),
):
    try:
        applications = await service.list_pending(role=role, search=search)
    except AppError as e:
        raise http_error_from(e, request)
    return create_api_response(
        data=applications,
        message=f"Retrieved {len(applications)} applications",
        request=request,
    )


@router.post(
    "/applications/{notification_id}/review",
    response_model=ApiResponse,
    summary="Approve or reject a join-form application",
    operation_id="admin_review_application",
)
async def review_application(
    request: Request,
    notification_id: UUID,
    payload: ReviewRequest,
    admin: Annotated[CurrentUser, Depends(require_admin)],
    service: Annotated[ApplicationReviewService, Depends(get_application_review_service)],
):
    try:
        application = await service.review(notification_id, payload.decision)
    except AppError as e:
        raise http_error_from(e, request)
    return create_api_response(data=application, message="Application reviewed", request=request)


# --------------------------------------------------------------- opportunities

@router.get(
    "/opportunities",
    response_model=ApiResponse,
    summary="List ideas awaiting review",
    operation_id="admin_list_opportunities",
)
async def list_opportunities(
    request: Request,
    admin: Annotated[CurrentUser, Depends(require_admin)],
    service: Annotated[OpportunityReviewService, Depends(get_opportunity_review_service)],
):
    ideas = await service.list_pending()
    return create_api_response(
        data=[StartupIdeaOut.model_validate(idea) for idea in ideas],
        message=f"Retrieved {len(ideas)} opportunities",
        request=request,
    )


@router.post(
    "/opportunities/{idea_id}/under-review",
    response_model=ApiResponse,
    summary="Mark an idea as under review",
    operation_id="admin_mark_opportunity_under_review",
)
async def mark_opportunity_under_review(
    request: Request,
    idea_id: UUID,
    admin: Annotated[CurrentUser, Depends(require_admin)],
    service: Annotated[OpportunityReviewService, Depends(get_opportunity_review_service)],
):
    try:
        idea = await service.mark_under_review(idea_id)
    except AppError as e:
        raise http_error_from(e, request)
    return create_api_response(
        data=StartupIdeaOut.model_validate(idea), message="Idea under review", request=request
    )


@router.post(
    "/opportunities/{idea_id}/review",
    response_model=ApiResponse,
    summary="Approve or reject an idea",
    operation_id="admin_review_opportunity",
)
async def review_opportunity(
    request: Request,
    idea_id: UUID,
    payload: ReviewRequest,
    admin: Annotated[CurrentUser, Depends(require_admin)],
    service: Annotated[OpportunityReviewService, Depends(get_opportunity_review_service)],
):
    try:
        idea = await service.review(admin, idea_id, payload.decision, payload.notes)
    except AppError as e:
        raise http_error_from(e, request)
    return create_api_response(
        data=StartupIdeaOut.model_validate(idea),
        message=f"Idea {idea.review_status}",
        request=request,
    )


# ------------------------------------------------------------------- trainings

@router.get(
    "/trainings",
    response_model=ApiResponse,
    summary="List submitted trainings",
    operation_id="admin_list_trainings",
)
async def list_trainings(
    request: Request,
    admin: Annotated[CurrentUser, Depends(require_admin)],
    service: Annotated[TrainingReviewService, Depends(get_training_review_service)],
):
    split = await service.list_split()
    data = {
        group: [TrainingOut.model_validate(t).model_dump(mode="json") for t in trainings]
        for group, trainings in split.items()
    }
    return create_api_response(data=data, message="Trainings retrieved", request=request)


@router.post(
    "/trainings/{training_id}/review",
    response_model=ApiResponse,
    summary="Approve or decline a training",
    operation_id="admin_review_training",
)
async def review_training(
    request: Request,
    training_id: UUID,
    payload: TrainingReviewRequest,
    admin: Annotated[CurrentUser, Depends(require_admin)],
    service: Annotated[TrainingReviewService, Depends(get_training_review_service)],
):
    try:
        training = await service.review(training_id, payload.status, payload.notes)
    except AppError as e:
        raise http_error_from(e, request)
    return create_api_response(
        data=TrainingOut.model_validate(training),
        message=f"Training {payload.status}",
        request=request,
    )


# ------------------------------------------------------------------ NR decoder

@router.get(
    "/nr-decoder",
    response_model=ApiResponse,
    summary="List Natural Role decoder submissions",
    operation_id="admin_list_nr_decoder_submissions",
)
async def list_nr_decoder_submissions(
    request: Request,
    admin: Annotated[CurrentUser, Depends(require_admin)],
    service: Annotated[NRDecoderReviewService, Depends(get_nr_decoder_review_service)],
):
    submissions = await service.list_pending()
    return create_api_response(
        data=[NRDecoderOut.model_validate(s) for s in submissions],
        message=f"Retrieved {len(submissions)} submissions",
        request=request,
    )


@router.post(
    "/nr-decoder/{submission_id}/review",
    response_model=ApiResponse,
    summary="Mark a Natural Role decoder submission reviewed",
    operation_id="admin_review_nr_decoder_submission",
)
async def review_nr_decoder_submission(
    request: Request,
    submission_id: UUID,
    payload: NRDecoderReviewRequest,
    admin: Annotated[CurrentUser, Depends(require_admin)],
    service: Annotated[NRDecoderReviewService, Depends(get_nr_decoder_review_service)],
):
    try:
        submission = await service.review(
            admin, submission_id, payload.notes, payload.result_pdf_url
        )
    except AppError as e:
        raise http_error_from(e, request)
    return create_api_response(
        data=NRDecoderOut.model_validate(submission),
        message="Submission reviewed",
        request=request,
    )


# --------------------------------------------------------------- notifications

@router.get(
    "/notifications",
    response_model=ApiResponse,
    summary="List admin notifications",
    operation_id="admin_list_notifications",
)
async def list_admin_notifications(
    request: Request,
    admin: Annotated[CurrentUser, Depends(require_admin)],
    service: Annotated[NotificationService, Depends(get_notification_service)],
    notification_type: Optional[str] = Query(None, alias="type"),
    unread_only: bool = Query(False),
    search: Optional[str] = Query(None),
):
    notifications = await service.list_admin_notifications(
        notification_type=notification_type, unread_only=unread_only, search=search
    )
    return create_api_response(
        data=[AdminNotificationOut.model_validate(n) for n in notifications],
        message=f"Retrieved {len(notifications)} notifications",
        request=request,
    )


@router.get(
    "/notifications/unread-count",
    response_model=ApiResponse,
    summary="Count unread admin notifications",
    operation_id="admin_count_unread_notifications",
)
async def admin_unread_count(
    request: Request,
    admin: Annotated[CurrentUser, Depends(require_admin)],
    service: Annotated[NotificationService, Depends(get_notification_service)],
):
    count = await service.admin_unread_count()
    return create_api_response(data={"unread": count}, message="Unread count", request=request)


@router.post(
    "/notifications/{notification_id}/read",
    response_model=ApiResponse,
    summary="Mark an admin notification read",
    operation_id="admin_mark_notification_read",
)
async def mark_admin_notification_read(
    request: Request,
    notification_id: UUID,
    admin: Annotated[CurrentUser, Depends(require_admin)],
    service: Annotated[NotificationService, Depends(get_notification_service)],
):
    try:
        notification = await service.mark_admin_notification_read(notification_id)
    except AppError as e:
        raise http_error_from(e, request)
    return create_api_response(
        data=AdminNotificationOut.model_validate(notification),
        message="Notification marked read",
        request=request,
    )


# ------------------------------------------------------------------- analytics

@router.get(
    "/analytics",
    response_model=ApiResponse,
    summary="Platform analytics",
    operation_id="admin_get_analytics",
)
async def get_analytics(
    request: Request,
    admin: Annotated[CurrentUser, Depends(require_admin)],
    service: Annotated[DashboardService, Depends(get_dashboard_service)],
):
    try:
        analytics = await service.get_admin_analytics()
    except AppError as e:
        raise http_error_from(e, request)
    return create_api_response(data=analytics, message="Analytics retrieved", request=request)
