"""Startup ideas: proposals, co-builder applications and the episode journey."""

from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from b4_platform.core.auth import get_current_user, get_current_user_with_roles
from b4_platform.core.database import get_async_session
from b4_platform.core.exceptions import AppError
from b4_platform.schemas.auth import CurrentUser
from b4_platform.schemas.common import ApiResponse
from b4_platform.schemas.ideas import IdeaApplicationCreate, StartupIdeaCreate
from b4_platform.schemas.journeys import PhaseProgressInput, PhaseResponseOut
from b4_platform.schemas.reviews import (
    IdeaApplicationDecision,
    StartupApplicationOut,
    StartupIdeaOut,
)
from b4_platform.services.idea_progress_service import IdeaProgressService, idea_autosaver
from b4_platform.services.review.application_review_service import IdeaApplicationReviewService
from b4_platform.utils.logging import get_logger
from b4_platform.utils.responses import create_api_response, http_error_from

LOGGER = get_logger(__name__)

router = APIRouter()


async def get_idea_progress_service(
    db_session: Annotated[AsyncSession, Depends(get_async_session)]
) -> IdeaProgressService:
    return IdeaProgressService(db_session)


async def get_idea_application_review_service(
    db_session: Annotated[AsyncSession, Depends(get_async_session)]
) -> IdeaApplicationReviewService:
    return IdeaApplicationReviewService(db_session)


@router.post(
    "/",
    response_model=ApiResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Propose a startup idea",
    operation_id="create_startup_idea",
)
async def create_idea(
    request: Request,
    payload: StartupIdeaCreate,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[IdeaProgressService, Depends(get_idea_progress_service)],
):
    try:
        idea = await service.create_idea(current_user.id, payload)
    except AppError as e:
        raise http_error_from(e, request)
    return create_api_response(
        data=StartupIdeaOut.model_validate(idea),
        message="Idea submitted for review",
        request=request,
    )


@router.get(
    "/",
    response_model=ApiResponse,
    summary="List approved ideas looking for co-builders",
    operation_id="list_open_startup_ideas",
)
async def list_open_ideas(
    request: Request,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[IdeaProgressService, Depends(get_idea_progress_service)],
):
    ideas = await service.list_open_ideas()
    return create_api_response(
        data=[StartupIdeaOut.model_validate(idea) for idea in ideas],
        message=f"Retrieved {len(ideas)} opportunities",
        request=request,
    )


@router.get(
    "/mine",
    response_model=ApiResponse,
    summary="List my ideas",
    operation_id="list_my_startup_ideas",
)
async def list_my_ideas(
    request: Request,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[IdeaProgressService, Depends(get_idea_progress_service)],
):
    ideas = await service.list_my_ideas(current_user.id)
    return create_api_response(
        data=[StartupIdeaOut.model_validate(idea) for idea in ideas],
        message=f"Retrieved {len(ideas)} ideas",
        request=request,
    )


@router.patch(
    "/applications/{application_id}",
    response_model=ApiResponse,
    summary="Accept or reject an application to my idea",
    operation_id="decide_idea_application",
)
async def decide_application(
    request: Request,
    application_id: UUID,
    payload: IdeaApplicationDecision,
    current_user: Annotated[CurrentUser, Depends(get_current_user_with_roles)],
    service: Annotated[IdeaApplicationReviewService, Depends(get_idea_application_review_service)],
):
    try:
        application = await service.decide(current_user, application_id, payload.status)
    except AppError as e:
        raise http_error_from(e, request)
    return create_api_response(
        data=StartupApplicationOut.model_validate(application),
        message=f"Application {payload.status}",
        request=request,
    )


@router.get(
    "/{idea_id}",
    response_model=ApiResponse,
    summary="Get an idea",
    operation_id="get_startup_idea",
)
async def get_idea(
    request: Request,
    idea_id: UUID,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[IdeaProgressService, Depends(get_idea_progress_service)],
):
    try:
        idea = await service.get_idea(idea_id)
    except AppError as e:
        raise http_error_from(e, request)
    return create_api_response(
        data=StartupIdeaOut.model_validate(idea), message="Idea retrieved", request=request
    )


@router.post(
    "/{idea_id}/applications",
    response_model=ApiResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Apply to join an idea as a co-builder",
    operation_id="apply_to_startup_idea",
)
async def apply_to_idea(
    request: Request,
    idea_id: UUID,
    payload: IdeaApplicationCreate,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[IdeaProgressService, Depends(get_idea_progress_service)],
):
    try:
        application = await service.apply_to_idea(current_user, idea_id, payload)
    except AppError as e:
        raise http_error_from(e, request)
    return create_api_response(
        data=StartupApplicationOut.model_validate(application),
        message="Application sent",
        request=request,
    )


@router.get(
    "/{idea_id}/applications",
    response_model=ApiResponse,
    summary="List applications to an idea",
    operation_id="list_startup_idea_applications",
)
async def list_applications(
    request: Request,
    idea_id: UUID,
    current_user: Annotated[CurrentUser, Depends(get_current_user_with_roles)],
    service: Annotated[IdeaProgressService, Depends(get_idea_progress_service)],
):
    try:
        applications = await service.list_applications(current_user, idea_id)
    except AppError as e:
        raise http_error_from(e, request)
    return create_api_response(
        data=[StartupApplicationOut.model_validate(a) for a in applications],
        message=f"Retrieved {len(applications)} applications",
        request=request,
    )


@router.get(
    "/{idea_id}/progress",
    response_model=ApiResponse,
    summary="Get the phases of an episode",
    operation_id="get_idea_episode_progress",
)
async def get_episode_progress(
    request: Request,
    idea_id: UUID,
    current_user: Annotated[CurrentUser, Depends(get_current_user_with_roles)],
    service: Annotated[IdeaProgressService, Depends(get_idea_progress_service)],
    episode: Optional[str] = Query(None, description="development, validation or growth"),
):
    """Saved answers and accessibility of each phase; no episode means development."""
    try:
        progress = await service.get_episode_progress(current_user, idea_id, episode)
    except AppError as e:
        raise http_error_from(e, request)
    return create_api_response(data=progress, message="Episode progress retrieved", request=request)


@router.put(
    "/{idea_id}/episodes/{episode}/phases/{phase_number}",
    response_model=ApiResponse,
    summary="Save the answers of an episode phase",
    operation_id="save_idea_phase_progress",
)
async def save_phase_progress(
    request: Request,
    idea_id: UUID,
    episode: str,
    phase_number: int,
    payload: PhaseProgressInput,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[IdeaProgressService, Depends(get_idea_progress_service)],
):
    try:
        row = await service.save_phase_progress(
            current_user.id, idea_id, episode, phase_number, payload
        )
    except AppError as e:
        raise http_error_from(e, request)
    return create_api_response(
        data=PhaseResponseOut.model_validate(row), message="Phase saved", request=request
    )


@router.put(
    "/{idea_id}/episodes/{episode}/phases/{phase_number}/autosave",
    response_model=ApiResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Auto-save an episode phase",
    operation_id="autosave_idea_phase_progress",
)
async def autosave_phase_progress(
    request: Request,
    idea_id: UUID,
    episode: str,
    phase_number: int,
    payload: PhaseProgressInput,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[IdeaProgressService, Depends(get_idea_progress_service)],
):
    """Queue the answers; only the last payload of a burst of edits is written."""
    try:
        resolved = await service.check_editable(current_user.id, idea_id, episode, phase_number)
    except AppError as e:
        raise http_error_from(e, request)

    idea_autosaver.schedule((current_user.id, idea_id, resolved.value, phase_number), payload)
    return create_api_response(
        data={"scheduled": True, "delay_seconds": idea_autosaver.delay},
        message="Auto-save scheduled",
        request=request,
    )


@router.post(
    "/{idea_id}/episodes/{episode}/phases/{phase_number}/complete",
    response_model=ApiResponse,
    summary="Complete an episode phase",
    operation_id="complete_idea_phase",
)
async def complete_phase(
    request: Request,
    idea_id: UUID,
    episode: str,
    phase_number: int,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[IdeaProgressService, Depends(get_idea_progress_service)],
    payload: Optional[PhaseProgressInput] = None,
):
    """Completing the last phase moves the idea to its next episode."""
    try:
        idea = await service.complete_phase(
            current_user.id, idea_id, episode, phase_number, payload
        )
    except AppError as e:
        raise http_error_from(e, request)
    return create_api_response(
        data=StartupIdeaOut.model_validate(idea), message="Phase completed", request=request
    )
