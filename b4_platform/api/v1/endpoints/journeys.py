from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, Query, Request, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from b4_platform.core.auth import get_current_user
from b4_platform.core.database import get_async_session
from b4_platform.core.exceptions import AppError
from b4_platform.schemas.auth import CurrentUser
from b4_platform.schemas.common import ApiResponse
from b4_platform.schemas.journeys import (
    LearningJourneyOut,
    PhaseProgressInput,
    PhaseResponseOut,
    StartJourneyRequest,
)
from b4_platform.services.learning_journey_service import LearningJourneyService
from b4_platform.utils.logging import get_logger
from b4_platform.utils.responses import create_api_response, http_error_from

LOGGER = get_logger(__name__)

router = APIRouter()


async def get_learning_journey_service(
    db_session: Annotated[AsyncSession, Depends(get_async_session)]
) -> LearningJourneyService:
    return LearningJourneyService(db_session)


@router.get(
    "/",
    response_model=ApiResponse,
    summary="List my learning journeys",
    operation_id="list_learning_journeys",
)
async def list_journeys(
    request: Request,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[LearningJourneyService, Depends(get_learning_journey_service)],
):
    journeys = await service.list_journeys(current_user.id)
    return create_api_response(
        data=[LearningJourneyOut.model_validate(j) for j in journeys],
        message=f"Retrieved {len(journeys)} journeys",
        request=request,
    )


@router.post(
    "/",
    response_model=ApiResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Start a learning journey",
    operation_id="start_learning_journey",
)
async def start_journey(
    request: Request,
    payload: StartJourneyRequest,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[LearningJourneyService, Depends(get_learning_journey_service)],
):
    """Start a journey; starting one the user already has returns it unchanged."""
    try:
        journey = await service.start_journey(current_user.id, payload.journey_type)
    except AppError as e:
        raise http_error_from(e, request)
    return create_api_response(
        data=LearningJourneyOut.model_validate(journey),
        message="Journey started",
        request=request,
    )


@router.get(
    "/{journey_id}",
    response_model=ApiResponse,
    summary="Get journey progress",
    operation_id="get_learning_journey_progress",
)
async def get_journey_progress(
    request: Request,
    journey_id: UUID,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[LearningJourneyService, Depends(get_learning_journey_service)],
):
    try:
        progress = await service.get_journey_progress(current_user.id, journey_id)
    except AppError as e:
        raise http_error_from(e, request)
    return create_api_response(data=progress, message="Journey progress retrieved", request=request)


@router.put(
    "/{journey_id}/phases/{phase_number}",
    response_model=ApiResponse,
    summary="Save the answers of a phase",
    operation_id="save_learning_journey_phase",
)
async def save_phase_response(
    request: Request,
    journey_id: UUID,
    phase_number: int,
    payload: PhaseProgressInput,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[LearningJourneyService, Depends(get_learning_journey_service)],
):
    try:
        row = await service.save_phase_response(current_user.id, journey_id, phase_number, payload)
    except AppError as e:
        raise http_error_from(e, request)
    return create_api_response(
        data=PhaseResponseOut.model_validate(row), message="Phase saved", request=request
    )


@router.post(
    "/{journey_id}/phases/{phase_number}/complete",
    response_model=ApiResponse,
    summary="Complete a phase",
    operation_id="complete_learning_journey_phase",
)
async def complete_phase(
    request: Request,
    journey_id: UUID,
    phase_number: int,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[LearningJourneyService, Depends(get_learning_journey_service)],
    payload: Optional[PhaseProgressInput] = None,
):
    """Validate every task of the phase; answers sent with the request are saved first."""
    try:
        row = await service.complete_phase(current_user.id, journey_id, phase_number, payload)
    except AppError as e:
        raise http_error_from(e, request)
    return create_api_response(
        data=PhaseResponseOut.model_validate(row), message="Phase completed", request=request
    )


@router.post(
    "/{journey_id}/submit",
    response_model=ApiResponse,
    summary="Submit a finished journey for approval",
    operation_id="submit_learning_journey",
)
async def submit_for_approval(
    request: Request,
    journey_id: UUID,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[LearningJourneyService, Depends(get_learning_journey_service)],
):
    try:
        journey = await service.submit_for_approval(current_user, journey_id)
    except AppError as e:
        raise http_error_from(e, request)
    return create_api_response(
        data=LearningJourneyOut.model_validate(journey),
        message="Journey submitted for approval",
        request=request,
    )


@router.post(
    "/{journey_id}/phases/{phase_number}/documents",
    response_model=ApiResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upload a document to a phase",
    operation_id="upload_learning_journey_document",
)
async def upload_phase_document(
    request: Request,
    journey_id: UUID,
    phase_number: int,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[LearningJourneyService, Depends(get_learning_journey_service)],
    file: UploadFile = File(..., description="Document to attach to the phase"),
):
    content = await file.read()
    try:
        uploaded = await service.upload_phase_document(
            current_user.id,
            journey_id,
            phase_number,
            file.filename or "document",
            content,
            file.content_type,
        )
    except AppError as e:
        raise http_error_from(e, request)
    return create_api_response(data=uploaded, message="Document uploaded", request=request)


@router.get(
    "/{journey_id}/documents/url",
    response_model=ApiResponse,
    summary="Get a signed download URL for a phase document",
    operation_id="get_learning_journey_document_url",
)
async def get_document_url(
    request: Request,
    journey_id: UUID,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[LearningJourneyService, Depends(get_learning_journey_service)],
    path: str = Query(..., description="Storage path returned by the upload"),
):
    try:
        document_url = await service.get_document_url(current_user.id, journey_id, path)
    except AppError as e:
        raise http_error_from(e, request)
    return create_api_response(data=document_url, message="Signed URL created", request=request)
