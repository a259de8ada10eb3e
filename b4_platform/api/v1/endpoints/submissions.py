"""User submissions that admins review: trainings and the Natural Role decoder."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from b4_platform.core.auth import get_current_user
from b4_platform.core.database import get_async_session
from b4_platform.core.exceptions import AppError
from b4_platform.schemas.auth import CurrentUser
from b4_platform.schemas.common import ApiResponse
from b4_platform.schemas.reviews import (
    NRDecoderOut,
    NRDecoderSubmissionRequest,
    TrainingOut,
    TrainingSubmission,
)
from b4_platform.services.review.submission_review_service import (
    NR_DECODER_QUESTIONS,
    NRDecoderReviewService,
    TrainingReviewService,
)
from b4_platform.utils.logging import get_logger
from b4_platform.utils.responses import create_api_response, http_error_from

LOGGER = get_logger(__name__)

router = APIRouter()


async def get_training_service(
    db_session: Annotated[AsyncSession, Depends(get_async_session)]
) -> TrainingReviewService:
    return TrainingReviewService(db_session)


async def get_nr_decoder_service(
    db_session: Annotated[AsyncSession, Depends(get_async_session)]
) -> NRDecoderReviewService:
    return NRDecoderReviewService(db_session)


@router.post(
    "/trainings",
    response_model=ApiResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Submit a training opportunity",
    operation_id="submit_training",
)
async def submit_training(
    request: Request,
    payload: TrainingSubmission,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[TrainingReviewService, Depends(get_training_service)],
):
    try:
        training = await service.submit(current_user.id, payload)
    except AppError as e:
        raise http_error_from(e, request)
    return create_api_response(
        data=TrainingOut.model_validate(training),
        message="Training submitted for review",
        request=request,
    )


@router.get(
    "/nr-decoder/questions",
    response_model=ApiResponse,
    summary="List the Natural Role decoder questions",
    operation_id="list_nr_decoder_questions",
)
async def list_nr_decoder_questions(
    request: Request,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
):
    return create_api_response(
        data=NR_DECODER_QUESTIONS, message="Decoder questions", request=request
    )


@router.get(
    "/nr-decoder",
    response_model=ApiResponse,
    summary="List my Natural Role decoder submissions",
    operation_id="list_my_nr_decoder_submissions",
)
async def list_my_nr_decoder_submissions(
    request: Request,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[NRDecoderReviewService, Depends(get_nr_decoder_service)],
):
    submissions = await service.list_for_user(current_user.id)
    return create_api_response(
        data=[NRDecoderOut.model_validate(s) for s in submissions],
        message=f"Retrieved {len(submissions)} submissions",
        request=request,
    )


@router.post(
    "/nr-decoder",
    response_model=ApiResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Submit Natural Role decoder answers",
    operation_id="submit_nr_decoder",
)
async def submit_nr_decoder(
    request: Request,
    payload: NRDecoderSubmissionRequest,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[NRDecoderReviewService, Depends(get_nr_decoder_service)],
):
    try:
        submission = await service.submit(current_user.id, payload.answers)
    except AppError as e:
        raise http_error_from(e, request)
    return create_api_response(
        data=NRDecoderOut.model_validate(submission),
        message="Answers submitted",
        request=request,
    )
