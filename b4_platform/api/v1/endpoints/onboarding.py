"""Onboarding wizard endpoints for the Co-Builder and Entrepreneur paths.

Every step endpoint returns the updated onboarding state. Steps ahead of the
user's current step are rejected with 409.
"""

from typing import Annotated, Any, Dict, Optional

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from b4_platform.core.auth import get_current_user
from b4_platform.core.constants import ExperienceCategory
from b4_platform.core.database import get_async_session
from b4_platform.core.exceptions import AppError
from b4_platform.schemas.auth import CurrentUser
from b4_platform.schemas.common import ApiResponse
from b4_platform.schemas.onboarding import (
    ConsultingAnswer,
    EntrepreneurialCategoryInput,
    NaturalRoleDefinitionRequest,
    NaturalRoleResponse,
    OnboardingSnapshot,
    OnboardingStateResponse,
    PracticeAnswer,
    ProfileInput,
    PromiseAnswer,
    ScalingDecision,
    SelectPathRequest,
    TrainingAnswer,
)
from b4_platform.services.onboarding_service import OnboardingService
from b4_platform.utils.logging import get_logger
from b4_platform.utils.responses import create_api_response, http_error_from

LOGGER = get_logger(__name__)

router = APIRouter()


async def get_onboarding_service(
    db_session: Annotated[AsyncSession, Depends(get_async_session)]
) -> OnboardingService:
    return OnboardingService(db_session)


def _row_dict(row: Optional[Any]) -> Optional[Dict[str, Any]]:
    if row is None:
        return None
    return {column.name: getattr(row, column.name) for column in row.__table__.columns}


def _state_response(state, message: str, request: Request) -> dict:
    return create_api_response(
        data=OnboardingStateResponse.model_validate(state),
        message=message,
        request=request,
    )


@router.get(
    "/",
    response_model=ApiResponse,
    summary="Get onboarding snapshot",
    operation_id="get_onboarding_snapshot",
)
async def get_onboarding(
    request: Request,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[OnboardingService, Depends(get_onboarding_service)],
):
    """State, Natural Role and entrepreneurial answers; the state is created on first visit."""
    try:
        snapshot = await service.get_snapshot(current_user.id)
    except AppError as e:
        raise http_error_from(e, request)

    natural_role = snapshot["natural_role"]
    data = OnboardingSnapshot(
        state=OnboardingStateResponse.model_validate(snapshot["state"]),
        natural_role=NaturalRoleResponse.model_validate(natural_role) if natural_role else None,
        entrepreneurial=_row_dict(snapshot["entrepreneurial"]),
    )
    return create_api_response(data=data, message="Onboarding retrieved", request=request)


@router.post(
    "/path",
    response_model=ApiResponse,
    summary="Select the onboarding path",
    operation_id="select_onboarding_path",
)
async def select_path(
    request: Request,
    payload: SelectPathRequest,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[OnboardingService, Depends(get_onboarding_service)],
):
    try:
        state = await service.select_path(current_user, payload.role)
    except AppError as e:
        raise http_error_from(e, request)
    return _state_response(state, "Path selected", request)


@router.post(
    "/natural-role",
    response_model=ApiResponse,
    summary="Define the Natural Role",
    operation_id="define_natural_role",
)
async def define_natural_role(
    request: Request,
    payload: NaturalRoleDefinitionRequest,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[OnboardingService, Depends(get_onboarding_service)],
):
    try:
        state = await service.define_natural_role(current_user, payload.description)
    except AppError as e:
        raise http_error_from(e, request)
    return _state_response(state, "Natural Role saved", request)


@router.post(
    "/natural-role/help",
    response_model=ApiResponse,
    summary="Ask an admin for help defining the Natural Role",
    operation_id="request_natural_role_help",
)
async def request_natural_role_help(
    request: Request,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[OnboardingService, Depends(get_onboarding_service)],
):
    try:
        state = await service.request_natural_role_help(current_user)
    except AppError as e:
        raise http_error_from(e, request)
    return _state_response(state, "Help requested", request)


@router.post(
    "/promise",
    response_model=ApiResponse,
    summary="Answer the promise check",
    operation_id="answer_promise_check",
)
async def answer_promise(
    request: Request,
    payload: PromiseAnswer,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[OnboardingService, Depends(get_onboarding_service)],
):
    try:
        state = await service.answer_promise(current_user, payload.has_promise)
    except AppError as e:
        raise http_error_from(e, request)
    return _state_response(state, "Promise answer saved", request)


@router.post(
    "/guidance",
    response_model=ApiResponse,
    summary="Request guidance after declining the promise",
    operation_id="request_onboarding_guidance",
)
async def request_guidance(
    request: Request,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[OnboardingService, Depends(get_onboarding_service)],
):
    try:
        state = await service.request_guidance(current_user)
    except AppError as e:
        raise http_error_from(e, request)
    return _state_response(state, "Guidance requested", request)


@router.post(
    "/practice",
    response_model=ApiResponse,
    summary="Answer the practice check",
    operation_id="answer_practice_check",
)
async def answer_practice(
    request: Request,
    payload: PracticeAnswer,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[OnboardingService, Depends(get_onboarding_service)],
):
    try:
        state = await service.answer_practice(current_user, payload)
    except AppError as e:
        raise http_error_from(e, request)
    return _state_response(state, "Practice answer saved", request)


@router.post(
    "/training",
    response_model=ApiResponse,
    summary="Answer the training check",
    operation_id="answer_training_check",
)
async def answer_training(
    request: Request,
    payload: TrainingAnswer,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[OnboardingService, Depends(get_onboarding_service)],
):
    try:
        state = await service.answer_training(current_user, payload)
    except AppError as e:
        raise http_error_from(e, request)
    return _state_response(state, "Training answer saved", request)


@router.post(
    "/consulting",
    response_model=ApiResponse,
    summary="Answer the consulting check",
    operation_id="answer_consulting_check",
)
async def answer_consulting(
    request: Request,
    payload: ConsultingAnswer,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[OnboardingService, Depends(get_onboarding_service)],
):
    try:
        state = await service.answer_consulting(current_user, payload)
    except AppError as e:
        raise http_error_from(e, request)
    return _state_response(state, "Consulting answer saved", request)


@router.post(
    "/scaling",
    response_model=ApiResponse,
    summary="Decide whether to scale",
    operation_id="decide_scaling",
)
async def decide_scaling(
    request: Request,
    payload: ScalingDecision,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[OnboardingService, Depends(get_onboarding_service)],
):
    try:
        state = await service.decide_scaling(current_user, payload.wants_to_scale)
    except AppError as e:
        raise http_error_from(e, request)
    return _state_response(state, "Scaling decision saved", request)


@router.put(
    "/profile",
    response_model=ApiResponse,
    summary="Save profile information",
    operation_id="save_onboarding_profile",
)
async def save_profile(
    request: Request,
    payload: ProfileInput,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[OnboardingService, Depends(get_onboarding_service)],
):
    try:
        state = await service.save_profile(current_user, payload)
    except AppError as e:
        raise http_error_from(e, request)
    return _state_response(state, "Profile saved", request)


@router.post(
    "/complete",
    response_model=ApiResponse,
    summary="Submit the Co-Builder onboarding for approval",
    operation_id="complete_onboarding",
)
async def complete_onboarding(
    request: Request,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[OnboardingService, Depends(get_onboarding_service)],
):
    try:
        state = await service.complete_onboarding(current_user)
    except AppError as e:
        raise http_error_from(e, request)
    return _state_response(state, "Onboarding submitted for approval", request)


@router.put(
    "/entrepreneur/{category}",
    response_model=ApiResponse,
    summary="Save one entrepreneurial experience category",
    operation_id="save_entrepreneurial_category",
)
async def save_entrepreneurial_category(
    request: Request,
    category: ExperienceCategory,
    payload: EntrepreneurialCategoryInput,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[OnboardingService, Depends(get_onboarding_service)],
):
    try:
        state = await service.save_entrepreneurial_category(current_user, category, payload)
    except AppError as e:
        raise http_error_from(e, request)
    return _state_response(state, f"{category.value.capitalize()} experience saved", request)


@router.post(
    "/entrepreneur/submit",
    response_model=ApiResponse,
    status_code=status.HTTP_200_OK,
    summary="Submit the Entrepreneur onboarding for approval",
    operation_id="submit_entrepreneurial_onboarding",
)
async def submit_entrepreneurial_onboarding(
    request: Request,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[OnboardingService, Depends(get_onboarding_service)],
):
    try:
        state = await service.submit_entrepreneurial_onboarding(current_user)
    except AppError as e:
        raise http_error_from(e, request)
    return _state_response(state, "Onboarding submitted for approval", request)
