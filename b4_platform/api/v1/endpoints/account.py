"""Delete-account endpoint.

Errors are returned as ``{"error": message}`` rather than the standard
envelope, so the route authenticates the caller itself.
"""

from typing import Annotated

import jwt
from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from b4_platform.core.database import get_async_session
from b4_platform.core.exceptions import AppError, ValidationError
from b4_platform.core.jwt import jwt_verifier
from b4_platform.schemas.account import DeleteAccountRequest, DeleteAccountResult
from b4_platform.schemas.auth import CurrentUser
from b4_platform.services.account_service import AccountService
from b4_platform.utils.logging import get_logger

LOGGER = get_logger(__name__)

router = APIRouter()

INVALID_REQUEST = 'Invalid request. Use deleteType "soft" or "hard"'


async def get_account_service(
    db_session: Annotated[AsyncSession, Depends(get_async_session)]
) -> AccountService:
    return AccountService(db_session)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


async def _authenticate(request: Request) -> CurrentUser | JSONResponse:
    auth_header = request.headers.get("Authorization")
    if not auth_header:
        return _error(status.HTTP_401_UNAUTHORIZED, "No authorization header")

    token = auth_header[len("Bearer "):] if auth_header.startswith("Bearer ") else auth_header
    try:
        claims = await jwt_verifier.verify_token(token)
    except jwt.InvalidTokenError as e:
        LOGGER.warning(f"Delete-account request with invalid token: {e}")
        return _error(status.HTTP_401_UNAUTHORIZED, "Unauthorized - invalid token")
    return CurrentUser.from_claims(claims)


@router.post(
    "/delete",
    response_model=DeleteAccountResult,
    summary="Deactivate or permanently delete my account",
    description=(
        'deleteType "soft" deactivates the profile. deleteType "hard" needs a '
        'confirmation code first requested with action "send_confirmation".'
    ),
    operation_id="delete_account",
)
async def delete_account(
    request: Request,
    service: Annotated[AccountService, Depends(get_account_service)],
):
    user = await _authenticate(request)
    if isinstance(user, JSONResponse):
        return user

    try:
        body = await request.json()
        payload = DeleteAccountRequest.model_validate(body)
    except (ValueError, PydanticValidationError):
        return _error(status.HTTP_400_BAD_REQUEST, INVALID_REQUEST)

    LOGGER.info(
        f"Delete-account request from {user.id}",
        extra={"delete_type": payload.delete_type, "action": payload.action}
    )

    try:
        if payload.action == "send_confirmation":
            message = await service.send_confirmation(user)
        elif payload.delete_type == "soft":
            message = await service.soft_delete(user)
        elif payload.delete_type == "hard":
            message = await service.hard_delete(user, payload.confirmation_code)
        else:
            return _error(status.HTTP_400_BAD_REQUEST, INVALID_REQUEST)
    except ValidationError as e:
        return _error(status.HTTP_400_BAD_REQUEST, str(e))
    except AppError as e:
        LOGGER.error(f"Delete-account failed for {user.id}: {str(e)}", exc_info=True)
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, str(e))
    except Exception as e:
        LOGGER.error(f"Unexpected delete-account error for {user.id}: {str(e)}", exc_info=True)
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, str(e))

    return DeleteAccountResult(success=True, message=message)
