from datetime import datetime, timezone
from typing import Any, Optional, Dict
from uuid import uuid4

from fastapi import HTTPException, Request, status as http_status

from b4_platform.core.exceptions import (
    AppError,
    InvalidTransitionError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from b4_platform.schemas.common import ApiResponse, ResponseMeta, ErrorDetail

# Most specific first; the first isinstance match wins
_ERROR_STATUS = (
    (ValidationError, http_status.HTTP_400_BAD_REQUEST, "Validation Failed"),
    (NotFoundError, http_status.HTTP_404_NOT_FOUND, "Not Found"),
    (PermissionDeniedError, http_status.HTTP_403_FORBIDDEN, "Forbidden"),
    (InvalidTransitionError, http_status.HTTP_409_CONFLICT, "Invalid Transition"),
)


def _request_id(request: Optional[Request]) -> str:
    if request and hasattr(request.state, "request_id"):
        return request.state.request_id
    return str(uuid4())


def create_api_response(
    data: Any,
    message: str = "Operation successful",
    status: bool = True,
    request: Optional[Request] = None,
    api_version: str = "v1"
) -> Dict[str, Any]:
    """Create a standardized API response as a dictionary.

    Returns a dict to be compatible with FastAPI's response_model=dict.
    """
    meta = ResponseMeta(
        timestamp=datetime.now(timezone.utc),
        request_id=_request_id(request),
        api_version=api_version
    )

    data_dict: Dict[str, Any] = {}
    if isinstance(data, dict):
        data_dict = data
    elif hasattr(data, "model_dump"):
        data_dict = data.model_dump(mode="json")
    elif isinstance(data, list):
        data_dict = {
            "items": [item.model_dump(mode="json") if hasattr(item, "model_dump") else item for item in data]
        }
    elif data is not None:
        data_dict = {"value": data}

    response = ApiResponse(
        status=status,
        message=message,
        data=data_dict,
        meta=meta
    )
    return response.model_dump(mode="json")


def create_error_detail(
    title: str,
    status: int,
    detail: str,
    request: Optional[Request] = None,
    instance: Optional[str] = None
) -> ErrorDetail:
    """Create a standardized error detail (RFC 7807)."""
    return ErrorDetail(
        title=title,
        status=status,
        detail=detail,
        instance=instance or (request.url.path if request else None),
        request_id=_request_id(request),
        timestamp=datetime.now(timezone.utc)
    )


def http_error_from(
    error: AppError,
    request: Optional[Request] = None,
    title: Optional[str] = None,
) -> HTTPException:
    """Build the HTTPException matching a domain error.

    Validation → 400, not found → 404, permission → 403, invalid
    transition → 409, anything else → 500.
    """
    status_code = http_status.HTTP_500_INTERNAL_SERVER_ERROR
    default_title = "Internal Server Error"
    for error_type, code, error_title in _ERROR_STATUS:
        if isinstance(error, error_type):
            status_code, default_title = code, error_title
            break

    error_detail = create_error_detail(
        title=title or default_title,
        status=status_code,
        detail=str(error),
        request=request,
    )
    return HTTPException(status_code=status_code, detail=error_detail.model_dump(mode='json'))
