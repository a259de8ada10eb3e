"""PDF exports of the current user's resume and track record."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from b4_platform.core.auth import get_current_user
from b4_platform.core.database import get_async_session
from b4_platform.core.exceptions import AppError
from b4_platform.schemas.auth import CurrentUser
from b4_platform.schemas.exports import ExportedDocument
from b4_platform.services.export.export_service import ExportService
from b4_platform.services.export.pdf_layout import content_disposition
from b4_platform.utils.logging import get_logger
from b4_platform.utils.responses import http_error_from

LOGGER = get_logger(__name__)

router = APIRouter()


async def get_export_service(
    db_session: Annotated[AsyncSession, Depends(get_async_session)]
) -> ExportService:
    return ExportService(db_session)


def _pdf_response(document: ExportedDocument) -> Response:
    return Response(
        content=document.content,
        media_type=document.media_type,
        headers={
            "Content-Disposition": content_disposition(document.filename),
            "X-Page-Count": str(document.page_count),
        },
    )


@router.get(
    "/resume",
    summary="Download my resume as PDF",
    operation_id="export_resume_pdf",
    response_class=Response,
)
async def export_resume(
    request: Request,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[ExportService, Depends(get_export_service)],
) -> Response:
    try:
        document = await service.export_resume(current_user.id)
    except AppError as e:
        raise http_error_from(e, request)
    LOGGER.info(f"Resume exported for {current_user.id}")
    return _pdf_response(document)


@router.get(
    "/track-record",
    summary="Download my entrepreneurial track record as PDF",
    operation_id="export_track_record_pdf",
    response_class=Response,
)
async def export_track_record(
    request: Request,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[ExportService, Depends(get_export_service)],
) -> Response:
    try:
        document = await service.export_track_record(current_user.id)
    except AppError as e:
        raise http_error_from(e, request)
    LOGGER.info(f"Track record exported for {current_user.id}")
    return _pdf_response(document)
