"""Builds export documents from the current user's stored records."""

from typing import Any, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from b4_platform.core.exceptions import NotFoundError
from b4_platform.repositories.onboarding_repository import (
    EntrepreneurialOnboardingRepository,
    NaturalRoleRepository,
    ProfileRepository,
)
from b4_platform.schemas.exports import ExportedDocument, ResumeData, TrackRecordData
from b4_platform.services.base_service import BaseService
from b4_platform.services.export.resume_pdf_service import ResumePdfService
from b4_platform.services.export.track_record_pdf_service import TrackRecordPdfService


def _columns(row: Optional[Any], names) -> Dict[str, Any]:
    if row is None:
        return {}
    return {name: getattr(row, name, None) for name in names}


class ExportService(BaseService):

    def __init__(self, session: AsyncSession):
        super().__init__(session)
        self.profile_repo = ProfileRepository(session)
        self.natural_role_repo = NaturalRoleRepository(session)
        self.entrepreneurial_repo = EntrepreneurialOnboardingRepository(session)
        self.resume_pdf = ResumePdfService()
        self.track_record_pdf = TrackRecordPdfService()

    async def resume_data(self, user_id: str) -> ResumeData:
        profile = await self.profile_repo.get_by_user(user_id)
        natural_role = await self.natural_role_repo.get_by_user(user_id)
        if profile is None and natural_role is None:
            raise NotFoundError("No profile or Natural Role found to export")

        values = _columns(profile, ("full_name", "bio", "primary_skills", "years_of_experience"))
        values.update(_columns(natural_role, ResumeData.model_fields.keys() - values.keys()))
        return ResumeData.model_validate(values)

    async def track_record_data(self, user_id: str) -> TrackRecordData:
        entrepreneurial = await self.entrepreneurial_repo.get_by_user(user_id)
        if entrepreneurial is None:
            raise NotFoundError("No entrepreneurial onboarding found to export")

        profile = await self.profile_repo.get_by_user(user_id)
        values = _columns(entrepreneurial, TrackRecordData.model_fields.keys() - {"full_name"})
        values["full_name"] = profile.full_name if profile else None
        return TrackRecordData.model_validate(values)

    async def export_resume(self, user_id: str) -> ExportedDocument:
        return self.resume_pdf.render(await self.resume_data(user_id))

    async def export_track_record(self, user_id: str) -> ExportedDocument:
        return self.track_record_pdf.render(await self.track_record_data(user_id))
