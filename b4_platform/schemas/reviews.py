"""Admin review request and listing schemas."""

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from b4_platform.core.constants import ReviewDecision


class ReviewRequest(BaseModel):
    decision: ReviewDecision
    notes: Optional[str] = Field(None, description="Admin notes shown to the user")


class IdeaApplicationDecision(BaseModel):
    status: Literal["accepted", "rejected"]


class TrainingReviewRequest(BaseModel):
    status: Literal["approved", "declined"]
    notes: Optional[str] = None


class NRDecoderReviewRequest(BaseModel):
    notes: Optional[str] = None
    result_pdf_url: Optional[str] = None


class TrainingSubmission(BaseModel):
    title: str = ""
    description: str = ""
    target_audience: Optional[str] = None
    duration: Optional[str] = None
    format: Optional[str] = None
    sector: Optional[str] = None


class NRDecoderSubmissionRequest(BaseModel):
    """Answers keyed by question number ("1".."7")."""

    answers: Dict[str, str] = Field(default_factory=dict)


class PendingOnboardingOut(BaseModel):
    user_id: str
    primary_role: Optional[str] = None
    journey_status: str
    full_name: Optional[str] = None
    primary_skills: Optional[str] = None
    natural_role: Optional[str] = None
    is_ready: bool = False
    retry_count: int = 0
    updated_at: Optional[datetime] = None


class StartupIdeaOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    creator_id: str
    title: str
    description: str
    sector: Optional[str] = None
    roles_needed: Optional[List[str]] = None
    status: str
    review_status: str
    admin_notes: Optional[str] = None
    current_episode: str
    reviewed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


class StartupApplicationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    startup_id: UUID
    applicant_id: str
    role_applied: Optional[str] = None
    cover_message: Optional[str] = None
    status: str
    created_at: Optional[datetime] = None


class TrainingOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: str
    title: str
    description: str
    target_audience: Optional[str] = None
    duration: Optional[str] = None
    format: Optional[str] = None
    sector: Optional[str] = None
    review_status: str
    admin_notes: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


class NRDecoderOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: str
    answers: Dict[str, Any] = Field(default_factory=dict)
    status: str
    admin_notes: Optional[str] = None
    reviewed_by: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    result_pdf_url: Optional[str] = None
    created_at: Optional[datetime] = None
