"""Dashboard aggregate schemas."""

from typing import List, Optional

from pydantic import BaseModel, Field

from b4_platform.schemas.journeys import LearningJourneyOut
from b4_platform.schemas.onboarding import OnboardingStateResponse
from b4_platform.schemas.reviews import StartupIdeaOut


class AdminAnalytics(BaseModel):
    total_users: int = 0
    approved_users: int = 0
    pending_approvals: int = 0

    total_ideas: int = 0
    approved_ideas: int = 0
    pending_ideas: int = 0

    total_applications: int = 0
    pending_applications: int = 0
    accepted_applications: int = 0

    total_journey_responses: int = 0
    completed_journeys: int = 0
    in_progress_journeys: int = 0

    journey_completion_rate: int = Field(0, description="Percent, round-half-up")
    idea_approval_rate: int = 0
    application_acceptance_rate: int = 0


class CertificationOut(BaseModel):
    certification_type: str
    display_label: str
    verified: bool


class UserDashboard(BaseModel):
    onboarding: Optional[OnboardingStateResponse] = None
    certifications: List[CertificationOut] = Field(default_factory=list)
    journeys: List[LearningJourneyOut] = Field(default_factory=list)
    ideas: List[StartupIdeaOut] = Field(default_factory=list)
    unread_notifications: int = 0
