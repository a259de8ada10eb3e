"""
Onboarding Schema Definitions

Request and response models for the two onboarding wizards:
- Co-Builder path: Natural Role definition and its four readiness checks
- Entrepreneur path: five entrepreneurial experience categories
- Shared: path selection, profile information, state snapshot
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from b4_platform.core.constants import EXPERIENCE_FLAG_COLUMNS, ExperienceCategory, PrimaryRole


class SelectPathRequest(BaseModel):
    role: PrimaryRole = Field(..., description="Chosen onboarding path")


class NaturalRoleDefinitionRequest(BaseModel):
    description: str = Field(..., description="Self-described Natural Role")

    @field_validator("description")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Natural Role description must not be empty")
        return value


class PromiseAnswer(BaseModel):
    has_promise: bool


class PracticeAnswer(BaseModel):
    """Step 4: has the user practised their Natural Role with real entities?"""

    has_experience: bool
    entities: Optional[str] = Field(None, description="Entities worked with")
    case_studies: Optional[int] = Field(None, ge=0, description="Number of case studies")
    needs_help: bool = False


class TrainingAnswer(BaseModel):
    """Step 5: has the user trained others in their Natural Role?"""

    has_experience: bool
    contexts: Optional[str] = Field(None, description="Contexts the training took place in")
    people_trained: Optional[int] = Field(None, ge=0)
    needs_help: bool = False


class ConsultingAnswer(BaseModel):
    """Step 6: has the user consulted others in their Natural Role?"""

    has_experience: bool
    with_whom: Optional[str] = None
    case_studies: Optional[str] = None
    needs_help: bool = False


class ScalingDecision(BaseModel):
    wants_to_scale: bool


class ProfileInput(BaseModel):
    full_name: Optional[str] = Field(None, max_length=200)
    bio: Optional[str] = None
    primary_skills: Optional[str] = None
    years_of_experience: Optional[int] = Field(None, ge=0, le=80)
    avatar_url: Optional[str] = None


class EntrepreneurialCategoryInput(BaseModel):
    """Answers for one experience category.

    Only the detail fields belonging to the category are stored: project
    (role, outcome), product (stage, users_count), team (role), business
    (revenue, duration), board (role_type, equity_details). ``count`` is the
    team size for the team category.
    """

    has_experience: bool
    description: Optional[str] = None
    count: Optional[int] = Field(None, ge=0)
    needs_help: bool = False

    role: Optional[str] = None
    outcome: Optional[str] = None
    stage: Optional[str] = None
    users_count: Optional[str] = None
    revenue: Optional[str] = None
    duration: Optional[str] = None
    role_type: Optional[str] = None
    equity_details: Optional[str] = None

    def to_columns(self, category: ExperienceCategory) -> dict:
        """Map the answer onto ``entrepreneurial_onboarding`` columns."""
        prefix = category.value
        flag_column = EXPERIENCE_FLAG_COLUMNS[category]

        columns = {
            flag_column: self.has_experience,
            f"{prefix}_description": self.description if self.has_experience else None,
            f"{prefix}_needs_help": (not self.has_experience) and self.needs_help,
        }
        if category == ExperienceCategory.TEAM:
            columns["team_size"] = self.count if self.has_experience else None
        else:
            columns[f"{prefix}_count"] = self.count if self.has_experience else None

        details = {
            ExperienceCategory.PROJECT: {"project_role": self.role, "project_outcome": self.outcome},
            ExperienceCategory.PRODUCT: {
                "product_stage": self.stage,
                "product_users_count": self.users_count,
            },
            ExperienceCategory.TEAM: {"team_role": self.role},
            ExperienceCategory.BUSINESS: {
                "business_revenue": self.revenue,
                "business_duration": self.duration,
            },
            ExperienceCategory.BOARD: {
                "board_role_type": self.role_type,
                "board_equity_details": self.equity_details,
            },
        }[category]
        for column, value in details.items():
            columns[column] = value if self.has_experience else None
        return columns


class OnboardingStateResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: str
    primary_role: Optional[str] = None
    potential_role: Optional[str] = None
    current_step: int
    entrepreneur_step: Optional[int] = None
    onboarding_completed: bool
    journey_status: str
    user_status: Optional[str] = None
    boost_type: Optional[str] = None
    scale_type: Optional[str] = None
    retry_count: int = 0
    updated_at: Optional[datetime] = None


class NaturalRoleResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: str
    description: Optional[str] = None
    status: str
    promise_check: Optional[bool] = None
    practice_check: Optional[bool] = None
    practice_entities: Optional[str] = None
    practice_case_studies: Optional[int] = None
    practice_needs_help: Optional[bool] = None
    training_check: Optional[bool] = None
    training_count: Optional[int] = None
    training_contexts: Optional[str] = None
    training_needs_help: Optional[bool] = None
    consulting_check: Optional[bool] = None
    consulting_with_whom: Optional[str] = None
    consulting_case_studies: Optional[str] = None
    consulting_needs_help: Optional[bool] = None
    is_ready: bool = False
    wants_to_scale: Optional[bool] = None


class OnboardingSnapshot(BaseModel):
    """Everything a wizard screen needs to render its current sub-view."""

    state: OnboardingStateResponse
    natural_role: Optional[NaturalRoleResponse] = None
    entrepreneurial: Optional[dict] = None
