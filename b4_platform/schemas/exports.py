"""Flat records rendered by the PDF exporters."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ResumeData(BaseModel):
    """Profile and Natural Role answers of a Co-Builder."""

    model_config = ConfigDict(from_attributes=True)

    full_name: Optional[str] = None
    bio: Optional[str] = None
    primary_skills: Optional[str] = None
    years_of_experience: Optional[int] = None

    description: Optional[str] = None
    promise_check: Optional[bool] = None

    practice_check: Optional[bool] = None
    practice_entities: Optional[str] = None
    practice_case_studies: Optional[int] = None

    training_check: Optional[bool] = None
    training_contexts: Optional[str] = None
    training_count: Optional[int] = None

    consulting_check: Optional[bool] = None
    consulting_with_whom: Optional[str] = None
    consulting_case_studies: Optional[str] = None


class TrackRecordData(BaseModel):
    """Entrepreneurial experience of an Initiator, one block per category."""

    model_config = ConfigDict(from_attributes=True)

    full_name: Optional[str] = None

    has_developed_project: Optional[bool] = None
    project_description: Optional[str] = None
    project_count: Optional[int] = None
    project_role: Optional[str] = None
    project_outcome: Optional[str] = None

    has_built_product: Optional[bool] = None
    product_description: Optional[str] = None
    product_count: Optional[int] = None
    product_stage: Optional[str] = None
    product_users_count: Optional[str] = None

    has_led_team: Optional[bool] = None
    team_description: Optional[str] = None
    team_size: Optional[int] = None
    team_role: Optional[str] = None

    has_run_business: Optional[bool] = None
    business_description: Optional[str] = None
    business_count: Optional[int] = None
    business_revenue: Optional[str] = None
    business_duration: Optional[str] = None

    has_served_on_board: Optional[bool] = None
    board_description: Optional[str] = None
    board_count: Optional[int] = None
    board_role_type: Optional[str] = None
    board_equity_details: Optional[str] = None


class ExportedDocument(BaseModel):
    content: bytes = Field(..., repr=False)
    filename: str
    page_count: int
    media_type: str = "application/pdf"
