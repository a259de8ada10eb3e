"""Learning journey and idea episode schemas."""

from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from b4_platform.core.constants import Episode, JourneyType


class UploadedFile(BaseModel):
    """Metadata of a document attached to a journey phase."""

    name: str
    path: str
    size: int = 0
    content_type: Optional[str] = None
    uploaded_at: datetime


class StartJourneyRequest(BaseModel):
    journey_type: JourneyType


class PhaseProgressInput(BaseModel):
    """Answers for one phase.

    ``responses`` maps text task ids to answers; ``completed_tasks`` lists
    the checklist task ids ticked so far.
    """

    responses: Dict[str, str] = Field(default_factory=dict)
    completed_tasks: List[str] = Field(default_factory=list)
    uploaded_files: Optional[List[UploadedFile]] = None
    notes: Optional[str] = None


class PhaseResponseOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    phase_number: int
    phase_name: str
    responses: Dict[str, Any] = Field(default_factory=dict)
    completed_tasks: List[str] = Field(default_factory=list)
    uploaded_files: List[Dict[str, Any]] = Field(default_factory=list)
    notes: Optional[str] = None
    is_completed: bool = False
    completed_at: Optional[datetime] = None


class LearningJourneyOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: str
    journey_type: str
    current_phase: int
    status: str
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    approved_at: Optional[datetime] = None
    admin_notes: Optional[str] = None
    updated_at: Optional[datetime] = None


class PhaseState(BaseModel):
    """A catalog phase merged with what the user saved for it."""

    number: int
    name: str
    accessible: bool
    is_completed: bool = False
    responses: Dict[str, Any] = Field(default_factory=dict)
    completed_tasks: List[str] = Field(default_factory=list)
    uploaded_files: List[Dict[str, Any]] = Field(default_factory=list)
    missing_tasks: List[str] = Field(default_factory=list)


class JourneyProgress(BaseModel):
    journey: LearningJourneyOut
    phases: List[PhaseState]
    all_completed: bool


class EpisodeProgress(BaseModel):
    startup_id: UUID
    episode: Episode
    current_episode: str
    phases: List[PhaseState]
    all_completed: bool


class DocumentUrl(BaseModel):
    path: str
    signed_url: str
    expires_in: int
