"""
Notification Schema Definitions

Admin notification messages carry a payload whose shape depends on
``notification_type``. Payloads are modelled as a tagged union and decoded
defensively: a message that is not valid JSON (or does not match its
payload model) decodes to an empty payload instead of failing.
"""

import json
from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Dict, Literal, Optional, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

APPLICATION_SUBMISSION = "application_submission"


class ApplicationSubmissionPayload(BaseModel):
    """Public application form (entrepreneur, cobuilder or partner)."""

    model_config = ConfigDict(populate_by_name=True)

    kind: Literal["application_submission"] = "application_submission"
    role: Optional[str] = None
    first_name: Optional[str] = Field(None, alias="firstName")
    last_name: Optional[str] = Field(None, alias="lastName")
    email: Optional[str] = None
    bio: Optional[str] = None

    # entrepreneur
    startup_name: Optional[str] = Field(None, alias="startupName")
    preferred_sector: Optional[str] = Field(None, alias="preferredSector")
    # cobuilder
    primary_skills: Optional[str] = Field(None, alias="primarySkills")
    years_of_experience: Optional[Union[int, str]] = Field(None, alias="yearsOfExperience")
    # partner
    organization_name: Optional[str] = Field(None, alias="organizationName")
    partnership_interest: Optional[str] = Field(None, alias="partnershipInterest")

    @property
    def full_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part)

    def encode(self) -> str:
        return self.model_dump_json(by_alias=True, exclude={"kind"}, exclude_none=True)


class TextPayload(BaseModel):
    """Free-text message used by every other notification type."""

    kind: Literal["text"] = "text"
    text: str = ""

    def encode(self) -> str:
        return self.text


NotificationPayload = Annotated[
    Union[ApplicationSubmissionPayload, TextPayload],
    Field(discriminator="kind"),
]

_payload_adapter = TypeAdapter(NotificationPayload)


def decode_notification_payload(notification_type: str, message: Optional[str]):
    """Decode the message column of an admin notification.

    Returns:
        ApplicationSubmissionPayload for application submissions (empty if the
        message cannot be parsed), TextPayload otherwise
    """
    if notification_type != APPLICATION_SUBMISSION:
        return TextPayload(text=message or "")

    try:
        raw = json.loads(message or "")
    except (TypeError, ValueError):
        return ApplicationSubmissionPayload()
    if not isinstance(raw, dict):
        return ApplicationSubmissionPayload()

    try:
        return _payload_adapter.validate_python({**raw, "kind": APPLICATION_SUBMISSION})
    except PydanticValidationError:
        return ApplicationSubmissionPayload()


class ApplicationSubmissionRequest(BaseModel):
    """Body of the public application form."""

    model_config = ConfigDict(populate_by_name=True)

    role: Literal["entrepreneur", "cobuilder", "partner"]
    first_name: str = Field(..., alias="firstName", min_length=1)
    last_name: str = Field(..., alias="lastName", min_length=1)
    email: EmailStr
    bio: Optional[str] = None
    startup_name: Optional[str] = Field(None, alias="startupName")
    preferred_sector: Optional[str] = Field(None, alias="preferredSector")
    primary_skills: Optional[str] = Field(None, alias="primarySkills")
    years_of_experience: Optional[Union[int, str]] = Field(None, alias="yearsOfExperience")
    organization_name: Optional[str] = Field(None, alias="organizationName")
    partnership_interest: Optional[str] = Field(None, alias="partnershipInterest")

    def to_payload(self) -> ApplicationSubmissionPayload:
        return ApplicationSubmissionPayload(**self.model_dump(by_alias=False))


class UserNotificationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    notification_type: str
    title: str
    message: str
    link: Optional[str] = None
    is_read: bool
    created_at: Optional[datetime] = None


class AdminNotificationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: str
    notification_type: str
    user_name: Optional[str] = None
    user_email: Optional[str] = None
    nr_description: Optional[str] = None
    step_name: Optional[str] = None
    message: Optional[str] = None
    is_read: bool
    created_at: Optional[datetime] = None


class ApplicationOut(BaseModel):
    """An application submission with its payload decoded."""

    notification: AdminNotificationOut
    payload: ApplicationSubmissionPayload


class NotificationEventType(str, Enum):
    NOTIFICATION_CREATED = "notification:created"
    NOTIFICATION_UNREAD = "notification:unread"
    HEARTBEAT = "heartbeat"
    ERROR = "error"


class NotificationEvent(BaseModel):
    event_type: NotificationEventType
    user_id: str
    timestamp: datetime
    data: Dict[str, Any] = Field(default_factory=dict)
