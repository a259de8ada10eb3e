"""Delete-account request and response bodies."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class DeleteAccountRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    delete_type: Optional[str] = Field(None, alias="deleteType", description="soft or hard")
    action: Optional[str] = Field(None, description="send_confirmation to email a code")
    confirmation_code: Optional[str] = Field(None, alias="confirmationCode")


class DeleteAccountResult(BaseModel):
    success: bool = True
    message: str
