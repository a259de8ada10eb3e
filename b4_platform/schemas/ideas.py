"""Startup idea and idea application request schemas."""

from typing import List, Optional

from pydantic import BaseModel, Field


class StartupIdeaCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    sector: Optional[str] = None
    roles_needed: List[str] = Field(default_factory=list)


class IdeaApplicationCreate(BaseModel):
    role_applied: Optional[str] = None
    cover_message: Optional[str] = None
    proposed_time_equity_percentage: Optional[int] = Field(None, ge=0, le=100)
    proposed_performance_equity_percentage: Optional[int] = Field(None, ge=0, le=100)
    proposed_performance_milestone: Optional[str] = None
    proposed_vesting_years: Optional[int] = Field(None, ge=0)
    proposed_cliff_years: Optional[int] = Field(None, ge=0)
