"""
Pydantic schemas for the day endpoints.
"""
from typing import List
from pydantic import BaseModel, Field


class ThemeProposal(BaseModel):
    theme: str = Field(..., min_length=1, max_length=255)


class AddDaysRequest(BaseModel):
    """Flat list of theme proposals, consumed three per new day."""
    themes: List[ThemeProposal] = Field(default_factory=list)


class TodayResponse(BaseModel):
    id: int
    day_date: str
    image_url: str


class MessageResponse(BaseModel):
    message: str
