"""
campaign/schemas.py

Pydantic schemas for team campaigns.
"""

from datetime import date
from typing import Annotated

from pydantic import BaseModel, Field, StringConstraints

from app.question.schemas import OptionalTextStr


class CampaignCreate(BaseModel):
    name: Annotated[str, StringConstraints(strip_whitespace=True, max_length=200)]
    description: OptionalTextStr = None
    type: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=20)] = "email"
    recipient_count: int = Field(0, ge=0)


class CampaignRead(BaseModel):
    """Dashboard row of a campaign; rates are percentages."""

    id: int
    name: str
    type: str
    status: str
    recipients: int
    open_rate: float
    click_rate: float
    response_rate: float
    sent_date: date = Field(..., description="Send date, or creation date for unsent campaigns")
    template: str = "Custom"
