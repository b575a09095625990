"""
backend/app/core/schemas.py

Shared Response Envelopes

Pydantic models reused by several feature routers:
- PaginatedResponse: one page of the evaluation history with a has-next flag
- MessageResponse: plain confirmation returned by deletes and logout
"""

from typing import Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class PaginatedResponse(BaseModel, Generic[T]):
    """
    Generic schema for paginated list responses.
    """

    total_count: int = Field(..., description="Total number of items available")
    has_next_page: bool = Field(..., description="Indicates if there are more items available")
    items: list[T] = Field(..., description="List of items for the current page")


class MessageResponse(BaseModel):
    """
    Generic response schema for simple success or informational messages.
    """

    message: str = Field(..., description="Response message")
