"""News API request schemas"""

from typing import Optional

from pydantic import BaseModel, Field

from ..models import Category, RegionCode


class OpenFeedRequest(BaseModel):
    """Mount a feed session; no category means "All News"."""
    category: Optional[Category] = None
    region: Optional[RegionCode] = Field(
        default=None,
        description="Reader's preferred region; the configured default is used when absent"
    )


class PageChangeRequest(BaseModel):
    page: int = Field(..., ge=1, description="Page to navigate to")


class CategoryChangeRequest(BaseModel):
    category: Optional[Category] = None


class RegionChangeRequest(BaseModel):
    region: RegionCode
