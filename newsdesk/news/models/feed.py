from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .article import Article, Category, RegionCode


class FeedPage(BaseModel):
    """Result of one fetch, bound to the (category, region, page) it was requested for."""
    model_config = ConfigDict(frozen=True)

    category: Optional[Category] = None
    region: RegionCode
    page: int = Field(ge=1)
    articles: List[Article] = []


class HistoryEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: str
    page: FeedPage
    inserted_at: datetime


class FeedStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    FAILED = "failed"


class FetchTrigger(str, Enum):
    MOUNT = "mount"
    PAGE_CHANGE = "page_change"
    MANUAL_REFRESH = "manual_refresh"
    AUTO_REFRESH = "auto_refresh"
    CONTEXT_CHANGE = "context_change"
