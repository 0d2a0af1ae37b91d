"""News API response schemas"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from ...core.notifications import Notice
from ..models import Article, Category, FeedPage, FeedStatus, HistoryEntry, RegionCode
from ..services.feed_orchestrator import FeedOrchestrator


class FeedStateResponse(BaseModel):
    """Everything a view needs to render one feed session"""
    feed_id: str
    category: Optional[Category] = None
    region: RegionCode
    status: FeedStatus
    loading: bool
    error: Optional[str] = None
    error_code: Optional[str] = None
    current_page: int
    total_pages: int
    page_size: int
    last_refresh: Optional[datetime] = None
    articles: List[Article] = []
    notices: List[Notice] = []

    @classmethod
    def from_orchestrator(cls, feed: FeedOrchestrator) -> "FeedStateResponse":
        return cls(
            feed_id=feed.feed_id,
            category=feed.category,
            region=feed.region,
            status=feed.status,
            loading=feed.loading,
            error=feed.error,
            error_code=feed.error_code,
            current_page=feed.current_page,
            total_pages=feed.total_pages,
            page_size=feed.page_size,
            last_refresh=feed.last_refresh,
            articles=feed.articles,
            notices=feed.notices.recent(),
        )


class RefreshResponse(BaseModel):
    accepted: bool
    feed: FeedStateResponse


class HistoryEntryResponse(BaseModel):
    category: str
    region: RegionCode
    inserted_at: datetime
    article_count: int
    articles: List[Article] = []

    @classmethod
    def from_entry(cls, entry: HistoryEntry) -> "HistoryEntryResponse":
        page: FeedPage = entry.page
        return cls(
            category=entry.key,
            region=page.region,
            inserted_at=entry.inserted_at,
            article_count=len(page.articles),
            articles=page.articles,
        )


class HistoryListResponse(BaseModel):
    entries: List[HistoryEntryResponse]
    total: int


class CategoryResponse(BaseModel):
    id: str
    label: str


class CategoriesListResponse(BaseModel):
    categories: List[CategoryResponse]


class RegionsListResponse(BaseModel):
    regions: List[RegionCode]
    default: RegionCode
