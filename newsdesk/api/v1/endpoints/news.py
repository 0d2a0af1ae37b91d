from fastapi import APIRouter, Depends, HTTPException, Response, status
import structlog

from ...dependencies import get_app_settings, get_history_cache, get_session_manager
from ....config import Settings
from ....exceptions import FeedNotFoundError, ValidationError
from ....news.models import ALL_CATEGORIES_KEY, Category, RegionCode, parse_category
from ....news.schemas.requests import (
    CategoryChangeRequest,
    OpenFeedRequest,
    PageChangeRequest,
    RegionChangeRequest,
)
from ....news.schemas.responses import (
    CategoriesListResponse,
    CategoryResponse,
    FeedStateResponse,
    HistoryEntryResponse,
    HistoryListResponse,
    RefreshResponse,
    RegionsListResponse,
)
from ....news.services.history_cache import HistoryCache
from ....news.services.session_manager import FeedSessionManager

logger = structlog.get_logger(__name__)

router = APIRouter()


def _get_feed_or_404(session_manager: FeedSessionManager, feed_id: str):
    try:
        return session_manager.get_feed(feed_id)
    except FeedNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.to_dict())


@router.get("/categories", response_model=CategoriesListResponse)
async def get_categories():
    """All selectable categories; omit the category for "All News"."""
    return CategoriesListResponse(
        categories=[CategoryResponse(id=category.value, label=category.label) for category in Category]
    )


@router.get("/regions", response_model=RegionsListResponse)
async def get_regions(settings: Settings = Depends(get_app_settings)):
    return RegionsListResponse(regions=list(RegionCode), default=settings.news_default_region)


@router.post("/feeds", response_model=FeedStateResponse, status_code=status.HTTP_201_CREATED)
async def open_feed(
    request: OpenFeedRequest,
    session_manager: FeedSessionManager = Depends(get_session_manager)
):
    """Mount a feed session: loads page 1 and starts the auto-refresh timer"""
    feed = await session_manager.open_feed(category=request.category, region=request.region)
    return FeedStateResponse.from_orchestrator(feed)


@router.get("/feeds/{feed_id}", response_model=FeedStateResponse)
async def get_feed(
    feed_id: str,
    session_manager: FeedSessionManager = Depends(get_session_manager)
):
    feed = _get_feed_or_404(session_manager, feed_id)
    return FeedStateResponse.from_orchestrator(feed)


@router.post("/feeds/{feed_id}/refresh", response_model=RefreshResponse)
async def refresh_feed(
    feed_id: str,
    session_manager: FeedSessionManager = Depends(get_session_manager)
):
    """Manual refresh; ``accepted`` is false when the cooldown has not elapsed yet"""
    feed = _get_feed_or_404(session_manager, feed_id)
    accepted = await feed.refresh_news()
    return RefreshResponse(accepted=accepted, feed=FeedStateResponse.from_orchestrator(feed))


@router.put("/feeds/{feed_id}/page", response_model=FeedStateResponse)
async def change_page(
    feed_id: str,
    request: PageChangeRequest,
    session_manager: FeedSessionManager = Depends(get_session_manager)
):
    feed = _get_feed_or_404(session_manager, feed_id)
    try:
        await feed.on_page_change(request.page)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.to_dict())
    return FeedStateResponse.from_orchestrator(feed)


@router.put("/feeds/{feed_id}/category", response_model=FeedStateResponse)
async def change_category(
    feed_id: str,
    request: CategoryChangeRequest,
    session_manager: FeedSessionManager = Depends(get_session_manager)
):
    feed = _get_feed_or_404(session_manager, feed_id)
    await feed.set_category(request.category)
    return FeedStateResponse.from_orchestrator(feed)


@router.put("/feeds/{feed_id}/region", response_model=FeedStateResponse)
async def change_region(
    feed_id: str,
    request: RegionChangeRequest,
    session_manager: FeedSessionManager = Depends(get_session_manager)
):
    feed = _get_feed_or_404(session_manager, feed_id)
    await feed.set_region(request.region)
    return FeedStateResponse.from_orchestrator(feed)


@router.delete("/feeds/{feed_id}", status_code=status.HTTP_204_NO_CONTENT)
async def close_feed(
    feed_id: str,
    session_manager: FeedSessionManager = Depends(get_session_manager)
):
    """Unmount a feed session and cancel its auto-refresh timer"""
    try:
        await session_manager.close_feed(feed_id)
    except FeedNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.to_dict())
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/history", response_model=HistoryListResponse)
async def get_history(history: HistoryCache = Depends(get_history_cache)):
    """Old News archive: latest first page per category, most recent first"""
    entries = [HistoryEntryResponse.from_entry(entry) for entry in history.all()]
    return HistoryListResponse(entries=entries, total=len(entries))


@router.get("/history/{category}", response_model=HistoryEntryResponse)
async def get_history_entry(
    category: str,
    history: HistoryCache = Depends(get_history_cache)
):
    try:
        parsed = parse_category(category)
    except ValueError:
        raise HTTPException(
            status_code=422,
            detail=ValidationError(
                f"Unknown category '{category}'",
                details={"allowed": [ALL_CATEGORIES_KEY] + [c.value for c in Category]}
            ).to_dict()
        )

    entry = history.get(parsed)
    if entry is None:
        raise HTTPException(status_code=404, detail="No archived news for this category")
    return HistoryEntryResponse.from_entry(entry)
