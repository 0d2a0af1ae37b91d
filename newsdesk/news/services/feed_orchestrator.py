"""
Feed Orchestrator
Owns the pagination state of one feed session and routes every fetch trigger
(mount, page change, manual refresh, auto-refresh tick, context change)
through a single sequence-numbered fetch path.

Results are gated on completion: a result whose sequence number is lower than
the last applied one, or that was issued for a previous category/region, is
discarded instead of overwriting newer state.
"""

import asyncio
import uuid
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Callable, Awaitable, List, Optional, Set

import structlog

from ...core.notifications import Notice, NoticeBroadcaster, NoticeBuffer, NoticeLevel
from ...exceptions import FeedError, InvalidPageError
from ..models import (
    DEFAULT_REGION,
    Article,
    Category,
    FeedPage,
    FeedStatus,
    FetchTrigger,
    RegionCode,
    category_key,
)
from .feed_client import RemoteFeedClient
from .history_cache import HistoryCache
from .rate_limiter import RefreshRateLimiter
from .scheduler import AutoRefreshScheduler

logger = structlog.get_logger(__name__)

RATE_LIMITED_MESSAGE = "Please wait before refreshing again"
FETCH_FAILED_MESSAGE = "Failed to refresh news"
REFRESH_SUCCEEDED_MESSAGE = "News refreshed successfully"


def utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


class FetchOutcome(str, Enum):
    APPLIED = "applied"
    FAILED = "failed"
    STALE = "stale"


class FeedOrchestrator:
    """
    One live feed: current category/region, page, articles, loading and error.

    Typical lifecycle::

        feed = FeedOrchestrator(client, history)
        await feed.start()          # page-1 fetch + auto-refresh timer
        await feed.on_page_change(2)
        await feed.refresh_news()   # subject to the cooldown
        await feed.stop()           # timer cancelled
    """

    def __init__(
        self,
        client: RemoteFeedClient,
        history: HistoryCache,
        category: Optional[Category] = None,
        region: RegionCode = DEFAULT_REGION,
        page_size: int = 12,
        total_pages: int = 5,
        rate_limiter: Optional[RefreshRateLimiter] = None,
        refresh_interval: float = 300,
        max_backoff: Optional[float] = 1800,
        broadcaster: Optional[NoticeBroadcaster] = None,
        notice_buffer_size: int = 20,
        feed_id: Optional[str] = None,
        clock: Callable[[], datetime] = utcnow,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        if page_size < 1 or total_pages < 1:
            raise ValueError("page_size and total_pages must be positive")

        self.feed_id = feed_id or uuid.uuid4().hex
        self.client = client
        self.history = history
        self.page_size = page_size
        self.total_pages = total_pages
        self.rate_limiter = rate_limiter or RefreshRateLimiter(clock=clock)
        self.broadcaster = broadcaster
        self._clock = clock

        self.category = category
        self.region = region
        self.current_page = 1
        self.last_refresh: Optional[datetime] = None

        self._articles: List[Article] = []
        self._status = FeedStatus.IDLE
        self._error: Optional[str] = None
        self._error_code: Optional[str] = None

        self._issued_seq = 0
        self._applied_seq = 0
        self._context_epoch = 0
        self._in_flight: Set[int] = set()
        self._started = False

        self.notices = NoticeBuffer(maxlen=notice_buffer_size)
        self.scheduler = AutoRefreshScheduler(
            self._auto_refresh,
            interval=refresh_interval,
            max_backoff=max_backoff,
            sleep=sleep,
            name=f"auto-refresh:{self.feed_id}",
        )

        self.logger = logger.bind(feed_id=self.feed_id)

    @classmethod
    def from_settings(
        cls,
        settings,
        client: RemoteFeedClient,
        history: HistoryCache,
        category: Optional[Category] = None,
        region: Optional[RegionCode] = None,
        broadcaster: Optional[NoticeBroadcaster] = None,
        feed_id: Optional[str] = None,
    ) -> "FeedOrchestrator":
        return cls(
            client,
            history,
            category=category,
            region=region or settings.news_default_region,
            page_size=settings.news_page_size,
            total_pages=settings.news_total_pages,
            rate_limiter=RefreshRateLimiter(cooldown=timedelta(seconds=settings.news_refresh_cooldown_seconds)),
            refresh_interval=settings.news_auto_refresh_interval_seconds,
            max_backoff=settings.news_auto_refresh_max_backoff_seconds,
            broadcaster=broadcaster,
            notice_buffer_size=settings.news_notice_buffer_size,
            feed_id=feed_id,
        )

    # ------------------------------------------------------------------
    # Public state
    # ------------------------------------------------------------------

    @property
    def articles(self) -> List[Article]:
        return list(self._articles)

    @property
    def loading(self) -> bool:
        return bool(self._in_flight)

    @property
    def error(self) -> Optional[str]:
        return self._error

    @property
    def error_code(self) -> Optional[str]:
        return self._error_code

    @property
    def status(self) -> FeedStatus:
        if self.loading:
            return FeedStatus.LOADING
        return self._status

    @property
    def is_running(self) -> bool:
        return self._started

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> FetchOutcome:
        """Mount: start the auto-refresh timer and load page 1."""
        if self._started:
            return await self._fetch(1, FetchTrigger.MOUNT)
        self._started = True
        self.scheduler.start()
        self.logger.info("Feed mounted", category=category_key(self.category), region=self.region.value)
        return await self._fetch(1, FetchTrigger.MOUNT)

    async def stop(self) -> None:
        """Unmount: cancel the auto-refresh timer. In-flight fetches are left to finish."""
        if not self._started:
            return
        self._started = False
        await self.scheduler.stop()
        self.logger.info("Feed unmounted")

    # ------------------------------------------------------------------
    # Triggers
    # ------------------------------------------------------------------

    async def refresh_news(self) -> bool:
        """
        Manual refresh of page 1.

        Returns:
            False when the cooldown denied the refresh (no request issued), True otherwise
        """
        if not self.rate_limiter.try_consume(self.last_refresh):
            await self._notify(NoticeLevel.WARNING, RATE_LIMITED_MESSAGE)
            return False

        self.current_page = 1
        outcome = await self._fetch(1, FetchTrigger.MANUAL_REFRESH)
        if outcome is FetchOutcome.APPLIED:
            await self._notify(NoticeLevel.SUCCESS, REFRESH_SUCCEEDED_MESSAGE)
        return True

    async def on_page_change(self, page: int) -> FetchOutcome:
        if page < 1 or page > self.total_pages:
            raise InvalidPageError(page, self.total_pages)
        return await self._fetch(page, FetchTrigger.PAGE_CHANGE)

    async def set_category(self, category: Optional[Category]) -> FetchOutcome:
        """Switch category; always resets to page 1 and fetches it."""
        self.category = category
        return await self._change_context()

    async def set_region(self, region: RegionCode) -> FetchOutcome:
        self.region = region
        return await self._change_context()

    async def _change_context(self) -> FetchOutcome:
        self._context_epoch += 1
        self.current_page = 1
        if self._started:
            await self.scheduler.restart()
        return await self._fetch(1, FetchTrigger.CONTEXT_CHANGE)

    async def _auto_refresh(self) -> bool:
        outcome = await self._fetch(1, FetchTrigger.AUTO_REFRESH)
        return outcome is not FetchOutcome.FAILED

    # ------------------------------------------------------------------
    # Fetch path
    # ------------------------------------------------------------------

    async def _fetch(self, page: int, trigger: FetchTrigger) -> FetchOutcome:
        self._issued_seq += 1
        seq = self._issued_seq
        epoch = self._context_epoch
        category, region = self.category, self.region
        log = self.logger.bind(
            sequence=seq,
            trigger=trigger.value,
            category=category_key(category),
            region=region.value,
            page=page,
        )

        self._in_flight.add(seq)
        self._error = None
        self._error_code = None
        log.debug("Fetch issued")

        failure: Optional[FeedError] = None
        try:
            feed_page = await self.client.fetch(category, region, page, self.page_size)
        except FeedError as e:
            failure = e
        finally:
            self._in_flight.discard(seq)

        if self._is_stale(seq, epoch):
            log.debug(
                "Discarded stale result",
                applied_sequence=self._applied_seq,
                error=failure.message if failure else None
            )
            return FetchOutcome.STALE
        if failure is not None:
            return await self._apply_failure(seq, failure, log)
        return self._apply_success(seq, feed_page, log)

    def _is_stale(self, seq: int, epoch: int) -> bool:
        return seq < self._applied_seq or epoch != self._context_epoch

    def _apply_success(self, seq: int, feed_page: FeedPage, log) -> FetchOutcome:
        self._applied_seq = seq
        self._articles = list(feed_page.articles[:self.page_size])
        self.current_page = feed_page.page
        self._status = FeedStatus.LOADED
        self._error = None
        self._error_code = None
        self.last_refresh = self._clock()

        if feed_page.page == 1:
            self._archive(feed_page, log)

        log.info("Feed loaded", articles=len(self._articles))
        return FetchOutcome.APPLIED

    async def _apply_failure(self, seq: int, error: FeedError, log) -> FetchOutcome:
        self._applied_seq = seq
        self._status = FeedStatus.FAILED
        self._error = error.message
        self._error_code = error.error_code
        log.warning("Feed fetch failed", error_code=error.error_code, error=error.message)
        await self._notify(NoticeLevel.ERROR, FETCH_FAILED_MESSAGE)
        return FetchOutcome.FAILED

    def _archive(self, feed_page: FeedPage, log) -> None:
        # Best-effort: archiving must never fail the fetch that produced the page
        try:
            self.history.add(feed_page.category, feed_page)
        except Exception as e:
            log.warning("History cache write failed", error=str(e))

    async def _notify(self, level: NoticeLevel, message: str) -> None:
        notice = Notice(level=level, message=message, feed_id=self.feed_id)
        self.notices.append(notice)
        if self.broadcaster is not None:
            await self.broadcaster.publish(notice)
