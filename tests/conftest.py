import asyncio
from collections import deque
from datetime import datetime, timedelta, timezone
from typing import List, Optional

import pytest

from newsdesk.config import Settings
from newsdesk.exceptions import EmptyResultError
from newsdesk.news.models import Article, Category, FeedPage, RegionCode, category_key
from newsdesk.news.services.feed_client import RemoteFeedClient
from newsdesk.news.services.history_cache import HistoryCache
from newsdesk.news.services.rate_limiter import RefreshRateLimiter


class FakeClock:
    def __init__(self, start: Optional[datetime] = None):
        self.now = start or datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now = self.now + timedelta(seconds=seconds)


def make_articles(count: int, category: Optional[Category] = None, region: RegionCode = RegionCode.US,
                  prefix: str = "story") -> List[Article]:
    return [
        Article(
            id=f"{prefix}-{category_key(category)}-{i}",
            title=f"{prefix.title()} {i}",
            source="Wire",
            category=category,
            region=region,
            summary=f"Summary {i}",
        )
        for i in range(count)
    ]


class FakeFeedClient(RemoteFeedClient):
    """
    Scripted feed client.

    Queued items are consumed one per fetch: a list of articles, an exception
    to raise, or an asyncio.Future resolving to either. With nothing queued
    it returns a full page tagged with the requested page number.
    """

    def __init__(self, page_size: int = 12):
        self.page_size = page_size
        self.calls = []
        self._queue = deque()
        self.closed = False

    def queue(self, *items) -> None:
        self._queue.extend(items)

    def gate(self) -> asyncio.Future:
        future = asyncio.get_running_loop().create_future()
        self._queue.append(future)
        return future

    async def fetch(self, category, region, page, page_size) -> FeedPage:
        self.calls.append((category, region, page, page_size))

        if self._queue:
            item = self._queue.popleft()
        else:
            item = make_articles(page_size, category, region, prefix=f"page{page}")

        if isinstance(item, asyncio.Future):
            item = await item
        if isinstance(item, BaseException):
            raise item
        if not item:
            raise EmptyResultError()
        return FeedPage(category=category, region=region, page=page, articles=item)

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def test_settings():
    return Settings(
        _env_file=None,
        log_format="text",
        news_api_url="https://news.example.test/v2/top-headlines",
        news_api_key="test-key",
        news_auto_refresh_interval_seconds=300,
        news_refresh_cooldown_seconds=30,
    )


@pytest.fixture
def feed_client():
    return FakeFeedClient()


@pytest.fixture
def history(clock):
    return HistoryCache(clock=clock)


@pytest.fixture
def rate_limiter(clock):
    return RefreshRateLimiter(cooldown=timedelta(seconds=30), clock=clock)


@pytest.fixture
def sample_newsapi_payload():
    return {
        "status": "ok",
        "totalResults": 3,
        "articles": [
            {
                "source": {"id": "the-verge", "name": "The Verge"},
                "author": "Jane Doe",
                "title": "Chipmakers race to ship new accelerators",
                "description": "A look at  the\nnext generation of hardware.",
                "url": "https://example.test/chips",
                "urlToImage": "https://example.test/chips.jpg",
                "publishedAt": "2024-05-01T10:30:00Z",
                "content": "Full text...",
            },
            {
                "source": {"id": None, "name": "Reuters"},
                "title": "Markets open higher",
                "description": None,
                "url": "https://example.test/markets",
                "urlToImage": None,
                "publishedAt": "2024-05-01T09:00:00Z",
            },
            {
                "source": {"id": None, "name": "[Removed]"},
                "title": "[Removed]",
                "description": "[Removed]",
                "url": "https://removed.com",
                "publishedAt": "1970-01-01T00:00:00Z",
            },
        ],
    }


class ManualSleep:
    """Stands in for asyncio.sleep; each pending sleep ends only when released."""

    def __init__(self):
        self.delays = []
        self._releases = asyncio.Queue()

    async def __call__(self, delay):
        self.delays.append(delay)
        await self._releases.get()

    def release(self):
        self._releases.put_nowait(None)


async def settle(rounds: int = 20) -> None:
    """Let every ready task run until it blocks again."""
    for _ in range(rounds):
        await asyncio.sleep(0)
