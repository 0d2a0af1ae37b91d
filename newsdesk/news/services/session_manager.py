"""
Feed session registry.

A feed session is one mounted view of the news feed. The manager creates the
orchestrators, hands each one the shared history cache and feed client, and
guarantees that no auto-refresh timer outlives its session or the process.
"""

from typing import Dict, Optional

import structlog

from ...core.notifications import NoticeBroadcaster
from ...exceptions import FeedNotFoundError
from ..models import Category, RegionCode
from .feed_client import RemoteFeedClient
from .feed_orchestrator import FeedOrchestrator
from .history_cache import HistoryCache

logger = structlog.get_logger(__name__)


class FeedSessionManager:

    def __init__(
        self,
        settings,
        client: RemoteFeedClient,
        history: HistoryCache,
        broadcaster: Optional[NoticeBroadcaster] = None,
    ):
        self.settings = settings
        self.client = client
        self.history = history
        self.broadcaster = broadcaster or NoticeBroadcaster()
        self._feeds: Dict[str, FeedOrchestrator] = {}

    async def open_feed(
        self,
        category: Optional[Category] = None,
        region: Optional[RegionCode] = None,
    ) -> FeedOrchestrator:
        feed = FeedOrchestrator.from_settings(
            self.settings,
            self.client,
            self.history,
            category=category,
            region=region,
            broadcaster=self.broadcaster,
        )
        self._feeds[feed.feed_id] = feed
        try:
            await feed.start()
        except Exception:
            self._feeds.pop(feed.feed_id, None)
            await feed.stop()
            logger.error("Feed session failed to open", feed_id=feed.feed_id, exc_info=True)
            raise
        logger.info("Feed session opened", feed_id=feed.feed_id, live_feeds=len(self._feeds))
        return feed

    def get_feed(self, feed_id: str) -> FeedOrchestrator:
        feed = self._feeds.get(feed_id)
        if feed is None:
            raise FeedNotFoundError(feed_id)
        return feed

    async def close_feed(self, feed_id: str) -> None:
        feed = self._feeds.pop(feed_id, None)
        if feed is None:
            raise FeedNotFoundError(feed_id)
        await feed.stop()
        await self.broadcaster.close_feed(feed_id)
        logger.info("Feed session closed", feed_id=feed_id, live_feeds=len(self._feeds))

    async def close_all(self) -> None:
        for feed_id in list(self._feeds):
            await self.close_feed(feed_id)

    def __len__(self) -> int:
        return len(self._feeds)
