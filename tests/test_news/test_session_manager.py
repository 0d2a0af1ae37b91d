import pytest

from newsdesk.exceptions import FeedNotFoundError, NetworkError
from newsdesk.news.models import Category, FeedStatus, RegionCode
from newsdesk.news.services.feed_orchestrator import FeedOrchestrator
from newsdesk.news.services.session_manager import FeedSessionManager


@pytest.fixture
def session_manager(test_settings, feed_client, history):
    return FeedSessionManager(test_settings, feed_client, history)


@pytest.fixture
def created_feeds(monkeypatch):
    created = []
    build = FeedOrchestrator.from_settings

    def capture(*args, **kwargs):
        feed = build(*args, **kwargs)
        created.append(feed)
        return feed

    monkeypatch.setattr(FeedOrchestrator, "from_settings", capture)
    return created


class TestFeedSessionManager:

    @pytest.mark.asyncio
    async def test_open_feed_registers_running_session(self, session_manager):
        feed = await session_manager.open_feed(Category.SCIENCE, RegionCode.GB)

        assert len(session_manager) == 1
        assert session_manager.get_feed(feed.feed_id) is feed
        assert feed.status is FeedStatus.LOADED
        assert feed.scheduler.is_running
        await session_manager.close_all()

    @pytest.mark.asyncio
    async def test_open_feed_uses_default_region(self, session_manager):
        feed = await session_manager.open_feed()

        assert feed.region is RegionCode.US
        await session_manager.close_all()

    @pytest.mark.asyncio
    async def test_failed_first_fetch_still_opens_session(self, session_manager, feed_client):
        feed_client.queue(NetworkError("Network error: connection refused"))

        feed = await session_manager.open_feed()

        assert len(session_manager) == 1
        assert feed.status is FeedStatus.FAILED
        await session_manager.close_all()

    @pytest.mark.asyncio
    async def test_crashing_start_leaves_no_session_or_timer(self, session_manager, feed_client, created_feeds):
        feed_client.queue(RuntimeError("client exploded"))

        with pytest.raises(RuntimeError):
            await session_manager.open_feed()

        assert len(session_manager) == 0
        assert len(created_feeds) == 1
        assert not created_feeds[0].scheduler.is_running
        assert not created_feeds[0].is_running

    @pytest.mark.asyncio
    async def test_close_feed_stops_timer(self, session_manager):
        feed = await session_manager.open_feed()

        await session_manager.close_feed(feed.feed_id)

        assert len(session_manager) == 0
        assert not feed.scheduler.is_running
        with pytest.raises(FeedNotFoundError):
            session_manager.get_feed(feed.feed_id)
        with pytest.raises(FeedNotFoundError):
            await session_manager.close_feed(feed.feed_id)
