"""
News feed services
Fetching, archiving, refresh timing and per-session orchestration
"""

from .article_mapper import ArticleMapper
from .feed_client import NewsApiFeedClient, RemoteFeedClient
from .feed_orchestrator import FeedOrchestrator, FetchOutcome
from .history_cache import HistoryCache
from .rate_limiter import RefreshRateLimiter
from .scheduler import AutoRefreshScheduler
from .session_manager import FeedSessionManager

__all__ = [
    'ArticleMapper',
    'AutoRefreshScheduler',
    'FeedOrchestrator',
    'FeedSessionManager',
    'FetchOutcome',
    'HistoryCache',
    'NewsApiFeedClient',
    'RefreshRateLimiter',
    'RemoteFeedClient',
]
