from fastapi import Depends, Request

from ..config import Settings, get_settings
from ..news.services.history_cache import HistoryCache
from ..news.services.session_manager import FeedSessionManager


def get_app_settings() -> Settings:
    return get_settings()


def get_session_manager(request: Request) -> FeedSessionManager:
    return request.app.state.session_manager


def get_history_cache(
    session_manager: FeedSessionManager = Depends(get_session_manager)
) -> HistoryCache:
    return session_manager.history
