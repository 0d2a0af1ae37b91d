from datetime import datetime, timezone
from typing import Dict, Any

import structlog
from fastapi import APIRouter, Depends

from ...dependencies import get_app_settings, get_session_manager
from .... import __version__
from ....config import Settings
from ....news.services.session_manager import FeedSessionManager

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.get("/health")
async def health_check(
    settings: Settings = Depends(get_app_settings),
    session_manager: FeedSessionManager = Depends(get_session_manager)
) -> Dict[str, Any]:
    return {
        "status": "healthy",
        "service": "Newsdesk API",
        "version": __version__,
        "environment": "development" if settings.debug else "production",
        "live_feeds": len(session_manager),
        "notice_subscribers": session_manager.broadcaster.subscriber_count(),
        "history": session_manager.history.get_stats(),
        "timestamp": datetime.now(tz=timezone.utc).isoformat(),
    }
