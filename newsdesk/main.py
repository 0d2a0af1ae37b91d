from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .api.v1 import api_router
from .config import Settings, get_settings
from .core.logging_config import configure_logging
from .core.notifications import NoticeBroadcaster
from .exceptions import NewsdeskError
from .news.services.feed_client import NewsApiFeedClient, RemoteFeedClient
from .news.services.history_cache import HistoryCache
from .news.services.session_manager import FeedSessionManager

logger = structlog.get_logger(__name__)


def build_session_manager(
    settings: Settings,
    client: Optional[RemoteFeedClient] = None,
    history: Optional[HistoryCache] = None,
) -> FeedSessionManager:
    """Wire the process-wide services: one history cache and one feed client for all sessions."""
    return FeedSessionManager(
        settings,
        client or NewsApiFeedClient.from_settings(settings),
        history or HistoryCache.from_settings(settings),
        NoticeBroadcaster(),
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    settings = app.state.settings
    if getattr(app.state, "session_manager", None) is None:
        app.state.session_manager = build_session_manager(settings)
    logger.info("Starting Newsdesk API", version=__version__)

    yield

    # Shutdown
    session_manager: FeedSessionManager = app.state.session_manager
    await session_manager.close_all()
    await session_manager.client.aclose()
    logger.info("Shutting down Newsdesk API")


def create_application(
    settings: Optional[Settings] = None,
    session_manager: Optional[FeedSessionManager] = None,
) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title="Newsdesk",
        description="Paginated category and region news feeds with background refresh",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/api/v1/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.session_manager = session_manager

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(NewsdeskError)
    async def newsdesk_exception_handler(request: Request, exc: NewsdeskError):
        logger.warning("Request failed", path=request.url.path, error_code=exc.error_code, error=exc.message)
        return JSONResponse(status_code=400, content=exc.to_dict())

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(
            "Unhandled exception occurred",
            path=request.url.path,
            method=request.method,
            error=str(exc),
            exc_info=exc,
        )
        return JSONResponse(
            status_code=500,
            content={
                "error": "Internal server error",
                "message": "An unexpected error occurred. Please try again later.",
            }
        )

    app.include_router(api_router, prefix="/api/v1")

    return app


app = create_application()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "newsdesk.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
        log_level="info",
        access_log=False,
    )
