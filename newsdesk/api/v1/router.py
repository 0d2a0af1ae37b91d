from fastapi import APIRouter

from .endpoints import health, news, websocket

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(news.router, prefix="/news", tags=["news"])

# Notice stream for feed sessions - Mounts at /news prefix (e.g. /news/feeds/{id}/ws)
api_router.include_router(websocket.router, prefix="/news", tags=["news-notices"])
