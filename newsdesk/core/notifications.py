from collections import deque
from datetime import datetime, timezone
from enum import Enum
from typing import Deque, Dict, List, Optional

import structlog
from fastapi import WebSocket
from pydantic import BaseModel, Field

logger = structlog.get_logger(__name__)


class NoticeLevel(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class Notice(BaseModel):
    """Advisory, user-facing message. Never blocks the operation that raised it."""
    level: NoticeLevel
    message: str
    feed_id: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(tz=timezone.utc))


class NoticeBuffer:
    """Bounded list of the most recent notices of one feed session."""

    def __init__(self, maxlen: int = 20):
        self._notices: Deque[Notice] = deque(maxlen=maxlen)

    def append(self, notice: Notice) -> None:
        self._notices.append(notice)

    def recent(self) -> List[Notice]:
        return list(self._notices)

    def __len__(self) -> int:
        return len(self._notices)


class NoticeBroadcaster:
    """Pushes feed notices to the WebSocket subscribers of that feed."""

    def __init__(self):
        self._subscribers: Dict[str, List[WebSocket]] = {}

    async def subscribe(self, feed_id: str, websocket: WebSocket) -> None:
        self._subscribers.setdefault(feed_id, []).append(websocket)

    async def unsubscribe(self, feed_id: str, websocket: WebSocket) -> None:
        connections = self._subscribers.get(feed_id)
        if not connections:
            return
        if websocket in connections:
            connections.remove(websocket)
        if not connections:
            del self._subscribers[feed_id]

    async def publish(self, notice: Notice) -> None:
        if not notice.feed_id or notice.feed_id not in self._subscribers:
            return

        message = {"type": "notice", **notice.model_dump(mode="json")}
        dead_connections = []
        for websocket in list(self._subscribers[notice.feed_id]):
            try:
                await websocket.send_json(message)
            except Exception as e:
                logger.info("Dropping dead notice subscriber", feed_id=notice.feed_id, error=str(e))
                dead_connections.append(websocket)

        for dead_ws in dead_connections:
            await self.unsubscribe(notice.feed_id, dead_ws)

    async def close_feed(self, feed_id: str) -> None:
        for websocket in self._subscribers.pop(feed_id, []):
            try:
                await websocket.close()
            except Exception as e:
                logger.debug("Notice subscriber already closed", feed_id=feed_id, error=str(e))

    def subscriber_count(self, feed_id: Optional[str] = None) -> int:
        if feed_id is not None:
            return len(self._subscribers.get(feed_id, []))
        return sum(len(connections) for connections in self._subscribers.values())
