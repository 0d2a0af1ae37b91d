import structlog
from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from ....exceptions import FeedNotFoundError
from ....news.services.session_manager import FeedSessionManager

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.websocket("/feeds/{feed_id}/ws")
async def feed_notices_endpoint(websocket: WebSocket, feed_id: str):
    await websocket.accept()

    session_manager: FeedSessionManager = websocket.app.state.session_manager
    try:
        feed = session_manager.get_feed(feed_id)
    except FeedNotFoundError as e:
        await websocket.send_json({"type": "error", **e.to_dict()})
        await websocket.close()
        return

    broadcaster = session_manager.broadcaster
    await broadcaster.subscribe(feed_id, websocket)
    logger.info("Notice subscriber connected", feed_id=feed_id)

    try:
        await websocket.send_json({
            "type": "connection_established",
            "feed_id": feed_id,
            "recent_notices": [notice.model_dump(mode="json") for notice in feed.notices.recent()],
        })

        while True:
            message = await websocket.receive_text()
            if message == "ping":
                await websocket.send_json({"type": "pong"})

    except WebSocketDisconnect:
        logger.info("Notice subscriber disconnected", feed_id=feed_id)
    finally:
        await broadcaster.unsubscribe(feed_id, websocket)
