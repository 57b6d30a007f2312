# storefront/backend/routers/sse.py
import queue

from fastapi import APIRouter
from fastapi.responses import StreamingResponse

from storefront.backend.events import EventBroker, broker, format_sse
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["sse"])

KEEPALIVE_SECONDS = 15.0


def event_stream(q: queue.Queue, source: EventBroker = broker, keepalive: float = KEEPALIVE_SECONDS):
    try:
        yield format_sse({"type": "connected"})
        while True:
            try:
                event = q.get(timeout=keepalive)
            except queue.Empty:
                yield ": keep-alive\n\n"
                continue
            yield format_sse(event)
    finally:
        source.unsubscribe(q)
        logger.info("SSE client disconnected")


@router.get("/api/sse/events")
def sse():
    q = broker.subscribe()
    logger.info(f"SSE client connected ({broker.subscriber_count} open)")
    return StreamingResponse(
        event_stream(q),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )
