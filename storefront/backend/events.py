# storefront/backend/events.py
import json
import queue
import threading
from typing import List

from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class EventBroker:
    """
    In-process fan-out for server-sent events.

    Each SSE connection owns one queue; publish() puts the event on all
    of them. Good for a single dev process only.
    """

    def __init__(self, max_queue: int = 100):
        self.max_queue = max_queue
        self._subscribers: List[queue.Queue] = []
        self._lock = threading.Lock()

    def subscribe(self) -> queue.Queue:
        q: queue.Queue = queue.Queue(maxsize=self.max_queue)
        with self._lock:
            self._subscribers.append(q)
        return q

    def unsubscribe(self, q: queue.Queue) -> None:
        with self._lock:
            if q in self._subscribers:
                self._subscribers.remove(q)

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def publish(self, event_type: str, **data) -> dict:
        event = {"type": event_type, **data}
        with self._lock:
            subscribers = list(self._subscribers)
        for q in subscribers:
            try:
                q.put_nowait(event)
            except queue.Full:
                logger.warning(f"Dropping {event_type} for a slow SSE subscriber")
        logger.info(f"Published {event_type} to {len(subscribers)} subscriber(s)")
        return event


def format_sse(event: dict) -> str:
    return f"data: {json.dumps(event, default=str)}\n\n"


broker = EventBroker()
