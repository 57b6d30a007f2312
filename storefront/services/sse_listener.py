# storefront/services/sse_listener.py
"""
Server-sent events consumer.

The backend pushes one JSON object per event on ``/api/sse/events``.
Category events (``category_created``, ``category_updated``,
``category_deleted``) are what the admin screens listen for, to drop
their cached category list.
"""
import json
import threading
from typing import Callable, Dict, Iterable, Iterator, List, Optional

import requests
from pydantic import ValidationError
from requests import RequestException

from storefront.domain.schemas import CategoryEvent
from storefront.exceptions import ApiError, NetworkError
from storefront.services.category_service import CATEGORY_EVENTS
from storefront.utils.logging import get_logger
from storefront.utils.retry import sse_reconnect
from storefront.utils.settings import API_URL, SSE_PATH, SSE_RECONNECT_SECONDS

logger = get_logger(__name__)

Handler = Callable[[dict], None]


def parse_events(lines: Iterable) -> Iterator[dict]:
    """
    Turn raw stream lines into decoded ``data`` payloads.

    ``data:`` lines accumulate until a blank line closes the event.
    Comment lines (leading ``:``) and other fields are ignored; an event
    still open when the stream ends is dropped.
    """
    data: List[str] = []
    for line in lines:
        if isinstance(line, bytes):
            line = line.decode("utf-8")
        line = line.rstrip("\r")

        if not line:
            if data:
                raw = "\n".join(data)
                data = []
                try:
                    yield json.loads(raw)
                except ValueError as e:
                    logger.error(f"Error parsing SSE message {raw!r}: {e}")
            continue

        if line.startswith(":"):
            continue

        field, _, value = line.partition(":")
        if field == "data":
            data.append(value[1:] if value.startswith(" ") else value)


class SSEListener:
    def __init__(
        self,
        url: str | None = None,
        session: requests.Session | None = None,
        on_message: Optional[Handler] = None,
        on_error: Optional[Callable[[Exception], None]] = None,
        reconnect_delay: float = SSE_RECONNECT_SECONDS,
    ):
        self.url = url or f"{API_URL.rstrip('/')}{SSE_PATH}"
        self.session = session or requests.Session()
        self.on_message = on_message
        self.on_error = on_error
        self.reconnect_delay = reconnect_delay
        self.handlers: Dict[str, List[Handler]] = {}
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None
        self._response = None
        self.connected = False

    def subscribe(self, event_type: str, handler: Handler) -> None:
        self.handlers.setdefault(event_type, []).append(handler)

    def on_category_event(self, handler: Callable[[CategoryEvent], None]) -> None:
        def typed(payload: dict) -> None:
            handler(CategoryEvent.model_validate(payload))

        for event_type in CATEGORY_EVENTS:
            self.subscribe(event_type, typed)

    def dispatch(self, payload: dict) -> None:
        logger.info(f"SSE message received: {payload}")
        event_type = payload.get("type") if isinstance(payload, dict) else None

        for handler in self.handlers.get(event_type, []):
            try:
                handler(payload)
            except ValidationError as e:
                logger.error(f"Malformed {event_type} event: {e}")

        if self.on_message:
            self.on_message(payload)

    def _connect_once(self) -> None:
        if self._stop.is_set():
            return

        try:
            resp = self.session.get(
                self.url,
                stream=True,
                headers={"Accept": "text/event-stream"},
                timeout=(5, None),
            )
            if not resp.ok:
                raise ApiError(resp.status_code, self.url)

            self._response = resp
            self.connected = True
            logger.info(f"SSE connection opened: {self.url}")

            resp.encoding = resp.encoding or "utf-8"
            for payload in parse_events(resp.iter_lines(decode_unicode=True)):
                if self._stop.is_set():
                    return
                self.dispatch(payload)

        except RequestException as e:
            if self._stop.is_set():
                return
            self._failed(NetworkError(self.url, str(e)))
        except ApiError as e:
            self._failed(e)
        finally:
            self.connected = False

        if not self._stop.is_set():
            self._failed(NetworkError(self.url, "stream closed by server"))

    def _failed(self, error: Exception) -> None:
        logger.error(f"SSE connection error: {error}")
        if self.on_error:
            self.on_error(error)
        raise error

    def listen(self) -> None:
        """Block, reconnecting after every failure, until stop() is called."""
        sse_reconnect(self.reconnect_delay, self._stop)(self._connect_once)()

    def start(self) -> threading.Thread:
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="sse-listener", daemon=True)
        self._thread.start()
        return self._thread

    def _run(self) -> None:
        try:
            self.listen()
        except (NetworkError, ApiError) as e:
            logger.info(f"SSE listener stopped: {e}")

    def stop(self) -> None:
        self._stop.set()
        if self._response is not None:
            self._response.close()
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout=1)
