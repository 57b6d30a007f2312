# storefront/utils/retry.py
import threading

from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    stop_never,
    stop_when_event_set,
    wait_exponential,
    wait_fixed,
)
import redis

from storefront.exceptions import ApiError, NetworkError
from storefront.utils.settings import SSE_RECONNECT_SECONDS


def redis_retry():
    return retry(
        reraise=True,
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.2, min=0.2, max=2),
        retry=retry_if_exception_type(redis.RedisError),
    )


def sse_reconnect(delay: float | None = None, stop_event: threading.Event | None = None):
    # no attempt limit, only the listener's stop event ends the loop
    return retry(
        reraise=True,
        stop=stop_when_event_set(stop_event) if stop_event is not None else stop_never,
        wait=wait_fixed(SSE_RECONNECT_SECONDS if delay is None else delay),
        retry=retry_if_exception_type((NetworkError, ApiError)),
    )
