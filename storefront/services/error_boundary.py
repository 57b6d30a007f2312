# storefront/services/error_boundary.py
from typing import Any, Callable, Optional

from pydantic import BaseModel, ConfigDict

from storefront.exceptions import (
    NetworkError,
    RetryLimitReached,
    StorefrontError,
    user_message,
)
from storefront.utils.logging import get_logger
from storefront.utils.settings import QUERY_MAX_RETRIES

logger = get_logger(__name__)


class BoundaryState(BaseModel):
    data: Any = None
    error: Optional[StorefrontError] = None
    message: Optional[str] = None
    is_network_error: bool = False
    retry_count: int = 0
    max_retries: int = QUERY_MAX_RETRIES

    model_config = ConfigDict(arbitrary_types_allowed=True)

    @property
    def failed(self) -> bool:
        return self.error is not None

    @property
    def can_retry(self) -> bool:
        return self.failed and self.retry_count < self.max_retries


class QueryErrorBoundary:
    """
    Fallback around a data fetch.

    A failing fetch is turned into a state with the user-facing message
    instead of an exception. The user may try again by hand, at most
    ``max_retries`` times; there is no automatic retry.
    """

    def __init__(self, max_retries: int = QUERY_MAX_RETRIES):
        self.max_retries = max_retries
        self.retry_count = 0
        self.state = BoundaryState()

    def run(self, fetch: Callable[[], Any]) -> BoundaryState:
        try:
            self.state = BoundaryState(
                data=fetch(), retry_count=self.retry_count, max_retries=self.max_retries
            )
        except StorefrontError as e:
            logger.error(f"Query failed (attempt {self.retry_count + 1}): {e}")
            self.state = BoundaryState(
                error=e,
                message=user_message(e),
                is_network_error=isinstance(e, NetworkError),
                retry_count=self.retry_count,
                max_retries=self.max_retries,
            )
        return self.state

    def retry(self, fetch: Callable[[], Any]) -> BoundaryState:
        if self.retry_count >= self.max_retries:
            raise RetryLimitReached(self.retry_count)
        self.retry_count += 1
        return self.run(fetch)

    def reset(self) -> None:
        self.retry_count = 0
        self.state = BoundaryState()
