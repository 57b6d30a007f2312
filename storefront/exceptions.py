"""
Exception hierarchy for the storefront client and its dev backend.
"""


class StorefrontError(Exception):
    """
    Base exception for all storefront errors.

    Attributes:
        message: Human-readable error message
        details: Optional dict with additional context (ids, urls, statuses)
    """

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.__class__.__name__}('{self.message}', {details_str})"
        return f"{self.__class__.__name__}('{self.message}')"


class ApiError(StorefrontError):
    """Raised when the backend answers with a non-2xx status."""

    def __init__(self, status_code: int, url: str, message: str | None = None):
        super().__init__(
            message or f"API Error: {status_code} for {url}",
            details={"status_code": status_code, "url": url},
        )
        self.status_code = status_code
        self.url = url


class NetworkError(StorefrontError):
    """Raised when the backend cannot be reached at all."""

    def __init__(self, url: str, reason: str):
        super().__init__(
            f"Network error for {url}: {reason}",
            details={"url": url},
        )
        self.url = url
        self.reason = reason


class ResponseSchemaError(StorefrontError):
    """Raised when a response body does not match the expected schema."""

    def __init__(self, resource: str, errors: list | None = None):
        super().__init__(
            f"Unexpected response shape for {resource}",
            details={"resource": resource, "errors": errors or []},
        )
        self.resource = resource
        self.errors = errors or []


class CategoryCycleError(StorefrontError):
    """Raised when an edit would make a category its own ancestor."""

    def __init__(self, category_id: int, parent_id: int):
        super().__init__(
            f"Category {category_id} cannot be placed under {parent_id}: parent chain would loop",
            details={"category_id": category_id, "parent_id": parent_id},
        )
        self.category_id = category_id
        self.parent_id = parent_id


class NotFoundError(StorefrontError):
    """Raised by the dev backend when a requested record does not exist."""

    def __init__(self, entity: str, entity_id):
        super().__init__(
            f"{entity} {entity_id} not found",
            details={"entity": entity, "id": entity_id},
        )
        self.entity = entity
        self.entity_id = entity_id


class ConflictError(StorefrontError):
    """Raised by the dev backend when a write clashes with existing data."""
    pass


class CsvFormatError(StorefrontError):
    """Raised when a CSV file is rejected as a whole (extension or header)."""
    pass


class AuthError(StorefrontError):
    """Raised on invalid credentials or when a signed-in user is required."""
    pass


class RetryLimitReached(StorefrontError):
    """Raised when the manual retry cap of an error boundary is exhausted."""

    def __init__(self, attempts: int):
        super().__init__(
            "Max retries reached",
            details={"attempts": attempts},
        )
        self.attempts = attempts


NETWORK_MESSAGE = "Unable to connect to the server. Please check your internet connection."

STATUS_MESSAGES = {
    404: "The requested resource was not found.",
    403: "You don't have permission to access this resource.",
    500: "Server error occurred. Please try again later.",
}

DEFAULT_MESSAGE = "Failed to load data. Please try again."


def user_message(error: BaseException) -> str:
    """Map an exception to the text shown in a toast or inline banner."""
    if isinstance(error, NetworkError):
        return NETWORK_MESSAGE
    if isinstance(error, ApiError):
        return STATUS_MESSAGES.get(error.status_code, DEFAULT_MESSAGE)
    return DEFAULT_MESSAGE
