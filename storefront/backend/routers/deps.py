# storefront/backend/routers/deps.py
from fastapi import Depends, Header, Request

from storefront.utils.logging import get_logger

logger = get_logger(__name__)

GUEST_OWNER = "guest"


def get_owner(authorization: str | None = Header(None)) -> str:
    """Carts, orders and views are keyed by the bearer token, or ``guest``."""
    if authorization and authorization.lower().startswith("bearer "):
        token = authorization[7:].strip()
        if token:
            return token
    return GUEST_OWNER


def log_admin_call(request: Request, owner: str = Depends(get_owner)) -> str:
    """The dev backend has no roles of its own, admin endpoints only leave a trace."""
    caller = "guest" if owner == GUEST_OWNER else "bearer token"
    logger.warning(
        f"Admin endpoint {request.method} {request.url.path} called by {caller} without a role check"
    )
    return owner
