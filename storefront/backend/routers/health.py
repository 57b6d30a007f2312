from fastapi import APIRouter

from storefront.backend.events import broker

router = APIRouter(tags=["health"])


@router.get("/health")
def health():
    return {"status": "ok", "sse_subscribers": broker.subscriber_count}
