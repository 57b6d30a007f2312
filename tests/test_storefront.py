"""
Unit Tests: Storefront wiring
"""

from unittest.mock import MagicMock

from storefront.services.api_client import ApiClient, StorefrontApi
from storefront.services.auth_service import DemoAuthProvider
from storefront.services.sse_listener import SSEListener
from storefront.services.storefront import Storefront, build_storefront


def test_category_events_reach_the_category_cache(storage):
    api = StorefrontApi(ApiClient(base_url="http://api.test", session=MagicMock()))
    api.categories = MagicMock()
    api.categories.list.return_value = []
    sse = SSEListener(url="http://api.test/api/sse/events", session=MagicMock())

    shop = Storefront(storage, DemoAuthProvider(storage), api, sse)
    shop.categories.categories()

    sse.dispatch({"type": "category_updated", "category_id": 1})
    shop.categories.categories()

    assert api.categories.list.call_count == 2


def test_build_storefront_uses_the_auth_token(storage):
    shop = build_storefront(base_url="http://api.test", storage=storage, with_sse=False)
    shop.auth.sign_in("demo@chamundanursery.com", "demo123")

    assert shop.sse is None
    assert shop.api.client.headers()["Authorization"] == "Bearer demo:demo_user_1"
