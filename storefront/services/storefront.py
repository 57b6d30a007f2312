# storefront/services/storefront.py
from storefront.services.api_client import ApiClient, StorefrontApi
from storefront.services.auth_service import AuthProvider, build_auth_provider
from storefront.services.cart_service import CartService
from storefront.services.category_service import CategoryService
from storefront.services.order_service import OrderService
from storefront.services.product_service import ProductService
from storefront.services.sse_listener import SSEListener
from storefront.services.storage import LocalStorage, build_storage
from storefront.utils.logging import get_logger
from storefront.utils.settings import SSE_PATH

logger = get_logger(__name__)


class Storefront:
    """
    Explicit handle on every client service.

    Views receive this object (or the single service they need) instead of
    reaching for global state.
    """

    def __init__(
        self,
        storage: LocalStorage,
        auth: AuthProvider,
        api: StorefrontApi,
        sse: SSEListener | None = None,
    ):
        self.storage = storage
        self.auth = auth
        self.api = api
        self.cart = CartService(api.cart, storage)
        self.categories = CategoryService(api.categories)
        self.products = ProductService(api.products, api.recently_viewed, storage)
        self.orders = OrderService(api.orders, self.cart, auth)
        self.sse = sse

        if self.sse is not None:
            self.sse.on_category_event(self.categories.handle_event)

    def start(self) -> None:
        self.cart.load()
        if self.sse is not None:
            self.sse.start()
        logger.info(f"Storefront started ({len(self.cart.items)} item(s) in cart)")

    def close(self) -> None:
        if self.sse is not None:
            self.sse.stop()


def build_storefront(
    base_url: str | None = None,
    storage: LocalStorage | None = None,
    with_sse: bool = True,
) -> Storefront:
    storage = storage or build_storage()
    auth = build_auth_provider(storage)
    api = StorefrontApi(ApiClient(base_url=base_url, token_provider=auth.get_token))
    sse = SSEListener(url=f"{api.client.base_url}{SSE_PATH}") if with_sse else None
    return Storefront(storage, auth, api, sse)
