# storefront/services/api_client.py
from typing import Any, Callable, Iterable, List, Optional

import requests
from requests import RequestException

from storefront.domain.schemas import (
    BulkUploadResult,
    CartItem,
    CartOut,
    Category,
    CategoryIn,
    CategoryListOut,
    CategoryUpdate,
    Order,
    OrderListOut,
    OrderStatus,
    Product,
    ProductIn,
    ProductListOut,
    ProductUpdate,
    User,
    parse_response,
)
from storefront.exceptions import ApiError, NetworkError, ResponseSchemaError
from storefront.utils.logging import get_logger
from storefront.utils.settings import API_URL, HTTP_TIMEOUT

logger = get_logger(__name__)

TokenProvider = Callable[[], Optional[str]]


class ApiClient:
    """
    Thin wrapper over a requests session pointed at the REST backend.

    No retries: one call, one attempt. Transport failures become
    NetworkError, non-2xx answers become ApiError.
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        token_provider: TokenProvider | None = None,
        session: requests.Session | None = None,
    ):
        self.base_url = (base_url or API_URL).rstrip("/")
        self.timeout = timeout or HTTP_TIMEOUT
        self.token_provider = token_provider
        self.session = session or requests.Session()

    def url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def headers(self, json_body: bool = True) -> dict:
        headers = {"Content-Type": "application/json"} if json_body else {}
        token = self.token_provider() if self.token_provider else None
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def request(
        self,
        method: str,
        path: str,
        params: dict | None = None,
        json: Any = None,
        files: dict | None = None,
        raw: bool = False,
    ) -> Any:
        url = self.url(path)
        if params:
            params = {k: v for k, v in params.items() if v is not None and v != ""}

        logger.info(f"ApiClient {method} {url}")

        try:
            resp = self.session.request(
                method,
                url,
                params=params or None,
                json=json,
                files=files,
                headers=self.headers(json_body=files is None),
                timeout=self.timeout,
            )
        except RequestException as e:
            raise NetworkError(url, str(e)) from e

        if not resp.ok:
            raise ApiError(resp.status_code, url, f"API Error: {resp.status_code} - {resp.reason}")

        if raw:
            return resp
        if resp.status_code == 204 or not resp.content:
            return None

        try:
            return resp.json()
        except ValueError as e:
            raise ResponseSchemaError(path, [str(e)]) from e


class CartApi:
    def __init__(self, client: ApiClient):
        self.client = client

    def fetch_items(self) -> List[CartItem]:
        data = self.client.request("GET", "/api/cart")
        return parse_response(CartOut, data, "cart").items

    def add(self, product_id: int, quantity: int) -> CartItem:
        data = self.client.request(
            "POST",
            "/api/cart/items",
            json={"product_id": product_id, "quantity": quantity},
        )
        return parse_response(CartItem, data, "cart item")

    def update(self, item_id: int, quantity: int) -> CartItem:
        data = self.client.request("PUT", f"/api/cart/items/{item_id}", json={"quantity": quantity})
        return parse_response(CartItem, data, "cart item")

    def remove(self, item_id: int) -> None:
        self.client.request("DELETE", f"/api/cart/items/{item_id}")

    def clear(self) -> None:
        self.client.request("DELETE", "/api/cart")


class CategoriesApi:
    def __init__(self, client: ApiClient):
        self.client = client

    def list(self, include_inactive: bool = False) -> List[Category]:
        params = None if include_inactive else {"status": "active"}
        data = self.client.request("GET", "/api/categories", params=params)
        return parse_response(CategoryListOut, data, "categories").items

    def get(self, category_id: int) -> Category:
        data = self.client.request("GET", f"/api/categories/{category_id}")
        return parse_response(Category, data, "category")

    def create(self, payload: CategoryIn) -> Category:
        data = self.client.request("POST", "/api/categories", json=payload.model_dump(mode="json"))
        return parse_response(Category, data, "category")

    def update(self, category_id: int, payload: CategoryUpdate) -> Category:
        data = self.client.request(
            "PUT",
            f"/api/categories/{category_id}",
            json=payload.model_dump(mode="json", exclude_unset=True),
        )
        return parse_response(Category, data, "category")

    def delete(self, category_id: int) -> None:
        self.client.request("DELETE", f"/api/categories/{category_id}")


class ProductsApi:
    def __init__(self, client: ApiClient):
        self.client = client

    def list(self, **filters) -> ProductListOut:
        data = self.client.request("GET", "/api/products", params=filters)
        return parse_response(ProductListOut, data, "products")

    def get(self, product_id: int) -> Product:
        data = self.client.request("GET", f"/api/products/{product_id}")
        return parse_response(Product, data, "product")

    def by_ids(self, ids: Iterable[int]) -> List[Product]:
        ids = [str(i) for i in ids]
        if not ids:
            return []
        data = self.client.request("GET", "/api/products/by-ids", params={"ids": ",".join(ids)})
        return parse_response(ProductListOut, data, "products").items

    def create(self, payload: ProductIn) -> Product:
        data = self.client.request("POST", "/api/products", json=payload.model_dump(mode="json"))
        return parse_response(Product, data, "product")

    def update(self, product_id: int, payload: ProductUpdate) -> Product:
        data = self.client.request(
            "PUT",
            f"/api/products/{product_id}",
            json=payload.model_dump(mode="json", exclude_unset=True),
        )
        return parse_response(Product, data, "product")

    def delete(self, product_id: int) -> None:
        self.client.request("DELETE", f"/api/products/{product_id}")

    def export_csv(self) -> str:
        resp = self.client.request("GET", "/api/products/export", raw=True)
        return resp.text

    def bulk_upload(self, filename: str, content: bytes | str) -> BulkUploadResult:
        if isinstance(content, str):
            content = content.encode("utf-8")
        data = self.client.request(
            "POST",
            "/api/products/bulk-upload",
            files={"file": (filename, content, "text/csv")},
        )
        return parse_response(BulkUploadResult, data, "bulk upload")


class OrdersApi:
    def __init__(self, client: ApiClient):
        self.client = client

    def list(self) -> List[Order]:
        data = self.client.request("GET", "/api/orders")
        return parse_response(OrderListOut, data, "orders").items

    def get(self, order_id: int) -> Order:
        data = self.client.request("GET", f"/api/orders/{order_id}")
        return parse_response(Order, data, "order")

    def create(self) -> Order:
        data = self.client.request("POST", "/api/orders")
        return parse_response(Order, data, "order")

    def update_status(self, order_id: int, status: OrderStatus) -> Order:
        data = self.client.request(
            "PUT",
            f"/api/orders/{order_id}/status",
            json={"status": OrderStatus(status).value},
        )
        return parse_response(Order, data, "order")


class RecentlyViewedApi:
    def __init__(self, client: ApiClient):
        self.client = client

    def fetch(self) -> List[Product]:
        data = self.client.request("GET", "/api/recently-viewed")
        return parse_response(ProductListOut, data, "recently viewed").items

    def record(self, product_id: int) -> None:
        self.client.request("POST", "/api/recently-viewed", json={"product_id": product_id})


class AdminSyncApi:
    """Role synchronisation between the identity provider and the backend."""

    def __init__(self, client: ApiClient):
        self.client = client

    def update_user_role(self, user_id: str, role: str, source: str = "manual") -> User:
        data = self.client.request(
            "PUT",
            f"/api/admin-sync/users/{user_id}/role",
            json={"role": role, "source": source},
        )
        return parse_response(User, data, "user role")

    def sync_role(self, clerk_id: str, email: str | None, role: str = "customer") -> User:
        data = self.client.request(
            "POST",
            "/api/admin-sync/sync-role",
            json={"clerk_id": clerk_id, "email": email, "role": role, "source": "clerk"},
        )
        return parse_response(User, data, "user role")


class StorefrontApi:
    """One ApiClient shared by every resource client."""

    def __init__(self, client: ApiClient | None = None, token_provider: TokenProvider | None = None):
        self.client = client or ApiClient(token_provider=token_provider)
        self.cart = CartApi(self.client)
        self.categories = CategoriesApi(self.client)
        self.products = ProductsApi(self.client)
        self.orders = OrdersApi(self.client)
        self.recently_viewed = RecentlyViewedApi(self.client)
        self.admin_sync = AdminSyncApi(self.client)
