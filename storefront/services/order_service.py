# storefront/services/order_service.py
from typing import List

from storefront.domain.schemas import Order, OrderStatus
from storefront.exceptions import AuthError
from storefront.services.api_client import OrdersApi
from storefront.services.auth_service import AuthProvider
from storefront.services.cart_service import CartService
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class OrderService:
    """
    Checkout and order history.

    Checkout turns the server cart into an order, so it refuses to run
    while the local cart has diverged from the server.
    """

    def __init__(self, orders_api: OrdersApi, cart: CartService, auth: AuthProvider):
        self.api = orders_api
        self.cart = cart
        self.auth = auth

    def checkout(self) -> Order:
        result = self.cart.load()
        if not result.synced:
            raise RuntimeError("Cart is not saved on the server, checkout is unavailable")
        if not result.items:
            raise ValueError("Cannot check out an empty cart")

        order = self.api.create()
        logger.info(f"Order {order.id} created, total {order.total}")

        # the backend empties the cart as part of the order
        self.cart.load()
        return order

    def my_orders(self) -> List[Order]:
        return self.api.list()

    def get(self, order_id: int) -> Order:
        return self.api.get(order_id)

    def update_status(self, order_id: int, status: OrderStatus) -> Order:
        if not self.auth.is_admin:
            raise AuthError("Only admins can change order status")
        return self.api.update_status(order_id, status)
