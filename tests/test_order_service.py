"""
Unit Tests: client-side OrderService
"""

import pytest

from storefront.domain.schemas import OrderStatus
from storefront.exceptions import AuthError, NetworkError
from storefront.services.auth_service import DemoAuthProvider
from storefront.services.cart_service import CartService
from storefront.services.order_service import OrderService
from tests.conftest import make_cart_item


@pytest.fixture
def cart(cart_api, storage):
    return CartService(cart_api, storage)


@pytest.fixture
def auth(storage):
    return DemoAuthProvider(storage, password="demo123")


@pytest.fixture
def service(orders_api, cart, auth):
    return OrderService(orders_api, cart, auth)


class TestCheckout:
    def test_creates_order_and_reloads_cart(self, service, orders_api, cart_api, cart):
        cart_api.fetch_items.side_effect = [[make_cart_item(1, quantity=2)], []]

        service.checkout()

        orders_api.create.assert_called_once()
        assert cart_api.fetch_items.call_count == 2
        assert cart.items == []

    def test_unsynced_cart_blocks_checkout(self, service, orders_api, cart_api):
        cart_api.fetch_items.side_effect = NetworkError("http://api", "down")

        with pytest.raises(RuntimeError):
            service.checkout()

        orders_api.create.assert_not_called()

    def test_empty_cart(self, service, orders_api):
        with pytest.raises(ValueError):
            service.checkout()

        orders_api.create.assert_not_called()


class TestStatusUpdate:
    """Only a signed-in admin may change an order status."""

    def test_signed_out(self, service, orders_api):
        with pytest.raises(AuthError):
            service.update_status(1, OrderStatus.SHIPPED)

        orders_api.update_status.assert_not_called()

    def test_regular_user(self, service, orders_api, auth):
        auth.sign_in("demo@chamundanursery.com", "demo123")

        with pytest.raises(AuthError):
            service.update_status(1, OrderStatus.SHIPPED)

        orders_api.update_status.assert_not_called()

    def test_admin(self, service, orders_api, auth):
        auth.sign_in("admin@chamundanursery.com", "demo123")

        service.update_status(1, OrderStatus.SHIPPED)

        orders_api.update_status.assert_called_once_with(1, OrderStatus.SHIPPED)
