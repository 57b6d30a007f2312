# storefront/backend/services/order_service.py
from decimal import Decimal
from typing import List

from sqlalchemy.orm import Session

from storefront.backend.models.order import OrderItemModel, OrderModel
from storefront.backend.repos.cart_repo import CartRepo
from storefront.backend.repos.order_repo import OrderRepo
from storefront.domain.schemas import Order, OrderStatus
from storefront.exceptions import NotFoundError
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class ServerOrderService:
    """
    Orders are created from the owner's cart in one transaction: the
    order, its lines (with the price at checkout time) and the emptied
    cart are committed together.
    """

    def __init__(self, db: Session):
        self.db = db
        self.repo = OrderRepo(db)
        self.carts = CartRepo(db)

    def create_order_from_cart(self, owner: str) -> Order:
        items = self.carts.get_cart_items(owner)
        if not items:
            raise ValueError("Cart is empty")

        total = sum((i.product.price * i.quantity for i in items), Decimal("0.00"))

        order = OrderModel(
            owner=owner,
            status=OrderStatus.PENDING.value,
            total=total,
            items=[
                OrderItemModel(
                    product_id=i.product_id,
                    name=i.product.name,
                    quantity=i.quantity,
                    price=i.product.price,
                )
                for i in items
            ],
        )

        self.repo.create_order(order, commit=False)
        self.carts.clear(owner, commit=False)
        self.db.commit()
        self.db.refresh(order)

        logger.info(f"Order {order.id} created from cart of {owner}, total {total}")
        return Order.model_validate(order)

    def get_order(self, order_id: int, owner: str) -> Order:
        order = self.repo.get_order(order_id)
        if not order:
            raise NotFoundError("Order", order_id)
        if order.owner != owner:
            raise PermissionError("No access to this order")
        return Order.model_validate(order)

    def list_orders(self, owner: str) -> List[Order]:
        return [Order.model_validate(o) for o in self.repo.list_orders(owner)]

    def update_status(self, order_id: int, status: OrderStatus) -> Order:
        order = self.repo.update_order_status(order_id, OrderStatus(status).value)
        if not order:
            raise NotFoundError("Order", order_id)
        logger.info(f"Order {order_id} status -> {order.status}")
        return Order.model_validate(order)
