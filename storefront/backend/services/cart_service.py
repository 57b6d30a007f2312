# storefront/backend/services/cart_service.py
from typing import List

from sqlalchemy.orm import Session

from storefront.backend.models.cart_item import CartItemModel
from storefront.backend.repos.cart_repo import CartRepo
from storefront.backend.repos.product_repo import ProductRepo
from storefront.domain.schemas import CartItem
from storefront.exceptions import NotFoundError
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def to_cart_item(item: CartItemModel) -> CartItem:
    product = item.product
    return CartItem(
        id=product.id,
        name=product.name,
        price=product.price,
        image=product.images[0] if product.images else None,
        quantity=item.quantity,
    )


class ServerCartService:
    """
    Server-side cart, one per owner (session token or ``guest``).

    Line items are keyed by product id, adding a product that is already
    in the cart raises its quantity.
    """

    def __init__(self, db: Session):
        self.repo = CartRepo(db)
        self.products = ProductRepo(db)

    def get_items(self, owner: str) -> List[CartItem]:
        return [to_cart_item(i) for i in self.repo.get_cart_items(owner)]

    def add_product(self, owner: str, product_id: int, quantity: int) -> CartItem:
        if quantity <= 0:
            raise ValueError("Quantity must be greater than 0")

        if not self.products.get_product(product_id):
            raise NotFoundError("Product", product_id)

        existing = self.repo.get_cart_item(owner, product_id)
        if existing:
            logger.info(
                f"Product {product_id} already in cart of {owner}, quantity "
                f"{existing.quantity} -> {existing.quantity + quantity}"
            )
            existing.quantity += quantity
            item = self.repo.add_cart_item(existing)
        else:
            logger.info(f"Adding product {product_id} to cart of {owner}")
            item = self.repo.add_cart_item(
                CartItemModel(owner=owner, product_id=product_id, quantity=quantity)
            )
        return to_cart_item(item)

    def update_quantity(self, owner: str, product_id: int, quantity: int) -> CartItem:
        if quantity < 1:
            raise ValueError("Quantity must be at least 1")

        item = self.repo.get_cart_item(owner, product_id)
        if not item:
            raise NotFoundError("Cart item", product_id)

        item.quantity = quantity
        return to_cart_item(self.repo.add_cart_item(item))

    def remove_product(self, owner: str, product_id: int) -> None:
        if self.repo.delete_cart_item(owner, product_id) == 0:
            raise NotFoundError("Cart item", product_id)
        logger.info(f"Product {product_id} removed from cart of {owner}")

    def clear(self, owner: str) -> None:
        self.repo.clear(owner)
        logger.info(f"Cart of {owner} cleared")
