# import every model so SQLAlchemy registers it on Base.metadata

from storefront.backend.models.category import CategoryModel
from storefront.backend.models.product import ProductModel
from storefront.backend.models.cart_item import CartItemModel
from storefront.backend.models.order import OrderModel, OrderItemModel
from storefront.backend.models.user import UserModel
from storefront.backend.models.recently_viewed import RecentlyViewedModel

__all__ = [
    "CategoryModel",
    "ProductModel",
    "CartItemModel",
    "OrderModel",
    "OrderItemModel",
    "UserModel",
    "RecentlyViewedModel",
]
