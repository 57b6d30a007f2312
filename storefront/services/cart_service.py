# storefront/services/cart_service.py
from decimal import Decimal
from enum import Enum
from typing import Callable, List, Optional

from pydantic import BaseModel, ValidationError

from storefront.domain.schemas import CartItem
from storefront.exceptions import StorefrontError, user_message
from storefront.services.api_client import CartApi
from storefront.services.storage import CART_ITEMS_KEY, LocalStorage
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class SyncStatus(str, Enum):
    SYNCED = "synced"
    LOCAL_ONLY = "local_only"


class CartResult(BaseModel):
    status: SyncStatus
    items: List[CartItem]
    message: Optional[str] = None

    @property
    def synced(self) -> bool:
        return self.status == SyncStatus.SYNCED


class CartService:
    """
    Client-side cart kept in line with the server cart.

    Every command calls the backend once and then re-reads the whole cart
    from it, the server list replacing local state. When any of that
    fails the same change is applied to the local list instead and the
    result is tagged LOCAL_ONLY, so the caller can tell the user the cart
    has not been saved. Errors never escape a command.

    Every state change is mirrored to local storage as a backup copy.
    """

    def __init__(self, cart_api: CartApi, storage: LocalStorage):
        self.api = cart_api
        self.storage = storage
        self._items: List[CartItem] = []
        self.loading = False

    @property
    def items(self) -> List[CartItem]:
        return list(self._items)

    @property
    def subtotal(self) -> Decimal:
        return sum((i.price * i.quantity for i in self._items), Decimal("0.00"))

    @property
    def item_count(self) -> int:
        return sum(i.quantity for i in self._items)

    def _set_items(self, items: List[CartItem]) -> None:
        self._items = list(items)
        self.storage.set(CART_ITEMS_KEY, [i.model_dump(mode="json") for i in self._items])

    def _backup(self) -> List[CartItem]:
        raw = self.storage.get(CART_ITEMS_KEY, [])
        try:
            return [CartItem.model_validate(i) for i in raw or []]
        except (ValidationError, TypeError) as e:
            logger.warning(f"Discarding unreadable cart backup: {e}")
            return []

    def _result(self, status: SyncStatus, message: str | None = None) -> CartResult:
        return CartResult(status=status, items=self.items, message=message)

    def _reconcile(
        self,
        action: str,
        remote: Callable[[], object],
        local: Callable[[List[CartItem]], List[CartItem]],
        refetch: bool = True,
    ) -> CartResult:
        self.loading = True
        try:
            remote()
            self._set_items(self.api.fetch_items() if refetch else local(self._items))
            return self._result(SyncStatus.SYNCED)
        except StorefrontError as e:
            logger.error(f"Failed to {action}, applying locally: {e}")
            self._set_items(local(self._items))
            return self._result(SyncStatus.LOCAL_ONLY, user_message(e))
        finally:
            self.loading = False

    def load(self) -> CartResult:
        self.loading = True
        try:
            self._set_items(self.api.fetch_items())
            return self._result(SyncStatus.SYNCED)
        except StorefrontError as e:
            logger.error(f"Failed to load cart items, using local backup: {e}")
            self._set_items(self._backup())
            return self._result(SyncStatus.LOCAL_ONLY, user_message(e))
        finally:
            self.loading = False

    def add(self, product, quantity: int = 1) -> CartResult:
        if quantity <= 0:
            raise ValueError("Quantity must be greater than 0")

        def local(items: List[CartItem]) -> List[CartItem]:
            for idx, item in enumerate(items):
                if str(item.id) == str(product.id):
                    items = list(items)
                    items[idx] = item.model_copy(update={"quantity": item.quantity + quantity})
                    return items
            new_item = CartItem(
                id=product.id,
                name=product.name,
                price=Decimal(str(product.price or 0)),
                image=getattr(product, "image", None),
                quantity=quantity,
            )
            return [new_item] + list(items)

        return self._reconcile(
            "add to cart",
            lambda: self.api.add(product.id, quantity),
            local,
        )

    def remove(self, item_id) -> CartResult:
        return self._reconcile(
            "remove from cart",
            lambda: self.api.remove(item_id),
            lambda items: [i for i in items if str(i.id) != str(item_id)],
        )

    def update_quantity(self, item_id, quantity: int) -> CartResult:
        def local(items: List[CartItem]) -> List[CartItem]:
            return [
                i.model_copy(update={"quantity": max(1, quantity)}) if str(i.id) == str(item_id) else i
                for i in items
            ]

        return self._reconcile(
            "update cart quantity",
            lambda: self.api.update(item_id, quantity),
            local,
        )

    def clear(self) -> CartResult:
        return self._reconcile(
            "clear cart",
            self.api.clear,
            lambda items: [],
            refetch=False,
        )
