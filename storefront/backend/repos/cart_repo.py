# storefront/backend/repos/cart_repo.py
from typing import List

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from storefront.backend.models.cart_item import CartItemModel


class CartRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_cart_items(self, owner: str) -> List[CartItemModel]:
        stmt = (
            select(CartItemModel)
            .where(CartItemModel.owner == owner)
            .order_by(CartItemModel.id.desc())
        )
        return list(self.db.execute(stmt).scalars().all())

    def get_cart_item(self, owner: str, product_id: int) -> CartItemModel | None:
        stmt = select(CartItemModel).where(
            CartItemModel.owner == owner,
            CartItemModel.product_id == product_id,
        )
        return self.db.execute(stmt).scalars().first()

    def add_cart_item(self, item: CartItemModel) -> CartItemModel:
        self.db.add(item)
        self.db.commit()
        self.db.refresh(item)
        return item

    def delete_cart_item(self, owner: str, product_id: int) -> int:
        result = self.db.execute(
            delete(CartItemModel).where(
                CartItemModel.owner == owner,
                CartItemModel.product_id == product_id,
            )
        )
        self.db.commit()
        return result.rowcount

    def clear(self, owner: str, commit: bool = True) -> None:
        self.db.execute(delete(CartItemModel).where(CartItemModel.owner == owner))
        if commit:
            self.db.commit()
