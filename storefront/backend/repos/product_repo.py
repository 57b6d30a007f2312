# storefront/backend/repos/product_repo.py
from typing import Iterable, List, Tuple

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from storefront.backend.models.product import ProductModel


class ProductRepo:
    def __init__(self, db: Session):
        self.db = db

    def list_products(
        self,
        category_id: int | None = None,
        search: str | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> Tuple[List[ProductModel], int]:
        stmt = select(ProductModel)
        if category_id is not None:
            stmt = stmt.where(ProductModel.category_id == category_id)
        if search:
            like = f"%{search}%"
            stmt = stmt.where(or_(ProductModel.name.ilike(like), ProductModel.slug.ilike(like)))

        total = self.db.execute(select(func.count()).select_from(stmt.subquery())).scalar_one()

        stmt = stmt.order_by(ProductModel.id).offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)
        return list(self.db.execute(stmt).scalars().all()), total

    def get_product(self, product_id: int) -> ProductModel | None:
        return self.db.get(ProductModel, product_id)

    def get_by_slug(self, slug: str) -> ProductModel | None:
        return self.db.execute(select(ProductModel).where(ProductModel.slug == slug)).scalars().first()

    def get_many(self, ids: Iterable[int]) -> List[ProductModel]:
        ids = list(ids)
        if not ids:
            return []
        found = {
            p.id: p
            for p in self.db.execute(select(ProductModel).where(ProductModel.id.in_(ids))).scalars()
        }
        # keep the requested order
        return [found[i] for i in ids if i in found]

    def save(self, product: ProductModel, commit: bool = True) -> ProductModel:
        self.db.add(product)
        if commit:
            self.db.commit()
            self.db.refresh(product)
        return product

    def commit(self) -> None:
        self.db.commit()

    def delete(self, product: ProductModel) -> None:
        self.db.delete(product)
        self.db.commit()
