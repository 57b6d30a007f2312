# storefront/backend/repos/category_repo.py
from typing import Dict, List

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from storefront.backend.models.category import CategoryModel
from storefront.backend.models.product import ProductModel


class CategoryRepo:
    def __init__(self, db: Session):
        self.db = db

    def list_categories(self, active_only: bool = False) -> List[CategoryModel]:
        stmt = select(CategoryModel).order_by(CategoryModel.sort_order, CategoryModel.id)
        if active_only:
            stmt = stmt.where(CategoryModel.is_active.is_(True))
        return list(self.db.execute(stmt).scalars().all())

    def get_category(self, category_id: int) -> CategoryModel | None:
        return self.db.get(CategoryModel, category_id)

    def find_sibling_by_slug(self, parent_id: int | None, slug: str) -> CategoryModel | None:
        stmt = select(CategoryModel).where(CategoryModel.slug == slug)
        if parent_id is None:
            stmt = stmt.where(CategoryModel.parent_id.is_(None))
        else:
            stmt = stmt.where(CategoryModel.parent_id == parent_id)
        return self.db.execute(stmt).scalars().first()

    def has_children(self, category_id: int) -> bool:
        stmt = select(CategoryModel.id).where(CategoryModel.parent_id == category_id).limit(1)
        return self.db.execute(stmt).first() is not None

    def product_counts(self) -> Dict[int, int]:
        stmt = (
            select(ProductModel.category_id, func.count(ProductModel.id))
            .where(ProductModel.category_id.is_not(None))
            .group_by(ProductModel.category_id)
        )
        return {category_id: count for category_id, count in self.db.execute(stmt).all()}

    def save(self, category: CategoryModel) -> CategoryModel:
        self.db.add(category)
        self.db.commit()
        self.db.refresh(category)
        return category

    def delete(self, category: CategoryModel) -> None:
        self.db.delete(category)
        self.db.commit()
