# storefront/backend/services/category_service.py
from typing import List

from sqlalchemy.orm import Session

from storefront.backend.events import EventBroker
from storefront.backend.models.category import CategoryModel
from storefront.backend.repos.category_repo import CategoryRepo
from storefront.domain.category_tree import slugify, would_create_cycle
from storefront.domain.schemas import Category, CategoryIn, CategoryUpdate
from storefront.exceptions import CategoryCycleError, ConflictError, NotFoundError
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

NULLABLE_FIELDS = ("parent_id", "description")


class ServerCategoryService:
    """Category CRUD; every change is announced on the SSE broker."""

    def __init__(self, db: Session, broker: EventBroker):
        self.repo = CategoryRepo(db)
        self.broker = broker

    def _to_schema(self, category: CategoryModel, counts: dict | None = None) -> Category:
        out = Category.model_validate(category)
        if counts:
            out.product_count = counts.get(category.id, 0)
        return out

    def _get(self, category_id: int) -> CategoryModel:
        category = self.repo.get_category(category_id)
        if not category:
            raise NotFoundError("Category", category_id)
        return category

    def _check_slug(self, parent_id: int | None, slug: str, category_id: int | None = None) -> None:
        sibling = self.repo.find_sibling_by_slug(parent_id, slug)
        if sibling and sibling.id != category_id:
            raise ConflictError(f"Slug '{slug}' already used under the same parent")

    def _check_parent(self, parent_id: int | None) -> None:
        if parent_id is not None and not self.repo.get_category(parent_id):
            raise ValueError(f"Parent category {parent_id} does not exist")

    def list(self, active_only: bool = False) -> List[Category]:
        counts = self.repo.product_counts()
        return [self._to_schema(c, counts) for c in self.repo.list_categories(active_only)]

    def get(self, category_id: int) -> Category:
        return self._to_schema(self._get(category_id), self.repo.product_counts())

    def create(self, payload: CategoryIn) -> Category:
        slug = payload.slug or slugify(payload.name)
        self._check_parent(payload.parent_id)
        self._check_slug(payload.parent_id, slug)

        created = self.repo.save(
            CategoryModel(
                name=payload.name,
                slug=slug,
                description=payload.description,
                parent_id=payload.parent_id,
                is_active=payload.is_active,
                sort_order=payload.sort_order,
            )
        )
        logger.info(f"Category {created.id} created")
        self.broker.publish("category_created", category_id=created.id)
        return self._to_schema(created)

    def update(self, category_id: int, payload: CategoryUpdate) -> Category:
        category = self._get(category_id)
        changes = {
            field: value
            for field, value in payload.model_dump(exclude_unset=True).items()
            if value is not None or field in NULLABLE_FIELDS
        }

        if "parent_id" in changes:
            parent_id = changes["parent_id"]
            self._check_parent(parent_id)
            flat = [Category.model_validate(c) for c in self.repo.list_categories()]
            if would_create_cycle(flat, category_id, parent_id):
                raise CategoryCycleError(category_id, parent_id)

        if "slug" in changes or "parent_id" in changes:
            self._check_slug(
                changes.get("parent_id", category.parent_id),
                changes.get("slug", category.slug),
                category_id,
            )

        for field, value in changes.items():
            setattr(category, field, value)

        updated = self.repo.save(category)
        logger.info(f"Category {category_id} updated: {sorted(changes)}")
        self.broker.publish("category_updated", category_id=category_id)
        return self._to_schema(updated)

    def delete(self, category_id: int) -> None:
        category = self._get(category_id)
        if self.repo.has_children(category_id):
            raise ConflictError(f"Category {category_id} still has subcategories")

        self.repo.delete(category)
        logger.info(f"Category {category_id} deleted")
        self.broker.publish("category_deleted", category_id=category_id)
