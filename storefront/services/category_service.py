# storefront/services/category_service.py
from typing import List, Optional

from storefront.domain import category_tree
from storefront.domain.schemas import (
    Category,
    CategoryEvent,
    CategoryIn,
    CategoryNode,
    CategoryUpdate,
)
from storefront.exceptions import CategoryCycleError
from storefront.services.api_client import CategoriesApi
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

CATEGORY_EVENTS = ("category_created", "category_updated", "category_deleted")


class CategoryService:
    """
    Admin side of the category list.

    The flat list fetched from the backend is cached per ``include_inactive``
    flag until something invalidates it: a local mutation or a category
    event coming in over SSE. The tree is rebuilt from the flat list on
    every call, never stored.
    """

    def __init__(self, categories_api: CategoriesApi):
        self.api = categories_api
        self._cache: dict[bool, List[Category]] = {}

    def invalidate(self) -> None:
        logger.info("Category cache invalidated")
        self._cache.clear()

    def categories(self, include_inactive: bool = False) -> List[Category]:
        if include_inactive not in self._cache:
            self._cache[include_inactive] = self.api.list(include_inactive=include_inactive)
        return self._cache[include_inactive]

    def tree(self, include_inactive: bool = False) -> List[CategoryNode]:
        return category_tree.build_tree(self.categories(include_inactive))

    def listing(
        self,
        search: Optional[str] = None,
        show_inactive: bool = False,
        level_filter: Optional[str] = None,
        sort_by: str = "sort_order",
    ) -> List[CategoryNode]:
        flat = category_tree.flatten(self.tree(include_inactive=show_inactive))
        filtered = category_tree.filter_categories(
            flat,
            search=search,
            show_inactive=show_inactive,
            level_filter=level_filter,
        )
        return category_tree.sort_categories(filtered, sort_by)

    def available_parents(self, editing_id: Optional[int] = None) -> List[Category]:
        return category_tree.available_parents(self.categories(include_inactive=True), editing_id)

    def create(self, payload: CategoryIn) -> Category:
        if not payload.slug:
            payload = payload.model_copy(update={"slug": category_tree.slugify(payload.name)})
        created = self.api.create(payload)
        logger.info(f"Category {created.id} created ({created.slug})")
        self.invalidate()
        return created

    def update(self, category_id: int, payload: CategoryUpdate) -> Category:
        if "parent_id" in payload.model_fields_set and category_tree.would_create_cycle(
            self.categories(include_inactive=True), category_id, payload.parent_id
        ):
            raise CategoryCycleError(category_id, payload.parent_id)

        updated = self.api.update(category_id, payload)
        logger.info(f"Category {category_id} updated")
        self.invalidate()
        return updated

    def delete(self, category_id: int) -> None:
        self.api.delete(category_id)
        logger.info(f"Category {category_id} deleted")
        self.invalidate()

    def toggle_active(self, category: Category) -> Category:
        return self.update(category.id, CategoryUpdate(is_active=not category.is_active))

    def apply_reorder(self, visible: List[CategoryNode], old_index: int, new_index: int) -> None:
        """Persist a drag-and-drop move: every visible row gets its index as sort order."""
        if old_index == new_index:
            return
        for category_id, sort_order in category_tree.reorder(visible, old_index, new_index):
            self.api.update(category_id, CategoryUpdate(sort_order=sort_order))
        self.invalidate()

    def handle_event(self, event: CategoryEvent) -> None:
        if event.type in CATEGORY_EVENTS:
            logger.info(f"Category event {event.type} for {event.category_id}")
            self.invalidate()
