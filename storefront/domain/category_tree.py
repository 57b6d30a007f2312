# storefront/domain/category_tree.py
"""
Category hierarchy helpers.

Categories arrive as a flat list where each record points at its parent
through ``parent_id``. The admin listing needs them nested (for
indentation) and then flattened again in pre-order, so filters and
sorting can run as plain list transforms.
"""
import re
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from storefront.domain.schemas import Category, CategoryNode
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

LEVEL_FILTERS = ("parent", "child", "level1", "level2")
SORT_KEYS = ("name", "level", "status", "sort_order")


def _as_categories(items: Iterable) -> List[Category]:
    return [
        item if isinstance(item, Category) else Category.model_validate(item)
        for item in items
    ]


def build_tree(
    categories,
    parent_id: Optional[int] = None,
    level: int = 0,
    _path: Tuple[int, ...] = (),
) -> List[CategoryNode]:
    """
    Nest every category whose parent is ``parent_id``, siblings ordered
    by ``sort_order`` ascending, children attached at ``level + 1``.

    Anything that is not a list/tuple yields an empty forest. A node
    whose id already appears on the current ancestor path is skipped,
    so a looping parent chain ends the branch instead of recursing.
    """
    if not isinstance(categories, (list, tuple)):
        return []

    categories = _as_categories(categories)

    siblings = sorted(
        (c for c in categories if c.parent_id == parent_id),
        key=lambda c: c.sort_order,
    )

    nodes = []
    for category in siblings:
        if category.id in _path:
            logger.warning(
                f"Category {category.id} is its own ancestor (path {_path}), skipping branch"
            )
            continue

        nodes.append(
            CategoryNode(
                **category.model_dump(include=set(Category.model_fields)),
                level=level,
                children=build_tree(
                    categories,
                    parent_id=category.id,
                    level=level + 1,
                    _path=_path + (category.id,),
                ),
            )
        )
    return nodes


def flatten(tree: Sequence[CategoryNode]) -> List[CategoryNode]:
    """Pre-order walk: each node is followed directly by its own subtree."""
    result: List[CategoryNode] = []
    for node in tree:
        result.append(node)
        if node.children:
            result.extend(flatten(node.children))
    return result


def matches_search(category: Category, term: Optional[str]) -> bool:
    if not term:
        return True
    needle = term.lower()
    return (
        needle in category.name.lower()
        or needle in category.slug.lower()
        or bool(category.description and needle in category.description.lower())
    )


def matches_status(category: Category, show_inactive: bool) -> bool:
    return show_inactive or category.is_active


def matches_level(node: CategoryNode, level_filter: Optional[str]) -> bool:
    if not level_filter:
        return True
    if level_filter == "parent":
        return node.parent_id is None
    if level_filter == "child":
        return node.parent_id is not None
    if level_filter == "level1":
        return node.level == 1
    if level_filter == "level2":
        return node.level == 2
    raise ValueError(f"Unknown level filter: {level_filter!r}")


def filter_categories(
    nodes: Sequence[CategoryNode],
    search: Optional[str] = None,
    show_inactive: bool = False,
    level_filter: Optional[str] = None,
) -> List[CategoryNode]:
    return [
        node
        for node in nodes
        if matches_search(node, search)
        and matches_status(node, show_inactive)
        and matches_level(node, level_filter)
    ]


def sort_categories(nodes: Sequence[CategoryNode], sort_by: str = "sort_order") -> List[CategoryNode]:
    """Secondary sort of an already flattened list. Sorting is stable."""
    if sort_by == "name":
        return sorted(nodes, key=lambda n: n.name.casefold())
    if sort_by == "level":
        return sorted(nodes, key=lambda n: n.level)
    if sort_by == "status":
        # active first
        return sorted(nodes, key=lambda n: not n.is_active)
    return sorted(nodes, key=lambda n: n.sort_order)


def reorder(nodes: Sequence[Category], old_index: int, new_index: int) -> List[Tuple[int, int]]:
    """
    Move one entry of a visible list and renumber it.

    Returns ``(category_id, sort_order)`` pairs, sort order being the new
    position of each entry.
    """
    moved = list(nodes)
    moved.insert(new_index, moved.pop(old_index))
    return [(node.id, index) for index, node in enumerate(moved)]


def _parent_map(categories) -> Dict[int, Optional[int]]:
    return {c.id: c.parent_id for c in _as_categories(categories)}


def descendant_ids(categories, category_id: int) -> Set[int]:
    """The category itself plus every category below it."""
    children: Dict[Optional[int], List[int]] = {}
    for c in _as_categories(categories):
        children.setdefault(c.parent_id, []).append(c.id)

    found: Set[int] = set()
    stack = [category_id]
    while stack:
        current = stack.pop()
        if current in found:
            continue
        found.add(current)
        stack.extend(children.get(current, []))
    return found


def available_parents(categories, editing_id: Optional[int] = None) -> List[Category]:
    """Parent candidates for the edit form; a category cannot move under its own subtree."""
    categories = _as_categories(categories)
    if editing_id is None:
        return categories
    excluded = descendant_ids(categories, editing_id)
    return [c for c in categories if c.id not in excluded]


def would_create_cycle(categories, category_id: int, new_parent_id: Optional[int]) -> bool:
    if new_parent_id is None:
        return False
    if new_parent_id == category_id:
        return True

    parents = _parent_map(categories)
    seen: Set[int] = set()
    current: Optional[int] = new_parent_id
    while current is not None and current not in seen:
        if current == category_id:
            return True
        seen.add(current)
        current = parents.get(current)
    # an existing loop above new_parent_id also counts
    return current is not None


def slugify(name: str) -> str:
    return re.sub(r"(^-|-$)", "", re.sub(r"[^a-z0-9]+", "-", name.lower()))
