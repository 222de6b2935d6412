"""Category hierarchy operations.

Every function takes the SQLAlchemy session it works against as its first
argument. Slug and level are derived here, by ``slugify`` and
``derive_level``, before anything reaches the session. Ancestor walks are
bounded by the caller's ``max_depth``, normally the app's
``CATEGORY_MAX_DEPTH`` setting.
"""

import logging
import math
import re
from collections import defaultdict, deque
from dataclasses import dataclass

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from catalog.errors import (
    CategoryError,
    CategoryNotFoundError,
    CategoryValidationError,
    CircularReferenceError,
    CorruptHierarchyError,
    HasChildrenError,
    ParentNotFoundError,
    SelfParentError,
)
from catalog.models.category import Category

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = frozenset(
    {"name", "description", "parent_id", "image_url", "is_active"}
)

SORT_FIELDS = {
    "name": Category.name,
    "slug": Category.slug,
    "level": Category.level,
    "createdAt": Category.created_at,
    "created_at": Category.created_at,
    "updatedAt": Category.updated_at,
    "updated_at": Category.updated_at,
    "isActive": Category.is_active,
    "is_active": Category.is_active,
}

_NON_ALNUM = re.compile(r"[^a-z0-9]")
_HYPHEN_RUN = re.compile(r"-+")


class _RootSentinel:
    def __repr__(self):
        return "ROOT"


# Passed as ``parent_id`` to ``list_categories`` to select root categories.
ROOT = _RootSentinel()


@dataclass
class CategoryPage:
    items: list[Category]
    total: int
    page: int
    per_page: int

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.per_page)


def slugify(name: str) -> str:
    """Lowercase ``name`` and collapse every run of non-alphanumerics to one hyphen."""
    return _HYPHEN_RUN.sub("-", _NON_ALNUM.sub("-", name.lower()))


def derive_level(parent: Category | None) -> int:
    return 0 if parent is None else parent.level + 1


def validate_parent(session: Session, parent_id: int | None) -> Category | None:
    """Return the parent category, or ``None`` for a root.

    Raises ``ParentNotFoundError`` when ``parent_id`` names a missing row.
    """
    if parent_id is None:
        return None
    parent = session.get(Category, parent_id)
    if parent is None:
        raise ParentNotFoundError("Parent category not found")
    return parent


def check_circular(
    session: Session,
    category_id: int,
    candidate_parent_id: int,
    *,
    max_depth: int,
) -> None:
    """Reject a parent assignment that would make ``category_id`` its own ancestor.

    Walks up from ``candidate_parent_id`` until a root or a missing row is
    reached. A walk longer than ``max_depth`` steps means the stored
    hierarchy already contains a cycle.
    """
    if category_id == candidate_parent_id:
        raise SelfParentError("Category cannot be its own parent")

    current_id = candidate_parent_id
    steps = 0
    while current_id is not None:
        if steps >= max_depth:
            logger.error(
                "Ancestor walk from category %s exceeded %d steps",
                candidate_parent_id,
                max_depth,
            )
            raise CorruptHierarchyError(
                f"Category hierarchy exceeds the maximum depth of {max_depth}"
            )
        node = session.get(Category, current_id)
        if node is None:
            break
        if node.parent_id == category_id:
            raise CircularReferenceError(
                "Circular reference detected in category hierarchy"
            )
        current_id = node.parent_id
        steps += 1


def create_category(
    session: Session,
    name: str,
    *,
    description: str | None = None,
    parent_id: int | None = None,
    image_url: str | None = None,
    is_active: bool = True,
) -> Category:
    try:
        parent = validate_parent(session, parent_id)
    except CategoryError as exc:
        logger.warning("Rejected category %r: %s", name, exc)
        raise

    category = Category(
        name=name,
        description=description,
        image_url=image_url,
        parent_id=parent_id,
        is_active=is_active,
    )
    category.slug = slugify(category.name)
    category.level = derive_level(parent)
    session.add(category)
    session.commit()
    logger.info(
        "Created category %s (%s) at level %d", category.id, category.slug, category.level
    )
    return category


def get_category(session: Session, category_id: int) -> Category:
    category = session.get(Category, category_id)
    if category is None:
        raise CategoryNotFoundError("Category not found")
    return category


def update_category(
    session: Session,
    category_id: int,
    *,
    max_depth: int,
    **fields,
) -> Category:
    """Apply a partial update.

    Only the keys present in ``fields`` change. Re-parenting recomputes this
    category's own level; the cached levels of its descendants are left as
    they are (see ``rebuild_levels``).
    """
    unknown = set(fields) - UPDATABLE_FIELDS
    if unknown:
        raise CategoryValidationError(
            f"Unknown category field(s): {', '.join(sorted(unknown))}"
        )

    category = get_category(session, category_id)

    parent_changed = "parent_id" in fields
    new_parent_id = fields.get("parent_id", category.parent_id)
    try:
        if parent_changed and new_parent_id is not None:
            check_circular(session, category_id, new_parent_id, max_depth=max_depth)
        parent = validate_parent(session, new_parent_id)
    except CategoryError as exc:
        logger.warning("Rejected update of category %s: %s", category_id, exc)
        raise

    try:
        for key, value in fields.items():
            setattr(category, key, value)
    except CategoryValidationError:
        session.rollback()
        raise

    if "name" in fields:
        category.slug = slugify(category.name)
    category.level = derive_level(parent)
    category.touch()
    session.commit()
    logger.info("Updated category %s: %s", category_id, ", ".join(sorted(fields)))
    return category


def delete_category(session: Session, category_id: int) -> None:
    category = get_category(session, category_id)
    if category.children.first() is not None:
        logger.warning("Refused to delete category %s with children", category_id)
        raise HasChildrenError(
            "Cannot delete category with subcategories. "
            "Delete subcategories first or reassign them."
        )
    session.delete(category)
    session.commit()
    logger.info("Deleted category %s", category_id)


def list_categories(
    session: Session,
    *,
    name: str | None = None,
    parent_id=None,
    is_active: bool | None = None,
    page: int = 1,
    per_page: int = 10,
    sort_by: str = "name",
    sort_order: str = "asc",
) -> CategoryPage:
    """Return one page of categories matching the filters.

    ``parent_id`` is either ``None`` (no filter), ``ROOT`` or a category id.
    """
    if page < 1 or per_page < 1:
        raise CategoryValidationError("page and limit must be positive integers")
    if sort_by not in SORT_FIELDS:
        raise CategoryValidationError(f"Cannot sort by {sort_by!r}")
    if sort_order not in ("asc", "desc"):
        raise CategoryValidationError("sortOrder must be 'asc' or 'desc'")

    conditions = []
    if name:
        escaped = name.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        conditions.append(Category.name.ilike(f"%{escaped}%", escape="\\"))
    if parent_id is ROOT:
        conditions.append(Category.parent_id.is_(None))
    elif parent_id is not None:
        conditions.append(Category.parent_id == parent_id)
    if is_active is not None:
        conditions.append(Category.is_active == is_active)

    column = SORT_FIELDS[sort_by]
    ordering = column.desc() if sort_order == "desc" else column.asc()

    total = session.scalar(
        select(func.count()).select_from(Category).where(*conditions)
    )
    items = session.scalars(
        select(Category)
        .where(*conditions)
        .order_by(ordering, Category.id)
        .offset((page - 1) * per_page)
        .limit(per_page)
    ).all()
    return CategoryPage(items=list(items), total=total, page=page, per_page=per_page)


def get_subcategories(session: Session, parent_id: int | None) -> list[Category]:
    query = select(Category).order_by(Category.name, Category.id)
    if parent_id is None:
        query = query.where(Category.parent_id.is_(None))
    else:
        query = query.where(Category.parent_id == parent_id)
    return list(session.scalars(query).all())


def _children_index(session: Session) -> dict[int | None, list[Category]]:
    rows = session.scalars(select(Category).order_by(Category.name, Category.id)).all()
    index = defaultdict(list)
    for row in rows:
        index[row.parent_id].append(row)
    return index


def build_tree(session: Session) -> list[dict]:
    """Materialize the whole forest as nested dicts, siblings sorted by name.

    Nodes get a ``children`` list only when they have children. Rows not
    reachable from a root are left out.
    """
    index = _children_index(session)
    forest: list[dict] = []
    stack = [(row, forest) for row in reversed(index.get(None, []))]
    while stack:
        row, siblings = stack.pop()
        node = row.to_dict(include_parent=False)
        siblings.append(node)
        children = index.get(row.id)
        if children:
            node["children"] = []
            stack.extend((child, node["children"]) for child in reversed(children))
    return forest


def rebuild_levels(session: Session) -> int:
    """Recompute every cached level from the parent chain; return rows changed."""
    index = _children_index(session)
    changed = 0
    queue = deque((row, 0) for row in index.get(None, []))
    while queue:
        row, level = queue.popleft()
        if row.level != level:
            row.level = level
            row.touch()
            changed += 1
        queue.extend((child, level + 1) for child in index.get(row.id, []))
    session.commit()
    logger.info("Rebuilt category levels, %d row(s) changed", changed)
    return changed
