from sqlalchemy import select
from sqlalchemy.orm import Session

from catalog.models.category import Category
from catalog.services.category_service import create_category

DEFAULT_CATEGORIES = {
    "Electronics": ["Phones", "Laptops", "Audio", "Cameras", "Accessories"],
    "Home & Garden": ["Furniture", "Kitchen", "Lighting", "Garden Tools"],
    "Fashion": ["Men", "Women", "Kids", "Shoes", "Jewelry"],
    "Health & Beauty": ["Skincare", "Fragrance", "Personal Care"],
    "Sports & Outdoors": ["Fitness", "Camping", "Cycling"],
    "Books": ["Fiction", "Non-Fiction", "Children's Books"],
    "Toys & Games": ["Board Games", "Puzzles", "Outdoor Play"],
    "Groceries": ["Beverages", "Snacks", "Pantry"],
}


def _find(session: Session, name: str, parent_id: int | None) -> Category | None:
    query = select(Category).where(Category.name == name)
    if parent_id is None:
        query = query.where(Category.parent_id.is_(None))
    else:
        query = query.where(Category.parent_id == parent_id)
    return session.scalars(query.limit(1)).first()


def seed_categories(session: Session) -> list[Category]:
    """Seed the default category tree. Idempotent, skips existing."""
    created = []
    for parent_name, children in DEFAULT_CATEGORIES.items():
        parent = _find(session, parent_name, None)
        if not parent:
            parent = create_category(session, parent_name)
            created.append(parent)

        for child_name in children:
            if not _find(session, child_name, parent.id):
                created.append(
                    create_category(session, child_name, parent_id=parent.id)
                )

    return created
