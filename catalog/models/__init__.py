from catalog.models.category import Category

__all__ = [
    "Category",
]
