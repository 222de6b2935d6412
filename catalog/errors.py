"""Errors raised by the category hierarchy.

Every error carries a ``kind`` that the HTTP layer reports back to the
caller alongside the message, and an HTTP status used by the blueprint
error handler.
"""


class CategoryError(Exception):
    """Base error raised by category operations."""

    kind = "CategoryError"
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"success": False, "kind": self.kind, "error": self.message}


class CategoryNotFoundError(CategoryError):
    """Raised when a category id does not exist."""

    kind = "NotFound"
    status_code = 404


class ParentNotFoundError(CategoryNotFoundError):
    """Raised when a referenced parent category does not exist."""

    status_code = 400


class SelfParentError(CategoryError):
    """Raised when a category is assigned as its own parent."""

    kind = "SelfParent"


class CircularReferenceError(CategoryError):
    """Raised when a parent assignment would make a category its own ancestor."""

    kind = "CircularReference"


class HasChildrenError(CategoryError):
    """Raised when deleting a category that still has subcategories."""

    kind = "HasChildren"


class CategoryValidationError(CategoryError):
    """Raised when a field violates its length or format constraint."""

    kind = "ValidationError"

    def __init__(self, message: str, errors: dict | None = None):
        super().__init__(message)
        self.errors = errors or {}

    def to_dict(self) -> dict:
        payload = super().to_dict()
        if self.errors:
            payload["errors"] = self.errors
        return payload


class CorruptHierarchyError(CategoryError):
    """Raised when an ancestor walk exceeds the configured depth bound."""

    kind = "CorruptHierarchy"
    status_code = 500
