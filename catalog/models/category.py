from urllib.parse import urlparse

from sqlalchemy import String, Boolean, Integer, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from catalog.errors import CategoryValidationError
from catalog.extensions import db
from catalog.models.base import TimestampMixin

NAME_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 500


def _is_valid_url(value: str) -> bool:
    try:
        parsed = urlparse(value)
    except ValueError:
        return False
    return bool(parsed.scheme and parsed.netloc)


class Category(TimestampMixin, db.Model):
    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(NAME_MAX_LENGTH))
    slug: Mapped[str] = mapped_column(String(NAME_MAX_LENGTH), index=True)
    description: Mapped[str | None] = mapped_column(String(DESCRIPTION_MAX_LENGTH))
    image_url: Mapped[str] = mapped_column(String(2048), default="")
    parent_id: Mapped[int | None] = mapped_column(
        ForeignKey("categories.id"), index=True
    )
    level: Mapped[int] = mapped_column(Integer, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    # Self-referencing relationship
    parent = relationship("Category", remote_side="Category.id", back_populates="children")
    children = relationship("Category", back_populates="parent", lazy="dynamic")

    @validates("name")
    def _validate_name(self, key, value):
        value = (value or "").strip()
        if not value:
            raise CategoryValidationError(
                "Please add a category name", {"name": ["This field is required."]}
            )
        if len(value) > NAME_MAX_LENGTH:
            raise CategoryValidationError(
                f"Name cannot be more than {NAME_MAX_LENGTH} characters",
                {"name": [f"Field cannot be longer than {NAME_MAX_LENGTH} characters."]},
            )
        return value

    @validates("description")
    def _validate_description(self, key, value):
        if value is None:
            return None
        value = value.strip()
        if len(value) > DESCRIPTION_MAX_LENGTH:
            raise CategoryValidationError(
                f"Description cannot be more than {DESCRIPTION_MAX_LENGTH} characters",
                {
                    "description": [
                        f"Field cannot be longer than {DESCRIPTION_MAX_LENGTH} characters."
                    ]
                },
            )
        return value

    @validates("image_url")
    def _validate_image_url(self, key, value):
        value = (value or "").strip()
        if value and not _is_valid_url(value):
            raise CategoryValidationError(
                "Please enter a valid image URL", {"imageUrl": ["Invalid URL."]}
            )
        return value

    @property
    def is_root(self) -> bool:
        return self.parent_id is None

    def to_dict(self, *, include_parent: bool = True) -> dict:
        data = {
            "id": self.id,
            "name": self.name,
            "slug": self.slug,
            "description": self.description,
            "imageUrl": self.image_url,
            "parentId": self.parent_id,
            "level": self.level,
            "isActive": self.is_active,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }
        if include_parent:
            parent = None if self.is_root else self.parent
            data["parent"] = (
                {"id": parent.id, "name": parent.name} if parent is not None else None
            )
        return data

    def __repr__(self):
        return f"<Category {self.name}>"
