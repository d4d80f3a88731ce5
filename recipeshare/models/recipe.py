"""
RecipeShare API: Recipe and Comment SQLAlchemy Models
======================================================

What:  ORM models for the `recipes` and `comments` tables in PostgreSQL.
Who:   Used by RecipeStore for queries and writes, and by Alembic.

Table Design:
    - UUID primary keys (opaque, not enumerable)
    - image / image_id: public URL and image-store key of the attached
      picture. Both set or both NULL.
    - author_id / author_username: copied from the caller at creation and
      never changed afterwards
    - price: NUMERIC(10, 2)
    - comments.recipe_id: nullable FK with ON DELETE SET NULL. A recipe
      references its comments but does not own them; deleting a recipe
      leaves the comment rows in place.
"""

import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import ForeignKey, Index, Numeric, String, Text
from sqlalchemy import text as sql_text
from sqlalchemy.dialects.postgresql import TIMESTAMP, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from recipeshare.database import Base


class Recipe(Base):
    """
    A shared recipe with its hosted image.

    Lifecycle (per record):
        Absent → Pending-Image → Persisted        (create: upload, then insert)
        Persisted → Pending-Image → Persisted     (update with a new image)
        Persisted → Pending-Delete → Absent       (delete: destroy, then remove)

    Query Patterns:
        - Page of recipes: WHERE name ~* :pattern OFFSET :skip LIMIT 8
        - Count:           SELECT count(id) WHERE name ~* :pattern
        - Show:            WHERE id = :uuid (+ comments via selectinload)
    """

    __tablename__ = "recipes"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        server_default=sql_text("gen_random_uuid()"),
    )

    name: Mapped[str] = mapped_column(String(200), nullable=False)

    description: Mapped[str] = mapped_column(Text, nullable=False, default="")

    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    # Public (https) URL returned by the image store
    image: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    # Image-store key (Cloudinary public_id), needed to destroy the image
    image_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    author_id: Mapped[str] = mapped_column(String(64), nullable=False)
    author_username: Mapped[str] = mapped_column(String(100), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=sql_text("CURRENT_TIMESTAMP"),
    )

    # passive_deletes: the database applies ON DELETE SET NULL, so the ORM
    # never has to load comments just to delete a recipe
    comments: Mapped[List["Comment"]] = relationship(
        back_populates="recipe",
        passive_deletes=True,
        order_by="Comment.created_at",
    )

    __table_args__ = (
        Index("idx_recipes_name", "name"),
    )

    def __repr__(self) -> str:
        return f"<Recipe(id={self.id}, name='{self.name}', image_id='{self.image_id}')>"


class Comment(Base):
    """A comment left on a recipe. Read-only from this service."""

    __tablename__ = "comments"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        server_default=sql_text("gen_random_uuid()"),
    )

    text: Mapped[str] = mapped_column(Text, nullable=False)

    author_id: Mapped[str] = mapped_column(String(64), nullable=False)
    author_username: Mapped[str] = mapped_column(String(100), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=sql_text("CURRENT_TIMESTAMP"),
    )

    recipe_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("recipes.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    recipe: Mapped[Optional[Recipe]] = relationship(back_populates="comments")

    def __repr__(self) -> str:
        return f"<Comment(id={self.id}, recipe_id={self.recipe_id})>"
