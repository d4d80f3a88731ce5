"""Create recipes and comments tables

Revision ID: 001
Revises: None
Create Date: 2024-05-01 00:00:00.000000+00:00

What:  Creates `recipes` (with hosted-image url/key and author) and
       `comments` (optionally attached to a recipe).
How:   PostgreSQL UUID primary keys generated by gen_random_uuid(),
       TIMESTAMP WITH TIME ZONE audit column, ON DELETE SET NULL from
       comments to recipes.

Rollback: downgrade() drops both tables (destructive).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "recipes",
        sa.Column(
            "id",
            postgresql.UUID(as_uuid=True),
            server_default=sa.text("gen_random_uuid()"),
            nullable=False,
        ),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=sa.text("''")),
        sa.Column("price", sa.Numeric(10, 2), nullable=False),
        sa.Column(
            "image",
            sa.String(500),
            nullable=True,
            comment="Public URL of the hosted image",
        ),
        sa.Column(
            "image_id",
            sa.String(255),
            nullable=True,
            comment="Image store key (Cloudinary public_id) used to destroy the image",
        ),
        sa.Column("author_id", sa.String(64), nullable=False),
        sa.Column("author_username", sa.String(100), nullable=False),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_recipes_name", "recipes", ["name"])

    op.create_table(
        "comments",
        sa.Column(
            "id",
            postgresql.UUID(as_uuid=True),
            server_default=sa.text("gen_random_uuid()"),
            nullable=False,
        ),
        sa.Column("text", sa.Text(), nullable=False),
        sa.Column("author_id", sa.String(64), nullable=False),
        sa.Column("author_username", sa.String(100), nullable=False),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column("recipe_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.ForeignKeyConstraint(["recipe_id"], ["recipes.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_comments_recipe_id", "comments", ["recipe_id"])


def downgrade() -> None:
    op.drop_index("ix_comments_recipe_id", table_name="comments")
    op.drop_table("comments")
    op.drop_index("idx_recipes_name", table_name="recipes")
    op.drop_table("recipes")
