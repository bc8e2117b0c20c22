"""initial_schema

Create the tagnest schema:
- Tags (unique per name and namespace, NULL namespace included)
- Tagged (polymorphic tag edges; tag-to-tag edges use object_type 'tag')

Revision ID: 3c1d7a9e2b40
Revises:
Create Date: 2026-10-18 09:12:44.518203

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "3c1d7a9e2b40"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.execute('CREATE EXTENSION IF NOT EXISTS "uuid-ossp"')

    # ========================================================================
    # TAGS table
    # ========================================================================
    op.create_table(
        "tags",
        sa.Column(
            "id",
            sa.UUID(),
            server_default=sa.text("uuid_generate_v4()"),
            nullable=False,
        ),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("namespace", sa.String(255), nullable=True),
        sa.Column("description", sa.String(255), nullable=True),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
        sa.PrimaryKeyConstraint("id"),
        # Requires PostgreSQL 15+
        sa.UniqueConstraint(
            "name",
            "namespace",
            name="uq_tags_name_namespace",
            postgresql_nulls_not_distinct=True,
        ),
    )
    op.create_index("idx_tags_namespace", "tags", ["namespace"])

    # ========================================================================
    # TAGGED table (polymorphic association)
    # ========================================================================
    op.create_table(
        "tagged",
        sa.Column("tag_id", sa.UUID(), nullable=False),
        sa.Column("object_type", sa.String(255), nullable=False),
        sa.Column("object_id", sa.String(255), nullable=False),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
        sa.ForeignKeyConstraint(["tag_id"], ["tags.id"], ondelete="CASCADE"),
        sa.UniqueConstraint(
            "tag_id", "object_type", "object_id", name="uq_tagged_edge"
        ),
    )
    op.create_index("idx_tagged_object", "tagged", ["object_type", "object_id"])
    op.create_index("idx_tagged_tag_id", "tagged", ["tag_id"])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index("idx_tagged_tag_id", table_name="tagged")
    op.drop_index("idx_tagged_object", table_name="tagged")
    op.drop_table("tagged")
    op.drop_index("idx_tags_namespace", table_name="tags")
    op.drop_table("tags")
