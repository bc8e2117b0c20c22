"""SQLAlchemy table definitions for tagnest.

They match the schema defined in Alembic migrations.
"""

from sqlalchemy import (
    Column,
    ForeignKey,
    Index,
    MetaData,
    String,
    Table,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import TIMESTAMP, UUID

# Metadata object for all tables
metadata = MetaData()

# ============================================================================
# TAGS TABLE
# ============================================================================
tags_table = Table(
    "tags",
    metadata,
    Column("id", UUID, primary_key=True, server_default="uuid_generate_v4()"),
    Column("name", String(255), nullable=False),
    Column("namespace", String(255), nullable=True),  # NULL is its own partition
    Column("description", String(255), nullable=True),
    Column(
        "created_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    Column(
        "updated_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    # NULLS NOT DISTINCT so that two tags with the same name and no namespace collide
    UniqueConstraint(
        "name",
        "namespace",
        name="uq_tags_name_namespace",
        postgresql_nulls_not_distinct=True,
    ),
)

Index("idx_tags_namespace", tags_table.c.namespace)

# ============================================================================
# TAGGED TABLE (polymorphic association, tags nest through object_type 'tag')
# ============================================================================
tagged_table = Table(
    "tagged",
    metadata,
    Column("tag_id", UUID, ForeignKey("tags.id", ondelete="CASCADE"), nullable=False),
    Column("object_type", String(255), nullable=False),
    Column("object_id", String(255), nullable=False),
    Column(
        "created_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    UniqueConstraint("tag_id", "object_type", "object_id", name="uq_tagged_edge"),
)

Index("idx_tagged_object", tagged_table.c.object_type, tagged_table.c.object_id)
Index("idx_tagged_tag_id", tagged_table.c.tag_id)
