"""Mappers for converting between database rows and domain models.

Domain models are immutable Pydantic models, so rows are mapped by hand
instead of through SQLAlchemy's ORM.
"""

from typing import Any, Dict
from uuid import UUID

from tagnest.domain.model import Tag, Tagged
from tagnest.domain.value import ObjectId, TagId, TagName


def _uuid(value: Any) -> UUID:
    return UUID(value) if isinstance(value, str) else value


def row_to_tag(row: Dict[str, Any]) -> Tag:
    """Convert database row to Tag domain model.

    Args:
        row: Database row as dict

    Returns:
        Tag domain model
    """
    return Tag(
        id=TagId(_uuid(row["id"])),
        name=TagName(row["name"]),
        namespace=row.get("namespace"),
        description=row.get("description"),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def tag_to_dict(tag: Tag) -> Dict[str, Any]:
    """Convert Tag domain model to database dict.

    Args:
        tag: Tag domain model

    Returns:
        Dict for database insert/update
    """
    return {
        "id": tag.id,
        "name": tag.name.root,
        "namespace": tag.namespace,
        "description": tag.description,
        "created_at": tag.created_at,
        "updated_at": tag.updated_at,
    }


def row_to_tagged(row: Dict[str, Any]) -> Tagged:
    """Convert database row to Tagged edge."""
    return Tagged(
        tag_id=TagId(_uuid(row["tag_id"])),
        object_type=row["object_type"],
        object_id=ObjectId(row["object_id"]),
        created_at=row["created_at"],
    )
