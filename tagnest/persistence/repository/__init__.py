"""PostgreSQL repository implementations."""

from tagnest.persistence.repository.tag import PostgresTagRepository
from tagnest.persistence.repository.tagged import PostgresTaggedRepository

__all__ = [
    "PostgresTagRepository",
    "PostgresTaggedRepository",
]
