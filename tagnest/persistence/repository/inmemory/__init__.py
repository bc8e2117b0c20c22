"""In-memory repository implementations for testing."""

from .tag import InMemoryTagRepository
from .tagged import InMemoryTaggedRepository

__all__ = [
    "InMemoryTagRepository",
    "InMemoryTaggedRepository",
]
