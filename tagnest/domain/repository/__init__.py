"""Repository interfaces for the tagnest domain.

Repository interfaces are defined in the domain layer (dependency inversion).
Implementations live in the persistence layer.
"""

from tagnest.domain.repository.tag import TagRepository
from tagnest.domain.repository.taggable import TaggableRepository
from tagnest.domain.repository.tagged import TaggedRepository

__all__ = [
    "TagRepository",
    "TaggableRepository",
    "TaggedRepository",
]
