"""Domain value objects for tagnest."""

from tagnest.domain.value.identifiers import ObjectId, TagId
from tagnest.domain.value.types import TagById, TagByName, TagName, TagRef

__all__ = [
    # Identifiers
    "TagId",
    "ObjectId",
    # Types
    "TagName",
    "TagById",
    "TagByName",
    "TagRef",
]
