"""Domain model entities for tagnest."""

from tagnest.domain.model.tag import TAG_OBJECT_TYPE, Tag, to_tag_ref, to_tag_refs
from tagnest.domain.model.taggable import Taggable, TaggableMixin, TaggedObject
from tagnest.domain.model.tagged import Tagged

__all__ = [
    "TAG_OBJECT_TYPE",
    "Tag",
    "Tagged",
    "Taggable",
    "TaggableMixin",
    "TaggedObject",
    "to_tag_ref",
    "to_tag_refs",
]
