"""Tagged edge between a tag and any taggable object."""

from datetime import datetime

from pydantic import Field

from tagnest.domain.model.common import DomainModel
from tagnest.domain.value import ObjectId, TagId


class Tagged(DomainModel):
    """Association of a tag with a taggable object.

    Polymorphic reference: object_type discriminates the object kind and
    object_id is the object's identifier as text. The triple
    (tag_id, object_type, object_id) identifies the edge. Nested tags use
    the tag object type, so a single table holds every edge.
    """

    tag_id: TagId
    object_type: str = Field(min_length=1, max_length=255)
    object_id: ObjectId
    created_at: datetime = Field(default_factory=datetime.now)

    @property
    def key(self) -> tuple[TagId, str, ObjectId]:
        """Identity of the edge."""
        return (self.tag_id, self.object_type, self.object_id)
