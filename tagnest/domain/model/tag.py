"""Tag entity.

Tags are namespaced names that can be attached to any taggable object,
including other tags. A tag carried by another tag nests under it, which
is how tag hierarchies such as animal <- bird <- duck are expressed.
"""

from collections.abc import Iterable
from datetime import datetime
from typing import Any, Optional

from pydantic import Field
from pydantic import ValidationError as PydanticValidationError

from tagnest.domain.error import InvalidTagArgumentError
from tagnest.domain.model.common import DomainModel
from tagnest.domain.value import ObjectId, TagById, TagByName, TagId, TagName, TagRef

# Object type of tag-to-tag edges in the tagged table
TAG_OBJECT_TYPE = "tag"


class Tag(DomainModel):
    """Tag entity.

    Business rules:
    - (name, namespace) is unique; a None namespace is its own partition
    - Deleting a tag removes every edge that references it, on either side
    - A tag is itself taggable, under the TAG_OBJECT_TYPE object type
    """

    id: TagId
    name: TagName
    namespace: Optional[str] = Field(default=None, max_length=255)
    description: Optional[str] = Field(default=None, max_length=255)
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

    @property
    def taggable_type(self) -> str:
        return TAG_OBJECT_TYPE

    @property
    def taggable_id(self) -> ObjectId:
        return ObjectId(str(self.id))

    @property
    def tag_namespace(self) -> Optional[str]:
        # Nested tags are looked up in the vocabulary of the carrying tag
        return self.namespace


def to_tag_ref(value: Any) -> TagRef:
    """Coerce a tag, a tag name or a TagRef into a TagRef.

    Raises:
        InvalidTagArgumentError: If value is none of the accepted kinds
    """
    if isinstance(value, (TagById, TagByName)):
        return value
    if isinstance(value, Tag):
        return TagById(id=value.id)
    if isinstance(value, TagName):
        return TagByName(name=value)
    if isinstance(value, str):
        try:
            return TagByName(name=TagName(value))
        except PydanticValidationError as e:
            raise InvalidTagArgumentError(f"Invalid tag name {value!r}") from e
    raise InvalidTagArgumentError(
        f"Tag must be a tag name or a Tag, got {type(value).__name__}"
    )


def to_tag_refs(values: Any) -> list[TagRef]:
    """Coerce one tag reference or a collection of them into TagRefs.

    Raises:
        InvalidTagArgumentError: If the collection is empty or holds a value
            that is neither a tag name nor a Tag
    """
    if isinstance(values, (str, Tag, TagName, TagById, TagByName)):
        return [to_tag_ref(values)]
    if not isinstance(values, Iterable):
        raise InvalidTagArgumentError(
            f"Expected a tag or a collection of tags, got {type(values).__name__}"
        )
    refs = [to_tag_ref(value) for value in values]
    if not refs:
        raise InvalidTagArgumentError("Got empty tags")
    return refs
