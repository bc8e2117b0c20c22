"""Domain value objects for tagnest.

Value objects are immutable and defined by their values, not identity.
They encapsulate validation rules and business logic.
"""

from typing import Union

from pydantic import field_validator

from tagnest.domain.value.common import RootValueObject, ValueObject
from tagnest.domain.value.identifiers import TagId


class TagName(RootValueObject[str]):
    """Human readable tag name.

    Any non-blank string of at most 255 characters. Names are unique per
    namespace, not globally. Examples: 'animal', 'homo sapiens', '0:lorem'
    """

    @field_validator("root")
    @classmethod
    def validate_tag_name(cls, v: str) -> str:
        """Validate tag name is not blank and within length limits."""
        if not v.strip():
            raise ValueError("Tag name must not be blank")
        if len(v) > 255:
            raise ValueError("Tag name must be at most 255 characters")
        return v


class TagById(ValueObject):
    """Reference to an existing tag by its identifier."""

    id: TagId


class TagByName(ValueObject):
    """Reference to a tag by name, resolved within a namespace."""

    name: TagName


# Resolved once at the entry of every public operation
TagRef = Union[TagById, TagByName]
