"""Capability contract for objects that can carry tags."""

from typing import Generic, Protocol, TypeVar, runtime_checkable

from tagnest.domain.model.common import DomainModel
from tagnest.domain.value import ObjectId


@runtime_checkable
class Taggable(Protocol):
    """Anything that can be tagged.

    taggable_type scopes the tagged edges so that two unrelated object kinds
    never share tags even when their identifiers collide. tag_namespace
    selects which tag vocabulary string names are looked up in.
    """

    @property
    def taggable_type(self) -> str: ...

    @property
    def taggable_id(self) -> ObjectId: ...

    @property
    def tag_namespace(self) -> str | None: ...


class TaggableMixin:
    """Default Taggable implementation for models with an ``id`` field.

    The object type is the fully-qualified class name.
    """

    @property
    def taggable_type(self) -> str:
        cls = type(self)
        return f"{cls.__module__}.{cls.__qualname__}"

    @property
    def taggable_id(self) -> ObjectId:
        return ObjectId(str(self.id))  # type: ignore[attr-defined]

    @property
    def tag_namespace(self) -> str | None:
        return None


T = TypeVar("T")
V = TypeVar("V")


class TaggedObject(DomainModel, Generic[T, V]):
    """A taggable object paired with its batch-loaded tags.

    V is a Tag for with_tags(), a tag name for with_tag_names(), or whatever
    a custom mapper returns.
    """

    item: T
    tags: list[V]
