"""Test configuration and fixtures."""

from collections.abc import Collection, Iterable
from typing import Optional, TypeVar
from uuid import UUID, uuid4

from pydantic import Field

from tagnest.domain.model import TaggableMixin
from tagnest.domain.model.common import DomainModel
from tagnest.domain.repository import TaggableRepository
from tagnest.domain.value import ObjectId

T = TypeVar("T", bound=TaggableMixin)


class Post(TaggableMixin, DomainModel):
    """Taggable test object whose namespace selects its tag vocabulary."""

    id: UUID = Field(default_factory=uuid4)
    title: str = "Test Post"
    namespace: Optional[str] = None

    @property
    def tag_namespace(self) -> Optional[str]:
        return self.namespace


class Video(TaggableMixin, DomainModel):
    """Second taggable kind, to check edges never leak between kinds."""

    id: UUID = Field(default_factory=uuid4)
    title: str = "Test Video"


class InMemoryObjectRepository(TaggableRepository[T]):
    """Holds taggable test objects of one kind, in insertion order."""

    def __init__(self, object_type: str, objects: Iterable[T] = ()) -> None:
        self._object_type = object_type
        self._objects: dict[ObjectId, T] = {}
        for obj in objects:
            self.add(obj)

    @classmethod
    def of(cls, *objects: T) -> "InMemoryObjectRepository[T]":
        """Build a repository from at least one object, typed after the first."""
        return cls(objects[0].taggable_type, objects)

    def add(self, obj: T) -> None:
        self._objects[obj.taggable_id] = obj

    @property
    def object_type(self) -> str:
        return self._object_type

    async def find_by_taggable_ids(self, object_ids: Collection[ObjectId]) -> list[T]:
        wanted = set(object_ids)
        return [obj for oid, obj in self._objects.items() if oid in wanted]

    async def find_excluding_taggable_ids(
        self, object_ids: Collection[ObjectId]
    ) -> list[T]:
        excluded = set(object_ids)
        return [obj for oid, obj in self._objects.items() if oid not in excluded]
