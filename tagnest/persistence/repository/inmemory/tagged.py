"""In-memory implementation of Tagged repository for testing."""

from collections.abc import Collection
from typing import Optional

from tagnest.domain.model.tagged import Tagged
from tagnest.domain.repository.tagged import TaggedRepository
from tagnest.domain.value import ObjectId, TagId

EdgeKey = tuple[TagId, str, ObjectId]


class InMemoryTaggedRepository(TaggedRepository):
    """In-memory implementation of TaggedRepository for testing.

    Edges are kept in insertion order and keyed by their triple, so a
    repeated attach is a no-op like the unique constraint in PostgreSQL.
    """

    def __init__(self) -> None:
        self._edges: dict[EdgeKey, Tagged] = {}

    async def attach(
        self, tag_ids: Collection[TagId], object_type: str, object_id: ObjectId
    ) -> None:
        """Attach tags to one object."""
        await self.attach_many(tag_ids, object_type, [object_id])

    async def attach_many(
        self,
        tag_ids: Collection[TagId],
        object_type: str,
        object_ids: Collection[ObjectId],
    ) -> None:
        """Attach every tag to every object."""
        for tag_id in tag_ids:
            for object_id in object_ids:
                edge = Tagged(tag_id=tag_id, object_type=object_type, object_id=object_id)
                self._edges.setdefault(edge.key, edge)

    async def detach(
        self,
        tag_ids: Collection[TagId],
        object_type: str,
        object_ids: Collection[ObjectId],
    ) -> int:
        """Detach the given tags from the given objects."""
        tag_set, object_set = set(tag_ids), set(object_ids)
        return self._remove(
            lambda e: e.object_type == object_type
            and e.tag_id in tag_set
            and e.object_id in object_set
        )

    async def detach_all_for_objects(
        self, object_type: str, object_ids: Collection[ObjectId]
    ) -> int:
        """Detach every tag from the given objects."""
        object_set = set(object_ids)
        return self._remove(
            lambda e: e.object_type == object_type and e.object_id in object_set
        )

    async def detach_all_for_tags(self, tag_ids: Collection[TagId]) -> int:
        """Remove every edge attaching one of the given tags."""
        tag_set = set(tag_ids)
        return self._remove(lambda e: e.tag_id in tag_set)

    def _remove(self, predicate) -> int:
        doomed = [key for key, edge in self._edges.items() if predicate(edge)]
        for key in doomed:
            del self._edges[key]
        return len(doomed)

    async def tag_ids_for(self, object_type: str, object_id: ObjectId) -> set[TagId]:
        """Get the ids of the tags attached to one object."""
        return await self.tag_ids_for_objects(object_type, [object_id])

    async def tag_ids_for_objects(
        self, object_type: str, object_ids: Collection[ObjectId]
    ) -> set[TagId]:
        """Get the ids of the tags attached to any of the given objects."""
        object_set = set(object_ids)
        return {
            e.tag_id
            for e in self._edges.values()
            if e.object_type == object_type and e.object_id in object_set
        }

    async def object_ids_for(
        self, object_type: str, tag_ids: Collection[TagId]
    ) -> set[ObjectId]:
        """Get the ids of the objects carrying any of the given tags."""
        tag_set = set(tag_ids)
        return {
            e.object_id
            for e in self._edges.values()
            if e.object_type == object_type and e.tag_id in tag_set
        }

    async def edges_for(
        self,
        object_type: str,
        tag_ids: Optional[Collection[TagId]] = None,
        object_ids: Optional[Collection[ObjectId]] = None,
    ) -> list[Tagged]:
        """Get edges of one object kind."""
        tag_set = set(tag_ids) if tag_ids is not None else None
        object_set = set(object_ids) if object_ids is not None else None
        return [
            e
            for e in self._edges.values()
            if e.object_type == object_type
            and (tag_set is None or e.tag_id in tag_set)
            and (object_set is None or e.object_id in object_set)
        ]

    async def count(self) -> int:
        """Count all edges."""
        return len(self._edges)
