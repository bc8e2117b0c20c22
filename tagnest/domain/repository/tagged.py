"""Tagged edge repository interface."""

from abc import ABC, abstractmethod
from collections.abc import Collection
from typing import Optional

from tagnest.domain.model.tagged import Tagged
from tagnest.domain.value import ObjectId, TagId


class TaggedRepository(ABC):
    """Repository for tagged edges (the association store).

    Pure storage of attach/detach facts; traversal lives in the closure
    service. Every operation is scoped by object_type so that object kinds
    never share edges, even when their ids collide.

    Attaching an edge that already exists is a silent no-op.
    """

    @abstractmethod
    async def attach(
        self, tag_ids: Collection[TagId], object_type: str, object_id: ObjectId
    ) -> None:
        """Attach tags to one object.

        Args:
            tag_ids: Tags to attach
            object_type: Object kind
            object_id: Object identifier
        """
        pass

    @abstractmethod
    async def attach_many(
        self,
        tag_ids: Collection[TagId],
        object_type: str,
        object_ids: Collection[ObjectId],
    ) -> None:
        """Attach every tag to every object (cross product) in one statement.

        Args:
            tag_ids: Tags to attach
            object_type: Object kind
            object_ids: Object identifiers
        """
        pass

    @abstractmethod
    async def detach(
        self,
        tag_ids: Collection[TagId],
        object_type: str,
        object_ids: Collection[ObjectId],
    ) -> int:
        """Detach the given tags from the given objects.

        Returns:
            Number of removed edges
        """
        pass

    @abstractmethod
    async def detach_all_for_objects(
        self, object_type: str, object_ids: Collection[ObjectId]
    ) -> int:
        """Detach every tag from the given objects.

        Returns:
            Number of removed edges
        """
        pass

    @abstractmethod
    async def detach_all_for_tags(self, tag_ids: Collection[TagId]) -> int:
        """Remove every edge that attaches one of the given tags.

        Returns:
            Number of removed edges
        """
        pass

    @abstractmethod
    async def tag_ids_for(self, object_type: str, object_id: ObjectId) -> set[TagId]:
        """Get the ids of the tags attached to one object."""
        pass

    @abstractmethod
    async def tag_ids_for_objects(
        self, object_type: str, object_ids: Collection[ObjectId]
    ) -> set[TagId]:
        """Get the ids of the tags attached to any of the given objects."""
        pass

    @abstractmethod
    async def object_ids_for(
        self, object_type: str, tag_ids: Collection[TagId]
    ) -> set[ObjectId]:
        """Get the ids of the objects carrying any of the given tags."""
        pass

    @abstractmethod
    async def edges_for(
        self,
        object_type: str,
        tag_ids: Optional[Collection[TagId]] = None,
        object_ids: Optional[Collection[ObjectId]] = None,
    ) -> list[Tagged]:
        """Get edges of one object kind in a single query.

        Args:
            object_type: Object kind
            tag_ids: Restrict to these tags (None means any tag)
            object_ids: Restrict to these objects (None means any object)

        Returns:
            Matching edges
        """
        pass

    @abstractmethod
    async def count(self) -> int:
        """Count all edges."""
        pass
