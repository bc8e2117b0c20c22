"""Batch tag loading and bulk tagging domain service."""

from collections.abc import Callable, Collection, Sequence
from typing import Any, Optional, TypeVar

import logfire

from tagnest.domain.error import InvalidTagArgumentError
from tagnest.domain.model.tag import Tag
from tagnest.domain.model.taggable import Taggable, TaggedObject
from tagnest.domain.repository.tag import TagRepository
from tagnest.domain.repository.tagged import TaggedRepository
from tagnest.domain.value import ObjectId, TagId

from .base import Service
from .tag_service import TagService

T = TypeVar("T", bound=Taggable)
V = TypeVar("V")


def _is_empty_collection(value: Any) -> bool:
    return isinstance(value, Collection) and not isinstance(value, str) and not value


def _object_type_of(objects: Sequence[Taggable]) -> str:
    """Get the single object type shared by a non-empty batch."""
    object_types = {obj.taggable_type for obj in objects}
    if len(object_types) > 1:
        raise InvalidTagArgumentError(
            f"Batch mixes object types: {', '.join(sorted(object_types))}"
        )
    return object_types.pop()


class TagBatchService(Service):
    """Domain service for tagging and loading tags of many objects at once.

    Every operation costs a fixed number of queries regardless of the batch
    size. All objects of a batch must share one object type.
    """

    def __init__(
        self,
        tag_service: TagService,
        tag_repository: TagRepository,
        tagged_repository: TaggedRepository,
    ) -> None:
        """Initialize tag batch service.

        Args:
            tag_service: Tag domain service, resolves tag references
            tag_repository: Tag repository
            tagged_repository: Tagged edge repository
        """
        self.tag_service = tag_service
        self.tag_repository = tag_repository
        self.tagged_repository = tagged_repository

    async def add_tag_to(
        self, tag: Any, objects: Sequence[Taggable], namespace: Optional[str] = None
    ) -> None:
        """Attach one tag to every object."""
        await self.add_tags_to([tag], objects, namespace)

    async def add_tags_to(
        self, tags: Any, objects: Sequence[Taggable], namespace: Optional[str] = None
    ) -> None:
        """Attach every tag to every object with one bulk insert.

        Args:
            tags: Tag reference(s); names are looked up in namespace
            objects: Objects of one kind
            namespace: Namespace for name lookups
        """
        if not objects:
            return
        with logfire.span("tag_batch.add_tags_to", objects=len(objects)):
            object_type = _object_type_of(objects)
            resolved = await self.tag_service.resolve(tags, namespace)
            await self.tagged_repository.attach_many(
                [tag.id for tag in resolved],
                object_type,
                [obj.taggable_id for obj in objects],
            )
            logfire.info(
                "Tags attached to objects", tags=len(resolved), objects=len(objects)
            )

    async def del_tag_from(
        self, tag: Any, objects: Sequence[Taggable], namespace: Optional[str] = None
    ) -> int:
        """Detach one tag from every object."""
        return await self.del_tags_from([tag], objects, namespace)

    async def del_tags_from(
        self, tags: Any, objects: Sequence[Taggable], namespace: Optional[str] = None
    ) -> int:
        """Detach the tags from every object with one bulk delete.

        Returns:
            Number of removed edges
        """
        if not objects:
            return 0
        with logfire.span("tag_batch.del_tags_from", objects=len(objects)):
            object_type = _object_type_of(objects)
            resolved = await self.tag_service.resolve(tags, namespace)
            return await self.tagged_repository.detach(
                [tag.id for tag in resolved],
                object_type,
                [obj.taggable_id for obj in objects],
            )

    async def del_all_tags_from(self, objects: Sequence[Taggable]) -> int:
        """Detach every tag from every object, e.g. before deleting them.

        Returns:
            Number of removed edges
        """
        if not objects:
            return 0
        return await self.tagged_repository.detach_all_for_objects(
            _object_type_of(objects), [obj.taggable_id for obj in objects]
        )

    async def with_tags(self, objects: Sequence[T]) -> list[TaggedObject[T, Tag]]:
        """Pair every object with its directly attached tags."""
        return await self.with_tags_mapped(objects, lambda tag: tag)

    async def with_tag_names(self, objects: Sequence[T]) -> list[TaggedObject[T, str]]:
        """Pair every object with the names of its directly attached tags."""
        return await self.with_tags_mapped(objects, lambda tag: tag.name.root)

    async def with_tags_mapped(
        self, objects: Sequence[T], mapper: Callable[[Tag], V]
    ) -> list[TaggedObject[T, V]]:
        """Pair every object with its tags, each passed through mapper.

        Two queries in total (edges of the batch, then the referenced tags),
        joined in memory through object id and tag id maps.

        Args:
            objects: Objects of one kind
            mapper: Applied to every tag

        Returns:
            One TaggedObject per input object, in input order
        """
        if not callable(mapper):
            raise InvalidTagArgumentError("Mapper must be callable")
        if not objects:
            return []

        with logfire.span("tag_batch.with_tags", objects=len(objects)):
            object_type = _object_type_of(objects)
            tags_by_object: dict[ObjectId, list[V]] = {
                obj.taggable_id: [] for obj in objects
            }

            edges = await self.tagged_repository.edges_for(
                object_type, object_ids=list(tags_by_object)
            )
            tag_ids = {edge.tag_id for edge in edges}
            tags = await self.tag_repository.find_by_ids(tag_ids) if tag_ids else []
            id2tag: dict[TagId, Tag] = {tag.id: tag for tag in tags}

            for edge in edges:
                tags_by_object[edge.object_id].append(mapper(id2tag[edge.tag_id]))

            logfire.info("Tags loaded", objects=len(objects), edges=len(edges))
            return [
                TaggedObject(item=obj, tags=tags_by_object[obj.taggable_id])
                for obj in objects
            ]

    async def group_by_tag_name(
        self,
        objects: Sequence[T],
        tags: Any = None,
        namespace: Optional[str] = None,
    ) -> dict[str, list[T]]:
        """Group objects by the names of the tags they carry.

        Without tags (None or an empty collection), the groups come from the
        objects' own tags. With tags, only those tags are grouped on and
        objects carrying none of them are left out.

        Args:
            objects: Objects of one kind
            tags: Optional tag reference(s) to group on
            namespace: Namespace for name lookups

        Returns:
            Map of tag name to the objects carrying it
        """
        groups: dict[str, list[T]] = {}
        if not objects:
            return groups

        if tags is None or _is_empty_collection(tags):
            for tagged in await self.with_tag_names(objects):
                for name in tagged.tags:
                    groups.setdefault(name, []).append(tagged.item)
            return groups

        with logfire.span("tag_batch.group_by_tag_name", objects=len(objects)):
            object_type = _object_type_of(objects)
            resolved = await self.tag_service.resolve(tags, namespace)
            id2name = {tag.id: tag.name.root for tag in resolved}
            id2object = {obj.taggable_id: obj for obj in objects}

            edges = await self.tagged_repository.edges_for(
                object_type, tag_ids=list(id2name), object_ids=list(id2object)
            )
            for edge in edges:
                groups.setdefault(id2name[edge.tag_id], []).append(
                    id2object[edge.object_id]
                )
            return groups
