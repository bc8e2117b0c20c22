"""Taggable domain service (the tag query engine)."""

from collections import Counter
from collections.abc import Callable, Collection, Sequence
from typing import Any, Optional, TypeVar

import logfire

from tagnest.domain.model.tag import Tag
from tagnest.domain.model.taggable import Taggable
from tagnest.domain.repository.tag import TagRepository
from tagnest.domain.repository.taggable import TaggableRepository
from tagnest.domain.repository.tagged import TaggedRepository
from tagnest.domain.value import ObjectId, TagId

from .base import Service
from .closure_service import ClosureService
from .tag_service import TagService

T = TypeVar("T")

NamePredicate = Callable[[str], bool]


def count_common(a: Collection[TagId], b: Collection[TagId]) -> int:
    """Count how many items of a are also in b.

    Both sides are sorted and walked with two pointers, so the cost is
    bounded by the sort. Inputs are expected to hold unique ids.
    """
    left = sorted(a)
    right = sorted(b)
    i = j = count = 0
    while i < len(left) and j < len(right):
        if left[i] == right[j]:
            count += 1
            i += 1
            j += 1
        elif left[i] > right[j]:
            j += 1
        else:
            i += 1
    return count


class TaggableService(Service):
    """Domain service for tagging objects and querying their tags.

    Per-object operations take any Taggable. Set queries take a
    TaggableRepository, whose object_type scopes the edges and which turns
    matching ids back into objects.
    """

    def __init__(
        self,
        tag_service: TagService,
        closure_service: ClosureService,
        tag_repository: TagRepository,
        tagged_repository: TaggedRepository,
    ) -> None:
        """Initialize taggable service.

        Args:
            tag_service: Tag domain service, resolves tag references
            closure_service: Closure domain service, expands nested tags
            tag_repository: Tag repository
            tagged_repository: Tagged edge repository
        """
        self.tag_service = tag_service
        self.closure_service = closure_service
        self.tag_repository = tag_repository
        self.tagged_repository = tagged_repository

    # ------------------------------------------------------------------
    # Reading an object's tags
    # ------------------------------------------------------------------

    async def get_tag_ids(self, obj: Taggable, depth: int = 1) -> set[TagId]:
        """Get the ids of the tags an object carries, nested up to depth."""
        self.closure_service.validate_depth(depth)
        tag_ids = await self.tagged_repository.tag_ids_for(
            obj.taggable_type, obj.taggable_id
        )
        if depth == 1 or not tag_ids:
            return tag_ids
        return await self.closure_service.resolve(tag_ids, depth)

    async def get_tags(self, obj: Taggable, depth: int = 1) -> list[Tag]:
        """Get the tags an object carries, nested up to depth.

        Args:
            obj: Tagged object
            depth: 1 for directly attached tags, more to include the tags
                those tags carry

        Returns:
            Tags ordered by name

        Raises:
            InvalidDepthError: If depth is out of range
        """
        with logfire.span(
            "taggable.get_tags", object_type=obj.taggable_type, depth=depth
        ):
            tag_ids = await self.get_tag_ids(obj, depth)
            if not tag_ids:
                return []
            tags = await self.tag_repository.find_by_ids(tag_ids)
            return sorted(tags, key=lambda t: t.name.root)

    async def get_tag_names(self, obj: Taggable, depth: int = 1) -> list[str]:
        """Get the names of the tags an object carries."""
        return [tag.name.root for tag in await self.get_tags(obj, depth)]

    async def get_tags_matching(
        self, obj: Taggable, predicate: NamePredicate, depth: int = 1
    ) -> list[Tag]:
        """Get the object's tags whose name satisfies the predicate.

        The predicate is supplied by the caller, for example
        re.compile(r"art$").search or lambda name: name.endswith("art").
        """
        tags = await self.get_tags(obj, depth)
        return [tag for tag in tags if predicate(tag.name.root)]

    # ------------------------------------------------------------------
    # Changing an object's tags
    # ------------------------------------------------------------------

    async def add_tag(self, obj: Taggable, tag: Any) -> None:
        """Attach one tag (a Tag or a name in the object's namespace)."""
        await self.add_tags(obj, [tag])

    async def add_tags(self, obj: Taggable, tags: Any) -> None:
        """Attach tags to an object.

        Tags already attached are left as they are.

        Raises:
            InvalidTagArgumentError: If tags is empty or holds a bad reference
            UnknownTagError: If a name does not exist in the object's namespace
        """
        with logfire.span("taggable.add_tags", object_type=obj.taggable_type):
            resolved = await self.tag_service.resolve(tags, obj.tag_namespace)
            await self.tagged_repository.attach(
                [tag.id for tag in resolved], obj.taggable_type, obj.taggable_id
            )
            logfire.info("Tags attached", count=len(resolved))

    async def set_tags(self, obj: Taggable, tags: Any) -> None:
        """Replace all of an object's tags.

        References are resolved before anything is detached, so a bad
        reference leaves the object untouched.
        """
        with logfire.span("taggable.set_tags", object_type=obj.taggable_type):
            resolved = await self.tag_service.resolve(tags, obj.tag_namespace)
            await self.tagged_repository.detach_all_for_objects(
                obj.taggable_type, [obj.taggable_id]
            )
            await self.tagged_repository.attach(
                [tag.id for tag in resolved], obj.taggable_type, obj.taggable_id
            )

    async def del_tag(self, obj: Taggable, tag: Any) -> int:
        """Detach one tag from an object."""
        return await self.del_tags(obj, [tag])

    async def del_tags(self, obj: Taggable, tags: Any) -> int:
        """Detach tags from an object.

        Returns:
            Number of removed edges
        """
        with logfire.span("taggable.del_tags", object_type=obj.taggable_type):
            resolved = await self.tag_service.resolve(tags, obj.tag_namespace)
            return await self.tagged_repository.detach(
                [tag.id for tag in resolved], obj.taggable_type, [obj.taggable_id]
            )

    async def del_tags_matching(self, obj: Taggable, predicate: NamePredicate) -> int:
        """Detach the directly attached tags whose name satisfies the predicate."""
        tags = await self.get_tags_matching(obj, predicate)
        if not tags:
            return 0
        return await self.tagged_repository.detach(
            [tag.id for tag in tags], obj.taggable_type, [obj.taggable_id]
        )

    async def del_all_tags(self, obj: Taggable) -> int:
        """Detach every tag from an object. The tags themselves are kept."""
        return await self.tagged_repository.detach_all_for_objects(
            obj.taggable_type, [obj.taggable_id]
        )

    # ------------------------------------------------------------------
    # Membership
    # ------------------------------------------------------------------

    async def has_tag(self, obj: Taggable, tag: Any, depth: int = 1) -> bool:
        """Check whether an object carries a tag, nested up to depth."""
        return await self.has_tags(obj, [tag], depth)

    async def has_tags(self, obj: Taggable, tags: Any, depth: int = 1) -> bool:
        """Check whether an object carries all of the tags."""
        matched, requested = await self._count_held(obj, tags, depth)
        return matched == requested

    async def has_any_tags(self, obj: Taggable, tags: Any, depth: int = 1) -> bool:
        """Check whether an object carries at least one of the tags."""
        matched, _ = await self._count_held(obj, tags, depth)
        return matched >= 1

    async def _count_held(
        self, obj: Taggable, tags: Any, depth: int
    ) -> tuple[int, int]:
        with logfire.span(
            "taggable.count_held", object_type=obj.taggable_type, depth=depth
        ):
            self.closure_service.validate_depth(depth)
            resolved = await self.tag_service.resolve(tags, obj.tag_namespace)
            requested = [tag.id for tag in resolved]
            held = await self.get_tag_ids(obj, depth)
            return count_common(requested, held), len(requested)

    # ------------------------------------------------------------------
    # Set queries across objects of one kind
    # ------------------------------------------------------------------

    async def tagged_by_any(
        self,
        objects: TaggableRepository[T],
        tags: Any,
        depth: int = 1,
        namespace: Optional[str] = None,
    ) -> list[T]:
        """Find the objects carrying any of the tags, nested up to depth.

        The closure is computed once over the query tags, then matched with a
        single edge lookup.
        """
        with logfire.span(
            "taggable.tagged_by_any", object_type=objects.object_type, depth=depth
        ):
            self.closure_service.validate_depth(depth)
            resolved = await self.tag_service.resolve(tags, namespace)
            object_ids = await self._object_ids_tagged_by_any(
                objects.object_type, [tag.id for tag in resolved], depth
            )
            if not object_ids:
                return []
            return await objects.find_by_taggable_ids(object_ids)

    async def tagged_by_all(
        self,
        objects: TaggableRepository[T],
        tags: Any,
        depth: int = 1,
        namespace: Optional[str] = None,
    ) -> list[T]:
        """Find the objects carrying every one of the tags.

        At depth 1 a single edge fetch is tallied per object. Deeper queries
        cannot share that tally because each tag nests differently, so they
        intersect one tagged_by_any lookup per tag. That path issues a query
        per tag and level and is slow for many tags.
        """
        with logfire.span(
            "taggable.tagged_by_all", object_type=objects.object_type, depth=depth
        ):
            self.closure_service.validate_depth(depth)
            resolved = await self.tag_service.resolve(tags, namespace)
            tag_ids = [tag.id for tag in resolved]

            if depth == 1:
                edges = await self.tagged_repository.edges_for(
                    objects.object_type, tag_ids=tag_ids
                )
                tally = Counter(edge.object_id for edge in edges)
                object_ids = {oid for oid, n in tally.items() if n == len(tag_ids)}
            else:
                object_ids = await self._object_ids_tagged_by_each(
                    objects.object_type, tag_ids, depth
                )

            if not object_ids:
                return []
            return await objects.find_by_taggable_ids(object_ids)

    async def not_tagged_by_any(
        self,
        objects: TaggableRepository[T],
        tags: Any,
        depth: int = 1,
        namespace: Optional[str] = None,
    ) -> list[T]:
        """Find the objects carrying none of the tags, nested up to depth."""
        with logfire.span(
            "taggable.not_tagged_by_any", object_type=objects.object_type, depth=depth
        ):
            self.closure_service.validate_depth(depth)
            resolved = await self.tag_service.resolve(tags, namespace)
            object_ids = await self._object_ids_tagged_by_any(
                objects.object_type, [tag.id for tag in resolved], depth
            )
            return await objects.find_excluding_taggable_ids(object_ids)

    async def _object_ids_tagged_by_any(
        self, object_type: str, tag_ids: Sequence[TagId], depth: int
    ) -> set[ObjectId]:
        if depth > 1:
            tag_ids = list(
                await self.closure_service.resolve_carriers(tag_ids, depth)
            )
        return await self.tagged_repository.object_ids_for(object_type, tag_ids)

    async def _object_ids_tagged_by_each(
        self, object_type: str, tag_ids: Sequence[TagId], depth: int
    ) -> set[ObjectId]:
        matching: set[ObjectId] | None = None
        for tag_id in tag_ids:
            found = await self._object_ids_tagged_by_any(object_type, [tag_id], depth)
            matching = found if matching is None else matching & found
            if not matching:
                logfire.debug("No object carries every tag", object_type=object_type)
                return set()
        return matching or set()
