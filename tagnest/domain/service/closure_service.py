"""Nested tag closure domain service."""

from collections.abc import Awaitable, Callable, Collection
from uuid import UUID

import logfire

from tagnest.config import TaggingSettings
from tagnest.domain.error import InvalidDepthError
from tagnest.domain.model.tag import TAG_OBJECT_TYPE
from tagnest.domain.repository.tagged import TaggedRepository
from tagnest.domain.value import ObjectId, TagId

from .base import Service

Step = Callable[[set[TagId]], Awaitable[set[TagId]]]


class ClosureService(Service):
    """Computes bounded-depth transitive closures over tag-to-tag edges.

    Depth 1 is the seed itself and every further level follows one more
    tag-to-tag edge. There is no cycle detection: a cycle just stops
    producing new ids, and the depth bound ends the walk in any case.
    Each level costs one query against the tagged repository.
    """

    def __init__(
        self, tagged_repository: TaggedRepository, tagging_settings: TaggingSettings
    ) -> None:
        """Initialize closure service.

        Args:
            tagged_repository: Tagged edge repository
            tagging_settings: Tag engine settings (max depth)
        """
        self.tagged_repository = tagged_repository
        self.max_depth = tagging_settings.max_depth

    def validate_depth(self, depth: int) -> None:
        """Check depth is within [1, max_depth].

        Raises:
            InvalidDepthError: If depth is out of range
        """
        if depth < 1 or depth > self.max_depth:
            raise InvalidDepthError(depth, self.max_depth)

    async def resolve(self, seed_ids: Collection[TagId], depth: int) -> set[TagId]:
        """Get the seed tags plus the tags they carry, up to depth levels.

        With animal <- bird <- duck, resolve({duck}, 3) is {duck, bird, animal}.

        Args:
            seed_ids: Starting tag ids
            depth: Number of levels, 1 meaning the seed only

        Returns:
            Closure of the seed

        Raises:
            InvalidDepthError: If depth is out of range
        """
        self.validate_depth(depth)
        with logfire.span("closure.resolve", seeds=len(seed_ids), depth=depth):
            return await self._expand(seed_ids, depth, self._tags_carried_by)

    async def resolve_carriers(
        self, seed_ids: Collection[TagId], depth: int
    ) -> set[TagId]:
        """Get the seed tags plus the tags nested under them, up to depth levels.

        This is the reverse walk of resolve(): with animal <- bird <- duck,
        resolve_carriers({animal}, 3) is {animal, bird, duck}. Objects tagged
        with any of these are tagged with animal at depth 3.

        Raises:
            InvalidDepthError: If depth is out of range
        """
        self.validate_depth(depth)
        with logfire.span("closure.resolve_carriers", seeds=len(seed_ids), depth=depth):
            return await self._expand(seed_ids, depth, self._tags_carrying)

    async def _expand(
        self, seed_ids: Collection[TagId], depth: int, step: Step
    ) -> set[TagId]:
        closure = set(seed_ids)
        frontier = set(seed_ids)
        for level in range(2, depth + 1):
            if not frontier:
                break
            # Only ids first seen at the previous level are expanded
            frontier = await step(frontier) - closure
            closure |= frontier
            logfire.debug("Closure level", level=level, found=len(frontier))
        return closure

    async def _tags_carried_by(self, tag_ids: set[TagId]) -> set[TagId]:
        return await self.tagged_repository.tag_ids_for_objects(
            TAG_OBJECT_TYPE, [ObjectId(str(tag_id)) for tag_id in tag_ids]
        )

    async def _tags_carrying(self, tag_ids: set[TagId]) -> set[TagId]:
        object_ids = await self.tagged_repository.object_ids_for(
            TAG_OBJECT_TYPE, tag_ids
        )
        return {TagId(UUID(object_id)) for object_id in object_ids}
