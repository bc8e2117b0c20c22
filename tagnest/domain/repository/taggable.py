"""Taggable object source interface."""

from abc import ABC, abstractmethod
from collections.abc import Collection
from typing import Generic, TypeVar

from tagnest.domain.value import ObjectId

T = TypeVar("T")


class TaggableRepository(ABC, Generic[T]):
    """Loads taggable objects of a single kind by their taggable ids.

    Set queries (tagged by any/all/none) compute matching object ids from the
    tagged table and use this interface to turn them back into objects.
    """

    @property
    @abstractmethod
    def object_type(self) -> str:
        """Object type shared by every object this repository returns."""
        pass

    @abstractmethod
    async def find_by_taggable_ids(self, object_ids: Collection[ObjectId]) -> list[T]:
        """Find objects whose taggable id is in the given set.

        Args:
            object_ids: Taggable ids to load

        Returns:
            Found objects (ids with no object are silently omitted)
        """
        pass

    @abstractmethod
    async def find_excluding_taggable_ids(
        self, object_ids: Collection[ObjectId]
    ) -> list[T]:
        """Find every object whose taggable id is NOT in the given set.

        Args:
            object_ids: Taggable ids to exclude

        Returns:
            All other objects of this kind
        """
        pass
