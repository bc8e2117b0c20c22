"""Tag repository interface."""

from abc import abstractmethod
from collections.abc import Collection
from typing import Optional

from tagnest.domain.model.tag import TAG_OBJECT_TYPE, Tag
from tagnest.domain.repository.taggable import TaggableRepository
from tagnest.domain.value import TagId, TagName


class TagRepository(TaggableRepository[Tag]):
    """Repository interface for Tag aggregate.

    Tags are taggable themselves, so the tag repository doubles as the
    object source for nested tag queries.
    """

    @property
    def object_type(self) -> str:
        return TAG_OBJECT_TYPE

    @abstractmethod
    async def create(self, tag: Tag) -> Tag:
        """Insert a new tag.

        Args:
            tag: Tag to insert

        Returns:
            Inserted tag

        Raises:
            DuplicateKeyError: If (name, namespace) already exists
        """
        pass

    @abstractmethod
    async def create_many(self, tags: list[Tag]) -> None:
        """Insert many tags in a single statement.

        Nothing is inserted when any of the tags is a duplicate.

        Args:
            tags: Tags to insert

        Raises:
            DuplicateKeyError: If any (name, namespace) already exists or
                repeats within the batch; its names are exactly those
        """
        pass

    @abstractmethod
    async def find_by_ids(self, tag_ids: Collection[TagId]) -> list[Tag]:
        """Find multiple tags by ID in a single query.

        Args:
            tag_ids: Tag identifiers

        Returns:
            Found tags (may be fewer than requested if some don't exist)
        """
        pass

    @abstractmethod
    async def find_by_name(
        self, name: TagName, namespace: Optional[str] = None
    ) -> Optional[Tag]:
        """Find tag by exact (name, namespace).

        Args:
            name: Tag name
            namespace: Tag namespace, None for the global partition

        Returns:
            Tag if found, None otherwise
        """
        pass

    @abstractmethod
    async def find_by_names(
        self, names: Collection[TagName], namespace: Optional[str] = None
    ) -> list[Tag]:
        """Find multiple tags by name within one namespace in a single query.

        Args:
            names: Tag names
            namespace: Tag namespace, None for the global partition

        Returns:
            Found tags (may be fewer than requested if some don't exist)
        """
        pass

    @abstractmethod
    async def find_all(self, limit: int = 100, order_by: str = "name") -> list[Tag]:
        """Find all tags across namespaces.

        Args:
            limit: Maximum number of tags to return
            order_by: Field to order by ('name' or 'created_at')

        Returns:
            List of tags
        """
        pass

    @abstractmethod
    async def find_by_namespace(
        self, namespace: Optional[str], limit: int = 100
    ) -> list[Tag]:
        """Find the tags of one namespace ordered by name.

        Args:
            namespace: Tag namespace, None for the global partition
            limit: Maximum number of tags to return

        Returns:
            List of tags
        """
        pass

    @abstractmethod
    async def delete_by_ids(self, tag_ids: Collection[TagId]) -> int:
        """Delete tags by ID.

        Args:
            tag_ids: Tag identifiers

        Returns:
            Number of deleted tags
        """
        pass
