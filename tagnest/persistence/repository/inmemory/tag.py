"""In-memory implementation of Tag repository for testing."""

from collections import Counter
from collections.abc import Collection
from typing import Optional
from uuid import UUID

from tagnest.domain.error import DuplicateKeyError
from tagnest.domain.model.tag import Tag
from tagnest.domain.repository.tag import TagRepository
from tagnest.domain.value import ObjectId, TagId, TagName


class InMemoryTagRepository(TagRepository):
    """In-memory implementation of TagRepository for testing."""

    def __init__(self) -> None:
        """Initialize empty repository."""
        self._tags: dict[TagId, Tag] = {}
        self._name_index: dict[tuple[Optional[str], str], TagId] = {}

    async def create(self, tag: Tag) -> Tag:
        """Insert a new tag."""
        await self.create_many([tag])
        return tag

    async def create_many(self, tags: list[Tag]) -> None:
        """Insert many tags, all or nothing."""
        keys = [(tag.namespace, tag.name.root) for tag in tags]
        counts = Counter(keys)
        clashes = {
            name
            for namespace, name in keys
            if (namespace, name) in self._name_index or counts[(namespace, name)] > 1
        }
        if clashes:
            raise DuplicateKeyError(clashes, tags[0].namespace)

        for tag, key in zip(tags, keys):
            self._tags[tag.id] = tag
            self._name_index[key] = tag.id

    async def find_by_ids(self, tag_ids: Collection[TagId]) -> list[Tag]:
        """Find multiple tags by ID."""
        return [self._tags[tag_id] for tag_id in set(tag_ids) if tag_id in self._tags]

    async def find_by_name(
        self, name: TagName, namespace: Optional[str] = None
    ) -> Optional[Tag]:
        """Find tag by exact (name, namespace)."""
        tag_id = self._name_index.get((namespace, name.root))
        return self._tags.get(tag_id) if tag_id else None

    async def find_by_names(
        self, names: Collection[TagName], namespace: Optional[str] = None
    ) -> list[Tag]:
        """Find multiple tags by name within one namespace."""
        tags = []
        for name in {name.root for name in names}:
            tag_id = self._name_index.get((namespace, name))
            if tag_id:
                tags.append(self._tags[tag_id])
        return tags

    async def find_all(self, limit: int = 100, order_by: str = "name") -> list[Tag]:
        """Find all tags."""
        tags = list(self._tags.values())

        if order_by == "created_at":
            tags.sort(key=lambda t: t.created_at, reverse=True)
        else:
            tags.sort(key=lambda t: (t.name.root, t.namespace or ""))

        return tags[:limit]

    async def find_by_namespace(
        self, namespace: Optional[str], limit: int = 100
    ) -> list[Tag]:
        """Find the tags of one namespace ordered by name."""
        tags = [t for t in self._tags.values() if t.namespace == namespace]
        tags.sort(key=lambda t: t.name.root)
        return tags[:limit]

    async def delete_by_ids(self, tag_ids: Collection[TagId]) -> int:
        """Delete tags by ID."""
        deleted = 0
        for tag_id in set(tag_ids):
            tag = self._tags.pop(tag_id, None)
            if tag:
                self._name_index.pop((tag.namespace, tag.name.root), None)
                deleted += 1
        return deleted

    async def find_by_taggable_ids(self, object_ids: Collection[ObjectId]) -> list[Tag]:
        """Find tags by their taggable ids (the tag id as text)."""
        return await self.find_by_ids([TagId(UUID(oid)) for oid in object_ids])

    async def find_excluding_taggable_ids(
        self, object_ids: Collection[ObjectId]
    ) -> list[Tag]:
        """Find every tag whose id is not in the given set."""
        excluded = {UUID(oid) for oid in object_ids}
        tags = [t for t in self._tags.values() if t.id not in excluded]
        return sorted(tags, key=lambda t: t.name.root)
