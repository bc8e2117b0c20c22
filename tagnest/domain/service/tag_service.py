"""Tag domain service (the tag registry)."""

from collections import Counter
from collections.abc import Iterable
from typing import Any, Optional
from uuid import uuid4

import logfire
from pydantic import ValidationError as PydanticValidationError

from tagnest.domain.error import (
    DuplicateKeyError,
    InvalidTagArgumentError,
    UnknownTagError,
)
from tagnest.domain.model.tag import TAG_OBJECT_TYPE, Tag, to_tag_refs
from tagnest.domain.repository.tag import TagRepository
from tagnest.domain.repository.tagged import TaggedRepository
from tagnest.domain.value import ObjectId, TagById, TagId, TagName

from .base import Service


def _to_names(names: Any) -> list[TagName]:
    """Coerce a single name or a collection of names into TagNames."""
    if isinstance(names, (str, TagName)):
        names = [names]
    elif not isinstance(names, Iterable):
        raise InvalidTagArgumentError("Expected a tag name or a collection of names")
    try:
        return [n if isinstance(n, TagName) else TagName(n) for n in names]
    except PydanticValidationError as e:
        raise InvalidTagArgumentError(f"Invalid tag name: {e}") from e


def _to_single_name(name: Any) -> TagName:
    """Coerce exactly one tag name."""
    if not isinstance(name, (str, TagName)):
        raise InvalidTagArgumentError(
            f"Expected a single tag name, got {type(name).__name__}"
        )
    (tag_name,) = _to_names(name)
    return tag_name


class TagService(Service):
    """Domain service for tag identity and namespaces."""

    def __init__(
        self, tag_repository: TagRepository, tagged_repository: TaggedRepository
    ) -> None:
        """Initialize tag service.

        Args:
            tag_repository: Tag repository
            tagged_repository: Tagged edge repository, for delete cascades
        """
        self.tag_repository = tag_repository
        self.tagged_repository = tagged_repository

    async def find_by_name(
        self, name: Any, namespace: Optional[str] = None
    ) -> Tag | list[Tag] | None:
        """Get a tag by exact (name, namespace).

        Given a collection of names instead, behaves like find_by_names().

        Args:
            name: Tag name, or a collection of names
            namespace: Tag namespace, None for the global partition

        Returns:
            Tag if found, None otherwise; a list for a collection of names
        """
        if not isinstance(name, (str, TagName)):
            return await self.find_by_names(name, namespace)

        tag_name = _to_single_name(name)
        with logfire.span(
            "tag_service.find_by_name", tag_name=tag_name.root, namespace=namespace
        ):
            tag = await self.tag_repository.find_by_name(tag_name, namespace)
            if tag is None:
                logfire.info("Tag not found", tag_name=tag_name.root)
            return tag

    async def find_by_names(
        self, names: Iterable[str | TagName], namespace: Optional[str] = None
    ) -> list[Tag]:
        """Get the tags matching any of the names in one namespace.

        Names without a matching tag are silently omitted; callers that
        need exact correspondence should use resolve().
        """
        tag_names = _to_names(names)
        if not tag_names:
            return []
        return await self.tag_repository.find_by_names(tag_names, namespace)

    async def create_one(
        self,
        name: str | TagName,
        namespace: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Tag:
        """Create a single tag.

        Raises:
            DuplicateKeyError: If (name, namespace) already exists
            InvalidTagArgumentError: If name is not a single valid name
        """
        tag_name = _to_single_name(name)
        with logfire.span(
            "tag_service.create_one", tag_name=tag_name.root, namespace=namespace
        ):
            tag = Tag(
                id=TagId(uuid4()),
                name=tag_name,
                namespace=namespace,
                description=description,
            )
            try:
                created = await self.tag_repository.create(tag)
            except DuplicateKeyError:
                logfire.warn(
                    "Duplicate tag", tag_name=tag_name.root, namespace=namespace
                )
                raise
            logfire.info("Tag created", tag_id=str(created.id))
            return created

    async def create_many(
        self, names: Iterable[str | TagName], namespace: Optional[str] = None
    ) -> list[Tag]:
        """Create many tags with one bulk insert and one reselect.

        A failed insert aborts before the reselect, so no partial result is
        returned.

        Raises:
            DuplicateKeyError: If a name repeats or already exists
        """
        tag_names = _to_names(names)
        if not tag_names:
            return []

        with logfire.span(
            "tag_service.create_many", count=len(tag_names), namespace=namespace
        ):
            counts = Counter(name.root for name in tag_names)
            repeated = {name for name, n in counts.items() if n > 1}
            if repeated:
                raise DuplicateKeyError(repeated, namespace)

            tags = [
                Tag(id=TagId(uuid4()), name=name, namespace=namespace)
                for name in tag_names
            ]
            try:
                await self.tag_repository.create_many(tags)
            except DuplicateKeyError:
                logfire.warn("Duplicate tags in bulk create", namespace=namespace)
                raise

            created = await self.tag_repository.find_by_names(tag_names, namespace)
            logfire.info("Tags created", count=len(created))
            return created

    async def delete(self, names: Any, namespace: Optional[str] = None) -> int:
        """Delete tags by name within a namespace.

        Cascades to every edge that references the deleted tags, both edges
        attaching them and edges attaching other tags to them.

        Args:
            names: A tag name or a collection of tag names
            namespace: Tag namespace, None for the global partition

        Returns:
            Number of deleted tags
        """
        tag_names = _to_names(names)
        with logfire.span(
            "tag_service.delete", count=len(tag_names), namespace=namespace
        ):
            if not tag_names:
                return 0
            tags = await self.tag_repository.find_by_names(tag_names, namespace)
            if not tags:
                return 0

            tag_ids = [tag.id for tag in tags]
            await self.tagged_repository.detach_all_for_objects(
                TAG_OBJECT_TYPE, [ObjectId(str(tag_id)) for tag_id in tag_ids]
            )
            await self.tagged_repository.detach_all_for_tags(tag_ids)
            deleted = await self.tag_repository.delete_by_ids(tag_ids)

            logfire.info("Tags deleted", count=deleted)
            return deleted

    async def get_all_tags(self, limit: int = 100, order_by: str = "name") -> list[Tag]:
        """Get tags across all namespaces.

        Args:
            limit: Maximum number of tags to return
            order_by: Field to order by ('name' or 'created_at')
        """
        with logfire.span("tag_service.get_all_tags", limit=limit, order_by=order_by):
            tags = await self.tag_repository.find_all(limit=limit, order_by=order_by)
            logfire.info("Tags retrieved", count=len(tags))
            return tags

    async def get_namespace_tags(
        self, namespace: Optional[str], limit: int = 100
    ) -> list[Tag]:
        """Get the tags of one namespace ordered by name."""
        return await self.tag_repository.find_by_namespace(namespace, limit=limit)

    async def resolve(self, tags: Any, namespace: Optional[str] = None) -> list[Tag]:
        """Resolve tag references into existing tags.

        Accepts a tag, a tag name, a TagRef or a collection mixing them.
        Names are looked up in the given namespace; tags and TagById refs are
        checked to still exist. Repeated references resolve to one tag.

        Args:
            tags: Tag reference(s)
            namespace: Namespace for name lookups

        Returns:
            Resolved tags, in request order

        Raises:
            InvalidTagArgumentError: If tags is empty or holds a bad reference
            UnknownTagError: If any reference does not resolve
        """
        refs = to_tag_refs(tags)

        ids = [ref.id for ref in refs if isinstance(ref, TagById)]
        names = [ref.name for ref in refs if not isinstance(ref, TagById)]

        by_id: dict[TagId, Tag] = {}
        by_name: dict[str, Tag] = {}
        if ids:
            by_id = {t.id: t for t in await self.tag_repository.find_by_ids(ids)}
        if names:
            found = await self.tag_repository.find_by_names(names, namespace)
            by_name = {t.name.root: t for t in found}

        missing = {str(i) for i in ids if i not in by_id}
        missing |= {n.root for n in names if n.root not in by_name}
        if missing:
            logfire.warn(
                "Unknown tags", missing=sorted(missing), namespace=namespace
            )
            raise UnknownTagError(missing, namespace)

        resolved: dict[TagId, Tag] = {}
        for ref in refs:
            tag = by_id[ref.id] if isinstance(ref, TagById) else by_name[ref.name.root]
            resolved.setdefault(tag.id, tag)
        return list(resolved.values())
