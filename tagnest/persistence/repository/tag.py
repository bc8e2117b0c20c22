"""PostgreSQL implementation of Tag repository."""

from collections import Counter
from collections.abc import Collection
from typing import Optional
from uuid import UUID

from sqlalchemy import delete, insert, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from tagnest.domain.error import DuplicateKeyError
from tagnest.domain.model.tag import Tag
from tagnest.domain.repository.tag import TagRepository
from tagnest.domain.value import ObjectId, TagId, TagName
from tagnest.persistence.chunks import MAX_IN_PARAMS, MAX_INSERT_PARAMS, chunked
from tagnest.persistence.mappers import row_to_tag, tag_to_dict
from tagnest.persistence.tables import tags_table

# Rows per INSERT statement
INSERT_BATCH = MAX_INSERT_PARAMS // len(tags_table.c)


class PostgresTagRepository(TagRepository):
    """PostgreSQL implementation of TagRepository.

    Large batches are split into several statements inside the request
    transaction.
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: Async database session
        """
        self.session = session

    async def create(self, tag: Tag) -> Tag:
        """Insert a new tag."""
        await self._insert([tag])
        return tag

    async def create_many(self, tags: list[Tag]) -> None:
        """Insert many tags, all or nothing."""
        if tags:
            await self._insert(tags)

    async def _insert(self, tags: list[Tag]) -> None:
        try:
            # Savepoint keeps the request transaction usable after a conflict
            # and undoes the chunks already inserted
            async with self.session.begin_nested():
                for chunk in chunked(tags, INSERT_BATCH):
                    stmt = insert(tags_table).values([tag_to_dict(t) for t in chunk])
                    await self.session.execute(stmt)
        except IntegrityError as e:
            raise DuplicateKeyError(
                await self._clashing_names(tags), tags[0].namespace
            ) from e

    async def _clashing_names(self, tags: list[Tag]) -> set[str]:
        """Names that already exist or repeat within the batch."""
        counts = Counter((tag.namespace, tag.name.root) for tag in tags)
        clashes = {name for (_, name), n in counts.items() if n > 1}
        for namespace in {namespace for namespace, _ in counts}:
            names = [TagName(name) for ns, name in counts if ns == namespace]
            existing = await self.find_by_names(names, namespace)
            clashes |= {tag.name.root for tag in existing}
        return clashes

    async def find_by_ids(self, tag_ids: Collection[TagId]) -> list[Tag]:
        """Find multiple tags by ID."""
        tags = []
        for chunk in chunked(set(tag_ids), MAX_IN_PARAMS):
            stmt = select(tags_table).where(tags_table.c.id.in_(chunk))
            result = await self.session.execute(stmt)
            tags.extend(row_to_tag(row._asdict()) for row in result.fetchall())
        return tags

    async def find_by_name(
        self, name: TagName, namespace: Optional[str] = None
    ) -> Optional[Tag]:
        """Find tag by exact (name, namespace)."""
        stmt = select(tags_table).where(
            tags_table.c.name == name.root,
            tags_table.c.namespace.is_not_distinct_from(namespace),
        )
        result = await self.session.execute(stmt)
        row = result.fetchone()
        return row_to_tag(row._asdict()) if row else None

    async def find_by_names(
        self, names: Collection[TagName], namespace: Optional[str] = None
    ) -> list[Tag]:
        """Find multiple tags by name within one namespace."""
        tags = []
        for chunk in chunked({name.root for name in names}, MAX_IN_PARAMS):
            stmt = select(tags_table).where(
                tags_table.c.name.in_(chunk),
                tags_table.c.namespace.is_not_distinct_from(namespace),
            )
            result = await self.session.execute(stmt)
            tags.extend(row_to_tag(row._asdict()) for row in result.fetchall())
        return tags

    async def find_all(self, limit: int = 100, order_by: str = "name") -> list[Tag]:
        """Find all tags."""
        stmt = select(tags_table).limit(limit)

        if order_by == "created_at":
            stmt = stmt.order_by(tags_table.c.created_at.desc())
        else:
            stmt = stmt.order_by(tags_table.c.name, tags_table.c.namespace)

        result = await self.session.execute(stmt)
        return [row_to_tag(row._asdict()) for row in result.fetchall()]

    async def find_by_namespace(
        self, namespace: Optional[str], limit: int = 100
    ) -> list[Tag]:
        """Find the tags of one namespace ordered by name."""
        stmt = (
            select(tags_table)
            .where(tags_table.c.namespace.is_not_distinct_from(namespace))
            .order_by(tags_table.c.name)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return [row_to_tag(row._asdict()) for row in result.fetchall()]

    async def delete_by_ids(self, tag_ids: Collection[TagId]) -> int:
        """Delete tags by ID.

        Edges referencing the tags go with them (ON DELETE CASCADE).
        """
        deleted = 0
        for chunk in chunked(set(tag_ids), MAX_IN_PARAMS):
            stmt = delete(tags_table).where(tags_table.c.id.in_(chunk))
            result = await self.session.execute(stmt)
            deleted += result.rowcount  # type: ignore[attr-defined]
        await self.session.flush()
        return deleted

    async def find_by_taggable_ids(self, object_ids: Collection[ObjectId]) -> list[Tag]:
        """Find tags by their taggable ids (the tag id as text)."""
        return await self.find_by_ids([TagId(UUID(oid)) for oid in object_ids])

    async def find_excluding_taggable_ids(
        self, object_ids: Collection[ObjectId]
    ) -> list[Tag]:
        """Find every tag whose id is not in the given set.

        The complement spans the whole table anyway, so the exclusion is
        applied in memory rather than through an unbounded NOT IN list.
        """
        excluded = {UUID(oid) for oid in object_ids}
        stmt = select(tags_table).order_by(tags_table.c.name)
        result = await self.session.execute(stmt)
        tags = [row_to_tag(row._asdict()) for row in result.fetchall()]
        return [tag for tag in tags if tag.id not in excluded]
