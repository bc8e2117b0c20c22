"""PostgreSQL implementation of Tagged repository."""

from collections.abc import Collection
from typing import Optional

from sqlalchemy import and_, delete, func, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from tagnest.domain.model.tagged import Tagged
from tagnest.domain.repository.tagged import TaggedRepository
from tagnest.domain.value import ObjectId, TagId
from tagnest.persistence.chunks import MAX_IN_PARAMS, MAX_INSERT_PARAMS, chunked
from tagnest.persistence.mappers import row_to_tagged
from tagnest.persistence.tables import tagged_table

# Rows per INSERT statement (tag_id, object_type, object_id)
INSERT_BATCH = MAX_INSERT_PARAMS // 3


class PostgresTaggedRepository(TaggedRepository):
    """PostgreSQL implementation of TaggedRepository.

    Duplicate edges are skipped with ON CONFLICT DO NOTHING against the
    uq_tagged_edge constraint. Large cross products and id sets are split
    into several statements inside the request transaction.
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: Async database session
        """
        self.session = session

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
        rows = (
            {"tag_id": tag_id, "object_type": object_type, "object_id": object_id}
            for tag_id in tag_ids
            for object_id in object_ids
        )
        for chunk in chunked(rows, INSERT_BATCH):
            stmt = (
                insert(tagged_table)
                .values(chunk)
                .on_conflict_do_nothing(constraint="uq_tagged_edge")
            )
            await self.session.execute(stmt)
        await self.session.flush()

    async def detach(
        self,
        tag_ids: Collection[TagId],
        object_type: str,
        object_ids: Collection[ObjectId],
    ) -> int:
        """Detach the given tags from the given objects."""
        removed = 0
        for tag_chunk in chunked(set(tag_ids), MAX_IN_PARAMS):
            for object_chunk in chunked(set(object_ids), MAX_IN_PARAMS):
                stmt = delete(tagged_table).where(
                    and_(
                        tagged_table.c.tag_id.in_(tag_chunk),
                        tagged_table.c.object_type == object_type,
                        tagged_table.c.object_id.in_(object_chunk),
                    )
                )
                removed += await self._delete(stmt)
        return removed

    async def detach_all_for_objects(
        self, object_type: str, object_ids: Collection[ObjectId]
    ) -> int:
        """Detach every tag from the given objects."""
        removed = 0
        for chunk in chunked(set(object_ids), MAX_IN_PARAMS):
            stmt = delete(tagged_table).where(
                and_(
                    tagged_table.c.object_type == object_type,
                    tagged_table.c.object_id.in_(chunk),
                )
            )
            removed += await self._delete(stmt)
        return removed

    async def detach_all_for_tags(self, tag_ids: Collection[TagId]) -> int:
        """Remove every edge attaching one of the given tags."""
        removed = 0
        for chunk in chunked(set(tag_ids), MAX_IN_PARAMS):
            stmt = delete(tagged_table).where(tagged_table.c.tag_id.in_(chunk))
            removed += await self._delete(stmt)
        return removed

    async def _delete(self, stmt) -> int:
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount  # type: ignore[attr-defined]

    async def tag_ids_for(self, object_type: str, object_id: ObjectId) -> set[TagId]:
        """Get the ids of the tags attached to one object."""
        return await self.tag_ids_for_objects(object_type, [object_id])

    async def tag_ids_for_objects(
        self, object_type: str, object_ids: Collection[ObjectId]
    ) -> set[TagId]:
        """Get the ids of the tags attached to any of the given objects."""
        tag_ids: set[TagId] = set()
        for chunk in chunked(set(object_ids), MAX_IN_PARAMS):
            stmt = (
                select(tagged_table.c.tag_id)
                .where(
                    and_(
                        tagged_table.c.object_type == object_type,
                        tagged_table.c.object_id.in_(chunk),
                    )
                )
                .distinct()
            )
            result = await self.session.execute(stmt)
            tag_ids.update(TagId(tag_id) for tag_id in result.scalars().all())
        return tag_ids

    async def object_ids_for(
        self, object_type: str, tag_ids: Collection[TagId]
    ) -> set[ObjectId]:
        """Get the ids of the objects carrying any of the given tags."""
        object_ids: set[ObjectId] = set()
        for chunk in chunked(set(tag_ids), MAX_IN_PARAMS):
            stmt = (
                select(tagged_table.c.object_id)
                .where(
                    and_(
                        tagged_table.c.object_type == object_type,
                        tagged_table.c.tag_id.in_(chunk),
                    )
                )
                .distinct()
            )
            result = await self.session.execute(stmt)
            object_ids.update(ObjectId(oid) for oid in result.scalars().all())
        return object_ids

    async def edges_for(
        self,
        object_type: str,
        tag_ids: Optional[Collection[TagId]] = None,
        object_ids: Optional[Collection[ObjectId]] = None,
    ) -> list[Tagged]:
        """Get edges of one object kind.

        None leaves that side unrestricted; an empty collection matches
        nothing.
        """
        # [None] stands for a single unrestricted pass
        tag_chunks = [None] if tag_ids is None else chunked(set(tag_ids), MAX_IN_PARAMS)
        edges = []
        for tag_chunk in tag_chunks:
            object_chunks = (
                [None]
                if object_ids is None
                else chunked(set(object_ids), MAX_IN_PARAMS)
            )
            for object_chunk in object_chunks:
                conditions = [tagged_table.c.object_type == object_type]
                if tag_chunk is not None:
                    conditions.append(tagged_table.c.tag_id.in_(tag_chunk))
                if object_chunk is not None:
                    conditions.append(tagged_table.c.object_id.in_(object_chunk))

                stmt = select(tagged_table).where(and_(*conditions))
                result = await self.session.execute(stmt)
                edges.extend(row_to_tagged(row._asdict()) for row in result.fetchall())
        return edges

    async def count(self) -> int:
        """Count all edges."""
        stmt = select(func.count()).select_from(tagged_table)
        result = await self.session.execute(stmt)
        return result.scalar_one()
