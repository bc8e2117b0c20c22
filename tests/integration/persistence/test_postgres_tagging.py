"""Integration tests for the PostgreSQL tag repositories.

These tests need a migrated PostgreSQL 15+ database at DATABASE__URL and
are deselected by default; run them with `pytest -m integration`.
"""

from uuid import uuid4

import pytest

from tagnest.domain.error import DuplicateKeyError
from tagnest.domain.repository import TaggedRepository, TagRepository
from tagnest.domain.service import TagBatchService, TaggableService, TagService
from tests.conftest import InMemoryObjectRepository, Post
from tests.harness import create_env_fixture

pytestmark = pytest.mark.integration

# Integration test fixture - real persistence, assumes postgres running
integration_env = create_env_fixture(unmock={"persistence"})


def unique_namespace() -> str:
    """Namespace private to one test, since committed rows outlive it."""
    return f"it-{uuid4()}"


class TestPostgresTagging:
    """Round trips through the real repositories."""

    @pytest.mark.asyncio
    async def test_duplicate_name_in_namespace(self, integration_env):
        """The unique constraint surfaces as DuplicateKeyError."""
        # Arrange
        tag_service = await integration_env.get(TagService)
        namespace = unique_namespace()
        await tag_service.create_one("physics", namespace)

        # Act & Assert
        with pytest.raises(DuplicateKeyError):
            await tag_service.create_one("physics", namespace)
        # The savepoint keeps the session usable
        assert await tag_service.find_by_name("physics", namespace) is not None

    @pytest.mark.asyncio
    async def test_duplicate_attach_is_skipped(self, integration_env):
        """ON CONFLICT DO NOTHING keeps one edge per triple."""
        # Arrange
        tag_service = await integration_env.get(TagService)
        taggable_service = await integration_env.get(TaggableService)
        tagged_repo = await integration_env.get(TaggedRepository)
        namespace = unique_namespace()
        await tag_service.create_many(["a", "b"], namespace)
        post = Post(namespace=namespace)
        before = await tagged_repo.count()

        # Act
        await taggable_service.add_tags(post, ["a", "b"])
        await taggable_service.add_tags(post, ["a", "b"])

        # Assert
        assert await tagged_repo.count() == before + 2
        assert await taggable_service.get_tag_names(post) == ["a", "b"]

    @pytest.mark.asyncio
    async def test_nested_query_and_batch_load(self, integration_env):
        """Closure walks and batch loads run against real edges."""
        # Arrange
        tag_service = await integration_env.get(TagService)
        taggable_service = await integration_env.get(TaggableService)
        batch_service = await integration_env.get(TagBatchService)
        namespace = unique_namespace()
        animal, bird, duck = [
            await tag_service.create_one(name, namespace)
            for name in ("animal", "bird", "duck")
        ]
        await taggable_service.add_tag(bird, animal)
        await taggable_service.add_tag(duck, bird)
        ducky, bare = Post(namespace=namespace), Post(namespace=namespace)
        await taggable_service.add_tag(ducky, duck)
        posts = InMemoryObjectRepository.of(ducky, bare)

        # Act
        found = await taggable_service.tagged_by_any(
            posts, "animal", depth=3, namespace=namespace
        )
        loaded = await batch_service.with_tag_names([ducky, bare])

        # Assert
        assert found == [ducky]
        assert [t.tags for t in loaded] == [["duck"], []]

    @pytest.mark.asyncio
    async def test_delete_cascades_edges(self, integration_env):
        """Deleting a tag removes the edges on both sides."""
        # Arrange
        tag_service = await integration_env.get(TagService)
        taggable_service = await integration_env.get(TaggableService)
        namespace = unique_namespace()
        animal, bird = [
            await tag_service.create_one(name, namespace) for name in ("animal", "bird")
        ]
        await taggable_service.add_tag(bird, animal)
        post = Post(namespace=namespace)
        await taggable_service.add_tag(post, "animal")

        # Act
        deleted = await tag_service.delete("animal", namespace)

        # Assert
        assert deleted == 1
        assert await taggable_service.get_tags(post) == []
        assert await taggable_service.get_tags(bird) == []

    @pytest.mark.asyncio
    async def test_duplicate_names_lists_only_clashes(self, integration_env):
        """The error names the existing tags, not the whole batch."""
        # Arrange
        tag_service = await integration_env.get(TagService)
        namespace = unique_namespace()
        await tag_service.create_one("b", namespace)

        # Act & Assert
        with pytest.raises(DuplicateKeyError) as exc:
            await tag_service.create_many(["a", "b", "c"], namespace)
        assert exc.value.names == ["b"]
        assert exc.value.namespace == namespace
        assert await tag_service.find_by_names(["a", "c"], namespace) == []

    @pytest.mark.asyncio
    async def test_set_queries_over_tags(self, integration_env):
        """Tags are queried as objects through the tag repository."""
        # Arrange
        tag_service = await integration_env.get(TagService)
        taggable_service = await integration_env.get(TaggableService)
        tag_repo = await integration_env.get(TagRepository)
        namespace = unique_namespace()
        animal, bird, duck = [
            await tag_service.create_one(name, namespace)
            for name in ("animal", "bird", "duck")
        ]
        await taggable_service.add_tag(bird, animal)
        await taggable_service.add_tag(duck, bird)

        # Act
        nested = await taggable_service.tagged_by_any(
            tag_repo, "animal", depth=2, namespace=namespace
        )
        both = await taggable_service.tagged_by_all(
            tag_repo, ["animal", "bird"], depth=2, namespace=namespace
        )
        others = await taggable_service.not_tagged_by_any(
            tag_repo, "animal", namespace=namespace
        )

        # Assert
        assert {t.name.root for t in nested} == {"bird", "duck"}
        assert [t.name.root for t in both] == ["duck"]
        # Every namespace is scanned, so keep this test's tags only
        mine = [t.name.root for t in others if t.namespace == namespace]
        assert mine == ["animal", "duck"]


class TestPostgresLargeBatches:
    """Batches whose bind parameters exceed what one statement can carry."""

    @pytest.mark.asyncio
    async def test_create_and_delete_many_tags(self, integration_env):
        """Thousands of tags are inserted and removed in several statements."""
        # Arrange
        tag_service = await integration_env.get(TagService)
        namespace = unique_namespace()
        names = [f"t{i:05d}" for i in range(6000)]

        # Act
        created = await tag_service.create_many(names, namespace)
        found = await tag_service.find_by_names(names, namespace)
        deleted = await tag_service.delete(names, namespace)

        # Assert
        assert len(created) == len(found) == 6000
        assert deleted == 6000
        assert await tag_service.find_by_names(names[:10], namespace) == []

    @pytest.mark.asyncio
    async def test_tag_large_cross_product(self, integration_env):
        """Three tags on twelve thousand posts land as one edge per pair."""
        # Arrange
        tag_service = await integration_env.get(TagService)
        batch_service = await integration_env.get(TagBatchService)
        taggable_service = await integration_env.get(TaggableService)
        tagged_repo = await integration_env.get(TaggedRepository)
        namespace = unique_namespace()
        await tag_service.create_many(["a", "b", "c"], namespace)
        posts = [Post(namespace=namespace) for _ in range(12000)]
        before = await tagged_repo.count()

        # Act
        await batch_service.add_tags_to(["a", "b", "c"], posts, namespace)
        loaded = await batch_service.with_tag_names(posts)
        found = await taggable_service.tagged_by_all(
            InMemoryObjectRepository.of(*posts), ["a", "c"], namespace=namespace
        )
        removed = await batch_service.del_tags_from(["b"], posts, namespace)

        # Assert
        assert await tagged_repo.count() == before + 36000 - 12000
        assert all(sorted(t.tags) == ["a", "b", "c"] for t in loaded)
        assert len(found) == 12000
        assert removed == 12000
