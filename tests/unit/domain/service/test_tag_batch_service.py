"""Unit tests for TagBatchService."""

import pytest

from tagnest.domain.error import InvalidTagArgumentError, UnknownTagError
from tagnest.domain.repository import TaggedRepository
from tagnest.domain.service import TagBatchService, TaggableService, TagService
from tests.conftest import Post, Video
from tests.harness import create_env_fixture

unit_env = create_env_fixture()


class TestBulkTagging:
    """Tests for add_tags_to and the bulk removals."""

    @pytest.mark.asyncio
    async def test_add_tags_to_every_object(self, unit_env):
        """Every tag lands on every object."""
        # Arrange
        tag_service = await unit_env.get(TagService)
        batch_service = await unit_env.get(TagBatchService)
        taggable_service = await unit_env.get(TaggableService)
        await tag_service.create_many(["a", "b"])
        posts = [Post(), Post(), Post()]

        # Act
        await batch_service.add_tags_to(["a", "b"], posts)

        # Assert
        for post in posts:
            assert await taggable_service.get_tag_names(post) == ["a", "b"]

    @pytest.mark.asyncio
    async def test_add_tag_to_skips_existing_edges(self, unit_env):
        """Objects already carrying the tag keep a single edge."""
        # Arrange
        tag_service = await unit_env.get(TagService)
        batch_service = await unit_env.get(TagBatchService)
        taggable_service = await unit_env.get(TaggableService)
        tagged_repo = await unit_env.get(TaggedRepository)
        await tag_service.create_one("a")
        p1, p2 = Post(), Post()
        await taggable_service.add_tag(p1, "a")

        # Act
        await batch_service.add_tag_to("a", [p1, p2])

        # Assert
        assert await tagged_repo.count() == 2

    @pytest.mark.asyncio
    async def test_add_tags_to_uses_namespace(self, unit_env):
        """Names resolve in the namespace passed in."""
        tag_service = await unit_env.get(TagService)
        batch_service = await unit_env.get(TagBatchService)
        await tag_service.create_one("a", "post")

        with pytest.raises(UnknownTagError):
            await batch_service.add_tags_to("a", [Post()])
        await batch_service.add_tags_to("a", [Post()], namespace="post")

    @pytest.mark.asyncio
    async def test_mixed_object_kinds_raise_error(self, unit_env):
        """A batch must hold a single object kind."""
        tag_service = await unit_env.get(TagService)
        batch_service = await unit_env.get(TagBatchService)
        await tag_service.create_one("a")

        with pytest.raises(InvalidTagArgumentError, match="mixes object types"):
            await batch_service.add_tag_to("a", [Post(), Video()])
        with pytest.raises(InvalidTagArgumentError):
            await batch_service.with_tags([Post(), Video()])

    @pytest.mark.asyncio
    async def test_empty_batch_is_a_no_op(self, unit_env):
        """Nothing is resolved or written for an empty batch."""
        batch_service = await unit_env.get(TagBatchService)

        await batch_service.add_tags_to(["never-created"], [])
        assert await batch_service.del_tags_from(["never-created"], []) == 0
        assert await batch_service.del_all_tags_from([]) == 0
        assert await batch_service.with_tags([]) == []
        assert await batch_service.group_by_tag_name([]) == {}

    @pytest.mark.asyncio
    async def test_del_tag_from_and_del_all_tags_from(self, unit_env):
        """Bulk removals report the number of removed edges."""
        # Arrange
        tag_service = await unit_env.get(TagService)
        batch_service = await unit_env.get(TagBatchService)
        taggable_service = await unit_env.get(TaggableService)
        await tag_service.create_many(["a", "b"])
        posts = [Post(), Post()]
        await batch_service.add_tags_to(["a", "b"], posts)

        # Act
        removed_a = await batch_service.del_tag_from("a", posts)
        removed_rest = await batch_service.del_all_tags_from(posts)

        # Assert
        assert removed_a == 2
        assert removed_rest == 2
        assert await taggable_service.get_tags(posts[0]) == []
        assert len(await tag_service.get_all_tags()) == 2


class TestBatchLoading:
    """Tests for with_tags, with_tag_names and with_tags_mapped."""

    @pytest.mark.asyncio
    async def test_with_tags_matches_per_object_reads(self, unit_env):
        """The batch join returns the same tags as loading one by one."""
        # Arrange
        tag_service = await unit_env.get(TagService)
        batch_service = await unit_env.get(TagBatchService)
        taggable_service = await unit_env.get(TaggableService)
        await tag_service.create_many(["a", "b", "c"])
        p1, p2, p3 = Post(), Post(), Post()
        await taggable_service.add_tags(p1, ["a", "b", "c"])
        await taggable_service.add_tags(p2, ["b"])

        # Act
        loaded = await batch_service.with_tags([p1, p2, p3])

        # Assert
        assert [t.item for t in loaded] == [p1, p2, p3]
        for tagged in loaded:
            expected = await taggable_service.get_tags(tagged.item)
            assert {t.id for t in tagged.tags} == {t.id for t in expected}
        assert loaded[2].tags == []

    @pytest.mark.asyncio
    async def test_with_tag_names(self, unit_env):
        """Names are paired with each object in input order."""
        # Arrange
        tag_service = await unit_env.get(TagService)
        batch_service = await unit_env.get(TagBatchService)
        taggable_service = await unit_env.get(TaggableService)
        await tag_service.create_many(["a", "b"])
        p1, p2 = Post(), Post()
        await taggable_service.add_tags(p1, ["a", "b"])
        await taggable_service.add_tags(p2, ["a"])

        # Act
        loaded = await batch_service.with_tag_names([p2, p1])

        # Assert
        assert loaded[0].item == p2
        assert loaded[0].tags == ["a"]
        assert sorted(loaded[1].tags) == ["a", "b"]

    @pytest.mark.asyncio
    async def test_with_tags_mapped(self, unit_env):
        """A custom mapper is applied to every loaded tag."""
        tag_service = await unit_env.get(TagService)
        batch_service = await unit_env.get(TagBatchService)
        taggable_service = await unit_env.get(TaggableService)
        a = await tag_service.create_one("a", description="first letter")
        post = Post()
        await taggable_service.add_tag(post, a)

        (loaded,) = await batch_service.with_tags_mapped(
            [post], lambda tag: (tag.id, tag.description)
        )

        assert loaded.tags == [(a.id, "first letter")]

    @pytest.mark.asyncio
    async def test_with_tags_leaves_objects_unchanged(self, unit_env):
        """Loading tags wraps the objects instead of changing them."""
        tag_service = await unit_env.get(TagService)
        batch_service = await unit_env.get(TagBatchService)
        taggable_service = await unit_env.get(TaggableService)
        await tag_service.create_one("a")
        post = Post(title="Original")
        await taggable_service.add_tag(post, "a")

        (loaded,) = await batch_service.with_tags([post])

        assert loaded.item is post
        assert post.title == "Original"

    @pytest.mark.asyncio
    async def test_with_tags_mapped_rejects_non_callable(self, unit_env):
        """The mapper must be callable."""
        batch_service = await unit_env.get(TagBatchService)

        with pytest.raises(InvalidTagArgumentError, match="callable"):
            await batch_service.with_tags_mapped([Post()], "name")


class TestGroupByTagName:
    """Tests for group_by_tag_name."""

    @pytest.mark.asyncio
    async def test_group_by_own_tags(self, unit_env):
        """Without tags, every tag carried by an object forms a group."""
        # Arrange
        tag_service = await unit_env.get(TagService)
        batch_service = await unit_env.get(TagBatchService)
        taggable_service = await unit_env.get(TaggableService)
        await tag_service.create_many(["a", "b"])
        p1, p2, p3 = Post(), Post(), Post()
        await taggable_service.add_tags(p1, ["a", "b"])
        await taggable_service.add_tags(p2, ["a"])

        # Act
        groups = await batch_service.group_by_tag_name([p1, p2, p3])

        # Assert
        assert set(groups) == {"a", "b"}
        assert groups["a"] == [p1, p2]
        assert groups["b"] == [p1]

    @pytest.mark.asyncio
    async def test_group_by_given_tags(self, unit_env):
        """With tags, only those tags form groups."""
        # Arrange
        tag_service = await unit_env.get(TagService)
        batch_service = await unit_env.get(TagBatchService)
        taggable_service = await unit_env.get(TaggableService)
        await tag_service.create_many(["a", "b", "c"])
        p1, p2 = Post(), Post()
        await taggable_service.add_tags(p1, ["a", "b"])
        await taggable_service.add_tags(p2, ["b"])

        # Act
        groups = await batch_service.group_by_tag_name([p1, p2], ["b", "c"])

        # Assert
        assert groups == {"b": [p1, p2]}

    @pytest.mark.asyncio
    async def test_group_by_empty_tags_uses_own_tags(self, unit_env):
        """An empty tag collection groups like no tags at all."""
        # Arrange
        tag_service = await unit_env.get(TagService)
        batch_service = await unit_env.get(TagBatchService)
        taggable_service = await unit_env.get(TaggableService)
        await tag_service.create_many(["a", "b"])
        post = Post()
        await taggable_service.add_tags(post, ["a", "b"])

        # Act
        from_list = await batch_service.group_by_tag_name([post], [])
        from_set = await batch_service.group_by_tag_name([post], set())

        # Assert
        assert from_list == {"a": [post], "b": [post]}
        assert from_set == from_list
