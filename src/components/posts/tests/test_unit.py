"""
Unit tests for Posts component.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from uuid import UUID, uuid4

import pytest

from src.adapters.clock import FixedClock
from src.adapters.memory import InMemoryImageStore, InMemoryPostRepo
from src.components.posts.component import (
    normalize_category,
    run_create,
    run_delete,
    run_get,
    run_list,
    run_list_by_owner,
    run_update,
    run_upload_image,
)
from src.components.posts.models import (
    CreatePostInput,
    DeletePostInput,
    GetPostInput,
    ImageUpload,
    ListOwnerPostsInput,
    ListPostsInput,
    UpdatePostInput,
    UploadImageInput,
)
from src.domain.entities import Post
from src.rules.loader import load_rules
from src.rules.models import MaxRule, PaginationRules, UploadsRules

# --- Test Fixtures ---

NOW = datetime(2026, 3, 1, 12, 0, 0, tzinfo=UTC)


class StaleLookupPostRepo(InMemoryPostRepo):
    """Slug lookups always report free, as if another writer raced us."""

    def slug_owner(self, slug: str) -> UUID | None:
        return None


class FlakyDeleteImageStore(InMemoryImageStore):
    """Deletes of ids in `broken` fail with a transport error outside StorageError."""

    def __init__(self) -> None:
        super().__init__()
        self.broken: set[str] = set()

    def delete(self, storage_id: str) -> bool:
        if storage_id in self.broken:
            raise ConnectionError(f"connection reset while deleting {storage_id}")
        return super().delete(storage_id)


@pytest.fixture
def repo() -> InMemoryPostRepo:
    return InMemoryPostRepo()


@pytest.fixture
def storage() -> InMemoryImageStore:
    return InMemoryImageStore()


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(NOW)


@pytest.fixture
def upload_rules() -> UploadsRules:
    return UploadsRules(
        max_upload_bytes=1024,
        allowlist_extensions=[".jpg", ".png"],
        folders={"posts": "blog/posts", "editor": "blog/editor-images", "avatars": "profile"},
    )


def _create(repo, storage, clock, **kwargs):
    kwargs.setdefault("owner_id", uuid4())
    kwargs.setdefault("title", "Hello World!")
    return run_create(CreatePostInput(**kwargs), repo=repo, storage=storage, time=clock)


# --- Create ---


class TestCreate:
    def test_create_minimal_post(self, repo, storage, clock):
        owner = uuid4()
        out = _create(repo, storage, clock, owner_id=owner)

        assert out.success
        assert out.post is not None
        assert out.post.slug == "hello-world"
        assert out.post.owner_id == owner
        assert out.post.category == "other"
        assert out.post.likes_count == 0
        assert out.post.comments_count == 0
        assert repo.get_by_id(out.post.id) is not None

    def test_second_post_with_same_title_gets_timestamp_suffix(self, repo, storage, clock):
        first = _create(repo, storage, clock)
        second = _create(repo, storage, clock)

        millis = int(NOW.timestamp() * 1000)
        assert first.post.slug == "hello-world"
        assert second.post.slug == f"hello-world-{millis}"

    def test_title_with_no_slug_characters_uses_fallback(self, repo, storage, clock):
        out = _create(repo, storage, clock, title="!!!")
        assert out.success
        assert out.post.slug == "post"

    def test_blank_title_rejected(self, repo, storage, clock):
        out = _create(repo, storage, clock, title="   ")
        assert not out.success
        assert out.errors[0].code == "validation_error"
        assert out.errors[0].field == "title"

    def test_blocks_accepted_as_json_text(self, repo, storage, clock):
        blocks = '[{"id": "a", "type": "paragraph", "data": {"text": "Hi"}}]'
        out = _create(repo, storage, clock, blocks=blocks)
        assert out.success
        assert out.post.blocks[0].data.text == "Hi"

    def test_invalid_block_fails_whole_request(self, repo, storage, clock):
        blocks = [
            {"id": "a", "type": "paragraph", "data": {"text": "ok"}},
            {"id": "b", "type": "video", "data": {}},
        ]
        out = _create(repo, storage, clock, blocks=blocks)
        assert not out.success
        assert out.errors[0].field == "blocks"
        assert repo.list()[1] == 0

    def test_product_links_get_placeholder_name(self, repo, storage, clock):
        out = _create(repo, storage, clock, product_links=[{"url": "https://shop"}])
        assert out.post.product_links[0].name == "Unnamed product"
        assert out.post.product_links[0].url == "https://shop"

    def test_subtitle_limit_from_rules(self, repo, storage, clock):
        rules = load_rules("rules.yaml").posts.model_copy(update={"subtitle": MaxRule(max=5)})

        out = run_create(
            CreatePostInput(owner_id=uuid4(), title="Hi", subtitle="too long"),
            repo=repo,
            storage=storage,
            time=clock,
            rules=rules,
        )

        assert not out.success
        assert out.errors[0].field == "subtitle"
        assert "at most 5" in out.errors[0].message

    def test_unknown_category_coerced(self, repo, storage, clock):
        out = _create(repo, storage, clock, category="Gardening")
        assert out.post.category == "other"
        out = _create(repo, storage, clock, category="TECH")
        assert out.post.category == "tech"

    def test_uploads_stored_in_order(self, repo, storage, clock, upload_rules):
        uploads = [ImageUpload("a.jpg", b"aaa"), ImageUpload("b.png", b"bbb")]
        out = run_create(
            CreatePostInput(owner_id=uuid4(), title="Pics", uploads=uploads),
            repo=repo,
            storage=storage,
            time=clock,
            upload_rules=upload_rules,
        )
        assert out.success
        assert len(out.post.images) == 2
        assert [storage.objects[i.storage_id][0] for i in out.post.images] == [b"aaa", b"bbb"]
        assert all(i.storage_id.startswith("blog/posts/") for i in out.post.images)

    def test_disallowed_upload_rejected_before_storing(self, repo, storage, clock, upload_rules):
        out = run_create(
            CreatePostInput(
                owner_id=uuid4(), title="Pics", uploads=[ImageUpload("a.exe", b"x")]
            ),
            repo=repo,
            storage=storage,
            time=clock,
            upload_rules=upload_rules,
        )
        assert not out.success
        assert out.errors[0].field == "images"
        assert storage.objects == {}

    def test_storage_failure_aborts_create(self, repo, storage, clock):
        storage.fail_on_store = True
        out = _create(repo, storage, clock, uploads=[ImageUpload("a.jpg", b"x")])
        assert not out.success
        assert out.errors[0].code == "storage_error"
        assert repo.list()[1] == 0

    def test_concurrent_slug_claim_retried_once(self, storage, clock):
        repo = StaleLookupPostRepo()
        first = _create(repo, storage, clock)
        second = _create(repo, storage, clock)

        assert first.post.slug == "hello-world"
        assert second.success
        assert second.post.slug.startswith("hello-world-")


# --- Read ---


class TestGet:
    def test_get_by_id_and_slug(self, repo, storage, clock):
        created = _create(repo, storage, clock).post

        by_id = run_get(GetPostInput(post_id=created.id), repo=repo)
        by_slug = run_get(GetPostInput(slug="hello-world"), repo=repo)

        assert by_id.post.id == created.id
        assert by_slug.post.id == created.id

    def test_missing_post_not_found(self, repo):
        out = run_get(GetPostInput(post_id=uuid4()), repo=repo)
        assert not out.success
        assert out.errors[0].code == "not_found"

    def test_requires_id_or_slug(self, repo):
        out = run_get(GetPostInput(), repo=repo)
        assert out.errors[0].code == "validation_error"


class TestList:
    def _seed(self, repo, storage, clock, titles, category=None):
        for title in titles:
            _create(repo, storage, clock, title=title, category=category)
            clock.advance(minutes=1)

    def test_newest_first_with_total(self, repo, storage, clock):
        self._seed(repo, storage, clock, ["One", "Two", "Three"])

        out = run_list(ListPostsInput(page=1, page_size=2), repo=repo)

        assert out.total == 3
        assert [s.title for s in out.items] == ["Three", "Two"]

    def test_second_page(self, repo, storage, clock):
        self._seed(repo, storage, clock, ["One", "Two", "Three"])
        out = run_list(ListPostsInput(page=2, page_size=2), repo=repo)
        assert [s.title for s in out.items] == ["One"]

    def test_search_is_case_insensitive_substring(self, repo, storage, clock):
        self._seed(repo, storage, clock, ["Rust Tips", "Python tricks", "PYTHON again"])
        out = run_list(ListPostsInput(search="python"), repo=repo)
        assert out.total == 2

    def test_category_filter(self, repo, storage, clock):
        self._seed(repo, storage, clock, ["A"], category="food")
        self._seed(repo, storage, clock, ["B"], category="tech")
        out = run_list(ListPostsInput(category="food"), repo=repo)
        assert [s.title for s in out.items] == ["A"]

    def test_page_size_clamped(self, repo, storage, clock):
        rules = PaginationRules(default_page_size=5, max_page_size=20)
        out = run_list(ListPostsInput(page=0, page_size=500), repo=repo, rules=rules)
        assert out.page == 1
        assert out.page_size == 20

    def test_list_by_owner(self, repo, storage, clock):
        owner = uuid4()
        _create(repo, storage, clock, owner_id=owner, title="Mine")
        _create(repo, storage, clock, title="Theirs")

        out = run_list_by_owner(ListOwnerPostsInput(owner_id=owner), repo=repo)
        assert [p.title for p in out.posts] == ["Mine"]


# --- Update ---


class TestUpdate:
    def test_owner_updates_title_and_slug(self, repo, storage, clock):
        post = _create(repo, storage, clock).post

        out = run_update(
            UpdatePostInput(post_id=post.id, requester_id=post.owner_id, title="New Title"),
            repo=repo,
            time=clock,
        )

        assert out.success
        assert out.post.slug == "new-title"
        assert repo.get_by_slug("hello-world") is None

    def test_slug_unchanged_when_title_unchanged(self, repo, storage, clock):
        post = _create(repo, storage, clock).post
        out = run_update(
            UpdatePostInput(post_id=post.id, requester_id=post.owner_id, subtitle="More"),
            repo=repo,
            time=clock,
        )
        assert out.post.slug == "hello-world"
        assert out.post.subtitle == "More"

    def test_non_owner_forbidden(self, repo, storage, clock):
        post = _create(repo, storage, clock).post
        out = run_update(
            UpdatePostInput(post_id=post.id, requester_id=uuid4(), title="Hijack"),
            repo=repo,
            time=clock,
        )
        assert out.errors[0].code == "forbidden"
        assert repo.get_by_id(post.id).title == "Hello World!"

    def test_update_preserves_engagement(self, repo, storage, clock):
        post = _create(repo, storage, clock).post
        liker = uuid4()
        repo.update_atomic(post.id, lambda p: p.toggle_like(liker))

        out = run_update(
            UpdatePostInput(post_id=post.id, requester_id=post.owner_id, title="Renamed"),
            repo=repo,
            time=clock,
        )
        assert out.post.liked_users == [liker]
        assert out.post.likes_count == 1


# --- Delete ---


class TestDelete:
    def test_delete_cascades_images(self, repo, storage, clock):
        post = _create(repo, storage, clock, uploads=[ImageUpload("a.jpg", b"a")]).post
        storage_id = post.images[0].storage_id

        out = run_delete(
            DeletePostInput(post_id=post.id, requester_id=post.owner_id),
            repo=repo,
            storage=storage,
        )

        assert out.success and out.deleted
        assert storage_id not in storage.objects
        assert repo.get_by_id(post.id) is None

    def test_image_delete_failure_does_not_block(self, repo, storage, clock):
        post = _create(
            repo, storage, clock, uploads=[ImageUpload("a.jpg", b"a"), ImageUpload("b.jpg", b"b")]
        ).post
        failing = post.images[0].storage_id
        storage.fail_on_delete.add(failing)

        out = run_delete(
            DeletePostInput(post_id=post.id, requester_id=post.owner_id),
            repo=repo,
            storage=storage,
        )

        assert out.deleted
        assert out.failed_image_ids == [failing]
        assert post.images[1].storage_id in storage.deleted
        assert repo.get_by_id(post.id) is None

    def test_unexpected_delete_error_is_recorded(self, repo, clock):
        storage = FlakyDeleteImageStore()
        post = _create(
            repo, storage, clock, uploads=[ImageUpload("a.jpg", b"a"), ImageUpload("b.jpg", b"b")]
        ).post
        storage.broken = {post.images[0].storage_id}

        out = run_delete(
            DeletePostInput(post_id=post.id, requester_id=post.owner_id),
            repo=repo,
            storage=storage,
        )

        assert out.success and out.deleted
        assert out.failed_image_ids == [post.images[0].storage_id]
        assert storage.deleted == [post.images[1].storage_id]
        assert repo.get_by_id(post.id) is None

    def test_non_owner_cannot_delete(self, repo, storage, clock):
        post = _create(repo, storage, clock).post
        out = run_delete(
            DeletePostInput(post_id=post.id, requester_id=uuid4()), repo=repo, storage=storage
        )
        assert out.errors[0].code == "forbidden"
        assert repo.get_by_id(post.id) is not None

    def test_missing_post(self, repo, storage):
        out = run_delete(
            DeletePostInput(post_id=uuid4(), requester_id=uuid4()), repo=repo, storage=storage
        )
        assert out.errors[0].code == "not_found"


# --- Editor uploads ---


class TestUploadImage:
    def test_stores_in_editor_folder(self, storage, upload_rules):
        out = run_upload_image(
            UploadImageInput(upload=ImageUpload("x.png", b"png")),
            storage=storage,
            rules=upload_rules,
        )
        assert out.success
        assert out.image.storage_id.startswith("blog/editor-images/")
        assert out.image.url.endswith(out.image.storage_id)

    def test_too_large(self, storage, upload_rules):
        out = run_upload_image(
            UploadImageInput(upload=ImageUpload("x.png", b"x" * 2048)),
            storage=storage,
            rules=upload_rules,
        )
        assert out.errors[0].code == "validation_error"

    def test_storage_failure(self, storage):
        storage.fail_on_store = True
        out = run_upload_image(UploadImageInput(upload=ImageUpload("x.png", b"x")), storage=storage)
        assert out.errors[0].code == "storage_error"


def test_normalize_category():
    assert normalize_category(None) == "other"
    assert normalize_category(" Travel ") == "travel"
    assert normalize_category("unknown") == "other"


def test_fixed_clock_advances():
    clock = FixedClock(NOW)
    clock.advance(minutes=5)
    assert clock.now_utc() == NOW + timedelta(minutes=5)


def test_in_memory_repo_rejects_duplicate_slug(repo):
    from src.core.ports.db import SlugConflictError

    repo.save(Post(owner_id=uuid4(), title="A", slug="a"))
    with pytest.raises(SlugConflictError):
        repo.save(Post(owner_id=uuid4(), title="A", slug="a"))
