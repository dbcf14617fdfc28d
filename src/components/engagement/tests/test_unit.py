"""
Unit tests for Engagement component.
"""

from __future__ import annotations

import threading
from uuid import uuid4

import pytest

from src.adapters.memory import InMemoryPostRepo
from src.components.engagement.component import run_toggle_bookmark, run_toggle_like
from src.components.engagement.models import ToggleBookmarkInput, ToggleLikeInput
from src.domain.entities import Post


@pytest.fixture
def repo() -> InMemoryPostRepo:
    return InMemoryPostRepo()


@pytest.fixture
def post(repo: InMemoryPostRepo) -> Post:
    return repo.save(Post(owner_id=uuid4(), title="Liked", slug="liked"))


class TestToggleLike:
    def test_first_toggle_likes(self, repo, post):
        user = uuid4()
        out = run_toggle_like(ToggleLikeInput(post_id=post.id, user_id=user), repo=repo)

        assert out.success
        assert out.liked is True
        assert out.likes_count == 1
        assert repo.get_by_id(post.id).liked_users == [user]

    def test_second_toggle_restores(self, repo, post):
        user = uuid4()
        inp = ToggleLikeInput(post_id=post.id, user_id=user)
        run_toggle_like(inp, repo=repo)
        out = run_toggle_like(inp, repo=repo)

        assert out.liked is False
        assert out.likes_count == 0
        stored = repo.get_by_id(post.id)
        assert stored.liked_users == []
        assert stored.likes_count == 0

    def test_missing_post(self, repo):
        out = run_toggle_like(ToggleLikeInput(post_id=uuid4(), user_id=uuid4()), repo=repo)
        assert not out.success
        assert out.errors[0].code == "not_found"

    def test_bound_to_requester_rejects_other_user(self, repo, post):
        out = run_toggle_like(
            ToggleLikeInput(
                post_id=post.id, user_id=uuid4(), requester_id=uuid4(), bind_to_requester=True
            ),
            repo=repo,
        )
        assert out.errors[0].code == "forbidden"
        assert repo.get_by_id(post.id).likes_count == 0

    def test_bound_to_requester_allows_self(self, repo, post):
        user = uuid4()
        out = run_toggle_like(
            ToggleLikeInput(post_id=post.id, user_id=user, requester_id=user, bind_to_requester=True),
            repo=repo,
        )
        assert out.liked

    def test_concurrent_likes_from_distinct_users_all_land(self, repo, post):
        users = [uuid4() for _ in range(20)]
        threads = [
            threading.Thread(
                target=run_toggle_like,
                args=(ToggleLikeInput(post_id=post.id, user_id=u),),
                kwargs={"repo": repo},
            )
            for u in users
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        stored = repo.get_by_id(post.id)
        assert stored.likes_count == 20
        assert set(stored.liked_users) == set(users)


class TestToggleBookmark:
    def test_toggle_twice(self, repo, post):
        user = uuid4()
        inp = ToggleBookmarkInput(post_id=post.id, user_id=user)

        assert run_toggle_bookmark(inp, repo=repo).bookmarked is True
        assert repo.get_by_id(post.id).bookmarked_users == [user]
        assert run_toggle_bookmark(inp, repo=repo).bookmarked is False
        assert repo.get_by_id(post.id).bookmarked_users == []

    def test_does_not_touch_likes(self, repo, post):
        run_toggle_bookmark(ToggleBookmarkInput(post_id=post.id, user_id=uuid4()), repo=repo)
        assert repo.get_by_id(post.id).likes_count == 0

    def test_missing_post(self, repo):
        out = run_toggle_bookmark(
            ToggleBookmarkInput(post_id=uuid4(), user_id=uuid4()), repo=repo
        )
        assert out.errors[0].code == "not_found"
