from datetime import datetime, timedelta, timezone

import pytest

from apps.blog import lifecycle
from apps.blog.lifecycle import PostStatus
from apps.blog.models import Post
from apps.shared.errors import Conflict

T0 = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)
T1 = T0 + timedelta(hours=1)
T2 = T0 + timedelta(hours=2)


def make_post(status="draft", published_at=None):
    return Post(
        title="Hello",
        slug="hello",
        status=status,
        published_at=published_at,
        preview_token="tok",
        created_at=T0,
        updated_at=T0,
    )


def test_initial_state_defaults_to_draft():
    state = lifecycle.initial_state(None, T0)

    assert state["status"] == "draft"
    assert state["published_at"] is None
    assert state["preview_token"]
    assert state["created_at"] == state["updated_at"] == T0


def test_initial_state_published_stamps_published_at():
    state = lifecycle.initial_state(PostStatus.PUBLISHED, T0)

    assert state["status"] == "published"
    assert state["published_at"] == T0


def test_initial_state_rejects_archived():
    with pytest.raises(Conflict):
        lifecycle.initial_state(PostStatus.ARCHIVED, T0)


def test_preview_tokens_are_unique():
    assert lifecycle.new_preview_token() != lifecycle.new_preview_token()


def test_publish_draft():
    post = make_post()

    lifecycle.publish(post, T1)

    assert post.status == "published"
    assert post.published_at == T1
    assert post.updated_at == T1


def test_publish_already_published_conflicts_and_keeps_published_at():
    post = make_post("published", published_at=T0)

    with pytest.raises(Conflict, match="already published"):
        lifecycle.publish(post, T1)

    assert post.published_at == T0
    assert post.updated_at == T0


def test_publish_archived_conflicts():
    post = make_post("archived")

    with pytest.raises(Conflict):
        lifecycle.publish(post, T1)
    assert post.status == "archived"


@pytest.mark.parametrize("status,published_at", [
    ("draft", None),
    ("published", T0),
    ("archived", T0),
])
def test_archive_keeps_published_at(status, published_at):
    post = make_post(status, published_at=published_at)

    lifecycle.archive(post, T1)

    assert post.status == "archived"
    assert post.published_at == published_at
    assert post.updated_at == T1


def test_apply_update_writes_fields_only():
    post = make_post()

    lifecycle.apply_update(post, {"title": "New title", "tags": ["a", "b"]}, T1)

    assert post.title == "New title"
    assert post.tags == ["a", "b"]
    assert post.status == "draft"
    assert post.updated_at == T1


def test_apply_update_rejects_lifecycle_fields():
    post = make_post()

    with pytest.raises(ValueError):
        lifecycle.apply_update(post, {"published_at": T1}, T1)
    with pytest.raises(ValueError):
        lifecycle.apply_update(post, {"status": "published"}, T1)
    assert post.updated_at == T0


def test_apply_update_status_goes_through_publish():
    post = make_post()

    lifecycle.apply_update(post, {"summary": "s"}, T1, status=PostStatus.PUBLISHED)

    assert post.status == "published"
    assert post.published_at == T1


def test_apply_update_same_status_is_noop():
    post = make_post("published", published_at=T0)

    lifecycle.apply_update(post, {}, T2, status=PostStatus.PUBLISHED)

    assert post.status == "published"
    assert post.published_at == T0
    assert post.updated_at == T2


@pytest.mark.parametrize("status", ["published", "archived"])
def test_apply_update_back_to_draft_conflicts_without_writing(status):
    post = make_post(status, published_at=T0)

    with pytest.raises(Conflict):
        lifecycle.apply_update(post, {"title": "Changed"}, T1, status=PostStatus.DRAFT)

    assert post.title == "Hello"
    assert post.status == status
    assert post.updated_at == T0


def test_apply_update_archive():
    post = make_post("published", published_at=T0)

    lifecycle.apply_update(post, {}, T1, status=PostStatus.ARCHIVED)

    assert post.status == "archived"
    assert post.published_at == T0
