"""
Post lifecycle: draft -> published -> archived, and draft -> archived.

Transitions mutate the post in place and never move a post backwards.
Archived is terminal; archiving again only refreshes updated_at.
"""
import secrets
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from apps.shared.errors import Conflict


class PostStatus(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"


# Fields a general update may write. Status, published_at, preview_token,
# ownership and audit columns are never in here.
UPDATABLE_FIELDS = frozenset({
    "title",
    "slug",
    "summary",
    "body_markdown",
    "body_html",
    "cover_image_url",
    "author_name",
    "author_avatar_url",
    "target_site",
    "tags",
    "meta_description",
    "og_image_url",
    "source_type",
    "source_message_id",
})


def new_preview_token() -> str:
    return secrets.token_urlsafe(32)


def initial_state(requested: Optional[PostStatus], now: datetime) -> dict[str, Any]:
    """Lifecycle columns for a freshly created post."""
    status = requested or PostStatus.DRAFT
    if status == PostStatus.ARCHIVED:
        raise Conflict("Posts cannot be created as archived")
    return {
        "status": status.value,
        "published_at": now if status == PostStatus.PUBLISHED else None,
        "preview_token": new_preview_token(),
        "created_at": now,
        "updated_at": now,
    }


def publish(post, now: datetime) -> None:
    if post.status == PostStatus.PUBLISHED.value:
        raise Conflict("Post is already published")
    if post.status == PostStatus.ARCHIVED.value:
        raise Conflict("Archived posts cannot be published")

    post.status = PostStatus.PUBLISHED.value
    if post.published_at is None:
        post.published_at = now
    post.updated_at = now


def archive(post, now: datetime) -> None:
    post.status = PostStatus.ARCHIVED.value
    post.updated_at = now


def check_transition(current: str, target: PostStatus) -> None:
    """
    Raise Conflict if moving from current to target is not allowed.

    Staying in the same state is allowed and does nothing.
    """
    if current == target.value:
        return
    if target == PostStatus.DRAFT:
        raise Conflict(f"Cannot move a {current} post back to draft")
    if target == PostStatus.PUBLISHED and current == PostStatus.ARCHIVED.value:
        raise Conflict("Archived posts cannot be published")


def transition(post, target: PostStatus, now: datetime) -> None:
    """Move post to target through publish/archive. Same state is a no-op."""
    check_transition(post.status, target)
    if post.status == target.value:
        return
    if target == PostStatus.PUBLISHED:
        publish(post, now)
    else:
        archive(post, now)


def apply_update(post, fields: dict[str, Any], now: datetime, status: Optional[PostStatus] = None) -> None:
    """
    Write content/metadata fields onto post and bump updated_at.

    A requested status goes through the transition rules, checked before
    anything is written so a rejected update leaves the post untouched.
    """
    unknown = set(fields) - UPDATABLE_FIELDS
    if unknown:
        raise ValueError(f"Fields not updatable: {', '.join(sorted(unknown))}")
    if status is not None:
        check_transition(post.status, status)

    for key, value in fields.items():
        setattr(post, key, value)
    post.updated_at = now

    if status is not None:
        transition(post, status, now)
