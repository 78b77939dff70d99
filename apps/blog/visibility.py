"""
Who sees which posts, and which fields they see.

Internal callers (API key) get every status and every column. Public
callers only get published posts of one site, stripped of ownership,
provenance and the preview token. A valid preview token is the one way a
public caller can read a post that is not published.
"""
import hmac
from typing import Optional

from sqlalchemy import Select, and_, func, select

from apps.blog.lifecycle import PostStatus
from apps.blog.models import Post
from apps.blog.schemas import PublicPost
from apps.shared.errors import Unauthorized

INTERNAL_FIELDS = frozenset({
    "app_id",
    "org_id",
    "user_id",
    "campaign_id",
    "run_id",
    "preview_token",
    "source_type",
    "source_message_id",
})

DEFAULT_LIMIT = 20
DEFAULT_OFFSET = 0


def project_public(post: Post) -> PublicPost:
    return PublicPost.model_validate(post)


def internal_conditions(
    app_id: str,
    org_id: Optional[str] = None,
    status: Optional[PostStatus] = None,
    target_site: Optional[str] = None,
    campaign_id: Optional[str] = None,
):
    conditions = [Post.app_id == app_id]
    if org_id:
        conditions.append(Post.org_id == org_id)
    if status:
        conditions.append(Post.status == status.value)
    if target_site:
        conditions.append(Post.target_site == target_site)
    if campaign_id:
        conditions.append(Post.campaign_id == campaign_id)
    return and_(*conditions)


def internal_listing(where, limit: int = DEFAULT_LIMIT, offset: int = DEFAULT_OFFSET) -> Select:
    """Newest first by creation time."""
    return (
        select(Post)
        .where(where)
        .order_by(Post.created_at.desc())
        .limit(limit)
        .offset(offset)
    )


def internal_count(where) -> Select:
    return select(func.count()).select_from(Post).where(where)


def public_listing(target_site: str, limit: int = DEFAULT_LIMIT, offset: int = DEFAULT_OFFSET) -> Select:
    """Published posts of one site, most recently published first."""
    return (
        select(Post)
        .where(
            Post.target_site == target_site,
            Post.status == PostStatus.PUBLISHED.value,
        )
        .order_by(Post.published_at.desc())
        .limit(limit)
        .offset(offset)
    )


def public_by_slug(slug: str, target_site: str) -> Select:
    return (
        select(Post)
        .where(
            Post.slug == slug,
            Post.target_site == target_site,
            Post.status == PostStatus.PUBLISHED.value,
        )
        .limit(1)
    )


def check_preview_token(post: Post, token: Optional[str]) -> None:
    """
    Raise Unauthorized unless token matches the post's preview token.

    Only called once the post is known to exist; a missing post is
    NotFound, not Unauthorized.
    """
    if not token:
        raise Unauthorized("Preview token is required")
    if not post.preview_token or not hmac.compare_digest(post.preview_token.encode(), token.encode()):
        raise Unauthorized("Invalid preview token")
