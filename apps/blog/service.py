"""
Post service: store access around the slug, lifecycle and visibility rules.

Every public method runs inside the caller's session and commits at most
once, after all checks have passed.
"""
import logging
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from apps.blog import lifecycle, visibility
from apps.blog.lifecycle import PostStatus
from apps.blog.models import Post, utcnow
from apps.blog.schemas import CallerContext, PostCreate, PostUpdate, PublicPost
from apps.blog.slugs import resolve_slug
from apps.shared.errors import NotFound

logger = logging.getLogger(__name__)

# Create-request fields copied straight onto the row
_CREATE_FIELDS = (
    "app_id", "run_id", "org_id", "user_id", "campaign_id",
    "title", "summary", "body_markdown", "body_html", "cover_image_url",
    "author_name", "author_avatar_url", "target_site", "tags",
    "meta_description", "og_image_url", "source_type", "source_message_id",
)


class PostService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def _slugs_with_prefix(self, target_site: str, prefix: str) -> list[str]:
        q = select(Post.slug).where(
            Post.target_site == target_site,
            Post.slug.startswith(prefix, autoescape=True),
        )
        res = await self.session.execute(q)
        return list(res.scalars().all())

    async def _get(self, post_id: str) -> Post:
        # A malformed id names no post
        try:
            key = UUID(post_id)
        except ValueError:
            raise NotFound("Post not found")
        post = await self.session.get(Post, key)
        if post is None:
            raise NotFound("Post not found")
        return post

    # ── Internal operations ────────────────────────────────────────────

    async def create_post(self, payload: PostCreate) -> Post:
        now = utcnow()
        requested = PostStatus(payload.status) if payload.status else None
        state = lifecycle.initial_state(requested, now)
        slug = await resolve_slug(payload.title, payload.slug, payload.target_site, self._slugs_with_prefix)

        post = Post(
            slug=slug,
            **{field: getattr(payload, field) for field in _CREATE_FIELDS},
            **state,
        )
        self.session.add(post)
        await self.session.commit()

        logger.info(
            f"Created post {post.id} ({post.target_site}/{post.slug}) "
            f"status={post.status} app={payload.app_id} run={payload.run_id}"
        )
        return post

    async def publish_post(self, post_id: str, caller: CallerContext) -> Post:
        post = await self._get(post_id)
        lifecycle.publish(post, utcnow())
        await self.session.commit()

        logger.info(f"Published post {post.id} app={caller.app_id} run={caller.run_id}")
        return post

    async def update_post(self, post_id: str, payload: PostUpdate) -> Post:
        post = await self._get(post_id)
        fields = payload.model_dump(exclude_unset=True, exclude={"app_id", "run_id", "status"})
        lifecycle.apply_update(post, fields, utcnow(), status=payload.status)
        await self.session.commit()

        logger.info(
            f"Updated post {post.id} fields={sorted(fields)} status={post.status} "
            f"app={payload.app_id} run={payload.run_id}"
        )
        return post

    async def archive_post(self, post_id: str, caller: Optional[CallerContext] = None) -> Post:
        post = await self._get(post_id)
        lifecycle.archive(post, utcnow())
        await self.session.commit()

        who = f"app={caller.app_id} run={caller.run_id}" if caller else "app=unknown"
        logger.info(f"Archived post {post.id} {who}")
        return post

    async def list_posts(
        self,
        app_id: str,
        org_id: Optional[str] = None,
        status: Optional[PostStatus] = None,
        target_site: Optional[str] = None,
        campaign_id: Optional[str] = None,
        limit: int = visibility.DEFAULT_LIMIT,
        offset: int = visibility.DEFAULT_OFFSET,
    ) -> tuple[list[Post], int]:
        where = visibility.internal_conditions(app_id, org_id, status, target_site, campaign_id)
        res = await self.session.execute(visibility.internal_listing(where, limit, offset))
        posts = list(res.scalars().all())
        total = (await self.session.execute(visibility.internal_count(where))).scalar_one()
        return posts, total

    # ── Public operations ──────────────────────────────────────────────

    async def list_public(
        self,
        target_site: str,
        limit: int = visibility.DEFAULT_LIMIT,
        offset: int = visibility.DEFAULT_OFFSET,
    ) -> list[PublicPost]:
        res = await self.session.execute(visibility.public_listing(target_site, limit, offset))
        return [visibility.project_public(post) for post in res.scalars().all()]

    async def get_public(self, slug: str, target_site: str) -> PublicPost:
        res = await self.session.execute(visibility.public_by_slug(slug, target_site))
        post = res.scalar_one_or_none()
        if post is None:
            raise NotFound("Post not found")
        return visibility.project_public(post)

    async def preview(self, post_id: str, token: Optional[str]) -> PublicPost:
        post = await self._get(post_id)
        visibility.check_preview_token(post, token)
        return visibility.project_public(post)
