"""
Blog database models.

A single table of posts shared by every client app and target site.
"""
import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, Column, DateTime, Index, String, Text, Uuid
from sqlalchemy.dialects.postgresql import JSONB

from apps.shared.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Post(Base):
    """
    Blog post owned by a client app and rendered on a target site.

    Stores:
    - Ownership (app_id, org_id, user_id, campaign_id, run_id) - internal only
    - Content (title, slug, summary, markdown and HTML bodies, cover image)
    - Lifecycle (status, published_at, preview_token)
    - SEO metadata and provenance

    (slug, target_site) is indexed but not unique: explicit slugs are
    stored verbatim even when they collide.
    """
    __tablename__ = "blog_posts"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    # Ownership
    app_id = Column(Text, nullable=False)
    org_id = Column(Text)
    user_id = Column(Text)
    campaign_id = Column(Text)
    run_id = Column(Text)

    # Content
    title = Column(Text, nullable=False)
    slug = Column(Text, nullable=False)
    summary = Column(Text)
    body_markdown = Column(Text, nullable=False)
    body_html = Column(Text, nullable=False)
    cover_image_url = Column(Text)

    # Author
    author_name = Column(Text, nullable=False)
    author_avatar_url = Column(Text)

    # Targeting
    target_site = Column(Text, nullable=False)

    # Status
    status = Column(String(20), nullable=False, default="draft")
    published_at = Column(DateTime(timezone=True))
    preview_token = Column(Text)

    # SEO
    meta_description = Column(Text)
    og_image_url = Column(Text)
    tags = Column(JSON().with_variant(JSONB(), "postgresql"))  # ["python", "release-notes"]

    # Source tracking
    source_type = Column(Text)
    source_message_id = Column(Text)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        Index("idx_posts_app_id", "app_id"),
        Index("idx_posts_slug_site", "slug", "target_site"),
        Index("idx_posts_target_site_status", "target_site", "status"),
    )

    def __repr__(self) -> str:
        return f"<Post {self.id} {self.target_site}/{self.slug} [{self.status}]>"
