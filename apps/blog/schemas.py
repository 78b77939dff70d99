"""
Pydantic schemas for the Blog API.

Request and response bodies use camelCase field names on the wire.
"""
from datetime import datetime, timezone
from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel

from apps.blog.lifecycle import PostStatus


class CamelModel(BaseModel):
    """Base schema: camelCase aliases, snake_case attributes."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


class CallerContext(CamelModel):
    """Which client app and run issued a mutation. Logged, never stored."""
    app_id: str = Field(..., min_length=1)
    run_id: str = Field(..., min_length=1)


class PostCreate(CamelModel):
    """Schema for creating a new post."""
    app_id: str = Field(..., min_length=1)
    run_id: Optional[str] = None
    org_id: Optional[str] = None
    user_id: Optional[str] = None
    campaign_id: Optional[str] = None
    title: str
    slug: Optional[str] = None  # blank means derive from title
    summary: Optional[str] = None
    body_markdown: str
    body_html: str
    cover_image_url: Optional[str] = None
    author_name: str
    author_avatar_url: Optional[str] = None
    target_site: str = Field(..., min_length=1)
    status: Optional[Literal["draft", "published"]] = None
    tags: Optional[list[str]] = None
    meta_description: Optional[str] = None
    og_image_url: Optional[str] = None
    source_type: Optional[str] = None
    source_message_id: Optional[str] = None


class PostUpdate(CallerContext):
    """Schema for updating a post. Everything except the caller context is optional."""
    title: Optional[str] = None
    slug: Optional[str] = Field(None, min_length=1)
    summary: Optional[str] = None
    body_markdown: Optional[str] = None
    body_html: Optional[str] = None
    cover_image_url: Optional[str] = None
    author_name: Optional[str] = None
    author_avatar_url: Optional[str] = None
    target_site: Optional[str] = Field(None, min_length=1)
    status: Optional[PostStatus] = None
    tags: Optional[list[str]] = None
    meta_description: Optional[str] = None
    og_image_url: Optional[str] = None
    source_type: Optional[str] = None
    source_message_id: Optional[str] = None

    @field_validator("title", "slug", "body_markdown", "body_html", "author_name", "target_site")
    @classmethod
    def not_null(cls, v):
        # Optional only in the sense of "may be omitted"; these columns are NOT NULL.
        if v is None:
            raise ValueError("may be omitted but not null")
        return v


class PublicPost(CamelModel):
    """Post as seen without an API key."""
    id: UUID
    title: str
    slug: str
    summary: Optional[str] = None
    body_markdown: str
    body_html: str
    cover_image_url: Optional[str] = None
    author_name: str
    author_avatar_url: Optional[str] = None
    target_site: str
    status: str
    published_at: Optional[datetime] = None
    meta_description: Optional[str] = None
    og_image_url: Optional[str] = None
    tags: Optional[list[str]] = None
    created_at: datetime
    updated_at: datetime

    @field_validator("published_at", "created_at", "updated_at")
    @classmethod
    def assume_utc(cls, v):
        # SQLite hands timestamps back without tzinfo; they are stored in UTC.
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v


class InternalPost(PublicPost):
    """Full post, internal endpoints only."""
    app_id: str
    org_id: Optional[str] = None
    user_id: Optional[str] = None
    campaign_id: Optional[str] = None
    run_id: Optional[str] = None
    preview_token: Optional[str] = None
    source_type: Optional[str] = None
    source_message_id: Optional[str] = None


class PostResponse(CamelModel):
    post: InternalPost


class PostListResponse(CamelModel):
    posts: list[InternalPost]
    total: int


class PublicPostResponse(CamelModel):
    post: PublicPost


class PublicPostListResponse(CamelModel):
    posts: list[PublicPost]


class SuccessResponse(CamelModel):
    success: Literal[True] = True


class ErrorResponse(BaseModel):
    error: str


class ValidationErrorDetails(BaseModel):
    formErrors: list[str]
    fieldErrors: dict[str, list[str]]


class ValidationErrorResponse(BaseModel):
    error: str
    details: Optional[ValidationErrorDetails] = None


class HealthResponse(BaseModel):
    status: str
    service: str
    database: str
