"""
Blog Posting Service

Stores blog posts for several client apps and serves them to their sites.
Internal endpoints (X-API-Key) create, publish, update and archive posts.
Public endpoints list published posts per site and preview drafts by token.
"""
import os
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from apps.blog.lifecycle import PostStatus
from apps.blog.schemas import (
    CallerContext,
    ErrorResponse,
    HealthResponse,
    InternalPost,
    PostCreate,
    PostListResponse,
    PostResponse,
    PostUpdate,
    PublicPostListResponse,
    PublicPostResponse,
    SuccessResponse,
    ValidationErrorResponse,
)
from apps.blog.service import PostService
from apps.blog.visibility import DEFAULT_LIMIT, DEFAULT_OFFSET
from apps.shared.auth import get_api_key
from apps.shared.cors import setup_cors
from apps.shared.database import check_db_connection, get_db, init_db
from apps.shared.errors import register_error_handlers
from apps.shared.security_headers import setup_security_headers

logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())
logger = logging.getLogger(__name__)

PAGE_MAX = int(os.getenv("PUBLIC_PAGE_MAX", "100"))

# Error responses shared by the route declarations, keyed by status code.
ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Invalid request"},
    401: {"model": ErrorResponse, "description": "Unauthorized"},
    404: {"model": ErrorResponse, "description": "Post not found"},
    500: {"model": ErrorResponse, "description": "Internal server error"},
}
VALIDATION_RESPONSE = {"model": ValidationErrorResponse, "description": "Invalid request body"}


def error_responses(*codes: int, descriptions: Optional[dict[int, str]] = None) -> dict:
    """Pick entries from ERROR_RESPONSES, optionally with route-specific descriptions."""
    picked = {code: dict(ERROR_RESPONSES[code]) for code in codes}
    for code, description in (descriptions or {}).items():
        picked[code]["description"] = description
    return picked


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db()
    logger.info("Blog posting service started")
    yield


app = FastAPI(
    title="Blog Posting Service",
    version="1.0.0",
    description="Blog post storage for client apps, with public reads and draft previews",
    lifespan=lifespan,
)

setup_cors(app)
setup_security_headers(app, public_prefixes=("/posts/public",))
register_error_handlers(app)

router = APIRouter(prefix="/posts", tags=["posts"])


async def get_service(db: AsyncSession = Depends(get_db)) -> PostService:
    return PostService(db)


@app.get("/health", response_model=HealthResponse, tags=["health"])
async def health():
    """Health check endpoint."""
    db_connected = await check_db_connection()
    return {
        "status": "ok" if db_connected else "degraded",
        "service": "blog",
        "database": "connected" if db_connected else "disconnected",
    }


# ──────────────────────────────────────────────────────────────────────────────
# Public endpoints (no auth required)
# ──────────────────────────────────────────────────────────────────────────────

@router.get(
    "/public",
    response_model=PublicPostListResponse,
    responses=error_responses(400, 500, descriptions={400: "Missing required query parameter"}),
)
async def list_public_posts(
    target_site: str = Query(..., alias="targetSite", min_length=1),
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=PAGE_MAX),
    offset: int = Query(DEFAULT_OFFSET, ge=0),
    svc: PostService = Depends(get_service),
):
    """Published posts for a site, most recently published first."""
    posts = await svc.list_public(target_site, limit=limit, offset=offset)
    return {"posts": posts}


@router.get(
    "/public/{slug}",
    response_model=PublicPostResponse,
    responses=error_responses(400, 404, 500, descriptions={400: "Missing required query parameter"}),
)
async def get_public_post(
    slug: str,
    target_site: str = Query(..., alias="targetSite", min_length=1),
    svc: PostService = Depends(get_service),
):
    """Single published post by slug."""
    return {"post": await svc.get_public(slug, target_site)}


@router.get(
    "/preview/{post_id}",
    response_model=PublicPostResponse,
    responses=error_responses(401, 404, 500, descriptions={401: "Missing or invalid preview token"}),
)
async def preview_post(
    post_id: str,
    token: Optional[str] = Query(None),
    svc: PostService = Depends(get_service),
):
    """Any post, whatever its status, for holders of its preview token."""
    return {"post": await svc.preview(post_id, token)}


# ──────────────────────────────────────────────────────────────────────────────
# Internal endpoints (API key required)
# ──────────────────────────────────────────────────────────────────────────────

@router.get(
    "",
    response_model=PostListResponse,
    responses=error_responses(400, 401, 500, descriptions={400: "Missing required query parameter"}),
)
async def list_posts(
    app_id: str = Query(..., alias="appId", min_length=1),
    org_id: Optional[str] = Query(None, alias="orgId"),
    status: Optional[PostStatus] = Query(None),
    target_site: Optional[str] = Query(None, alias="targetSite"),
    campaign_id: Optional[str] = Query(None, alias="campaignId"),
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=PAGE_MAX),
    offset: int = Query(DEFAULT_OFFSET, ge=0),
    api_key: str = Depends(get_api_key),
    svc: PostService = Depends(get_service),
):
    """All posts of an app, any status, newest first, with the total match count."""
    posts, total = await svc.list_posts(
        app_id,
        org_id=org_id,
        status=status,
        target_site=target_site,
        campaign_id=campaign_id,
        limit=limit,
        offset=offset,
    )
    return {"posts": [InternalPost.model_validate(p) for p in posts], "total": total}


@router.post(
    "",
    response_model=PostResponse,
    status_code=201,
    responses={**error_responses(401, 500), 400: VALIDATION_RESPONSE},
)
async def create_post(
    payload: PostCreate,
    api_key: str = Depends(get_api_key),
    svc: PostService = Depends(get_service),
):
    """Create a post. Status defaults to draft; the slug is derived from the title unless given."""
    return {"post": InternalPost.model_validate(await svc.create_post(payload))}


@router.post(
    "/{post_id}/publish",
    response_model=PostResponse,
    responses=error_responses(400, 401, 404, 500, descriptions={400: "Post already published or archived"}),
)
async def publish_post(
    post_id: str,
    caller: CallerContext,
    api_key: str = Depends(get_api_key),
    svc: PostService = Depends(get_service),
):
    """Change a draft to published."""
    return {"post": InternalPost.model_validate(await svc.publish_post(post_id, caller))}


@router.patch(
    "/{post_id}",
    response_model=PostResponse,
    responses={**error_responses(401, 404, 500), 400: VALIDATION_RESPONSE},
)
async def update_post(
    post_id: str,
    payload: PostUpdate,
    api_key: str = Depends(get_api_key),
    svc: PostService = Depends(get_service),
):
    """
    Update content and metadata fields.

    A status in the body is applied through the publish/archive rules,
    so it can never move a post back to draft.
    """
    return {"post": InternalPost.model_validate(await svc.update_post(post_id, payload))}


@router.delete(
    "/{post_id}",
    response_model=SuccessResponse,
    responses=error_responses(401, 404, 500),
)
async def archive_post(
    post_id: str,
    caller: Optional[CallerContext] = None,
    api_key: str = Depends(get_api_key),
    svc: PostService = Depends(get_service),
):
    """Archive a post (soft delete). Posts are never removed."""
    await svc.archive_post(post_id, caller)
    return {"success": True}


app.include_router(router)
