"""
api/routes/v1/posts.py -- Post endpoints.

Routes:
  GET    /api/v1/posts              -- paginated list, newest first (optional auth)
  GET    /api/v1/posts/{post_id}    -- post detail with comments (optional auth)
  POST   /api/v1/posts              -- create (requires auth)
  PUT    /api/v1/posts/{post_id}    -- update title/content (author only)
  DELETE /api/v1/posts/{post_id}    -- delete with its comments (author only)

Read endpoints use optional_identity: a bad or missing token never blocks a
read. The response does not vary by caller today.

Pagination: page and page_size arrive as raw strings and are coerced, not
validated. "abc", 0 and 1000 all fall back to the defaults rather than
producing a 422.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Request, Response

from api.models import CommentResponse, Pagination, PostDetailResponse, PostListResponse, PostResponse, PostWrite
from auth.dependencies import optional_identity, require_identity
from auth.models import Identity
from blog.service import PostService
from blog.store import BlogStore

router = APIRouter()


def _parse_int(raw: Optional[str]) -> Optional[int]:
    try:
        return int(raw) if raw is not None else None
    except ValueError:
        return None


@router.get("/posts", response_model=PostListResponse)
def list_posts(
    request: Request,
    page: Optional[str] = None,
    page_size: Optional[str] = None,
    identity: Optional[Identity] = Depends(optional_identity),
) -> PostListResponse:
    """Return one page of posts with pagination totals."""
    store: BlogStore = request.app.state.store
    result = PostService(store).list_posts(_parse_int(page), _parse_int(page_size))
    authors = store.get_users_by_ids({p.author_id for p in result.items})
    return PostListResponse(
        posts=[PostResponse.from_post(p, authors) for p in result.items],
        pagination=Pagination(
            page=result.page,
            page_size=result.page_size,
            total=result.total,
            total_pages=result.total_pages,
        ),
    )


@router.get("/posts/{post_id}", response_model=PostDetailResponse)
def get_post(
    request: Request,
    post_id: int,
    identity: Optional[Identity] = Depends(optional_identity),
) -> PostDetailResponse:
    store: BlogStore = request.app.state.store
    post, comments = PostService(store).get_post(post_id)
    authors = store.get_users_by_ids({post.author_id} | {c.author_id for c in comments})
    base = PostResponse.from_post(post, authors)
    return PostDetailResponse(
        **base.model_dump(),
        comments=[CommentResponse.from_comment(c, authors) for c in comments],
    )


@router.post("/posts", response_model=PostResponse, status_code=201)
def create_post(
    request: Request,
    body: PostWrite,
    identity: Identity = Depends(require_identity),
) -> PostResponse:
    """Create a post owned by the token's subject."""
    store: BlogStore = request.app.state.store
    post = PostService(store).create_post(body.title, body.content, identity.subject_id)
    return PostResponse.from_post(post, store.get_users_by_ids({post.author_id}))


@router.put("/posts/{post_id}", response_model=PostResponse)
def update_post(
    request: Request,
    post_id: int,
    body: PostWrite,
    identity: Identity = Depends(require_identity),
) -> PostResponse:
    """Replace title and content. 404 if missing, 403 if the caller is not the author."""
    store: BlogStore = request.app.state.store
    post = PostService(store).update_post(post_id, body.title, body.content, identity.subject_id)
    return PostResponse.from_post(post, store.get_users_by_ids({post.author_id}))


@router.delete("/posts/{post_id}", status_code=204)
def delete_post(
    request: Request,
    post_id: int,
    identity: Identity = Depends(require_identity),
) -> Response:
    """Delete a post and all of its comments. 404 if missing, 403 if not the author."""
    store: BlogStore = request.app.state.store
    PostService(store).delete_post(post_id, identity.subject_id)
    return Response(status_code=204)
