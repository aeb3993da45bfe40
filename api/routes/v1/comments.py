"""
api/routes/v1/comments.py -- Comment endpoints.

Routes:
  GET    /api/v1/posts/{post_id}/comments    -- comments on a post, newest first (public)
  POST   /api/v1/posts/{post_id}/comments    -- add a comment (requires auth)
  PUT    /api/v1/comments/{comment_id}       -- edit content (comment author only)
  DELETE /api/v1/comments/{comment_id}       -- delete (comment author or post author)

Edit and delete have different ownership rules. The post owner can remove
comments on their post but cannot rewrite them. See auth/policies.py.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request, Response

from api.models import CommentListResponse, CommentResponse, CommentWrite
from auth.dependencies import require_identity
from auth.models import Identity
from blog.service import CommentService
from blog.store import BlogStore

router = APIRouter()


@router.get("/posts/{post_id}/comments", response_model=CommentListResponse)
def list_comments(request: Request, post_id: int) -> CommentListResponse:
    """List every comment on a post. 404 if the post does not exist."""
    store: BlogStore = request.app.state.store
    comments, total = CommentService(store).list_comments(post_id)
    authors = store.get_users_by_ids({c.author_id for c in comments})
    return CommentListResponse(
        comments=[CommentResponse.from_comment(c, authors) for c in comments],
        total=total,
    )


@router.post("/posts/{post_id}/comments", response_model=CommentResponse, status_code=201)
def create_comment(
    request: Request,
    post_id: int,
    body: CommentWrite,
    identity: Identity = Depends(require_identity),
) -> CommentResponse:
    store: BlogStore = request.app.state.store
    comment = CommentService(store).create_comment(post_id, body.content, identity.subject_id)
    return CommentResponse.from_comment(comment, store.get_users_by_ids({comment.author_id}))


@router.put("/comments/{comment_id}", response_model=CommentResponse)
def update_comment(
    request: Request,
    comment_id: int,
    body: CommentWrite,
    identity: Identity = Depends(require_identity),
) -> CommentResponse:
    store: BlogStore = request.app.state.store
    comment = CommentService(store).update_comment(comment_id, body.content, identity.subject_id)
    return CommentResponse.from_comment(comment, store.get_users_by_ids({comment.author_id}))


@router.delete("/comments/{comment_id}", status_code=204)
def delete_comment(
    request: Request,
    comment_id: int,
    identity: Identity = Depends(require_identity),
) -> Response:
    store: BlogStore = request.app.state.store
    CommentService(store).delete_comment(comment_id, identity.subject_id)
    return Response(status_code=204)
