"""
blog/service.py -- Use-case orchestration for users, posts and comments.

Services sit between the route handlers and BlogStore. Every read or write
that a rule governs goes through a service; route handlers only read the
store themselves to embed author summaries in responses. Services never see
an HTTP request.

Mutation paths all follow the same order:
  1. load the target row           -- absent -> NotFound
  2. ask auth/policies.py          -- refused -> PermissionDenied
  3. issue exactly one write       -- zero rows affected -> NotFound
NotFound is therefore always decided before ownership, and a refused check
never reaches the store.

The acting user id passed in is the subject_id of the verified token. Route
handlers take it from the Identity the auth gate injected, never from the
request body.

List pagination is permissive: out-of-range page and page_size values are
clamped, never rejected.
"""

from __future__ import annotations

import logging
import math
from typing import Optional

from sqlalchemy.exc import IntegrityError

from auth.models import User
from auth.policies import can_delete_comment, can_mutate_post, can_update_comment, ensure
from auth.tokens import authenticate_user, hash_password, issue_token
from blog.models import Comment, Page, Post
from blog.store import BlogStore
from core.errors import Conflict, NotFound

logger = logging.getLogger("blogapi.blog")

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


def clamp_pagination(page: Optional[int], page_size: Optional[int]) -> tuple[int, int]:
    """Coerce raw pagination input into a usable (page, page_size).

    page below 1 (or missing) becomes 1. page_size outside [1, 100] (or
    missing) becomes the default of 10 -- it is reset, not clamped to the
    nearest bound.
    """
    if page is None or page < 1:
        page = 1
    if page_size is None or page_size < 1 or page_size > MAX_PAGE_SIZE:
        page_size = DEFAULT_PAGE_SIZE
    return page, page_size


def total_pages(total: int, page_size: int) -> int:
    return math.ceil(total / page_size)


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


class UserService:
    """Registration, login and profile lookup."""

    def __init__(self, store: BlogStore) -> None:
        self.store = store

    def register(self, username: str, email: str, password: str) -> User:
        """Create an account. Raises Conflict if the username or email is taken.

        The explicit lookups give a precise message in the common case. The
        UNIQUE constraints still decide the race where two requests register
        the same name at once; that surfaces as IntegrityError -> Conflict.
        """
        if self.store.get_user_by_username(username) is not None:
            raise Conflict("Username already exists.")
        if self.store.get_user_by_email(email) is not None:
            raise Conflict("Email already exists.")

        user = User(username=username, email=email, password_hash=hash_password(password))
        try:
            user_id = self.store.create_user(user)
        except IntegrityError as exc:
            raise Conflict("Username or email already exists.") from exc

        logger.info("Registered user id=%d", user_id)
        return self.get_profile(user_id)

    def login(self, username: str, password: str) -> tuple[User, str]:
        """Check credentials and issue a bearer token. Raises BadCredentials on failure."""
        user = authenticate_user(self.store, username, password)
        token = issue_token(user.id, user.username)
        logger.info("Issued token for user id=%d", user.id)
        return user, token

    def get_profile(self, user_id: int) -> User:
        user = self.store.get_user_by_id(user_id)
        if user is None:
            raise NotFound("User not found.")
        return user


# ---------------------------------------------------------------------------
# Posts
# ---------------------------------------------------------------------------


class PostService:
    def __init__(self, store: BlogStore) -> None:
        self.store = store

    def create_post(self, title: str, content: str, author_id: int) -> Post:
        try:
            post_id = self.store.create_post(Post(title=title, content=content, author_id=author_id))
        except IntegrityError as exc:
            # Token still verifies but its account row is gone.
            raise NotFound("User not found.") from exc
        logger.info("Created post id=%d author_id=%d", post_id, author_id)
        return self._load(post_id)

    def list_posts(self, page: Optional[int] = None, page_size: Optional[int] = None) -> Page:
        """Return one page of posts, newest first, with paging totals."""
        page, page_size = clamp_pagination(page, page_size)
        total = self.store.count_posts()
        offset = (page - 1) * page_size
        # No query past the last row; the OFFSET may not fit a SQLite INTEGER.
        items = self.store.list_posts(offset=offset, limit=page_size) if offset < total else []
        return Page(
            items=items,
            page=page,
            page_size=page_size,
            total=total,
            total_pages=total_pages(total, page_size),
        )

    def get_post(self, post_id: int) -> tuple[Post, list[Comment]]:
        """Return the post and its comments (newest first)."""
        post = self._load(post_id)
        return post, self.store.list_comments_for_post(post_id)

    def update_post(self, post_id: int, title: str, content: str, acting_id: int) -> Post:
        post = self._load(post_id)
        ensure(can_mutate_post(post.author_id, acting_id), "You don't have permission to update this post.")
        if not self.store.update_post(post_id, title=title, content=content):
            raise NotFound("Post not found.")
        return self._load(post_id)

    def delete_post(self, post_id: int, acting_id: int) -> None:
        """Delete a post and, through the store's cascade, all of its comments."""
        post = self._load(post_id)
        ensure(can_mutate_post(post.author_id, acting_id), "You don't have permission to delete this post.")
        if not self.store.delete_post(post_id):
            raise NotFound("Post not found.")
        logger.info("Deleted post id=%d by user id=%d", post_id, acting_id)

    def _load(self, post_id: int) -> Post:
        post = self.store.get_post(post_id)
        if post is None:
            raise NotFound("Post not found.")
        return post


# ---------------------------------------------------------------------------
# Comments
# ---------------------------------------------------------------------------


class CommentService:
    def __init__(self, store: BlogStore) -> None:
        self.store = store

    def create_comment(self, post_id: int, content: str, author_id: int) -> Comment:
        """Attach a comment to an existing post. Raises NotFound if the post is gone."""
        if self.store.get_post(post_id) is None:
            raise NotFound("Post not found.")
        try:
            comment_id = self.store.create_comment(Comment(content=content, author_id=author_id, post_id=post_id))
        except IntegrityError as exc:
            # Post deleted between the check and the insert.
            raise NotFound("Post not found.") from exc
        return self._load(comment_id)

    def list_comments(self, post_id: int) -> tuple[list[Comment], int]:
        if self.store.get_post(post_id) is None:
            raise NotFound("Post not found.")
        return self.store.list_comments_for_post(post_id), self.store.count_comments_for_post(post_id)

    def update_comment(self, comment_id: int, content: str, acting_id: int) -> Comment:
        """Edit a comment. Only its author may do this, not the post owner."""
        comment = self._load(comment_id)
        ensure(
            can_update_comment(comment.author_id, acting_id),
            "You don't have permission to update this comment.",
        )
        if not self.store.update_comment(comment_id, content=content):
            raise NotFound("Comment not found.")
        return self._load(comment_id)

    def delete_comment(self, comment_id: int, acting_id: int) -> None:
        """Delete a comment. Allowed for its author and for the parent post's author."""
        comment = self._load(comment_id)
        post = self.store.get_post(comment.post_id)
        if post is None:
            # Parent removed concurrently; the cascade took the comment too.
            raise NotFound("Comment not found.")
        ensure(
            can_delete_comment(comment.author_id, post.author_id, acting_id),
            "You don't have permission to delete this comment.",
        )
        if not self.store.delete_comment(comment_id):
            raise NotFound("Comment not found.")
        logger.info("Deleted comment id=%d by user id=%d", comment_id, acting_id)

    def _load(self, comment_id: int) -> Comment:
        comment = self.store.get_comment(comment_id)
        if comment is None:
            raise NotFound("Comment not found.")
        return comment
