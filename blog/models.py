"""
blog/models.py -- Domain dataclasses for blog content.

These are pure data containers with zero logic. Ownership rules live in
auth/policies.py; persistence lives in blog/store.py.

author_id and post_id are set once at creation. The store refuses to update
them (see BlogStore._POST_MUTABLE / _COMMENT_MUTABLE).
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class Post:
    """An article written by one user.

    id is None before the record is written to the database.
    """

    title: str
    content: str
    author_id: int
    id: Optional[int] = None
    created_at: str = ""  # ISO 8601, set by store on insert
    updated_at: str = ""


@dataclass
class Comment:
    """A reply attached to a post.

    Deleting the parent post deletes the comment with it (ON DELETE CASCADE).

    id is None before the record is written to the database.
    """

    content: str
    author_id: int
    post_id: int
    id: Optional[int] = None
    created_at: str = ""
    updated_at: str = ""


@dataclass
class Page:
    """One page of an ordered listing plus the numbers needed to page through it."""

    items: list
    page: int
    page_size: int
    total: int
    total_pages: int
