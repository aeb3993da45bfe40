"""
auth/policies.py -- Ownership rules for post and comment mutations.

Pure functions, no I/O. Callers load the target row first (a missing row is
NotFound, never a policy question), ask the policy, and only then write.

Inputs are always the stored author ids of the loaded rows and the
subject_id of the verified token. A user id taken from a request body must
never be passed in here.

Comment rules are asymmetric on purpose:
  update -- comment author only
  delete -- comment author, or the author of the post it is attached to
They are separate functions so each rule can be read and tested on its own.
"""

from __future__ import annotations

from core.errors import PermissionDenied


def can_mutate_post(post_author_id: int, acting_subject_id: int) -> bool:
    """Only a post's author may update or delete it."""
    return post_author_id == acting_subject_id


def can_update_comment(comment_author_id: int, acting_subject_id: int) -> bool:
    """Only a comment's author may edit its content."""
    return comment_author_id == acting_subject_id


def can_delete_comment(comment_author_id: int, post_author_id: int, acting_subject_id: int) -> bool:
    """A comment may be removed by its author or by the owner of the parent post."""
    return comment_author_id == acting_subject_id or post_author_id == acting_subject_id


def ensure(allowed: bool, message: str | None = None) -> None:
    """Raise PermissionDenied unless the policy decision allowed the action."""
    if not allowed:
        raise PermissionDenied(message)
