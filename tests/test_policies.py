"""Unit tests for auth/policies.py -- ownership decisions.

Users: A owns post P; B (B != A) wrote comment C on P; X is a bystander.
"""

import pytest

from auth.policies import can_delete_comment, can_mutate_post, can_update_comment, ensure
from core.errors import PermissionDenied

A, B, X = 1, 2, 3


class TestPostPolicy:
    def test_author_may_mutate(self) -> None:
        assert can_mutate_post(A, A) is True

    def test_other_user_may_not_mutate(self) -> None:
        assert can_mutate_post(A, B) is False


class TestCommentPolicy:
    def test_comment_author_may_update(self) -> None:
        assert can_update_comment(B, B) is True

    def test_post_owner_may_not_update_someone_elses_comment(self) -> None:
        assert can_update_comment(B, A) is False

    def test_comment_author_may_delete(self) -> None:
        assert can_delete_comment(B, A, B) is True

    def test_post_owner_may_delete_comment_on_own_post(self) -> None:
        assert can_delete_comment(B, A, A) is True

    def test_bystander_may_neither_update_nor_delete(self) -> None:
        assert can_update_comment(B, X) is False
        assert can_delete_comment(B, A, X) is False

    def test_update_is_narrower_than_delete(self) -> None:
        """The post owner is exactly the identity for which the two rules disagree."""
        disagreements = [
            actor for actor in (A, B, X) if can_update_comment(B, actor) != can_delete_comment(B, A, actor)
        ]
        assert disagreements == [A]


class TestEnsure:
    def test_allowed_is_silent(self) -> None:
        ensure(True)

    def test_refused_raises_permission_denied(self) -> None:
        with pytest.raises(PermissionDenied, match="nope"):
            ensure(False, "nope")
