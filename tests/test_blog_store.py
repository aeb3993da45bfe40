"""Unit tests for blog/store.py -- BlogStore persistence.

Covers:
- users: uniqueness of username and email is enforced by the database
- posts: newest-first paging, count, content-only updates, delete idempotence
- comments: foreign key to posts, cascade on post delete, newest-first listing
- ownership columns cannot be changed through update_*
"""

import pytest
from sqlalchemy.exc import IntegrityError

from auth.models import User
from blog.models import Comment, Post
from blog.store import BlogStore


def _user(store: BlogStore, name: str) -> int:
    return store.create_user(User(username=name, email=f"{name}@example.com", password_hash="$2b$12$x"))


class TestUsers:
    def test_create_and_lookup(self, store: BlogStore) -> None:
        uid = _user(store, "alice")
        by_id = store.get_user_by_id(uid)
        assert by_id is not None and by_id.username == "alice"
        assert store.get_user_by_username("alice").id == uid
        assert store.get_user_by_email("alice@example.com").id == uid
        assert by_id.created_at

    def test_lookup_missing_returns_none(self, store: BlogStore) -> None:
        assert store.get_user_by_id(999) is None
        assert store.get_user_by_username("nobody") is None

    def test_username_is_unique(self, store: BlogStore) -> None:
        _user(store, "bob")
        with pytest.raises(IntegrityError):
            store.create_user(User(username="bob", email="other@example.com", password_hash="h"))

    def test_email_is_unique(self, store: BlogStore) -> None:
        _user(store, "carol")
        with pytest.raises(IntegrityError):
            store.create_user(User(username="carol2", email="carol@example.com", password_hash="h"))

    def test_get_users_by_ids(self, store: BlogStore) -> None:
        a, b = _user(store, "a1"), _user(store, "b1")
        found = store.get_users_by_ids({a, b, 999})
        assert set(found) == {a, b}
        assert store.get_users_by_ids(set()) == {}


class TestPosts:
    def test_list_is_newest_first_and_paged(self, store: BlogStore) -> None:
        uid = _user(store, "writer")
        ids = [store.create_post(Post(title=f"t{i}", content="c", author_id=uid)) for i in range(5)]
        assert store.count_posts() == 5
        first = store.list_posts(offset=0, limit=2)
        second = store.list_posts(offset=2, limit=2)
        assert [p.id for p in first] == [ids[4], ids[3]]
        assert [p.id for p in second] == [ids[2], ids[1]]

    def test_update_changes_content_only(self, store: BlogStore) -> None:
        uid = _user(store, "editor")
        pid = store.create_post(Post(title="old", content="old body", author_id=uid))
        assert store.update_post(pid, title="new", content="new body") is True
        post = store.get_post(pid)
        assert (post.title, post.content, post.author_id) == ("new", "new body", uid)

    def test_update_refuses_ownership_fields(self, store: BlogStore) -> None:
        uid = _user(store, "owner")
        other = _user(store, "thief")
        pid = store.create_post(Post(title="t", content="c", author_id=uid))
        with pytest.raises(ValueError):
            store.update_post(pid, author_id=other)
        assert store.get_post(pid).author_id == uid

    def test_update_missing_returns_false(self, store: BlogStore) -> None:
        assert store.update_post(12345, title="x") is False

    def test_author_must_exist(self, store: BlogStore) -> None:
        with pytest.raises(IntegrityError):
            store.create_post(Post(title="t", content="c", author_id=999))

    def test_second_delete_affects_nothing(self, store: BlogStore) -> None:
        uid = _user(store, "deleter")
        pid = store.create_post(Post(title="t", content="c", author_id=uid))
        assert store.delete_post(pid) is True
        assert store.delete_post(pid) is False
        assert store.get_post(pid) is None


class TestComments:
    def test_comment_requires_existing_post(self, store: BlogStore) -> None:
        uid = _user(store, "commenter")
        with pytest.raises(IntegrityError):
            store.create_comment(Comment(content="hi", author_id=uid, post_id=999))

    def test_list_and_count_for_post(self, store: BlogStore) -> None:
        uid = _user(store, "chatty")
        pid = store.create_post(Post(title="t", content="c", author_id=uid))
        other = store.create_post(Post(title="t2", content="c", author_id=uid))
        c1 = store.create_comment(Comment(content="one", author_id=uid, post_id=pid))
        c2 = store.create_comment(Comment(content="two", author_id=uid, post_id=pid))
        store.create_comment(Comment(content="elsewhere", author_id=uid, post_id=other))
        assert [c.id for c in store.list_comments_for_post(pid)] == [c2, c1]
        assert store.count_comments_for_post(pid) == 2

    def test_update_refuses_ownership_fields(self, store: BlogStore) -> None:
        uid = _user(store, "c_owner")
        pid = store.create_post(Post(title="t", content="c", author_id=uid))
        cid = store.create_comment(Comment(content="x", author_id=uid, post_id=pid))
        with pytest.raises(ValueError):
            store.update_comment(cid, post_id=pid + 1)
        assert store.update_comment(cid, content="edited") is True
        assert store.get_comment(cid).content == "edited"

    def test_deleting_post_cascades_to_comments(self, store: BlogStore) -> None:
        uid = _user(store, "cascader")
        pid = store.create_post(Post(title="t", content="c", author_id=uid))
        cids = [store.create_comment(Comment(content=str(i), author_id=uid, post_id=pid)) for i in range(3)]
        assert store.delete_post(pid) is True
        assert all(store.get_comment(cid) is None for cid in cids)
        assert store.count_comments_for_post(pid) == 0
