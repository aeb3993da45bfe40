"""
blog/store.py -- SQLAlchemy-backed persistence layer for users, posts and comments.

Uses SQLAlchemy Core (not ORM) so the dataclasses in auth/models.py and
blog/models.py remain the authoritative domain representation. Swapping
SQLite for PostgreSQL is a connection string change, not a rewrite.

Pattern: Repository + Data Mapper. BlogStore is the repository (one clean
interface per entity). The _row_to_* functions are the mappers. Services
never touch SQL directly.

Consistency is delegated to the database:
  - UNIQUE(username) and UNIQUE(email) on users
  - posts.author_id, comments.author_id -> users.id
  - comments.post_id -> posts.id ON DELETE CASCADE
SQLite only enforces foreign keys when PRAGMA foreign_keys=ON is issued on
each connection, which _configure_sqlite() does.

Every method is a single-row statement or a single read; there are no
cross-row transactions here. A delete that races another delete affects zero
rows and reports False.

Security: all queries use bound parameters. No f-strings in SQL.

Usage:
    store = BlogStore()                                # SQLite default
    store = BlogStore("postgresql://user:pw@host/db")  # PostgreSQL
    user_id = store.create_user(user)
    post_id = store.create_post(Post(title="t", content="c", author_id=user_id))
    posts = store.list_posts(offset=0, limit=10)
    store.close()
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import (
    Column,
    ForeignKey,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    create_engine,
    event,
    func,
    select,
)
from sqlalchemy.engine import Engine

from auth.models import User
from blog.models import Comment, Post
from core.config import get_settings

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

metadata = MetaData()

_users = Table(
    "users",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("username", String(50), nullable=False, unique=True),
    Column("email", String(255), nullable=False, unique=True),
    Column("password_hash", Text, nullable=False),
    Column("created_at", String(32), nullable=False),
    Column("updated_at", String(32), nullable=False),
)

_posts = Table(
    "posts",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("title", String(255), nullable=False),
    Column("content", Text, nullable=False),
    Column("author_id", Integer, ForeignKey("users.id"), nullable=False, index=True),
    Column("created_at", String(32), nullable=False, index=True),
    Column("updated_at", String(32), nullable=False),
)

_comments = Table(
    "comments",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("content", Text, nullable=False),
    Column("author_id", Integer, ForeignKey("users.id"), nullable=False),
    Column("post_id", Integer, ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True),
    Column("created_at", String(32), nullable=False),
    Column("updated_at", String(32), nullable=False),
)


# ---------------------------------------------------------------------------
# SQLite connection setup
# ---------------------------------------------------------------------------


def _configure_sqlite(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode and foreign key enforcement.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool. Without foreign_keys=ON the cascade from
    posts to comments silently does nothing.
    """
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class BlogStore:
    """Repository for User, Post and Comment entities."""

    # Ownership columns (author_id, post_id) are deliberately absent: they are
    # fixed at creation. Unknown keys raise ValueError before any SQL runs.
    _POST_MUTABLE: set = {"title", "content"}
    _COMMENT_MUTABLE: set = {"content"}

    def __init__(self, db_url: Optional[str] = None) -> None:
        db_url = db_url or get_settings().database_url
        connect_args: dict = {}
        if db_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        self.engine: Engine = create_engine(db_url, connect_args=connect_args)
        if db_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _configure_sqlite)
        metadata.create_all(self.engine)

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    def create_user(self, user: User) -> int:
        """Insert a new user and return its assigned database ID.

        Raises sqlalchemy.exc.IntegrityError if the username or email is
        already taken. Callers catch it as a signal that a concurrent request
        registered the same name first.
        """
        now = _now_iso()
        with self.engine.connect() as conn:
            result = conn.execute(
                _users.insert().values(
                    username=user.username,
                    email=user.email,
                    password_hash=user.password_hash,
                    created_at=now,
                    updated_at=now,
                )
            )
            conn.commit()
            return result.inserted_primary_key[0]

    def get_user_by_id(self, user_id: int) -> Optional[User]:
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where(_users.c.id == user_id)).fetchone()
        return _row_to_user(row) if row is not None else None

    def get_user_by_username(self, username: str) -> Optional[User]:
        """Look up a user by exact username (case-sensitive). Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where(_users.c.username == username)).fetchone()
        return _row_to_user(row) if row is not None else None

    def get_user_by_email(self, email: str) -> Optional[User]:
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where(_users.c.email == email)).fetchone()
        return _row_to_user(row) if row is not None else None

    def get_users_by_ids(self, user_ids: set[int]) -> dict[int, User]:
        """Return {id: User} for the given ids. Used to embed author summaries in listings."""
        if not user_ids:
            return {}
        with self.engine.connect() as conn:
            rows = conn.execute(_users.select().where(_users.c.id.in_(user_ids))).fetchall()
        return {row.id: _row_to_user(row) for row in rows}

    # ------------------------------------------------------------------
    # Posts
    # ------------------------------------------------------------------

    def create_post(self, post: Post) -> int:
        """Insert a post and return its ID. author_id must reference an existing user."""
        now = _now_iso()
        with self.engine.connect() as conn:
            result = conn.execute(
                _posts.insert().values(
                    title=post.title,
                    content=post.content,
                    author_id=post.author_id,
                    created_at=now,
                    updated_at=now,
                )
            )
            conn.commit()
            return result.inserted_primary_key[0]

    def get_post(self, post_id: int) -> Optional[Post]:
        with self.engine.connect() as conn:
            row = conn.execute(_posts.select().where(_posts.c.id == post_id)).fetchone()
        return _row_to_post(row) if row is not None else None

    def update_post(self, post_id: int, **fields) -> bool:
        """Update content fields on a post.

        Accepted fields: title, content. Returns True if a row was updated,
        False if post_id was not found.
        """
        unknown = set(fields) - self._POST_MUTABLE
        if unknown:
            raise ValueError(f"Post fields cannot be updated: {unknown!r}")
        with self.engine.connect() as conn:
            result = conn.execute(
                _posts.update().where(_posts.c.id == post_id).values(updated_at=_now_iso(), **fields)
            )
            conn.commit()
        return result.rowcount > 0

    def delete_post(self, post_id: int) -> bool:
        """Hard-delete a post. Its comments go with it via ON DELETE CASCADE.

        Returns True if deleted, False if not found.
        """
        with self.engine.connect() as conn:
            result = conn.execute(_posts.delete().where(_posts.c.id == post_id))
            conn.commit()
        return result.rowcount > 0

    def list_posts(self, offset: int, limit: int) -> list[Post]:
        """Return one page of posts, newest first. id breaks created_at ties."""
        with self.engine.connect() as conn:
            rows = conn.execute(
                _posts.select()
                .order_by(_posts.c.created_at.desc(), _posts.c.id.desc())
                .offset(offset)
                .limit(limit)
            ).fetchall()
        return [_row_to_post(r) for r in rows]

    def count_posts(self) -> int:
        with self.engine.connect() as conn:
            result = conn.execute(select(func.count()).select_from(_posts)).scalar()
        return result or 0

    # ------------------------------------------------------------------
    # Comments
    # ------------------------------------------------------------------

    def create_comment(self, comment: Comment) -> int:
        """Insert a comment and return its ID.

        Raises sqlalchemy.exc.IntegrityError if post_id or author_id does not
        reference an existing row.
        """
        now = _now_iso()
        with self.engine.connect() as conn:
            result = conn.execute(
                _comments.insert().values(
                    content=comment.content,
                    author_id=comment.author_id,
                    post_id=comment.post_id,
                    created_at=now,
                    updated_at=now,
                )
            )
            conn.commit()
            return result.inserted_primary_key[0]

    def get_comment(self, comment_id: int) -> Optional[Comment]:
        with self.engine.connect() as conn:
            row = conn.execute(_comments.select().where(_comments.c.id == comment_id)).fetchone()
        return _row_to_comment(row) if row is not None else None

    def update_comment(self, comment_id: int, **fields) -> bool:
        """Update a comment's content. Returns True if a row was updated."""
        unknown = set(fields) - self._COMMENT_MUTABLE
        if unknown:
            raise ValueError(f"Comment fields cannot be updated: {unknown!r}")
        with self.engine.connect() as conn:
            result = conn.execute(
                _comments.update().where(_comments.c.id == comment_id).values(updated_at=_now_iso(), **fields)
            )
            conn.commit()
        return result.rowcount > 0

    def delete_comment(self, comment_id: int) -> bool:
        with self.engine.connect() as conn:
            result = conn.execute(_comments.delete().where(_comments.c.id == comment_id))
            conn.commit()
        return result.rowcount > 0

    def list_comments_for_post(self, post_id: int) -> list[Comment]:
        """Return all comments on a post, newest first."""
        with self.engine.connect() as conn:
            rows = conn.execute(
                _comments.select()
                .where(_comments.c.post_id == post_id)
                .order_by(_comments.c.created_at.desc(), _comments.c.id.desc())
            ).fetchall()
        return [_row_to_comment(r) for r in rows]

    def count_comments_for_post(self, post_id: int) -> int:
        with self.engine.connect() as conn:
            result = conn.execute(
                select(func.count()).select_from(_comments).where(_comments.c.post_id == post_id)
            ).scalar()
        return result or 0

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mappers (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_user(row) -> User:
    return User(
        id=row.id,
        username=row.username,
        email=row.email,
        password_hash=row.password_hash,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _row_to_post(row) -> Post:
    return Post(
        id=row.id,
        title=row.title,
        content=row.content,
        author_id=row.author_id,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _row_to_comment(row) -> Comment:
    return Comment(
        id=row.id,
        content=row.content,
        author_id=row.author_id,
        post_id=row.post_id,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )
