"""
tests/conftest.py -- Shared test fixtures for the blog API tests.

This module provides:
  - store: a fresh in-memory BlogStore per test (unit tests)
  - api_client: TestClient over the real app with a patched lifespan
  - make_user: factory that inserts a user and returns (user_id, token)

Design: Named shared-memory SQLite URIs (not plain :memory:) are required for
the TestClient fixture because route handlers run in a thread pool. Plain
:memory: DBs are per-connection and would present a blank schema to each
worker thread. The named URI format (file:name?mode=memory&cache=shared&uri=true)
shares one in-memory instance across all connections in the same process.

The DEBUG env var must be set before any auth module import so get_settings()
auto-generates SECRET_KEY in dev mode rather than raising ValueError.
"""

from __future__ import annotations

import itertools
import os
from collections.abc import Callable, Generator
from contextlib import asynccontextmanager

# CRITICAL: Set DEBUG before any auth/core import so get_settings() can
# auto-generate SECRET_KEY in dev mode instead of raising ValueError.
os.environ.setdefault("DEBUG", "true")

import pytest
from fastapi.testclient import TestClient

from api.main import app
from auth.models import User
from auth.tokens import hash_password, issue_token
from blog.store import BlogStore

TEST_PASSWORD = "password123"

# bcrypt is slow on purpose; hash once and share the digest across users.
_TEST_PASSWORD_HASH = hash_password(TEST_PASSWORD)

_user_seq = itertools.count(1)


def _patch_lifespan(store: BlogStore):
    """Return an async context manager that replaces the real lifespan.

    Wires the pre-created test store into app.state so TestClient routes see
    an isolated database rather than the default SQLite file.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.store = store
        yield

    return test_lifespan


@pytest.fixture
def store() -> Generator[BlogStore, None, None]:
    """Fresh in-memory BlogStore, discarded after the test."""
    s = BlogStore("sqlite:///:memory:")
    yield s
    s.close()


@pytest.fixture
def make_user() -> Callable[..., tuple[int, str]]:
    """Return a factory: make_user(store, username=None) -> (user_id, bearer_token).

    Users are inserted directly through the store with a shared password
    hash, so the factory is cheap enough to call many times per test.
    """

    def _make(s: BlogStore, username: str | None = None) -> tuple[int, str]:
        n = next(_user_seq)
        name = username or f"user{n}"
        uid = s.create_user(User(username=name, email=f"{name}@example.com", password_hash=_TEST_PASSWORD_HASH))
        return uid, issue_token(uid, name)

    return _make


@pytest.fixture(scope="module")
def api_client(request) -> Generator[tuple[TestClient, BlogStore], None, None]:
    """Yield (client, store) for API integration tests.

    The TestClient uses the real FastAPI app with a patched lifespan so
    tests hit real route handlers, dependencies and exception handlers but
    use an isolated in-memory store. One database per test module.
    """
    db_name = request.module.__name__.replace(".", "_")
    store = BlogStore(f"sqlite:///file:{db_name}?mode=memory&cache=shared&uri=true")
    app.router.lifespan_context = _patch_lifespan(store)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield client, store

    store.close()
