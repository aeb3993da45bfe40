"""
tests/test_pagination.py -- GET /api/v1/posts paging against a known data set.

Lives in its own module so the module-scoped database holds exactly the 25
posts seeded here.
"""

from __future__ import annotations

import pytest

from auth.models import User
from auth.tokens import issue_token

TOTAL = 25


@pytest.fixture(scope="module")
def seeded(api_client):
    client, store = api_client
    uid = store.create_user(User(username="pager", email="pager@example.com", password_hash="$2b$12$x"))
    token = issue_token(uid, "pager")
    headers = {"Authorization": f"Bearer {token}"}
    ids = []
    for i in range(TOTAL):
        resp = client.post("/api/v1/posts", json={"title": f"post {i}", "content": "c"}, headers=headers)
        ids.append(resp.json()["id"])
    return client, ids


def test_first_page_is_newest(seeded):
    client, ids = seeded
    data = client.get("/api/v1/posts").json()
    assert data["pagination"] == {"page": 1, "page_size": 10, "total": TOTAL, "total_pages": 3}
    assert [p["id"] for p in data["posts"]] == list(reversed(ids))[:10]


def test_last_page_is_partial(seeded):
    client, ids = seeded
    data = client.get("/api/v1/posts?page=3&page_size=10").json()
    assert [p["id"] for p in data["posts"]] == list(reversed(ids))[20:]


def test_page_beyond_end_is_empty(seeded):
    client, _ = seeded
    data = client.get("/api/v1/posts?page=9").json()
    assert data["posts"] == []
    assert data["pagination"]["total"] == TOTAL


def test_out_of_range_equals_default(seeded):
    client, _ = seeded
    clamped = client.get("/api/v1/posts?page=0&page_size=1000").json()
    default = client.get("/api/v1/posts?page=1&page_size=10").json()
    assert clamped == default


def test_max_page_size_is_honoured(seeded):
    client, _ = seeded
    data = client.get("/api/v1/posts?page_size=100").json()
    assert data["pagination"]["page_size"] == 100
    assert len(data["posts"]) == TOTAL


def test_huge_page_number_is_empty_not_an_error(seeded):
    client, _ = seeded
    resp = client.get("/api/v1/posts?page=99999999999999999999")
    assert resp.status_code == 200
    data = resp.json()
    assert data["posts"] == []
    assert data["pagination"]["total"] == TOTAL
