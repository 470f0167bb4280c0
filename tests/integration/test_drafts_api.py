from __future__ import annotations

from unittest.mock import patch

import pytest

from docdrafts.services.store import StoreError

pytestmark = pytest.mark.integration


def _post_draft(client, name, content):
    return client.post("/api/drafts", json={"name": name, "content": content})


def test_add_draft(client):
    resp = _post_draft(client, "Roadmap", "first")
    assert resp.status_code == 200
    assert resp.get_json() == {"message": "Draft added successfully"}


@pytest.mark.parametrize(
    "kwargs",
    [
        {"data": "not json", "content_type": "application/json"},
        {"json": ["name", "content"]},
        {"json": {"content": "orphan"}},
        {"json": {"name": "", "content": "x"}},
        {"json": {"name": "A", "content": 12}},
    ],
)
def test_add_draft_rejects_bad_bodies(client, kwargs):
    resp = client.post("/api/drafts", **kwargs)
    assert resp.status_code == 400
    assert resp.mimetype == "text/plain"


def test_add_draft_store_failure(client, store):
    with patch.object(store, "create_draft", side_effect=StoreError("database is locked")):
        resp = _post_draft(client, "A", "x")
    assert resp.status_code == 500
    assert resp.get_data(as_text=True) == "database is locked"


def test_get_drafts_default_limit(client):
    _post_draft(client, "A", "a1")
    _post_draft(client, "B", "b1")
    _post_draft(client, "A", "a2")

    resp = client.get("/api/drafts")
    assert resp.status_code == 200
    drafts = resp.get_json()
    assert [(d["content"], d["versionNumber"]) for d in drafts] == [("a2", 2), ("b1", 1)]
    assert set(drafts[0]) == {"id", "documentId", "content", "versionNumber", "createdAt"}


def test_get_drafts_limit_zero_returns_all(client):
    for content in ("a1", "a2", "a3"):
        _post_draft(client, "A", content)

    resp = client.get("/api/drafts?limit=0")
    assert [d["content"] for d in resp.get_json()] == ["a3", "a2", "a1"]


def test_get_drafts_negative_limit_is_empty(client):
    _post_draft(client, "A", "a1")
    resp = client.get("/api/drafts?limit=-3")
    assert resp.status_code == 200
    assert resp.get_json() == []


def test_get_drafts_invalid_limit(client):
    resp = client.get("/api/drafts?limit=lots")
    assert resp.status_code == 400
    assert resp.get_data(as_text=True) == "Invalid limit parameter"


def test_search_drafts(client):
    _post_draft(client, "One", "alpha beta")
    _post_draft(client, "Two", "gamma")
    _post_draft(client, "Three", "beta gamma")

    resp = client.get("/api/drafts/search?text=beta")
    assert resp.status_code == 200
    assert [d["content"] for d in resp.get_json()] == ["beta gamma", "alpha beta"]


def test_search_drafts_requires_text(client):
    for url in ("/api/drafts/search", "/api/drafts/search?text="):
        resp = client.get(url)
        assert resp.status_code == 400
        assert resp.get_data(as_text=True) == "text parameter is required"


def test_documents_latest(client):
    _post_draft(client, "A", "a1")
    _post_draft(client, "B", "b1")
    _post_draft(client, "A", "a2")

    resp = client.get("/api/documents/latest")
    assert resp.status_code == 200
    documents = resp.get_json()
    assert [(d["id"], d["name"], d["latestVersion"]) for d in documents] == [(1, "A", 2), (2, "B", 1)]
    assert documents[0]["createdAt"].endswith("+00:00")


def test_documents_latest_store_failure(client, store):
    with patch.object(store, "get_all_documents_latest_versions", side_effect=StoreError("boom")):
        resp = client.get("/api/documents/latest")
    assert resp.status_code == 500
    assert resp.get_data(as_text=True) == "boom"


def test_unknown_route_is_404(client):
    resp = client.get("/api/nothing-here")
    assert resp.status_code == 404


def test_wrong_method_is_405(client):
    resp = client.delete("/api/drafts")
    assert resp.status_code == 405


@pytest.mark.parametrize("raw", [str(10**20), str(2**63), str(-(2**63) - 1)])
def test_get_drafts_limit_beyond_64_bits(client, raw):
    _post_draft(client, "A", "a1")
    resp = client.get(f"/api/drafts?limit={raw}")
    assert resp.status_code == 400
    assert resp.get_data(as_text=True) == "Invalid limit parameter"


def test_get_drafts_limit_at_64_bit_maximum(client):
    _post_draft(client, "A", "a1")
    resp = client.get(f"/api/drafts?limit={2**63 - 1}")
    assert resp.status_code == 200
    assert [d["content"] for d in resp.get_json()] == ["a1"]
