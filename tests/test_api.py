"""
HTTP surface tests: routers wired to a SearchService over the fake catalog.
The app lifespan (Mongo/Redis connections) is not started.
"""
from __future__ import annotations

import pytest
from fastapi.testclient import TestClient
from pymongo.errors import OperationFailure

from catalog_search.api.deps import search_service
from catalog_search.api.v1.routers import health
from catalog_search.main import app, build_app


@pytest.fixture
def client(service):
    app.dependency_overrides[search_service] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_empty_search(client, collection):
    resp = client.get("/search", params={"q": "   "})
    assert resp.status_code == 200
    body = resp.json()
    assert body["products"] == []
    assert body["total"] == 0
    assert body["message"] == "Empty search query."
    assert collection.calls == []


def test_search_returns_ranked_products(client):
    resp = client.get("/search", params={"q": "choco", "limit": 2})
    assert resp.status_code == 200
    body = resp.json()
    assert body["query"] == "choco"
    assert body["total"] == 3
    assert [p["_id"] for p in body["products"]] == ["p3", "p2"]
    assert set(body["products"][0]) >= {"_id", "name", "price", "category", "images", "snippet", "score"}


def test_search_falls_back_transparently(client, collection):
    collection.fail_aggregate = OperationFailure("no text index")
    resp = client.get("/search", params={"q": "choco"})
    assert resp.status_code == 200
    assert resp.json()["message"] == "Search results from regex fallback."


def test_search_validates_paging(client):
    assert client.get("/search", params={"q": "choco", "page": 0}).status_code == 422
    assert client.get("/search", params={"q": "choco", "limit": 1000}).status_code == 422


def test_suggestions(client):
    resp = client.get("/search/suggestions", params={"q": "tea"})
    assert resp.status_code == 200
    suggestions = resp.json()["suggestions"]
    assert [s["name"] for s in suggestions] == ["Black Tea", "Green Tea"]
    assert set(suggestions[0]) == {"_id", "name", "category", "images", "snippet", "score"}


def test_suggestions_never_fail(client, collection):
    collection.fail_find = OperationFailure("down")
    resp = client.get("/search/suggestions", params={"q": "tea"})
    assert resp.status_code == 200
    assert resp.json() == {"suggestions": []}


def test_health_reports_unreachable_mongo(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    body = resp.json()
    assert body["checks"]["mongodb"].startswith("error")
    assert body["checks"]["redis"] == "skipped"
    assert body["status"] == "error"


def test_search_suggest_mode_drops_snippets(client):
    resp = client.get("/search", params={"q": "choco", "suggest": "true"})
    assert resp.status_code == 200
    products = resp.json()["products"]
    assert products
    assert all("snippet" not in p for p in products)


def test_search_routes_mount_under_api_prefix(service, settings):
    prefixed = build_app(settings.model_copy(update={"api_prefix": "/api/products"}))
    prefixed.dependency_overrides[search_service] = lambda: service
    client = TestClient(prefixed)
    assert client.get("/api/products/search", params={"q": "choco"}).json()["total"] == 3
    assert client.get("/api/products/search/suggestions", params={"q": "tea"}).status_code == 200
    assert client.get("/search", params={"q": "choco"}).status_code == 404


def test_health_resolves_git_sha_once(client, monkeypatch):
    calls = []

    def check_output(cmd):
        calls.append(cmd)
        return b"abc1234\n"

    monkeypatch.setattr(health.subprocess, "check_output", check_output)
    health._git_sha.cache_clear()
    try:
        versions = [client.get("/health").json()["checks"]["version"] for _ in range(2)]
    finally:
        health._git_sha.cache_clear()
    assert versions == ["abc1234", "abc1234"]
    assert len(calls) == 1
