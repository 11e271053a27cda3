from __future__ import annotations

import importlib
import sys

import pytest

fastapi = pytest.importorskip("fastapi")
from fastapi.testclient import TestClient

from engine.search_service import SearchOrchestrator
from media_types import build_media_type_registry
from metadata.errors import MalformedUpstreamResponse, UpstreamError
from metadata.item_registry import MediaItemRegistry
from metadata.storage import MemoryStore
from metadata.types import SearchResult


class _FakeService:
    def __init__(self, service_id: str, category: str) -> None:
        self.id = service_id
        self.label = service_id
        self.category = category
        self.error: Exception | None = None
        self.calls: list[tuple[str, str, object]] = []

    def get_supported_types(self) -> list[str]:
        return []

    def search(self, query, media_type, options):
        self.calls.append((query, media_type, options))
        if self.error is not None:
            raise self.error
        return SearchResult(
            results=[{"id": "1", "type": media_type, "title": query}],
            page=options.page,
            total_pages=1,
            total_count=1,
        )

    def get_details(self, item_id, media_type):
        if self.error is not None:
            raise self.error
        return {"id": item_id, "type": media_type, "description": "Found."}


def _build_client(monkeypatch, *services) -> TestClient:
    sys.modules.pop("api.main", None)
    module = importlib.import_module("api.main")
    module.app.router.on_startup.clear()
    module.app.router.on_shutdown.clear()
    cache = MediaItemRegistry(MemoryStore(), save_delay_seconds=0)
    module.app.state.search_service = SearchOrchestrator(build_media_type_registry(), services, item_cache=cache)
    return TestClient(module.app)


def test_search_passes_filters_and_flags(monkeypatch) -> None:
    rawg = _FakeService("rawg", "game")
    igdb = _FakeService("igdb", "game")
    client = _build_client(monkeypatch, rawg, igdb)

    resp = client.get(
        "/api/search",
        params=[
            ("category", "game"),
            ("type", "game"),
            ("query", "halo"),
            ("page", "2"),
            ("fuzzy", "false"),
            ("service", "igdb"),
            ("minYear", "2001"),
            ("platform", ""),
            ("tag", "shooter"),
            ("tag", "action"),
        ],
    )

    assert resp.status_code == 200
    assert resp.json() == {
        "results": [{"id": "1", "type": "game", "title": "halo"}],
        "page": 2,
        "total_pages": 1,
        "total_count": 1,
    }
    assert rawg.calls == []
    query, media_type, options = igdb.calls[0]
    assert query == "halo"
    assert options.fuzzy is False
    assert options.wildcard is True
    assert options.filters == {"minYear": "2001", "tag": ["shooter", "action"]}


def test_search_requires_type(monkeypatch) -> None:
    client = _build_client(monkeypatch)
    assert client.get("/api/search", params={"query": "x"}).status_code == 400


def test_unknown_type_is_not_found(monkeypatch) -> None:
    client = _build_client(monkeypatch)
    assert client.get("/api/search", params={"type": "podcast"}).status_code == 404
    assert client.get("/api/details", params={"id": "1", "type": "podcast"}).status_code == 404


def test_category_mismatch_is_rejected(monkeypatch) -> None:
    client = _build_client(monkeypatch, _FakeService("tmdb", "cinema"))
    resp = client.get("/api/search", params={"type": "movie", "category": "music"})
    assert resp.status_code == 400


def test_category_without_service_is_not_found(monkeypatch) -> None:
    client = _build_client(monkeypatch)
    assert client.get("/api/search", params={"type": "movie", "query": "alien"}).status_code == 404


@pytest.mark.parametrize("error", [UpstreamError(503, "https://api.example"), MalformedUpstreamResponse("tmdb search")])
def test_upstream_failures_map_to_bad_gateway(monkeypatch, error) -> None:
    service = _FakeService("tmdb", "cinema")
    service.error = error
    client = _build_client(monkeypatch, service)
    resp = client.get("/api/search", params={"type": "movie", "query": "alien"})
    assert resp.status_code == 502


def test_details_endpoint(monkeypatch) -> None:
    client = _build_client(monkeypatch, _FakeService("tmdb", "cinema"))

    resp = client.get("/api/details", params={"id": "42", "type": "movie", "category": "cinema"})

    assert resp.status_code == 200
    assert resp.json() == {"id": "42", "type": "movie", "description": "Found."}


def test_details_require_id_and_type(monkeypatch) -> None:
    client = _build_client(monkeypatch, _FakeService("tmdb", "cinema"))
    assert client.get("/api/details", params={"type": "movie"}).status_code == 400
    assert client.get("/api/details", params={"id": "1"}).status_code == 400


def test_details_failure_falls_back(monkeypatch) -> None:
    service = _FakeService("tmdb", "cinema")
    service.error = UpstreamError(500)
    client = _build_client(monkeypatch, service)

    resp = client.get("/api/details", params={"id": "42", "type": "movie"})

    assert resp.status_code == 200
    assert resp.json() == {"id": "42", "type": "movie"}
