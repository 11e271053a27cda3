from __future__ import annotations

import asyncio

import pytest

from engine.search_service import SearchOrchestrator
from media_types import build_media_type_registry
from metadata.errors import NotRegistered, UpstreamError
from metadata.item_registry import MediaItemRegistry
from metadata.storage import MemoryStore
from metadata.types import SearchResult


class _FakeService:
    def __init__(self, service_id: str, category: str, *, results=None, details=None, error=None) -> None:
        self.id = service_id
        self.label = service_id.title()
        self.category = category
        self.results = results or []
        self.details = details
        self.error = error
        self.searches: list[tuple[str, str, object]] = []

    def get_supported_types(self) -> list[str]:
        return []

    def search(self, query, media_type, options):
        self.searches.append((query, media_type, options))
        if self.error is not None:
            raise self.error
        return SearchResult(results=[dict(item) for item in self.results], page=options.page, total_pages=1, total_count=len(self.results))

    def get_details(self, item_id, media_type):
        if self.error is not None:
            raise self.error
        return self.details


def _orchestrator(*services) -> SearchOrchestrator:
    cache = MediaItemRegistry(MemoryStore(), save_delay_seconds=0)
    return SearchOrchestrator(build_media_type_registry(), services, item_cache=cache)


def test_service_selection_follows_category_order() -> None:
    igdb = _FakeService("igdb", "game")
    rawg = _FakeService("rawg", "game")
    orchestrator = _orchestrator(igdb, rawg)

    assert [s.id for s in orchestrator.services_for_category("game")] == ["rawg", "igdb"]
    assert orchestrator.get_service("game").id == "rawg"
    assert orchestrator.get_service("game", "igdb").id == "igdb"
    assert orchestrator.get_service("game", "unknown").id == "rawg"
    with pytest.raises(LookupError):
        orchestrator.get_service("cinema")


def test_duplicate_service_ids_are_rejected() -> None:
    with pytest.raises(ValueError):
        _orchestrator(_FakeService("rawg", "game"), _FakeService("rawg", "game"))


def test_search_serializes_state_with_defaults() -> None:
    service = _FakeService("musicbrainz", "music", results=[{"id": "rg-1", "type": "album", "title": "25"}])
    orchestrator = _orchestrator(service)

    result = orchestrator.search(
        "album",
        {"query": "Adele", "selectedArtist": {"id": "a-1", "name": "Adele"}, "sort": "date_desc"},
        page=2,
        fuzzy=False,
    )

    query, media_type, options = service.searches[0]
    assert query == "Adele"
    assert media_type == "album"
    assert options.page == 2
    assert options.sort == "date_desc"
    assert options.fuzzy is False
    assert options.wildcard is True
    assert options.filters == {"artistId": "a-1", "albumPrimaryTypes": ["Album", "EP"]}
    assert result.results[0]["id"] == "rg-1"
    assert orchestrator.item_cache.get_item("rg-1")["title"] == "25"


def test_search_uses_service_scoped_filters() -> None:
    hardcover = _FakeService("hardcover", "book")
    orchestrator = _orchestrator(_FakeService("openlibrary", "book"), hardcover)

    orchestrator.search("book", {"query": "dune", "publisher": "Ace"}, service_id="hardcover")

    options = hardcover.searches[0][2]
    assert options.filters == {"excludeCompilations": ["true"]}


def test_search_returns_cache_merged_items() -> None:
    service = _FakeService("tmdb", "cinema", results=[{"id": "1", "type": "movie", "title": "Alien"}])
    orchestrator = _orchestrator(service)
    orchestrator.item_cache.register_item({"id": "1", "type": "movie", "image_url": "poster.jpg"})

    result = orchestrator.search_params("movie", {"query": "alien", "minYear": "1979"})

    assert service.searches[0][2].filters == {"minYear": "1979"}
    assert result.results[0] == {"id": "1", "type": "movie", "title": "Alien", "image_url": "poster.jpg"}


def test_mutating_search_results_leaves_cache_untouched() -> None:
    service = _FakeService("tmdb", "cinema", results=[{"id": "1", "type": "movie", "title": "Alien"}])
    orchestrator = _orchestrator(service)

    result = orchestrator.search_params("movie", {"query": "alien"})
    result.results[0]["title"] = "edited"

    assert orchestrator.item_cache.get_item("1")["title"] == "Alien"


def test_unknown_type_fails_loudly() -> None:
    orchestrator = _orchestrator()
    with pytest.raises(NotRegistered):
        orchestrator.search("podcast", {})


def test_upstream_errors_propagate_from_search() -> None:
    orchestrator = _orchestrator(_FakeService("tmdb", "cinema", error=UpstreamError(503)))
    with pytest.raises(UpstreamError):
        orchestrator.search("movie", {"query": "alien"})


def test_details_are_written_back_to_cache() -> None:
    details = {"id": "1", "type": "movie", "description": "In space."}
    orchestrator = _orchestrator(_FakeService("tmdb", "cinema", details=details))
    orchestrator.item_cache.register_item({"id": "1", "type": "movie", "title": "Alien"})

    assert orchestrator.get_details("1", "movie") == details
    assert orchestrator.item_cache.get_item("1")["details"] == details
    assert orchestrator.item_cache.get_item("1")["title"] == "Alien"


def test_detail_failure_yields_minimal_shape() -> None:
    orchestrator = _orchestrator(_FakeService("tmdb", "cinema", error=UpstreamError(500)))
    assert orchestrator.get_details("1", "movie") == {"id": "1", "type": "movie"}


def test_async_wrappers_run_concurrently() -> None:
    movies = _FakeService("tmdb", "cinema", results=[{"id": "m", "type": "movie"}], details={"id": "m", "type": "movie"})
    games = _FakeService("rawg", "game", results=[{"id": "g", "type": "game"}])
    orchestrator = _orchestrator(movies, games)

    async def _run():
        return await asyncio.gather(
            orchestrator.asearch("movie", {"query": "alien"}),
            orchestrator.asearch("game", {"query": "halo"}),
            orchestrator.aget_details("m", "movie"),
        )

    movie_result, game_result, details = asyncio.run(_run())
    assert movie_result.results[0]["id"] == "m"
    assert game_result.results[0]["id"] == "g"
    assert details == {"id": "m", "type": "movie"}
