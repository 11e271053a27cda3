from __future__ import annotations

import pytest

from metadata.errors import CredentialUnavailable
from metadata.providers.base import SearchOptions
from metadata.providers.tmdb import TMDBService


class _FakeClient:
    def __init__(self, payload) -> None:
        self.payload = payload
        self.calls: list[tuple[str, dict]] = []

    def get_json(self, endpoint, *, params=None, headers=None):
        self.calls.append((endpoint, dict(params or {})))
        return self.payload


_SEARCH_PAYLOAD = {
    "page": 1,
    "total_pages": 4,
    "total_results": 61,
    "results": [
        {"id": 348, "title": "Alien", "release_date": "1979-05-25", "poster_path": "/alien.jpg", "vote_average": 8.1},
        {"id": 679, "title": "Aliens", "release_date": "1986-07-18", "vote_count": 9000},
        {"id": 1, "title": "Undated"},
    ],
}


def test_missing_api_key_degrades_to_empty(monkeypatch) -> None:
    monkeypatch.delenv("TMDB_API_KEY", raising=False)
    client = _FakeClient(_SEARCH_PAYLOAD)
    result = TMDBService(client=client).search("Alien", "movie", SearchOptions())
    assert result.results == []
    assert client.calls == []


def test_search_maps_results(monkeypatch) -> None:
    monkeypatch.setenv("TMDB_API_KEY", "env-key")
    client = _FakeClient(_SEARCH_PAYLOAD)

    result = TMDBService(client=client).search(" Alien ", "movie", SearchOptions(page=1))

    assert client.calls == [("/search/movie", {"query": "Alien", "page": 1, "api_key": "env-key"})]
    assert result.total_count == 61
    assert result.total_pages == 4
    first = result.results[0]
    assert first == {
        "id": "348",
        "mbid": "348",
        "type": "movie",
        "title": "Alien",
        "year": "1979",
        "image_url": "https://image.tmdb.org/t/p/w500/alien.jpg",
        "rating": 8.1,
        "service_id": "tmdb",
    }


def test_year_filter_applies_to_page() -> None:
    client = _FakeClient(_SEARCH_PAYLOAD)
    options = SearchOptions(filters={"minYear": "1980"})
    result = TMDBService(client=client, api_key="k").search("Alien", "movie", options)
    assert [item["title"] for item in result.results] == ["Aliens"]


def test_unsupported_type_or_blank_query_is_empty() -> None:
    client = _FakeClient(_SEARCH_PAYLOAD)
    service = TMDBService(client=client, api_key="k")
    assert service.search("Alien", "game", SearchOptions()).results == []
    assert service.search("  ", "movie", SearchOptions()).results == []
    assert client.calls == []


def test_person_details() -> None:
    client = _FakeClient(
        {"id": 5, "name": "Sigourney Weaver", "profile_path": "/sw.jpg", "biography": "Actor.", "genres": []}
    )
    details = TMDBService(client=client, api_key="k").get_details("5", "person")
    assert client.calls[0][0] == "/person/5"
    assert details["description"] == "Actor."
    assert details["image_url"] == "https://image.tmdb.org/t/p/w500/sw.jpg"
    assert details["urls"] == [{"type": "TMDB", "url": "https://www.themoviedb.org/person/5"}]
    assert "tags" not in details


def test_details_without_key_raise(monkeypatch) -> None:
    monkeypatch.delenv("TMDB_API_KEY", raising=False)
    with pytest.raises(CredentialUnavailable):
        TMDBService(client=_FakeClient({})).get_details("1", "movie")
