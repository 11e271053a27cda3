from __future__ import annotations

import pytest

from config.settings import TWITCH_AUTH_URL
from metadata.errors import UpstreamError
from metadata.providers.base import SearchOptions
from metadata.providers.credentials import TokenCache
from metadata.providers.igdb import IGDBService, build_franchise_body, build_games_body, sort_clause


class _FakeClient:
    def __init__(self, rows_by_endpoint: dict[str, list]) -> None:
        self.rows_by_endpoint = rows_by_endpoint
        self.token_requests = 0
        self.queries: list[tuple[str, dict, str]] = []
        self.fail_next_with: int | None = None

    def post_json(self, endpoint, *, params=None, headers=None, data=None, json_body=None):
        if endpoint == TWITCH_AUTH_URL:
            self.token_requests += 1
            assert params["grant_type"] == "client_credentials"
            return {"access_token": f"tok-{self.token_requests}", "expires_in": 5000, "token_type": "bearer"}
        self.queries.append((endpoint, dict(headers or {}), data))
        if self.fail_next_with is not None:
            status, self.fail_next_with = self.fail_next_with, None
            raise UpstreamError(status, endpoint)
        return self.rows_by_endpoint.get(endpoint, [])


def _service(client: _FakeClient) -> IGDBService:
    return IGDBService(client=client, client_id="cid", client_secret="secret", token_cache=TokenCache(clock=lambda: 0.0))


def test_sort_clause_mapping() -> None:
    assert sort_clause("rating_desc") == "total_rating desc"
    assert sort_clause("date_asc", franchise=True) == "created_at asc"
    assert sort_clause("relevance") is None


def test_games_body_uses_search_and_year_window() -> None:
    options = SearchOptions(filters={"minYear": "2000", "maxYear": "2001"}, sort="rating_desc")
    body = build_games_body("Half-Life", options, limit=20, offset=40)
    assert body.startswith("fields name, first_release_date")
    assert "limit 20; offset 40;" in body
    assert 'search "Half-Life";' in body
    # IGDB rejects sort together with search.
    assert "sort" not in body
    assert "where first_release_date >= 946684800 & first_release_date <= 1009756800;" in body


def test_games_body_without_query_sorts() -> None:
    body = build_games_body("", SearchOptions(sort="date_desc"), limit=20, offset=0)
    assert body.endswith(" sort first_release_date desc;")


def test_franchise_body_matching_modes() -> None:
    fuzzy = build_franchise_body("star wars", SearchOptions(), limit=20, offset=0)
    assert 'where name ~ *"star"* & name ~ *"wars"*;' in fuzzy
    assert fuzzy.endswith(" sort name asc;")

    exact = build_franchise_body("Halo", SearchOptions(fuzzy=False, wildcard=False), limit=20, offset=0)
    assert 'where name = "Halo";' in exact

    prefix = build_franchise_body('Ha"lo', SearchOptions(fuzzy=False, wildcard=True), limit=20, offset=0)
    assert 'where name ~ *"Halo"*;' in prefix


def test_search_fetches_token_once_and_maps_games() -> None:
    client = _FakeClient(
        {
            "/games": [
                {
                    "id": 7,
                    "name": "Half-Life",
                    "first_release_date": 910396800,
                    "cover": {"image_id": "co1"},
                    "total_rating": 92.5,
                    "involved_companies": [
                        {"company": {"name": "Sierra"}, "developer": False},
                        {"company": {"name": "Valve"}, "developer": True},
                    ],
                    "platforms": [{"name": "PC"}],
                }
            ]
        }
    )
    service = _service(client)

    first = service.search("half life", "game", SearchOptions())
    service.search("half life", "game", SearchOptions(page=2))

    assert client.token_requests == 1
    endpoint, headers, body = client.queries[0]
    assert endpoint == "/games"
    assert headers == {"Client-ID": "cid", "Authorization": "Bearer tok-1"}
    assert "offset 20;" in client.queries[1][2]
    assert first.total_pages == 100
    assert first.is_server_sorted is True
    item = first.results[0]
    assert item["id"] == "igdb-7"
    assert item["year"] == "1998"
    assert item["developer"] == "Valve"
    assert item["rating"] == 9.25
    assert item["image_url"] == "https://images.igdb.com/igdb/image/upload/t_cover_big/co1.jpg"


def test_unauthorized_response_refreshes_token_once() -> None:
    client = _FakeClient({"/franchises": [{"id": 3, "name": "Halo", "games": [1, {"id": 2, "cover": {"image_id": "h2"}}]}]})
    client.fail_next_with = 401
    service = _service(client)

    result = service.search("Halo", "franchise", SearchOptions())

    assert client.token_requests == 2
    assert len(client.queries) == 2
    item = result.results[0]
    assert item["id"] == "igdb-franchise-3"
    assert item["game_count"] == 2
    assert item["image_url"].endswith("/h2.jpg")


def test_other_upstream_errors_propagate() -> None:
    client = _FakeClient({})
    client.fail_next_with = 500
    with pytest.raises(UpstreamError):
        _service(client).search("Halo", "game", SearchOptions())


def test_missing_credentials_degrade_to_empty(monkeypatch) -> None:
    monkeypatch.delenv("IGDB_CLIENT_ID", raising=False)
    monkeypatch.delenv("IGDB_CLIENT_SECRET", raising=False)
    client = _FakeClient({})
    result = IGDBService(client=client).search("Halo", "game", SearchOptions())
    assert result.results == []
    assert client.token_requests == 0


def test_game_details_parse_prefixed_id() -> None:
    client = _FakeClient(
        {
            "/games": [
                {
                    "id": 7,
                    "name": "Half-Life",
                    "first_release_date": 910396800,
                    "summary": "Crowbar.",
                    "genres": [{"name": "Shooter"}],
                    "themes": [{"name": "Science fiction"}],
                    "url": "https://www.igdb.com/games/half-life",
                }
            ]
        }
    )

    details = _service(client).get_details("igdb-7", "game")

    assert "where id = 7;" in client.queries[0][2]
    assert details["date"] == "1998-11-07"
    assert details["description"] == "Crowbar."
    assert details["tags"] == ["Shooter", "Science fiction"]


def test_missing_details_raise_not_found() -> None:
    with pytest.raises(UpstreamError) as excinfo:
        _service(_FakeClient({})).get_details("igdb-franchise-9", "franchise")
    assert excinfo.value.status == 404
