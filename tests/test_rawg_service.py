from __future__ import annotations

from metadata.providers.base import SearchOptions
from metadata.providers.rawg import RAWGService, build_game_params


class _FakeClient:
    def __init__(self, payload) -> None:
        self.payload = payload
        self.calls: list[tuple[str, dict]] = []

    def get_json(self, endpoint, *, params=None, headers=None):
        self.calls.append((endpoint, dict(params or {})))
        return self.payload


def test_game_params_map_filters_and_sort() -> None:
    options = SearchOptions(
        page=3,
        sort="rating_desc",
        filters={"minYear": "2000", "platform": "4", "tag": "RPG"},
    )
    params = build_game_params("zelda", options)
    assert params == {
        "page": "3",
        "page_size": "20",
        "search": "zelda",
        "search_precise": "true",
        "ordering": "-rating",
        "dates": "2000-01-01,2030-12-31",
        "platforms": "4",
        "genres": "rpg",
    }


def test_relevance_has_no_ordering() -> None:
    params = build_game_params("", SearchOptions())
    assert "ordering" not in params
    assert "search" not in params


def test_missing_key_degrades_to_empty(monkeypatch) -> None:
    monkeypatch.delenv("RAWG_API_KEY", raising=False)
    client = _FakeClient({})
    assert RAWGService(client=client).search("zelda", "game", SearchOptions()).results == []
    assert client.calls == []


def test_game_search_maps_results() -> None:
    client = _FakeClient(
        {
            "count": 45,
            "results": [
                {
                    "id": 22511,
                    "slug": "zelda-botw",
                    "name": "Breath of the Wild",
                    "released": "2017-03-03",
                    "background_image": "https://media.rawg.io/botw.jpg",
                    "rating": 4.5,
                    "ratings_count": 3000,
                    "parent_platforms": [{"platform": {"id": 7, "name": "Nintendo"}}],
                }
            ],
        }
    )

    result = RAWGService(client=client, api_key="k").search("zelda", "game", SearchOptions(sort="date_desc"))

    endpoint, params = client.calls[0]
    assert endpoint == "/games"
    assert params["key"] == "k"
    assert result.total_pages == 3
    assert result.is_server_sorted is True
    item = result.results[0]
    assert item["id"] == "22511"
    assert item["year"] == "2017"
    assert item["platforms"] == ["Nintendo"]
    assert item["service_id"] == "rawg"


def test_developer_search_ignores_game_filters() -> None:
    client = _FakeClient({"count": 1, "results": [{"id": 1, "name": "Nintendo", "slug": "nintendo"}]})
    options = SearchOptions(filters={"minYear": "2000", "platform": "4"})

    result = RAWGService(client=client, api_key="k").search("nin", "developer", options)

    endpoint, params = client.calls[0]
    assert endpoint == "/developers"
    assert "dates" not in params
    assert "platforms" not in params
    assert result.is_server_sorted is False
    assert result.results[0]["title"] == "Nintendo"


def test_game_details_collect_tags_and_links() -> None:
    client = _FakeClient(
        {
            "id": 1,
            "slug": "zelda",
            "name": "Zelda",
            "description_raw": "Adventure.",
            "genres": [{"name": "Action"}],
            "tags": [{"name": "Open World", "language": "eng"}, {"name": "Otkrytyy mir", "language": "rus"}],
            "developers": [{"name": "Nintendo EPD"}],
            "publishers": [{"name": "Nintendo"}],
            "platforms": [{"platform": {"name": "Switch"}}],
        }
    )

    details = RAWGService(client=client, api_key="k").get_details("1", "game")

    assert details["tags"] == ["Action", "Open World"]
    assert details["developer"] == "Nintendo EPD"
    assert details["publisher"] == "Nintendo"
    assert details["platforms"] == ["Switch"]
    assert details["urls"] == [{"type": "RAWG", "url": "https://rawg.io/games/zelda"}]
