from __future__ import annotations

import logging
import math
import os

from config.settings import RAWG_BASE_URL, RAWG_PAGE_SIZE
from metadata.errors import CredentialUnavailable
from metadata.providers.base import SearchOptions
from metadata.providers.http import ApiClient
from metadata.providers.schemas import (
    RAWGDeveloper,
    RAWGDeveloperList,
    RAWGGame,
    RAWGGameList,
    validate_payload,
)
from metadata.types import MediaDetails, MediaItem, SearchResult, compact, empty_result, year_from_date

logger = logging.getLogger(__name__)

SORT_ORDERING = {
    "rating_desc": "-rating",
    "rating_asc": "rating",
    "reviews_desc": "-ratings_count",
    "reviews_asc": "ratings_count",
    "date_desc": "-released",
    "date_asc": "released",
    "title_asc": "name",
    "title_desc": "-name",
}


def build_game_params(query: str, options: SearchOptions, *, include_filters: bool = True) -> dict[str, str]:
    params = {"page": str(max(1, int(options.page or 1))), "page_size": str(RAWG_PAGE_SIZE)}
    text = str(query or "").strip()
    if text:
        params["search"] = text
        params["search_precise"] = "true"
    ordering = SORT_ORDERING.get(options.sort or "relevance")
    if ordering:
        params["ordering"] = ordering
    if not include_filters:
        return params

    min_year = options.filter_value("minYear")
    max_year = options.filter_value("maxYear")
    if min_year or max_year:
        start = f"{min_year}-01-01" if min_year else "1970-01-01"
        end = f"{max_year}-12-31" if max_year else "2030-12-31"
        params["dates"] = f"{start},{end}"
    platform = options.filter_value("platform")
    if platform:
        params["platforms"] = platform
    tag = options.filter_value("tag")
    if tag:
        params["genres"] = tag.lower()
    return params


class RAWGService:
    id = "rawg"
    label = "RAWG"
    category = "game"

    def __init__(self, *, client: ApiClient | None = None, api_key: str | None = None) -> None:
        self._client = client or ApiClient("rawg", base_url=RAWG_BASE_URL)
        self._api_key = api_key

    def get_supported_types(self) -> list[str]:
        return ["game", "developer"]

    def _require_api_key(self) -> str:
        api_key = self._api_key or os.environ.get("RAWG_API_KEY")
        if not api_key:
            raise CredentialUnavailable(self.id, "RAWG_API_KEY is missing")
        return api_key

    def search(self, query: str, media_type: str, options: SearchOptions) -> SearchResult:
        if media_type not in ("game", "developer"):
            return empty_result(options.page)
        try:
            api_key = self._require_api_key()
        except CredentialUnavailable as exc:
            logger.warning("[RAWG] %s; returning no results", exc)
            return empty_result(options.page)

        is_developer = media_type == "developer"
        params = build_game_params(query, options, include_filters=not is_developer)
        params["key"] = api_key
        endpoint = "/developers" if is_developer else "/games"
        payload = self._client.get_json(endpoint, params=params)

        if is_developer:
            developers = validate_payload(RAWGDeveloperList, payload, "rawg developers")
            count = developers.count
            results = [self._map_developer(dev) for dev in developers.results]
        else:
            games = validate_payload(RAWGGameList, payload, "rawg games")
            count = games.count
            results = [self._map_game(game) for game in games.results]

        return SearchResult(
            results=results,
            page=max(1, int(options.page or 1)),
            total_pages=math.ceil(count / RAWG_PAGE_SIZE),
            total_count=count,
            is_server_sorted=(options.sort or "relevance") != "relevance",
        )

    def _map_game(self, game: RAWGGame) -> MediaItem:
        item_id = str(game.id)
        platforms = [entry.platform.name for entry in game.parent_platforms] if game.parent_platforms else None
        return compact(
            {
                "id": item_id,
                "mbid": item_id,
                "type": "game",
                "title": game.name,
                "year": year_from_date(game.released),
                "image_url": game.background_image,
                "rating": game.rating,
                "review_count": game.ratings_count,
                "developer": game.developers[0].name if game.developers else None,
                "platforms": platforms,
                "service_id": self.id,
            }
        )  # type: ignore[return-value]

    def _map_developer(self, dev: RAWGDeveloper) -> MediaItem:
        item_id = str(dev.id)
        return compact(
            {
                "id": item_id,
                "mbid": item_id,
                "type": "developer",
                "title": dev.name or "Unknown",
                "image_url": dev.image_background,
                "service_id": self.id,
            }
        )  # type: ignore[return-value]

    def get_details(self, item_id: str, media_type: str) -> MediaDetails:
        api_key = self._require_api_key()
        if media_type == "developer":
            payload = self._client.get_json(f"/developers/{item_id}", params={"key": api_key})
            dev = validate_payload(RAWGDeveloper, payload, "rawg developer details")
            return compact(
                {
                    "id": item_id,
                    "mbid": item_id,
                    "type": "developer",
                    "image_url": dev.image_background,
                    "description": dev.description,
                    "urls": [{"type": "RAWG", "url": f"https://rawg.io/developers/{dev.slug}"}],
                    "service_id": self.id,
                }
            )  # type: ignore[return-value]

        payload = self._client.get_json(f"/games/{item_id}", params={"key": api_key})
        game = validate_payload(RAWGGame, payload, "rawg game details")
        entries = game.parent_platforms or game.platforms
        tags = [genre.name for genre in game.genres]
        tags.extend([tag.name for tag in game.tags if tag.language == "eng"][:10])
        return compact(
            {
                "id": item_id,
                "mbid": item_id,
                "type": "game",
                "image_url": game.background_image,
                "date": game.released,
                "description": game.description_raw,
                "developer": game.developers[0].name if game.developers else None,
                "publisher": game.publishers[0].name if game.publishers else None,
                "platforms": [entry.platform.name for entry in entries] if entries else None,
                "metacritic": game.metacritic,
                "tags": tags or None,
                "urls": [{"type": "RAWG", "url": f"https://rawg.io/games/{game.slug}"}],
                "service_id": self.id,
            }
        )  # type: ignore[return-value]
