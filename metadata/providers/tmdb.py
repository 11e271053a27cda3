from __future__ import annotations

import logging
import os

from config.settings import TMDB_BASE_URL, TMDB_IMAGE_BASE_URL
from metadata.errors import CredentialUnavailable
from metadata.providers.base import SearchOptions
from metadata.providers.http import ApiClient
from metadata.providers.schemas import TMDBDetails, TMDBResult, TMDBSearchResponse, validate_payload
from metadata.types import MediaDetails, MediaItem, SearchResult, compact, empty_result, year_from_date

logger = logging.getLogger(__name__)

_SUPPORTED_TYPES = ("movie", "tv", "person")


def _image_url(path: str | None) -> str | None:
    return f"{TMDB_IMAGE_BASE_URL}{path}" if path else None


class TMDBService:
    id = "tmdb"
    label = "TMDB"
    category = "cinema"

    def __init__(self, *, client: ApiClient | None = None, api_key: str | None = None) -> None:
        self._client = client or ApiClient("tmdb", base_url=TMDB_BASE_URL)
        self._api_key = api_key

    def get_supported_types(self) -> list[str]:
        return list(_SUPPORTED_TYPES)

    def _require_api_key(self) -> str:
        api_key = self._api_key or os.environ.get("TMDB_API_KEY")
        if not api_key:
            raise CredentialUnavailable(self.id, "TMDB_API_KEY is missing")
        return api_key

    def search(self, query: str, media_type: str, options: SearchOptions) -> SearchResult:
        if media_type not in _SUPPORTED_TYPES or not str(query or "").strip():
            return empty_result(options.page)
        try:
            api_key = self._require_api_key()
        except CredentialUnavailable as exc:
            logger.warning("[TMDB] %s; returning no results", exc)
            return empty_result(options.page)

        page = max(1, int(options.page or 1))
        payload = self._client.get_json(
            f"/search/{media_type}",
            params={"query": query.strip(), "page": page, "api_key": api_key},
        )
        parsed = validate_payload(TMDBSearchResponse, payload, f"tmdb search {media_type}")
        results = [self._map_item(item, media_type) for item in parsed.results]

        # TMDB search has no date window, so the year filter is applied to the page.
        min_year = options.filter_int("minYear")
        max_year = options.filter_int("maxYear")
        if min_year is not None or max_year is not None:
            results = [item for item in results if _year_in_range(item.get("year"), min_year, max_year)]

        return SearchResult(
            results=results,
            page=parsed.page,
            total_pages=parsed.total_pages,
            total_count=parsed.total_results,
            is_server_sorted=False,
        )

    def _map_item(self, item: TMDBResult, media_type: str) -> MediaItem:
        item_id = str(item.id)
        return compact(
            {
                "id": item_id,
                "mbid": item_id,
                "type": media_type,
                "title": item.title or item.name or "Unknown",
                "year": year_from_date(item.release_date or item.first_air_date),
                "image_url": _image_url(item.poster_path or item.profile_path),
                "rating": item.vote_average,
                "review_count": item.vote_count,
                "service_id": self.id,
            }
        )  # type: ignore[return-value]

    def get_details(self, item_id: str, media_type: str) -> MediaDetails:
        api_key = self._require_api_key()
        path_type = media_type if media_type in _SUPPORTED_TYPES else "person"
        payload = self._client.get_json(f"/{path_type}/{item_id}", params={"api_key": api_key})
        data = validate_payload(TMDBDetails, payload, f"tmdb details {path_type}")
        return compact(
            {
                "id": item_id,
                "mbid": item_id,
                "type": media_type,
                "image_url": _image_url(data.poster_path or data.profile_path),
                "date": data.release_date or data.first_air_date,
                "description": data.overview or data.biography or None,
                "tags": [genre.name for genre in data.genres] or None,
                "urls": [{"type": "TMDB", "url": f"https://www.themoviedb.org/{path_type}/{item_id}"}],
                "service_id": self.id,
            }
        )  # type: ignore[return-value]


def _year_in_range(year: str | None, min_year: int | None, max_year: int | None) -> bool:
    try:
        value = int(year) if year else None
    except ValueError:
        value = None
    if value is None:
        return False
    if min_year is not None and value < min_year:
        return False
    if max_year is not None and value > max_year:
        return False
    return True
