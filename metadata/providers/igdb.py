"""IGDB adapter: Twitch client-credentials auth plus Apicalypse query bodies."""

from __future__ import annotations

import calendar
import logging
import os
import re
from datetime import datetime, timezone

from config.settings import IGDB_BASE_URL, IGDB_IMAGE_BASE_URL, IGDB_PAGE_SIZE, TWITCH_AUTH_URL
from metadata.errors import CredentialUnavailable, UpstreamError
from metadata.providers.base import SearchOptions
from metadata.providers.credentials import TokenCache
from metadata.providers.http import ApiClient
from metadata.providers.schemas import IGDBFranchise, IGDBGame, TwitchToken, validate_payload
from metadata.types import MediaDetails, MediaItem, SearchResult, compact, empty_result

logger = logging.getLogger(__name__)

# IGDB does not report a total without a second count request.
_NOMINAL_TOTAL_PAGES = 100
_NOMINAL_TOTAL_COUNT = 2000

_GAME_SEARCH_FIELDS = (
    "name, first_release_date, cover.image_id, total_rating, total_rating_count, "
    "involved_companies.company.name, involved_companies.developer, platforms.name"
)
_GAME_DETAIL_FIELDS = _GAME_SEARCH_FIELDS + ", summary, genres.name, themes.name, url"
_NUMERIC_ID_RE = re.compile(r"(\d+)$")


def sort_clause(sort: str | None, *, franchise: bool = False) -> str | None:
    date_field = "created_at" if franchise else "first_release_date"
    mapping = {
        "rating_desc": "total_rating desc",
        "rating_asc": "total_rating asc",
        "reviews_desc": "total_rating_count desc",
        "reviews_asc": "total_rating_count asc",
        "date_desc": f"{date_field} desc",
        "date_asc": f"{date_field} asc",
        "title_asc": "name asc",
        "title_desc": "name desc",
    }
    return mapping.get(sort or "")


def _year_timestamp(year: int, month: int, day: int) -> int:
    return calendar.timegm((year, month, day, 0, 0, 0))


def _sanitize(text: str) -> str:
    return str(text or "").replace('"', "").strip()


def build_games_body(query: str, options: SearchOptions, *, limit: int, offset: int) -> str:
    body = f"fields {_GAME_SEARCH_FIELDS}; limit {limit}; offset {offset};"
    text = _sanitize(query)
    if text:
        body += f' search "{text}";'
    else:
        order = sort_clause(options.sort)
        if order:
            body += f" sort {order};"

    clauses: list[str] = []
    min_year = options.filter_int("minYear")
    max_year = options.filter_int("maxYear")
    if min_year is not None:
        clauses.append(f"first_release_date >= {_year_timestamp(min_year, 1, 1)}")
    if max_year is not None:
        clauses.append(f"first_release_date <= {_year_timestamp(max_year, 12, 31)}")
    if clauses:
        body += f" where {' & '.join(clauses)};"
    return body


def build_franchise_body(query: str, options: SearchOptions, *, limit: int, offset: int) -> str:
    body = f"fields name, games.cover.image_id; limit {limit}; offset {offset};"
    text = _sanitize(query)
    if text:
        words = text.split()
        if options.fuzzy or len(words) > 1:
            # Every word must appear somewhere in the name, case-insensitively.
            conditions = [f'name ~ *"{word}"*' for word in words]
            body += f" where {' & '.join(conditions)};"
        elif options.wildcard:
            body += f' where name ~ *"{text}"*;'
        else:
            body += f' where name = "{text}";'
    sort = options.sort if options.sort and options.sort != "relevance" else "title_asc"
    order = sort_clause(sort, franchise=True)
    if order:
        body += f" sort {order};"
    return body


def cover_url(image_id: str | None) -> str | None:
    return f"{IGDB_IMAGE_BASE_URL}/{image_id}.jpg" if image_id else None


def _franchise_image(franchise: IGDBFranchise) -> str | None:
    for game in franchise.games:
        if not isinstance(game, int) and game.cover and game.cover.image_id:
            return cover_url(game.cover.image_id)
    return None


class IGDBService:
    id = "igdb"
    label = "IGDB"
    category = "game"

    def __init__(
        self,
        *,
        client: ApiClient | None = None,
        client_id: str | None = None,
        client_secret: str | None = None,
        token_cache: TokenCache | None = None,
    ) -> None:
        self._client = client or ApiClient("igdb", base_url=IGDB_BASE_URL, retry_methods=frozenset({"POST"}))
        self._client_id = client_id
        self._client_secret = client_secret
        self.tokens = token_cache or TokenCache()

    def get_supported_types(self) -> list[str]:
        return ["game", "franchise"]

    def _credentials(self) -> tuple[str, str]:
        client_id = self._client_id or os.environ.get("IGDB_CLIENT_ID")
        client_secret = self._client_secret or os.environ.get("IGDB_CLIENT_SECRET")
        if not client_id or not client_secret:
            raise CredentialUnavailable(self.id, "IGDB_CLIENT_ID or IGDB_CLIENT_SECRET is missing")
        return client_id, client_secret

    def _fetch_token(self) -> tuple[str, float]:
        client_id, client_secret = self._credentials()
        payload = self._client.post_json(
            TWITCH_AUTH_URL,
            params={
                "client_id": client_id,
                "client_secret": client_secret,
                "grant_type": "client_credentials",
            },
        )
        token = validate_payload(TwitchToken, payload, "twitch token")
        return token.access_token, token.expires_in

    def _query(self, endpoint: str, body: str) -> list:
        client_id, _ = self._credentials()
        for attempt in (1, 2):
            token = self.tokens.ensure_valid(self._fetch_token)
            try:
                payload = self._client.post_json(
                    endpoint,
                    headers={"Client-ID": client_id, "Authorization": f"Bearer {token}"},
                    data=body,
                )
            except UpstreamError as exc:
                if exc.status == 401 and attempt == 1:
                    self.tokens.invalidate()
                    continue
                logger.warning("[IGDB] query failed endpoint=%s body=%s status=%s", endpoint, body, exc.status)
                raise
            return payload if isinstance(payload, list) else []
        return []

    def search(self, query: str, media_type: str, options: SearchOptions) -> SearchResult:
        page = max(1, int(options.page or 1))
        limit = IGDB_PAGE_SIZE
        offset = (page - 1) * limit
        try:
            if media_type == "franchise":
                rows = self._query("/franchises", build_franchise_body(query, options, limit=limit, offset=offset))
                results = [self._map_franchise(validate_payload(IGDBFranchise, row, "igdb franchise")) for row in rows]
            elif media_type == "game":
                rows = self._query("/games", build_games_body(query, options, limit=limit, offset=offset))
                results = [self._map_game(validate_payload(IGDBGame, row, "igdb game")) for row in rows]
            else:
                return empty_result(page)
        except CredentialUnavailable as exc:
            logger.warning("[IGDB] %s; returning no results", exc)
            return empty_result(page)

        return SearchResult(
            results=results,
            page=page,
            total_pages=_NOMINAL_TOTAL_PAGES,
            total_count=_NOMINAL_TOTAL_COUNT,
            is_server_sorted=True,
        )

    def _map_game(self, game: IGDBGame) -> MediaItem:
        developer = next((c.company.name for c in game.involved_companies if c.developer and c.company), None)
        year = None
        if game.first_release_date:
            year = str(datetime.fromtimestamp(game.first_release_date, tz=timezone.utc).year)
        return compact(
            {
                "id": f"igdb-{game.id}",
                "mbid": str(game.id),
                "type": "game",
                "title": game.name,
                "year": year,
                "image_url": cover_url(game.cover.image_id if game.cover else None),
                "rating": game.total_rating / 10 if game.total_rating else None,
                "review_count": game.total_rating_count,
                "developer": developer,
                "platforms": [p.name for p in game.platforms] or None,
                "service_id": self.id,
            }
        )  # type: ignore[return-value]

    def _map_franchise(self, franchise: IGDBFranchise) -> MediaItem:
        return compact(
            {
                "id": f"igdb-franchise-{franchise.id}",
                "mbid": str(franchise.id),
                "type": "franchise",
                "title": franchise.name,
                "game_count": len(franchise.games) if franchise.games else None,
                "image_url": _franchise_image(franchise),
                "service_id": self.id,
            }
        )  # type: ignore[return-value]

    def get_details(self, item_id: str, media_type: str) -> MediaDetails:
        match = _NUMERIC_ID_RE.search(str(item_id))
        if not match:
            raise ValueError(f"not an IGDB id: {item_id}")
        numeric_id = match.group(1)

        if media_type == "franchise":
            rows = self._query("/franchises", f"fields name, games.cover.image_id, url; where id = {numeric_id};")
            if not rows:
                raise UpstreamError(404, "/franchises", message=f"franchise not found: {numeric_id}")
            franchise = validate_payload(IGDBFranchise, rows[0], "igdb franchise details")
            return compact(
                {
                    "id": item_id,
                    "mbid": numeric_id,
                    "type": "franchise",
                    "image_url": _franchise_image(franchise),
                    "description": f"Video game franchise with {len(franchise.games)} games.",
                    "urls": [{"type": "IGDB", "url": franchise.url}] if franchise.url else None,
                    "service_id": self.id,
                }
            )  # type: ignore[return-value]

        rows = self._query("/games", f"fields {_GAME_DETAIL_FIELDS}; where id = {numeric_id};")
        if not rows:
            raise UpstreamError(404, "/games", message=f"game not found: {numeric_id}")
        game = validate_payload(IGDBGame, rows[0], "igdb game details")
        date = None
        if game.first_release_date:
            date = datetime.fromtimestamp(game.first_release_date, tz=timezone.utc).date().isoformat()
        companies = [c for c in game.involved_companies if c.company]
        return compact(
            {
                "id": item_id,
                "mbid": numeric_id,
                "type": "game",
                "image_url": cover_url(game.cover.image_id if game.cover else None),
                "date": date,
                "description": game.summary,
                "developer": next((c.company.name for c in companies if c.developer), None),
                "publisher": next((c.company.name for c in companies if not c.developer), None),
                "platforms": [p.name for p in game.platforms] or None,
                "tags": [g.name for g in game.genres] + [t.name for t in game.themes],
                "urls": [{"type": "IGDB", "url": game.url}] if game.url else None,
                "service_id": self.id,
            }
        )  # type: ignore[return-value]
