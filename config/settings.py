"""Application settings constants."""

from __future__ import annotations

import os


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return str(raw).strip().lower() in {"1", "true", "yes", "on"}


# Root logger level applied by the HTTP surface.
LOG_LEVEL = os.getenv("TIERSEARCH_LOG_LEVEL", "INFO").upper()

# Outbound HTTP defaults shared by every service adapter.
HTTP_TIMEOUT_SECONDS = float(os.getenv("TIERSEARCH_HTTP_TIMEOUT_SECONDS", "10"))
HTTP_RETRY_TOTAL = int(os.getenv("TIERSEARCH_HTTP_RETRY_TOTAL", "3"))
HTTP_RETRY_BACKOFF = float(os.getenv("TIERSEARCH_HTTP_RETRY_BACKOFF", "0.4"))
USER_AGENT = os.getenv(
    "TIERSEARCH_USER_AGENT",
    "Tiersearch/1.0 (+https://github.com/tiersearch/tiersearch)",
)

# MusicBrainz asks anonymous clients for at most one request per second.
MUSICBRAINZ_BASE_URL = os.getenv("MUSICBRAINZ_BASE_URL", "https://musicbrainz.org")
MUSICBRAINZ_MIN_INTERVAL_SECONDS = float(os.getenv("MUSICBRAINZ_MIN_INTERVAL_SECONDS", "1.0"))
MUSICBRAINZ_SEARCH_LIMIT = 15
COVER_ART_ARCHIVE_BASE_URL = "https://coverartarchive.org"

FANART_BASE_URL = "https://webservice.fanart.tv/v3/music"
WIKIDATA_API_URL = "https://www.wikidata.org/w/api.php"
WIKIMEDIA_FILE_PATH_URL = "https://commons.wikimedia.org/wiki/Special:FilePath"

TMDB_BASE_URL = os.getenv("TMDB_BASE_URL", "https://api.themoviedb.org/3")
TMDB_IMAGE_BASE_URL = "https://image.tmdb.org/t/p/w500"

RAWG_BASE_URL = os.getenv("RAWG_BASE_URL", "https://api.rawg.io/api")
RAWG_PAGE_SIZE = 20

IGDB_BASE_URL = os.getenv("IGDB_BASE_URL", "https://api.igdb.com/v4")
TWITCH_AUTH_URL = "https://id.twitch.tv/oauth2/token"
IGDB_IMAGE_BASE_URL = "https://images.igdb.com/igdb/image/upload/t_cover_big"
IGDB_PAGE_SIZE = 20

OPEN_LIBRARY_BASE_URL = os.getenv("OPEN_LIBRARY_BASE_URL", "https://openlibrary.org")
OPEN_LIBRARY_COVERS_URL = "https://covers.openlibrary.org"

HARDCOVER_API_URL = os.getenv("HARDCOVER_API_URL", "https://api.hardcover.app/v1/graphql")

# Access tokens are treated as expired this long before the upstream says so.
TOKEN_EXPIRY_MARGIN_SECONDS = 60

# Mapped search results are memoized per adapter for a day.
MAPPED_ITEM_CACHE_TTL_SECONDS = 24 * 60 * 60
MAPPED_ITEM_CACHE_MAX_ENTRIES = 2048

# Client-side item cache bounds and persistence.
ITEM_CACHE_NAMESPACE = os.getenv("TIERSEARCH_NAMESPACE", "moat")
ITEM_CACHE_MAX_SIZE = 2000
ITEM_CACHE_PRUNE_COUNT = 200
ITEM_CACHE_SAVE_DELAY_SECONDS = float(os.getenv("TIERSEARCH_CACHE_SAVE_DELAY_SECONDS", "0.5"))
ITEM_CACHE_STORE_PATH = os.getenv("TIERSEARCH_STORE_PATH", ".cache/tiersearch_store.json")

# Term expansion defaults for searches that do not say otherwise.
DEFAULT_FUZZY = _env_bool("TIERSEARCH_DEFAULT_FUZZY", True)
DEFAULT_WILDCARD = _env_bool("TIERSEARCH_DEFAULT_WILDCARD", True)
