"""Cover and thumbnail URL resolution for music entities.

Release groups and releases have predictable Cover Art Archive URLs. Artists
have no canonical image, so a fallback chain is walked: Fanart.tv artist
thumbnail (needs ``FANART_API_KEY``), then the Wikidata P18 image reached
through the artist's MusicBrainz url relations.
"""

from __future__ import annotations

import logging
import os
from urllib.parse import quote

from config.settings import (
    COVER_ART_ARCHIVE_BASE_URL,
    FANART_BASE_URL,
    MUSICBRAINZ_BASE_URL,
    MUSICBRAINZ_MIN_INTERVAL_SECONDS,
    WIKIDATA_API_URL,
    WIKIMEDIA_FILE_PATH_URL,
)
from metadata.errors import MediaSearchError
from metadata.providers.http import ApiClient
from metadata.providers.schemas import FanartArtist, MBArtistLookup, WikidataClaims, validate_payload
from metadata.providers.ttl_cache import TTLCache

logger = logging.getLogger(__name__)

_IMAGE_CACHE_TTL_SECONDS = 24 * 60 * 60


def release_group_cover_url(release_group_id: str | None) -> str | None:
    if not release_group_id:
        return None
    return f"{COVER_ART_ARCHIVE_BASE_URL}/release-group/{release_group_id}/front-250"


def release_cover_url(release_id: str | None) -> str | None:
    if not release_id:
        return None
    return f"{COVER_ART_ARCHIVE_BASE_URL}/release/{release_id}/front-250"


def wikimedia_file_url(file_name: str, width: int = 500) -> str:
    return f"{WIKIMEDIA_FILE_PATH_URL}/{quote(file_name, safe='')}?width={width}"


def fanart_preview_url(url: str) -> str:
    return url.replace("/fanart/", "/preview/")


class ArtworkResolver:
    def __init__(
        self,
        *,
        musicbrainz_client: ApiClient | None = None,
        web_client: ApiClient | None = None,
        fanart_api_key: str | None = None,
    ) -> None:
        self._mb = musicbrainz_client or ApiClient(
            "musicbrainz",
            base_url=f"{MUSICBRAINZ_BASE_URL.rstrip('/')}/ws/2",
            min_interval_seconds=MUSICBRAINZ_MIN_INTERVAL_SECONDS,
        )
        self._web = web_client or ApiClient("artwork")
        self._fanart_api_key = fanart_api_key
        self._cache = TTLCache(ttl_seconds=_IMAGE_CACHE_TTL_SECONDS)

    def _fanart_key(self) -> str | None:
        return self._fanart_api_key or os.environ.get("FANART_API_KEY") or None

    def fanart_image(self, mbid: str) -> str | None:
        api_key = self._fanart_key()
        if not api_key:
            return None
        try:
            payload = self._web.get_json(f"{FANART_BASE_URL}/{mbid}", params={"api_key": api_key})
            thumbs = validate_payload(FanartArtist, payload, "fanart artist").artistthumb
        except MediaSearchError as exc:
            logger.warning("[ARTWORK] fanart lookup failed mbid=%s error=%s", mbid, exc)
            return None
        url = thumbs[0].url if thumbs else ""
        return fanart_preview_url(url) if url else None

    def wikidata_image(self, mbid: str) -> str | None:
        try:
            payload = self._mb.get_json(f"artist/{mbid}", params={"inc": "url-rels", "fmt": "json"})
            artist = validate_payload(MBArtistLookup, payload, "musicbrainz artist relations")
            resource = next(
                (rel.url.resource for rel in artist.relations if rel.type == "wikidata" and rel.url),
                "",
            )
            qid = resource.rstrip("/").split("/")[-1]
            if not qid:
                return None
            payload = self._web.get_json(
                WIKIDATA_API_URL,
                params={"action": "wbgetclaims", "property": "P18", "entity": qid, "format": "json"},
            )
            claims = validate_payload(WikidataClaims, payload or {}, "wikidata claims")
        except MediaSearchError as exc:
            logger.warning("[ARTWORK] wikidata lookup failed mbid=%s error=%s", mbid, exc)
            return None
        file_name = claims.first_value("P18")
        if not isinstance(file_name, str) or not file_name:
            return None
        return wikimedia_file_url(file_name)

    def artist_thumbnail(self, mbid: str) -> str | None:
        if not mbid:
            return None
        if self._cache.has(mbid):
            return self._cache.get(mbid)
        url = self.fanart_image(mbid) or self.wikidata_image(mbid)
        self._cache.set(mbid, url)
        return url
