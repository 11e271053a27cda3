from __future__ import annotations

import logging
import math

from config.settings import MUSICBRAINZ_BASE_URL, MUSICBRAINZ_MIN_INTERVAL_SECONDS, MUSICBRAINZ_SEARCH_LIMIT
from metadata.errors import MediaSearchError, UpstreamError
from metadata.mappers import format_track_length, map_artist, map_recording, map_release_group
from metadata.providers.artwork import ArtworkResolver
from metadata.providers.base import SearchOptions
from metadata.providers.http import ApiClient
from metadata.providers.musicbrainz_query import ENDPOINT_MAP, build_musicbrainz_query
from metadata.providers.schemas import (
    MBArtistLookup,
    MBRecordingLookup,
    MBReleaseList,
    MBReleaseLookup,
    MBSearchResponse,
    validate_payload,
)
from metadata.providers.ttl_cache import TTLCache
from metadata.types import MediaDetails, MediaItem, SearchResult, compact, empty_result

logger = logging.getLogger(__name__)

MUSICBRAINZ_WEB_URL = "https://musicbrainz.org"

# Relation types worth surfacing as external links on an artist.
_ARTIST_LINK_TYPES = {"wikidata", "wikipedia", "youtube", "social network", "streaming"}


def build_musicbrainz_client() -> ApiClient:
    return ApiClient(
        "musicbrainz",
        base_url=f"{MUSICBRAINZ_BASE_URL.rstrip('/')}/ws/2",
        min_interval_seconds=MUSICBRAINZ_MIN_INTERVAL_SECONDS,
    )


class MusicBrainzService:
    id = "musicbrainz"
    label = "MusicBrainz"
    category = "music"

    def __init__(
        self,
        *,
        client: ApiClient | None = None,
        artwork: ArtworkResolver | None = None,
        mapped_cache: TTLCache | None = None,
    ) -> None:
        self._client = client or build_musicbrainz_client()
        self._artwork = artwork or ArtworkResolver(musicbrainz_client=self._client)
        self._mapped = mapped_cache if mapped_cache is not None else TTLCache()

    def get_supported_types(self) -> list[str]:
        return list(ENDPOINT_MAP)

    def search(self, query: str, media_type: str, options: SearchOptions) -> SearchResult:
        if media_type not in ENDPOINT_MAP:
            logger.warning("[MUSICBRAINZ] unsupported type=%s", media_type)
            return empty_result(options.page)

        built = build_musicbrainz_query(media_type, query, options)
        if not built.query.strip():
            return empty_result(options.page)

        page = max(1, int(options.page or 1))
        limit = MUSICBRAINZ_SEARCH_LIMIT
        params = {"query": built.query, "limit": limit, "offset": (page - 1) * limit, "fmt": "json"}
        try:
            payload = self._client.get_json(built.endpoint, params=params)
        except UpstreamError as exc:
            logger.warning(
                "[MUSICBRAINZ] search failed endpoint=%s query=%s status=%s",
                built.endpoint,
                built.query,
                exc.status,
            )
            raise
        parsed = validate_payload(MBSearchResponse, payload, f"musicbrainz search {built.endpoint}")

        results: list[MediaItem] = []
        if media_type == "album":
            results = [self._memoized(rg.id, lambda rg=rg: map_release_group(rg)) for rg in parsed.release_groups or []]
        elif media_type == "artist":
            results = [
                self._memoized(a.id, lambda a=a: map_artist(a, image_url=self._artwork.artist_thumbnail(a.id)))
                for a in parsed.artists or []
            ]
        elif media_type == "song":
            results = [self._memoized(r.id, lambda r=r: map_recording(r)) for r in parsed.recordings or []]

        total_count = parsed.total_count
        return SearchResult(
            results=results,
            page=page,
            total_pages=math.ceil(total_count / limit),
            total_count=total_count,
            is_server_sorted=False,
        )

    def _memoized(self, item_id: str, build) -> MediaItem:
        cached = self._mapped.get(item_id)
        if cached is not None:
            return cached
        item = {**build(), "service_id": self.id}
        self._mapped.set(item_id, item)
        return item

    def get_details(self, item_id: str, media_type: str) -> MediaDetails:
        fallback: MediaDetails = {"id": item_id, "mbid": item_id, "type": media_type}
        try:
            if media_type == "album":
                return self._album_details(item_id)
            if media_type == "artist":
                return self._artist_details(item_id)
            if media_type == "song":
                return self._song_details(item_id)
        except MediaSearchError:
            logger.exception("[MUSICBRAINZ] details failed id=%s type=%s", item_id, media_type)
        return fallback

    def _find_release_id(self, release_group_id: str) -> str | None:
        # Prefer an official release; any release of the group will do otherwise.
        try:
            payload = self._client.get_json(
                "release",
                params={"query": f"rgid:{release_group_id} AND status:official", "limit": 1, "fmt": "json"},
            )
            releases = validate_payload(MBReleaseList, payload, "musicbrainz release search").releases
            if releases:
                return releases[0].id
        except MediaSearchError as exc:
            logger.warning("[MUSICBRAINZ] official release search failed rgid=%s error=%s", release_group_id, exc)
        try:
            payload = self._client.get_json(
                f"release-group/{release_group_id}",
                params={"inc": "releases", "fmt": "json"},
            )
            releases = validate_payload(MBReleaseList, payload, "musicbrainz release-group lookup").releases
            if releases:
                return releases[0].id
        except MediaSearchError as exc:
            logger.warning("[MUSICBRAINZ] release-group lookup failed rgid=%s error=%s", release_group_id, exc)
        return None

    def _album_details(self, item_id: str) -> MediaDetails:
        release_id = self._find_release_id(item_id)
        if not release_id:
            return {"id": item_id, "mbid": item_id, "type": "album"}

        payload = self._client.get_json(
            f"release/{release_id}",
            params={"inc": "recordings media labels", "fmt": "json"},
        )
        release = validate_payload(MBReleaseLookup, payload, "musicbrainz release lookup")
        tracks = []
        if release.media:
            for track in release.media[0].tracks:
                tracks.append(
                    {
                        "id": track.recording.id if track.recording else track.id,
                        "position": str(track.position or ""),
                        "title": track.title,
                        "length": format_track_length(track.length) or "--:--",
                    }
                )
        label = None
        if release.label_info and release.label_info[0].label:
            label = release.label_info[0].label.name
        return compact(
            {
                "id": item_id,
                "mbid": item_id,
                "type": "album",
                "tracks": tracks,
                "label": label,
                "date": release.date,
                "release_id": release_id,
                "urls": [{"type": "MusicBrainz", "url": f"{MUSICBRAINZ_WEB_URL}/release-group/{item_id}"}],
            }
        )  # type: ignore[return-value]

    def _artist_details(self, item_id: str) -> MediaDetails:
        payload = self._client.get_json(f"artist/{item_id}", params={"inc": "url-rels tags", "fmt": "json"})
        artist = validate_payload(MBArtistLookup, payload, "musicbrainz artist lookup")
        tags = [tag.name for tag in sorted(artist.tags, key=lambda t: t.count, reverse=True)[:10]]
        life_span = artist.life_span
        urls = [{"type": "MusicBrainz", "url": f"{MUSICBRAINZ_WEB_URL}/artist/{item_id}"}]
        urls.extend(
            {"type": relation.type, "url": relation.url.resource if relation.url else ""}
            for relation in artist.relations
            if relation.type in _ARTIST_LINK_TYPES
        )
        return compact(
            {
                "id": item_id,
                "mbid": item_id,
                "type": "artist",
                "image_url": self._artwork.artist_thumbnail(item_id),
                "tags": tags,
                "area": artist.area.name if artist.area else None,
                "life_span": {
                    "begin": life_span.begin if life_span else None,
                    "end": life_span.end if life_span else None,
                    "ended": life_span.ended if life_span else None,
                },
                "urls": urls,
            }
        )  # type: ignore[return-value]

    def _song_details(self, item_id: str) -> MediaDetails:
        payload = self._client.get_json(
            f"recording/{item_id}",
            params={"inc": "releases release-groups artist-credits tags", "fmt": "json"},
        )
        recording = validate_payload(MBRecordingLookup, payload, "musicbrainz recording lookup")
        release = recording.releases[0] if recording.releases else None
        return compact(
            {
                "id": item_id,
                "mbid": item_id,
                "type": "song",
                "tags": [tag.name for tag in recording.tags],
                "length": format_track_length(recording.length),
                "album": release.title if release else None,
                "album_id": release.release_group.id if release and release.release_group else None,
                "urls": [{"type": "MusicBrainz", "url": f"{MUSICBRAINZ_WEB_URL}/recording/{item_id}"}],
            }
        )  # type: ignore[return-value]
