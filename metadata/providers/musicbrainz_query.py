"""Lucene query construction for the MusicBrainz search API."""

from __future__ import annotations

from dataclasses import dataclass

from engine.lucene import construct_lucene_query, escape_lucene
from media_types.definitions.music import SECONDARY_TYPES
from metadata.providers.base import SearchOptions

ENDPOINT_MAP = {
    "artist": "artist",
    "album": "release-group",
    "song": "recording",
}

LUCENE_FIELD_MAP = {
    "artist": "artist",
    "album": "releasegroup",
    "song": "recording",
}

DATE_FIELD_MAP = {
    "artist": "begin",
    "album": "firstreleasedate",
    "song": "firstreleasedate",
}


@dataclass(frozen=True)
class MusicBrainzQuery:
    endpoint: str
    query: str


def _or_group(values: list[str] | tuple[str, ...]) -> str:
    return " OR ".join(f'"{value}"' for value in values)


def _range(field: str, low: object | None, high: object | None) -> str:
    start = low if low not in (None, "") else "*"
    end = high if high not in (None, "") else "*"
    return f"{field}:[{start} TO {end}]"


def _common_filters(media_type: str, options: SearchOptions, artist_name: str | None) -> list[str]:
    parts: list[str] = []
    if media_type != "artist":
        artist_id = options.filter_value("artistId")
        if artist_id:
            parts.append(f"arid:{artist_id}")
        elif artist_name:
            parts.append(f'artist:"{escape_lucene(artist_name)}"')

    tag = options.filter_value("tag")
    if tag:
        parts.append(f'tag:"{escape_lucene(tag)}"')

    min_year = options.filter_value("minYear")
    max_year = options.filter_value("maxYear")
    if min_year or max_year:
        parts.append(_range(DATE_FIELD_MAP[media_type], min_year, max_year))
    return parts


def _artist_filters(options: SearchOptions) -> list[str]:
    parts: list[str] = []
    artist_type = options.filter_value("artistType")
    if artist_type:
        parts.append(f'type:"{artist_type.lower()}"')
    country = options.filter_value("artistCountry")
    if country:
        parts.append(f'country:"{escape_lucene(country)}"')
    return parts


def _album_filters(options: SearchOptions) -> list[str]:
    parts: list[str] = []
    primary = options.filter_list("albumPrimaryTypes")
    if primary:
        parts.append(f"primarytype:({_or_group(primary)})")
    secondary = options.filter_list("albumSecondaryTypes")
    if secondary:
        parts.append(f"secondarytype:({_or_group(secondary)})")
    else:
        # Clean mode: hide live records, compilations and the rest unless asked for.
        parts.append(f"NOT secondarytype:({_or_group(SECONDARY_TYPES)})")
    return parts


def _song_filters(options: SearchOptions) -> list[str]:
    parts: list[str] = []
    album_id = options.filter_value("albumId")
    if album_id:
        parts.append(f"rgid:{album_id}")
    # The duration filter is entered in seconds; MusicBrainz indexes dur in ms.
    min_duration = options.filter_int("minDuration")
    max_duration = options.filter_int("maxDuration")
    if min_duration is not None or max_duration is not None:
        parts.append(
            _range(
                "dur",
                min_duration * 1000 if min_duration is not None else None,
                max_duration * 1000 if max_duration is not None else None,
            )
        )
    return parts


def build_musicbrainz_query(
    media_type: str,
    query: str,
    options: SearchOptions,
    *,
    artist_name: str | None = None,
) -> MusicBrainzQuery:
    """Map a search onto the MusicBrainz endpoint and Lucene query for ``media_type``.

    Raises ``ValueError`` for types MusicBrainz does not index.
    """
    if media_type not in ENDPOINT_MAP:
        raise ValueError(f"unsupported MusicBrainz media type: {media_type}")

    parts: list[str] = []
    text = str(query or "").strip()
    if text:
        parts.append(
            construct_lucene_query(
                LUCENE_FIELD_MAP[media_type],
                text,
                fuzzy=options.fuzzy,
                wildcard=options.wildcard,
            )
        )
    parts.extend(_common_filters(media_type, options, artist_name))
    if media_type == "artist":
        parts.extend(_artist_filters(options))
    elif media_type == "album":
        parts.extend(_album_filters(options))
    elif media_type == "song":
        parts.extend(_song_filters(options))

    joined = " AND ".join(part for part in parts if part)
    # Lucene cannot evaluate a purely negative query; anchor it on match-all.
    if joined.startswith("NOT "):
        joined = f"*:* AND {joined}"
    return MusicBrainzQuery(endpoint=ENDPOINT_MAP[media_type], query=joined)
