from __future__ import annotations

from collections.abc import Iterable

from metadata.providers.artwork import release_cover_url, release_group_cover_url
from metadata.providers.schemas import MBArtist, MBArtistCredit, MBRecording, MBReleaseGroup
from metadata.types import MediaItem, compact, year_from_date


def format_artist_credit(credits: Iterable[MBArtistCredit] | None) -> str:
    return "".join(f"{credit.name}{credit.joinphrase or ''}" for credit in credits or [])


def format_track_length(milliseconds: int | None) -> str | None:
    """Render a millisecond length as ``mm:ss``; ``None`` when unknown."""
    if not milliseconds or milliseconds <= 0:
        return None
    total_seconds = int(milliseconds) // 1000
    minutes, seconds = divmod(total_seconds, 60)
    return f"{minutes:02d}:{seconds:02d}"


def map_release_group(item: MBReleaseGroup) -> MediaItem:
    return compact(
        {
            "id": item.id,
            "mbid": item.id,
            "type": "album",
            "title": item.title,
            "artist": format_artist_credit(item.artist_credit) or None,
            "year": year_from_date(item.first_release_date),
            "date": item.first_release_date or None,
            "image_url": release_group_cover_url(item.id),
            "primary_type": item.primary_type,
            "secondary_types": list(item.secondary_types) or None,
        }
    )  # type: ignore[return-value]


def map_artist(item: MBArtist, *, image_url: str | None = None) -> MediaItem:
    begin = item.life_span.begin if item.life_span else None
    return compact(
        {
            "id": item.id,
            "mbid": item.id,
            "type": "artist",
            "title": item.name,
            "year": year_from_date(begin),
            "date": begin or None,
            "image_url": image_url,
            "disambiguation": item.disambiguation or None,
        }
    )  # type: ignore[return-value]


def map_recording(item: MBRecording) -> MediaItem:
    release = item.releases[0] if item.releases else None
    album_id = release.release_group.id if release and release.release_group else None
    # Prefer the release-group cover, fall back to the individual release's.
    image_url = release_group_cover_url(album_id) or release_cover_url(release.id if release else None)
    return compact(
        {
            "id": item.id,
            "mbid": item.id,
            "type": "song",
            "title": item.title,
            "artist": format_artist_credit(item.artist_credit) or None,
            "album": release.title if release else None,
            "album_id": album_id,
            "year": year_from_date(item.first_release_date),
            "date": item.first_release_date or None,
            "image_url": image_url,
            "duration": item.length,
        }
    )  # type: ignore[return-value]
