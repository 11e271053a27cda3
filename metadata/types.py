"""Normalized media records shared by adapters, the orchestrator and the item cache."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, TypedDict


class ExternalLink(TypedDict):
    type: str
    url: str


class TrackEntry(TypedDict, total=False):
    id: str
    position: str
    title: str
    length: str


class LifeSpan(TypedDict, total=False):
    begin: str | None
    end: str | None
    ended: bool | None


class MediaDetails(TypedDict, total=False):
    id: str
    type: str
    mbid: str
    image_url: str
    date: str
    description: str
    tags: list[str]
    urls: list[ExternalLink]
    tracks: list[TrackEntry]
    label: str
    release_id: str
    area: str
    life_span: LifeSpan
    length: str
    album: str
    album_id: str
    developer: str
    publisher: str
    platforms: list[str]
    metacritic: int
    places: list[str]
    first_sentence: str
    service_id: str


class MediaItem(TypedDict, total=False):
    """Canonical search record; ``id`` is the identity key across the system."""

    id: str
    type: str
    title: str
    mbid: str
    image_url: str
    year: str
    date: str
    details: MediaDetails
    artist: str
    album: str
    album_id: str
    author: str
    developer: str
    platforms: list[str]
    rating: float
    review_count: int
    primary_type: str
    secondary_types: list[str]
    disambiguation: str
    duration: int
    game_count: int
    book_count: int
    service_id: str


@dataclass
class SearchResult:
    results: list[MediaItem] = field(default_factory=list)
    page: int = 1
    total_pages: int = 0
    total_count: int = 0
    is_server_sorted: bool | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "results": list(self.results),
            "page": self.page,
            "total_pages": self.total_pages,
            "total_count": self.total_count,
        }
        if self.is_server_sorted is not None:
            payload["is_server_sorted"] = self.is_server_sorted
        return payload


def empty_result(page: int = 1) -> SearchResult:
    return SearchResult(results=[], page=page, total_pages=0, total_count=0)


def compact(record: dict[str, Any]) -> dict[str, Any]:
    """Drop keys whose value is None so absent fields stay absent."""
    return {key: value for key, value in record.items() if value is not None}


def year_from_date(value: str | None) -> str | None:
    text = str(value or "").strip()
    if not text:
        return None
    year = text.split("-")[0]
    return year or None


def fallback_details(item_id: str, media_type: str) -> MediaDetails:
    return {"id": item_id, "type": media_type}
