from __future__ import annotations

import logging
import math

from config.settings import OPEN_LIBRARY_BASE_URL, OPEN_LIBRARY_COVERS_URL
from engine.lucene import build_lucene_terms, escape_lucene
from metadata.errors import MediaSearchError
from metadata.providers.base import SearchOptions
from metadata.providers.http import ApiClient
from metadata.providers.schemas import (
    OLAuthorDoc,
    OLAuthorSearch,
    OLBookDoc,
    OLBookSearch,
    OLTextValue,
    OLWork,
    validate_payload,
)
from metadata.types import MediaDetails, MediaItem, SearchResult, compact, empty_result

logger = logging.getLogger(__name__)

_DEFAULT_LIMIT = 20
_MIN_QUERY_LENGTH = 3
_SEARCH_FIELDS = (
    "key,title,author_name,first_publish_year,cover_i,edition_count,subject,ratings_average,review_count"
)
SORT_MAP = {
    "rating_desc": "rating",
    "reviews_desc": "editions",
    "date_desc": "new",
    "date_asc": "old",
}


def book_cover_url(cover_id: int | None, size: str = "M") -> str | None:
    return f"{OPEN_LIBRARY_COVERS_URL}/b/id/{cover_id}-{size}.jpg" if cover_id else None


def author_photo_url(author_key: str) -> str:
    return f"{OPEN_LIBRARY_COVERS_URL}/a/olid/{author_key}-M.jpg"


def build_search_query(query: str, options: SearchOptions) -> str:
    """Lucene ``q`` for /search.json: expanded terms AND-joined with field clauses."""
    parts: list[str] = []
    text = str(query or "").strip()
    if text and (options.fuzzy or options.wildcard):
        parts.append(build_lucene_terms(text, fuzzy=options.fuzzy, wildcard=options.wildcard))
    elif text:
        parts.append(" ".join(escape_lucene(token) for token in text.split()))

    author = options.filter_value("author")
    if author:
        parts.append(f'author:"{escape_lucene(author)}"')
    min_year = options.filter_value("minYear")
    max_year = options.filter_value("maxYear")
    if min_year or max_year:
        parts.append(f"first_publish_year:[{min_year or '*'} TO {max_year or '*'}]")
    book_type = options.filter_value("bookType")
    if book_type:
        parts.append(f"subject:{book_type}")
    language = options.filter_value("language")
    if language:
        parts.append(f"language:{language}")
    for key in ("publisher", "person", "place"):
        value = options.filter_value(key)
        if value:
            parts.append(f'{key}:"{escape_lucene(value)}"')
    return " AND ".join(parts)


def _text(value: str | OLTextValue | None) -> str | None:
    if isinstance(value, OLTextValue):
        return value.value or None
    return value or None


class OpenLibraryService:
    id = "openlibrary"
    label = "Open Library"
    category = "book"

    def __init__(self, *, client: ApiClient | None = None) -> None:
        self._client = client or ApiClient("openlibrary", base_url=OPEN_LIBRARY_BASE_URL)

    def get_supported_types(self) -> list[str]:
        return ["book", "author"]

    def search(self, query: str, media_type: str, options: SearchOptions) -> SearchResult:
        if media_type == "author":
            return self._search_authors(query)
        if media_type != "book":
            return empty_result(options.page)
        return self._search_books(query, options)

    def _search_authors(self, query: str) -> SearchResult:
        text = str(query or "").strip()
        if not text:
            return empty_result()
        payload = self._client.get_json("/search/authors.json", params={"q": text})
        parsed = validate_payload(OLAuthorSearch, payload, "openlibrary author search")
        results = [self._map_author(doc) for doc in parsed.docs if doc.key and doc.name]
        return SearchResult(
            results=results,
            page=1,
            total_pages=1,
            total_count=parsed.num_found or len(results),
            is_server_sorted=False,
        )

    def _map_author(self, doc: OLAuthorDoc) -> MediaItem:
        return compact(
            {
                "id": doc.key,
                "mbid": doc.key,
                "type": "author",
                "title": doc.name,
                "year": doc.birth_date[-4:] if doc.birth_date else None,
                "image_url": author_photo_url(doc.key or ""),
                "service_id": self.id,
            }
        )  # type: ignore[return-value]

    def _search_books(self, query: str, options: SearchOptions) -> SearchResult:
        page = max(1, int(options.page or 1))
        limit = options.limit or _DEFAULT_LIMIT
        final_query = build_search_query(query, options)
        if len(final_query) < _MIN_QUERY_LENGTH:
            return empty_result(page)

        params: dict[str, str | int] = {"q": final_query, "page": page, "limit": limit}
        api_sort = SORT_MAP.get(options.sort or "relevance")
        if api_sort:
            params["sort"] = api_sort
        params["fields"] = _SEARCH_FIELDS

        try:
            payload = self._client.get_json("/search.json", params=params)
        except MediaSearchError:
            logger.warning("[OPENLIBRARY] search failed q=%s", final_query)
            raise
        parsed = validate_payload(OLBookSearch, payload, "openlibrary book search")
        results = [self._map_book(doc) for doc in parsed.docs if doc.key and doc.title]
        return SearchResult(
            results=results,
            page=page,
            total_pages=math.ceil(parsed.num_found / limit),
            total_count=parsed.num_found,
            is_server_sorted=api_sort is not None,
        )

    def _map_book(self, doc: OLBookDoc) -> MediaItem:
        item_id = (doc.key or "").replace("/works/", "")
        year = str(doc.first_publish_year) if doc.first_publish_year else None
        return compact(
            {
                "id": item_id,
                "mbid": item_id,
                "type": "book",
                "title": doc.title,
                "author": doc.author_name[0] if doc.author_name else "Unknown Author",
                "year": year,
                "date": f"{year}-01-01" if year else None,
                "image_url": book_cover_url(doc.cover_i),
                "rating": doc.ratings_average,
                "review_count": doc.review_count or doc.edition_count,
                "service_id": self.id,
            }
        )  # type: ignore[return-value]

    def get_details(self, item_id: str, media_type: str) -> MediaDetails:
        if media_type != "book":
            return {"id": item_id, "mbid": item_id, "type": media_type}
        payload = self._client.get_json(f"/works/{item_id}.json")
        work = validate_payload(OLWork, payload, "openlibrary work")
        return compact(
            {
                "id": item_id,
                "mbid": item_id,
                "type": "book",
                "image_url": book_cover_url(work.covers[0] if work.covers else None, "L"),
                "tags": work.subjects[:8] or None,
                "places": work.subject_places[:5] or None,
                "first_sentence": _text(work.excerpts[0].excerpt) if work.excerpts else None,
                "date": work.first_publish_date,
                "urls": [{"type": link.title, "url": link.url} for link in work.links] or None,
                "description": _text(work.description),
                "service_id": self.id,
            }
        )  # type: ignore[return-value]
