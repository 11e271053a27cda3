"""Hardcover adapter.

Hardcover exposes a single GraphQL ``search`` field backed by Typesense; its
``results`` value is an opaque JSON blob (sometimes double-encoded as a string)
whose ``hits[].document`` entries carry the records. Book filters that the
search field cannot express are applied to the returned page.
"""

from __future__ import annotations

import json
import logging
import math
import os
from typing import Any

from config.settings import HARDCOVER_API_URL
from metadata.errors import CredentialUnavailable, MalformedUpstreamResponse, MediaSearchError
from metadata.providers.base import SearchOptions
from metadata.providers.http import ApiClient
from metadata.providers.schemas import (
    GraphQLEnvelope,
    HardcoverDocument,
    HardcoverResults,
    HardcoverSearchData,
    HardcoverSeriesBooks,
    validate_payload,
)
from metadata.types import MediaDetails, MediaItem, SearchResult, compact, empty_result

logger = logging.getLogger(__name__)

_PER_PAGE = 20
_QUERY_TYPES = {"book": "Book", "author": "Author", "series": "Series"}

SEARCH_QUERY = """
query Search($query: String!, $query_type: String!, $page: Int!, $per_page: Int!) {
  search(query: $query, query_type: $query_type, page: $page, per_page: $per_page) {
    results
  }
}
"""

SERIES_BOOKS_QUERY = """
query GetSeriesBooks($ids: [Int!]!) {
  book_series(where: {series_id: {_in: $ids}, position: {_eq: 1}}) {
    series_id
    book { image { url } }
  }
}
"""


def _parse_results(raw: Any) -> HardcoverResults:
    """Validate a ``search.results`` value, which may arrive as a JSON string or a bare list."""
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except ValueError as exc:
            raise MalformedUpstreamResponse("hardcover search", "results is not JSON") from exc
    if isinstance(raw, list):
        raw = {"hits": [{"document": doc} for doc in raw]}
    return validate_payload(HardcoverResults, raw if raw is not None else {}, "hardcover search results")


def filter_books(docs: list[HardcoverDocument], options: SearchOptions) -> list[HardcoverDocument]:
    exclude_compilations = "true" in options.filter_list("excludeCompilations")
    min_year = options.filter_int("minYear")
    max_year = options.filter_int("maxYear")
    kept = []
    for doc in docs:
        if exclude_compilations and doc.compilation is True:
            continue
        year = doc.year
        if min_year is not None and (year is None or year < min_year):
            continue
        if max_year is not None and (year is None or year > max_year):
            continue
        kept.append(doc)
    return kept


class HardcoverService:
    id = "hardcover"
    label = "Hardcover"
    category = "book"

    def __init__(self, *, client: ApiClient | None = None, token: str | None = None) -> None:
        self._client = client or ApiClient("hardcover", retry_methods=frozenset({"POST"}))
        self._token = token

    def get_supported_types(self) -> list[str]:
        return list(_QUERY_TYPES)

    def _auth_header(self) -> str:
        token = (self._token or os.environ.get("HARDCOVER_TOKEN") or "").strip()
        if not token:
            raise CredentialUnavailable(self.id, "HARDCOVER_TOKEN is missing")
        return token if token.lower().startswith("bearer ") else f"Bearer {token}"

    def _graphql(self, query: str, variables: dict[str, Any]) -> dict[str, Any]:
        payload = self._client.post_json(
            HARDCOVER_API_URL,
            headers={"Authorization": self._auth_header(), "Content-Type": "application/json"},
            json_body={"query": query, "variables": variables},
        )
        envelope = validate_payload(GraphQLEnvelope, payload, "hardcover graphql")
        if envelope.errors:
            raise MalformedUpstreamResponse("hardcover graphql", envelope.errors[0].message)
        return envelope.data or {}

    def search(self, query: str, media_type: str, options: SearchOptions) -> SearchResult:
        page = max(1, int(options.page or 1))
        text = str(query or "").strip()
        query_type = _QUERY_TYPES.get(media_type)
        if not text or query_type is None:
            return empty_result(page)

        per_page = options.limit or _PER_PAGE
        try:
            data = self._graphql(
                SEARCH_QUERY,
                {"query": text, "query_type": query_type, "page": page, "per_page": per_page},
            )
            search = validate_payload(HardcoverSearchData, data, "hardcover search").search
            parsed = _parse_results(search.results if search else None)
        except CredentialUnavailable as exc:
            logger.warning("[HARDCOVER] %s; returning no results", exc)
            return empty_result(page)
        except MediaSearchError as exc:
            logger.warning(
                "[HARDCOVER] search failed endpoint=%s type=%s query=%s status=%s",
                HARDCOVER_API_URL,
                query_type,
                text,
                getattr(exc, "status", None),
            )
            raise

        docs = [hit.document for hit in parsed.hits]
        if media_type == "book":
            results = [self._map_book(doc) for doc in filter_books(docs, options)]
        elif media_type == "author":
            results = [self._map_author(doc) for doc in docs]
        else:
            results = self._with_series_images([self._map_series(doc) for doc in docs])

        total_count = parsed.found if parsed.found is not None else len(results)
        return SearchResult(
            results=results,
            page=page,
            total_pages=math.ceil(total_count / per_page),
            total_count=total_count,
            is_server_sorted=False,
        )

    def _map_book(self, doc: HardcoverDocument) -> MediaItem:
        item_id = str(doc.id or doc.slug or "")
        return compact(
            {
                "id": item_id,
                "mbid": item_id,
                "type": "book",
                "title": doc.title or "Unknown",
                "author": ", ".join(doc.author_names) or "Unknown Author",
                "year": str(doc.year) if doc.year else None,
                "image_url": doc.cover,
                "rating": doc.rating,
                "review_count": doc.ratings_count,
                "service_id": self.id,
            }
        )  # type: ignore[return-value]

    def _map_author(self, doc: HardcoverDocument) -> MediaItem:
        return compact(
            {
                "id": str(doc.id or doc.slug or ""),
                "mbid": doc.slug,
                "type": "author",
                "title": doc.name or "Unknown",
                "image_url": doc.cover,
                "service_id": self.id,
            }
        )  # type: ignore[return-value]

    def _map_series(self, doc: HardcoverDocument) -> MediaItem:
        item_id = str(doc.id or doc.slug or "")
        return compact(
            {
                "id": item_id,
                "mbid": item_id,
                "type": "series",
                "title": doc.name or "Unknown",
                "book_count": doc.books_count,
                "image_url": doc.cover,
                "service_id": self.id,
            }
        )  # type: ignore[return-value]

    def _with_series_images(self, items: list[MediaItem]) -> list[MediaItem]:
        missing = [int(item["id"]) for item in items if not item.get("image_url") and str(item.get("id")).isdigit()]
        if not missing:
            return items
        try:
            data = self._graphql(SERIES_BOOKS_QUERY, {"ids": missing})
            rows = validate_payload(HardcoverSeriesBooks, data, "hardcover series books").book_series
        except MediaSearchError as exc:
            logger.warning("[HARDCOVER] series cover lookup failed ids=%s error=%s", missing, exc)
            return items
        covers: dict[str, str] = {}
        for row in rows:
            url = row.book.image.url if row.book and row.book.image else None
            if url:
                covers.setdefault(str(row.series_id), url)
        enriched = []
        for item in items:
            cover = covers.get(str(item.get("id")))
            enriched.append({**item, "image_url": cover} if cover and not item.get("image_url") else item)
        return enriched  # type: ignore[return-value]

    def get_details(self, item_id: str, media_type: str) -> MediaDetails:
        return {"id": item_id, "mbid": item_id, "type": media_type}
