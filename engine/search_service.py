from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Mapping
from typing import Any

from config.settings import DEFAULT_FUZZY, DEFAULT_WILDCARD, ITEM_CACHE_STORE_PATH
from media_types import MediaTypeRegistry, build_media_type_registry
from metadata.item_registry import MediaItemRegistry
from metadata.providers.base import MediaService, SearchOptions
from metadata.storage import JsonFileStore
from metadata.types import MediaDetails, SearchResult, fallback_details

logger = logging.getLogger(__name__)

# Keys of UI filter state that are not filters.
_CONTROL_KEYS = ("query", "sort")


class SearchOrchestrator:
    """Routes a media type to its category's service and feeds results into the item cache."""

    def __init__(
        self,
        registry: MediaTypeRegistry,
        services: Iterable[MediaService],
        *,
        item_cache: MediaItemRegistry | None = None,
    ) -> None:
        self.registry = registry
        self.item_cache = item_cache if item_cache is not None else MediaItemRegistry()
        self._services: dict[str, MediaService] = {}
        for service in services:
            if service.id in self._services:
                raise ValueError(f"service {service.id} registered twice")
            self._services[service.id] = service

    def services_for_category(self, category: str) -> list[MediaService]:
        """Services of a category in preference order; the first one is the default."""
        ordered: list[MediaService] = []
        config = self.registry.get_category(category)
        if config is not None:
            ordered = [self._services[s.id] for s in config.services if s.id in self._services]
        for service in self._services.values():
            if service.category == category and service not in ordered:
                ordered.append(service)
        return ordered

    def get_service(self, category: str, service_id: str | None = None) -> MediaService:
        candidates = self.services_for_category(category)
        if not candidates:
            raise LookupError(f"no service registered for category {category}")
        if service_id:
            for service in candidates:
                if service.id == service_id:
                    return service
            logger.warning(
                "[SEARCH] unknown service=%s category=%s; using %s", service_id, category, candidates[0].id
            )
        return candidates[0]

    def search(
        self,
        media_type: str,
        filter_state: Mapping[str, Any],
        page: int = 1,
        *,
        service_id: str | None = None,
        fuzzy: bool = DEFAULT_FUZZY,
        wildcard: bool = DEFAULT_WILDCARD,
    ) -> SearchResult:
        definition = self.registry.get(media_type)
        service = self.get_service(definition.category, service_id)
        state = {**self.registry.get_default_filters(media_type), **dict(filter_state)}
        params = self.registry.serialize_filters(media_type, state, service_id=service.id)
        for key in _CONTROL_KEYS:
            if state.get(key):
                params[key] = str(state[key])
        return self._run(service, media_type, params, page, fuzzy=fuzzy, wildcard=wildcard)

    def search_params(
        self,
        media_type: str,
        params: Mapping[str, Any],
        *,
        page: int = 1,
        service_id: str | None = None,
        fuzzy: bool = DEFAULT_FUZZY,
        wildcard: bool = DEFAULT_WILDCARD,
    ) -> SearchResult:
        """Search from parameters that are already in serialized (URL) form."""
        definition = self.registry.get(media_type)
        service = self.get_service(definition.category, service_id)
        return self._run(service, media_type, dict(params), page, fuzzy=fuzzy, wildcard=wildcard)

    def _run(
        self,
        service: MediaService,
        media_type: str,
        params: dict[str, Any],
        page: int,
        *,
        fuzzy: bool,
        wildcard: bool,
    ) -> SearchResult:
        query = str(params.pop("query", "") or "")
        sort = str(params.pop("sort", "") or "relevance")
        options = SearchOptions(page=max(1, int(page or 1)), sort=sort, fuzzy=fuzzy, wildcard=wildcard, filters=params)
        logger.info(
            "[SEARCH] service=%s type=%s page=%s query=%s filters=%s",
            service.id,
            media_type,
            options.page,
            query,
            sorted(params),
        )
        result = service.search(query, media_type, options)
        if result.results:
            self.item_cache.register_items(result.results)
            # Hand back copies of the merged records so previously learned fields survive.
            result.results = [self.item_cache.get_item(item["id"]) or item for item in result.results]
        return result

    def get_details(self, item_id: str, media_type: str, *, service_id: str | None = None) -> MediaDetails:
        definition = self.registry.get(media_type)
        service = self.get_service(definition.category, service_id)
        try:
            details = service.get_details(item_id, media_type)
        except Exception:
            logger.exception("[SEARCH] details failed service=%s id=%s type=%s", service.id, item_id, media_type)
            return fallback_details(item_id, media_type)

        cached = self.item_cache.get_item(item_id)
        if cached is not None:
            self.item_cache.register_item({"id": item_id, "type": cached.get("type", media_type), "details": details})
        return details

    async def asearch(
        self,
        media_type: str,
        filter_state: Mapping[str, Any],
        page: int = 1,
        *,
        service_id: str | None = None,
        fuzzy: bool = DEFAULT_FUZZY,
        wildcard: bool = DEFAULT_WILDCARD,
    ) -> SearchResult:
        return await asyncio.to_thread(
            self.search,
            media_type,
            filter_state,
            page,
            service_id=service_id,
            fuzzy=fuzzy,
            wildcard=wildcard,
        )

    async def aget_details(self, item_id: str, media_type: str, *, service_id: str | None = None) -> MediaDetails:
        return await asyncio.to_thread(self.get_details, item_id, media_type, service_id=service_id)


def build_default_services() -> list[MediaService]:
    from metadata.providers.hardcover import HardcoverService
    from metadata.providers.igdb import IGDBService
    from metadata.providers.musicbrainz import MusicBrainzService
    from metadata.providers.openlibrary import OpenLibraryService
    from metadata.providers.rawg import RAWGService
    from metadata.providers.tmdb import TMDBService

    return [
        MusicBrainzService(),
        TMDBService(),
        RAWGService(),
        IGDBService(),
        OpenLibraryService(),
        HardcoverService(),
    ]


def build_default_orchestrator(store_path: str | None = None) -> SearchOrchestrator:
    item_cache = MediaItemRegistry(JsonFileStore(store_path or ITEM_CACHE_STORE_PATH))
    loaded = item_cache.load()
    logger.info("[SEARCH] item cache loaded entries=%s", loaded)
    return SearchOrchestrator(build_media_type_registry(), build_default_services(), item_cache=item_cache)
