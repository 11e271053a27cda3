from __future__ import annotations

import copy
import logging
from collections.abc import Iterable, Mapping
from typing import Any

from media_types.types import (
    CategoryConfig,
    FilterConfig,
    MediaTypeDefinition,
    PickerFilter,
    RangeFilter,
    SelectFilter,
    SortOptionConfig,
    TextFilter,
    ToggleGroupFilter,
)
from metadata.errors import NotRegistered

logger = logging.getLogger(__name__)

SerializedFilters = dict[str, str | list[str]]


def _scalar(value: Any) -> str | None:
    if value is None or isinstance(value, (Mapping, list, tuple, set)):
        return None
    text = str(value).strip()
    return text or None


class MediaTypeRegistry:
    """Catalog of media type definitions and board categories.

    Built once by a composition step and passed to consumers; lookups are pure.
    """

    def __init__(self) -> None:
        self._definitions: dict[str, MediaTypeDefinition] = {}
        self._categories: dict[str, CategoryConfig] = {}

    def register(self, definition: MediaTypeDefinition) -> None:
        if definition.id in self._definitions:
            raise ValueError(f'Media type "{definition.id}" is already registered')
        self._definitions[definition.id] = definition

    def register_many(self, definitions: Iterable[MediaTypeDefinition]) -> None:
        for definition in definitions:
            self.register(definition)

    def register_category(self, config: CategoryConfig) -> None:
        self._categories[config.id] = config

    def get(self, media_type: str) -> MediaTypeDefinition:
        definition = self._definitions.get(media_type)
        if definition is None:
            raise NotRegistered(media_type)
        return definition

    def has(self, media_type: str) -> bool:
        return media_type in self._definitions

    def all_types(self) -> list[str]:
        return list(self._definitions)

    def all_definitions(self) -> list[MediaTypeDefinition]:
        return list(self._definitions.values())

    def get_by_category(self, category: str) -> list[MediaTypeDefinition]:
        return [d for d in self._definitions.values() if d.category == category]

    def get_category(self, category: str) -> CategoryConfig | None:
        return self._categories.get(category)

    def all_categories(self) -> list[CategoryConfig]:
        return list(self._categories.values())

    def get_filter(self, media_type: str, filter_id: str) -> FilterConfig | None:
        for filter_config in self.get(media_type).filters:
            if filter_config.id == filter_id:
                return filter_config
        return None

    def get_sort_options(self, media_type: str) -> list[SortOptionConfig]:
        return list(self.get(media_type).sort_options)

    def get_default_filters(self, media_type: str) -> dict[str, Any]:
        # Callers mutate filter state freely, so never hand out the definition's dict.
        return copy.deepcopy(self.get(media_type).default_filters)

    def serialize_filters(
        self,
        media_type: str,
        state: Mapping[str, Any] | None,
        *,
        service_id: str | None = None,
    ) -> SerializedFilters:
        """Turn UI filter state into URL parameters, dropping every empty value."""
        state = state or {}
        params: SerializedFilters = {}
        for filter_config in self.get(media_type).filters:
            if not filter_config.applies_to(service_id):
                continue
            if isinstance(filter_config, PickerFilter):
                self._serialize_picker(filter_config, state, params)
            elif isinstance(filter_config, ToggleGroupFilter):
                self._serialize_toggle_group(filter_config, state, params)
            elif isinstance(filter_config, RangeFilter):
                self._serialize_range(filter_config, state, params)
            elif isinstance(filter_config, (TextFilter, SelectFilter)):
                value = _scalar(state.get(filter_config.id))
                if value is not None:
                    params[filter_config.serialized_name] = value
            else:
                raise TypeError(f"unsupported filter config: {type(filter_config).__name__}")
        logger.debug("[REGISTRY] serialize type=%s params=%s", media_type, sorted(params))
        return params

    @staticmethod
    def _serialize_picker(config: PickerFilter, state: Mapping[str, Any], params: SerializedFilters) -> None:
        picked = state.get(config.id)
        if isinstance(picked, Mapping):
            value = _scalar(picked.get(config.value_key))
        else:
            value = _scalar(picked)
        if value is not None:
            params[config.serialized_name] = value

    @staticmethod
    def _serialize_toggle_group(
        config: ToggleGroupFilter, state: Mapping[str, Any], params: SerializedFilters
    ) -> None:
        selected = state.get(config.id)
        if isinstance(selected, str):
            selected = [selected]
        if not isinstance(selected, (list, tuple, set)):
            return
        values = [text for text in (_scalar(v) for v in selected) if text is not None]
        if values:
            params[config.serialized_name] = values

    @staticmethod
    def _serialize_range(config: RangeFilter, state: Mapping[str, Any], params: SerializedFilters) -> None:
        bounds = state.get(config.id)
        if isinstance(bounds, Mapping):
            low = bounds.get("min")
            high = bounds.get("max")
        else:
            low = state.get(config.min_key)
            high = state.get(config.max_key)
        low_text = _scalar(low)
        high_text = _scalar(high)
        if low_text is not None:
            params[config.min_key] = low_text
        if high_text is not None:
            params[config.max_key] = high_text
