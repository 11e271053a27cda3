from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol

from metadata.types import MediaDetails, SearchResult


@dataclass
class SearchOptions:
    page: int = 1
    limit: int | None = None
    sort: str = "relevance"
    fuzzy: bool = True
    wildcard: bool = True
    # Serialized filter parameters, as produced by MediaTypeRegistry.serialize_filters.
    filters: dict[str, Any] = field(default_factory=dict)

    def filter_value(self, key: str) -> str | None:
        value = self.filters.get(key)
        if isinstance(value, (list, tuple)):
            value = value[0] if value else None
        if value is None:
            return None
        text = str(value).strip()
        return text or None

    def filter_list(self, key: str) -> list[str]:
        value = self.filters.get(key)
        if value is None:
            return []
        if isinstance(value, str):
            value = [value]
        return [str(v).strip() for v in value if str(v).strip()]

    def filter_int(self, key: str) -> int | None:
        value = self.filter_value(key)
        if value is None:
            return None
        try:
            return int(float(value))
        except ValueError:
            return None


class MediaService(Protocol):
    id: str
    label: str
    category: str

    def search(self, query: str, media_type: str, options: SearchOptions) -> SearchResult:
        raise NotImplementedError

    def get_details(self, item_id: str, media_type: str) -> MediaDetails:
        raise NotImplementedError

    def get_supported_types(self) -> list[str]:
        raise NotImplementedError
