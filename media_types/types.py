from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Union

SortValue = Literal[
    "relevance",
    "date_desc",
    "date_asc",
    "title_asc",
    "title_desc",
    "rating_desc",
    "rating_asc",
    "reviews_desc",
    "reviews_asc",
    "duration_desc",
    "duration_asc",
]


@dataclass(frozen=True)
class FilterOption:
    label: str
    value: str


@dataclass(frozen=True, kw_only=True)
class _FilterBase:
    id: str
    label: str
    param_name: str | None = None
    placeholder: str | None = None
    # Service ids this filter applies to; empty means every service of the category.
    services: tuple[str, ...] = ()

    @property
    def serialized_name(self) -> str:
        return self.param_name or self.id

    def applies_to(self, service_id: str | None) -> bool:
        if not service_id or not self.services:
            return True
        return service_id in self.services


@dataclass(frozen=True, kw_only=True)
class TextFilter(_FilterBase):
    default_value: str = ""


@dataclass(frozen=True, kw_only=True)
class RangeFilter(_FilterBase):
    min_key: str = "minYear"
    max_key: str = "maxYear"
    default_value: tuple[str, str] = ("", "")


@dataclass(frozen=True, kw_only=True)
class SelectFilter(_FilterBase):
    options: tuple[FilterOption, ...] = ()
    default_value: str = ""


@dataclass(frozen=True, kw_only=True)
class PickerFilter(_FilterBase):
    picker_type: str
    # Key pulled out of the picked item when serializing.
    value_key: str = "id"
    default_value: None = None


@dataclass(frozen=True, kw_only=True)
class ToggleGroupFilter(_FilterBase):
    options: tuple[FilterOption, ...] = ()
    default_value: tuple[str, ...] = ()


FilterConfig = Union[TextFilter, RangeFilter, SelectFilter, PickerFilter, ToggleGroupFilter]


@dataclass(frozen=True)
class SortOptionConfig:
    value: SortValue
    label: str
    api_value: str | None = None


@dataclass(frozen=True, kw_only=True)
class MediaTypeDefinition:
    id: str
    category: str
    label: str
    label_plural: str
    filters: tuple[FilterConfig, ...] = ()
    sort_options: tuple[SortOptionConfig, ...] = ()
    default_filters: dict[str, Any] = field(default_factory=dict)
    searchable: bool = True
    supports_details: bool = True


@dataclass(frozen=True)
class ServiceConfig:
    id: str
    label: str


@dataclass(frozen=True, kw_only=True)
class CategoryConfig:
    id: str
    label: str
    label_plural: str
    primary_types: tuple[str, ...] = ()
    secondary_types: tuple[str, ...] = ()
    # Interchangeable backends in preference order; the first is the default.
    services: tuple[ServiceConfig, ...] = ()

    @property
    def default_service(self) -> ServiceConfig | None:
        return self.services[0] if self.services else None
