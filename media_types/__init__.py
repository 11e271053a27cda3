from .definitions import ALL_DEFINITIONS
from .registry import MediaTypeRegistry, SerializedFilters
from .types import (
    CategoryConfig,
    FilterConfig,
    FilterOption,
    MediaTypeDefinition,
    PickerFilter,
    RangeFilter,
    SelectFilter,
    ServiceConfig,
    SortOptionConfig,
    TextFilter,
    ToggleGroupFilter,
)

CATEGORIES = (
    CategoryConfig(
        id="music",
        label="Music",
        label_plural="Music",
        primary_types=("song", "album", "artist"),
        services=(ServiceConfig("musicbrainz", "MusicBrainz"),),
    ),
    CategoryConfig(
        id="cinema",
        label="Cinema",
        label_plural="Cinema",
        primary_types=("movie", "tv"),
        secondary_types=("person",),
        services=(ServiceConfig("tmdb", "TMDB"),),
    ),
    CategoryConfig(
        id="game",
        label="Games",
        label_plural="Games",
        primary_types=("game",),
        secondary_types=("developer", "franchise"),
        services=(ServiceConfig("rawg", "RAWG"), ServiceConfig("igdb", "IGDB")),
    ),
    CategoryConfig(
        id="book",
        label="Books",
        label_plural="Books",
        primary_types=("book",),
        secondary_types=("author", "series"),
        services=(ServiceConfig("openlibrary", "Open Library"), ServiceConfig("hardcover", "Hardcover")),
    ),
)


def build_media_type_registry() -> MediaTypeRegistry:
    """Composition step: a fresh registry holding every built-in type and category."""
    registry = MediaTypeRegistry()
    registry.register_many(ALL_DEFINITIONS)
    for category in CATEGORIES:
        registry.register_category(category)
    return registry


__all__ = [
    "CATEGORIES",
    "CategoryConfig",
    "FilterConfig",
    "FilterOption",
    "MediaTypeDefinition",
    "MediaTypeRegistry",
    "PickerFilter",
    "RangeFilter",
    "SelectFilter",
    "SerializedFilters",
    "ServiceConfig",
    "SortOptionConfig",
    "TextFilter",
    "ToggleGroupFilter",
    "build_media_type_registry",
]
