from __future__ import annotations

from media_types.types import (
    FilterOption,
    MediaTypeDefinition,
    RangeFilter,
    SelectFilter,
    SortOptionConfig,
    TextFilter,
)

# RAWG platform ids; families are comma separated.
PLATFORM_OPTIONS = (
    FilterOption("All Platforms", ""),
    FilterOption("PC", "4"),
    FilterOption("PlayStation", "187,18,16,15,27"),
    FilterOption("Xbox", "1,186,14,80"),
    FilterOption("Nintendo", "7,8,9,13,83"),
    FilterOption("iOS", "3"),
    FilterOption("Android", "21"),
)

_NAME_SORTS = (
    SortOptionConfig("relevance", "Relevance"),
    SortOptionConfig("title_asc", "Name (A-Z)"),
    SortOptionConfig("title_desc", "Name (Z-A)"),
)

GAME = MediaTypeDefinition(
    id="game",
    category="game",
    label="Video Game",
    label_plural="Video Games",
    filters=(
        RangeFilter(id="yearRange", label="Release Year"),
        SelectFilter(id="platform", label="Platform", options=PLATFORM_OPTIONS),
        TextFilter(id="tag", label="Genre / Tags", placeholder="e.g. RPG, Action..."),
    ),
    sort_options=(
        SortOptionConfig("relevance", "Relevance"),
        SortOptionConfig("rating_desc", "Rating (Highest)"),
        SortOptionConfig("rating_asc", "Rating (Lowest)"),
        SortOptionConfig("reviews_desc", "Reviews (Most)"),
        SortOptionConfig("reviews_asc", "Reviews (Least)"),
        SortOptionConfig("date_desc", "Date (Newest)"),
        SortOptionConfig("date_asc", "Date (Oldest)"),
        SortOptionConfig("title_asc", "Name (A-Z)"),
        SortOptionConfig("title_desc", "Name (Z-A)"),
    ),
    default_filters={
        "query": "",
        "minYear": "",
        "maxYear": "",
        "platform": "",
        "tag": "",
        "sort": "relevance",
    },
)

DEVELOPER = MediaTypeDefinition(
    id="developer",
    category="game",
    label="Developer",
    label_plural="Developers",
    sort_options=_NAME_SORTS,
    default_filters={"query": "", "sort": "relevance"},
)

FRANCHISE = MediaTypeDefinition(
    id="franchise",
    category="game",
    label="Franchise",
    label_plural="Franchises",
    sort_options=_NAME_SORTS
    + (
        SortOptionConfig("date_desc", "Date (Newly Created)"),
        SortOptionConfig("date_asc", "Date (Oldest)"),
    ),
    default_filters={"query": "", "sort": "relevance"},
)

DEFINITIONS = (GAME, DEVELOPER, FRANCHISE)
