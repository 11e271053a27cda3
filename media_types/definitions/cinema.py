from __future__ import annotations

from media_types.types import MediaTypeDefinition, RangeFilter, SortOptionConfig, TextFilter

_RATED_SORTS = (
    SortOptionConfig("relevance", "Relevance"),
    SortOptionConfig("rating_desc", "Rating (Highest)"),
    SortOptionConfig("rating_asc", "Rating (Lowest)"),
    SortOptionConfig("reviews_desc", "Reviews (Highest)"),
    SortOptionConfig("reviews_asc", "Reviews (Lowest)"),
    SortOptionConfig("date_desc", "Date (Newest)"),
    SortOptionConfig("date_asc", "Date (Oldest)"),
    SortOptionConfig("title_asc", "Name (A-Z)"),
    SortOptionConfig("title_desc", "Name (Z-A)"),
)

_DEFAULTS = {"query": "", "minYear": "", "maxYear": "", "tag": "", "sort": "relevance"}

MOVIE = MediaTypeDefinition(
    id="movie",
    category="cinema",
    label="Movie",
    label_plural="Movies",
    filters=(
        RangeFilter(id="yearRange", label="Release Year"),
        TextFilter(id="tag", label="Genre / Keywords", placeholder="e.g. Sci-Fi, Horror..."),
    ),
    sort_options=_RATED_SORTS,
    default_filters=dict(_DEFAULTS),
)

TV = MediaTypeDefinition(
    id="tv",
    category="cinema",
    label="TV Show",
    label_plural="TV Shows",
    filters=(
        RangeFilter(id="yearRange", label="First Air Date"),
        TextFilter(id="tag", label="Genre / Keywords", placeholder="e.g. Drama, Comedy..."),
    ),
    sort_options=_RATED_SORTS,
    default_filters=dict(_DEFAULTS),
)

PERSON = MediaTypeDefinition(
    id="person",
    category="cinema",
    label="Person",
    label_plural="People",
    sort_options=(
        SortOptionConfig("relevance", "Relevance"),
        SortOptionConfig("title_asc", "Name (A-Z)"),
        SortOptionConfig("title_desc", "Name (Z-A)"),
    ),
    default_filters={"query": "", "sort": "relevance"},
)

DEFINITIONS = (MOVIE, TV, PERSON)
