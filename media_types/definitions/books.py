from __future__ import annotations

from media_types.types import (
    FilterOption,
    MediaTypeDefinition,
    PickerFilter,
    RangeFilter,
    SelectFilter,
    SortOptionConfig,
    TextFilter,
    ToggleGroupFilter,
)

_OPEN_LIBRARY = ("openlibrary",)

BOOK = MediaTypeDefinition(
    id="book",
    category="book",
    label="Book",
    label_plural="Books",
    filters=(
        # Open Library filters authors by name, not by key.
        PickerFilter(
            id="selectedAuthor",
            param_name="author",
            label="Filter by Author",
            picker_type="author",
            value_key="name",
            services=_OPEN_LIBRARY,
        ),
        RangeFilter(id="yearRange", label="First Publish Year", services=("openlibrary", "hardcover")),
        SelectFilter(
            id="bookType",
            label="Genre / Type",
            options=(
                FilterOption("Any", ""),
                FilterOption("Fiction", "fiction"),
                FilterOption("Non-Fiction", "non-fiction"),
                FilterOption("Compilation", "compilation"),
                FilterOption("Anthology", "anthology"),
                FilterOption("Textbook", "textbook"),
                FilterOption("Biography", "biography"),
            ),
            services=_OPEN_LIBRARY,
        ),
        ToggleGroupFilter(
            id="excludeCompilations",
            label="Exclude Compilations",
            options=(FilterOption("Exclude Compilations", "true"),),
            default_value=("true",),
            services=("hardcover",),
        ),
        SelectFilter(
            id="language",
            label="Language",
            options=(
                FilterOption("Any", ""),
                FilterOption("English", "eng"),
                FilterOption("French", "fre"),
                FilterOption("Spanish", "spa"),
                FilterOption("German", "ger"),
                FilterOption("Italian", "ita"),
                FilterOption("Japanese", "jpn"),
            ),
            services=_OPEN_LIBRARY,
        ),
        TextFilter(id="publisher", label="Publisher", placeholder="e.g. Penguin", services=_OPEN_LIBRARY),
        TextFilter(id="person", label="Character / Person", placeholder="e.g. Harry Potter", services=_OPEN_LIBRARY),
        TextFilter(id="place", label="Setting / Place", placeholder="e.g. London", services=_OPEN_LIBRARY),
    ),
    sort_options=(
        SortOptionConfig("relevance", "Relevance"),
        SortOptionConfig("date_desc", "Date (Newest)", api_value="new"),
        SortOptionConfig("date_asc", "Date (Oldest)", api_value="old"),
    ),
    default_filters={
        "query": "",
        "selectedAuthor": None,
        "minYear": "",
        "maxYear": "",
        "bookType": "",
        "language": "",
        "publisher": "",
        "person": "",
        "place": "",
        "excludeCompilations": ["true"],
        "sort": "relevance",
    },
)

_NAME_SORTS = (
    SortOptionConfig("relevance", "Relevance"),
    SortOptionConfig("title_asc", "Name (A-Z)"),
    SortOptionConfig("title_desc", "Name (Z-A)"),
)

AUTHOR = MediaTypeDefinition(
    id="author",
    category="book",
    label="Author",
    label_plural="Authors",
    sort_options=_NAME_SORTS,
    default_filters={"query": "", "sort": "relevance"},
)

SERIES = MediaTypeDefinition(
    id="series",
    category="book",
    label="Series",
    label_plural="Series",
    sort_options=_NAME_SORTS,
    default_filters={"query": "", "sort": "relevance"},
)

DEFINITIONS = (BOOK, AUTHOR, SERIES)
