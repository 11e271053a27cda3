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

PRIMARY_TYPES = ("Album", "EP", "Single", "Broadcast", "Other")

# MusicBrainz release-group secondary types. Albums hide all of them unless asked.
SECONDARY_TYPES = (
    "Compilation",
    "Soundtrack",
    "Spokenword",
    "Interview",
    "Audiobook",
    "Audio drama",
    "Live",
    "Remix",
    "DJ-mix",
    "Mixtape/Street",
    "Demo",
    "Field recording",
)

ARTIST_TYPES = ("Person", "Group", "Orchestra", "Choir", "Character", "Other")

_BASE_SORTS = (
    SortOptionConfig("relevance", "Relevance"),
    SortOptionConfig("date_desc", "Date (Newest)"),
    SortOptionConfig("date_asc", "Date (Oldest)"),
    SortOptionConfig("title_asc", "Name (A-Z)"),
    SortOptionConfig("title_desc", "Name (Z-A)"),
)


def _tag_filter() -> TextFilter:
    return TextFilter(id="tag", label="Tag / Genre", placeholder="e.g. rock, jazz, 80s...")


ARTIST = MediaTypeDefinition(
    id="artist",
    category="music",
    label="Artist",
    label_plural="Artists",
    filters=(
        RangeFilter(id="yearRange", label="Born / Formed"),
        _tag_filter(),
        SelectFilter(
            id="artistType",
            label="Artist Type",
            options=(FilterOption("Any Type", ""),) + tuple(FilterOption(t, t) for t in ARTIST_TYPES),
        ),
        TextFilter(id="artistCountry", label="Country", placeholder="e.g. US, GB, JP..."),
    ),
    sort_options=_BASE_SORTS,
    default_filters={
        "query": "",
        "minYear": "",
        "maxYear": "",
        "tag": "",
        "artistType": "",
        "artistCountry": "",
        "sort": "relevance",
    },
)

ALBUM = MediaTypeDefinition(
    id="album",
    category="music",
    label="Album",
    label_plural="Albums",
    filters=(
        PickerFilter(id="selectedArtist", param_name="artistId", label="Filter by Artist", picker_type="artist"),
        RangeFilter(id="yearRange", label="Release Year"),
        _tag_filter(),
        ToggleGroupFilter(
            id="albumPrimaryTypes",
            label="Primary Types",
            options=tuple(FilterOption(t, t) for t in PRIMARY_TYPES),
            default_value=("Album", "EP"),
        ),
        ToggleGroupFilter(
            id="albumSecondaryTypes",
            label="Secondary Types",
            options=tuple(FilterOption(t, t) for t in SECONDARY_TYPES),
        ),
    ),
    sort_options=_BASE_SORTS,
    default_filters={
        "query": "",
        "selectedArtist": None,
        "minYear": "",
        "maxYear": "",
        "tag": "",
        "albumPrimaryTypes": ["Album", "EP"],
        "albumSecondaryTypes": [],
        "sort": "relevance",
    },
)

SONG = MediaTypeDefinition(
    id="song",
    category="music",
    label="Song",
    label_plural="Songs",
    filters=(
        PickerFilter(id="selectedArtist", param_name="artistId", label="Filter by Artist", picker_type="artist"),
        PickerFilter(id="selectedAlbum", param_name="albumId", label="Filter by Album", picker_type="album"),
        RangeFilter(id="yearRange", label="Release Year"),
        _tag_filter(),
        RangeFilter(
            id="durationRange",
            label="Duration (Seconds)",
            placeholder="Sec",
            min_key="minDuration",
            max_key="maxDuration",
        ),
    ),
    sort_options=_BASE_SORTS
    + (
        SortOptionConfig("duration_desc", "Duration (Longest)"),
        SortOptionConfig("duration_asc", "Duration (Shortest)"),
    ),
    default_filters={
        "query": "",
        "selectedArtist": None,
        "selectedAlbum": None,
        "minYear": "",
        "maxYear": "",
        "tag": "",
        "minDuration": "",
        "maxDuration": "",
        "sort": "relevance",
    },
)

DEFINITIONS = (SONG, ALBUM, ARTIST)
