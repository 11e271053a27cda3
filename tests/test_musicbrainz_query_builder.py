from __future__ import annotations

import pytest

from media_types.definitions.music import SECONDARY_TYPES
from metadata.providers.base import SearchOptions
from metadata.providers.musicbrainz_query import build_musicbrainz_query

_CLEAN = "NOT secondarytype:(" + " OR ".join(f'"{t}"' for t in SECONDARY_TYPES) + ")"


def _options(**filters) -> SearchOptions:
    return SearchOptions(fuzzy=False, wildcard=False, filters=filters)


def test_endpoint_and_field_per_type() -> None:
    assert build_musicbrainz_query("artist", "Adele", _options()).endpoint == "artist"
    assert build_musicbrainz_query("album", "25", _options()).endpoint == "release-group"
    song = build_musicbrainz_query("song", "Hello", _options())
    assert song.endpoint == "recording"
    assert song.query == "recording:(Hello)"


def test_unsupported_type_raises() -> None:
    with pytest.raises(ValueError):
        build_musicbrainz_query("movie", "Alien", _options())


def test_album_defaults_to_clean_mode() -> None:
    built = build_musicbrainz_query("album", "Adele", SearchOptions(fuzzy=True, wildcard=True))
    assert built.query == f"releasegroup:((Adele* OR Adele~1)) AND {_CLEAN}"


def test_album_explicit_secondary_types_replace_clean_mode() -> None:
    built = build_musicbrainz_query(
        "album",
        "",
        _options(albumPrimaryTypes=["Album", "EP"], albumSecondaryTypes=["Live"]),
    )
    assert built.query == 'primarytype:("Album" OR "EP") AND secondarytype:("Live")'


def test_negative_only_album_query_is_anchored() -> None:
    built = build_musicbrainz_query("album", "", _options())
    assert built.query == f"*:* AND {_CLEAN}"


def test_album_artist_and_year_window() -> None:
    built = build_musicbrainz_query("album", "", _options(artistId="a-1", minYear="1990", albumSecondaryTypes=["Live"]))
    assert built.query == 'arid:a-1 AND firstreleasedate:[1990 TO *] AND secondarytype:("Live")'


def test_artist_name_used_when_no_artist_id() -> None:
    built = build_musicbrainz_query("song", "", _options(), artist_name="AC/DC")
    assert built.query == 'artist:"AC\\/DC"'


def test_artist_filters() -> None:
    built = build_musicbrainz_query(
        "artist",
        "",
        _options(minYear="1980", maxYear="1989", artistType="Group", artistCountry="GB", tag="rock"),
    )
    assert built.query == 'tag:"rock" AND begin:[1980 TO 1989] AND type:"group" AND country:"GB"'


def test_song_duration_is_converted_to_milliseconds() -> None:
    built = build_musicbrainz_query("song", "", _options(albumId="rg-1", minDuration="120", maxDuration="240"))
    assert built.query == "rgid:rg-1 AND dur:[120000 TO 240000]"

    open_ended = build_musicbrainz_query("song", "", _options(maxDuration="90"))
    assert open_ended.query == "dur:[* TO 90000]"


def test_empty_song_query_is_empty() -> None:
    assert build_musicbrainz_query("song", "  ", _options()).query == ""
