from __future__ import annotations

import pytest

from media_types import CATEGORIES, MediaTypeDefinition, MediaTypeRegistry, build_media_type_registry
from metadata.errors import NotRegistered


def test_builtin_registry_holds_every_type_and_category() -> None:
    registry = build_media_type_registry()

    assert set(registry.all_types()) == {
        "song",
        "album",
        "artist",
        "movie",
        "tv",
        "person",
        "game",
        "developer",
        "franchise",
        "book",
        "author",
        "series",
    }
    assert [c.id for c in registry.all_categories()] == [c.id for c in CATEGORIES]


def test_get_by_category_keeps_registration_order() -> None:
    registry = build_media_type_registry()
    assert [d.id for d in registry.get_by_category("music")] == ["song", "album", "artist"]
    assert [d.id for d in registry.get_by_category("game")] == ["game", "developer", "franchise"]
    assert registry.get_by_category("unknown") == []


def test_duplicate_registration_is_rejected() -> None:
    registry = MediaTypeRegistry()
    definition = MediaTypeDefinition(id="widget", category="misc", label="Widget", label_plural="Widgets")
    registry.register(definition)
    with pytest.raises(ValueError):
        registry.register(definition)


def test_unknown_type_raises_not_registered() -> None:
    registry = build_media_type_registry()
    with pytest.raises(NotRegistered) as excinfo:
        registry.get("podcast")
    assert excinfo.value.media_type == "podcast"
    assert isinstance(excinfo.value, LookupError)
    assert registry.has("podcast") is False


def test_default_filters_are_copies() -> None:
    registry = build_media_type_registry()
    first = registry.get_default_filters("album")
    first["albumPrimaryTypes"].append("Single")
    first["query"] = "changed"

    second = registry.get_default_filters("album")
    assert second["albumPrimaryTypes"] == ["Album", "EP"]
    assert second["query"] == ""


def test_category_services_and_default() -> None:
    registry = build_media_type_registry()
    games = registry.get_category("game")
    assert games is not None
    assert [s.id for s in games.services] == ["rawg", "igdb"]
    assert games.default_service.id == "rawg"
    assert registry.get_category("book").default_service.id == "openlibrary"


def test_sort_options_and_filter_lookup() -> None:
    registry = build_media_type_registry()
    values = [option.value for option in registry.get_sort_options("song")]
    assert values[0] == "relevance"
    assert "duration_desc" in values

    picker = registry.get_filter("album", "selectedArtist")
    assert picker is not None
    assert picker.serialized_name == "artistId"
    assert registry.get_filter("album", "missing") is None
