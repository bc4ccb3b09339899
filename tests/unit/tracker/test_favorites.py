from __future__ import annotations

import json
import logging
from pathlib import Path

from src.tracker.favorites import FAVORITES_KEY, FavoriteStore


def test_loads_empty_set_when_file_missing(tmp_path: Path) -> None:
    store = FavoriteStore(tmp_path / "favorites.json")
    store.load()

    assert len(store) == 0
    assert store.ids == frozenset()


def test_toggle_persists_sorted_ids(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "favorites.json"
    store = FavoriteStore(path)
    store.load()

    assert store.toggle("b") is True
    assert store.toggle("a") is True

    data = json.loads(path.read_text(encoding="utf-8"))
    assert data == {FAVORITES_KEY: ["a", "b"]}


def test_toggle_twice_removes_favorite(tmp_path: Path) -> None:
    store = FavoriteStore(tmp_path / "favorites.json")
    store.load()

    store.toggle("a")
    assert store.toggle("a") is False

    assert not store.is_favorite("a")
    reloaded = FavoriteStore(tmp_path / "favorites.json")
    reloaded.load()
    assert "a" not in reloaded


def test_reload_reads_saved_ids(tmp_path: Path) -> None:
    path = tmp_path / "favorites.json"
    store = FavoriteStore(path)
    store.load()
    store.toggle("x")
    store.toggle("y")

    reloaded = FavoriteStore(path)
    reloaded.load()

    assert list(reloaded) == ["x", "y"]
    assert reloaded.is_favorite("x")


def test_corrupt_file_loads_empty_and_warns(tmp_path: Path, caplog) -> None:
    path = tmp_path / "favorites.json"
    path.write_text("{not json", encoding="utf-8")
    store = FavoriteStore(path)

    with caplog.at_level(logging.WARNING):
        store.load()

    assert len(store) == 0
    assert "Could not read favorites" in caplog.text


def test_ignores_non_string_entries(tmp_path: Path) -> None:
    path = tmp_path / "favorites.json"
    path.write_text(json.dumps({FAVORITES_KEY: ["a", 3, None, ""]}), encoding="utf-8")
    store = FavoriteStore(path)
    store.load()

    assert store.ids == frozenset({"a"})


def test_clear_removes_file(tmp_path: Path) -> None:
    path = tmp_path / "favorites.json"
    store = FavoriteStore(path)
    store.load()
    store.toggle("a")

    store.clear()

    assert not path.exists()
    assert len(store) == 0
    store.clear()
