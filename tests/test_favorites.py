# tests/test_favorites.py
"""Tests for the favorites model, storage and store."""

import json
import os

import pytest

from folderterm.core.display import DisplayRow
from folderterm.favorites.models import Favorite
from folderterm.favorites.storage import FavoritesStorage
from folderterm.favorites.store import FavoritesStore, block_move
from folderterm.utils.exceptions import StorageCorruptedError, StorageWriteError


@pytest.fixture
def favorites_file(tmp_path):
    return tmp_path / "data" / "favorites.json"


@pytest.fixture
def store(favorites_file):
    ticks = iter(range(1_000_000, 2_000_000))
    return FavoritesStore(FavoritesStorage(favorites_file), clock=lambda: float(next(ticks)))


def _paths(store):
    return [favorite.path for favorite in store.favorites]


class TestFavoriteModel:
    """Favorite construction and serialization."""

    def test_for_path_uses_last_segment(self):
        favorite = Favorite.for_path("/home/user/projects", now=5.0)
        assert favorite.name == "projects"
        assert favorite.date_added == 5.0

    def test_for_root_path_uses_path(self):
        assert Favorite.for_path("/").name == "/"

    def test_to_dict_keys(self):
        favorite = Favorite(name="p", path="/p", date_added=1.5)
        assert favorite.to_dict() == {"name": "p", "path": "/p", "dateAdded": 1.5}

    def test_from_dict_rejects_missing_fields(self):
        with pytest.raises(ValueError):
            Favorite.from_dict({"name": "x"})

    def test_from_dict_rejects_boolean_date(self):
        with pytest.raises(ValueError):
            Favorite.from_dict({"name": "x", "path": "/x", "dateAdded": True})

    def test_from_dict_rejects_blank_name(self):
        """A name of only whitespace is as invalid as an empty one."""
        with pytest.raises(ValueError):
            Favorite.from_dict({"name": "   ", "path": "/x", "dateAdded": 1})

    def test_display_row_fields(self, tmp_path):
        favorite = Favorite.for_path(str(tmp_path))
        assert favorite.label == tmp_path.name
        assert favorite.icon_name == "folder-symbolic"
        assert isinstance(favorite, DisplayRow)
        assert favorite.exists


class TestBlockMove:
    """The reordering rule on plain lists."""

    def test_move_first_and_third_to_one(self):
        """{0,2} -> 1 on [A,B,C]: one moved index is below 1, so it lands at 0."""
        assert block_move(["A", "B", "C"], {0, 2}, 1) == ["A", "C", "B"]

    def test_move_to_end(self):
        assert block_move(["A", "B", "C", "D"], [0, 1], 4) == ["C", "D", "A", "B"]

    def test_move_to_start(self):
        assert block_move(["A", "B", "C", "D"], [2, 3], 0) == ["C", "D", "A", "B"]

    def test_destination_beyond_end_is_clamped(self):
        assert block_move(["A", "B", "C"], [0], 99) == ["B", "C", "A"]

    def test_negative_destination_is_clamped(self):
        assert block_move(["A", "B", "C"], [2], -5) == ["C", "A", "B"]

    def test_moved_items_keep_relative_order(self):
        assert block_move(["A", "B", "C", "D", "E"], [3, 1], 5) == ["A", "C", "E", "B", "D"]

    def test_out_of_range_indices_ignored(self):
        assert block_move(["A", "B"], [7, -1], 0) is None
        assert block_move(["A", "B", "C"], [2, 9], 0) == ["C", "A", "B"]


class TestFavoritesStore:
    """Mutations and persistence of FavoritesStore."""

    def test_add_appends_with_name_and_date(self, store, tmp_path):
        assert store.add(str(tmp_path / "alpha")) is True
        favorite = store.favorites[0]
        assert favorite.name == "alpha"
        assert favorite.date_added == 1_000_000.0

    def test_add_duplicate_is_noop(self, store, tmp_path):
        path = str(tmp_path / "alpha")
        store.add(path)
        assert store.add(path) is False
        assert store.add(path + "/") is False
        assert len(store) == 1

    def test_add_never_creates_duplicate_paths(self, store, tmp_path):
        paths = [str(tmp_path / name) for name in ("a", "b", "a", "c", "b", "a")]
        for path in paths:
            store.add(path)
        store.add_many(paths)
        assert len(set(_paths(store))) == len(store) == 3

    def test_add_many_counts_new_entries(self, store, tmp_path):
        store.add(str(tmp_path / "a"))
        added = store.add_many([str(tmp_path / n) for n in ("a", "b", "c")])
        assert added == 2
        assert [f.name for f in store] == ["a", "b", "c"]

    def test_remove_at(self, store, tmp_path):
        store.add_many([str(tmp_path / n) for n in ("a", "b", "c")])
        assert store.remove_at(1) is True
        assert [f.name for f in store] == ["a", "c"]

    def test_remove_at_out_of_range_is_noop(self, store, tmp_path):
        store.add(str(tmp_path / "a"))
        before = store.favorites
        assert store.remove_at(5) is False
        assert store.remove_at(-1) is False
        assert store.favorites is before

    def test_remove_many(self, store, tmp_path):
        store.add_many([str(tmp_path / n) for n in ("a", "b", "c", "d")])
        assert store.remove_many([0, 2, 9]) == 2
        assert [f.name for f in store] == ["b", "d"]

    def test_rename_trims(self, store, tmp_path):
        store.add(str(tmp_path / "a"))
        assert store.rename_at(0, "  Work  ") is True
        assert store.favorites[0].name == "Work"
        assert store.favorites[0].path == str(tmp_path / "a")

    def test_rename_whitespace_only_is_noop(self, store, tmp_path):
        store.add(str(tmp_path / "a"))
        assert store.rename_at(0, "   ") is False
        assert store.rename_at(0, "") is False
        assert store.favorites[0].name == "a"

    def test_rename_out_of_range_is_noop(self, store):
        assert store.rename_at(0, "x") is False

    def test_move_uses_clamped_destination(self, store, tmp_path):
        store.add_many([str(tmp_path / n) for n in ("A", "B", "C")])
        assert store.move({0, 2}, 1) is True
        assert [f.name for f in store] == ["A", "C", "B"]

    def test_move_without_effect_reports_false(self, store, tmp_path):
        store.add_many([str(tmp_path / n) for n in ("A", "B")])
        assert store.move([0], 0) is False
        assert store.move([5], 0) is False

    def test_snapshots_are_not_mutated(self, store, tmp_path):
        store.add(str(tmp_path / "a"))
        snapshot = store.favorites
        store.add(str(tmp_path / "b"))
        store.rename_at(0, "renamed")
        assert [f.name for f in snapshot] == ["a"]

    def test_mutations_are_written_through(self, store, favorites_file, tmp_path):
        store.add(str(tmp_path / "a"))
        with open(favorites_file, encoding="utf-8") as f:
            data = json.load(f)
        assert data == [{"name": "a", "path": str(tmp_path / "a"), "dateAdded": 1_000_000.0}]

    def test_lookup_by_path(self, store, tmp_path):
        store.add_many([str(tmp_path / n) for n in ("a", "b")])

        assert store.contains_path(str(tmp_path / "b") + "/")
        assert store.index_of(str(tmp_path / "b")) == 1
        assert store.index_of(str(tmp_path / "zzz")) == -1

    def test_listeners_receive_new_snapshot(self, store, tmp_path):
        seen = []
        store.add_change_listener(seen.append)
        store.add(str(tmp_path / "a"))
        assert len(seen) == 1 and seen[0][0].name == "a"

    @pytest.mark.parametrize("count", [0, 1, 100])
    def test_save_load_round_trip(self, store, favorites_file, tmp_path, count):
        store.add_many([str(tmp_path / f"dir{i}") for i in range(count)])
        if count:
            store.rename_at(0, "First")
        assert store.save() is True

        reloaded = FavoritesStore(FavoritesStorage(favorites_file))
        reloaded.load()

        assert reloaded.favorites == store.favorites

    def test_load_missing_file_is_empty(self, store):
        assert store.load() == ()

    def test_load_corrupt_json_is_empty(self, store, favorites_file):
        favorites_file.parent.mkdir(parents=True)
        favorites_file.write_text("{not json", encoding="utf-8")
        assert store.load() == ()

    def test_load_with_one_bad_record_is_empty(self, store, favorites_file):
        favorites_file.parent.mkdir(parents=True)
        favorites_file.write_text(
            json.dumps([
                {"name": "ok", "path": "/ok", "dateAdded": 1},
                {"name": "bad", "path": "/bad"},
            ]),
            encoding="utf-8",
        )
        assert store.load() == ()

    def test_load_with_blank_name_is_empty(self, store, favorites_file):
        favorites_file.parent.mkdir(parents=True)
        favorites_file.write_text(
            json.dumps([{"name": " \t", "path": "/ok", "dateAdded": 1}]),
            encoding="utf-8",
        )
        assert store.load() == ()

    def test_load_ignores_unknown_keys(self, store, favorites_file):
        favorites_file.parent.mkdir(parents=True)
        favorites_file.write_text(
            json.dumps([{"name": "ok", "path": "/ok", "dateAdded": 2, "color": "red"}]),
            encoding="utf-8",
        )
        assert store.load()[0].name == "ok"

    def test_save_failure_is_logged_not_raised(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        store = FavoritesStore(FavoritesStorage(blocker / "favorites.json"))

        assert store.add(str(tmp_path / "a")) is True
        assert store.save() is False
        assert len(store) == 1


class TestFavoritesStorage:
    """Direct storage errors, before the store absorbs them."""

    def test_corrupt_root_raises(self, favorites_file):
        favorites_file.parent.mkdir(parents=True)
        favorites_file.write_text('{"name": "x"}', encoding="utf-8")
        with pytest.raises(StorageCorruptedError):
            FavoritesStorage(favorites_file).load()

    def test_empty_file_loads_empty(self, favorites_file):
        favorites_file.parent.mkdir(parents=True)
        favorites_file.write_text("", encoding="utf-8")
        assert FavoritesStorage(favorites_file).load() == []

    def test_write_error_raises_and_leaves_no_temp(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("file")
        storage = FavoritesStorage(blocker / "favorites.json")
        with pytest.raises(StorageWriteError):
            storage.save([Favorite(name="a", path="/a", date_added=1.0)])

    def test_save_replaces_atomically(self, favorites_file):
        storage = FavoritesStorage(favorites_file)
        storage.save([Favorite(name="a", path="/a", date_added=1.0)])
        storage.save([Favorite(name="b", path="/b", date_added=2.0)])

        assert [f.name for f in storage.load()] == ["b"]
        assert not os.path.exists(favorites_file.with_suffix(".tmp"))
