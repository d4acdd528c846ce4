# folderterm/favorites/store.py

import os
import time
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from ..utils.exceptions import StorageError, handle_exception
from ..utils.logger import get_logger, log_favorite_event
from .models import Favorite
from .storage import FavoritesStorage


def normalize_favorite_path(path: str) -> str:
    return os.path.abspath(os.path.expanduser(path))


def block_move(
    items: Sequence, indices: Iterable[int], destination: int
) -> Optional[list]:
    """
    Move the items at ``indices`` as one block so that it lands before
    ``destination`` (an index into the list before the move).

    The moved items keep their relative order. Indices outside the list are
    ignored. Returns None when nothing valid was selected.
    """
    count = len(items)
    selected = sorted({i for i in indices if 0 <= i < count})
    if not selected:
        return None

    selected_set = set(selected)
    moved = [items[i] for i in selected]
    remaining = [item for i, item in enumerate(items) if i not in selected_set]

    shift = sum(1 for i in selected if i < destination)
    target = min(max(destination - shift, 0), len(remaining))
    return remaining[:target] + moved + remaining[target:]


class FavoritesStore:
    """
    Ordered list of favorites with write-through persistence.

    Every mutation builds a new tuple and swaps it in, so anything holding a
    previous ``favorites`` snapshot keeps seeing a consistent list. Invalid
    requests (unknown index, duplicate path, blank name) change nothing and
    return False.
    """

    def __init__(self, storage: FavoritesStorage, clock: Callable[[], float] = time.time):
        self.logger = get_logger("folderterm.favorites.store")
        self.storage = storage
        self._clock = clock
        self._favorites: Tuple[Favorite, ...] = ()
        self._listeners: List[Callable[[Tuple[Favorite, ...]], None]] = []

    @property
    def favorites(self) -> Tuple[Favorite, ...]:
        return self._favorites

    def __len__(self) -> int:
        return len(self._favorites)

    def __iter__(self):
        return iter(self._favorites)

    def __getitem__(self, index: int) -> Favorite:
        return self._favorites[index]

    def contains_path(self, path: str) -> bool:
        path = normalize_favorite_path(path)
        return any(favorite.path == path for favorite in self._favorites)

    def index_of(self, path: str) -> int:
        path = normalize_favorite_path(path)
        for i, favorite in enumerate(self._favorites):
            if favorite.path == path:
                return i
        return -1

    def add_change_listener(self, listener: Callable[[Tuple[Favorite, ...]], None]):
        if listener not in self._listeners:
            self._listeners.append(listener)

    def add(self, path: str) -> bool:
        """Append a favorite for ``path`` unless one already exists."""
        return self.add_many([path]) > 0

    def add_many(self, paths: Iterable[str]) -> int:
        """Append favorites for several paths, persisting once.

        Returns the number of favorites actually added.
        """
        new_list = list(self._favorites)
        known = {favorite.path for favorite in new_list}
        added = []
        for raw_path in paths:
            if not raw_path:
                continue
            path = normalize_favorite_path(raw_path)
            if path in known:
                self.logger.debug(f"Favorite already present: {path}")
                continue
            favorite = Favorite.for_path(path, now=self._clock())
            new_list.append(favorite)
            known.add(path)
            added.append(favorite)

        if not added:
            return 0
        self._commit(new_list)
        for favorite in added:
            log_favorite_event("added", favorite.name, favorite.path)
        return len(added)

    def remove_at(self, index: int) -> bool:
        if not 0 <= index < len(self._favorites):
            return False
        new_list = list(self._favorites)
        removed = new_list.pop(index)
        self._commit(new_list)
        log_favorite_event("removed", removed.name)
        return True

    def remove_many(self, indices: Iterable[int]) -> int:
        """Remove several rows; highest index first so positions stay valid."""
        new_list = list(self._favorites)
        removed = 0
        for index in sorted(set(indices), reverse=True):
            if 0 <= index < len(new_list):
                new_list.pop(index)
                removed += 1
        if removed:
            self._commit(new_list)
            log_favorite_event("removed", f"{removed} items")
        return removed

    def rename_at(self, index: int, new_name: str) -> bool:
        if not 0 <= index < len(self._favorites):
            return False
        name = (new_name or "").strip()
        if not name:
            return False
        current = self._favorites[index]
        if current.name == name:
            return False
        new_list = list(self._favorites)
        new_list[index] = current.renamed(name)
        self._commit(new_list)
        log_favorite_event("renamed", current.name, f"now '{name}'")
        return True

    def move(self, indices: Iterable[int], destination: int) -> bool:
        """
        Reorder by moving the rows at ``indices`` as a block to ``destination``.

        ``destination`` is a row position in the list as it is before the
        move; the landing position is shifted left by the number of moved
        rows above it and clamped to the list.
        """
        new_list = block_move(self._favorites, indices, destination)
        if new_list is None or tuple(new_list) == self._favorites:
            return False
        self._commit(new_list)
        return True

    def load(self) -> Tuple[Favorite, ...]:
        """Replace the in-memory list with the stored one.

        Unreadable or corrupt storage leaves the store empty.
        """
        try:
            loaded = self.storage.load()
        except StorageError as e:
            self.logger.warning(f"Favorites could not be loaded, starting empty: {e}")
            loaded = []

        unique = []
        seen = set()
        for favorite in loaded:
            if favorite.path in seen:
                continue
            seen.add(favorite.path)
            unique.append(favorite)

        self._favorites = tuple(unique)
        self.logger.info(f"Loaded {len(self._favorites)} favorites")
        self._notify()
        return self._favorites

    def save(self) -> bool:
        """Write the current list. Failures are logged and reported as False."""
        try:
            self.storage.save(self._favorites)
            return True
        except StorageError as e:
            handle_exception(e, "favorites save", "folderterm.favorites.store")
            return False

    def _commit(self, new_list: List[Favorite]) -> None:
        self._favorites = tuple(new_list)
        self.save()
        self._notify()

    def _notify(self) -> None:
        snapshot = self._favorites
        for listener in self._listeners:
            try:
                listener(snapshot)
            except Exception as e:
                self.logger.error(f"Favorites listener failed: {e}")
