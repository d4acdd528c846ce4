# folderterm/favorites/storage.py

import json
import os
import threading
from pathlib import Path
from typing import List, Sequence

from ..utils.exceptions import (
    StorageCorruptedError,
    StorageReadError,
    StorageWriteError,
)
from ..utils.logger import get_logger
from ..utils.translation_utils import _
from .models import Favorite

MAX_FILE_SIZE = 10 * 1024 * 1024


class FavoritesStorage:
    """Reads and writes the favorites file.

    The file holds a JSON array of ``{"name", "path", "dateAdded"}`` objects.
    Writes go to a temporary sibling first and replace the target in one
    rename, so a crash never leaves a half-written file behind.
    """

    def __init__(self, favorites_file: Path):
        self.logger = get_logger("folderterm.favorites.storage")
        self.favorites_file = Path(favorites_file)
        self._file_lock = threading.RLock()

    def load(self) -> List[Favorite]:
        """
        Load all favorites in stored order.

        A missing or empty file yields an empty list.

        Raises:
            StorageReadError: the file exists but cannot be read
            StorageCorruptedError: the content is not a valid favorites array
        """
        with self._file_lock:
            if not self.favorites_file.exists():
                self.logger.info("Favorites file does not exist, returning empty list")
                return []
            try:
                size = self.favorites_file.stat().st_size
                if size == 0:
                    return []
                if size > MAX_FILE_SIZE:
                    raise StorageReadError(
                        str(self.favorites_file), _("File too large (>10MB)")
                    )
                with open(self.favorites_file, "r", encoding="utf-8") as f:
                    data = json.load(f)
            except json.JSONDecodeError as e:
                raise StorageCorruptedError(
                    str(self.favorites_file), _("Invalid JSON: {}").format(e)
                ) from e
            except UnicodeDecodeError as e:
                raise StorageReadError(
                    str(self.favorites_file), _("Encoding error: {}").format(e)
                ) from e
            except OSError as e:
                raise StorageReadError(str(self.favorites_file), str(e)) from e

        if not isinstance(data, list):
            raise StorageCorruptedError(
                str(self.favorites_file), _("Root data is not a list")
            )

        favorites = []
        for i, record in enumerate(data):
            try:
                favorites.append(Favorite.from_dict(record))
            except ValueError as e:
                # One bad record invalidates the file as a whole.
                raise StorageCorruptedError(
                    str(self.favorites_file), _("Record {}: {}").format(i, e)
                ) from e
        self.logger.debug(f"Loaded {len(favorites)} favorites")
        return favorites

    def save(self, favorites: Sequence[Favorite]) -> None:
        """
        Replace the file contents with ``favorites``.

        Raises:
            StorageWriteError: if any step of the write fails
        """
        data_to_save = [favorite.to_dict() for favorite in favorites]
        with self._file_lock:
            temp_file = self.favorites_file.with_suffix(".tmp")
            try:
                self.favorites_file.parent.mkdir(parents=True, exist_ok=True)
                self._write_temp_file(temp_file, data_to_save)
            except OSError as e:
                self._discard(temp_file)
                raise StorageWriteError(str(self.favorites_file), str(e)) from e
            self._atomic_replace(temp_file)
        self.logger.debug(f"Saved {len(data_to_save)} favorites")

    def _write_temp_file(self, temp_file: Path, data_to_save: list) -> None:
        with open(temp_file, "w", encoding="utf-8") as f:
            json.dump(data_to_save, f, indent=4, ensure_ascii=False)
            f.flush()
            os.fsync(f.fileno())

    def _atomic_replace(self, temp_file: Path) -> None:
        try:
            os.replace(temp_file, self.favorites_file)
        except OSError as e:
            self._discard(temp_file)
            raise StorageWriteError(
                str(self.favorites_file), _("File write failed: {}").format(e)
            ) from e

    def _discard(self, temp_file: Path) -> None:
        try:
            if temp_file.exists():
                temp_file.unlink()
        except OSError as e:
            self.logger.warning(f"Could not remove temporary file {temp_file}: {e}")
