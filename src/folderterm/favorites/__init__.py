# folderterm/favorites/__init__.py
"""Persistent favorites list."""

from .models import Favorite
from .storage import FavoritesStorage
from .store import FavoritesStore

__all__ = ["Favorite", "FavoritesStorage", "FavoritesStore"]
