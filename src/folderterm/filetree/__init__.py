# folderterm/filetree/__init__.py
"""Lazy directory tree."""

from .models import FolderNode
from .tree import FolderTree

__all__ = ["FolderNode", "FolderTree"]
