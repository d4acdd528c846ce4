# folderterm/filetree/models.py

import os
from typing import List, Optional

from ..utils.icons import icon_name_for


class FolderNode:
    """One entry of the directory tree.

    ``children`` is None until the tree has listed the node, so an empty
    list means "listed, nothing to show" rather than "not loaded yet".
    """

    __slots__ = ("_path", "_name", "_is_directory", "children", "_icon_name")

    def __init__(self, path: str, is_directory: bool, name: Optional[str] = None):
        self._path = path
        self._name = name if name is not None else (os.path.basename(path) or path)
        self._is_directory = is_directory
        self.children: Optional[List["FolderNode"]] = None
        self._icon_name: Optional[str] = None

    @property
    def path(self) -> str:
        return self._path

    @property
    def name(self) -> str:
        return self._name

    @property
    def is_directory(self) -> bool:
        return self._is_directory

    @property
    def is_loaded(self) -> bool:
        return self.children is not None

    @property
    def label(self) -> str:
        return self._name

    @property
    def icon_name(self) -> str:
        if self._icon_name is None:
            self._icon_name = icon_name_for(self._path, self._is_directory)
        return self._icon_name

    def __repr__(self) -> str:
        kind = "dir" if self._is_directory else "file"
        return f"FolderNode({self._path!r}, {kind})"
