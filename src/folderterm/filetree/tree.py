# folderterm/filetree/tree.py

import locale
import os
import unicodedata
from typing import Iterator, List, Optional, Sequence

from ..utils.exceptions import DirectoryListingError
from ..utils.logger import get_logger
from .models import FolderNode


def _strip_accents(text: str) -> str:
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(c for c in decomposed if not unicodedata.combining(c))


def sort_key(name: str, is_directory: bool):
    """
    Directories first, then case-insensitive locale order, then raw name.

    Accents are compared after base letters, so "éclair" sorts with the
    e's even under the C locale.
    """
    folded = name.casefold()
    return (
        not is_directory,
        locale.strxfrm(_strip_accents(folded)),
        locale.strxfrm(folded),
        name,
    )


def is_hidden(name: str) -> bool:
    return name.startswith(".")


class FolderTree:
    """
    Lazily materialized directory tree.

    Nodes are listed on first request only. Listing errors never escape:
    an unreadable directory simply has no children.
    """

    def __init__(self, root_path: str):
        self.logger = get_logger("folderterm.filetree.tree")
        self._root = self._make_root(root_path)

    @staticmethod
    def _make_root(root_path: str) -> FolderNode:
        path = os.path.abspath(os.path.expanduser(root_path))
        return FolderNode(path, is_directory=os.path.isdir(path))

    @property
    def root(self) -> FolderNode:
        return self._root

    def set_root(self, root_path: str) -> FolderNode:
        """Discard the current tree and start a new one at ``root_path``."""
        self._root = self._make_root(root_path)
        self.logger.info(f"Tree root changed to {self._root.path}")
        return self._root

    def is_expandable(self, node: FolderNode) -> bool:
        return node.is_directory

    def load_children(self, node: FolderNode) -> Sequence[FolderNode]:
        """
        List ``node`` once and return its children.

        Calling again returns the same list without touching the file
        system. Files always have an empty child list.
        """
        if node.children is not None:
            return node.children
        if not node.is_directory:
            node.children = []
            return node.children

        try:
            node.children = self._list_directory(node.path)
        except DirectoryListingError as e:
            self.logger.warning(str(e))
            node.children = []
        return node.children

    def children(self, node: FolderNode) -> Sequence[FolderNode]:
        return self.load_children(node)

    def _list_directory(self, path: str) -> List[FolderNode]:
        entries = []
        try:
            with os.scandir(path) as it:
                for entry in it:
                    if is_hidden(entry.name):
                        continue
                    entries.append((entry.name, self._entry_is_directory(entry)))
        except OSError as e:
            raise DirectoryListingError(path, e.strerror or str(e)) from e

        entries.sort(key=lambda item: sort_key(item[0], item[1]))
        return [
            FolderNode(os.path.join(path, name), is_directory, name=name)
            for name, is_directory in entries
        ]

    @staticmethod
    def _entry_is_directory(entry: os.DirEntry) -> bool:
        # Symlinks to directories are browsable; broken links count as files.
        try:
            return entry.is_dir(follow_symlinks=True)
        except OSError:
            return False

    def find(self, path: str) -> Optional[FolderNode]:
        """Locate an already-loaded node by absolute path."""
        path = os.path.abspath(path)
        for node in self.walk_loaded():
            if node.path == path:
                return node
        return None

    def walk_loaded(self) -> Iterator[FolderNode]:
        """Depth-first iteration over nodes materialized so far."""
        stack = [self._root]
        while stack:
            node = stack.pop()
            yield node
            if node.children:
                stack.extend(reversed(node.children))
