# folderterm/workspace.py

import os
from typing import Callable, List, Optional, Union

from .core.events import EventQueue, OutputReceived, SessionEvent
from .favorites.storage import FavoritesStorage
from .favorites.store import FavoritesStore
from .filetree.models import FolderNode
from .filetree.tree import FolderTree
from .terminal.launcher import ShellLauncher
from .terminal.registry import OpenResult, SessionRegistry
from .terminal.session import Session
from .terminal.spawner import ShellSpawner
from .utils.exceptions import handle_exception
from .utils.logger import get_logger
from .utils.platform import setup_collation_locale

FileOpener = Callable[[str], None]
EventListener = Callable[[SessionEvent, Optional[Session]], None]


class Workspace:
    """
    Ties the folder tree, the favorites list and the shell sessions together.

    Holds references only: directories go to the session registry, files go
    to the file opener, and launcher events are applied here on the thread
    that calls process_events().
    """

    def __init__(self, tree: FolderTree, favorites: FavoritesStore,
                 registry: SessionRegistry, events: EventQueue,
                 file_opener: FileOpener, settings=None):
        self.logger = get_logger("folderterm.workspace")
        self.tree = tree
        self.favorites = favorites
        self.registry = registry
        self.events = events
        self.file_opener = file_opener
        self.settings = settings
        self._listeners: List[EventListener] = []

    def open_path(self, path: str) -> Optional[OpenResult]:
        """
        Open a directory in a shell session, or a file in the external viewer.

        Returns the registry's result for directories and None for files.
        """
        path = os.path.abspath(os.path.expanduser(path))
        if os.path.isdir(path):
            result = self.registry.open(path)
            if not result.success:
                self.logger.warning(f"Opening {path} failed: {result.error}")
            return result
        self._open_file(path)
        return None

    def _open_file(self, path: str) -> None:
        if not os.path.exists(path):
            self.logger.warning(f"Cannot open missing file {path}")
            return
        try:
            self.file_opener(path)
        except Exception as e:
            # GLib.Error and OSError both end up here.
            handle_exception(e, f"opening {path}", "folderterm.workspace")

    def open_node(self, node: FolderNode) -> Optional[OpenResult]:
        return self.open_path(node.path)

    def open_favorite(self, index: int) -> Optional[OpenResult]:
        if not 0 <= index < len(self.favorites):
            return None
        return self.open_path(self.favorites[index].path)

    def add_to_favorites(self, target: Union[FolderNode, str]) -> bool:
        path = target.path if isinstance(target, FolderNode) else target
        return self.favorites.add(path)

    def add_listener(self, listener: EventListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_listener(self, listener: EventListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def process_events(self) -> int:
        """Apply all queued launcher events; returns how many were handled."""
        events = self.events.drain()
        for event in events:
            session = None
            if not isinstance(event, OutputReceived):
                session = self.registry.handle_event(event)
            for listener in list(self._listeners):
                try:
                    listener(event, session)
                except Exception as e:
                    self.logger.error(f"Event listener failed for {event!r}: {e}")
        return len(events)

    def start(self) -> Optional[OpenResult]:
        """Load favorites and, if enabled, open a shell in the home folder."""
        self.favorites.load()
        open_home = True
        if self.settings is not None:
            open_home = self.settings.get("open_home_on_startup", True)
        if open_home:
            return self.open_path(os.path.expanduser("~"))
        return None

    def shutdown(self) -> None:
        """Flush favorites and stop every shell."""
        self.process_events()
        self.favorites.save()
        self.registry.terminate_all()
        self.logger.info("Workspace shut down")


def default_file_opener(path: str) -> None:
    from .utils.icons import open_with_default_application

    open_with_default_application(path)


def create_workspace(settings=None, launcher: Optional[ShellLauncher] = None,
                     events: Optional[EventQueue] = None,
                     file_opener: Optional[FileOpener] = None,
                     favorites_file=None) -> Workspace:
    """
    Build a workspace from settings.

    Without a launcher, shells run on a plain pseudo-terminal.
    """
    from .settings.config import get_config_paths
    from .settings.manager import SettingsManager
    from .terminal.launcher import PtyLauncher

    setup_collation_locale()
    if settings is None:
        settings = SettingsManager()
    if events is None:
        events = EventQueue()
    launcher = launcher or PtyLauncher(events)

    tree_root = settings.get("tree_root") or os.path.expanduser("~")
    storage = FavoritesStorage(favorites_file or get_config_paths().FAVORITES_FILE)
    registry = SessionRegistry(
        ShellSpawner(settings),
        launcher,
        terminate_timeout=settings.get("terminate_timeout", 0.2),
    )
    return Workspace(
        tree=FolderTree(tree_root),
        favorites=FavoritesStore(storage),
        registry=registry,
        events=events,
        file_opener=file_opener or default_file_opener,
        settings=settings,
    )
