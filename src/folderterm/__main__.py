# folderterm/__main__.py

import argparse
import os
import shutil
import signal
import sys
import termios
import tty

import setproctitle

from .settings.config import AppConstants, get_config_paths
from .utils.logger import (
    enable_debug_mode,
    get_log_info,
    get_logger,
    log_app_shutdown,
    log_app_start,
    set_console_level,
)
from .settings.manager import SettingsManager
from .utils.platform import normalize_path, setup_collation_locale
from .utils.translation_utils import _


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=AppConstants.APP_NAME,
        description=_("FolderTerm - folder tree, favorites and per-folder shells"),
    )
    parser.add_argument(
        "--version", "-v", action="version",
        version=f"%(prog)s {AppConstants.APP_VERSION}",
    )
    parser.add_argument("--debug", "-d", action="store_true", help=_("Enable debug mode"))
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help=_("Set logging level"),
    )
    parser.add_argument(
        "--favorites-file", metavar="FILE", help=_("Use another favorites file")
    )
    commands = parser.add_subparsers(dest="command")

    favorites = commands.add_parser("favorites", help=_("Manage favorites"))
    fav_commands = favorites.add_subparsers(dest="action")
    fav_commands.add_parser("list", help=_("List favorites"))
    add = fav_commands.add_parser("add", help=_("Add paths to favorites"))
    add.add_argument("paths", nargs="+")
    remove = fav_commands.add_parser("remove", help=_("Remove favorites by index"))
    remove.add_argument("indices", nargs="+", type=int)
    rename = fav_commands.add_parser("rename", help=_("Rename a favorite"))
    rename.add_argument("index", type=int)
    rename.add_argument("name")
    move = fav_commands.add_parser("move", help=_("Move favorites to a new position"))
    move.add_argument("indices", nargs="+", type=int)
    move.add_argument("--to", dest="destination", type=int, required=True)

    tree = commands.add_parser("tree", help=_("Print the folder tree"))
    tree.add_argument("path", nargs="?", default=None)
    tree.add_argument("--depth", type=int, default=1)

    open_cmd = commands.add_parser(
        "open", help=_("Open a folder in a shell, or a file in its application")
    )
    open_cmd.add_argument("path", nargs="?", default=os.getcwd())
    return parser


def _favorites_store(args):
    from .favorites.storage import FavoritesStorage
    from .favorites.store import FavoritesStore

    if args.favorites_file:
        path = normalize_path(args.favorites_file)
    else:
        path = get_config_paths().FAVORITES_FILE
    store = FavoritesStore(FavoritesStorage(path))
    store.load()
    return store


def _print_favorites(store) -> None:
    for index, favorite in enumerate(store.favorites):
        marker = "" if favorite.exists else "  " + _("(missing)")
        print(f"{index:3d}  {favorite.name}\t{favorite.path}{marker}")


def run_favorites(args) -> int:
    store = _favorites_store(args)
    action = args.action or "list"
    if action == "add":
        added = store.add_many(args.paths)
        print(_("Added {} favorite(s)").format(added))
    elif action == "remove":
        removed = store.remove_many(args.indices)
        print(_("Removed {} favorite(s)").format(removed))
    elif action == "rename":
        if not store.rename_at(args.index, args.name):
            print(_("Nothing renamed"), file=sys.stderr)
            return 1
    elif action == "move":
        if not store.move(args.indices, args.destination):
            print(_("Nothing moved"), file=sys.stderr)
            return 1
    _print_favorites(store)
    return 0


def run_tree(args) -> int:
    from .filetree.tree import FolderTree

    tree = FolderTree(args.path or os.getcwd())

    def show(node, depth):
        for child in tree.load_children(node):
            suffix = "/" if child.is_directory else ""
            print(f"{'  ' * depth}{child.name}{suffix}")
            if tree.is_expandable(child) and depth + 1 < args.depth:
                show(child, depth + 1)

    print(tree.root.path)
    show(tree.root, 0)
    return 0


class _RawTerminal:
    """Puts the controlling terminal into raw mode for the duration."""

    def __init__(self, fd: int):
        self.fd = fd
        self.saved = None

    def __enter__(self):
        if os.isatty(self.fd):
            self.saved = termios.tcgetattr(self.fd)
            tty.setraw(self.fd)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.saved is not None:
            termios.tcsetattr(self.fd, termios.TCSADRAIN, self.saved)


def run_open(args, settings=None) -> int:
    from gi.repository import GLib

    from .core.events import EventQueue, OutputReceived, ProcessExited, install_glib_wakeup
    from .terminal.launcher import PtyLauncher
    from .workspace import create_workspace

    logger = get_logger("folderterm.main")
    events = EventQueue()
    size = shutil.get_terminal_size()
    launcher = PtyLauncher(events, forward_output=True, rows=size.lines, cols=size.columns)
    workspace = create_workspace(
        settings, launcher=launcher, events=events, favorites_file=args.favorites_file
    )
    workspace.favorites.load()

    result = workspace.open_path(args.path)
    if result is None:
        return 0
    if not result.success:
        print(result.error.user_message + f": {result.error.reason}", file=sys.stderr)
        return 1

    session = result.session
    loop = GLib.MainLoop()
    exit_status = {"code": 0}

    def on_event(event, affected):
        if event.session_id != session.session_id:
            return
        if isinstance(event, OutputReceived):
            os.write(sys.stdout.fileno(), event.data)
        elif isinstance(event, ProcessExited) and affected is session:
            exit_status["code"] = event.status
            loop.quit()

    def on_stdin(fd, condition):
        if condition & (GLib.IOCondition.HUP | GLib.IOCondition.ERR):
            workspace.registry.terminate(session)
            loop.quit()
            return GLib.SOURCE_REMOVE
        workspace.registry.write(session, os.read(fd, 4096))
        return GLib.SOURCE_CONTINUE

    def on_resize():
        new_size = shutil.get_terminal_size()
        workspace.registry.resize(session, new_size.lines, new_size.columns)
        return GLib.SOURCE_CONTINUE

    workspace.add_listener(on_event)
    install_glib_wakeup(events, workspace.process_events)
    workspace.process_events()
    stdin_fd = sys.stdin.fileno()
    GLib.io_add_watch(
        stdin_fd,
        GLib.PRIORITY_DEFAULT,
        GLib.IOCondition.IN | GLib.IOCondition.HUP | GLib.IOCondition.ERR,
        on_stdin,
    )
    GLib.unix_signal_add(GLib.PRIORITY_DEFAULT, signal.SIGWINCH, on_resize)

    logger.info(f"Session {session.session_id} attached for {session.path}")
    with _RawTerminal(stdin_fd):
        loop.run()
    workspace.shutdown()
    return exit_status["code"]


def configure_console_logging(args, settings) -> None:
    """Apply --debug or --log-level, else the stored console level."""
    if args.debug:
        enable_debug_mode()
    elif args.log_level:
        set_console_level(args.log_level)
    elif not get_log_info()["debug_enabled"]:
        set_console_level(settings.get("console_log_level", "WARNING"))


def main() -> int:
    """Main entry point for the application."""
    parser = build_parser()
    args = parser.parse_args()

    settings = SettingsManager()
    configure_console_logging(args, settings)
    setup_collation_locale()

    logger = get_logger("folderterm.main")
    setproctitle.setproctitle(AppConstants.APP_NAME)
    logger.debug(f"Process title set to '{AppConstants.APP_NAME}'.")

    log_app_start()
    try:
        if args.command == "favorites":
            return run_favorites(args)
        if args.command == "tree":
            return run_tree(args)
        if args.command == "open":
            return run_open(args, settings)
        parser.print_help()
        return 0
    except KeyboardInterrupt:
        logger.info("Interrupted by user.")
        return 130
    finally:
        log_app_shutdown()


if __name__ == "__main__":
    sys.exit(main())
