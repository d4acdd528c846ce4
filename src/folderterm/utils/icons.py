# folderterm/utils/icons.py

from functools import lru_cache
from pathlib import Path

from .logger import get_logger

FOLDER_ICON = "folder-symbolic"
GENERIC_FILE_ICON = "text-x-generic-symbolic"


def icon_name_for(path: str, is_directory: bool) -> str:
    """Themed icon name for a tree row or favorite."""
    if is_directory:
        return FOLDER_ICON
    return _icon_for_file_name(Path(path).name)


@lru_cache(maxsize=512)
def _icon_for_file_name(name: str) -> str:
    from gi.repository import Gio

    mime_type, _uncertain = Gio.content_type_guess(name, None)
    if mime_type:
        gicon = Gio.content_type_get_icon(mime_type)
        if isinstance(gicon, Gio.ThemedIcon) and gicon.get_names():
            return gicon.get_names()[0]
    return GENERIC_FILE_ICON


def open_with_default_application(path: str) -> None:
    """
    Hand a file to the desktop's default application for its type.

    Raises:
        gi.repository.GLib.Error: if no application could be launched
    """
    from gi.repository import Gio

    uri = Gio.File.new_for_path(path).get_uri()
    get_logger("folderterm.utils.icons").info(f"Opening {path} with default application")
    Gio.AppInfo.launch_default_for_uri(uri, None)
