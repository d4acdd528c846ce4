# folderterm/utils/platform.py

import locale
import os
import pwd
import sys
from pathlib import Path
from typing import Dict, Optional, Union

from .logger import get_logger


class PlatformInfo:
    """Per-user directories and account information for the current platform."""

    def __init__(self):
        self.logger = get_logger("folderterm.platform")
        self.home_dir = Path.home()
        self.is_macos = sys.platform == "darwin"
        self.config_dir = self._get_config_directory()
        self.cache_dir = self._get_cache_directory()
        self.data_dir = self._get_data_directory()

    def _get_config_directory(self) -> Path:
        if xdg_config := os.environ.get("XDG_CONFIG_HOME"):
            return Path(xdg_config) / "folderterm"
        return self.home_dir / ".config" / "folderterm"

    def _get_cache_directory(self) -> Path:
        if xdg_cache := os.environ.get("XDG_CACHE_HOME"):
            return Path(xdg_cache) / "folderterm"
        return self.home_dir / ".cache" / "folderterm"

    def _get_data_directory(self) -> Path:
        """Directory holding the favorites file."""
        if xdg_data := os.environ.get("XDG_DATA_HOME"):
            return Path(xdg_data) / "folderterm"
        if self.is_macos:
            return self.home_dir / "Library" / "Application Support" / "folderterm"
        return self.home_dir / ".local" / "share" / "folderterm"

    def get_user_shell(self, fallback: str) -> str:
        """
        Return the login shell recorded for the current user.

        The password database entry wins; an empty entry or a lookup failure
        yields ``fallback``.
        """
        try:
            shell = pwd.getpwuid(os.getuid()).pw_shell
        except KeyError:
            self.logger.warning(
                f"No password entry for uid {os.getuid()}, using {fallback}"
            )
            return fallback
        if not shell:
            return fallback
        return shell


class PathManager:
    """Path helpers."""

    def __init__(self, platform_info: PlatformInfo):
        self.platform_info = platform_info

    def normalize_path(self, path: Union[str, Path]) -> Path:
        """Expand ``~`` and make relative paths absolute."""
        path = Path(path).expanduser()
        if not path.is_absolute():
            path = path.resolve()
        return path


class EnvironmentManager:
    """Manage environment variables for terminal sessions."""

    def __init__(self, platform_info: PlatformInfo):
        self.platform_info = platform_info

    def get_terminal_environment(self) -> Dict[str, str]:
        """Get environment variables for terminal sessions."""
        env = os.environ.copy()
        env["TERM"] = "xterm-256color"
        env["COLORTERM"] = "truecolor"
        if "LANG" not in env:
            system_locale = locale.getlocale()[0]
            env["LANG"] = f"{system_locale}.UTF-8" if system_locale else "C.UTF-8"
        return env


_platform_info: Optional[PlatformInfo] = None


def get_platform_info() -> PlatformInfo:
    """Get the global platform information instance."""
    global _platform_info
    if _platform_info is None:
        _platform_info = PlatformInfo()
    return _platform_info


def get_path_manager() -> PathManager:
    return PathManager(get_platform_info())


def get_environment_manager() -> EnvironmentManager:
    return EnvironmentManager(get_platform_info())


def get_config_directory() -> Path:
    return get_platform_info().config_dir


def get_user_shell(fallback: str) -> str:
    return get_platform_info().get_user_shell(fallback)


def normalize_path(path: Union[str, Path]) -> Path:
    return get_path_manager().normalize_path(path)


def setup_collation_locale() -> bool:
    """Adopt the user's LC_COLLATE so locale.strxfrm orders names naturally."""
    try:
        locale.setlocale(locale.LC_COLLATE, "")
        return True
    except locale.Error as e:
        get_logger("folderterm.platform").warning(
            f"Could not apply user collation locale, using C ordering: {e}"
        )
        return False
