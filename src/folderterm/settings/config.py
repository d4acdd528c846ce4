"""
Configuration constants and default settings for FolderTerm.

Paths are resolved lazily through get_config_paths() so that the XDG
environment is read when the application starts rather than at import.
"""

from pathlib import Path
from typing import Any, Dict, Optional

from ..utils.logger import get_logger
from ..utils.platform import get_platform_info


class AppConstants:
    """Application metadata and identification constants."""

    APP_ID = "org.folderterm.FolderTerm"
    APP_NAME = "folderterm"
    APP_TITLE = "FolderTerm"
    APP_VERSION = "0.1.0"

    # Used when the password database has no usable shell entry
    DEFAULT_SHELL = "/bin/zsh"
    LOGIN_SHELL_FLAG = "-l"

    FAVORITES_FILENAME = "favorites.json"
    SETTINGS_FILENAME = "settings.json"


class ConfigPaths:
    """Per-user configuration, data and log locations."""

    def __init__(self):
        self.logger = get_logger("folderterm.config.paths")
        platform_info = get_platform_info()
        self.CONFIG_DIR: Path = platform_info.config_dir
        self.DATA_DIR: Path = platform_info.data_dir
        self.CACHE_DIR: Path = platform_info.cache_dir
        self.LOG_DIR: Path = self.CONFIG_DIR / "logs"
        self.SETTINGS_FILE: Path = self.CONFIG_DIR / AppConstants.SETTINGS_FILENAME
        self.FAVORITES_FILE: Path = self.DATA_DIR / AppConstants.FAVORITES_FILENAME
        self.logger.debug(
            f"Config paths: config={self.CONFIG_DIR} data={self.DATA_DIR}"
        )


class DefaultSettings:
    """Default values for every persisted setting."""

    @staticmethod
    def get_defaults() -> Dict[str, Any]:
        return {
            "fallback_shell": AppConstants.DEFAULT_SHELL,
            "use_login_shell": True,
            "osc7_integration": True,
            "terminate_timeout": 0.2,
            "open_home_on_startup": True,
            "tree_root": "",
            "console_log_level": "WARNING",
        }


_config_paths: Optional[ConfigPaths] = None


def get_config_paths() -> ConfigPaths:
    global _config_paths
    if _config_paths is None:
        _config_paths = ConfigPaths()
    return _config_paths
