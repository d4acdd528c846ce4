"""Settings module for FolderTerm."""

from .config import AppConstants, DefaultSettings, get_config_paths
from .manager import SettingsManager

__all__ = ["AppConstants", "DefaultSettings", "SettingsManager", "get_config_paths"]
