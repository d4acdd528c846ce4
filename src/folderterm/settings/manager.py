# folderterm/settings/manager.py

import json
import os
import threading
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from ..utils.exceptions import ConfigValidationError
from ..utils.logger import get_logger, log_error_with_context, set_console_level
from .config import DefaultSettings, get_config_paths

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class SettingsValidator:
    """Type and range checks for individual settings."""

    def validate(self, key: str, value: Any) -> Optional[str]:
        """Return an error message, or None when the value is acceptable."""
        if key in ("use_login_shell", "osc7_integration", "open_home_on_startup"):
            if not isinstance(value, bool):
                return f"'{key}' must be boolean"
        elif key == "fallback_shell":
            if not isinstance(value, str) or not value.startswith("/"):
                return f"'{key}' must be an absolute path"
        elif key == "terminate_timeout":
            if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
                return f"'{key}' must be a non-negative number"
        elif key == "tree_root":
            if not isinstance(value, str):
                return f"'{key}' must be a string"
        elif key == "console_log_level":
            if value not in LOG_LEVELS:
                return f"'{key}' must be one of {', '.join(LOG_LEVELS)}"
        return None


class SettingsManager:
    """JSON-backed application settings merged over the defaults."""

    def __init__(self, settings_file: Optional[Path] = None):
        self.logger = get_logger("folderterm.settings.manager")
        self.validator = SettingsValidator()
        self.settings_file = Path(settings_file or get_config_paths().SETTINGS_FILE)
        self._defaults = DefaultSettings.get_defaults()
        self._settings: Dict[str, Any] = {}
        self._dirty = False
        self._lock = threading.RLock()
        self._change_listeners: List[Callable[[str, Any, Any], None]] = []
        self._initialize()

    def _initialize(self):
        with self._lock:
            self._settings = self._load_settings_safe()
            self._validate_and_repair()
            self._merge_with_defaults()
        self.logger.debug(f"Settings loaded from {self.settings_file}")

    def _load_settings_safe(self) -> Dict[str, Any]:
        if not self.settings_file.exists():
            self.logger.info("Settings file not found, using defaults")
            return self._defaults.copy()
        try:
            with open(self.settings_file, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            self.logger.error(f"Settings file is corrupted: {e}")
            return self._defaults.copy()
        except OSError as e:
            log_error_with_context(e, "settings loading", "folderterm.settings")
            return self._defaults.copy()

        if not isinstance(data, dict):
            self.logger.error("Settings file must contain a JSON object at the root")
            return self._defaults.copy()
        return data

    def _validate_and_repair(self):
        repaired = 0
        for key, value in list(self._settings.items()):
            error = self.validator.validate(key, value)
            if error and key in self._defaults:
                self.logger.warning(f"Repairing setting: {error}")
                self._settings[key] = self._defaults[key]
                repaired += 1
        if repaired:
            self._dirty = True

    def _merge_with_defaults(self):
        for key, default_value in self._defaults.items():
            if key not in self._settings:
                self._settings[key] = default_value
                self._dirty = True

    def save_settings(self, force: bool = False) -> bool:
        """Write settings atomically. Returns False if the write failed."""
        with self._lock:
            if not self._dirty and not force:
                return True
            settings_to_save = self._settings.copy()
            temp_file = self.settings_file.with_suffix(".tmp")
            try:
                self.settings_file.parent.mkdir(parents=True, exist_ok=True)
                with open(temp_file, "w", encoding="utf-8") as f:
                    json.dump(settings_to_save, f, indent=2, ensure_ascii=False)
                    f.flush()
                    os.fsync(f.fileno())
                os.replace(temp_file, self.settings_file)
            except OSError as e:
                log_error_with_context(e, "settings saving", "folderterm.settings")
                if temp_file.exists():
                    temp_file.unlink()
                return False
            self._dirty = False
            return True

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            return self._settings.get(key, default)

    def set(self, key: str, value: Any, save_immediately: bool = True) -> None:
        """
        Change a setting and notify listeners.

        Raises:
            ConfigValidationError: if the value fails validation
        """
        error = self.validator.validate(key, value)
        if error:
            raise ConfigValidationError(key, value, error)
        with self._lock:
            old_value = self._settings.get(key)
            self._settings[key] = value
            self._dirty = True
        if key == "console_log_level":
            set_console_level(value)
        self._notify_change_listeners(key, old_value, value)
        if save_immediately:
            self.save_settings()

    def reset_to_defaults(self, keys: Optional[List[str]] = None) -> None:
        with self._lock:
            for key in keys or list(self._defaults):
                if key in self._defaults:
                    self._settings[key] = self._defaults[key]
            self._dirty = True
        self.save_settings()

    def _notify_change_listeners(self, key: str, old_value: Any, new_value: Any):
        for listener in self._change_listeners:
            try:
                listener(key, old_value, new_value)
            except Exception as e:
                self.logger.error(f"Change listener failed for key '{key}': {e}")

    def add_change_listener(self, listener: Callable[[str, Any, Any], None]):
        if listener not in self._change_listeners:
            self._change_listeners.append(listener)

    @property
    def is_dirty(self) -> bool:
        return self._dirty
