"""
Structured logging for FolderTerm.

A single LoggerManager hands out thread-safe wrappers around the standard
logging module. Every logger writes colored lines to the console and keeps
rotating log files in the user's configuration directory.
"""

import logging
import logging.handlers
import os
import sys
import threading
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Union


class LogLevel(Enum):
    """Log levels for the application."""

    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR
    CRITICAL = logging.CRITICAL


def _debug_requested() -> bool:
    return os.environ.get("FOLDERTERM_DEBUG", "").lower() in ("1", "true", "yes")


def _default_log_dir() -> Path:
    if xdg_config := os.environ.get("XDG_CONFIG_HOME"):
        return Path(xdg_config) / "folderterm" / "logs"
    return Path.home() / ".config" / "folderterm" / "logs"


class LoggerConfig:
    """Configuration for the logging system."""

    def __init__(self, log_dir: Optional[Path] = None):
        self.log_dir = log_dir or _default_log_dir()
        try:
            self.log_dir.mkdir(parents=True, exist_ok=True)
            self.files_enabled = True
        except OSError:
            # Read-only home or sandbox: console logging only.
            self.files_enabled = False

        self.main_log_file = self.log_dir / "folderterm.log"
        self.error_log_file = self.log_dir / "folderterm_errors.log"
        self.debug_log_file = self.log_dir / "folderterm_debug.log"

        self.max_file_size = 5 * 1024 * 1024
        self.backup_count = 3
        self.console_level = LogLevel.DEBUG if _debug_requested() else LogLevel.WARNING
        self.file_level = LogLevel.DEBUG
        self.error_file_level = LogLevel.ERROR


class ColoredFormatter(logging.Formatter):
    """Colored formatter for console output."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
        "RESET": "\033[0m",
    }

    def format(self, record):
        levelname = record.levelname
        if levelname in self.COLORS:
            record.levelname = f"{self.COLORS[levelname]}{levelname}{self.COLORS['RESET']}"
        formatted = super().format(record)
        # Other handlers share the same record.
        record.levelname = levelname
        return formatted


class ThreadSafeLogger:
    """Thread-safe logger wrapper."""

    def __init__(self, name: str, config: LoggerConfig):
        self.name = name
        self.config = config
        self._logger = logging.getLogger(name)
        self._lock = threading.Lock()
        self._setup_logger()

    def _rotating_handler(self, path: Path, level: int, formatter, backups=None):
        handler = logging.handlers.RotatingFileHandler(
            path,
            maxBytes=self.config.max_file_size,
            backupCount=self.config.backup_count if backups is None else backups,
            encoding="utf-8",
        )
        handler.setLevel(level)
        handler.setFormatter(formatter)
        return handler

    def _setup_logger(self):
        with self._lock:
            if getattr(self._logger, "_folderterm_configured", False):
                return

            self._logger.propagate = False
            self._logger.setLevel(logging.DEBUG)

            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setLevel(self.config.console_level.value)
            console_handler.setFormatter(
                ColoredFormatter(
                    fmt="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
                    datefmt="%H:%M:%S",
                )
            )
            self._logger.addHandler(console_handler)

            if self.config.files_enabled:
                file_formatter = logging.Formatter(
                    fmt="%(asctime)s | %(name)s | %(levelname)s | %(funcName)s:%(lineno)d | %(message)s",
                    datefmt="%Y-%m-%d %H:%M:%S",
                )
                try:
                    self._logger.addHandler(
                        self._rotating_handler(
                            self.config.main_log_file,
                            self.config.file_level.value,
                            file_formatter,
                        )
                    )
                    self._logger.addHandler(
                        self._rotating_handler(
                            self.config.error_log_file,
                            self.config.error_file_level.value,
                            file_formatter,
                        )
                    )
                    if _debug_requested():
                        debug_handler = self._rotating_handler(
                            self.config.debug_log_file,
                            logging.DEBUG,
                            file_formatter,
                            backups=2,
                        )
                        debug_handler.addFilter(
                            lambda record: record.levelno == logging.DEBUG
                        )
                        self._logger.addHandler(debug_handler)
                except OSError as e:
                    self._logger.warning(f"File logging disabled: {e}")

            self._logger._folderterm_configured = True

    def debug(self, message: str, **kwargs):
        self._logger.debug(message, **kwargs)

    def info(self, message: str, **kwargs):
        self._logger.info(message, **kwargs)

    def warning(self, message: str, **kwargs):
        self._logger.warning(message, **kwargs)

    def error(self, message: str, exc_info: bool = False, **kwargs):
        self._logger.error(message, exc_info=exc_info, **kwargs)

    def critical(self, message: str, exc_info: bool = True, **kwargs):
        self._logger.critical(message, exc_info=exc_info, **kwargs)

    def exception(self, message: str, **kwargs):
        self._logger.exception(message, **kwargs)


class LoggerManager:
    """Centralized logger manager."""

    _instance: Optional["LoggerManager"] = None
    _lock = threading.RLock()

    def __new__(cls) -> "LoggerManager":
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        if hasattr(self, "_initialized"):
            return
        self._initialized = True
        self.config = LoggerConfig()
        self._loggers: Dict[str, ThreadSafeLogger] = {}
        logging.getLogger("gi").setLevel(logging.WARNING)

    def get_logger(self, name: str) -> ThreadSafeLogger:
        """
        Get or create a logger with the given name.

        Args:
            name: Dotted logger name, e.g. "folderterm.favorites.store"

        Returns:
            ThreadSafeLogger instance
        """
        if name not in self._loggers:
            with self._lock:
                if name not in self._loggers:
                    self._loggers[name] = ThreadSafeLogger(name, self.config)
        return self._loggers[name]

    def set_console_level(self, level: LogLevel):
        """Set console logging level for all loggers."""
        with self._lock:
            self.config.console_level = level
            for logger in self._loggers.values():
                for handler in logger._logger.handlers:
                    if (
                        type(handler) is logging.StreamHandler
                        and handler.stream is sys.stderr
                    ):
                        handler.setLevel(level.value)

    def enable_debug_mode(self):
        self.set_console_level(LogLevel.DEBUG)
        os.environ["FOLDERTERM_DEBUG"] = "1"

    def cleanup_old_logs(self, days_to_keep: int = 30):
        """Remove log files older than the given number of days."""
        if not self.config.files_enabled:
            return
        cutoff_time = datetime.now().timestamp() - (days_to_keep * 24 * 60 * 60)
        for log_file in self.config.log_dir.glob("*.log.*"):
            try:
                if log_file.stat().st_mtime < cutoff_time:
                    log_file.unlink()
            except OSError as e:
                self.get_logger("folderterm.logger").debug(
                    f"Could not remove old log {log_file}: {e}"
                )

    def get_log_info(self) -> Dict[str, Any]:
        return {
            "log_dir": str(self.config.log_dir),
            "files_enabled": self.config.files_enabled,
            "console_level": self.config.console_level.name,
            "debug_enabled": _debug_requested(),
            "active_loggers": list(self._loggers.keys()),
        }


_logger_manager: Optional[LoggerManager] = None


def _get_manager() -> LoggerManager:
    global _logger_manager
    if _logger_manager is None:
        _logger_manager = LoggerManager()
    return _logger_manager


def get_logger(name: Optional[str] = None) -> ThreadSafeLogger:
    """
    Get a logger instance.

    Args:
        name: Logger name (defaults to the calling module)
    """
    if name is None:
        import inspect

        frame = inspect.currentframe()
        try:
            name = frame.f_back.f_globals.get("__name__", "folderterm")
        finally:
            del frame
    return _get_manager().get_logger(name)


def set_console_level(level: Union[LogLevel, str]):
    """Set console logging level globally ("DEBUG", "INFO", ... or LogLevel)."""
    if isinstance(level, str):
        level = LogLevel[level.upper()]
    _get_manager().set_console_level(level)


def enable_debug_mode():
    _get_manager().enable_debug_mode()


def cleanup_old_logs(days_to_keep: int = 30):
    _get_manager().cleanup_old_logs(days_to_keep)


def get_log_info() -> Dict[str, Any]:
    return _get_manager().get_log_info()


def log_app_start():
    get_logger("folderterm.startup").info("FolderTerm starting up")
    cleanup_old_logs()


def log_app_shutdown():
    get_logger("folderterm.shutdown").info("FolderTerm shutting down")


def log_terminal_event(event_type: str, terminal_name: str, details: str = ""):
    """
    Log terminal session lifecycle events.

    Args:
        event_type: Type of event (spawned, exited, terminated, ...)
        terminal_name: Name/identifier of the session
        details: Additional details about the event
    """
    message = f"Terminal '{terminal_name}' {event_type}"
    if details:
        message += f": {details}"
    get_logger("folderterm.terminal").info(message)


def log_favorite_event(event_type: str, item_name: str, details: str = ""):
    """Log changes to the favorites list."""
    message = f"Favorite '{item_name}' {event_type}"
    if details:
        message += f": {details}"
    get_logger("folderterm.favorites").info(message)


def log_error_with_context(error: Exception, context: str, logger_name: str = None):
    """Log an error together with the operation it interrupted."""
    logger = get_logger(logger_name or "folderterm")
    logger.error(f"Error in {context}: {error}", exc_info=True)
