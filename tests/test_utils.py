# tests/test_utils.py
"""
Tests for the shared utilities: exceptions, logging, platform paths and
the event queue.
"""

import threading
from pathlib import Path

import pytest

from folderterm.core.events import EventQueue, ProcessExited, ProcessStarted


class TestExceptions:
    """Tests for custom exception classes."""

    def test_spawn_error_keeps_command_and_reason(self):
        """TerminalSpawnError exposes what failed and why."""
        from folderterm.utils.exceptions import ErrorCategory, TerminalSpawnError

        error = TerminalSpawnError("/bin/zsh", "No such file")
        assert error.command == "/bin/zsh"
        assert error.reason == "No such file"
        assert error.category == ErrorCategory.TERMINAL
        assert "/bin/zsh" in str(error)

    def test_storage_write_error(self):
        """StorageWriteError carries the file path."""
        from folderterm.utils.exceptions import StorageError, StorageWriteError

        error = StorageWriteError("/path/to/file", "Permission denied")
        assert isinstance(error, StorageError)
        assert "/path/to/file" in str(error)

    def test_to_dict(self):
        """Errors serialize for structured logging."""
        from folderterm.utils.exceptions import ConfigValidationError

        data = ConfigValidationError("terminate_timeout", -1, "negative").to_dict()
        assert data["type"] == "ConfigValidationError"
        assert data["category"] == "config"
        assert data["details"]["key"] == "terminate_timeout"

    def test_handle_exception_wraps_foreign_errors(self):
        """Plain exceptions become FolderTermError."""
        from folderterm.utils.exceptions import FolderTermError, handle_exception

        converted = handle_exception(ValueError("bad"), "test context", "folderterm.tests")
        assert isinstance(converted, FolderTermError)
        assert converted.details["original_type"] == "ValueError"

    def test_handle_exception_reraise_keeps_type(self):
        """Re-raising a FolderTermError raises the same object."""
        from folderterm.utils.exceptions import SessionNotFoundError, handle_exception

        error = SessionNotFoundError("7")
        with pytest.raises(SessionNotFoundError) as excinfo:
            handle_exception(error, "lookup", reraise=True)
        assert excinfo.value is error


class TestLoggerUtilities:
    """Tests for logger utility functions."""

    def test_get_logger_is_cached(self):
        """The same name returns the same wrapper."""
        from folderterm.utils.logger import get_logger

        assert get_logger("folderterm.tests.a") is get_logger("folderterm.tests.a")

    def test_logger_configured_once(self):
        """Handlers are not duplicated for a name."""
        import logging

        from folderterm.utils.logger import get_logger

        get_logger("folderterm.tests.once")
        handlers = len(logging.getLogger("folderterm.tests.once").handlers)
        get_logger("folderterm.tests.once")
        assert len(logging.getLogger("folderterm.tests.once").handlers) == handlers

    def test_set_console_level_by_name(self):
        """Level names are accepted case-insensitively."""
        from folderterm.utils.logger import get_log_info, set_console_level

        try:
            set_console_level("info")
            assert get_log_info()["console_level"] == "INFO"
        finally:
            set_console_level("WARNING")

    def test_log_dir_follows_xdg(self):
        """Log files live under the configured XDG directory."""
        import os

        from folderterm.utils.logger import get_log_info

        assert get_log_info()["log_dir"].startswith(os.environ["XDG_CONFIG_HOME"])


class TestPlatformUtilities:
    """Tests for platform utility functions."""

    def test_config_directory_uses_xdg(self):
        from folderterm.utils.platform import get_config_directory

        config_dir = get_config_directory()
        assert isinstance(config_dir, Path)
        assert config_dir.name == "folderterm"

    def test_normalize_path_expands_tilde(self):
        from folderterm.utils.platform import normalize_path

        assert "~" not in str(normalize_path("~/test"))

    def test_user_shell_is_absolute(self):
        from folderterm.utils.platform import get_user_shell

        assert get_user_shell("/bin/zsh").startswith("/")

    def test_collation_locale_failure_is_tolerated(self, monkeypatch):
        """An unusable LANG leaves C ordering in place instead of raising."""
        import locale

        from folderterm.utils.platform import setup_collation_locale

        def refuse(category, value=None):
            raise locale.Error("unsupported locale setting")

        monkeypatch.setattr(locale, "setlocale", refuse)

        assert setup_collation_locale() is False


class TestEventQueue:
    """Cross-thread delivery of launcher events."""

    def test_drain_returns_events_in_order(self):
        queue = EventQueue()
        queue.post(ProcessStarted(1, 1, 100))
        queue.post(ProcessExited(1, 1, 0))

        events = queue.drain()

        assert [type(e) for e in events] == [ProcessStarted, ProcessExited]
        assert len(queue) == 0

    def test_wakeup_called_per_post(self):
        calls = []
        queue = EventQueue(wakeup=lambda: calls.append(1))

        queue.post(ProcessExited(1, 1, 0))
        queue.post(ProcessExited(1, 1, 0))

        assert len(calls) == 2

    def test_posts_from_many_threads(self):
        queue = EventQueue()

        def worker(session_id):
            for token in range(100):
                queue.post(ProcessExited(session_id, token, 0))

        threads = [threading.Thread(target=worker, args=(i,)) for i in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(queue.drain()) == 400

    def test_events_are_immutable(self):
        event = ProcessExited(1, 1, 0)
        with pytest.raises(AttributeError):
            event.status = 5
