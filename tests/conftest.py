# tests/conftest.py
"""
Pytest configuration for FolderTerm tests.

Puts src/ on the import path and points the XDG directories at a scratch
directory before any folderterm module creates log or data files.
"""

import os
import sys
import tempfile

import pytest

src_path = os.path.join(os.path.dirname(__file__), "..", "src")
sys.path.insert(0, src_path)

_scratch = tempfile.mkdtemp(prefix="folderterm-tests-")
os.environ["XDG_CONFIG_HOME"] = os.path.join(_scratch, "config")
os.environ["XDG_DATA_HOME"] = os.path.join(_scratch, "data")
os.environ["XDG_CACHE_HOME"] = os.path.join(_scratch, "cache")
os.environ.pop("FOLDERTERM_DEBUG", None)


class FakeLauncher:
    """Launcher that records requests instead of starting processes."""

    def __init__(self, events=None, assign_pid=True, fail_with=None):
        from folderterm.core.events import EventQueue

        self.events = events if events is not None else EventQueue()
        self.assign_pid = assign_pid
        self.fail_with = fail_with
        self.launched = []
        self.terminated = []
        self.released = []
        self.written = []
        self.resized = []
        self._next_pid = 4000

    def launch(self, session_id, token, request):
        from folderterm.terminal.session import ProcessHandle

        if self.fail_with is not None:
            raise self.fail_with
        self.launched.append((session_id, token, request))
        pid = None
        if self.assign_pid:
            self._next_pid += 1
            pid = self._next_pid
        return ProcessHandle(token=token, pid=pid, temp_dir=request.temp_dir)

    def terminate(self, handle, timeout):
        self.terminated.append(handle)

    def release(self, session_id, handle):
        self.released.append(session_id)

    def write(self, handle, data):
        self.written.append((handle, data))

    def resize(self, handle, rows, cols):
        self.resized.append((handle, rows, cols))


@pytest.fixture
def fake_launcher():
    return FakeLauncher()


@pytest.fixture
def settings():
    from folderterm.settings.config import DefaultSettings

    values = DefaultSettings.get_defaults()
    values["osc7_integration"] = False
    return values


@pytest.fixture
def spawner(settings):
    from folderterm.terminal.spawner import ShellSpawner

    return ShellSpawner(settings)


@pytest.fixture
def registry(spawner, fake_launcher):
    from folderterm.terminal.registry import SessionRegistry

    return SessionRegistry(spawner, fake_launcher)


@pytest.fixture
def make_registry(spawner):
    """Factory for a registry around a FakeLauncher built with the given options."""
    from folderterm.terminal.registry import SessionRegistry

    def factory(**launcher_options):
        launcher = FakeLauncher(**launcher_options)
        return SessionRegistry(spawner, launcher), launcher

    return factory
