# tests/test_launcher.py
"""Tests for the pseudo-terminal launcher with real child processes."""

import os
import time

import pytest

from folderterm.core.events import DirectoryChanged, EventQueue, OutputReceived, ProcessExited
from folderterm.terminal.launcher import PtyLauncher
from folderterm.terminal.spawner import SpawnRequest
from folderterm.utils.exceptions import TerminalSpawnError


def _wait_for_exit(queue, timeout=5.0):
    collected = []
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        collected.extend(queue.drain())
        if any(isinstance(event, ProcessExited) for event in collected):
            return collected
        time.sleep(0.02)
    raise AssertionError(f"process did not exit, events so far: {collected!r}")


def _sh_request(tmp_path, script):
    return SpawnRequest(
        executable="/bin/sh",
        argv=["sh", "-c", script],
        working_directory=str(tmp_path),
        env=dict(os.environ),
    )


class TestPtyLauncher:
    """Process start, output scanning and exit reporting."""

    def test_exit_status_is_reported(self, tmp_path):
        queue = EventQueue()
        launcher = PtyLauncher(queue)

        handle = launcher.launch(1, 7, _sh_request(tmp_path, "exit 3"))
        events = _wait_for_exit(queue)

        assert handle.pid is not None
        exited = [e for e in events if isinstance(e, ProcessExited)]
        assert exited == [ProcessExited(1, 7, 3)]

    def test_directory_reports_become_events(self, tmp_path):
        queue = EventQueue()
        launcher = PtyLauncher(queue)

        launcher.launch(2, 1, _sh_request(tmp_path, "printf '\\033]7;file://h/var/tmp\\007'"))
        events = _wait_for_exit(queue)

        changes = [e.path for e in events if isinstance(e, DirectoryChanged)]
        assert changes == ["/var/tmp"]

    def test_output_forwarding(self, tmp_path):
        queue = EventQueue()
        launcher = PtyLauncher(queue, forward_output=True)

        launcher.launch(3, 1, _sh_request(tmp_path, "echo hello"))
        events = _wait_for_exit(queue)

        output = b"".join(e.data for e in events if isinstance(e, OutputReceived))
        assert b"hello" in output

    def test_runs_in_working_directory(self, tmp_path):
        queue = EventQueue()
        launcher = PtyLauncher(queue)

        launcher.launch(4, 1, _sh_request(tmp_path, "pwd > where.txt"))
        _wait_for_exit(queue)

        assert (tmp_path / "where.txt").read_text().strip() == os.path.realpath(tmp_path)

    def test_terminate_stops_shell(self, tmp_path):
        queue = EventQueue()
        launcher = PtyLauncher(queue)
        handle = launcher.launch(5, 1, _sh_request(tmp_path, "sleep 30"))

        launcher.terminate(handle, timeout=1.0)

        _wait_for_exit(queue)

    def test_missing_executable_raises(self, tmp_path):
        queue = EventQueue()
        launcher = PtyLauncher(queue)
        request = SpawnRequest(
            executable=str(tmp_path / "no-such-shell"),
            argv=["-no-such-shell", "-l"],
            working_directory=str(tmp_path),
            env=dict(os.environ),
        )

        with pytest.raises(TerminalSpawnError):
            launcher.launch(6, 1, request)
        assert len(queue) == 0
