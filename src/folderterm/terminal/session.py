# folderterm/terminal/session.py

import os
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from ..utils.osc7 import OSC7Parser


class SessionState(Enum):
    STARTING = "starting"
    RUNNING = "running"
    TERMINATED = "terminated"


@dataclass
class ProcessHandle:
    """One spawn of a shell, as returned by a launcher."""

    token: int
    pid: Optional[int] = None
    temp_dir: Optional[str] = None
    backend: Any = None


def decode_exit_status(wait_status: int) -> int:
    """Decodes a raw wait status into a shell-style exit code."""
    if os.WIFEXITED(wait_status):
        return os.WEXITSTATUS(wait_status)
    if os.WIFSIGNALED(wait_status):
        return 128 + os.WTERMSIG(wait_status)
    return wait_status


class Session:
    """
    A shell bound to a folder.

    ``path`` is the folder the session was opened for and never changes,
    even when the user ``cd``s elsewhere; ``live_directory`` follows the
    shell. ``session_id`` survives restarts.
    """

    _display_parser: Optional[OSC7Parser] = None

    def __init__(self, session_id: int, path: str):
        self.session_id = session_id
        self.path = path
        self.state = SessionState.STARTING
        self.handle: Optional[ProcessHandle] = None
        self.live_directory = path
        self.exit_status: Optional[int] = None
        self.spawn_count = 0
        self.created_at = time.time()

    @property
    def title(self) -> str:
        return os.path.basename(self.path.rstrip("/")) or self.path

    @property
    def display_directory(self) -> str:
        if Session._display_parser is None:
            Session._display_parser = OSC7Parser()
        return Session._display_parser.create_display_path(self.live_directory)

    @property
    def pid(self) -> Optional[int]:
        return self.handle.pid if self.handle else None

    @property
    def is_alive(self) -> bool:
        return self.state in (SessionState.STARTING, SessionState.RUNNING)

    def __repr__(self) -> str:
        return (
            f"Session(id={self.session_id}, path={self.path!r}, "
            f"state={self.state.value}, pid={self.pid})"
        )
