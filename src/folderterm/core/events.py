# folderterm/core/events.py
"""
Events produced by shell processes and the queue that carries them.

Launchers run callbacks on reader threads or inside GLib handlers. They only
post events here; the workspace drains the queue on the control thread and
applies each event to the session registry.
"""

import threading
from collections import deque
from dataclasses import dataclass
from typing import Callable, List, Optional

from ..utils.logger import get_logger


@dataclass(frozen=True)
class SessionEvent:
    """Base class for events about one spawn of a session.

    ``token`` identifies the spawn attempt, so events from a process that
    was already replaced by a restart can be recognized and dropped.
    """

    session_id: int
    token: int


@dataclass(frozen=True)
class ProcessStarted(SessionEvent):
    pid: int


@dataclass(frozen=True)
class ProcessExited(SessionEvent):
    status: int


@dataclass(frozen=True)
class SpawnFailed(SessionEvent):
    message: str


@dataclass(frozen=True)
class DirectoryChanged(SessionEvent):
    path: str


@dataclass(frozen=True)
class OutputReceived(SessionEvent):
    data: bytes


class EventQueue:
    """Thread-safe FIFO of session events."""

    def __init__(self, wakeup: Optional[Callable[[], None]] = None):
        self.logger = get_logger("folderterm.core.events")
        self._events = deque()
        self._lock = threading.Lock()
        self._wakeup = wakeup

    def set_wakeup(self, wakeup: Optional[Callable[[], None]]) -> None:
        """Install a callback invoked after every post (any thread)."""
        self._wakeup = wakeup

    def post(self, event: SessionEvent) -> None:
        with self._lock:
            self._events.append(event)
        if self._wakeup is not None:
            self._wakeup()

    def drain(self) -> List[SessionEvent]:
        """Remove and return all pending events in posting order."""
        with self._lock:
            events = list(self._events)
            self._events.clear()
        return events

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)


def install_glib_wakeup(queue: EventQueue, drain_callback: Callable[[], None]) -> None:
    """
    Schedule ``drain_callback`` on the GLib main loop whenever events arrive.

    Only one idle source is pending at a time.
    """
    from gi.repository import GLib

    pending = threading.Event()

    def on_idle():
        pending.clear()
        drain_callback()
        return GLib.SOURCE_REMOVE

    def wakeup():
        if not pending.is_set():
            pending.set()
            GLib.idle_add(on_idle)

    queue.set_wakeup(wakeup)
