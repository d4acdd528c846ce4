# folderterm/core/__init__.py
"""Core infrastructure shared by the tree, favorites and terminal layers."""

from .display import DisplayRow
from .events import (
    DirectoryChanged,
    EventQueue,
    OutputReceived,
    ProcessExited,
    ProcessStarted,
    SessionEvent,
    SpawnFailed,
)

__all__ = [
    "DisplayRow",
    "EventQueue",
    "SessionEvent",
    "ProcessStarted",
    "ProcessExited",
    "SpawnFailed",
    "DirectoryChanged",
    "OutputReceived",
]
