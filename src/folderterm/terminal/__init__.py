# folderterm/terminal/__init__.py
"""Shell sessions bound to folders."""

from .launcher import PtyLauncher, ShellLauncher
from .registry import OpenResult, SessionRegistry
from .session import ProcessHandle, Session, SessionState
from .spawner import ShellSpawner, SpawnRequest

__all__ = [
    "OpenResult",
    "ProcessHandle",
    "PtyLauncher",
    "Session",
    "SessionRegistry",
    "SessionState",
    "ShellLauncher",
    "ShellSpawner",
    "SpawnRequest",
]


def __getattr__(name):
    # VteLauncher needs the Vte typelib, so it is only imported on request.
    if name == "VteLauncher":
        from .vte_launcher import VteLauncher

        return VteLauncher
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
