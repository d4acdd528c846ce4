# folderterm/terminal/registry.py

import os
from typing import Dict, Iterator, List, NamedTuple, Optional

from ..core.events import (
    DirectoryChanged,
    ProcessExited,
    ProcessStarted,
    SessionEvent,
    SpawnFailed,
)
from ..utils.exceptions import SessionNotFoundError, TerminalSpawnError
from ..utils.logger import get_logger, log_terminal_event
from .launcher import ShellLauncher
from .session import ProcessHandle, Session, SessionState
from .spawner import ShellSpawner


def normalize_session_path(path: str) -> str:
    """Key used to deduplicate sessions; symlinks are not resolved."""
    return os.path.abspath(os.path.expanduser(path))


class OpenResult(NamedTuple):
    """Outcome of SessionRegistry.open()."""

    session: Optional[Session]
    is_new: bool
    error: Optional[TerminalSpawnError] = None

    @property
    def success(self) -> bool:
        return self.error is None and self.session is not None


class SessionRegistry:
    """
    At most one shell session per folder.

    Opening a folder that already has a live session returns it; opening a
    folder whose session has ended restarts it under the same id. Records
    are only dropped by close().
    """

    def __init__(self, spawner: ShellSpawner, launcher: ShellLauncher,
                 terminate_timeout: float = 0.2):
        self.logger = get_logger("folderterm.terminal.registry")
        self.spawner = spawner
        self.launcher = launcher
        self.terminate_timeout = terminate_timeout
        self._sessions: Dict[str, Session] = {}
        self._by_id: Dict[int, Session] = {}
        self._next_id = 1
        self._next_token = 1

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, path: str) -> bool:
        return normalize_session_path(path) in self._sessions

    def __iter__(self) -> Iterator[Session]:
        return iter(list(self._sessions.values()))

    @property
    def sessions(self) -> List[Session]:
        return list(self._sessions.values())

    def get(self, path: str) -> Optional[Session]:
        return self._sessions.get(normalize_session_path(path))

    def get_by_id(self, session_id: int) -> Session:
        session = self._by_id.get(session_id)
        if session is None:
            raise SessionNotFoundError(str(session_id))
        return session

    def open(self, path: str) -> OpenResult:
        """
        Focus, restart or create the session for ``path``.

        Spawn failures do not raise: they come back in ``OpenResult.error``.
        A brand-new session that fails to spawn is not kept; a restart that
        fails leaves the existing record terminated.
        """
        key = normalize_session_path(path)
        session = self._sessions.get(key)

        if session is not None and session.is_alive:
            return OpenResult(session, is_new=False)

        if session is not None:
            error = self._spawn(session)
            if error is None:
                log_terminal_event("restarted", session.title, key)
            return OpenResult(session, is_new=False, error=error)

        session = Session(self._next_id, key)
        self._next_id += 1
        error = self._spawn(session)
        if error is not None:
            return OpenResult(None, is_new=False, error=error)

        self._sessions[key] = session
        self._by_id[session.session_id] = session
        log_terminal_event("created", session.title, key)
        return OpenResult(session, is_new=True)

    def _spawn(self, session: Session) -> Optional[TerminalSpawnError]:
        session.state = SessionState.STARTING
        session.exit_status = None
        session.live_directory = session.path
        token = self._next_token
        self._next_token += 1

        request = None
        try:
            request = self.spawner.build_request(session.path)
            handle = self.launcher.launch(session.session_id, token, request)
        except TerminalSpawnError as e:
            return self._spawn_failed(session, request, e)
        except OSError as e:
            command = request.executable if request else "shell"
            return self._spawn_failed(session, request, TerminalSpawnError(command, str(e)))

        session.handle = handle
        session.spawn_count += 1
        if handle.pid is not None:
            session.state = SessionState.RUNNING
        return None

    def _spawn_failed(self, session: Session, request, error: TerminalSpawnError) -> TerminalSpawnError:
        self.logger.error(f"Could not start shell for {session.path}: {error.message}")
        log_terminal_event("spawn_failed", session.title, error.reason)
        if request is not None:
            self.spawner.cleanup(request.temp_dir)
        session.state = SessionState.TERMINATED
        session.handle = None
        return error

    def notify_directory_changed(self, session: Session, new_path: str) -> None:
        """Record where the shell is now. The session keeps its key."""
        session.live_directory = new_path
        self.logger.debug(f"Session {session.session_id} now in {new_path}")

    def terminate(self, session: Session) -> None:
        """Stop the shell; the record stays and can be restarted by open()."""
        if session.state == SessionState.TERMINATED:
            return
        handle = session.handle
        session.state = SessionState.TERMINATED
        if handle is not None:
            try:
                self.launcher.terminate(handle, self.terminate_timeout)
            except OSError as e:
                self.logger.warning(f"Terminating session {session.session_id} failed: {e}")
            self._release_temp_dir(handle)
        log_terminal_event("terminated", session.title)

    def close(self, session: Session) -> None:
        """Terminate and forget the session."""
        self.terminate(session)
        self._sessions.pop(session.path, None)
        self._by_id.pop(session.session_id, None)
        self.launcher.release(session.session_id, session.handle)
        log_terminal_event("closed", session.title)

    def terminate_all(self) -> None:
        for session in self.sessions:
            self.terminate(session)

    def write(self, session: Session, data: bytes) -> bool:
        if not session.is_alive or session.handle is None:
            return False
        self.launcher.write(session.handle, data)
        return True

    def resize(self, session: Session, rows: int, cols: int) -> bool:
        if not session.is_alive or session.handle is None:
            return False
        self.launcher.resize(session.handle, rows, cols)
        return True

    def handle_event(self, event: SessionEvent) -> Optional[Session]:
        """
        Apply a launcher event. Returns the affected session, or None if the
        event belongs to a closed session or an earlier spawn.
        """
        session = self._by_id.get(event.session_id)
        if session is None or session.handle is None:
            return None
        if session.handle.token != event.token:
            self.logger.debug(f"Dropping stale event {event!r}")
            return None

        if isinstance(event, ProcessStarted):
            session.handle.pid = event.pid
            if session.state == SessionState.STARTING:
                session.state = SessionState.RUNNING
                log_terminal_event("spawned", session.title, f"PID {event.pid}")
        elif isinstance(event, SpawnFailed):
            self.logger.error(f"Shell for {session.path} failed to start: {event.message}")
            session.state = SessionState.TERMINATED
            self._release_temp_dir(session.handle)
        elif isinstance(event, ProcessExited):
            session.state = SessionState.TERMINATED
            session.exit_status = event.status
            self._release_temp_dir(session.handle)
            log_terminal_event("exited", session.title, f"status {event.status}")
        elif isinstance(event, DirectoryChanged):
            self.notify_directory_changed(session, event.path)
        return session

    def _release_temp_dir(self, handle: ProcessHandle) -> None:
        if handle.temp_dir:
            self.spawner.cleanup(handle.temp_dir)
            handle.temp_dir = None
