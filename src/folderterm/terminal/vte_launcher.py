# folderterm/terminal/vte_launcher.py

from typing import Callable, Dict, List, Optional

import gi

gi.require_version("Vte", "3.91")
from gi.repository import Gio, GLib, Vte

from ..core.events import (
    DirectoryChanged,
    EventQueue,
    ProcessExited,
    ProcessStarted,
    SpawnFailed,
)
from ..utils.logger import get_logger, log_terminal_event
from ..utils.osc7 import OSC7Parser, parse_directory_uri
from .launcher import ShellLauncher
from .session import ProcessHandle, decode_exit_status
from .spawner import SpawnRequest, terminate_process_tree


class VteLauncher(ShellLauncher):
    """
    Runs shells inside Vte.Terminal widgets.

    The spawn is asynchronous: the returned handle has no pid yet and the
    outcome arrives as ProcessStarted or SpawnFailed. Directory changes come
    from VTE's own OSC 7 tracking.
    """

    def __init__(self, events: EventQueue,
                 terminal_factory: Callable[[], Vte.Terminal] = Vte.Terminal):
        super().__init__(events)
        self.logger = get_logger("folderterm.terminal.vte")
        self.terminal_factory = terminal_factory
        self.osc7_parser = OSC7Parser()
        self._terminals: Dict[int, Vte.Terminal] = {}
        self._handlers: Dict[int, List[int]] = {}

    def terminal_for(self, session_id: int) -> Optional[Vte.Terminal]:
        """The widget currently showing ``session_id``, for the view layer."""
        return self._terminals.get(session_id)

    def launch(self, session_id: int, token: int, request: SpawnRequest) -> ProcessHandle:
        """
        Spawn into the session's terminal, creating it on first launch.

        A restart reuses the widget the view already shows; handlers of the
        previous spawn are replaced so its token can no longer post events.
        """
        terminal = self._terminals.get(session_id)
        if terminal is None:
            terminal = self.terminal_factory()
            self._terminals[session_id] = terminal
        else:
            self._disconnect_handlers(session_id, terminal)

        cancellable = Gio.Cancellable()
        handle = ProcessHandle(
            token=token,
            temp_dir=request.temp_dir,
            backend={"terminal": terminal, "cancellable": cancellable},
        )
        self._handlers[session_id] = [
            terminal.connect("child-exited", self._on_child_exited, session_id, token),
            terminal.connect(
                "notify::current-directory-uri",
                self._on_directory_uri_changed,
                session_id,
                token,
            ),
        ]

        # FILE_AND_ARGV_ZERO: argv[0] is the program, argv[1] its visible name.
        terminal.spawn_async(
            Vte.PtyFlags.DEFAULT,
            request.working_directory,
            [request.executable] + request.argv,
            request.env_list(),
            GLib.SpawnFlags.FILE_AND_ARGV_ZERO,
            None,
            None,
            -1,
            cancellable,
            self._on_spawned,
            ({"session_id": session_id, "handle": handle},),
        )
        log_terminal_event("spawn_initiated", str(session_id), request.command_line)
        return handle

    def _disconnect_handlers(self, session_id: int, terminal: Vte.Terminal) -> None:
        for handler_id in self._handlers.pop(session_id, []):
            terminal.disconnect(handler_id)

    def _on_spawned(self, terminal: Vte.Terminal, pid: int, error: Optional[GLib.Error],
                    user_data=None) -> None:
        spawn_data = user_data[0] if isinstance(user_data, tuple) else user_data
        session_id = spawn_data["session_id"]
        handle = spawn_data["handle"]
        if error is not None:
            self.logger.error(f"Process spawn failed for session {session_id}: {error.message}")
            self.events.post(SpawnFailed(session_id, handle.token, error.message))
            return
        handle.pid = pid
        self.events.post(ProcessStarted(session_id, handle.token, pid))

    def _on_child_exited(self, terminal: Vte.Terminal, child_status: int,
                         session_id: int, token: int) -> None:
        self.events.post(
            ProcessExited(session_id, token, decode_exit_status(child_status))
        )

    def _on_directory_uri_changed(self, terminal: Vte.Terminal, _param_spec,
                                  session_id: int, token: int) -> None:
        info = parse_directory_uri(terminal.get_current_directory_uri(), self.osc7_parser)
        if info is not None:
            self.events.post(DirectoryChanged(session_id, token, info.path))

    def terminate(self, handle: ProcessHandle, timeout: float) -> None:
        if handle.pid is None:
            handle.backend["cancellable"].cancel()
            return
        terminate_process_tree(handle.pid, timeout)

    def release(self, session_id: int, handle: Optional[ProcessHandle]) -> None:
        """Disconnect signal handlers once a session is closed for good."""
        terminal = self._terminals.pop(session_id, None)
        if terminal is not None:
            self._disconnect_handlers(session_id, terminal)

    def write(self, handle: ProcessHandle, data: bytes) -> None:
        handle.backend["terminal"].feed_child(data)

    def resize(self, handle: ProcessHandle, rows: int, cols: int) -> None:
        handle.backend["terminal"].set_size(cols, rows)
