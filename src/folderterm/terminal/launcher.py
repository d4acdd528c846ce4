# folderterm/terminal/launcher.py

import fcntl
import os
import select
import struct
import subprocess
import termios
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from ..core.events import (
    DirectoryChanged,
    EventQueue,
    OutputReceived,
    ProcessExited,
)
from ..utils.exceptions import TerminalSpawnError
from ..utils.logger import get_logger, log_terminal_event
from ..utils.osc7 import OSC7Buffer
from .session import ProcessHandle
from .spawner import SpawnRequest, terminate_process_tree

READ_CHUNK_SIZE = 65536


class ShellLauncher(ABC):
    """
    Starts shell processes and reports what happens to them.

    Launchers never touch sessions. Everything they learn (pid, exit,
    directory changes, output) is posted to the event queue, tagged with
    the session id and spawn token it was launched with.
    """

    def __init__(self, events: EventQueue):
        self.events = events

    @abstractmethod
    def launch(self, session_id: int, token: int, request: SpawnRequest) -> ProcessHandle:
        """
        Start the process described by ``request``.

        A handle with ``pid`` set means the process is already running;
        otherwise the launcher posts ProcessStarted or SpawnFailed later.

        Raises:
            TerminalSpawnError: if the process could not be started
        """

    @abstractmethod
    def terminate(self, handle: ProcessHandle, timeout: float) -> None:
        """Stop the process. Its exit is still reported through the queue."""

    def release(self, session_id: int, handle: Optional[ProcessHandle]) -> None:
        """Forget per-session resources once a session is closed for good."""

    def write(self, handle: ProcessHandle, data: bytes) -> None:
        raise NotImplementedError

    def resize(self, handle: ProcessHandle, rows: int, cols: int) -> None:
        raise NotImplementedError


@dataclass
class _PtyProcess:
    process: subprocess.Popen
    master_fd: int
    stop: threading.Event
    reader: Optional[threading.Thread] = None
    waiter: Optional[threading.Thread] = None


def _become_controlling_terminal():
    # Runs in the child after setsid(): adopt the pty on stdin.
    fcntl.ioctl(0, termios.TIOCSCTTY, 0)


class PtyLauncher(ShellLauncher):
    """Runs shells on a pseudo-terminal, without any toolkit."""

    def __init__(self, events: EventQueue, forward_output: bool = False,
                 rows: int = 24, cols: int = 80):
        super().__init__(events)
        self.logger = get_logger("folderterm.terminal.pty")
        self.forward_output = forward_output
        self.rows = rows
        self.cols = cols

    def launch(self, session_id: int, token: int, request: SpawnRequest) -> ProcessHandle:
        master_fd, slave_fd = os.openpty()
        self._set_window_size(master_fd, self.rows, self.cols)
        try:
            process = subprocess.Popen(
                request.argv,
                executable=request.executable,
                cwd=request.working_directory,
                env=request.env,
                stdin=slave_fd,
                stdout=slave_fd,
                stderr=slave_fd,
                start_new_session=True,
                preexec_fn=_become_controlling_terminal,
                close_fds=True,
            )
        except (OSError, subprocess.SubprocessError) as e:
            os.close(master_fd)
            raise TerminalSpawnError(request.executable, str(e)) from e
        finally:
            os.close(slave_fd)

        proc = _PtyProcess(process=process, master_fd=master_fd, stop=threading.Event())
        handle = ProcessHandle(
            token=token, pid=process.pid, temp_dir=request.temp_dir, backend=proc
        )
        proc.reader = threading.Thread(
            target=self._read_loop,
            args=(session_id, token, proc),
            name=f"pty-reader-{session_id}",
            daemon=True,
        )
        proc.waiter = threading.Thread(
            target=self._wait_loop,
            args=(session_id, token, proc),
            name=f"pty-waiter-{session_id}",
            daemon=True,
        )
        proc.reader.start()
        proc.waiter.start()
        log_terminal_event("spawned", str(session_id), f"PID {process.pid}")
        return handle

    def _read_loop(self, session_id: int, token: int, proc: _PtyProcess) -> None:
        scanner = OSC7Buffer()
        while True:
            try:
                ready, _w, _x = select.select([proc.master_fd], [], [], 0.1)
            except (OSError, ValueError):
                break
            if not ready:
                if proc.stop.is_set():
                    break
                continue
            try:
                data = os.read(proc.master_fd, READ_CHUNK_SIZE)
            except OSError:
                # EIO once the last slave descriptor is closed.
                break
            if not data:
                break
            for info in scanner.feed(data):
                self.events.post(DirectoryChanged(session_id, token, info.path))
            if self.forward_output:
                self.events.post(OutputReceived(session_id, token, data))

    def _wait_loop(self, session_id: int, token: int, proc: _PtyProcess) -> None:
        returncode = proc.process.wait()
        proc.stop.set()
        proc.reader.join(timeout=2.0)
        try:
            os.close(proc.master_fd)
        except OSError:
            pass
        status = 128 - returncode if returncode < 0 else returncode
        self.events.post(ProcessExited(session_id, token, status))

    def terminate(self, handle: ProcessHandle, timeout: float) -> None:
        if handle.pid is None:
            return
        terminate_process_tree(handle.pid, timeout)

    def write(self, handle: ProcessHandle, data: bytes) -> None:
        proc: _PtyProcess = handle.backend
        try:
            os.write(proc.master_fd, data)
        except OSError as e:
            self.logger.warning(f"Write to pid {handle.pid} failed: {e}")

    def resize(self, handle: ProcessHandle, rows: int, cols: int) -> None:
        proc: _PtyProcess = handle.backend
        try:
            self._set_window_size(proc.master_fd, rows, cols)
        except OSError as e:
            self.logger.warning(f"Resize of pid {handle.pid} failed: {e}")

    @staticmethod
    def _set_window_size(fd: int, rows: int, cols: int) -> None:
        fcntl.ioctl(fd, termios.TIOCSWINSZ, struct.pack("HHHH", rows, cols, 0, 0))
