# folderterm/terminal/spawner.py

import os
import shutil
import signal
import tempfile
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import psutil

from ..settings.config import AppConstants, DefaultSettings
from ..utils.exceptions import TerminalSpawnError
from ..utils.logger import get_logger
from ..utils.osc7 import OSC7_EMIT_COMMAND
from ..utils.platform import get_environment_manager, get_platform_info
from ..utils.translation_utils import _

ZSH_STARTUP_FILES = (".zshenv", ".zprofile", ".zshrc", ".zlogin")


@dataclass
class SpawnRequest:
    """Everything a launcher needs to start one shell."""

    executable: str
    argv: List[str]
    working_directory: str
    env: Dict[str, str] = field(default_factory=dict)
    temp_dir: Optional[str] = None

    @property
    def command_line(self) -> str:
        return " ".join([self.executable] + self.argv[1:])

    def env_list(self) -> List[str]:
        return [f"{k}={v}" for k, v in self.env.items()]


class ShellSpawner:
    """
    Builds spawn requests for interactive login shells.

    The shell comes from the user's password entry, falling back to the
    configured default. argv[0] carries a leading dash so the shell runs
    its login startup files.
    """

    def __init__(self, settings=None, platform_info=None, environment_manager=None):
        self.logger = get_logger("folderterm.terminal.spawner")
        self.settings = settings
        self.platform_info = platform_info or get_platform_info()
        self.environment_manager = environment_manager or get_environment_manager()
        self._defaults = DefaultSettings.get_defaults()

    def _setting(self, key: str):
        if self.settings is None:
            return self._defaults[key]
        return self.settings.get(key, self._defaults[key])

    def resolve_shell(self) -> str:
        fallback = self._setting("fallback_shell") or AppConstants.DEFAULT_SHELL
        return self.platform_info.get_user_shell(fallback)

    def build_argv(self, shell: str) -> List[str]:
        shell_name = os.path.basename(shell)
        if self._setting("use_login_shell"):
            return [f"-{shell_name}", AppConstants.LOGIN_SHELL_FLAG]
        return [shell_name]

    def build_request(self, working_directory: str) -> SpawnRequest:
        """
        Prepare a login shell that starts in ``working_directory``.

        Raises:
            TerminalSpawnError: if the directory cannot be used as a cwd
        """
        shell = self.resolve_shell()
        self._validate_working_directory(shell, working_directory)

        env = self.environment_manager.get_terminal_environment()
        env["PWD"] = working_directory
        env["FOLDERTERM"] = AppConstants.APP_VERSION
        temp_dir = None
        if self._setting("osc7_integration"):
            temp_dir = self._inject_directory_reporting(shell, env)

        request = SpawnRequest(
            executable=shell,
            argv=self.build_argv(shell),
            working_directory=working_directory,
            env=env,
            temp_dir=temp_dir,
        )
        self.logger.debug(f"Spawn request: {request.command_line} in {working_directory}")
        return request

    def _validate_working_directory(self, shell: str, path: str) -> None:
        if not os.path.isdir(path):
            raise TerminalSpawnError(shell, _("Not a directory: {}").format(path))
        if not os.access(path, os.R_OK | os.X_OK):
            raise TerminalSpawnError(shell, _("Directory is not accessible: {}").format(path))

    def _inject_directory_reporting(self, shell: str, env: Dict[str, str]) -> Optional[str]:
        """Make the shell print an OSC 7 sequence before every prompt.

        Returns a temporary directory that must be removed after the shell
        exits, or None.
        """
        if os.path.basename(shell) == "zsh":
            return self._setup_zsh_integration(env)

        existing_prompt_command = env.get("PROMPT_COMMAND", "")
        if existing_prompt_command:
            env["PROMPT_COMMAND"] = f"{OSC7_EMIT_COMMAND};{existing_prompt_command}"
        else:
            env["PROMPT_COMMAND"] = OSC7_EMIT_COMMAND
        return None

    def _setup_zsh_integration(self, env: Dict[str, str]) -> Optional[str]:
        temp_dir = None
        try:
            temp_dir = tempfile.mkdtemp(prefix="folderterm_zsh_")
            user_zdotdir = env.get("ZDOTDIR") or str(self.platform_info.home_dir)
            for filename in ZSH_STARTUP_FILES:
                content = self._zsh_startup_file(filename)
                with open(os.path.join(temp_dir, filename), "w", encoding="utf-8") as f:
                    f.write(content)
            env["ZDOTDIR"] = temp_dir
            env["FOLDERTERM_USER_ZDOTDIR"] = user_zdotdir
            return temp_dir
        except OSError as e:
            self.logger.error(f"Failed to set up zsh OSC7 integration: {e}")
            if temp_dir:
                shutil.rmtree(temp_dir, ignore_errors=True)
            return None

    @staticmethod
    def _zsh_startup_file(filename: str) -> str:
        source_user = (
            f'if [ -f "$FOLDERTERM_USER_ZDOTDIR/{filename}" ]; then '
            f'. "$FOLDERTERM_USER_ZDOTDIR/{filename}"; fi\n'
        )
        if filename != ".zshrc":
            return source_user
        return (
            source_user
            + f"_folderterm_update_cwd() {{ {OSC7_EMIT_COMMAND}; }}\n"
            + "typeset -ga precmd_functions\n"
            + "precmd_functions+=(_folderterm_update_cwd)\n"
        )

    def cleanup(self, temp_dir: Optional[str]) -> None:
        if not temp_dir:
            return
        try:
            shutil.rmtree(temp_dir)
            self.logger.debug(f"Cleaned up temp zsh directory: {temp_dir}")
        except FileNotFoundError:
            pass
        except OSError as e:
            self.logger.error(f"Failed to clean up temp zsh directory {temp_dir}: {e}")


def terminate_process_tree(pid: int, timeout: float = 0.2) -> bool:
    """
    Stop a shell and everything it started.

    Interactive shells ignore SIGTERM, so the tree gets SIGHUP first, as a
    closing terminal would send. Whatever is still alive after ``timeout``
    seconds is killed. Returns False if the process was already gone.
    """
    logger = get_logger("folderterm.terminal.spawner")
    try:
        parent = psutil.Process(pid)
        procs = parent.children(recursive=True) + [parent]
    except psutil.NoSuchProcess:
        return False

    for proc in procs:
        try:
            proc.send_signal(signal.SIGHUP)
            proc.send_signal(signal.SIGCONT)
        except (psutil.NoSuchProcess, psutil.AccessDenied):
            pass

    _gone, alive = psutil.wait_procs(procs, timeout=timeout)
    for proc in alive:
        try:
            proc.kill()
            logger.warning(f"Process {proc.pid} did not respond to SIGHUP, sent SIGKILL.")
        except (psutil.NoSuchProcess, psutil.AccessDenied):
            pass
    if alive:
        psutil.wait_procs(alive, timeout=timeout)
    return True
