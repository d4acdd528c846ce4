# folderterm/utils/osc7.py

import re
from pathlib import Path
from typing import List, NamedTuple, Optional
from urllib.parse import unquote, urlparse

from .logger import get_logger


class OSC7Info(NamedTuple):
    """Information extracted from OSC7 sequence."""

    hostname: str
    path: str
    display_path: str


# Shell snippet for detecting hostname (used by the spawner for OSC7 emission)
OSC7_HOST_DETECTION_SNIPPET = (
    'if [ -z "$FOLDERTERM_OSC7_HOST" ]; then '
    "if command -v hostname >/dev/null 2>&1; then "
    'FOLDERTERM_OSC7_HOST="$(hostname)"; '
    'elif [ -n "$HOSTNAME" ]; then '
    'FOLDERTERM_OSC7_HOST="$HOSTNAME"; '
    "else "
    'FOLDERTERM_OSC7_HOST="localhost"; '
    "fi; "
    "fi;"
)

OSC7_EMIT_COMMAND = (
    f"{OSC7_HOST_DETECTION_SNIPPET} "
    'printf "\\033]7;file://%s%s\\007" "$FOLDERTERM_OSC7_HOST" "$PWD"'
)

MAX_PATH_LENGTH = 4096


class OSC7Parser:
    """Parser for OSC7 escape sequences."""

    OSC7_PATTERN = re.compile(
        rb"\x1b\]7;file://([^/\x07\x1b]*)(/?[^\x07\x1b]*?)(?:\x07|\x1b\\)",
        re.IGNORECASE,
    )

    def __init__(self, home_path: Optional[str] = None):
        self.logger = get_logger("folderterm.utils.osc7")
        self._home_path = home_path or str(Path.home())

    def parse_all(self, data: bytes) -> List[OSC7Info]:
        """Return every complete OSC7 sequence in ``data``, in order."""
        results = []
        for hostname_bytes, path_bytes in self.OSC7_PATTERN.findall(data):
            info = self._build_info(hostname_bytes, path_bytes)
            if info is not None:
                results.append(info)
        return results

    def parse_osc7(self, data: bytes) -> Optional[OSC7Info]:
        """
        Parse OSC7 escape sequences from terminal output.

        Args:
            data: Raw bytes from terminal output

        Returns:
            OSC7Info for the last valid sequence, None if there is none
        """
        results = self.parse_all(data)
        return results[-1] if results else None

    def _build_info(self, hostname_bytes: bytes, path_bytes: bytes) -> Optional[OSC7Info]:
        hostname = hostname_bytes.decode("utf-8", errors="replace")
        raw_path = path_bytes.decode("utf-8", errors="replace")
        normalized_path = self._normalize_path(unquote(raw_path))
        if not normalized_path:
            return None
        return OSC7Info(
            hostname=hostname or "localhost",
            path=normalized_path,
            display_path=self.create_display_path(normalized_path),
        )

    def _normalize_path(self, path: str) -> Optional[str]:
        """Normalize and validate the path from OSC7."""
        if not path or path == "/":
            return "/"
        normalized = path.rstrip("/") or "/"
        if not normalized.startswith("/"):
            self.logger.warning(f"OSC7 path is not absolute: '{path}'")
            return None
        if len(normalized) > MAX_PATH_LENGTH:
            self.logger.warning(f"OSC7 path too long: {len(normalized)} chars")
            return None
        return normalized

    def create_display_path(self, path: str) -> str:
        """
        Create a user-friendly display version of the path.

        Subdirectories of home are shown with ``~``; other deep paths keep
        only their last three components.
        """
        if not path or path == "/":
            return "/"
        if path == self._home_path:
            return path
        if path.startswith(self._home_path.rstrip("/") + "/"):
            return "~" + path[len(self._home_path.rstrip("/")):]
        path_parts = path.split("/")
        if len(path_parts) > 4:
            return ".../" + "/".join(path_parts[-3:])
        return path


class OSC7Buffer:
    """
    Incremental OSC7 scanner for a raw output stream.

    Output arrives in arbitrary chunks, so a sequence may be split across
    reads. The unterminated tail of each chunk is kept for the next one.
    """

    INTRODUCER = b"\x1b]7;"
    MAX_PENDING = MAX_PATH_LENGTH + 256

    def __init__(self, parser: Optional[OSC7Parser] = None):
        self.parser = parser or OSC7Parser()
        self._pending = b""

    @property
    def pending(self) -> bytes:
        return self._pending

    def feed(self, chunk: bytes) -> List[OSC7Info]:
        data = self._pending + chunk
        results = self.parser.parse_all(data)
        self._pending = self._unterminated_tail(data)
        return results

    def _unterminated_tail(self, data: bytes) -> bytes:
        start = data.rfind(self.INTRODUCER)
        if start != -1:
            tail = data[start:]
            if b"\x07" not in tail and b"\x1b\\" not in tail:
                return tail if len(tail) <= self.MAX_PENDING else b""
        # The chunk may end in the middle of the introducer itself.
        for size in range(len(self.INTRODUCER) - 1, 0, -1):
            if data.endswith(self.INTRODUCER[:size]):
                return self.INTRODUCER[:size]
        return b""


def parse_directory_uri(
    uri: str, parser: Optional[OSC7Parser] = None
) -> Optional[OSC7Info]:
    """
    Parse a file:// URI, as reported by VTE's current-directory-uri.

    Returns:
        OSC7Info if the URI is a valid file URI, None otherwise
    """
    if not uri:
        return None
    parsed = urlparse(uri)
    if parsed.scheme != "file":
        return None
    path = unquote(parsed.path)
    if not path.startswith("/"):
        return None
    hostname = parsed.hostname or "localhost"
    parser = parser or OSC7Parser()
    path = parser._normalize_path(path)
    if path is None:
        return None
    return OSC7Info(
        hostname=hostname, path=path, display_path=parser.create_display_path(path)
    )
