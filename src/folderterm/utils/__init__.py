"""
Utility modules for FolderTerm.

Logging, exceptions, platform paths, OSC 7 parsing, icons and translation.
"""

from .exceptions import FolderTermError, handle_exception
from .logger import get_logger
from .platform import get_platform_info
from .translation_utils import _

__all__ = [
    "_",
    "FolderTermError",
    "get_logger",
    "get_platform_info",
    "handle_exception",
]
