"""
FolderTerm - a folder navigator with favorites and one shell per folder.

The package is split into the lazy folder tree (filetree), the persistent
favorites list (favorites), the shell session registry (terminal) and the
Workspace that ties them together.
"""

from .utils.translation_utils import _

__version__ = "0.1.0"
__version_info__ = (0, 1, 0)
__license__ = "MIT"
__description__ = _("Folder navigator with favorites and per-folder shells")
