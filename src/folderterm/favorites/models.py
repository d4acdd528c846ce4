# folderterm/favorites/models.py

import os
import time
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional

from ..utils.icons import icon_name_for


def default_name_for(path: str) -> str:
    """Last path segment, or the whole path for the filesystem root."""
    return os.path.basename(path.rstrip(os.sep)) or path


@dataclass(frozen=True)
class Favorite:
    """A bookmarked path with a user-editable label."""

    name: str
    path: str
    date_added: float = field(default_factory=time.time)

    @classmethod
    def for_path(cls, path: str, now: Optional[float] = None) -> "Favorite":
        return cls(
            name=default_name_for(path),
            path=path,
            date_added=time.time() if now is None else now,
        )

    def renamed(self, new_name: str) -> "Favorite":
        return replace(self, name=new_name)

    @property
    def label(self) -> str:
        return self.name

    @property
    def icon_name(self) -> str:
        return icon_name_for(self.path, os.path.isdir(self.path))

    @property
    def exists(self) -> bool:
        return os.path.exists(self.path)

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "path": self.path, "dateAdded": self.date_added}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Favorite":
        """
        Build a Favorite from its stored form.

        Raises:
            ValueError: if a field is missing or has the wrong type
        """
        errors = cls.validate_dict(data)
        if errors:
            raise ValueError("; ".join(errors))
        return cls(
            name=data["name"], path=data["path"], date_added=float(data["dateAdded"])
        )

    @staticmethod
    def validate_dict(data: Any) -> List[str]:
        if not isinstance(data, dict):
            return ["record is not an object"]
        errors = []
        if not isinstance(data.get("name"), str) or not data["name"].strip():
            errors.append("'name' must be a non-empty string")
        if not isinstance(data.get("path"), str) or not data["path"]:
            errors.append("'path' must be a non-empty string")
        date_added = data.get("dateAdded")
        if isinstance(date_added, bool) or not isinstance(date_added, (int, float)):
            errors.append("'dateAdded' must be a number")
        return errors
