# folderterm/core/display.py

from typing import Protocol, runtime_checkable


@runtime_checkable
class DisplayRow(Protocol):
    """What a list or tree view needs to render one row."""

    @property
    def label(self) -> str: ...

    @property
    def icon_name(self) -> str: ...

    @property
    def path(self) -> str: ...
