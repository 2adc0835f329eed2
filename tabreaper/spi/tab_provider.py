"""
SPI interface for the live tab set.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Protocol


@dataclass(frozen=True)
class Tab:
    """One live tab as reported by the host."""

    id: int
    url: Optional[str]
    pinned: bool = False
    active: bool = False
    title: str = ""
    fav_icon_url: Optional[str] = None


class TabGoneError(LookupError):
    """Raised by remove_tab when the tab no longer exists."""

    def __init__(self, tab_id: int):
        super().__init__(f"Tab {tab_id} no longer exists.")
        self.tab_id = tab_id


class TabProvider(Protocol):
    """
    Ground truth for which tabs exist.
    Every call returns a fresh view; callers never cache it across passes.
    """

    def query_tabs(self) -> List[Tab]:
        """All live tabs, in no particular order."""

    def remove_tab(self, tab_id: int) -> None:
        """Close a tab. Raises TabGoneError if it is already gone."""
