"""
In-memory host adapters: a tab set, a badge and a hand-cranked scheduler.
"""

from __future__ import annotations

import itertools
import threading
from dataclasses import replace
from typing import Callable, Dict, List, Optional, Tuple

from ..spi.scheduler import PeriodicJob
from ..spi.tab_provider import Tab, TabGoneError
from ..tracker import TabActivated, TabCreated, TabEvent, TabRemoved

Listener = Callable[[TabEvent], None]


class InMemoryTabProvider:
    """
    Live tab set with browser-like events. Each tab belongs to a window and
    at most one tab per window is active.
    """

    def __init__(self) -> None:
        self._tabs: Dict[int, Tab] = {}
        self._windows: Dict[int, int] = {}
        self._ids = itertools.count(1)
        self._listeners: List[Listener] = []
        self._lock = threading.Lock()

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    # ---- TabProvider ----

    def query_tabs(self) -> List[Tab]:
        with self._lock:
            return list(self._tabs.values())

    def remove_tab(self, tab_id: int) -> None:
        with self._lock:
            if tab_id not in self._tabs:
                raise TabGoneError(tab_id)
            del self._tabs[tab_id]
            self._windows.pop(tab_id, None)
        self._emit(TabRemoved(tab_id))

    # ---- host-side mutations ----

    def open_tab(
        self,
        url: Optional[str],
        title: str = "",
        window: int = 1,
        pinned: bool = False,
        active: bool = False,
    ) -> Tab:
        with self._lock:
            tab = Tab(id=next(self._ids), url=url, pinned=pinned, title=title)
            self._tabs[tab.id] = tab
            self._windows[tab.id] = window
        self._emit(TabCreated(tab))
        if active:
            self.activate(tab.id)
        return self.get(tab.id)

    def activate(self, tab_id: int) -> None:
        with self._lock:
            self._require(tab_id)
            window = self._windows[tab_id]
            for other_id, other in self._tabs.items():
                if self._windows[other_id] == window and other.active:
                    self._tabs[other_id] = replace(other, active=False)
            self._tabs[tab_id] = replace(self._tabs[tab_id], active=True)
        self._emit(TabActivated(tab_id))

    def set_pinned(self, tab_id: int, pinned: bool = True) -> None:
        with self._lock:
            self._require(tab_id)
            self._tabs[tab_id] = replace(self._tabs[tab_id], pinned=pinned)

    def deactivate(self, tab_id: int) -> None:
        with self._lock:
            self._require(tab_id)
            self._tabs[tab_id] = replace(self._tabs[tab_id], active=False)

    def vanish(self, tab_id: int) -> None:
        """Drop a tab without firing a removal event."""
        with self._lock:
            self._tabs.pop(tab_id, None)
            self._windows.pop(tab_id, None)

    def get(self, tab_id: int) -> Tab:
        with self._lock:
            return self._require(tab_id)

    def __contains__(self, tab_id: int) -> bool:
        return tab_id in self._tabs

    def _require(self, tab_id: int) -> Tab:
        tab = self._tabs.get(tab_id)
        if tab is None:
            raise TabGoneError(tab_id)
        return tab

    def _emit(self, event: TabEvent) -> None:
        for listener in list(self._listeners):
            listener(event)


class RecordingBadge:
    def __init__(self) -> None:
        self.text = ""
        self.color: Optional[str] = None
        self.history: List[Tuple[str, Optional[str]]] = []

    def set_badge(self, text: str, color: str) -> None:
        self.text = text
        self.color = color
        self.history.append((text, color))

    def clear_badge(self) -> None:
        self.text = ""
        self.color = None
        self.history.append(("", None))


class ManualScheduler:
    """Scheduler whose jobs only run when fire() is called."""

    def __init__(self) -> None:
        self._jobs: Dict[str, Tuple[PeriodicJob, Callable[[str], None]]] = {}
        self.created: List[str] = []

    def create(self, name: str, period_minutes: float, callback: Callable[[str], None]) -> PeriodicJob:
        job = PeriodicJob(name=name, period_minutes=period_minutes)
        self._jobs[name] = (job, callback)
        self.created.append(name)
        return job

    def get(self, name: str) -> Optional[PeriodicJob]:
        entry = self._jobs.get(name)
        return entry[0] if entry else None

    def clear(self, name: str) -> bool:
        return self._jobs.pop(name, None) is not None

    def fire(self, name: str):
        _, callback = self._jobs[name]
        return callback(name)
