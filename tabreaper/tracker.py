"""
Tab event tracking.

Host events are published onto an EventBus and dispatched, in arrival order,
to the Tracker, which keeps the persisted last-active map current:

- TabCreated   -> stamp the new tab with now
- TabActivated -> stamp the tab and every live tab sharing its URL with now
- TabRemoved   -> drop the tab's entry

Each handler is one engine transaction.
"""

from __future__ import annotations

import logging
import queue
import threading
from dataclasses import dataclass
from typing import Callable, List, Optional, Union

from .engine import ReaperEngine
from .errors import StoreError
from .spi.tab_provider import Tab

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TabCreated:
    tab: Tab


@dataclass(frozen=True)
class TabActivated:
    tab_id: int


@dataclass(frozen=True)
class TabRemoved:
    tab_id: int


TabEvent = Union[TabCreated, TabActivated, TabRemoved]


class Tracker:
    def __init__(self, engine: ReaperEngine) -> None:
        self._engine = engine

    def handle(self, event: TabEvent) -> None:
        if isinstance(event, TabCreated):
            self.on_created(event.tab)
        elif isinstance(event, TabActivated):
            self.on_activated(event.tab_id)
        elif isinstance(event, TabRemoved):
            self.on_removed(event.tab_id)
        else:
            raise TypeError(f"Unknown tab event: {event!r}")

    def on_created(self, tab: Tab) -> None:
        with self._engine.transaction() as (timestamps, _):
            timestamps[tab.id] = self._engine.now()

    def on_activated(self, tab_id: int) -> List[int]:
        """Returns the ids that were refreshed, the activated tab first."""
        with self._engine.transaction() as (timestamps, _):
            now = self._engine.now()
            timestamps[tab_id] = now
            refreshed = [tab_id]
            try:
                tabs = self._engine.provider.query_tabs()
            except Exception:
                logger.exception("Sibling lookup failed for tab %s", tab_id)
                tabs = []
            url = next((tab.url for tab in tabs if tab.id == tab_id), None)
            if url:
                for tab in tabs:
                    if tab.id != tab_id and tab.url == url:
                        timestamps[tab.id] = now
                        refreshed.append(tab.id)
        if len(refreshed) > 1:
            logger.debug("Activated %s, refreshed siblings %s", tab_id, refreshed[1:])
        return refreshed

    def on_removed(self, tab_id: int) -> None:
        with self._engine.transaction() as (timestamps, _):
            timestamps.pop(tab_id, None)


class EventBus:
    """
    FIFO dispatch of tab events to a single handler.

    Pass the engine lock as lock: dispatch then orders on the same lock as
    engine passes, so a handler fired from inside a sweep cannot deadlock
    against a concurrent submit.

    publish() only enqueues. Events are delivered either by drain() on the
    calling thread or by the worker thread started with start(); in both
    cases one event at a time, in the order they were published.
    """

    def __init__(self, handler: Callable[[TabEvent], None], lock=None) -> None:
        self._handler = handler
        self._queue: "queue.Queue[TabEvent]" = queue.Queue()
        self._dispatch_lock = lock if lock is not None else threading.RLock()
        self._running = False
        self._worker: Optional[threading.Thread] = None

    def publish(self, event: TabEvent) -> None:
        self._queue.put(event)

    def pending(self) -> int:
        return self._queue.qsize()

    def drain(self) -> int:
        """Dispatch everything queued so far. Returns the number of events handled."""
        handled = 0
        while True:
            try:
                event = self._queue.get_nowait()
            except queue.Empty:
                return handled
            self._dispatch(event)
            handled += 1

    def start(self) -> None:
        if self._running or (self._worker is not None and self._worker.is_alive()):
            return
        self._running = True
        self._worker = threading.Thread(target=self._loop, name="tabreaper-events", daemon=True)
        self._worker.start()

    def stop(self, timeout: float = 1.0) -> bool:
        """
        Stop the worker, then dispatch whatever is still queued on this thread.
        Returns False, leaving the queue untouched, if the worker is still busy
        after timeout; call stop() again later.
        """
        self._running = False
        if self._worker is not None:
            self._worker.join(timeout)
            if self._worker.is_alive():
                logger.warning("Event worker still busy after %.1fs", timeout)
                return False
            self._worker = None
        self.drain()
        return True

    def _loop(self) -> None:
        while self._running:
            try:
                event = self._queue.get(timeout=0.1)
            except queue.Empty:
                continue
            self._dispatch(event)

    def _dispatch(self, event: TabEvent) -> None:
        with self._dispatch_lock:
            try:
                self._handler(event)
            except StoreError:
                logger.exception("Could not persist %s", event)
            except Exception:
                logger.exception("Handler failed for %s", event)
            finally:
                self._queue.task_done()
