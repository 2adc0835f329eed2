"""
Reaper engine: reconciliation, the eviction sweep and the near-expiry count.

Every pass reads a fresh tab snapshot from the provider and runs its
load -> mutate -> save cycle inside one store transaction, so handlers and
sweeps never interleave their writes. Overlapping sweeps are skipped.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterator, List, Optional, Tuple

from .clock import Clock, now_ms
from .protection import is_protected, resolve_protected
from .settings import Settings
from .spi.tab_provider import Tab, TabGoneError, TabProvider
from .spi.timestamp_store import TimestampStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SweepResult:
    closed: FrozenSet[int] = field(default_factory=frozenset)
    purged: FrozenSet[int] = field(default_factory=frozenset)
    failed: FrozenSet[int] = field(default_factory=frozenset)

    def to_dict(self) -> dict:
        return {
            "closed": sorted(self.closed),
            "purged": sorted(self.purged),
            "failed": sorted(self.failed),
        }


@dataclass(frozen=True)
class ReconcileResult:
    added: FrozenSet[int] = field(default_factory=frozenset)
    removed: FrozenSet[int] = field(default_factory=frozenset)


class ReaperEngine:
    def __init__(
        self,
        store: TimestampStore,
        provider: TabProvider,
        clock: Clock = now_ms,
    ) -> None:
        self._store = store
        self._provider = provider
        self._clock = clock
        self._lock = threading.RLock()
        self._sweep_lock = threading.Lock()
        self._local = threading.local()

    @property
    def lock(self) -> "threading.RLock":
        """The store lock. Anything dispatching into the engine must order on it."""
        return self._lock

    @property
    def provider(self) -> TabProvider:
        return self._provider

    def now(self) -> int:
        return self._clock()

    @contextmanager
    def transaction(self) -> Iterator[Tuple[Dict[int, int], Settings]]:
        """
        Serialized load -> mutate -> save over the whole timestamp map.
        The map is saved only if the block finishes without raising.
        A transaction opened inside another one on the same thread shares
        the outer map and is saved with it.
        """
        with self._lock:
            outer = getattr(self._local, "current", None)
            if outer is not None:
                yield outer
                return
            state = self._store.load()
            current = (dict(state.timestamps), state.settings)
            self._local.current = current
            try:
                yield current
            finally:
                self._local.current = None
            self._store.save_timestamps(current[0])

    def settings(self) -> Settings:
        with self._lock:
            return self._store.load().settings

    def save_settings(self, settings: Settings) -> None:
        with self._lock:
            self._store.save_settings(settings)

    def timestamps(self) -> Dict[int, int]:
        with self._lock:
            return dict(self._store.load().timestamps)

    def reconcile(self) -> ReconcileResult:
        """Track every live tab we are missing, drop entries for tabs that are gone."""
        with self.transaction() as (timestamps, _):
            tabs = self._provider.query_tabs()
            now = self._clock()
            live = {tab.id for tab in tabs}
            added = live - set(timestamps)
            removed = set(timestamps) - live
            for tab_id in added:
                timestamps[tab_id] = now
            for tab_id in removed:
                del timestamps[tab_id]
        if added or removed:
            logger.info("Reconciled: %d added, %d removed", len(added), len(removed))
        return ReconcileResult(added=frozenset(added), removed=frozenset(removed))

    def sweep(self) -> Optional[SweepResult]:
        """
        Close every unprotected tab idle for at least the TTL, then purge
        orphaned entries. Returns None when another sweep is already running.
        """
        if not self._sweep_lock.acquire(blocking=False):
            logger.info("Sweep already in progress, skipping")
            return None
        try:
            return self._sweep()
        finally:
            self._sweep_lock.release()

    def _sweep(self) -> SweepResult:
        closed = set()
        failed = set()
        with self.transaction() as (timestamps, settings):
            tabs = self._provider.query_tabs()
            now = self._clock()
            ttl = settings.ttl_ms
            protected = resolve_protected(tabs)

            for tab in tabs:
                if tab.id in closed or tab.id in failed:
                    continue
                if is_protected(tab, protected):
                    continue
                last_active = timestamps.get(tab.id)
                if last_active is None:
                    continue
                idle = now - last_active
                if idle < ttl:
                    continue
                logger.debug("Closing tab %s (idle %d ms)", tab.id, idle)
                try:
                    self._provider.remove_tab(tab.id)
                    closed.add(tab.id)
                except TabGoneError:
                    logger.debug("Tab %s already gone", tab.id)
                    closed.add(tab.id)
                except Exception:
                    logger.exception("Failed to close tab %s", tab.id)
                    failed.add(tab.id)
                timestamps.pop(tab.id, None)

            live = {tab.id for tab in tabs}
            purged = {tab_id for tab_id in timestamps if tab_id not in live}
            for tab_id in purged:
                del timestamps[tab_id]

        result = SweepResult(
            closed=frozenset(closed),
            purged=frozenset(purged),
            failed=frozenset(failed),
        )
        logger.info(
            "Sweep done: %d closed, %d purged, %d failed",
            len(result.closed), len(result.purged), len(result.failed),
        )
        return result

    def estimate_at_risk(self, window_ms: int) -> int:
        """Unprotected, tracked tabs that will be closed within window_ms. Read-only."""
        with self._lock:
            state = self._store.load()
            tabs = self._provider.query_tabs()
            now = self._clock()
        return count_at_risk(tabs, state.timestamps, state.settings, now, window_ms)


def count_at_risk(
    tabs: List[Tab],
    timestamps: Dict[int, int],
    settings: Settings,
    now: int,
    window_ms: int,
) -> int:
    protected = resolve_protected(tabs)
    ttl = settings.ttl_ms
    count = 0
    for tab in tabs:
        if is_protected(tab, protected):
            continue
        last_active = timestamps.get(tab.id)
        if last_active is None:
            continue
        remaining = ttl - (now - last_active)
        if 0 < remaining <= window_ms:
            count += 1
    return count
