"""
TabReaper process facade.

Wires the engine, tracker, event bus, scheduler and badge together and
implements the host lifecycle hooks (install, startup, alarm) plus the
settings mutation surface.
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional, Tuple

from .badge import BadgeUpdater
from .clock import MINUTE_MS, Clock, now_ms
from .config import ReaperConfig
from .engine import ReaperEngine, SweepResult
from .errors import InvalidSettingsError, StoreError
from .listing import TabRow, build_rows
from .settings import Settings, parse_max_age_days
from .spi.display import BadgeSink
from .spi.scheduler import Scheduler, ensure_scheduled
from .spi.tab_provider import TabProvider
from .spi.timestamp_store import TimestampStore
from .stores import InMemoryStore, JsonFileStore
from .tracker import EventBus, TabEvent, Tracker

logger = logging.getLogger(__name__)


class TabReaper:
    def __init__(
        self,
        store: TimestampStore,
        provider: TabProvider,
        scheduler: Scheduler,
        badge_sink: BadgeSink,
        config: Optional[ReaperConfig] = None,
        clock: Clock = now_ms,
    ) -> None:
        self.config = config or ReaperConfig()
        self.engine = ReaperEngine(store, provider, clock=clock)
        self.tracker = Tracker(self.engine)
        self.events = EventBus(self.tracker.handle, lock=self.engine.lock)
        self.badge = BadgeUpdater(
            self.engine,
            badge_sink,
            window_ms=int(self.config.warning_window_minutes * MINUTE_MS),
            color=self.config.badge_color,
        )
        self._scheduler = scheduler

    @classmethod
    def from_config(
        cls,
        config: ReaperConfig,
        provider: TabProvider,
        scheduler: Scheduler,
        badge_sink: BadgeSink,
        clock: Clock = now_ms,
    ) -> "TabReaper":
        store = JsonFileStore(config.state_path) if config.state_path else InMemoryStore()
        return cls(store, provider, scheduler, badge_sink, config=config, clock=clock)

    # ---- lifecycle hooks ----

    def on_installed(self) -> None:
        self._boot()

    def on_startup(self) -> None:
        self._boot()

    def on_alarm(self, name: str) -> Optional[SweepResult]:
        if name != self.config.alarm_name:
            return None
        try:
            result = self.engine.sweep()
            self.badge.refresh()
        except StoreError:
            logger.exception("Sweep aborted")
            return None
        return result

    def _boot(self) -> None:
        try:
            self.engine.reconcile()
        except StoreError:
            logger.exception("Reconcile aborted")
        created = ensure_scheduled(
            self._scheduler,
            self.config.alarm_name,
            self.config.alarm_period_minutes,
            self.on_alarm,
        )
        if created:
            logger.info("Created sweep job %s", self.config.alarm_name)
        try:
            self.badge.refresh()
        except StoreError:
            logger.exception("Badge refresh failed")

    # ---- events ----

    def submit(self, event: TabEvent) -> None:
        """Publish an event and dispatch everything pending on this thread."""
        self.events.publish(event)
        self.events.drain()

    # ---- queries / commands ----

    def sweep_now(self) -> Optional[SweepResult]:
        result = self.engine.sweep()
        self.badge.refresh()
        return result

    def estimate_at_risk(self, window_minutes: float) -> int:
        return self.engine.estimate_at_risk(int(window_minutes * MINUTE_MS))

    def settings(self) -> Settings:
        return self.engine.settings()

    def set_max_age_days(self, value: Any) -> Settings:
        try:
            days = parse_max_age_days(value)
        except InvalidSettingsError:
            logger.warning("Rejected maxAgeDays=%r", value)
            raise
        settings = Settings(max_age_days=days)
        self.engine.save_settings(settings)
        logger.info("maxAgeDays set to %s", days)
        self.badge.refresh()
        return settings

    def list_tabs(self, query: Optional[str] = None) -> Tuple[List[TabRow], Settings]:
        settings = self.engine.settings()
        timestamps = self.engine.timestamps()
        tabs = self.engine.provider.query_tabs()
        rows = build_rows(tabs, timestamps, settings, self.engine.now(), query=query)
        return rows, settings
