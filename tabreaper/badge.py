"""
Warning badge: shows how many tabs are about to be closed.
"""

from __future__ import annotations

import logging

from .clock import HOUR_MS
from .engine import ReaperEngine
from .spi.display import BadgeSink

logger = logging.getLogger(__name__)

DEFAULT_BADGE_COLOR = "#D97706"


class BadgeUpdater:
    def __init__(
        self,
        engine: ReaperEngine,
        sink: BadgeSink,
        window_ms: int = HOUR_MS,
        color: str = DEFAULT_BADGE_COLOR,
    ) -> None:
        self._engine = engine
        self._sink = sink
        self._window_ms = window_ms
        self._color = color

    def refresh(self) -> int:
        count = self._engine.estimate_at_risk(self._window_ms)
        if count > 0:
            self._sink.set_badge(str(count), self._color)
        else:
            self._sink.clear_badge()
        logger.debug("Badge refreshed: %d at risk", count)
        return count
