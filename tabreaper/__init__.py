"""
tabreaper - idle-tab eviction engine

Tracks when each tab was last used and periodically closes tabs that have
been idle longer than a configurable TTL.

Rules:
- Pinned and active tabs are never closed
- A tab sharing its URL with a pinned or active tab is never closed
- Tabs with no known last-active time are never closed
- Entries for tabs that no longer exist are purged on every pass
"""

from .engine import ReaperEngine, ReconcileResult, SweepResult
from .errors import InvalidSettingsError, StoreError, TabReaperError
from .protection import is_protected, resolve_protected
from .service import TabReaper
from .settings import Settings, parse_max_age_days
from .tracker import EventBus, TabActivated, TabCreated, TabRemoved, Tracker

__all__ = [
    "ReaperEngine",
    "ReconcileResult",
    "SweepResult",
    "InvalidSettingsError",
    "StoreError",
    "TabReaperError",
    "is_protected",
    "resolve_protected",
    "TabReaper",
    "Settings",
    "parse_max_age_days",
    "EventBus",
    "TabActivated",
    "TabCreated",
    "TabRemoved",
    "Tracker",
]
