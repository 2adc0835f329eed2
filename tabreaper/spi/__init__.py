"""SPI surface for tabreaper host integrations."""

from .display import BadgeSink
from .scheduler import PeriodicJob, Scheduler, ensure_scheduled
from .tab_provider import Tab, TabGoneError, TabProvider
from .timestamp_store import StoredState, TimestampStore

__all__ = [
    "BadgeSink",
    "PeriodicJob",
    "Scheduler",
    "ensure_scheduled",
    "Tab",
    "TabGoneError",
    "TabProvider",
    "StoredState",
    "TimestampStore",
]
