"""
SPI interface for the periodic job runner.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional, Protocol


@dataclass(frozen=True)
class PeriodicJob:
    name: str
    period_minutes: float


class Scheduler(Protocol):
    def create(self, name: str, period_minutes: float, callback: Callable[[str], None]) -> PeriodicJob:
        """Create or replace the job registered under name."""

    def get(self, name: str) -> Optional[PeriodicJob]:
        """The job registered under name, if any."""

    def clear(self, name: str) -> bool:
        """Cancel the job. Returns False when it did not exist."""


def ensure_scheduled(
    scheduler: Scheduler,
    name: str,
    period_minutes: float,
    callback: Callable[[str], None],
) -> bool:
    """Create the job unless one with this name already exists. Returns True if created."""
    if scheduler.get(name) is not None:
        return False
    scheduler.create(name, period_minutes, callback)
    return True
