"""
SPI interface for idle-timestamp persistence.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Protocol

from ..settings import Settings


@dataclass(frozen=True)
class StoredState:
    """Everything persisted between runs."""

    timestamps: Dict[int, int] = field(default_factory=dict)
    settings: Settings = field(default_factory=Settings)


class TimestampStore(Protocol):
    """SPI for the tab id -> last-active map plus settings."""

    def load(self) -> StoredState:
        """Current state. Empty map and default settings when nothing is stored."""

    def save_timestamps(self, timestamps: Dict[int, int]) -> None:
        """Replace the whole timestamp map. Raises StoreError on failure."""

    def save_settings(self, settings: Settings) -> None:
        """Replace the settings record. Raises StoreError on failure."""
