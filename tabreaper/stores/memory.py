"""
In-memory timestamp store.
"""

from __future__ import annotations

from typing import Dict, Optional

from ..settings import Settings
from ..spi.timestamp_store import StoredState


class InMemoryStore:
    def __init__(self, timestamps: Optional[Dict[int, int]] = None, settings: Optional[Settings] = None) -> None:
        self._timestamps: Dict[int, int] = dict(timestamps or {})
        self._settings = settings or Settings()

    def load(self) -> StoredState:
        return StoredState(timestamps=dict(self._timestamps), settings=self._settings)

    def save_timestamps(self, timestamps: Dict[int, int]) -> None:
        self._timestamps = {int(k): int(v) for k, v in timestamps.items()}

    def save_settings(self, settings: Settings) -> None:
        self._settings = settings
