"""Host adapters (in-memory reference implementations of the SPI)."""

from .memory import InMemoryTabProvider, ManualScheduler, RecordingBadge

__all__ = ["InMemoryTabProvider", "ManualScheduler", "RecordingBadge"]
