"""
SPI interface for the at-a-glance warning indicator.
"""

from __future__ import annotations

from typing import Protocol


class BadgeSink(Protocol):
    def set_badge(self, text: str, color: str) -> None: ...

    def clear_badge(self) -> None: ...
