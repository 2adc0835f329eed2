"""
Error types shared across the engine, the stores and the HTTP transport.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class TabReaperError(Exception):
    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details


class StoreError(TabReaperError):
    """Persistence failed. The previously saved state is untouched."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__("STORE_UNAVAILABLE", message, details)


class InvalidSettingsError(TabReaperError):
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__("INVALID_SETTINGS", message, details)
