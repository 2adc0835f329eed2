"""
Settings record and validation of user-supplied TTL values.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

from .clock import DAY_MS
from .errors import InvalidSettingsError

DEFAULT_MAX_AGE_DAYS = 7.0


@dataclass(frozen=True)
class Settings:
    max_age_days: float = DEFAULT_MAX_AGE_DAYS

    @property
    def ttl_ms(self) -> float:
        return self.max_age_days * DAY_MS

    def to_dict(self) -> dict:
        return {"maxAgeDays": self.max_age_days}


def parse_max_age_days(value: Any) -> float:
    """
    Accept a positive, finite number of days, given as a number or a numeric string.
    Anything else raises InvalidSettingsError.
    """
    if isinstance(value, bool) or value is None:
        raise InvalidSettingsError("maxAgeDays must be a number.", details={"value": value})
    try:
        days = float(value.strip() if isinstance(value, str) else value)
    except (TypeError, ValueError):
        raise InvalidSettingsError(
            "maxAgeDays must be a number.", details={"value": repr(value)}
        ) from None
    if not math.isfinite(days) or days <= 0:
        raise InvalidSettingsError(
            "maxAgeDays must be greater than zero.", details={"value": repr(value)}
        )
    return days


def settings_from_dict(data: Any) -> Settings:
    """Lenient read of a stored settings record; bad values fall back to the default."""
    if not isinstance(data, dict):
        return Settings()
    try:
        return Settings(max_age_days=parse_max_age_days(data.get("maxAgeDays")))
    except InvalidSettingsError:
        return Settings()
