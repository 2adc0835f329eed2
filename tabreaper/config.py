"""
Runtime configuration loaded from YAML.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Optional

import yaml

from .badge import DEFAULT_BADGE_COLOR

CONFIG_ENV = "TABREAPER_CONFIG"


@dataclass(frozen=True)
class ReaperConfig:
    """Configuration for a TabReaper process."""
    state_path: Optional[str] = None  # None keeps state in memory
    alarm_name: str = "tabreaper-sweep"
    alarm_period_minutes: float = 60.0
    warning_window_minutes: float = 60.0
    badge_color: str = DEFAULT_BADGE_COLOR
    log_level: str = "INFO"


def load_config(path: Optional[str] = None) -> ReaperConfig:
    path = path or os.environ.get(CONFIG_ENV)
    if not path:
        return ReaperConfig()
    data = yaml.safe_load(Path(path).read_text()) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a mapping at top level.")
    known = {f.name for f in fields(ReaperConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValueError(f"{path}: unknown config keys {unknown}")
    return ReaperConfig(**data)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
