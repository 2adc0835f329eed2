"""
Read model for a tab list view: idle time, expiry progress, search.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional

from .settings import Settings
from .spi.tab_provider import Tab

TITLE_MAX_LEN = 40


@dataclass(frozen=True)
class TabRow:
    tab_id: int
    title: str
    full_title: str
    url: Optional[str]
    fav_icon_url: Optional[str]
    idle_ms: int
    idle_label: str
    badge: Optional[str]
    progress: Optional[float]
    level: Optional[str]

    def to_dict(self) -> dict:
        return {
            "tab_id": self.tab_id,
            "title": self.title,
            "full_title": self.full_title,
            "url": self.url,
            "fav_icon_url": self.fav_icon_url,
            "idle_ms": self.idle_ms,
            "idle_label": self.idle_label,
            "badge": self.badge,
            "progress": self.progress,
            "level": self.level,
        }


def format_duration(ms: int) -> str:
    seconds = ms // 1000
    minutes = seconds // 60
    hours = minutes // 60
    days = hours // 24
    if days > 0:
        return f"{days}d {hours % 24}h"
    if hours > 0:
        return f"{hours}h {minutes % 60}m"
    if minutes > 0:
        return f"{minutes}m"
    return "just now"


def truncate(text: str, max_len: int) -> str:
    if len(text) <= max_len:
        return text
    return text[: max_len - 1] + "…"


def progress_level(pct: float) -> str:
    if pct >= 90:
        return "danger"
    if pct >= 60:
        return "warning"
    return "ok"


def matches(tab: Tab, query: str) -> bool:
    needle = query.lower()
    return needle in (tab.title or "").lower() or needle in (tab.url or "").lower()


def build_rows(
    tabs: List[Tab],
    timestamps: Dict[int, int],
    settings: Settings,
    now: int,
    query: Optional[str] = None,
) -> List[TabRow]:
    """Rows sorted oldest first. Untracked tabs count as idle since now."""
    ttl = settings.ttl_ms
    rows = []
    for tab in tabs:
        if query and not matches(tab, query):
            continue
        idle = max(0, now - timestamps.get(tab.id, now))
        if tab.pinned:
            badge = "pinned"
        elif tab.active:
            badge = "active"
        else:
            badge = None
        progress = level = None
        if badge is None:
            progress = min(100.0, idle / ttl * 100)
            level = progress_level(progress)
        full_title = tab.title or ""
        rows.append(
            TabRow(
                tab_id=tab.id,
                title=truncate(full_title or "Untitled", TITLE_MAX_LEN),
                full_title=full_title,
                url=tab.url,
                fav_icon_url=tab.fav_icon_url,
                idle_ms=idle,
                idle_label=format_duration(idle),
                badge=badge,
                progress=progress,
                level=level,
            )
        )
    rows.sort(key=lambda row: row.idle_ms, reverse=True)
    return rows
