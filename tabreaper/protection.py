"""
Protection rules.

A tab is protected for a pass when it is pinned, when it is active, or when
its URL matches the URL of any pinned or active tab. Protection follows the
URL rather than the tab instance, so a page open in two windows is kept as
long as one copy is in use.
"""

from __future__ import annotations

from typing import FrozenSet, Iterable

from .spi.tab_provider import Tab


def resolve_protected(tabs: Iterable[Tab]) -> FrozenSet[str]:
    """URLs of every pinned or active tab in the snapshot."""
    return frozenset(
        tab.url for tab in tabs if (tab.pinned or tab.active) and tab.url
    )


def is_protected(tab: Tab, protected: FrozenSet[str]) -> bool:
    if tab.pinned or tab.active:
        return True
    return bool(tab.url) and tab.url in protected
