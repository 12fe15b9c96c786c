"""Read-only views over catalog data for browsing pages."""

from typing import Iterable

from marketplace.domain import Event

ALL_TAB = "All"


def by_start_date(events: Iterable[Event]) -> list[Event]:
    """Latest start date first."""
    return sorted(events, key=lambda e: e.starts_at, reverse=True)


def event_type_tabs(events: Iterable[Event]) -> list[str]:
    """Return the "All" tab followed by each event type in order of first appearance."""
    tabs = [ALL_TAB]
    for event in events:
        if event.type.value not in tabs:
            tabs.append(event.type.value)
    return tabs


def filter_by_tab(events: Iterable[Event], tab: str) -> list[Event]:
    """Events whose type matches ``tab`` (case-insensitive), latest first."""
    tab = tab.strip().lower()
    if tab == ALL_TAB.lower():
        return by_start_date(events)
    return by_start_date(e for e in events if e.type.value == tab)


def featured_events(events: Iterable[Event]) -> list[Event]:
    return by_start_date(e for e in events if e.featured)
