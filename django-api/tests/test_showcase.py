"""Unit tests for catalog browsing helpers.

Run with: pytest tests/test_showcase.py -v
"""

from datetime import timedelta

from marketplace.services.showcase import (
    ALL_TAB,
    by_start_date,
    event_type_tabs,
    featured_events,
    filter_by_tab,
)

from factories import STARTS_AT, make_event


def _event(event_id: str, event_type: str, days: int = 0, featured: bool = False):
    starts_at = STARTS_AT + timedelta(days=days)
    return make_event(
        id=event_id,
        type=event_type,
        featured=featured,
        starts_at=starts_at,
        ends_at=starts_at + timedelta(hours=2),
    )


EVENTS = [
    _event("jazz", "concert", days=1),
    _event("pottery", "workshop", days=5, featured=True),
    _event("pycon", "conference", days=3),
    _event("rock", "concert", days=9, featured=True),
]


class TestShowcase:
    """Tests for tabs, filtering and ordering."""

    def test_tabs_start_with_all_in_first_seen_order(self):
        """Tabs list "All" then each type once."""
        assert event_type_tabs(EVENTS) == [ALL_TAB, "concert", "workshop", "conference"]

    def test_tabs_for_empty_catalog(self):
        """An empty catalog still has the "All" tab."""
        assert event_type_tabs([]) == [ALL_TAB]

    def test_by_start_date_latest_first(self):
        """Events sort by start date descending."""
        assert [e.id.value for e in by_start_date(EVENTS)] == ["rock", "pottery", "pycon", "jazz"]

    def test_filter_by_tab_is_case_insensitive(self):
        """Tab matching ignores case."""
        assert [e.id.value for e in filter_by_tab(EVENTS, "Concert")] == ["rock", "jazz"]

    def test_all_tab_keeps_everything(self):
        """The "all" tab keeps every event."""
        assert len(filter_by_tab(EVENTS, "all")) == 4

    def test_featured_events(self):
        """Only featured events, latest first."""
        assert [e.id.value for e in featured_events(EVENTS)] == ["rock", "pottery"]
