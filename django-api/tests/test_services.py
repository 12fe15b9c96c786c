"""Unit tests for EventService.

These test error handling and domain error mapping against the in-memory store.
Run with: pytest tests/test_services.py -v
"""

import threading
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from uuid import uuid4

import pytest

from marketplace.domain import Capacity, EventId, TierId
from marketplace.domain.drafts import (
    EventDraft,
    ReplaceTiers,
    SetEventField,
    SetTierField,
    ToggleFeatured,
)
from marketplace.domain.errors import (
    DuplicateEventError,
    EventNotFoundError,
    InsufficientInventoryError,
    InvalidEventIdError,
    InvalidQuantityError,
    TierNotFoundError,
    ValidationError,
)
from marketplace.services.event_service import EventService
from marketplace.stores.memory_store import InMemoryEventStore

from factories import FIXED_NOW, STARTS_AT, event_draft, make_event, tier_draft


class ReservingStore(InMemoryEventStore):
    """Takes one general ticket just before each replace lands."""

    def replace_event(self, event, *, keep_stock=frozenset()):
        self.reserve(
            event.id, TierId("general"), 1, reservation_id=uuid4(), reserved_at=FIXED_NOW
        )
        return super().replace_event(event, keep_stock=keep_stock)


class TestCreateEvent:
    """Tests for EventService.create_event."""

    def test_create_persists_draft_with_defaults(self, service, memory_store):
        """A valid draft is stored with server timestamps and featured off."""
        event = service.create_event(event_draft())
        assert event.created_at == event.updated_at == FIXED_NOW
        assert event.featured is False
        assert memory_store.get_event(EventId("summer-jazz-2026")) == event

    def test_create_then_get_returns_same_event(self, service):
        """Reading back a created event yields what was stored."""
        created = service.create_event(event_draft())
        assert service.get_event("summer-jazz-2026") == created

    def test_create_reports_all_errors(self, service, memory_store):
        """An invalid draft raises one ValidationError listing every problem."""
        with pytest.raises(ValidationError) as exc_info:
            service.create_event(EventDraft(name="Only a name"))
        fields = [e.field for e in exc_info.value.errors]
        assert "id" in fields
        assert "ticketTiers" in fields
        assert "name" not in fields
        assert memory_store.list_events() == []

    def test_create_duplicate_id(self, service):
        """A second event with a taken id is rejected."""
        service.create_event(event_draft())
        with pytest.raises(DuplicateEventError):
            service.create_event(event_draft(name="Copy"))


class TestGetAndListEvents:
    """Tests for reading events."""

    def test_get_event_invalid_id_raises_error(self, service):
        """get_event raises InvalidEventIdError for a blank id."""
        with pytest.raises(InvalidEventIdError):
            service.get_event("  ")

    def test_get_event_not_found_raises_error(self, service):
        """get_event raises EventNotFoundError when store returns None."""
        with pytest.raises(EventNotFoundError):
            service.get_event("missing")

    def test_list_events_sorted_by_start_descending(self, service):
        """Events come back latest start first."""
        service.create_event(event_draft(id="early"))
        service.create_event(
            event_draft(
                id="late",
                starts_at=STARTS_AT + timedelta(days=10),
                ends_at=STARTS_AT + timedelta(days=10, hours=2),
            )
        )
        assert [e.id.value for e in service.list_events()] == ["late", "early"]

    def test_list_events_by_type(self, service):
        """Filtering by type is case-insensitive; "All" keeps everything."""
        service.create_event(event_draft(id="gig"))
        service.create_event(event_draft(id="class", type="workshop"))
        assert [e.id.value for e in service.list_events("Workshop")] == ["class"]
        assert len(service.list_events("All")) == 2

    def test_list_events_unknown_type(self, service):
        """Unknown type filters are a validation failure."""
        with pytest.raises(ValidationError):
            service.list_events("festival")

    def test_list_featured_only(self, service):
        """featured_only keeps featured events."""
        service.create_event(event_draft(id="plain"))
        service.create_event(event_draft(id="star", featured=True))
        assert [e.id.value for e in service.list_events(featured_only=True)] == ["star"]


class TestUpdateEvent:
    """Tests for EventService.update_event."""

    def test_update_applies_commands_and_keeps_created_at(self, memory_store):
        """Updates re-stamp updated_at only."""
        later = FIXED_NOW + timedelta(hours=1)
        clock = iter([FIXED_NOW, later])
        service = EventService(memory_store, clock=lambda: next(clock))
        service.create_event(event_draft())
        event = service.update_event(
            "summer-jazz-2026",
            [SetEventField(field="name", value="Late Jazz"), ToggleFeatured()],
        )
        assert event.name == "Late Jazz"
        assert event.featured
        assert event.created_at == FIXED_NOW
        assert event.updated_at == later
        assert service.get_event("summer-jazz-2026") == event

    def test_update_is_validated_as_a_whole(self, service):
        """An update that breaks the event is rejected and nothing changes."""
        original = service.create_event(event_draft())
        with pytest.raises(ValidationError) as exc_info:
            service.update_event("summer-jazz-2026", [SetEventField(field="name", value="")])
        assert [e.field for e in exc_info.value.errors] == ["name"]
        assert service.get_event("summer-jazz-2026") == original

    def test_update_cannot_change_id(self, service):
        """The event id is fixed once created."""
        service.create_event(event_draft())
        with pytest.raises(ValidationError) as exc_info:
            service.update_event("summer-jazz-2026", [SetEventField(field="id", value="other")])
        assert exc_info.value.errors[0].message == "Event ID cannot be changed."

    def test_update_unknown_event(self, service):
        """Updating a missing event raises EventNotFoundError."""
        with pytest.raises(EventNotFoundError):
            service.update_event("missing", [ToggleFeatured()])

    def test_resubmitted_tier_keeps_sold_down_stock(self, service):
        """Echoing back a sold-down tier keeps its original capacity."""
        service.create_event(event_draft())
        service.reserve_tickets("summer-jazz-2026", "vip", 10)
        current = service.get_event("summer-jazz-2026")
        tiers = EventDraft.from_event(current).ticket_tiers
        resubmitted = tuple(replace(t, capacity=None) for t in tiers)
        event = service.update_event("summer-jazz-2026", [ReplaceTiers(tiers=resubmitted)])
        vip = event.tier(TierId("vip"))
        assert vip.available == Capacity(0)
        assert vip.capacity == Capacity(10)

    def test_restocking_a_tier_resets_capacity(self, service):
        """Setting new stock makes it the tier's capacity."""
        service.create_event(event_draft())
        event = service.update_event(
            "summer-jazz-2026", [SetTierField(index=1, field="available", value=25)]
        )
        vip = event.tier(TierId("vip"))
        assert vip.available == vip.capacity == Capacity(25)

    def test_update_keeps_reservations_made_meanwhile(self):
        """A reservation landing between read and write is not undone."""
        store = ReservingStore()
        service = EventService(store, clock=lambda: FIXED_NOW)
        service.create_event(event_draft())
        event = service.update_event(
            "summer-jazz-2026", [SetEventField(field="name", value="Renamed")]
        )
        general = event.tier(TierId("general"))
        assert event.name == "Renamed"
        assert general.available == Capacity(99)
        assert general.capacity == Capacity(100)
        assert store.get_event(EventId("summer-jazz-2026")) == event

    def test_restock_overrides_reservations_made_meanwhile(self):
        """Stock set by the update itself is what gets stored."""
        service = EventService(ReservingStore(), clock=lambda: FIXED_NOW)
        service.create_event(event_draft())
        event = service.update_event(
            "summer-jazz-2026", [SetTierField(index=0, field="available", value=40)]
        )
        general = event.tier(TierId("general"))
        assert general.available == general.capacity == Capacity(40)


class TestDeleteEvent:
    """Tests for EventService.delete_event."""

    def test_delete_returns_event(self, service):
        """Deleting returns the removed event."""
        created = service.create_event(event_draft())
        assert service.delete_event("summer-jazz-2026") == created
        with pytest.raises(EventNotFoundError):
            service.get_event("summer-jazz-2026")

    def test_delete_unknown_leaves_store_unchanged(self, service, memory_store):
        """Deleting a missing event raises and removes nothing."""
        service.create_event(event_draft())
        with pytest.raises(EventNotFoundError):
            service.delete_event("missing")
        assert len(memory_store.list_events()) == 1


class TestReserveTickets:
    """Tests for EventService.reserve_tickets."""

    def test_reserve_within_stock(self, service):
        """Reserving q of N leaves N - q."""
        service.create_event(event_draft())
        reservation = service.reserve_tickets("summer-jazz-2026", "vip", 4)
        assert reservation.remaining == 6
        assert reservation.created_at == FIXED_NOW
        assert service.get_event("summer-jazz-2026").tier(TierId("vip")).available == Capacity(6)

    def test_reserve_more_than_stock_changes_nothing(self, service):
        """Over-asking raises with current stock and leaves it untouched."""
        service.create_event(event_draft())
        with pytest.raises(InsufficientInventoryError) as exc_info:
            service.reserve_tickets("summer-jazz-2026", "vip", 11)
        assert (exc_info.value.requested, exc_info.value.available) == (11, 10)
        assert service.get_event("summer-jazz-2026").tier(TierId("vip")).available == Capacity(10)

    @pytest.mark.parametrize("quantity", [0, -2])
    def test_reserve_invalid_quantity(self, service, quantity):
        """Quantities below one are rejected before touching stock."""
        service.create_event(event_draft())
        with pytest.raises(InvalidQuantityError):
            service.reserve_tickets("summer-jazz-2026", "vip", quantity)

    def test_reserve_unknown_event(self, service):
        """Reserving on a missing event raises EventNotFoundError."""
        with pytest.raises(EventNotFoundError):
            service.reserve_tickets("missing", "vip", 1)

    @pytest.mark.parametrize("tier_id", ["balcony", " "])
    def test_reserve_unknown_tier(self, service, tier_id):
        """Reserving on a missing tier raises TierNotFoundError."""
        service.create_event(event_draft())
        with pytest.raises(TierNotFoundError):
            service.reserve_tickets("summer-jazz-2026", tier_id, 1)

    def test_concurrent_reservations_for_last_ticket(self):
        """Two buyers racing for the last ticket: one wins, one is told it's gone."""
        store = InMemoryEventStore(
            [make_event(ticket_tiers=(tier_draft(id="last", available=1),))]
        )
        service = EventService(store, clock=lambda: datetime.now(timezone.utc))
        barrier = threading.Barrier(2)
        outcomes = []

        def buy():
            barrier.wait()
            try:
                outcomes.append(service.reserve_tickets("summer-jazz-2026", "last", 1))
            except InsufficientInventoryError as exc:
                outcomes.append(exc)

        threads = [threading.Thread(target=buy) for _ in range(2)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        failures = [o for o in outcomes if isinstance(o, InsufficientInventoryError)]
        assert len(outcomes) == 2
        assert len(failures) == 1
        assert failures[0].available == 0
        tier = store.get_event(EventId("summer-jazz-2026")).tier(TierId("last"))
        assert tier.available == Capacity(0)

    def test_many_concurrent_reservations_never_oversell(self):
        """Parallel buyers never take more tickets than exist."""
        store = InMemoryEventStore(
            [make_event(ticket_tiers=(tier_draft(id="batch", available=5, price=Decimal("10")),))]
        )
        service = EventService(store, clock=lambda: FIXED_NOW)
        successes = []

        def buy():
            try:
                successes.append(service.reserve_tickets("summer-jazz-2026", "batch", 2))
            except InsufficientInventoryError:
                pass

        threads = [threading.Thread(target=buy) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(successes) == 2
        tier = store.get_event(EventId("summer-jazz-2026")).tier(TierId("batch"))
        assert tier.available == Capacity(1)
