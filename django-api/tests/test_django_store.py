"""Tests for the Django ORM event store.

Run with: pytest tests/test_django_store.py -v
"""

from datetime import timedelta
from uuid import uuid4

import pytest
from django.db import DataError, OperationalError

from marketplace import models as orm
from marketplace.domain import Capacity, EventId, TierId
from marketplace.domain.drafts import ReplaceTiers, SetEventField, SetTierField
from marketplace.domain.errors import InsufficientInventoryError, StoreUnavailableError
from marketplace.services.event_service import EventService
from marketplace.stores.django_store import DjangoEventStore

from factories import FIXED_NOW, make_event, tier_draft

EVENT_ID = EventId("summer-jazz-2026")


class ReservingDjangoStore(DjangoEventStore):
    """Takes one general ticket just before each replace lands."""

    def replace_event(self, event, *, keep_stock=frozenset()):
        self.reserve(
            event.id, TierId("general"), 1, reservation_id=uuid4(), reserved_at=FIXED_NOW
        )
        return super().replace_event(event, keep_stock=keep_stock)


@pytest.fixture
def store() -> DjangoEventStore:
    return DjangoEventStore()


@pytest.mark.django_db
class TestDjangoEventStore:
    """Tests for persistence round trips."""

    def test_add_then_get_round_trips(self, store):
        """A stored event reads back equal to what was written."""
        event = make_event()
        assert store.add_event(event)
        assert store.get_event(EVENT_ID) == event
        assert store.event_exists(EVENT_ID)

    def test_tier_order_is_kept(self, store):
        """Tiers come back in submitted order."""
        store.add_event(make_event(ticket_tiers=(tier_draft(id="z"), tier_draft(id="a"))))
        event = store.get_event(EVENT_ID)
        assert [t.id.value for t in event.ticket_tiers] == ["z", "a"]

    def test_add_duplicate_returns_false(self, store):
        """A taken id is reported, not overwritten."""
        store.add_event(make_event())
        assert not store.add_event(make_event(name="Other"))
        assert store.get_event(EVENT_ID).name == "Summer Jazz Night"

    def test_get_missing_returns_none(self, store):
        """Missing events read as None."""
        assert store.get_event(EventId("missing")) is None
        assert not store.event_exists(EventId("missing"))

    def test_list_newest_first(self, store):
        """Events list by creation time, newest first."""
        store.add_event(make_event(id="old"))
        store.add_event(make_event(id="new", created_at=FIXED_NOW + timedelta(days=1)))
        assert [e.id.value for e in store.list_events()] == ["new", "old"]

    def test_replace_updates_tiers_in_place(self, store):
        """Kept tiers keep their rows; dropped tiers are deleted; new ones added."""
        store.add_event(make_event())
        vip_pk = orm.TicketTier.objects.get(event_id=EVENT_ID.value, tier_id="vip").pk
        event = make_event(
            name="Renamed",
            ticket_tiers=(tier_draft(id="vip", available=5), tier_draft(id="student")),
        )
        assert store.replace_event(event)
        assert store.get_event(EVENT_ID) == event
        assert orm.TicketTier.objects.get(event_id=EVENT_ID.value, tier_id="vip").pk == vip_pk
        assert not orm.TicketTier.objects.filter(tier_id="general").exists()

    def test_replace_missing_returns_false(self, store):
        """Replacing an unknown event changes nothing."""
        assert not store.replace_event(make_event())
        assert not orm.Event.objects.exists()

    def test_delete_returns_event_and_cascades(self, store):
        """Deleting returns the event and removes its tiers."""
        event = make_event()
        store.add_event(event)
        assert store.delete_event(EVENT_ID) == event
        assert not orm.TicketTier.objects.exists()
        assert store.delete_event(EVENT_ID) is None


@pytest.mark.django_db
class TestDjangoReserve:
    """Tests for the conditional stock decrement."""

    def test_reserve_decrements_and_records(self, store):
        """A reservation lowers stock and writes a reservation row."""
        store.add_event(make_event())
        reservation_id = uuid4()
        reservation = store.reserve(
            EVENT_ID, TierId("vip"), 3, reservation_id=reservation_id, reserved_at=FIXED_NOW
        )
        assert reservation.id == reservation_id
        assert reservation.remaining == 7
        assert store.get_event(EVENT_ID).tier(TierId("vip")).available == Capacity(7)
        record = orm.Reservation.objects.get(pk=reservation_id)
        assert (record.quantity, record.remaining) == (3, 7)

    def test_reserve_too_many_changes_nothing(self, store):
        """A failed condition leaves stock and history untouched."""
        store.add_event(make_event())
        result = store.reserve(
            EVENT_ID, TierId("vip"), 11, reservation_id=uuid4(), reserved_at=FIXED_NOW
        )
        assert result is None
        assert store.get_event(EVENT_ID).tier(TierId("vip")).available == Capacity(10)
        assert not orm.Reservation.objects.exists()

    def test_reserve_unknown_tier(self, store):
        """Unknown tiers fail the condition."""
        store.add_event(make_event())
        assert (
            store.reserve(EVENT_ID, TierId("balcony"), 1, reservation_id=uuid4(), reserved_at=FIXED_NOW)
            is None
        )

    def test_service_maps_shortage(self, store):
        """Through the service, a shortage reports current stock."""
        service = EventService(store, clock=lambda: FIXED_NOW)
        store.add_event(make_event())
        service.reserve_tickets(EVENT_ID.value, "vip", 9)
        with pytest.raises(InsufficientInventoryError) as exc_info:
            service.reserve_tickets(EVENT_ID.value, "vip", 2)
        assert (exc_info.value.requested, exc_info.value.available) == (2, 1)

    def test_update_keeps_sold_down_stock(self, store):
        """Updating other fields does not restock a sold-down tier."""
        service = EventService(store, clock=lambda: FIXED_NOW)
        store.add_event(make_event())
        service.reserve_tickets(EVENT_ID.value, "vip", 10)
        event = service.update_event(
            EVENT_ID.value, [SetTierField(index=0, field="name", value="Floor")]
        )
        vip = event.tier(TierId("vip"))
        assert vip.available == Capacity(0)
        assert vip.capacity == Capacity(10)
        assert store.get_event(EVENT_ID) == event

    def test_update_keeps_reservations_made_meanwhile(self):
        """A reservation committed between read and write keeps its decrement."""
        store = ReservingDjangoStore()
        service = EventService(store, clock=lambda: FIXED_NOW)
        store.add_event(make_event())
        event = service.update_event(
            EVENT_ID.value, [SetEventField(field="name", value="Renamed")]
        )
        assert event.tier(TierId("general")).available == Capacity(99)
        assert store.get_event(EVENT_ID) == event
        assert orm.Reservation.objects.count() == 1

    def test_update_can_drop_a_tier(self, store):
        """Replacing tiers drops the ones left out."""
        service = EventService(store, clock=lambda: FIXED_NOW)
        store.add_event(make_event())
        service.update_event(EVENT_ID.value, [ReplaceTiers(tiers=(tier_draft(),))])
        assert [t.id.value for t in store.get_event(EVENT_ID).ticket_tiers] == ["general"]


@pytest.mark.django_db
class TestStoreErrors:
    """Tests for connectivity failures."""

    def test_operational_error_becomes_store_unavailable(self, store, monkeypatch):
        """Database outages surface as StoreUnavailableError."""
        def fail(*args, **kwargs):
            raise OperationalError("database is locked")

        monkeypatch.setattr(orm.Event.objects, "filter", fail)
        with pytest.raises(StoreUnavailableError):
            store.event_exists(EVENT_ID)

    def test_data_error_becomes_store_unavailable(self, store, monkeypatch):
        """Values the database refuses do not escape as raw errors."""
        def fail(*args, **kwargs):
            raise DataError("value too long for type character varying(100)")

        monkeypatch.setattr(orm.Event.objects, "prefetch_related", fail)
        with pytest.raises(StoreUnavailableError):
            store.get_event(EVENT_ID)
