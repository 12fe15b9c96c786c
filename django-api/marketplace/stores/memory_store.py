"""In-process implementation of the EventStore.

Holds immutable domain events in a dict guarded by one lock, so each
operation, including the reservation read-modify-write, is atomic with
respect to other threads.
"""

import threading
from dataclasses import replace
from datetime import datetime
from uuid import UUID

from marketplace.domain import Event, EventId, Reservation, TierId
from marketplace.domain.errors import InsufficientInventoryError, TierNotFoundError
from marketplace.stores.interfaces import EventStore


class InMemoryEventStore(EventStore):
    """Thread-safe event store for tests and embedding."""

    def __init__(self, events: list[Event] | None = None) -> None:
        self._lock = threading.Lock()
        self._events: dict[EventId, Event] = {e.id: e for e in events or ()}

    def list_events(self) -> list[Event]:
        with self._lock:
            events = list(self._events.values())
        return sorted(events, key=lambda e: e.created_at, reverse=True)

    def get_event(self, event_id: EventId) -> Event | None:
        with self._lock:
            return self._events.get(event_id)

    def event_exists(self, event_id: EventId) -> bool:
        with self._lock:
            return event_id in self._events

    def add_event(self, event: Event) -> bool:
        with self._lock:
            if event.id in self._events:
                return False
            self._events[event.id] = event
            return True

    def replace_event(
        self, event: Event, *, keep_stock: frozenset[TierId] = frozenset()
    ) -> bool:
        with self._lock:
            stored = self._events.get(event.id)
            if stored is None:
                return False
            for tier_id in keep_stock:
                current = stored.tier(tier_id)
                tier = event.tier(tier_id)
                if current is not None and tier is not None:
                    event = event.with_tier(
                        replace(tier, available=current.available, capacity=current.capacity)
                    )
            self._events[event.id] = event
            return True

    def delete_event(self, event_id: EventId) -> Event | None:
        with self._lock:
            return self._events.pop(event_id, None)

    def reserve(
        self,
        event_id: EventId,
        tier_id: TierId,
        quantity: int,
        *,
        reservation_id: UUID,
        reserved_at: datetime,
    ) -> Reservation | None:
        with self._lock:
            event = self._events.get(event_id)
            if event is None:
                return None
            try:
                updated, reservation = event.reserve(
                    tier_id,
                    quantity,
                    reservation_id=reservation_id,
                    reserved_at=reserved_at,
                )
            except (TierNotFoundError, InsufficientInventoryError):
                return None
            self._events[event_id] = updated
            return reservation
