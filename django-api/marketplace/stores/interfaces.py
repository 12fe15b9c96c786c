"""Store interfaces (repository pattern).

Stores must be swappable and return domain models.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from uuid import UUID

from marketplace.domain import Event, EventId, Reservation, TierId


class EventStore(ABC):
    """Interface for event persistence operations."""

    @abstractmethod
    def list_events(self) -> list[Event]:
        """Return all events ordered by created_at descending."""
        ...

    @abstractmethod
    def get_event(self, event_id: EventId) -> Event | None:
        """Return an event by ID, or None if not found."""
        ...

    @abstractmethod
    def event_exists(self, event_id: EventId) -> bool:
        """Check if an event exists."""
        ...

    @abstractmethod
    def add_event(self, event: Event) -> bool:
        """Persist a new event with its tiers.

        Returns False, storing nothing, if the event ID is already taken.
        """
        ...

    @abstractmethod
    def replace_event(
        self, event: Event, *, keep_stock: frozenset[TierId] = frozenset()
    ) -> bool:
        """Overwrite a stored event and its tiers.

        Tiers named in ``keep_stock`` keep their stored available and
        capacity, so reservations made since the event was read survive.

        Returns False if no event with that ID exists.
        """
        ...

    @abstractmethod
    def delete_event(self, event_id: EventId) -> Event | None:
        """Remove an event and return it, or None if not found."""
        ...

    @abstractmethod
    def reserve(
        self,
        event_id: EventId,
        tier_id: TierId,
        quantity: int,
        *,
        reservation_id: UUID,
        reserved_at: datetime,
    ) -> Reservation | None:
        """Atomically take ``quantity`` tickets from a tier.

        Implementations must decrement only if the tier has at least
        ``quantity`` tickets left, as a single conditional operation. Returns
        None when the condition fails or the event/tier does not exist.
        """
        ...
