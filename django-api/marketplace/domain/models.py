"""Domain models representing persisted state.

These are pure domain objects with no API input rules.
Django ORM models are in marketplace/models.py (persistence layer).
"""

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Self
from uuid import UUID

from marketplace.domain.errors import (
    InsufficientInventoryError,
    InvalidQuantityError,
    TierNotFoundError,
)
from marketplace.domain.value_objects import (
    Capacity,
    Coordinates,
    EventId,
    EventType,
    Money,
    TierId,
)


@dataclass(frozen=True)
class Location:
    """Where an event takes place."""

    venue: str
    address: str
    city: str
    country: str
    coordinates: Coordinates


@dataclass(frozen=True)
class Organizer:
    """Who runs an event."""

    name: str
    logo: str
    description: str


@dataclass(frozen=True)
class TicketTier:
    """A purchasable ticket class with its own price and stock.

    ``capacity`` is the stock set when the tier was created or last updated;
    ``available`` only moves down from it through reservations.
    """

    id: TierId
    name: str
    price: Money
    description: str
    available: Capacity
    capacity: Capacity

    def __post_init__(self) -> None:
        if self.available.value > self.capacity.value:
            raise ValueError("Available tickets cannot exceed tier capacity")

    @property
    def sold_out(self) -> bool:
        return self.available.value == 0

    def reserve(self, quantity: int) -> Self:
        """Return this tier with ``quantity`` tickets taken out of stock.

        All-or-nothing: either the full quantity is taken or nothing is.

        Raises:
            InvalidQuantityError: If quantity is below 1.
            InsufficientInventoryError: If quantity exceeds available stock.
        """
        if quantity < 1:
            raise InvalidQuantityError(quantity)
        if quantity > self.available.value:
            raise InsufficientInventoryError(
                requested=quantity, available=self.available.value
            )
        return replace(self, available=Capacity(self.available.value - quantity))


@dataclass(frozen=True)
class Reservation:
    """Confirmation of a successful stock decrement."""

    id: UUID
    event_id: EventId
    tier_id: TierId
    quantity: int
    remaining: int
    created_at: datetime


@dataclass(frozen=True)
class Event:
    """Domain representation of an Event."""

    id: EventId
    name: str
    type: EventType
    featured: bool
    image: str
    header_image: str
    starts_at: datetime
    ends_at: datetime
    location: Location
    organizer: Organizer
    starting_price: Money
    ticket_tiers: tuple[TicketTier, ...]
    created_at: datetime
    updated_at: datetime

    def __post_init__(self) -> None:
        if self.ends_at <= self.starts_at:
            raise ValueError("Event must end after it starts")

    def tier(self, tier_id: TierId) -> TicketTier | None:
        for tier in self.ticket_tiers:
            if tier.id == tier_id:
                return tier
        return None

    def with_tier(self, tier: TicketTier) -> Self:
        """Return this event with the tier of the same id swapped in."""
        tiers = tuple(tier if t.id == tier.id else t for t in self.ticket_tiers)
        return replace(self, ticket_tiers=tiers)

    def reserve(
        self,
        tier_id: TierId,
        quantity: int,
        *,
        reservation_id: UUID,
        reserved_at: datetime,
    ) -> tuple[Self, Reservation]:
        """Take tickets out of one tier and return the updated event and receipt.

        Raises:
            TierNotFoundError: If the tier is not part of this event.
            InvalidQuantityError: If quantity is below 1.
            InsufficientInventoryError: If quantity exceeds available stock.
        """
        tier = self.tier(tier_id)
        if tier is None:
            raise TierNotFoundError(tier_id.value)
        reserved = tier.reserve(quantity)
        reservation = Reservation(
            id=reservation_id,
            event_id=self.id,
            tier_id=tier_id,
            quantity=quantity,
            remaining=reserved.available.value,
            created_at=reserved_at,
        )
        return self.with_tier(reserved), reservation
