"""Buyer-side ticket selection and checkout.

The selector works on a snapshot of one event. Its quantity checks run
against that snapshot and are advisory; the catalog's reservation is the
authoritative check, and a rejected reservation refreshes the snapshot.
"""

from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Protocol

from loguru import logger

from marketplace.domain import Capacity, Event, Money, Reservation, TicketTier, TierId
from marketplace.domain.errors import (
    InsufficientInventoryError,
    InvalidQuantityError,
    TierNotFoundError,
    TierNotSelectedError,
)


class CatalogClient(Protocol):
    """What the selector needs from the event catalog."""

    def get_event(self, event_id: str) -> Event: ...

    def reserve_tickets(self, event_id: str, tier_id: str, quantity: int) -> Reservation: ...


@dataclass(frozen=True)
class CheckoutOutcome:
    """Result of a checkout attempt, ready to show to the buyer."""

    confirmed: bool
    tier_id: str
    quantity: int
    available: int
    message: str
    reservation: Reservation | None = None


class TicketSelector:
    """Picks a tier and quantity for one event and requests the reservation."""

    def __init__(self, event: Event, catalog: CatalogClient) -> None:
        self._event = event
        self._catalog = catalog
        self._tier_id: TierId | None = None
        self._quantity = 0

    @property
    def event(self) -> Event:
        return self._event

    @property
    def quantity(self) -> int:
        return self._quantity

    @property
    def selected_tier(self) -> TicketTier | None:
        if self._tier_id is None:
            return None
        return self._event.tier(self._tier_id)

    @property
    def subtotal(self) -> Money:
        tier = self.selected_tier
        if tier is None:
            return Money(amount=Decimal(0))
        return tier.price * self._quantity

    def _require_tier(self) -> TicketTier:
        tier = self.selected_tier
        if tier is None:
            raise TierNotSelectedError()
        return tier

    def select_tier(self, tier_id: str) -> TicketTier:
        """Select a tier and reset the quantity to one ticket, or zero if sold out.

        Raises:
            TierNotFoundError: If the tier is not part of the event.
        """
        try:
            tier = self._event.tier(TierId.from_string(tier_id))
        except ValueError:
            tier = None
        if tier is None:
            raise TierNotFoundError(tier_id)
        self._tier_id = tier.id
        self._quantity = min(1, tier.available.value)
        return tier

    def set_quantity(self, quantity: int) -> None:
        """Set how many tickets to buy.

        Raises:
            TierNotSelectedError: If no tier is selected.
            InvalidQuantityError: If quantity is below 1 or above known stock.
        """
        tier = self._require_tier()
        if quantity < 1 or quantity > tier.available.value:
            raise InvalidQuantityError(quantity, available=tier.available.value)
        self._quantity = quantity

    def refresh(self) -> Event:
        """Replace the snapshot with the catalog's current event."""
        self._event = self._catalog.get_event(self._event.id.value)
        return self._event

    def checkout(self) -> CheckoutOutcome:
        """Request a reservation for the selected tier and quantity.

        A rejection for lack of stock refreshes the snapshot and returns an
        unconfirmed outcome carrying the current count; other errors propagate.

        Raises:
            TierNotSelectedError: If no tier is selected.
            InvalidQuantityError: If the quantity is below 1.
        """
        tier = self._require_tier()
        quantity = self._quantity
        if quantity < 1:
            raise InvalidQuantityError(quantity, available=tier.available.value)

        try:
            reservation = self._catalog.reserve_tickets(
                self._event.id.value, tier.id.value, quantity
            )
        except InsufficientInventoryError as exc:
            logger.info(
                f"Checkout of {quantity} x '{tier.id}' rejected, {exc.available} left"
            )
            return self._sold_down(tier, quantity)

        remaining = reservation.remaining
        reserved = replace(
            tier,
            available=Capacity(remaining),
            capacity=Capacity(max(tier.capacity.value, remaining)),
        )
        self._event = self._event.with_tier(reserved)
        self._quantity = min(1, remaining)
        return CheckoutOutcome(
            confirmed=True,
            tier_id=tier.id.value,
            quantity=quantity,
            available=reservation.remaining,
            message=f"Reserved {quantity} x {tier.name}.",
            reservation=reservation,
        )

    def _sold_down(self, tier: TicketTier, requested: int) -> CheckoutOutcome:
        self.refresh()
        current = self._event.tier(tier.id)
        available = current.available.value if current is not None else 0
        self._quantity = min(self._quantity, available)
        if available == 0:
            message = f"{tier.name} is sold out."
        else:
            message = f"Only {available} {tier.name} tickets left."
        return CheckoutOutcome(
            confirmed=False,
            tier_id=tier.id.value,
            quantity=requested,
            available=available,
            message=message,
        )
