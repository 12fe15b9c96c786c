"""Event service - all business logic lives here.

Services:
- Depend only on interfaces (stores)
- Validate domain invariants
- Perform orchestration and error mapping
- Return domain models or domain errors
"""

from dataclasses import replace
from datetime import datetime, timezone
from typing import Callable, Iterable
from uuid import uuid4

from loguru import logger

from marketplace.domain import Event, EventId, EventType, Reservation, TierId
from marketplace.domain.drafts import (
    DraftCommand,
    EventDraft,
    apply_commands,
    build_event,
)
from marketplace.domain.errors import (
    DuplicateEventError,
    EventNotFoundError,
    FieldError,
    InsufficientInventoryError,
    InvalidEventIdError,
    InvalidQuantityError,
    TierNotFoundError,
    ValidationError,
)
from marketplace.domain.validation import validate_draft
from marketplace.services.showcase import (
    ALL_TAB,
    by_start_date,
    featured_events,
    filter_by_tab,
)
from marketplace.stores.interfaces import EventStore


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _parse_event_id(event_id: str) -> EventId:
    try:
        return EventId.from_string(event_id)
    except ValueError:
        raise InvalidEventIdError() from None


def _carry_stock(draft: EventDraft, existing: Event) -> EventDraft:
    """Keep stored capacity for tiers resubmitted with unchanged stock.

    A client echoing back a tier it read keeps that tier's capacity, so a
    sold-down tier can be resubmitted without resetting its stock.
    """
    tiers = []
    for tier in draft.ticket_tiers:
        stored = existing.tier(TierId.from_string(tier.id)) if tier.id.strip() else None
        if (
            tier.capacity is None
            and stored is not None
            and tier.available == stored.available.value
        ):
            tier = replace(tier, capacity=stored.capacity.value)
        tiers.append(tier)
    return replace(draft, ticket_tiers=tuple(tiers))


class EventService:
    """Service for event catalog operations."""

    def __init__(
        self, store: EventStore, clock: Callable[[], datetime] = _utcnow
    ) -> None:
        self._store = store
        self._clock = clock

    def list_events(
        self, event_type: str | None = None, *, featured_only: bool = False
    ) -> list[Event]:
        """Return events, latest start first.

        ``event_type`` narrows to one type; "All" or None keeps every type.

        Raises:
            ValidationError: If event_type is not a known type.
        """
        events = self._store.list_events()
        if featured_only:
            events = featured_events(events)
        if event_type is None or event_type.strip().lower() == ALL_TAB.lower():
            return by_start_date(events)
        try:
            wanted = EventType.parse(event_type)
        except ValueError:
            raise ValidationError(
                [FieldError("type", f"Unknown event type '{event_type}'.")]
            ) from None
        return filter_by_tab(events, wanted.value)

    def get_event(self, event_id: str) -> Event:
        """Return an event by ID.

        Raises:
            InvalidEventIdError: If the event_id is blank.
            EventNotFoundError: If the event does not exist.
        """
        event = self._store.get_event(_parse_event_id(event_id))
        if event is None:
            raise EventNotFoundError(event_id)
        return event

    def create_event(self, draft: EventDraft) -> Event:
        """Validate and persist a new event.

        Raises:
            ValidationError: With every field violation in the draft.
            DuplicateEventError: If the event ID is already taken.
        """
        errors = validate_draft(draft)
        if errors:
            logger.warning(f"Rejected event draft '{draft.id}' with {len(errors)} errors")
            raise ValidationError(errors)
        now = self._clock()
        event = build_event(draft, created_at=now, updated_at=now)
        if not self._store.add_event(event):
            raise DuplicateEventError(event.id.value)
        logger.info(
            f"Created event '{event.id}' with {len(event.ticket_tiers)} ticket tiers"
        )
        return event

    def update_event(self, event_id: str, commands: Iterable[DraftCommand]) -> Event:
        """Apply draft commands to a stored event and persist the result.

        The whole updated draft goes through the same validation as create.
        Tiers whose stock the commands left alone keep the stored stock, so
        reservations made while the update runs are not undone.

        Raises:
            InvalidEventIdError: If the event_id is blank.
            EventNotFoundError: If the event does not exist.
            ValidationError: With every field violation in the updated draft.
        """
        existing = self.get_event(event_id)
        draft = apply_commands(EventDraft.from_event(existing), commands)
        draft = _carry_stock(draft, existing)
        errors = validate_draft(draft)
        if draft.id.strip() and draft.id.strip() != existing.id.value:
            errors.insert(0, FieldError("id", "Event ID cannot be changed."))
        if errors:
            logger.warning(f"Rejected update of event '{existing.id}' with {len(errors)} errors")
            raise ValidationError(errors)
        event = build_event(
            draft, created_at=existing.created_at, updated_at=self._clock()
        )
        # Stock carried over from the read is left to the store's current value.
        keep_stock = frozenset(
            TierId.from_string(t.id)
            for t in draft.ticket_tiers
            if t.capacity is not None and t.id.strip()
        )
        if not self._store.replace_event(event, keep_stock=keep_stock):
            raise EventNotFoundError(event_id)
        stored = self._store.get_event(event.id)
        if stored is None:
            raise EventNotFoundError(event_id)
        logger.info(f"Updated event '{event.id}'")
        return stored

    def delete_event(self, event_id: str) -> Event:
        """Delete an event and return it.

        Raises:
            InvalidEventIdError: If the event_id is blank.
            EventNotFoundError: If the event does not exist.
        """
        event = self._store.delete_event(_parse_event_id(event_id))
        if event is None:
            raise EventNotFoundError(event_id)
        logger.info(f"Deleted event '{event.id}'")
        return event

    def reserve_tickets(self, event_id: str, tier_id: str, quantity: int) -> Reservation:
        """Take tickets out of a tier's stock in one atomic store operation.

        Raises:
            InvalidEventIdError: If the event_id is blank.
            InvalidQuantityError: If quantity is below 1.
            EventNotFoundError: If the event does not exist.
            TierNotFoundError: If the tier is not part of the event.
            InsufficientInventoryError: If fewer than quantity tickets remain.
        """
        eid = _parse_event_id(event_id)
        try:
            tid = TierId.from_string(tier_id)
        except ValueError:
            raise TierNotFoundError(tier_id) from None
        if quantity < 1:
            raise InvalidQuantityError(quantity)

        reservation = self._store.reserve(
            eid, tid, quantity, reservation_id=uuid4(), reserved_at=self._clock()
        )
        if reservation is not None:
            logger.info(
                f"Reserved {quantity} x '{tid}' for event '{eid}', {reservation.remaining} left"
            )
            return reservation

        event = self._store.get_event(eid)
        if event is None:
            raise EventNotFoundError(event_id)
        tier = event.tier(tid)
        if tier is None:
            raise TierNotFoundError(tier_id)
        logger.warning(
            f"Rejected reservation of {quantity} x '{tid}' for event '{eid}', "
            f"{tier.available.value} available"
        )
        raise InsufficientInventoryError(requested=quantity, available=tier.available.value)
