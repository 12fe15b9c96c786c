"""Django ORM implementation of the EventStore."""

from contextlib import contextmanager
from datetime import datetime
from typing import Iterator
from uuid import UUID

from django.db import DatabaseError, IntegrityError, transaction
from django.db.models import F
from loguru import logger

from marketplace import models as orm
from marketplace.cache import invalidate_event
from marketplace.domain import (
    Capacity,
    Coordinates,
    Event,
    EventId,
    EventType,
    Location,
    Money,
    Organizer,
    Reservation,
    TicketTier,
    TierId,
)
from marketplace.domain.errors import StoreUnavailableError
from marketplace.stores.interfaces import EventStore


@contextmanager
def _store_errors() -> Iterator[None]:
    """Surface database failures as StoreUnavailableError."""
    try:
        yield
    except DatabaseError as exc:
        logger.error(f"Event store unavailable: {exc}")
        raise StoreUnavailableError() from exc


def _tier_to_domain(record: orm.TicketTier) -> TicketTier:
    return TicketTier(
        id=TierId(record.tier_id),
        name=record.name,
        price=Money(record.price),
        description=record.description,
        available=Capacity(record.available),
        capacity=Capacity(record.capacity),
    )


def _event_to_domain(record: orm.Event) -> Event:
    return Event(
        id=EventId(record.id),
        name=record.name,
        type=EventType(record.type),
        featured=record.featured,
        image=record.image,
        header_image=record.header_image,
        starts_at=record.starts_at,
        ends_at=record.ends_at,
        location=Location(
            venue=record.venue,
            address=record.address,
            city=record.city,
            country=record.country,
            coordinates=Coordinates(lat=record.latitude, lng=record.longitude),
        ),
        organizer=Organizer(
            name=record.organizer_name,
            logo=record.organizer_logo,
            description=record.organizer_description,
        ),
        starting_price=Money(record.starting_price),
        ticket_tiers=tuple(_tier_to_domain(t) for t in record.ticket_tiers.all()),
        created_at=record.created_at,
        updated_at=record.updated_at,
    )


def _event_columns(event: Event) -> dict:
    return {
        "name": event.name,
        "type": event.type.value,
        "featured": event.featured,
        "image": event.image,
        "header_image": event.header_image,
        "starts_at": event.starts_at,
        "ends_at": event.ends_at,
        "venue": event.location.venue,
        "address": event.location.address,
        "city": event.location.city,
        "country": event.location.country,
        "latitude": event.location.coordinates.lat,
        "longitude": event.location.coordinates.lng,
        "organizer_name": event.organizer.name,
        "organizer_logo": event.organizer.logo,
        "organizer_description": event.organizer.description,
        "starting_price": event.starting_price.amount,
        "created_at": event.created_at,
        "updated_at": event.updated_at,
    }


def _tier_columns(position: int, tier: TicketTier) -> dict:
    return {
        "position": position,
        "name": tier.name,
        "price": tier.price.amount,
        "description": tier.description,
        "available": tier.available.value,
        "capacity": tier.capacity.value,
    }


class DjangoEventStore(EventStore):
    """Relational event store using Django ORM."""

    def list_events(self) -> list[Event]:
        with _store_errors():
            records = orm.Event.objects.prefetch_related("ticket_tiers")
            return [_event_to_domain(r) for r in records]

    def get_event(self, event_id: EventId) -> Event | None:
        with _store_errors():
            record = (
                orm.Event.objects.prefetch_related("ticket_tiers")
                .filter(pk=event_id.value)
                .first()
            )
            return _event_to_domain(record) if record is not None else None

    def event_exists(self, event_id: EventId) -> bool:
        with _store_errors():
            return orm.Event.objects.filter(pk=event_id.value).exists()

    def add_event(self, event: Event) -> bool:
        with _store_errors():
            try:
                with transaction.atomic():
                    record = orm.Event.objects.create(
                        id=event.id.value, **_event_columns(event)
                    )
                    orm.TicketTier.objects.bulk_create(
                        orm.TicketTier(event=record, tier_id=t.id.value, **_tier_columns(i, t))
                        for i, t in enumerate(event.ticket_tiers)
                    )
            except IntegrityError:
                return False
        invalidate_event(event.id.value)
        return True

    def replace_event(
        self, event: Event, *, keep_stock: frozenset[TierId] = frozenset()
    ) -> bool:
        with _store_errors(), transaction.atomic():
            updated = orm.Event.objects.filter(pk=event.id.value).update(
                **_event_columns(event)
            )
            if not updated:
                return False
            existing = {
                t.tier_id: t
                for t in orm.TicketTier.objects.select_for_update().filter(
                    event_id=event.id.value
                )
            }
            for position, tier in enumerate(event.ticket_tiers):
                columns = _tier_columns(position, tier)
                record = existing.get(tier.id.value)
                if record is None:
                    orm.TicketTier.objects.create(
                        event_id=event.id.value, tier_id=tier.id.value, **columns
                    )
                else:
                    # Updated in place so reservation history stays attached.
                    if tier.id in keep_stock:
                        del columns["available"], columns["capacity"]
                    orm.TicketTier.objects.filter(pk=record.pk).update(**columns)
            orm.TicketTier.objects.filter(event_id=event.id.value).exclude(
                tier_id__in=[t.id.value for t in event.ticket_tiers]
            ).delete()
        invalidate_event(event.id.value)
        return True

    def delete_event(self, event_id: EventId) -> Event | None:
        with _store_errors(), transaction.atomic():
            record = (
                orm.Event.objects.prefetch_related("ticket_tiers")
                .filter(pk=event_id.value)
                .first()
            )
            if record is None:
                return None
            event = _event_to_domain(record)
            record.delete()
        invalidate_event(event_id.value)
        return event

    def reserve(
        self,
        event_id: EventId,
        tier_id: TierId,
        quantity: int,
        *,
        reservation_id: UUID,
        reserved_at: datetime,
    ) -> Reservation | None:
        with _store_errors(), transaction.atomic():
            tiers = orm.TicketTier.objects.filter(
                event_id=event_id.value, tier_id=tier_id.value
            )
            # Single conditional decrement; the row count tells whether stock sufficed.
            updated = tiers.filter(available__gte=quantity).update(
                available=F("available") - quantity
            )
            if not updated:
                return None
            tier = tiers.get()
            record = orm.Reservation.objects.create(
                id=reservation_id,
                tier=tier,
                quantity=quantity,
                remaining=tier.available,
                created_at=reserved_at,
            )
        invalidate_event(event_id.value)
        return Reservation(
            id=record.id,
            event_id=event_id,
            tier_id=tier_id,
            quantity=record.quantity,
            remaining=record.remaining,
            created_at=record.created_at,
        )
