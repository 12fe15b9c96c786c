"""Immutable event drafts and the commands that edit them.

A draft is an Event under edit: every field may still be blank or invalid.
Drafts are never mutated; ``apply_command`` returns a new draft with one
section changed, so nested location/organizer/tier values are shared safely
between versions.
"""

from dataclasses import dataclass, field, fields, replace
from datetime import datetime
from decimal import Decimal
from functools import reduce
from typing import Any, Iterable, Union
from uuid import uuid4

from marketplace.domain.models import Event, Location, Organizer, TicketTier
from marketplace.domain.value_objects import (
    Capacity,
    Coordinates,
    EventId,
    EventType,
    Money,
    TierId,
)


@dataclass(frozen=True)
class LocationDraft:
    venue: str = ""
    address: str = ""
    city: str = ""
    country: str = ""
    lat: float | None = None
    lng: float | None = None


@dataclass(frozen=True)
class OrganizerDraft:
    name: str = ""
    logo: str = ""
    description: str = ""


@dataclass(frozen=True)
class TierDraft:
    """A ticket tier under edit.

    ``capacity`` is only set for tiers loaded from a stored event whose stock
    has not been touched; editing ``available`` clears it.
    """

    id: str = ""
    name: str = ""
    price: Decimal | None = None
    description: str = ""
    available: int | None = None
    capacity: int | None = None


@dataclass(frozen=True)
class EventDraft:
    id: str = ""
    name: str = ""
    type: str = ""
    featured: bool = False
    image: str = ""
    header_image: str = ""
    starts_at: datetime | None = None
    ends_at: datetime | None = None
    location: LocationDraft = field(default_factory=LocationDraft)
    starting_price: Decimal | None = None
    organizer: OrganizerDraft = field(default_factory=OrganizerDraft)
    ticket_tiers: tuple[TierDraft, ...] = ()

    @classmethod
    def from_event(cls, event: Event) -> "EventDraft":
        coordinates = event.location.coordinates
        return cls(
            id=event.id.value,
            name=event.name,
            type=event.type.value,
            featured=event.featured,
            image=event.image,
            header_image=event.header_image,
            starts_at=event.starts_at,
            ends_at=event.ends_at,
            location=LocationDraft(
                venue=event.location.venue,
                address=event.location.address,
                city=event.location.city,
                country=event.location.country,
                lat=coordinates.lat,
                lng=coordinates.lng,
            ),
            starting_price=event.starting_price.amount,
            organizer=OrganizerDraft(
                name=event.organizer.name,
                logo=event.organizer.logo,
                description=event.organizer.description,
            ),
            ticket_tiers=tuple(
                TierDraft(
                    id=tier.id.value,
                    name=tier.name,
                    price=tier.price.amount,
                    description=tier.description,
                    available=tier.available.value,
                    capacity=tier.capacity.value,
                )
                for tier in event.ticket_tiers
            ),
        )


# Update commands, one variant per logical section of the draft.


@dataclass(frozen=True)
class SetEventField:
    field: str
    value: Any


@dataclass(frozen=True)
class ToggleFeatured:
    pass


@dataclass(frozen=True)
class SetLocationField:
    field: str
    value: str | float | None


@dataclass(frozen=True)
class SetCoordinates:
    lat: float | None
    lng: float | None


@dataclass(frozen=True)
class SetOrganizerField:
    field: str
    value: str


@dataclass(frozen=True)
class AddTier:
    tier: TierDraft = field(default_factory=TierDraft)


@dataclass(frozen=True)
class RemoveTier:
    index: int


@dataclass(frozen=True)
class SetTierField:
    index: int
    field: str
    value: Any


@dataclass(frozen=True)
class ReplaceTiers:
    tiers: tuple[TierDraft, ...]


DraftCommand = Union[
    SetEventField,
    ToggleFeatured,
    SetLocationField,
    SetCoordinates,
    SetOrganizerField,
    AddTier,
    RemoveTier,
    SetTierField,
    ReplaceTiers,
]

EVENT_FIELDS = frozenset(
    {
        "id",
        "name",
        "type",
        "featured",
        "image",
        "header_image",
        "starts_at",
        "ends_at",
        "starting_price",
    }
)
LOCATION_FIELDS = frozenset({"venue", "address", "city", "country", "lat", "lng"})
ORGANIZER_FIELDS = frozenset(f.name for f in fields(OrganizerDraft))
TIER_FIELDS = frozenset({"id", "name", "price", "description", "available"})


def _require_field(name: str, allowed: frozenset[str], section: str) -> None:
    if name not in allowed:
        raise ValueError(f"Unknown {section} field: {name!r}")


def _tier_at(draft: EventDraft, index: int) -> TierDraft:
    if not 0 <= index < len(draft.ticket_tiers):
        raise IndexError(f"No ticket tier at position {index}")
    return draft.ticket_tiers[index]


def apply_command(draft: EventDraft, command: DraftCommand) -> EventDraft:
    """Return a new draft with ``command`` applied."""
    match command:
        case SetEventField(field=name, value=value):
            _require_field(name, EVENT_FIELDS, "event")
            return replace(draft, **{name: value})
        case ToggleFeatured():
            return replace(draft, featured=not draft.featured)
        case SetLocationField(field=name, value=value):
            _require_field(name, LOCATION_FIELDS, "location")
            return replace(draft, location=replace(draft.location, **{name: value}))
        case SetCoordinates(lat=lat, lng=lng):
            return replace(draft, location=replace(draft.location, lat=lat, lng=lng))
        case SetOrganizerField(field=name, value=value):
            _require_field(name, ORGANIZER_FIELDS, "organizer")
            return replace(draft, organizer=replace(draft.organizer, **{name: value}))
        case AddTier(tier=tier):
            return replace(draft, ticket_tiers=draft.ticket_tiers + (tier,))
        case RemoveTier(index=index):
            _tier_at(draft, index)
            tiers = draft.ticket_tiers[:index] + draft.ticket_tiers[index + 1 :]
            return replace(draft, ticket_tiers=tiers)
        case SetTierField(index=index, field=name, value=value):
            _require_field(name, TIER_FIELDS, "ticket tier")
            changes = {name: value}
            if name == "available":
                changes["capacity"] = None
            tier = replace(_tier_at(draft, index), **changes)
            tiers = list(draft.ticket_tiers)
            tiers[index] = tier
            return replace(draft, ticket_tiers=tuple(tiers))
        case ReplaceTiers(tiers=tiers):
            return replace(draft, ticket_tiers=tuple(tiers))
    raise TypeError(f"Unsupported draft command: {command!r}")


def apply_commands(draft: EventDraft, commands: Iterable[DraftCommand]) -> EventDraft:
    return reduce(apply_command, commands, draft)


def build_event(
    draft: EventDraft, *, created_at: datetime, updated_at: datetime
) -> Event:
    """Turn a validated draft into an Event.

    Tiers without an id get a generated one. Tiers whose stock was set by
    this draft start with ``capacity == available``.
    """
    tiers = []
    for tier in draft.ticket_tiers:
        available = int(tier.available or 0)
        capacity = tier.capacity if tier.capacity is not None else available
        tiers.append(
            TicketTier(
                id=TierId.from_string(tier.id) if tier.id.strip() else TierId(uuid4().hex),
                name=tier.name,
                price=Money(Decimal(tier.price)),
                description=tier.description,
                available=Capacity(available),
                capacity=Capacity(capacity),
            )
        )
    location = draft.location
    return Event(
        id=EventId.from_string(draft.id),
        name=draft.name,
        type=EventType.parse(draft.type),
        featured=draft.featured,
        image=draft.image,
        header_image=draft.header_image,
        starts_at=draft.starts_at,
        ends_at=draft.ends_at,
        location=Location(
            venue=location.venue,
            address=location.address,
            city=location.city,
            country=location.country,
            coordinates=Coordinates(lat=location.lat, lng=location.lng),
        ),
        organizer=Organizer(
            name=draft.organizer.name,
            logo=draft.organizer.logo,
            description=draft.organizer.description,
        ),
        starting_price=Money(Decimal(draft.starting_price)),
        ticket_tiers=tuple(tiers),
        created_at=created_at,
        updated_at=updated_at,
    )
