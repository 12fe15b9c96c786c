"""Validation gate for event drafts.

Every rule runs on every draft; violations are collected, never
short-circuited, so a caller sees all of them in one response.
Field paths use the wire names clients submit.
"""

from collections import Counter
from decimal import Decimal

from marketplace.domain.drafts import EventDraft, TierDraft
from marketplace.domain.errors import FieldError
from marketplace.domain.value_objects import EventType

_EVENT_TYPES = ", ".join(t.value for t in EventType)

# Column sizes of the persisted event and tier records.
ID_MAX_LENGTH = 100
NAME_MAX_LENGTH = 255
PLACE_MAX_LENGTH = 100
URL_MAX_LENGTH = 500
TIER_NAME_MAX_LENGTH = 100

# Ids are addressed as URL path segments.
UNROUTABLE_ID_CHARS = frozenset("/?#")
_UNROUTABLE_MESSAGE = "cannot contain '/', '?' or '#'."


def _blank(value: str | None) -> bool:
    return value is None or not str(value).strip()


def _required_text(draft: EventDraft) -> list[tuple[str, str, str]]:
    location = draft.location
    organizer = draft.organizer
    return [
        ("id", draft.id, "Event ID is required."),
        ("name", draft.name, "Event Name is required."),
        ("type", draft.type, "Event Type is required."),
        ("image", draft.image, "Event Image is required."),
        ("headerImage", draft.header_image, "Event Header Image is required."),
        ("location.venue", location.venue, "Venue is required."),
        ("location.address", location.address, "Address is required."),
        ("location.city", location.city, "City is required."),
        ("location.country", location.country, "Country is required."),
        ("organizer.name", organizer.name, "Organizer Name is required."),
        ("organizer.logo", organizer.logo, "Organizer Logo is required."),
    ]


def _unroutable(value: str) -> bool:
    return any(c in UNROUTABLE_ID_CHARS for c in value)


def _text_limits(draft: EventDraft) -> list[tuple[str, str, str, int]]:
    location = draft.location
    organizer = draft.organizer
    return [
        ("id", draft.id.strip(), "Event ID", ID_MAX_LENGTH),
        ("name", draft.name, "Event Name", NAME_MAX_LENGTH),
        ("image", draft.image, "Event Image", URL_MAX_LENGTH),
        ("headerImage", draft.header_image, "Event Header Image", URL_MAX_LENGTH),
        ("location.venue", location.venue, "Venue", NAME_MAX_LENGTH),
        ("location.address", location.address, "Address", NAME_MAX_LENGTH),
        ("location.city", location.city, "City", PLACE_MAX_LENGTH),
        ("location.country", location.country, "Country", PLACE_MAX_LENGTH),
        ("organizer.name", organizer.name, "Organizer Name", NAME_MAX_LENGTH),
        ("organizer.logo", organizer.logo, "Organizer Logo", URL_MAX_LENGTH),
    ]


def _too_long(path: str, value: str, label: str, limit: int) -> FieldError | None:
    if len(value) > limit:
        return FieldError(path, f"{label} must be at most {limit} characters.")
    return None


def _validate_schedule(draft: EventDraft) -> list[FieldError]:
    errors = []
    if draft.starts_at is None:
        errors.append(FieldError("dateTime", "Start Time is required."))
    if draft.ends_at is None:
        errors.append(FieldError("endDateTime", "End Time is required."))
    if draft.starts_at is not None and draft.ends_at is not None:
        if draft.ends_at <= draft.starts_at:
            errors.append(FieldError("endDateTime", "End Time must be after Start Time."))
    return errors


def _validate_coordinates(draft: EventDraft) -> list[FieldError]:
    lat, lng = draft.location.lat, draft.location.lng
    errors = []
    if lat is None:
        errors.append(FieldError("location.coordinates.lat", "Latitude is required."))
    elif not -90 <= lat <= 90:
        errors.append(
            FieldError("location.coordinates.lat", "Latitude must be between -90 and 90.")
        )
    if lng is None:
        errors.append(FieldError("location.coordinates.lng", "Longitude is required."))
    elif not -180 <= lng <= 180:
        errors.append(
            FieldError(
                "location.coordinates.lng", "Longitude must be between -180 and 180."
            )
        )
    return errors


def _validate_tier(index: int, tier: TierDraft) -> list[FieldError]:
    prefix = f"ticketTiers[{index}]"
    position = index + 1
    errors = []
    tier_id = tier.id.strip()
    if _unroutable(tier_id):
        errors.append(
            FieldError(
                f"{prefix}.id",
                f"Ticket tier ID for Ticket Tier {position} {_UNROUTABLE_MESSAGE}",
            )
        )
    limits = [
        (f"{prefix}.id", tier_id, f"Ticket tier ID for Ticket Tier {position}", ID_MAX_LENGTH),
        (f"{prefix}.name", tier.name, f"Ticket Name for Ticket Tier {position}", TIER_NAME_MAX_LENGTH),
    ]
    errors.extend(e for e in (_too_long(*limit) for limit in limits) if e is not None)
    if _blank(tier.name):
        errors.append(
            FieldError(f"{prefix}.name", f"Ticket Name for Ticket Tier {position} is required.")
        )
    if _blank(tier.description):
        errors.append(
            FieldError(
                f"{prefix}.description",
                f"Description for Ticket Tier {position} is required.",
            )
        )
    if tier.price is None or Decimal(tier.price) <= 0:
        errors.append(
            FieldError(
                f"{prefix}.price",
                f"Price for Ticket Tier {position} must be greater than zero.",
            )
        )
    # Stock carried over from a stored tier may have sold down to zero;
    # stock being set by this draft must be positive.
    minimum = 0 if tier.capacity is not None else 1
    if tier.available is None or tier.available < minimum:
        errors.append(
            FieldError(
                f"{prefix}.available",
                f"Available quantity for Ticket Tier {position} must be greater than zero.",
            )
        )
    elif tier.capacity is not None and tier.available > tier.capacity:
        errors.append(
            FieldError(
                f"{prefix}.available",
                f"Available quantity for Ticket Tier {position} cannot exceed "
                f"its capacity of {tier.capacity}.",
            )
        )
    return errors


def _validate_tier_ids(tiers: tuple[TierDraft, ...]) -> list[FieldError]:
    counts = Counter(t.id.strip() for t in tiers if not _blank(t.id))
    return [
        FieldError(f"ticketTiers[{index}].id", f"Ticket tier ID '{tier.id}' is used more than once.")
        for index, tier in enumerate(tiers)
        if not _blank(tier.id) and counts[tier.id.strip()] > 1
    ]


def validate_draft(draft: EventDraft) -> list[FieldError]:
    """Return every field violation in ``draft``; an empty list means valid."""
    errors = [
        FieldError(path, message)
        for path, value, message in _required_text(draft)
        if _blank(value)
    ]
    if _unroutable(draft.id.strip()):
        errors.append(FieldError("id", f"Event ID {_UNROUTABLE_MESSAGE}"))
    errors.extend(
        e for e in (_too_long(*limit) for limit in _text_limits(draft)) if e is not None
    )
    if not _blank(draft.type):
        try:
            EventType.parse(draft.type)
        except ValueError:
            errors.append(FieldError("type", f"Event Type must be one of: {_EVENT_TYPES}."))
    errors.extend(_validate_schedule(draft))
    errors.extend(_validate_coordinates(draft))
    if draft.starting_price is None:
        errors.append(FieldError("startingPrice", "Starting Price is required."))
    elif Decimal(draft.starting_price) <= 0:
        errors.append(FieldError("startingPrice", "Starting Price must be greater than zero."))
    if not draft.ticket_tiers:
        errors.append(FieldError("ticketTiers", "At least one ticket tier is required."))
    for index, tier in enumerate(draft.ticket_tiers):
        errors.extend(_validate_tier(index, tier))
    errors.extend(_validate_tier_ids(draft.ticket_tiers))
    return errors
