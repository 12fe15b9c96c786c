from marketplace.domain.models import (
    Event,
    Location,
    Organizer,
    Reservation,
    TicketTier,
)
from marketplace.domain.value_objects import (
    Capacity,
    Coordinates,
    EventId,
    EventType,
    Money,
    TierId,
)

__all__ = [
    "Event",
    "Location",
    "Organizer",
    "Reservation",
    "TicketTier",
    "EventId",
    "EventType",
    "TierId",
    "Money",
    "Capacity",
    "Coordinates",
]
