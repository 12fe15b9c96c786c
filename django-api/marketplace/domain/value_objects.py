"""Domain primitives that enforce validity at creation time."""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Self


class EventType(str, Enum):
    """Kinds of events the marketplace lists."""

    WORKSHOP = "workshop"
    CONCERT = "concert"
    CONFERENCE = "conference"

    @classmethod
    def parse(cls, value: str) -> Self:
        return cls(value.strip().lower())


@dataclass(frozen=True)
class EventId:
    """Caller-supplied unique identifier for an Event."""

    value: str

    def __post_init__(self) -> None:
        if not self.value or not self.value.strip():
            raise ValueError("EventId cannot be blank")

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=value.strip())

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class TierId:
    """Identifier for a TicketTier, unique within its event."""

    value: str

    def __post_init__(self) -> None:
        if not self.value or not self.value.strip():
            raise ValueError("TierId cannot be blank")

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=value.strip())

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Money:
    """Price representation with validation."""

    amount: Decimal

    def __post_init__(self) -> None:
        if self.amount < 0:
            raise ValueError("Money amount cannot be negative")

    def __mul__(self, quantity: int) -> "Money":
        return Money(amount=self.amount * quantity)

    def __str__(self) -> str:
        return f"{self.amount:.2f}"


@dataclass(frozen=True)
class Capacity:
    """Non-negative integer representing a ticket count."""

    value: int

    def __post_init__(self) -> None:
        if self.value < 0:
            raise ValueError("Capacity cannot be negative")


@dataclass(frozen=True)
class Coordinates:
    """Geographic position of a venue."""

    lat: float
    lng: float

    def __post_init__(self) -> None:
        if not -90 <= self.lat <= 90:
            raise ValueError("Latitude must be between -90 and 90")
        if not -180 <= self.lng <= 180:
            raise ValueError("Longitude must be between -180 and 180")
