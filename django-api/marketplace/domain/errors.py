"""Domain error codes for the marketplace module."""

from dataclasses import dataclass
from enum import Enum


class ErrorCode(Enum):
    """Domain error codes."""

    VALIDATION_FAILED = "VALIDATION_FAILED"
    INVALID_EVENT_ID = "INVALID_EVENT_ID"
    EVENT_NOT_FOUND = "EVENT_NOT_FOUND"
    DUPLICATE_EVENT = "DUPLICATE_EVENT"
    TIER_NOT_FOUND = "TIER_NOT_FOUND"
    TIER_NOT_SELECTED = "TIER_NOT_SELECTED"
    INVALID_QUANTITY = "INVALID_QUANTITY"
    INSUFFICIENT_INVENTORY = "INSUFFICIENT_INVENTORY"
    STORE_UNAVAILABLE = "STORE_UNAVAILABLE"


@dataclass(frozen=True)
class FieldError:
    """One field-level validation failure."""

    field: str
    message: str


@dataclass(eq=False)
class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode
    message: str

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class ValidationError(DomainError):
    """Raised with every field violation found in a draft."""

    def __init__(self, errors: list[FieldError]) -> None:
        super().__init__(
            code=ErrorCode.VALIDATION_FAILED,
            message="Event validation failed",
        )
        self.errors = list(errors)


class InvalidEventIdError(DomainError):
    """Raised when an event ID is blank."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.INVALID_EVENT_ID,
            message="Invalid event ID format",
        )


class EventNotFoundError(DomainError):
    """Raised when an event is not found."""

    def __init__(self, event_id: str) -> None:
        super().__init__(
            code=ErrorCode.EVENT_NOT_FOUND,
            message="Event not found",
        )
        self.event_id = event_id


class DuplicateEventError(DomainError):
    """Raised when an event ID is already taken."""

    def __init__(self, event_id: str) -> None:
        super().__init__(
            code=ErrorCode.DUPLICATE_EVENT,
            message=f"An event with ID '{event_id}' already exists",
        )
        self.event_id = event_id


class TierNotFoundError(DomainError):
    """Raised when a tier is not part of the event."""

    def __init__(self, tier_id: str) -> None:
        super().__init__(
            code=ErrorCode.TIER_NOT_FOUND,
            message="Ticket tier not found",
        )
        self.tier_id = tier_id


class TierNotSelectedError(DomainError):
    """Raised when checkout is attempted before picking a tier."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.TIER_NOT_SELECTED,
            message="Select a ticket tier first",
        )


class InvalidQuantityError(DomainError):
    """Raised when a requested quantity is below one or above known stock."""

    def __init__(self, quantity: int, available: int | None = None) -> None:
        if available is None:
            message = "Quantity must be at least 1"
        else:
            message = f"Quantity must be between 1 and {available}"
        super().__init__(code=ErrorCode.INVALID_QUANTITY, message=message)
        self.quantity = quantity
        self.available = available


class InsufficientInventoryError(DomainError):
    """Raised when a reservation asks for more tickets than remain."""

    def __init__(self, requested: int, available: int) -> None:
        super().__init__(
            code=ErrorCode.INSUFFICIENT_INVENTORY,
            message=f"Requested {requested} tickets but only {available} available",
        )
        self.requested = requested
        self.available = available


class StoreUnavailableError(DomainError):
    """Raised when the underlying persistence cannot be reached."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.STORE_UNAVAILABLE,
            message="The service is temporarily unavailable, please try again",
        )
