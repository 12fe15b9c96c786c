"""HTTP client for the catalog API, used by the checkout selector.

Error responses carry a domain error code and are raised again here as the
matching domain error, so callers handle remote and in-process catalogs the
same way.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any
from urllib.parse import quote
from uuid import UUID

import httpx
from django.conf import settings
from loguru import logger

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
from marketplace.domain.errors import (
    DomainError,
    ErrorCode,
    EventNotFoundError,
    FieldError,
    InsufficientInventoryError,
    InvalidEventIdError,
    InvalidQuantityError,
    StoreUnavailableError,
    TierNotFoundError,
    ValidationError,
)


def _parse_datetime(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def event_from_json(data: dict[str, Any]) -> Event:
    """Build an Event from its API representation.

    The API does not expose tier capacity; the snapshot uses the current
    stock as capacity.
    """
    location = data["location"]
    organizer = data["organizer"]
    return Event(
        id=EventId(data["id"]),
        name=data["name"],
        type=EventType.parse(data["type"]),
        featured=bool(data.get("featured", False)),
        image=data["image"],
        header_image=data["headerImage"],
        starts_at=_parse_datetime(data["dateTime"]),
        ends_at=_parse_datetime(data["endDateTime"]),
        location=Location(
            venue=location["venue"],
            address=location["address"],
            city=location["city"],
            country=location["country"],
            coordinates=Coordinates(
                lat=location["coordinates"]["lat"], lng=location["coordinates"]["lng"]
            ),
        ),
        organizer=Organizer(
            name=organizer["name"],
            logo=organizer["logo"],
            description=organizer.get("description", ""),
        ),
        starting_price=Money(Decimal(str(data["startingPrice"]))),
        ticket_tiers=tuple(
            TicketTier(
                id=TierId(tier["id"]),
                name=tier["name"],
                price=Money(Decimal(str(tier["price"]))),
                description=tier["description"],
                available=Capacity(tier["available"]),
                capacity=Capacity(tier["available"]),
            )
            for tier in data["ticketTiers"]
        ),
        created_at=_parse_datetime(data["createdAt"]),
        updated_at=_parse_datetime(data["updatedAt"]),
    )


class HttpCatalogClient:
    """Talks to the catalog's HTTP resource interface."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 5.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._client = httpx.Client(base_url=base_url, timeout=timeout, transport=transport)

    @classmethod
    def from_settings(
        cls, *, transport: httpx.BaseTransport | None = None
    ) -> "HttpCatalogClient":
        """Client for the catalog named by CATALOG_BASE_URL and CATALOG_TIMEOUT."""
        return cls(
            settings.CATALOG_BASE_URL,
            timeout=settings.CATALOG_TIMEOUT,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "HttpCatalogClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _send(
        self, method: str, url: str, context: dict[str, str], **kwargs: Any
    ) -> httpx.Response:
        try:
            response = self._client.request(method, url, **kwargs)
        except httpx.TransportError as exc:
            logger.error(f"Catalog unreachable: {exc}")
            raise StoreUnavailableError() from exc
        if response.is_error:
            raise self._error_from(response, context)
        return response

    @staticmethod
    def _error_from(
        response: httpx.Response, context: dict[str, str]
    ) -> DomainError | httpx.HTTPStatusError:
        try:
            body = response.json()
        except ValueError:
            body = {}
        code = body.get("code")
        details = body.get("details")
        if code == ErrorCode.EVENT_NOT_FOUND.value:
            return EventNotFoundError(context["event_id"])
        if code == ErrorCode.TIER_NOT_FOUND.value:
            return TierNotFoundError(context.get("tier_id", ""))
        if code == ErrorCode.INVALID_EVENT_ID.value:
            return InvalidEventIdError()
        if code == ErrorCode.INSUFFICIENT_INVENTORY.value:
            return InsufficientInventoryError(
                requested=details["requested"], available=details["available"]
            )
        if code == ErrorCode.INVALID_QUANTITY.value:
            return InvalidQuantityError(details["quantity"], available=details.get("available"))
        if code == ErrorCode.VALIDATION_FAILED.value:
            return ValidationError([FieldError(d["field"], d["message"]) for d in details or []])
        if response.status_code == httpx.codes.SERVICE_UNAVAILABLE:
            return StoreUnavailableError()
        return httpx.HTTPStatusError(
            f"Catalog returned {response.status_code}",
            request=response.request,
            response=response,
        )

    def get_event(self, event_id: str) -> Event:
        response = self._send(
            "GET", "/events", {"event_id": event_id}, params={"id": event_id}
        )
        return event_from_json(response.json()["event"])

    def reserve_tickets(self, event_id: str, tier_id: str, quantity: int) -> Reservation:
        response = self._send(
            "POST",
            f"/events/{quote(event_id, safe='')}/tiers/{quote(tier_id, safe='')}/reserve",
            {"event_id": event_id, "tier_id": tier_id},
            json={"quantity": quantity},
        )
        body = response.json()
        return Reservation(
            id=UUID(body["reservationId"]),
            event_id=EventId(event_id),
            tier_id=TierId(tier_id),
            quantity=quantity,
            remaining=body["available"],
            created_at=datetime.now(timezone.utc),
        )
