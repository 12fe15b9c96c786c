"""HTTP handlers (views) - handle HTTP concerns only.

Handlers:
- Parse requests and validate input format
- Call services for business logic
- Leave domain errors to the exception handler in handlers.errors
- Never contain business logic
- Never expose internal error details
"""

from django.core.cache import cache
from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from marketplace.cache import event_key, event_list_key
from marketplace.domain import EventType
from marketplace.domain.errors import InvalidEventIdError, ValidationError
from marketplace.handlers.serializers import (
    EventInputSerializer,
    EventSerializer,
    ReservationRequestSerializer,
    flatten_errors,
)
from marketplace.services.event_service import EventService
from marketplace.services.showcase import ALL_TAB
from marketplace.stores.django_store import DjangoEventStore


def get_event_service() -> EventService:
    return EventService(DjangoEventStore())


def _parsed(serializer_class, data):
    serializer = serializer_class(data=data)
    if not serializer.is_valid():
        raise ValidationError(flatten_errors(serializer.errors))
    return serializer


def _list_cache_key(event_type: str | None, featured: bool) -> str | None:
    """Cache key for a list request, or None when the type is not recognised."""
    if event_type is None or event_type.strip().lower() == ALL_TAB.lower():
        return event_list_key(featured=featured)
    try:
        return event_list_key(EventType.parse(event_type), featured=featured)
    except ValueError:
        return None


def _is_true(value: str | None) -> bool:
    return value is not None and value.strip().lower() in ("1", "true", "yes")


class EventCollectionView(APIView):
    """Handler for /api/events

    GET lists events (``?type=``, ``?featured=true``) or returns one by
    ``?id=``; POST creates, PUT updates the event named by the body's ``id``,
    DELETE removes the event named by ``?id=``.
    """

    def get(self, request: Request) -> Response:
        event_id = request.query_params.get("id")
        if event_id is not None:
            return Response({"event": self._event_data(event_id)})

        event_type = request.query_params.get("type")
        featured = _is_true(request.query_params.get("featured"))
        key = _list_cache_key(event_type, featured)
        events = cache.get(key) if key else None
        if events is None:
            found = get_event_service().list_events(event_type, featured_only=featured)
            events = EventSerializer(found, many=True).data
            cache.set(key, events)
        return Response({"events": events})

    def _event_data(self, event_id: str) -> dict:
        if not event_id.strip():
            raise InvalidEventIdError()
        key = event_key(event_id.strip())
        data = cache.get(key)
        if data is None:
            data = EventSerializer(get_event_service().get_event(event_id)).data
            cache.set(key, data)
        return data

    def post(self, request: Request) -> Response:
        draft = _parsed(EventInputSerializer, request.data).to_draft()
        event = get_event_service().create_event(draft)
        return Response({"event": EventSerializer(event).data}, status=status.HTTP_201_CREATED)

    def put(self, request: Request) -> Response:
        serializer = _parsed(EventInputSerializer, request.data)
        event_id = serializer.validated_data.get("id", "")
        event = get_event_service().update_event(event_id, serializer.to_commands())
        return Response({"event": EventSerializer(event).data})

    def delete(self, request: Request) -> Response:
        event = get_event_service().delete_event(request.query_params.get("id", ""))
        return Response({"event": EventSerializer(event).data})


class TierReservationView(APIView):
    """Handler for POST /api/events/{event_id}/tiers/{tier_id}/reserve"""

    def post(self, request: Request, event_id: str, tier_id: str) -> Response:
        quantity = _parsed(ReservationRequestSerializer, request.data).validated_data["quantity"]
        reservation = get_event_service().reserve_tickets(event_id, tier_id, quantity)
        return Response(
            {"available": reservation.remaining, "reservationId": str(reservation.id)}
        )
