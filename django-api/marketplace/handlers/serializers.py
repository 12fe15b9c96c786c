"""Serializers for parsing request bodies and rendering domain models.

Input serializers only check shapes and types; business rules live in the
validation gate, so every field is optional here.
"""

from typing import Any

from rest_framework import serializers

from marketplace.domain.drafts import (
    DraftCommand,
    EventDraft,
    LocationDraft,
    OrganizerDraft,
    ReplaceTiers,
    SetEventField,
    SetLocationField,
    SetOrganizerField,
    TierDraft,
)
from marketplace.domain.errors import FieldError

# Output


class CoordinatesSerializer(serializers.Serializer):
    lat = serializers.FloatField()
    lng = serializers.FloatField()


class LocationSerializer(serializers.Serializer):
    venue = serializers.CharField()
    address = serializers.CharField()
    city = serializers.CharField()
    country = serializers.CharField()
    coordinates = CoordinatesSerializer()


class OrganizerSerializer(serializers.Serializer):
    name = serializers.CharField()
    logo = serializers.CharField()
    description = serializers.CharField()


class TicketTierSerializer(serializers.Serializer):
    """Serializer for TicketTier domain model."""

    id = serializers.CharField(source="id.value")
    name = serializers.CharField()
    price = serializers.DecimalField(
        source="price.amount", max_digits=10, decimal_places=2
    )
    description = serializers.CharField()
    available = serializers.IntegerField(source="available.value")


class EventSerializer(serializers.Serializer):
    """Serializer for Event domain model."""

    id = serializers.CharField(source="id.value")
    name = serializers.CharField()
    type = serializers.CharField(source="type.value")
    featured = serializers.BooleanField()
    image = serializers.CharField()
    headerImage = serializers.CharField(source="header_image")
    dateTime = serializers.DateTimeField(source="starts_at")
    endDateTime = serializers.DateTimeField(source="ends_at")
    location = LocationSerializer()
    startingPrice = serializers.DecimalField(
        source="starting_price.amount", max_digits=10, decimal_places=2
    )
    organizer = OrganizerSerializer()
    ticketTiers = TicketTierSerializer(source="ticket_tiers", many=True)
    createdAt = serializers.DateTimeField(source="created_at")
    updatedAt = serializers.DateTimeField(source="updated_at")


# Input


def _text(**kwargs: Any) -> serializers.CharField:
    return serializers.CharField(
        required=False, allow_blank=True, trim_whitespace=False, **kwargs
    )


class CoordinatesInputSerializer(serializers.Serializer):
    lat = serializers.FloatField(required=False, allow_null=True)
    lng = serializers.FloatField(required=False, allow_null=True)


class LocationInputSerializer(serializers.Serializer):
    venue = _text()
    address = _text()
    city = _text()
    country = _text()
    coordinates = CoordinatesInputSerializer(required=False)


class OrganizerInputSerializer(serializers.Serializer):
    name = _text()
    logo = _text()
    description = _text()


class TicketTierInputSerializer(serializers.Serializer):
    id = _text(allow_null=True)
    name = _text()
    price = serializers.DecimalField(
        max_digits=10, decimal_places=2, required=False, allow_null=True
    )
    description = _text()
    available = serializers.IntegerField(required=False, allow_null=True)

    def to_draft(self, data: dict[str, Any]) -> TierDraft:
        return TierDraft(
            id=data.get("id") or "",
            name=data.get("name", ""),
            price=data.get("price"),
            description=data.get("description", ""),
            available=data.get("available"),
        )


class EventInputSerializer(serializers.Serializer):
    """Parses an Event draft body in its wire shape."""

    id = _text()
    name = _text()
    type = _text()
    featured = serializers.BooleanField(required=False)
    image = _text()
    headerImage = _text(source="header_image")
    dateTime = serializers.DateTimeField(source="starts_at", required=False, allow_null=True)
    endDateTime = serializers.DateTimeField(source="ends_at", required=False, allow_null=True)
    location = LocationInputSerializer(required=False)
    startingPrice = serializers.DecimalField(
        source="starting_price",
        max_digits=10,
        decimal_places=2,
        required=False,
        allow_null=True,
    )
    organizer = OrganizerInputSerializer(required=False)
    ticketTiers = TicketTierInputSerializer(source="ticket_tiers", many=True, required=False)

    SCALAR_FIELDS = (
        "id",
        "name",
        "type",
        "featured",
        "image",
        "header_image",
        "starts_at",
        "ends_at",
        "starting_price",
    )

    def _tiers(self, data: dict[str, Any]) -> tuple[TierDraft, ...]:
        tier_serializer = TicketTierInputSerializer()
        return tuple(tier_serializer.to_draft(t) for t in data.get("ticket_tiers", []))

    def to_draft(self) -> EventDraft:
        """Build a new-event draft from validated data; absent fields stay blank."""
        data = self.validated_data
        location = data.get("location", {})
        coordinates = location.get("coordinates", {})
        organizer = data.get("organizer", {})
        scalars = {name: data[name] for name in self.SCALAR_FIELDS if name in data}
        return EventDraft(
            **scalars,
            location=LocationDraft(
                venue=location.get("venue", ""),
                address=location.get("address", ""),
                city=location.get("city", ""),
                country=location.get("country", ""),
                lat=coordinates.get("lat"),
                lng=coordinates.get("lng"),
            ),
            organizer=OrganizerDraft(**organizer),
            ticket_tiers=self._tiers(data),
        )

    def to_commands(self) -> list[DraftCommand]:
        """Translate the fields present in an update body into draft commands."""
        data = self.validated_data
        commands: list[DraftCommand] = [
            SetEventField(field=name, value=data[name])
            for name in self.SCALAR_FIELDS
            if name in data and name != "id"
        ]
        location = data.get("location", {})
        for name in ("venue", "address", "city", "country"):
            if name in location:
                commands.append(SetLocationField(field=name, value=location[name]))
        for name, value in location.get("coordinates", {}).items():
            commands.append(SetLocationField(field=name, value=value))
        for name, value in data.get("organizer", {}).items():
            commands.append(SetOrganizerField(field=name, value=value))
        if "ticket_tiers" in data:
            commands.append(ReplaceTiers(tiers=self._tiers(data)))
        return commands


class ReservationRequestSerializer(serializers.Serializer):
    quantity = serializers.IntegerField()


def flatten_errors(errors: Any, prefix: str = "") -> list[FieldError]:
    """Turn DRF's nested error structure into a flat list of field errors."""
    if isinstance(errors, dict):
        flat = []
        for key, value in errors.items():
            path = key if not prefix else f"{prefix}.{key}"
            if key == "non_field_errors":
                path = prefix or "body"
            flat.extend(flatten_errors(value, path))
        return flat
    if isinstance(errors, list):
        if all(isinstance(e, (dict, list)) for e in errors):
            flat = []
            for index, value in enumerate(errors):
                if value:
                    flat.extend(flatten_errors(value, f"{prefix}[{index}]"))
            return flat
        return [FieldError(prefix, str(e)) for e in errors]
    return [FieldError(prefix, str(errors))]
