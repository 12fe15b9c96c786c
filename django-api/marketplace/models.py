"""Django ORM models (persistence layer).

These models handle database concerns. Domain logic lives in domain/models.py.
"""

import uuid

from django.db import models

from marketplace.domain.validation import (
    ID_MAX_LENGTH,
    NAME_MAX_LENGTH,
    PLACE_MAX_LENGTH,
    TIER_NAME_MAX_LENGTH,
    URL_MAX_LENGTH,
)
from marketplace.domain.value_objects import EventType


class Event(models.Model):
    """Persistence model for events.

    Location and organizer are embedded as prefixed columns; an event owns
    them exclusively.
    """

    TYPE_CHOICES = [(t.value, t.name.title()) for t in EventType]

    id = models.CharField(primary_key=True, max_length=ID_MAX_LENGTH)
    name = models.CharField(max_length=NAME_MAX_LENGTH)
    type = models.CharField(max_length=20, choices=TYPE_CHOICES)
    featured = models.BooleanField(default=False)
    image = models.URLField(max_length=URL_MAX_LENGTH)
    header_image = models.URLField(max_length=URL_MAX_LENGTH)
    starts_at = models.DateTimeField()
    ends_at = models.DateTimeField()
    venue = models.CharField(max_length=NAME_MAX_LENGTH)
    address = models.CharField(max_length=NAME_MAX_LENGTH)
    city = models.CharField(max_length=PLACE_MAX_LENGTH)
    country = models.CharField(max_length=PLACE_MAX_LENGTH)
    latitude = models.FloatField()
    longitude = models.FloatField()
    organizer_name = models.CharField(max_length=NAME_MAX_LENGTH)
    organizer_logo = models.URLField(max_length=URL_MAX_LENGTH)
    organizer_description = models.TextField(blank=True)
    starting_price = models.DecimalField(max_digits=10, decimal_places=2)
    created_at = models.DateTimeField()
    updated_at = models.DateTimeField()

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["-created_at"], name="event_created_idx"),
            models.Index(fields=["type", "-starts_at"], name="event_type_starts_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(ends_at__gt=models.F("starts_at")),
                name="event_ends_after_start",
            ),
        ]

    def __str__(self) -> str:
        return self.name


class TicketTier(models.Model):
    """Persistence model for ticket tiers."""

    event = models.ForeignKey(
        Event, on_delete=models.CASCADE, related_name="ticket_tiers"
    )
    tier_id = models.CharField(max_length=ID_MAX_LENGTH)
    position = models.PositiveIntegerField()
    name = models.CharField(max_length=TIER_NAME_MAX_LENGTH)
    price = models.DecimalField(max_digits=10, decimal_places=2)
    description = models.TextField()
    available = models.PositiveIntegerField()
    capacity = models.PositiveIntegerField()

    class Meta:
        ordering = ["position"]
        constraints = [
            models.UniqueConstraint(
                fields=["event", "tier_id"], name="unique_tier_per_event"
            ),
            models.CheckConstraint(
                condition=models.Q(available__lte=models.F("capacity")),
                name="tier_available_within_capacity",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.name} - {self.price}"


class Reservation(models.Model):
    """Persistence model for confirmed stock decrements."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    tier = models.ForeignKey(
        TicketTier, on_delete=models.CASCADE, related_name="reservations"
    )
    quantity = models.PositiveIntegerField()
    remaining = models.PositiveIntegerField()
    created_at = models.DateTimeField()

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["tier", "-created_at"], name="reservation_tier_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.quantity} x {self.tier}"
