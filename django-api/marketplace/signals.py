"""Django signals for cache invalidation.

Admin edits and other direct ORM writes bypass the store, so cached event
responses are dropped on every save or delete of an Event or TicketTier.
"""

from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from marketplace.cache import invalidate_event
from marketplace.models import Event, TicketTier


@receiver([post_save, post_delete], sender=Event)
def invalidate_event_cache(sender, instance, **kwargs):
    """Invalidate caches when an event is saved or deleted."""
    invalidate_event(instance.pk)


@receiver([post_save, post_delete], sender=TicketTier)
def invalidate_ticket_tier_cache(sender, instance, **kwargs):
    """Invalidate the owning event's caches when a ticket tier changes."""
    invalidate_event(instance.event_id)
