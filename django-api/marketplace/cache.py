"""Cache keys for catalog responses and their invalidation."""

from django.core.cache import cache

from marketplace.domain import EventType

EVENT_LIST_KEY = "events:list"


def event_list_key(event_type: EventType | None = None, *, featured: bool = False) -> str:
    key = EVENT_LIST_KEY if event_type is None else f"{EVENT_LIST_KEY}:{event_type.value}"
    return f"{key}:featured" if featured else key


def event_key(event_id: str) -> str:
    return f"events:{event_id}"


def invalidate_event(event_id: str) -> None:
    """Drop every cached response that could include this event."""
    types = [None, *EventType]
    keys = [event_list_key(t, featured=f) for t in types for f in (False, True)]
    keys.append(event_key(event_id))
    cache.delete_many(keys)
