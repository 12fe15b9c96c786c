"""Pytest configuration and shared fixtures."""

import pytest
from rest_framework.test import APIClient

from marketplace.services.event_service import EventService
from marketplace.stores.memory_store import InMemoryEventStore

from factories import FIXED_NOW


@pytest.fixture
def api_client() -> APIClient:
    return APIClient()


@pytest.fixture(autouse=True)
def clear_cache():
    from django.core.cache import cache
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def memory_store() -> InMemoryEventStore:
    return InMemoryEventStore()


@pytest.fixture
def service(memory_store: InMemoryEventStore) -> EventService:
    return EventService(memory_store, clock=lambda: FIXED_NOW)
