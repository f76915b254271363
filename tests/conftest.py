"""Shared fixtures: every test runs against an in-memory location store."""

import os

os.environ.setdefault("STORE_BACKEND", "memory")

import pytest
from fastapi.testclient import TestClient

from location_directory.dependencies.store import get_location_store
from location_directory.main import app
from location_directory.models.location import LocationType
from location_directory.services.location_service import LocationService
from location_directory.services.memory_store import InMemoryLocationStore


@pytest.fixture
def store() -> InMemoryLocationStore:
    return InMemoryLocationStore()


@pytest.fixture
def service(store) -> LocationService:
    return LocationService(store)


@pytest.fixture
async def kigali(service):
    """Province RW > District KGL > Sector NYR."""
    await service.create_location("Kigali City", "RW", LocationType.PROVINCE)
    await service.create_location("Gasabo", "KGL", LocationType.DISTRICT, "RW")
    await service.create_location("Remera", "NYR", LocationType.SECTOR, "KGL")
    return service


@pytest.fixture
async def full_chain(kigali):
    """The kigali tree extended down to a village."""
    await kigali.create_location("Rukiri I", "RKR", LocationType.CELL, "NYR")
    await kigali.create_location("Amahoro", "AMH", LocationType.VILLAGE, "RKR")
    return kigali


@pytest.fixture
def client(store):
    app.dependency_overrides[get_location_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()
