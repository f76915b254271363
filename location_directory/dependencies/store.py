# location_directory/dependencies/store.py
from fastapi import Depends, Request

from location_directory.services.location_service import LocationService
from location_directory.services.location_store import LocationStore


def get_location_store(request: Request) -> LocationStore:
    """
    Returns the store opened by the application lifespan.
    Tests override this dependency with an in-memory store.
    """
    store = getattr(request.app.state, "location_store", None)
    if store is None:
        raise RuntimeError("Location store not initialized")
    return store


def get_location_service(
    store: LocationStore = Depends(get_location_store),
) -> LocationService:
    return LocationService(store)
