# location_directory/models/location.py
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field
from beanie import Document, Indexed


# --- Location Types (ordered, Province is the root level) ---
class LocationType(str, Enum):
    """Defines the administrative levels, in hierarchy order."""

    PROVINCE = "province"
    DISTRICT = "district"
    SECTOR = "sector"
    CELL = "cell"
    VILLAGE = "village"

    @property
    def level(self) -> int:
        """Position in the Province -> Village order (Province = 0)."""
        return list(LocationType).index(self)


# --- LocationNode (entity handed around by the service layer) ---
class LocationNode(BaseModel):
    """
    One administrative unit of the directory.
    The parent is referenced by id and resolved through the store.
    """

    id: Optional[str] = None
    name: str = Field(min_length=1)
    code: str = Field(min_length=1)
    type: LocationType
    parent_id: Optional[str] = None


# --- LocationDocument (MongoDB persistence model) ---
class LocationDocument(Document):
    """
    Stored form of a LocationNode. The unique index on `code` is the
    authoritative uniqueness guard.
    """

    name: str
    code: Indexed(str, unique=True)
    type: LocationType
    parent_id: Optional[str] = None  # ID of the parent location

    class Settings:
        name = "locations"
        indexes = ["type", "parent_id"]
