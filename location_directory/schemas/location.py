# location_directory/schemas/location.py
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field
from location_directory.models.location import LocationType


class LocationBase(BaseModel):
    name: str = Field(min_length=1)
    code: str = Field(min_length=1)
    type: LocationType


class LocationCreate(LocationBase):
    parent_code: Optional[str] = None  # Required for every type except province


class LocationUpdate(BaseModel):
    name: str = Field(min_length=1)
    # Immutable fields; accepted only when they match the stored values
    code: Optional[str] = None
    type: Optional[LocationType] = None
    parent_code: Optional[str] = None

    model_config = ConfigDict(extra="ignore")


class LocationTree(BaseModel):
    """A location with its descendants expanded down to the leaves."""

    id: str
    name: str
    code: str
    type: LocationType
    child_count: int = 0
    children: List["LocationTree"] = Field(default_factory=list)


class LocationPath(BaseModel):
    code: str
    names: List[str]
    path: str
    depth: int


class LocationDepth(BaseModel):
    code: str
    depth: int


class CodeExists(BaseModel):
    code: str
    exists: bool


class HierarchyCheck(BaseModel):
    parent_code: str
    child_type: LocationType
    valid: bool
