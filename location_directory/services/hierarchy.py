# location_directory/services/hierarchy.py
"""
Parent/child compatibility rules for the location levels.

A child is only ever allowed directly below the level above it:
Province > District > Sector > Cell > Village.
"""
from typing import Optional, Tuple

from location_directory.models.location import LocationType

LEVEL_ORDER: Tuple[LocationType, ...] = tuple(LocationType)

# Parent hops from the deepest level back to a Province.
MAX_DEPTH = len(LEVEL_ORDER) - 1


def is_valid_child(parent_type: LocationType, child_type: LocationType) -> bool:
    """True when `child_type` sits exactly one level below `parent_type`."""
    return child_type.level == parent_type.level + 1


def parent_type_of(child_type: LocationType) -> Optional[LocationType]:
    """The level a node of `child_type` must hang from; None for Province."""
    if child_type.level == 0:
        return None
    return LEVEL_ORDER[child_type.level - 1]


def child_type_of(parent_type: LocationType) -> Optional[LocationType]:
    """The level allowed below `parent_type`; None for Village."""
    if parent_type.level == MAX_DEPTH:
        return None
    return LEVEL_ORDER[parent_type.level + 1]
