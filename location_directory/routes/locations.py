# location_directory/routes/locations.py
from typing import Dict, List

from fastapi import APIRouter, Depends, Query, status

from location_directory.dependencies.store import get_location_service
from location_directory.models.location import LocationNode, LocationType
from location_directory.schemas.location import (
    CodeExists,
    HierarchyCheck,
    LocationCreate,
    LocationDepth,
    LocationPath,
    LocationTree,
    LocationUpdate,
)
from location_directory.services.location_service import (
    PATH_SEPARATOR,
    LocationService,
)

router = APIRouter()


# --- Creation ---


@router.post("/", response_model=LocationNode, status_code=status.HTTP_201_CREATED)
async def create_location(
    location_create: LocationCreate,
    service: LocationService = Depends(get_location_service),
):
    """Creates a location under `parent_code` (provinces take no parent)."""
    return await service.create_location(
        name=location_create.name,
        code=location_create.code,
        location_type=location_create.type,
        parent_code=location_create.parent_code,
    )


# --- Listings ---


@router.get("/", response_model=List[LocationNode])
async def get_all_locations(service: LocationService = Depends(get_location_service)):
    return await service.get_all_locations()


@router.get("/provinces", response_model=List[LocationNode])
async def get_all_provinces(service: LocationService = Depends(get_location_service)):
    return await service.get_all_provinces()


@router.get("/type/{location_type}", response_model=List[LocationNode])
async def get_locations_by_type(
    location_type: LocationType,
    service: LocationService = Depends(get_location_service),
):
    return await service.get_locations_by_type(location_type)


@router.get("/search", response_model=List[LocationNode])
async def search_locations(
    name: str = Query(..., min_length=1),
    service: LocationService = Depends(get_location_service),
):
    """Case-insensitive search on location names."""
    return await service.search_locations_by_name(name)


@router.get("/statistics", response_model=Dict[str, int])
async def get_location_statistics(
    service: LocationService = Depends(get_location_service),
):
    """Number of locations per level, plus the total."""
    return await service.get_location_statistics()


@router.get("/validate", response_model=HierarchyCheck)
async def validate_hierarchy(
    parent_code: str,
    child_type: LocationType,
    service: LocationService = Depends(get_location_service),
):
    """Pre-checks whether `child_type` may be created under `parent_code`."""
    valid = await service.validate_hierarchy(parent_code, child_type)
    return HierarchyCheck(parent_code=parent_code, child_type=child_type, valid=valid)


# --- Single location ---


@router.get("/code/{code}", response_model=LocationNode)
async def get_location_by_code(
    code: str, service: LocationService = Depends(get_location_service)
):
    return await service.get_location_by_code(code)


@router.get("/id/{location_id}", response_model=LocationNode)
async def get_location_by_id(
    location_id: str, service: LocationService = Depends(get_location_service)
):
    return await service.get_location_by_id(location_id)


@router.get("/exists/{code}", response_model=CodeExists)
async def location_exists(
    code: str, service: LocationService = Depends(get_location_service)
):
    return CodeExists(code=code, exists=await service.exists_by_code(code))


# --- Traversal ---


@router.get("/children/{code}", response_model=List[LocationNode])
async def get_child_locations(
    code: str, service: LocationService = Depends(get_location_service)
):
    return await service.get_child_locations(code)


@router.get("/descendants/{code}", response_model=List[LocationNode])
async def get_all_descendants(
    code: str, service: LocationService = Depends(get_location_service)
):
    return await service.get_all_descendants(code)


@router.get("/path/{code}", response_model=LocationPath)
async def get_location_path(
    code: str, service: LocationService = Depends(get_location_service)
):
    """Names from the province down to the location, e.g. "A > B > C"."""
    names = await service.get_ancestor_names(code)
    return LocationPath(
        code=code,
        names=names,
        path=PATH_SEPARATOR.join(names),
        depth=len(names) - 1,
    )


@router.get("/province/{code}", response_model=LocationNode)
async def get_province(
    code: str, service: LocationService = Depends(get_location_service)
):
    """The province a location belongs to."""
    return await service.get_province(code)


@router.get("/depth/{code}", response_model=LocationDepth)
async def get_location_depth(
    code: str, service: LocationService = Depends(get_location_service)
):
    return LocationDepth(code=code, depth=await service.get_location_depth(code))


@router.get("/hierarchy", response_model=List[LocationTree])
async def get_complete_hierarchy(
    service: LocationService = Depends(get_location_service),
):
    """Every province with its full subtree."""
    return await service.get_complete_hierarchy()


@router.get("/hierarchy/{code}", response_model=LocationTree)
async def get_location_hierarchy(
    code: str, service: LocationService = Depends(get_location_service)
):
    return await service.get_location_hierarchy(code)


# --- Update & delete ---


@router.put("/{location_id}", response_model=LocationNode)
async def update_location(
    location_id: str,
    location_update: LocationUpdate,
    service: LocationService = Depends(get_location_service),
):
    """Renames a location. Code, type and parent cannot be changed."""
    return await service.update_location(
        location_id,
        name=location_update.name,
        code=location_update.code,
        location_type=location_update.type,
        parent_code=location_update.parent_code,
    )


@router.delete("/{location_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_location(
    location_id: str, service: LocationService = Depends(get_location_service)
):
    """Deletes a location that has no child locations."""
    await service.delete_location(location_id)
