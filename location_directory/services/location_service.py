# location_directory/services/location_service.py
import logging
from typing import Dict, List, Optional, Set

from location_directory.models.location import LocationNode, LocationType
from location_directory.schemas.location import LocationTree
from location_directory.services.exceptions import (
    InvalidHierarchyError,
    LocationAlreadyExistsError,
    LocationNotFoundError,
)
from location_directory.services.hierarchy import (
    MAX_DEPTH,
    child_type_of,
    is_valid_child,
    parent_type_of,
)
from location_directory.services.location_store import LocationStore

logger = logging.getLogger(__name__)

PATH_SEPARATOR = " > "


class LocationService:
    """
    Maintains the Province > District > Sector > Cell > Village directory
    on top of a LocationStore. Holds no state besides the store; every
    traversal reads persisted nodes.
    """

    def __init__(self, store: LocationStore):
        self.store = store

    # --- Creation ---

    async def create_location(
        self,
        name: str,
        code: str,
        location_type: LocationType,
        parent_code: Optional[str] = None,
    ) -> LocationNode:
        """Validates the placement of a new location and persists it."""
        if await self.store.exists_by_code(code):
            logger.warning(f"Rejected location '{code}': code already in use")
            raise LocationAlreadyExistsError("Location", "code", code)

        parent_id = None
        if location_type == LocationType.PROVINCE:
            if parent_code:
                raise InvalidHierarchyError("Province cannot have a parent location")
        else:
            if not parent_code:
                raise InvalidHierarchyError(
                    f"{location_type.value.capitalize()} must have a parent location"
                    f" of type {parent_type_of(location_type).value}"
                )
            parent = await self.get_location_by_code(parent_code)
            if not is_valid_child(parent.type, location_type):
                logger.warning(
                    f"Rejected location '{code}': {location_type.value} "
                    f"under {parent.type.value} '{parent.code}'"
                )
                allowed = child_type_of(parent.type)
                raise InvalidHierarchyError(
                    f"Invalid hierarchy: {parent.type.value} cannot have child"
                    f" of type {location_type.value}"
                    + (f" (expected {allowed.value})" if allowed else "")
                )
            parent_id = parent.id

        node = await self.store.save(
            LocationNode(name=name, code=code, type=location_type, parent_id=parent_id)
        )
        logger.info(f"Created {node.type.value} '{node.code}' ({node.id})")
        return node

    # --- Lookups ---

    async def get_location_by_code(self, code: str) -> LocationNode:
        node = await self.store.find_by_code(code)
        if node is None:
            raise LocationNotFoundError("Location", "code", code)
        return node

    async def get_location_by_id(self, location_id: str) -> LocationNode:
        node = await self.store.find_by_id(location_id)
        if node is None:
            raise LocationNotFoundError("Location", "id", location_id)
        return node

    async def resolve(self, code: str) -> LocationNode:
        """Resolves a location reference handed in by another subsystem."""
        return await self.get_location_by_code(code)

    async def exists_by_code(self, code: str) -> bool:
        return await self.store.exists_by_code(code)

    async def get_all_locations(self) -> List[LocationNode]:
        return await self.store.find_all()

    async def get_locations_by_type(
        self, location_type: LocationType
    ) -> List[LocationNode]:
        return await self.store.find_by_type(location_type)

    async def get_all_provinces(self) -> List[LocationNode]:
        return await self.store.find_by_type(LocationType.PROVINCE)

    async def get_child_locations(self, code: str) -> List[LocationNode]:
        """Direct children of the location with `code`, in insertion order."""
        parent = await self.get_location_by_code(code)
        return await self.store.find_by_parent(parent)

    async def search_locations_by_name(self, name: str) -> List[LocationNode]:
        """Case-insensitive substring match over location names."""
        needle = name.casefold()
        return [
            node
            for node in await self.store.find_all()
            if needle in node.name.casefold()
        ]

    # --- Ancestors ---

    async def _ancestor_chain(self, node: LocationNode) -> List[LocationNode]:
        """
        The node followed by its ancestors, nearest first, ending at the root.
        A chain longer than the number of levels means the stored tree is
        corrupt (or cyclic) and is reported instead of followed.
        """
        chain = [node]
        current = node
        while current.parent_id is not None:
            if len(chain) > MAX_DEPTH:
                raise InvalidHierarchyError(
                    f"Parent chain of location '{node.code}' exceeds {MAX_DEPTH} levels"
                )
            parent = await self.store.find_by_id(current.parent_id)
            if parent is None:
                raise LocationNotFoundError("Location", "id", current.parent_id)
            chain.append(parent)
            current = parent
        return chain

    async def get_ancestor_names(self, code: str) -> List[str]:
        """Names from the province down to the location itself."""
        node = await self.get_location_by_code(code)
        chain = await self._ancestor_chain(node)
        return [ancestor.name for ancestor in reversed(chain)]

    async def get_location_path(self, code: str) -> str:
        return PATH_SEPARATOR.join(await self.get_ancestor_names(code))

    async def get_province(self, code: str) -> LocationNode:
        """The root of the tree containing the location."""
        node = await self.get_location_by_code(code)
        chain = await self._ancestor_chain(node)
        return chain[-1]

    async def get_province_by_location_code(self, code: str) -> str:
        return (await self.get_province(code)).name

    async def get_location_depth(self, code: str) -> int:
        """Parent hops to the root: Province = 0 ... Village = 4."""
        node = await self.get_location_by_code(code)
        chain = await self._ancestor_chain(node)
        return len(chain) - 1

    # --- Descendants ---

    async def get_all_descendants(self, code: str) -> List[LocationNode]:
        """
        Every location below `code` (the location itself excluded),
        collected breadth-first. Each node is returned once even if the
        store yields duplicate rows.
        """
        root = await self.get_location_by_code(code)
        seen: Set[str] = {root.id}
        descendants: List[LocationNode] = []
        queue = [root]

        while queue:
            current = queue.pop(0)
            for child in await self.store.find_by_parent(current):
                if child.id in seen:
                    continue
                seen.add(child.id)
                descendants.append(child)
                queue.append(child)

        return descendants

    async def _build_tree(self, node: LocationNode, seen: Set[str]) -> LocationTree:
        seen.add(node.id)
        children = []
        for child in await self.store.find_by_parent(node):
            if child.id in seen:
                continue
            children.append(await self._build_tree(child, seen))
        return LocationTree(
            id=node.id,
            name=node.name,
            code=node.code,
            type=node.type,
            child_count=len(children),
            children=children,
        )

    async def get_location_hierarchy(self, code: str) -> LocationTree:
        """Nested read-only view of the location and everything below it."""
        node = await self.get_location_by_code(code)
        return await self._build_tree(node, set())

    async def get_complete_hierarchy(self) -> List[LocationTree]:
        """One tree per province."""
        return [
            await self._build_tree(province, set())
            for province in await self.get_all_provinces()
        ]

    # --- Statistics & validation ---

    async def count_locations_by_type(self, location_type: LocationType) -> int:
        return len(await self.store.find_by_type(location_type))

    async def get_location_statistics(self) -> Dict[str, int]:
        stats = {
            location_type.value: await self.count_locations_by_type(location_type)
            for location_type in LocationType
        }
        stats["total"] = await self.store.count()
        return stats

    async def validate_hierarchy(
        self, parent_code: str, child_type: LocationType
    ) -> bool:
        """Whether a `child_type` location may be created under `parent_code`."""
        parent = await self.get_location_by_code(parent_code)
        return is_valid_child(parent.type, child_type)

    # --- Mutation of existing locations ---

    async def update_location(
        self,
        location_id: str,
        name: str,
        code: Optional[str] = None,
        location_type: Optional[LocationType] = None,
        parent_code: Optional[str] = None,
    ) -> LocationNode:
        """
        Renames a location. Code, type and parent are fixed for the life of
        a location; supplying a different value for any of them rejects the
        whole request.
        """
        node = await self.get_location_by_id(location_id)

        conflicts = []
        if code is not None and code != node.code:
            conflicts.append("code")
        if location_type is not None and location_type != node.type:
            conflicts.append("type")
        if parent_code is not None:
            current_parent_code = None
            if node.parent_id is not None:
                current_parent_code = (
                    await self.get_location_by_id(node.parent_id)
                ).code
            if (parent_code or None) != current_parent_code:
                conflicts.append("parent")
        if conflicts:
            logger.warning(
                f"Rejected update of location '{node.code}': "
                f"attempted to change {', '.join(conflicts)}"
            )
            raise InvalidHierarchyError(
                f"Location {', '.join(conflicts)} cannot be changed; only the name is updatable"
            )

        if name == node.name:
            return node
        updated = await self.store.save(
            LocationNode.model_validate({**node.model_dump(), "name": name})
        )
        logger.info(f"Renamed location '{node.code}' from '{node.name}' to '{name}'")
        return updated

    async def delete_location(self, location_id: str) -> None:
        """Deletes a location that has no children; never cascades."""
        node = await self.get_location_by_id(location_id)
        children = await self.store.find_by_parent(node)
        if children:
            logger.warning(
                f"Rejected delete of location '{node.code}': {len(children)} children"
            )
            raise InvalidHierarchyError(
                f"Cannot delete location with {len(children)} child location(s)."
                " Delete children first."
            )
        await self.store.delete(node)
        logger.info(f"Deleted {node.type.value} '{node.code}' ({node.id})")
