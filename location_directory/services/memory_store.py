# location_directory/services/memory_store.py
from typing import Dict, List, Optional

from bson import ObjectId

from location_directory.models.location import LocationNode, LocationType
from location_directory.services.exceptions import (
    InvalidHierarchyError,
    LocationAlreadyExistsError,
    LocationNotFoundError,
)


class InMemoryLocationStore:
    """
    LocationStore kept in process memory, used when `store.backend` is
    `memory` and by the test-suite.

    None of the methods await, so each check-then-write runs without
    interleaving on the event loop. Records are stored as copies; callers
    never hold a reference into the store.
    """

    backend = "memory"

    def __init__(self) -> None:
        self._nodes: Dict[str, LocationNode] = {}
        self._ids_by_code: Dict[str, str] = {}

    def _copy(self, node: Optional[LocationNode]) -> Optional[LocationNode]:
        return node.model_copy() if node is not None else None

    async def find_by_code(self, code: str) -> Optional[LocationNode]:
        location_id = self._ids_by_code.get(code)
        return self._copy(self._nodes.get(location_id)) if location_id else None

    async def find_by_id(self, location_id: str) -> Optional[LocationNode]:
        return self._copy(self._nodes.get(location_id))

    async def exists_by_code(self, code: str) -> bool:
        return code in self._ids_by_code

    async def find_by_type(self, location_type: LocationType) -> List[LocationNode]:
        return [
            self._copy(node)
            for node in self._nodes.values()
            if node.type == location_type
        ]

    async def find_by_parent(self, parent: LocationNode) -> List[LocationNode]:
        return [
            self._copy(node)
            for node in self._nodes.values()
            if node.parent_id == parent.id
        ]

    async def find_all(self) -> List[LocationNode]:
        return [self._copy(node) for node in self._nodes.values()]

    async def save(self, node: LocationNode) -> LocationNode:
        if node.id is None:
            if node.code in self._ids_by_code:
                raise LocationAlreadyExistsError("Location", "code", node.code)
            stored = node.model_copy(update={"id": str(ObjectId())})
            self._nodes[stored.id] = stored
            self._ids_by_code[stored.code] = stored.id
            return self._copy(stored)

        current = self._nodes.get(node.id)
        if current is None:
            raise LocationNotFoundError("Location", "id", node.id)
        owner = self._ids_by_code.get(node.code)
        if owner is not None and owner != node.id:
            raise LocationAlreadyExistsError("Location", "code", node.code)
        self._ids_by_code.pop(current.code, None)
        stored = node.model_copy()
        self._nodes[stored.id] = stored
        self._ids_by_code[stored.code] = stored.id
        return self._copy(stored)

    async def delete(self, node: LocationNode) -> None:
        if node.id not in self._nodes:
            raise LocationNotFoundError("Location", "id", node.id)
        if any(other.parent_id == node.id for other in self._nodes.values()):
            raise InvalidHierarchyError(
                f"Cannot delete location '{node.code}': it still has child locations."
            )
        removed = self._nodes.pop(node.id)
        self._ids_by_code.pop(removed.code, None)

    async def count(self) -> int:
        return len(self._nodes)
