# location_directory/services/location_store.py
from typing import List, Optional, Protocol

from beanie import PydanticObjectId
from bson.errors import InvalidId
from pymongo.errors import DuplicateKeyError

from location_directory.models.location import (
    LocationDocument,
    LocationNode,
    LocationType,
)
from location_directory.services.exceptions import (
    InvalidHierarchyError,
    LocationAlreadyExistsError,
    LocationNotFoundError,
)


class LocationStore(Protocol):
    """Keyed storage of location records used by the LocationService."""

    backend: str

    async def find_by_code(self, code: str) -> Optional[LocationNode]: ...

    async def find_by_id(self, location_id: str) -> Optional[LocationNode]: ...

    async def exists_by_code(self, code: str) -> bool: ...

    async def find_by_type(self, location_type: LocationType) -> List[LocationNode]: ...

    async def find_by_parent(self, parent: LocationNode) -> List[LocationNode]: ...

    async def find_all(self) -> List[LocationNode]: ...

    async def save(self, node: LocationNode) -> LocationNode: ...

    async def delete(self, node: LocationNode) -> None: ...

    async def count(self) -> int: ...


class BeanieLocationStore:
    """LocationStore backed by the `locations` MongoDB collection."""

    backend = "mongo"

    @staticmethod
    def _to_node(document: LocationDocument) -> LocationNode:
        return LocationNode(
            id=str(document.id),
            name=document.name,
            code=document.code,
            type=document.type,
            parent_id=document.parent_id,
        )

    async def _get_document(self, location_id: str) -> Optional[LocationDocument]:
        try:
            return await LocationDocument.get(PydanticObjectId(location_id))
        except InvalidId:
            return None

    async def find_by_code(self, code: str) -> Optional[LocationNode]:
        document = await LocationDocument.find_one({"code": code})
        return self._to_node(document) if document else None

    async def find_by_id(self, location_id: str) -> Optional[LocationNode]:
        document = await self._get_document(location_id)
        return self._to_node(document) if document else None

    async def exists_by_code(self, code: str) -> bool:
        return await LocationDocument.find_one({"code": code}) is not None

    async def find_by_type(self, location_type: LocationType) -> List[LocationNode]:
        documents = (
            await LocationDocument.find({"type": location_type.value})
            .sort("+_id")
            .to_list()
        )
        return [self._to_node(document) for document in documents]

    async def find_by_parent(self, parent: LocationNode) -> List[LocationNode]:
        # ObjectIds grow with insertion time, so this is insertion order.
        documents = (
            await LocationDocument.find({"parent_id": parent.id})
            .sort("+_id")
            .to_list()
        )
        return [self._to_node(document) for document in documents]

    async def find_all(self) -> List[LocationNode]:
        documents = await LocationDocument.find_all().sort("+_id").to_list()
        return [self._to_node(document) for document in documents]

    async def save(self, node: LocationNode) -> LocationNode:
        """Inserts a node without an id, otherwise overwrites the stored fields."""
        if node.id is None:
            document = LocationDocument(**node.model_dump(exclude={"id"}))
            try:
                await document.insert()
            except DuplicateKeyError:
                raise LocationAlreadyExistsError("Location", "code", node.code)
            return self._to_node(document)

        document = await self._get_document(node.id)
        if document is None:
            raise LocationNotFoundError("Location", "id", node.id)
        await document.set(node.model_dump(mode="json", exclude={"id"}))
        return self._to_node(document)

    async def delete(self, node: LocationNode) -> None:
        document = await self._get_document(node.id)
        if document is None:
            raise LocationNotFoundError("Location", "id", node.id)
        # MongoDB has no foreign keys; re-check right before removing.
        child = await LocationDocument.find_one({"parent_id": node.id})
        if child is not None:
            raise InvalidHierarchyError(
                f"Cannot delete location '{node.code}': it still has child locations."
            )
        await document.delete()

    async def count(self) -> int:
        return await LocationDocument.count()
