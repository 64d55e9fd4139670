"""Data-access adapter port: the CRUD surface a service layer calls."""

from typing import Any, Dict, List, Optional, Protocol
from abc import abstractmethod


class DbAdapterPort(Protocol):
    """Interface every database adapter exposes to the service layer."""

    @abstractmethod
    def init(self, broker: Any, service: Any) -> None:
        """Bind the adapter to a service's collection (no I/O)."""
        ...

    @abstractmethod
    async def connect(self) -> None:
        """Open (creating if missing) the service's collection."""
        ...

    @abstractmethod
    async def disconnect(self) -> None:
        """Release the collection handle. Safe to call twice."""
        ...

    @abstractmethod
    async def find(self, filters: Optional[Dict[str, Any]] = None) -> List[Dict]:
        """Find all entities matching ``filters``.

        Args:
            filters: Mapping with optional ``query``, ``limit``, ``offset``,
                ``sort`` and ``fields`` keys

        Returns:
            List of matching documents (empty when nothing matches)
        """
        ...

    @abstractmethod
    async def find_one(self, query: Dict[str, Any]) -> Optional[Dict]:
        """Return the first entity matching ``query`` or None."""
        ...

    @abstractmethod
    async def find_by_id(self, _id: str) -> Dict:
        """Return the entity stored under ``_id``."""
        ...

    @abstractmethod
    async def find_by_ids(self, id_list: List[str]) -> List[Dict]:
        """Return the entities found for ``id_list``; missing ids are skipped."""
        ...

    @abstractmethod
    async def count(self, filters: Optional[Dict[str, Any]] = None) -> int:
        """Count entities matching ``filters``."""
        ...

    @abstractmethod
    async def insert(self, entity: Dict[str, Any]) -> Dict:
        """Insert one entity and return its stored representation."""
        ...

    @abstractmethod
    async def insert_many(self, entities: List[Dict[str, Any]]) -> List[Dict]:
        """Insert entities and return their stored representations."""
        ...

    @abstractmethod
    async def update_many(self, query: Dict[str, Any], update: Dict[str, Any]) -> int:
        """Merge ``update`` into every match. Returns the modified count."""
        ...

    @abstractmethod
    async def update_by_id(self, _id: str, update: Dict[str, Any]) -> Dict:
        """Merge ``update`` into one entity and return the stored result."""
        ...

    @abstractmethod
    async def remove_many(self, query: Dict[str, Any]) -> int:
        """Remove every match. Returns the removed count."""
        ...

    @abstractmethod
    async def remove_by_id(self, _id: str) -> Dict:
        """Remove one entity and return its last stored state."""
        ...

    @abstractmethod
    async def clear(self) -> int:
        """Remove every entity of the collection."""
        ...

    @abstractmethod
    def entity_to_object(self, entity: Dict[str, Any]) -> Dict:
        """Convert a stored entity to a plain, detached dictionary."""
        ...

    @abstractmethod
    def before_save_transform_id(self, entity: Dict[str, Any], id_field: str) -> Dict:
        """Move ``id_field`` into the store's native id field."""
        ...

    @abstractmethod
    def after_retrieve_transform_id(self, entity: Dict[str, Any], id_field: str) -> Dict:
        """Move the store's native id field into ``id_field``."""
        ...
