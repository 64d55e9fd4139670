"""CouchDB driver port interfaces.

The adapter only talks to the driver through these two protocols, so the
aiohttp-backed client in ``infrastructure.couchdb`` can be swapped for any
object exposing the same coroutines (tests use an in-memory fake).
"""

from typing import Any, Dict, List, Protocol
from abc import abstractmethod


class CouchDatabasePort(Protocol):
    """Document-level operations on one open database."""

    name: str

    @abstractmethod
    async def insert(self, document: Dict[str, Any]) -> Dict[str, Any]:
        """Create or update a document. Returns ``{"ok", "id", "rev"}``."""
        ...

    @abstractmethod
    async def get(self, doc_id: str) -> Dict[str, Any]:
        """Fetch one document by id; raises ``NotFoundError`` when absent."""
        ...

    @abstractmethod
    async def fetch(self, keys: List[str]) -> Dict[str, Any]:
        """Bulk lookup through ``_all_docs`` with ``include_docs``."""
        ...

    @abstractmethod
    async def find(self, query: Dict[str, Any]) -> Dict[str, Any]:
        """Run a Mango ``_find`` query. Returns ``{"docs", "bookmark", ...}``."""
        ...

    @abstractmethod
    async def bulk(self, docs: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Bulk write through ``_bulk_docs``. Returns one row per document."""
        ...

    @abstractmethod
    async def destroy(self, doc_id: str, rev: str) -> Dict[str, Any]:
        """Delete a document at revision ``rev``."""
        ...


class CouchServerPort(Protocol):
    """Server-level operations: database lifecycle and session ownership."""

    @abstractmethod
    async def get_database(self, name: str) -> Dict[str, Any]:
        """Return database info; raises ``NotFoundError`` when missing."""
        ...

    @abstractmethod
    async def create_database(self, name: str) -> Dict[str, Any]:
        """Create database ``name``."""
        ...

    @abstractmethod
    def use(self, name: str) -> CouchDatabasePort:
        """Return a handle bound to database ``name`` (no I/O)."""
        ...

    @abstractmethod
    async def close(self) -> None:
        """Release the underlying HTTP session."""
        ...
