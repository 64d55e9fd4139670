"""Asynchronous CouchDB HTTP client built on aiohttp.

Mirrors the small surface of the ``nano`` driver that the adapter relies on:
database get/create/use on the server object, and insert/get/fetch/find/bulk/
destroy on a database handle.
"""

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

from aiohttp import BasicAuth, ClientResponse, ClientSession, ClientTimeout

from ...ports.couch_driver import CouchDatabasePort, CouchServerPort
from .errors import couch_db_error

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {
    "Accept": "application/json, text/plain; q=0.8",
    "Content-Type": "application/json",
}


def quote_doc_id(doc_id: str) -> str:
    """Percent-encode a document id, keeping the design/local prefix slash.

    An empty id would address the database itself, so it is rejected.
    """
    if not doc_id:
        raise ValueError("Document id must be a non-empty string")
    for prefix in ("_design/", "_local/"):
        if doc_id.startswith(prefix):
            return prefix + quote(doc_id[len(prefix):], safe="")
    return quote(doc_id, safe="")


class CouchServer(CouchServerPort):
    """Connection to one CouchDB server."""

    def __init__(
        self,
        url: str = "http://localhost:5984",
        *,
        user: Optional[str] = None,
        password: Optional[str] = None,
        timeout: float = 30.0,
        headers: Optional[Dict[str, str]] = None,
    ):
        """Initialize the client. No connection is opened until the first request.

        Args:
            url: Server base URL (``http://host:port``)
            user: Optional user for HTTP basic auth
            password: Password for ``user``
            timeout: Total request timeout in seconds
            headers: Extra headers sent with every request
        """
        self.url = url.rstrip("/")
        self.user = user
        self.password = password
        self.timeout = timeout
        self.headers = DEFAULT_HEADERS.copy()
        if headers:
            self.headers.update(headers)
        self._session: Optional[ClientSession] = None

    def __repr__(self):
        return f"{self.__class__.__name__}({self.url})"

    async def __aenter__(self):
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def _ensure_session(self) -> None:
        if not self._session:
            auth = BasicAuth(self.user, self.password or "") if self.user else None
            self._session = ClientSession(
                timeout=ClientTimeout(total=self.timeout),
                headers=self.headers,
                auth=auth,
            )

    async def close(self) -> None:
        if self._session:
            await self._session.close()
            self._session = None

    async def request(
        self,
        method: str,
        *path: str,
        params: Optional[Dict[str, str]] = None,
        json: Any = None,
    ) -> Any:
        """Execute an HTTP request and return the decoded JSON body.

        Raises:
            CouchDbError: (or a subclass) on any non-2xx response
            aiohttp.ClientError: On transport failure
        """
        await self._ensure_session()
        if not self._session:
            raise RuntimeError("Session not initialized")

        url = "/".join((self.url,) + path)
        logger.debug(f"{method.upper()} {url}")
        async with self._session.request(method, url, params=params, json=json) as response:
            if response.status >= 400:
                raise couch_db_error(response.status, await self._error_body(response))
            return await response.json(content_type=None)

    @staticmethod
    async def _error_body(response: ClientResponse) -> Dict[str, Any]:
        # proxies in front of CouchDB may answer with HTML or plain text
        try:
            data = await response.json(content_type=None)
        except ValueError:
            data = None
        if isinstance(data, dict):
            return data
        return {"error": response.reason, "reason": await response.text()}

    # SERVER API

    async def info(self) -> Dict[str, Any]:
        """Information about the running server."""
        return await self.request("get")

    async def all_databases(self) -> List[str]:
        return await self.request("get", "_all_dbs")

    # DATABASE API

    async def get_database(self, name: str) -> Dict[str, Any]:
        return await self.request("get", quote(name, safe=""))

    async def create_database(self, name: str) -> Dict[str, Any]:
        logger.info(f"Creating CouchDB database: {name}")
        return await self.request("put", quote(name, safe=""))

    async def delete_database(self, name: str) -> Dict[str, Any]:
        logger.info(f"Deleting CouchDB database: {name}")
        return await self.request("delete", quote(name, safe=""))

    def use(self, name: str) -> "CouchDatabase":
        return CouchDatabase(self, name)


class CouchDatabase(CouchDatabasePort):
    """Document operations scoped to one database of a :class:`CouchServer`."""

    def __init__(self, server: CouchServer, name: str):
        self.server = server
        self.name = name
        self._path = quote(name, safe="")

    def __repr__(self):
        return f"{self.__class__.__name__}({self.server.url}/{self.name})"

    async def insert(self, document: Dict[str, Any]) -> Dict[str, Any]:
        return await self.server.request("post", self._path, json=document)

    async def get(self, doc_id: str) -> Dict[str, Any]:
        return await self.server.request("get", self._path, quote_doc_id(doc_id))

    async def fetch(self, keys: List[str]) -> Dict[str, Any]:
        return await self.server.request(
            "post",
            self._path,
            "_all_docs",
            params={"include_docs": "true"},
            json={"keys": keys},
        )

    async def find(self, query: Dict[str, Any]) -> Dict[str, Any]:
        return await self.server.request("post", self._path, "_find", json=query)

    async def bulk(self, docs: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        return await self.server.request("post", self._path, "_bulk_docs", json={"docs": docs})

    async def destroy(self, doc_id: str, rev: str) -> Dict[str, Any]:
        return await self.server.request(
            "delete", self._path, quote_doc_id(doc_id), params={"rev": rev}
        )
