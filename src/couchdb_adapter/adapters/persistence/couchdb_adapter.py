"""CouchDB implementation of the DbAdapterPort.

The adapter reshapes the generic CRUD calls of a service layer into driver
calls against one CouchDB database named ``"<service>-<collection>"``.
Driver errors (not found, conflicts, transport failures) are not caught or
translated; they reach the caller unchanged.
"""

import copy
import logging
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import unquote, urlsplit, urlunsplit

from ...config.settings import Settings, get_settings
from ...core.filters import normalize_selector, normalize_sort
from ...core.models import (
    NATIVE_ID_FIELD,
    ConfigurationError,
    resolve_schema,
    schema_database_name,
)
from ...infrastructure.couchdb.client import CouchServer
from ...infrastructure.couchdb.errors import NotFoundError, PreconditionFailedError
from ...ports.couch_driver import CouchDatabasePort, CouchServerPort
from ...ports.db_adapter import DbAdapterPort

logger = logging.getLogger(__name__)

FIND_KEYS = {"query", "limit", "offset", "sort", "fields"}

SCHEME_MAP = {
    "couchdb": "http",
    "http+couchdb": "http",
    "couchdbs": "https",
    "https+couchdb": "https",
    "http": "http",
    "https": "https",
}


def resolve_server_url(uri: Optional[str], default: str) -> Tuple[str, Dict[str, str]]:
    """Turn an adapter URI into an HTTP base URL plus auth options.

    Args:
        uri: ``couchdb://``, ``http+couchdb://``, ``https+couchdb://`` or plain
            ``http(s)://`` URI. Empty or None selects ``default``
        default: Fallback server URL

    Returns:
        Tuple of (base_url, auth_options) where auth_options holds ``user``
        and ``password`` when the URI carries credentials
    """
    parts = urlsplit(uri or default)
    scheme = SCHEME_MAP.get(parts.scheme.lower())
    if scheme is None:
        raise ConfigurationError(f"Unsupported CouchDB URI scheme: {parts.scheme!r}")

    auth: Dict[str, str] = {}
    if parts.username:
        auth["user"] = unquote(parts.username)
        auth["password"] = unquote(parts.password or "")

    netloc = parts.hostname or "localhost"
    if ":" in netloc:
        netloc = f"[{netloc}]"
    if parts.port:
        netloc = f"{netloc}:{parts.port}"
    url = urlunsplit((scheme, netloc, parts.path.rstrip("/"), "", ""))
    return url, auth


class CouchDbAdapter(DbAdapterPort):
    """CouchDB adapter for the service data-access layer."""

    def __init__(
        self,
        uri: Optional[str] = None,
        opts: Optional[Dict[str, Any]] = None,
        settings: Optional[Settings] = None,
    ):
        """Create the adapter. No I/O happens until :meth:`connect`.

        Args:
            uri: Server URI, e.g. ``couchdb://localhost:5984``
            opts: Options forwarded to the driver (user, password, timeout, headers)
            settings: Settings instance (if None, loaded from the environment)
        """
        self.uri = uri
        self.opts = opts
        self.settings = settings or get_settings()
        self.broker: Any = None
        self.service: Any = None
        self.db: Optional[CouchDatabasePort] = None
        self._server: Optional[CouchServerPort] = None

    def init(self, broker: Any, service: Any) -> None:
        self.broker = broker
        self.service = service

        if not getattr(resolve_schema(service), "collection", None):
            raise ConfigurationError("Missing `collection` definition in schema of service!")

    @property
    def database_name(self) -> str:
        if self.service is None:
            raise RuntimeError("Adapter is not initialized; call init() first")
        return schema_database_name(resolve_schema(self.service))

    async def connect(self) -> None:
        db_name = self.database_name
        url, auth = resolve_server_url(self.uri, self.settings.couchdb_url)
        opts = {**self.settings.driver_options(), **auth, **(self.opts or {})}

        if self._server is not None:
            self.db = None
            await self._server.close()
            self._server = None

        server = CouchServer(url, **opts)
        try:
            try:
                await server.get_database(db_name)
            except NotFoundError:
                try:
                    await server.create_database(db_name)
                except PreconditionFailedError:
                    logger.debug(f"Database {db_name} was created concurrently")
        except BaseException:
            await server.close()
            raise

        self._server = server
        self.db = server.use(db_name)
        logger.info(f"Connected to CouchDB database {db_name} at {url}")

    async def disconnect(self) -> None:
        self.db = None
        if self._server is not None:
            await self._server.close()
            self._server = None
            logger.info("Disconnected from CouchDB")

    def _require_db(self) -> CouchDatabasePort:
        if self.db is None:
            raise RuntimeError("Adapter is not connected; call connect() first")
        return self.db

    # QUERIES

    async def find(self, filters: Optional[Dict[str, Any]] = None) -> List[Dict]:
        """Find all entities by filters.

        Available filter props:
            - query: selector; bare values are matched by equality
            - limit: maximum number of documents
            - offset: number of matches to skip
            - sort: ``"-votes title"``, a list of fields or a field/direction mapping
            - fields: projection list

        Without a limit every match is returned, following ``_find``
        bookmarks page by page.
        """
        db = self._require_db()
        filters = filters or {}

        ignored = sorted(set(filters) - FIND_KEYS)
        if ignored:
            logger.warning(f"Ignoring unsupported filter keys: {ignored}")

        query: Dict[str, Any] = {"selector": normalize_selector(filters.get("query"))}
        if filters.get("offset"):
            query["skip"] = int(filters["offset"])
        sort = normalize_sort(filters.get("sort"))
        if sort:
            query["sort"] = sort
        if filters.get("fields"):
            query["fields"] = list(filters["fields"])

        limit = filters.get("limit")
        if limit is not None:
            query["limit"] = int(limit)
            result = await db.find(query)
            return result.get("docs", [])
        return await self._find_all(db, query)

    async def _find_all(self, db: CouchDatabasePort, query: Dict[str, Any]) -> List[Dict]:
        page_size = self.settings.couchdb_page_size
        docs: List[Dict] = []
        page_query = dict(query, limit=page_size)
        while True:
            result = await db.find(page_query)
            page = result.get("docs", [])
            docs.extend(page)
            bookmark = result.get("bookmark")
            if len(page) < page_size or not bookmark:
                return docs
            # skip is relative to the bookmark, so it only applies to the first page
            page_query.pop("skip", None)
            page_query["bookmark"] = bookmark

    async def find_one(self, query: Dict[str, Any]) -> Optional[Dict]:
        docs = await self.find({"query": query, "limit": 1})
        return docs[0] if docs else None

    async def find_by_id(self, _id: str) -> Dict:
        return await self._require_db().get(_id)

    async def find_by_ids(self, id_list: List[str]) -> List[Dict]:
        if not id_list:
            return []
        result = await self._require_db().fetch(list(id_list))
        return [row["doc"] for row in result.get("rows", []) if row.get("doc")]

    async def count(self, filters: Optional[Dict[str, Any]] = None) -> int:
        # Counts a full fetch of the matches rather than asking the server
        # for an indexed count; Mango has no count-only endpoint.
        docs = await self.find(filters)
        return len(docs)

    # WRITES

    async def insert(self, entity: Dict[str, Any]) -> Dict:
        result = await self._require_db().insert(entity)
        return await self.find_by_id(result["id"])

    async def insert_many(self, entities: List[Dict[str, Any]]) -> List[Dict]:
        if not entities:
            return []
        result = await self._require_db().bulk(list(entities))
        for row in result:
            if row.get("error"):
                logger.warning(
                    f"Bulk insert of {row.get('id')} failed: {row['error']} ({row.get('reason')})"
                )
        ids = [row["id"] for row in result if row.get("id")]
        return await self.find_by_ids(ids)

    async def update_many(self, query: Dict[str, Any], update: Dict[str, Any]) -> int:
        docs = await self.find({"query": query})
        if not docs:
            return 0
        merged = [{**doc, **update} for doc in docs]
        result = await self._require_db().bulk(merged)
        logger.debug(f"update_many submitted {len(merged)} documents")
        return len(result)

    async def update_by_id(self, _id: str, update: Dict[str, Any]) -> Dict:
        doc = await self.find_by_id(_id)
        result = await self._require_db().insert({**doc, **update})
        return await self.find_by_id(result["id"])

    async def remove_many(self, query: Dict[str, Any]) -> int:
        docs = await self.find({"query": query})
        if not docs:
            return 0
        tombstones = [
            {"_id": doc["_id"], "_rev": doc["_rev"], "_deleted": True} for doc in docs
        ]
        result = await self._require_db().bulk(tombstones)
        logger.debug(f"remove_many submitted {len(tombstones)} deletions")
        return len(result)

    async def remove_by_id(self, _id: str) -> Dict:
        doc = await self.find_by_id(_id)
        await self._require_db().destroy(doc["_id"], doc["_rev"])
        return doc

    async def clear(self) -> int:
        return await self.remove_many({})

    # ENTITY HELPERS

    def entity_to_object(self, entity: Dict[str, Any]) -> Dict:
        return copy.deepcopy(entity)

    def before_save_transform_id(self, entity: Dict[str, Any], id_field: str) -> Dict:
        """Transform ``id_field`` into CouchDB's ``_id``.

        Returns:
            A modified deep copy of ``entity``
        """
        new_entity = copy.deepcopy(entity)
        if id_field != NATIVE_ID_FIELD and id_field in new_entity:
            new_entity[NATIVE_ID_FIELD] = new_entity.pop(id_field)
        return new_entity

    def after_retrieve_transform_id(self, entity: Dict[str, Any], id_field: str) -> Dict:
        """Transform CouchDB's ``_id`` into the user defined ``id_field``.

        Returns:
            A modified copy of ``entity`` (unchanged when ``id_field`` is ``_id``)
        """
        new_entity = dict(entity)
        if id_field != NATIVE_ID_FIELD and NATIVE_ID_FIELD in new_entity:
            new_entity[id_field] = new_entity.pop(NATIVE_ID_FIELD)
        return new_entity
