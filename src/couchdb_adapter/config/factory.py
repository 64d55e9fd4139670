"""Factory for creating configured CouchDB adapters."""

from typing import Any, Dict, Optional

from .settings import Settings, get_settings
from ..adapters.persistence.couchdb_adapter import CouchDbAdapter
from ..ports.db_adapter import DbAdapterPort


def create_adapter(
    service: Any,
    broker: Any = None,
    uri: Optional[str] = None,
    opts: Optional[Dict[str, Any]] = None,
    settings: Optional[Settings] = None,
) -> DbAdapterPort:
    """Create a CouchDB adapter and bind it to ``service``.

    Args:
        service: Object exposing ``name`` and ``collection`` (e.g. ServiceSchema)
        broker: Optional broker handed through to ``init``
        uri: Server URI (if None, settings.couchdb_url is used)
        opts: Driver options overriding the settings-derived ones
        settings: Settings instance (if None, creates new one)

    Returns:
        Initialized (not yet connected) adapter

    Raises:
        ConfigurationError: If the service has no collection
    """
    if settings is None:
        settings = get_settings()

    adapter = CouchDbAdapter(uri=uri or settings.couchdb_url, opts=opts, settings=settings)
    adapter.init(broker, service)
    return adapter
