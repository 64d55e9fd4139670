"""CouchDB adapter for service data-access layers."""

from .adapters.persistence.couchdb_adapter import CouchDbAdapter
from .config.factory import create_adapter
from .core.models import ConfigurationError, ServiceSchema
from .infrastructure.couchdb.errors import ConflictError, CouchDbError, NotFoundError

__version__ = "0.1.0"

__all__ = [
    "CouchDbAdapter",
    "create_adapter",
    "ConfigurationError",
    "ServiceSchema",
    "CouchDbError",
    "ConflictError",
    "NotFoundError",
]
