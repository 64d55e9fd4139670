"""Core value types shared by the adapter layers."""

from dataclasses import dataclass
from typing import Any, Optional

NATIVE_ID_FIELD = "_id"


class ConfigurationError(ValueError):
    """Raised when a service is bound to the adapter without enough metadata."""


@dataclass
class ServiceSchema:
    """The service metadata an adapter needs to pick its database."""

    name: str
    collection: Optional[str] = None


def resolve_schema(service: Any) -> Any:
    """Return the object holding ``name``/``collection`` for ``service``.

    Services may expose the metadata directly or through a ``schema``
    attribute (the way service frameworks usually carry it).
    """
    schema = getattr(service, "schema", None)
    return schema if schema is not None else service


def schema_database_name(schema: Any) -> str:
    """Database name for a schema: ``"<name>-<collection>"``."""
    return f"{schema.name}-{schema.collection}"
