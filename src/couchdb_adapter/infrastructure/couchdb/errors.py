"""CouchDB HTTP error hierarchy."""

from typing import Any, Dict, Optional


class CouchDbError(Exception):
    """Error returned by the CouchDB server."""

    def __init__(self, status: int, error: Optional[str] = None, reason: Optional[str] = None):
        self.status = status
        self.error = error
        self.reason = reason
        super().__init__(f"{status} {error}: {reason}")

    @property
    def status_code(self) -> int:
        return self.status


class BadRequestError(CouchDbError):
    pass


class UnauthorizedError(CouchDbError):
    pass


class ForbiddenError(CouchDbError):
    pass


class NotFoundError(CouchDbError):
    pass


class ConflictError(CouchDbError):
    pass


class PreconditionFailedError(CouchDbError):
    pass


error_classes = {
    400: BadRequestError,
    401: UnauthorizedError,
    403: ForbiddenError,
    404: NotFoundError,
    409: ConflictError,
    412: PreconditionFailedError,
}


def couch_db_error(status: int, body: Optional[Dict[str, Any]] = None) -> CouchDbError:
    """Build the exception matching an HTTP ``status`` and JSON error ``body``."""
    body = body or {}
    error_class = error_classes.get(status, CouchDbError)
    return error_class(status, body.get("error"), body.get("reason"))
