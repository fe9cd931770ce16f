"""
Error taxonomy for the stats engine.

NotFoundError and ForbiddenError are expected conditions the caller can
recover from; UnexpectedError (and its StoreError subclass) signals an
I/O or store failure. Each carries a stable ``code`` and an HTTP-style
``status_code`` so a transport layer can map them without string matching.
"""

from typing import Any


class StatsError(Exception):
    """Base exception for stats engine errors."""

    def __init__(
        self,
        message: str,
        code: str = "STATS_ERROR",
        status_code: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code

    def to_dict(self) -> dict[str, Any]:
        """Error payload in the shape used by the API layer."""
        return {"error": {"code": self.code, "message": self.message}}


class NotFoundError(StatsError):
    """Game, team, player or stat row does not exist."""

    def __init__(self, message: str):
        super().__init__(message, code="NOT_FOUND", status_code=404)


class ForbiddenError(StatsError):
    """Caller lacks access according to the authorization collaborator."""

    def __init__(self, message: str):
        super().__init__(message, code="FORBIDDEN", status_code=403)


class UnexpectedError(StatsError):
    """Unexpected failure while fetching or persisting data."""

    def __init__(self, message: str):
        super().__init__(message, code="UNEXPECTED", status_code=500)


class StoreError(UnexpectedError):
    """The persistence store raised an error."""

    def __init__(self, message: str, operation: str | None = None):
        super().__init__(message)
        self.operation = operation
