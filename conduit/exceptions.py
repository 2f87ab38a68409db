"""
Domain errors raised by the service layer.

The HTTP layer translates them in ``conduit.main``; everything else
(SQLAlchemy errors included) propagates untouched.
"""


class ConduitError(Exception):
    """Base class for errors the API reports to callers."""


class NotFoundError(ConduitError):
    """A user, article or profile required by the operation does not exist."""

    def __init__(self, entity: str, key) -> None:
        self.entity = entity
        self.key = key
        super().__init__(f"{entity} not found: {key!r}")


class ViewerRequiredError(ConduitError):
    """The operation needs an authenticated viewer and none was supplied."""

    def __init__(self, operation: str) -> None:
        self.operation = operation
        super().__init__(f"{operation} requires an authenticated user")
