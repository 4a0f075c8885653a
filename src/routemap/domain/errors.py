"""Error taxonomy for the route store.

INVARIANT: The store raises these unchanged to its caller; it never
retries or compensates. Only RestoreError is fatal to the process.
"""

from __future__ import annotations


class RouteMapError(Exception):
    """Base class for every routemap error."""

    code = "ERROR"


class AlreadyExistsError(RouteMapError):
    """A location with the requested name already exists."""

    code = "ALREADY_EXISTS"

    def __init__(self, name: str) -> None:
        super().__init__(f"{name} already exists")
        self.name = name


class NotFoundError(RouteMapError):
    """An operation referenced a location the store does not know."""

    code = "NOT_FOUND"

    def __init__(self, name: str) -> None:
        super().__init__(f"{name} does not exist")
        self.name = name


class InvalidInputError(RouteMapError):
    """A name or weight failed validation."""

    code = "INVALID_INPUT"


class PersistenceFailure(RouteMapError):
    """A backend read or write failed."""

    code = "PERSISTENCE_FAILURE"


class RestoreError(RouteMapError):
    """The store could not be rebuilt from the backend at startup."""

    code = "RESTORE_FAILED"
