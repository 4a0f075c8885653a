"""BaseService — abstract foundation for routemap services.

Every service receives a :class:`RouteStore` at construction time and
translates the store's exceptions into failed ServiceResults.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from routemap.domain.errors import (
    AlreadyExistsError,
    NotFoundError,
    PersistenceFailure,
    RouteMapError,
)
from routemap.services.result import ServiceError, ServiceResult

if TYPE_CHECKING:
    from routemap.infrastructure.graph.engine import RouteStore

logger = logging.getLogger(__name__)


class BaseService:
    """Abstract base for service-layer classes.

    Usage::

        class RouteService(BaseService):
            def list_locations(self) -> ServiceResult:
                return self._ok("list_locations", items=self._store.get_locations())
    """

    def __init__(self, store: RouteStore) -> None:
        self._store = store

    @staticmethod
    def _ok(op: str, **data: Any) -> ServiceResult:
        return ServiceResult(ok=True, op=op, data=data)

    @staticmethod
    def _fail(op: str, exc: RouteMapError) -> ServiceResult:
        """Convert a store exception into a failed ServiceResult."""
        detail: dict[str, Any] = {}
        if isinstance(exc, (AlreadyExistsError, NotFoundError)):
            detail["name"] = exc.name
        if isinstance(exc, PersistenceFailure):
            logger.warning("%s failed on the backend: %s", op, exc)
        return ServiceResult(
            ok=False,
            op=op,
            error=ServiceError(code=exc.code, message=str(exc), detail=detail),
        )
