"""RouteService — location CRUD and shortest-route queries.

Thin layer over :class:`RouteStore`: every method forwards to one store
operation and wraps the outcome (or the store's exception) in a
ServiceResult for the CLI and HTTP adapters. Mutation results report what
the store actually applied, so dropped self-routes and absent routes are
not counted.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from typing import TYPE_CHECKING, Any

from routemap.domain.errors import RouteMapError
from routemap.services.base import BaseService
from routemap.services.result import ServiceResult
from routemap.services.telemetry import trace_span, traced

if TYPE_CHECKING:
    from routemap.infrastructure.graph.engine import Change


class RouteService(BaseService):
    """Handles location and route operations."""

    @traced
    def create_location(
        self,
        name: str,
        routes_to: Mapping[str, float] | None = None,
    ) -> ServiceResult:
        """Create a location, optionally with outbound routes."""
        op = "create_location"
        try:
            change = self._mutate(op, self._store.add_location, name, routes_to)
        except RouteMapError as exc:
            return self._fail(op, exc)
        return self._ok(op, name=name, routes=change.routes)

    @traced
    def list_locations(self) -> ServiceResult:
        """List every known location."""
        items = self._store.get_locations()
        return self._ok("list_locations", count=len(items), items=items)

    @traced
    def routes_from(self, name: str) -> ServiceResult:
        """List the direct successors of *name*."""
        op = "routes_from"
        try:
            items = self._store.routes_from(name)
        except RouteMapError as exc:
            return self._fail(op, exc)
        return self._ok(op, location=name, count=len(items), items=items)

    @traced
    def routes_between(self, source: str, target: str) -> ServiceResult:
        """Find every shortest route from *source* to *target*."""
        op = "routes_between"
        with trace_span("shortest_paths", source=source, target=target) as span:
            try:
                routes = self._store.routes_between(source, target)
            except RouteMapError as exc:
                return self._fail(op, exc)
            if span:
                span.annotate("routes", len(routes))
                if routes:
                    span.annotate("weight", routes[0].weight)

        return self._ok(
            op,
            source=source,
            target=target,
            count=len(routes),
            routes=[route.model_dump() for route in routes],
        )

    @traced
    def add_routes(self, name: str, routes_to: Mapping[str, float]) -> ServiceResult:
        """Add or overwrite routes from *name*."""
        op = "add_routes"
        try:
            change = self._mutate(op, self._store.add_routes, name, routes_to)
        except RouteMapError as exc:
            return self._fail(op, exc)
        return self._ok(op, name=name, count=change.routes)

    @traced
    def remove_routes(self, name: str, to_list: Iterable[str]) -> ServiceResult:
        """Remove routes from *name* to each listed destination."""
        op = "remove_routes"
        try:
            change = self._mutate(op, self._store.remove_routes, name, list(to_list))
        except RouteMapError as exc:
            return self._fail(op, exc)
        return self._ok(op, name=name, count=change.routes)

    @traced
    def delete_location(self, name: str) -> ServiceResult:
        """Delete a location and every route touching it."""
        op = "delete_location"
        try:
            change = self._mutate(op, self._store.delete_location, name)
        except RouteMapError as exc:
            return self._fail(op, exc)
        return self._ok(op, name=name, routes=change.routes)

    @staticmethod
    def _mutate(op: str, mutation: Callable[..., Change], *args: Any) -> Change:
        """Run one store mutation inside a ``store.<op>`` span sized by its batch."""
        with trace_span(f"store.{op}") as span:
            change = mutation(*args)
            if span:
                span.annotate("routes", change.routes)
                span.annotate("writes", change.writes)
        return change
