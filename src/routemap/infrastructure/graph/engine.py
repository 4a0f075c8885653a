"""RouteStore — NetworkX route graph with write-through to a persistence backend.

The store owns two views of the same data:

- ``_routes``: every declared route, ``source -> {destination: weight}``.
  This is an exact mirror of the backend's per-location hashes.
- ``_graph``: a DiGraph of known locations and their *live* edges. A
  declared route becomes a live edge once its destination exists.

INVARIANT: Every public method holds ``_lock`` for its full duration,
including backend calls. Each mutation commits one backend transaction
first and only then changes memory, so a PersistenceFailure leaves
memory and backend unchanged.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING

import networkx as nx

from routemap.domain.errors import (
    AlreadyExistsError,
    InvalidInputError,
    NotFoundError,
    PersistenceFailure,
    RestoreError,
)
from routemap.domain.routes import (
    Route,
    decode_weight,
    encode_weight,
    normalize_routes,
    normalize_targets,
    validate_name,
)
from routemap.infrastructure.graph.paths import all_shortest_routes
from routemap.infrastructure.persistence import DEFAULT_NAMESPACE, Keyspace, open_backend

if TYPE_CHECKING:
    from routemap.config.settings import RouteSettings
    from routemap.infrastructure.persistence import PersistenceAdapter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Change:
    """Outcome of one mutation.

    ``routes`` counts declared routes written or removed; ``writes`` counts
    backend commands in the committed transaction.
    """

    routes: int = 0
    writes: int = 0


class RouteStore:
    """Thread-safe store of named locations and weighted routes."""

    def __init__(self, backend: PersistenceAdapter, *, namespace: str = DEFAULT_NAMESPACE) -> None:
        self._backend = backend
        self._keys = Keyspace(namespace)
        self._lock = threading.Lock()
        self._graph: nx.DiGraph = nx.DiGraph()
        self._routes: dict[str, dict[str, float]] = {}

    @property
    def backend(self) -> PersistenceAdapter:
        return self._backend

    # ------------------------------------------------------------------
    # Startup
    # ------------------------------------------------------------------

    @classmethod
    def restore(
        cls,
        backend: PersistenceAdapter,
        *,
        namespace: str = DEFAULT_NAMESPACE,
    ) -> RouteStore:
        """Rebuild a store from everything the backend holds.

        Reads and parses the whole keyspace before touching the graph, then
        creates every node before applying any route. Any read or parse
        failure raises RestoreError; no partly built store is returned.
        An empty backend yields an empty store.
        """
        store = cls(backend, namespace=namespace)
        keys = store._keys

        try:
            names = backend.set_members(keys.locations)
            declared: dict[str, dict[str, float]] = {}
            for name in names:
                validate_name(name)
                raw = backend.hash_get_all(keys.routes(name))
                declared[name] = {
                    to: decode_weight(weight) for to, weight in raw.items() if to != name
                }
        except (PersistenceFailure, InvalidInputError) as exc:
            raise RestoreError(f"Cannot restore route graph: {exc}") from exc

        with store._lock:
            for name in names:
                store._add_node(name)
            for name, routes in declared.items():
                store._apply_routes(name, routes)

        logger.info(
            "Restored %d locations and %d routes",
            store._graph.number_of_nodes(),
            sum(len(routes) for routes in declared.values()),
        )
        return store

    @classmethod
    def from_settings(cls, settings: RouteSettings) -> RouteStore:
        """Connect to the configured backend and restore the store from it."""
        try:
            backend = open_backend(settings)
        except PersistenceFailure as exc:
            raise RestoreError(f"Cannot open backend: {exc}") from exc
        return cls.restore(backend, namespace=settings.store.namespace)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_locations(self) -> list[str]:
        """Return every known location name, sorted."""
        with self._lock:
            return sorted(self._graph.nodes)

    def routes_from(self, name: str) -> list[str]:
        """Return the sorted names of locations reachable in one hop from *name*."""
        with self._lock:
            self._require(name)
            return sorted(self._graph.successors(name))

    def routes_between(self, source: str, target: str) -> list[Route]:
        """Return every minimal-weight route from *source* to *target*."""
        with self._lock:
            self._require(source)
            self._require(target)
            return all_shortest_routes(self._graph, source, target)

    def snapshot(self) -> dict[str, dict[str, float]]:
        """Return a copy of every declared route keyed by source location."""
        with self._lock:
            return {name: dict(routes) for name, routes in self._routes.items()}

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add_location(self, name: str, routes_to: Mapping[str, float] | None = None) -> Change:
        """Create *name*, optionally declaring routes from it in the same call.

        Raises AlreadyExistsError if the name is taken. Self-routes are
        dropped silently and not counted in the returned Change.
        """
        validate_name(name)
        routes = normalize_routes(name, routes_to)

        with self._lock:
            if name in self._graph:
                raise AlreadyExistsError(name)

            with self._backend.transaction() as batch:
                batch.set_add(self._keys.locations, name)
                batch.delete(self._keys.routes(name))
                for to, weight in routes.items():
                    batch.hash_set(self._keys.routes(name), to, encode_weight(weight))
                writes = len(batch)

            self._add_node(name)
            self._apply_routes(name, routes)
            logger.debug("Added location %s with %d routes", name, len(routes))
            return Change(routes=len(routes), writes=writes)

    def add_routes(self, name: str, routes_to: Mapping[str, float]) -> Change:
        """Merge *routes_to* into the routes from *name*, overwriting weights."""
        validate_name(name)
        routes = normalize_routes(name, routes_to)

        with self._lock:
            self._require(name)
            if not routes:
                return Change()

            with self._backend.transaction() as batch:
                for to, weight in routes.items():
                    batch.hash_set(self._keys.routes(name), to, encode_weight(weight))
                writes = len(batch)

            self._apply_routes(name, routes)
            logger.debug("Added %d routes from %s", len(routes), name)
            return Change(routes=len(routes), writes=writes)

    def remove_routes(self, name: str, to_list: Iterable[str]) -> Change:
        """Remove routes from *name* to each listed destination.

        Destinations without a route are ignored and not counted.
        """
        validate_name(name)
        targets = normalize_targets(name, to_list)

        with self._lock:
            self._require(name)
            declared = self._routes[name]
            present = [to for to in targets if to in declared]
            if not present:
                return Change()

            with self._backend.transaction() as batch:
                for to in present:
                    batch.hash_delete(self._keys.routes(name), to)
                writes = len(batch)

            for to in present:
                del declared[to]
                if self._graph.has_edge(name, to):
                    self._graph.remove_edge(name, to)
            logger.debug("Removed %d routes from %s", len(present), name)
            return Change(routes=len(present), writes=writes)

    def delete_location(self, name: str) -> Change:
        """Delete *name* together with every route into or out of it."""
        validate_name(name)

        with self._lock:
            self._require(name)
            inbound = [
                other for other, routes in self._routes.items() if other != name and name in routes
            ]

            with self._backend.transaction() as batch:
                batch.set_remove(self._keys.locations, name)
                batch.delete(self._keys.routes(name))
                for other in inbound:
                    batch.hash_delete(self._keys.routes(other), name)
                writes = len(batch)

            dropped = len(self._routes.pop(name)) + len(inbound)
            for other in inbound:
                del self._routes[other][name]
            self._graph.remove_node(name)
            logger.debug("Deleted location %s and %d routes", name, dropped)
            return Change(routes=dropped, writes=writes)

    # ------------------------------------------------------------------
    # Internals (caller holds the lock)
    # ------------------------------------------------------------------

    def _require(self, name: str) -> None:
        if name not in self._graph:
            raise NotFoundError(name)

    def _add_node(self, name: str) -> None:
        """Add *name* and bring any routes already declared toward it to life."""
        self._graph.add_node(name)
        self._routes[name] = {}
        for source, declared in self._routes.items():
            if name in declared:
                self._graph.add_edge(source, name, weight=declared[name])

    def _apply_routes(self, name: str, routes: Mapping[str, float]) -> None:
        declared = self._routes[name]
        for to, weight in routes.items():
            declared[to] = weight
            if to in self._graph:
                self._graph.add_edge(name, to, weight=weight)
