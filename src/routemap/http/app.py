"""FastAPI request adapter for the route store.

Routes::

    POST   /maps/                    create a location (name, optional routes_to)
    GET    /maps/                    list every location
    GET    /maps/{location}/         list direct successors of a location
    GET    /maps/{source}/{target}/  list every shortest route between two locations
    PUT    /maps/add/{location}/     add or overwrite routes ({destination: weight})
    PUT    /maps/delete/{location}/  remove routes ([destination, ...])
    DELETE /maps/{location}/         delete a location and every route touching it

Endpoints are plain ``def`` functions so FastAPI runs them in its
threadpool; the store's lock serializes them.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import APIRouter, Body, Depends, FastAPI, HTTPException, Request, Response
from pydantic import BaseModel, Field, StrictFloat

from routemap import __version__
from routemap.domain.routes import Route
from routemap.services.routes import RouteService

if TYPE_CHECKING:
    from routemap.config.settings import RouteSettings
    from routemap.infrastructure.graph.engine import RouteStore
    from routemap.services.result import ServiceResult

_STATUS_BY_CODE = {
    "ALREADY_EXISTS": 409,
    "NOT_FOUND": 404,
    "INVALID_INPUT": 422,
    "PERSISTENCE_FAILURE": 503,
}


class LocationIn(BaseModel):
    model_config = {"extra": "forbid"}

    name: str = Field(min_length=1)
    routes_to: dict[str, StrictFloat] | None = None


def require_json(request: Request) -> None:
    """Reject request bodies that are not ``application/json``."""
    content_type = request.headers.get("content-type", "")
    media_type = content_type.split(";", 1)[0].strip().lower()
    if media_type != "application/json":
        raise HTTPException(status_code=415, detail="requires application/json Content-Type")


def _unwrap(result: ServiceResult) -> ServiceResult:
    """Raise the HTTP error matching a failed result, else return it."""
    if not result.ok:
        message = result.error.message if result.error else "Unknown error"
        status = _STATUS_BY_CODE.get(result.error_code or "", 500)
        raise HTTPException(status_code=status, detail=message)
    return result


def build_maps_router(store: RouteStore) -> APIRouter:
    r = APIRouter(prefix="/maps", tags=["maps"])

    def service() -> RouteService:
        return RouteService(store)

    @r.post("/", status_code=204, dependencies=[Depends(require_json)])
    def create_location(payload: LocationIn, svc: RouteService = Depends(service)) -> Response:
        _unwrap(svc.create_location(payload.name, payload.routes_to))
        return Response(status_code=204)

    @r.get("/")
    def list_locations(svc: RouteService = Depends(service)) -> list[str]:
        return _unwrap(svc.list_locations()).data["items"]

    @r.put("/add/{location}/", status_code=204, dependencies=[Depends(require_json)])
    def add_routes(
        location: str,
        routes: dict[str, StrictFloat] = Body(...),
        svc: RouteService = Depends(service),
    ) -> Response:
        _unwrap(svc.add_routes(location, routes))
        return Response(status_code=204)

    @r.put("/delete/{location}/", status_code=204, dependencies=[Depends(require_json)])
    def remove_routes(
        location: str,
        destinations: list[str] = Body(...),
        svc: RouteService = Depends(service),
    ) -> Response:
        _unwrap(svc.remove_routes(location, destinations))
        return Response(status_code=204)

    @r.get("/{location}/")
    def routes_from(location: str, svc: RouteService = Depends(service)) -> list[str]:
        return _unwrap(svc.routes_from(location)).data["items"]

    @r.get("/{source}/{target}/")
    def routes_between(
        source: str,
        target: str,
        svc: RouteService = Depends(service),
    ) -> list[Route]:
        return _unwrap(svc.routes_between(source, target)).data["routes"]

    @r.delete("/{location}/", status_code=204)
    def delete_location(location: str, svc: RouteService = Depends(service)) -> Response:
        _unwrap(svc.delete_location(location))
        return Response(status_code=204)

    return r


def create_app(store: RouteStore) -> FastAPI:
    """Build the HTTP app around an already restored store."""

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        yield
        store.backend.close()

    app = FastAPI(title="routemap", version=__version__, lifespan=lifespan)
    app.state.store = store
    app.include_router(build_maps_router(store))
    return app


def create_app_from_settings(settings: RouteSettings) -> FastAPI:
    """Connect to the configured backend, restore the store, and build the app.

    Raises RestoreError if the backend cannot be read; the server must not
    start with a partial graph.
    """
    from routemap.infrastructure.graph.engine import RouteStore

    return create_app(RouteStore.from_settings(settings))
