"""Command group: add, remove, and query routes."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from routemap.commands._base import ROUTE_SPEC, RouteGroup
from routemap.services.routes import RouteService

if TYPE_CHECKING:
    from routemap.commands._context import AppContext

_ROUTE_EXAMPLES = """\
  routemap route add depot market=4 harbor=1.5
  routemap route remove depot market
  routemap route between depot harbor"""


@click.group(cls=RouteGroup, examples=_ROUTE_EXAMPLES)
@click.pass_obj
def route(app: AppContext) -> None:
    """Add, remove, and query routes between locations."""


@route.command(
    examples="""\
  routemap route add depot market=4
  routemap route add depot market=2 harbor=1.5"""
)
@click.argument("name")
@click.argument("routes", nargs=-1, required=True, type=ROUTE_SPEC)
@click.pass_obj
def add(app: AppContext, name: str, routes: tuple[tuple[str, float], ...]) -> None:
    """Add or overwrite routes from NAME."""
    app.emit(RouteService(app.store).add_routes(name, dict(routes)))


@route.command(
    examples="""\
  routemap route remove depot market
  routemap route remove depot market harbor"""
)
@click.argument("name")
@click.argument("destinations", nargs=-1, required=True)
@click.pass_obj
def remove(app: AppContext, name: str, destinations: tuple[str, ...]) -> None:
    """Remove routes from NAME to each DESTINATION."""
    app.emit(RouteService(app.store).remove_routes(name, destinations))


@route.command(
    examples="""\
  routemap route between depot harbor
  routemap --json route between depot harbor"""
)
@click.argument("source")
@click.argument("target")
@click.pass_obj
def between(app: AppContext, source: str, target: str) -> None:
    """Find every shortest route from SOURCE to TARGET."""
    app.emit(RouteService(app.store).routes_between(source, target))
