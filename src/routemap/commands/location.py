"""Command group: create, list, inspect, and delete locations."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from routemap.commands._base import ROUTE_SPEC, RouteGroup
from routemap.services.routes import RouteService

if TYPE_CHECKING:
    from routemap.commands._context import AppContext

_LOCATION_EXAMPLES = """\
  routemap location create depot
  routemap location create depot -r market=4 -r harbor=1.5
  routemap location list
  routemap location routes depot
  routemap location delete depot"""


@click.group(cls=RouteGroup, examples=_LOCATION_EXAMPLES)
@click.pass_obj
def location(app: AppContext) -> None:
    """Create, list, inspect, and delete locations."""


@location.command(
    examples="""\
  routemap location create depot
  routemap location create depot --route market=4 --route harbor=1.5
  routemap --json location create depot -r market=4"""
)
@click.argument("name")
@click.option(
    "-r",
    "--route",
    "routes",
    multiple=True,
    type=ROUTE_SPEC,
    help="Outbound route as DEST=WEIGHT (repeatable).",
)
@click.pass_obj
def create(app: AppContext, name: str, routes: tuple[tuple[str, float], ...]) -> None:
    """Create a location, optionally with outbound routes."""
    app.emit(RouteService(app.store).create_location(name, dict(routes)))


@location.command(
    name="list",
    examples="""\
  routemap location list
  routemap --json location list""",
)
@click.pass_obj
def list_cmd(app: AppContext) -> None:
    """List every known location."""
    app.emit(RouteService(app.store).list_locations())


@location.command(
    examples="""\
  routemap location routes depot
  routemap --json location routes depot"""
)
@click.argument("name")
@click.pass_obj
def routes(app: AppContext, name: str) -> None:
    """List the locations directly reachable from NAME."""
    app.emit(RouteService(app.store).routes_from(name))


@location.command(
    examples="""\
  routemap location delete depot"""
)
@click.argument("name")
@click.pass_obj
def delete(app: AppContext, name: str) -> None:
    """Delete a location and every route into or out of it."""
    app.emit(RouteService(app.store).delete_location(name))
