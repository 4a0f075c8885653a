"""serve — run the HTTP API with uvicorn."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from routemap.commands._base import RouteCommand
from routemap.domain.errors import RestoreError

if TYPE_CHECKING:
    from routemap.commands._context import AppContext


@click.command(
    cls=RouteCommand,
    examples="""\
  # Serve on the configured address (default localhost:1337)
  routemap serve

  # Custom bind address
  routemap serve --host 0.0.0.0 --port 8080""",
)
@click.option("--host", default=None, help="Bind address (default: [server] host).")
@click.option("--port", default=None, type=int, help="Listen port (default: [server] port).")
@click.pass_obj
def serve(app: AppContext, host: str | None, port: int | None) -> None:
    """Restore the store and serve the HTTP API."""
    import uvicorn

    from routemap.http.app import create_app_from_settings

    settings = app.settings
    try:
        api = create_app_from_settings(settings)
    except RestoreError as exc:
        click.echo(f"ERROR: {exc}", err=True)
        raise SystemExit(1) from exc

    bind_host = host or settings.server.host
    bind_port = port or settings.server.port
    click.echo(f"Starting the server on {bind_host}:{bind_port}", err=True)
    uvicorn.run(api, host=bind_host, port=bind_port, log_config=None)
