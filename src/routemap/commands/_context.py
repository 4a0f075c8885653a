"""AppContext — shared Click context for all commands.

Created once by the root CLI group and flows to all subcommands via
``@click.pass_obj``. Provides lazy store restoration and centralized
result emission (stdout/stderr routing + exit codes).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from routemap.domain.errors import RestoreError
from routemap.output.formatters import format_result

if TYPE_CHECKING:
    from routemap.config.settings import RouteSettings
    from routemap.infrastructure.graph.engine import RouteStore
    from routemap.services.result import ServiceResult


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    The store is restored from the backend on first use so ``--help`` and
    ``--version`` never touch Redis.
    """

    def __init__(self, settings: RouteSettings) -> None:
        self.settings = settings
        self._store: RouteStore | None = None

        from routemap.config.logging import configure_logging

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

        if settings.verbose:
            from routemap.services.telemetry import enable_telemetry

            enable_telemetry()

    @property
    def store(self) -> RouteStore:
        """The restored store (created lazily on first access).

        A restore failure is fatal: it is reported on stderr and the
        process exits with code 1.
        """
        if self._store is None:
            from routemap.infrastructure.graph.engine import RouteStore

            try:
                self._store = RouteStore.from_settings(self.settings)
            except RestoreError as exc:
                click.echo(f"ERROR: {exc}", err=True)
                raise SystemExit(1) from exc
        return self._store

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success (``result.ok``): writes to stdout, returns normally.
        * Failure: writes to stderr, exits with code 1.
        """
        output = format_result(result, json_output=self.settings.json_output)
        if result.ok:
            click.echo(output)
            if not self.settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
