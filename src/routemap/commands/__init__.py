"""Subcommand modules for routemap.

Provides register_commands() which uses deferred imports to keep
``routemap --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all command groups and standalone commands on the root CLI group."""
    from routemap.commands.location import location
    from routemap.commands.route import route
    from routemap.commands.serve import serve

    cli.add_command(location)
    cli.add_command(route)
    cli.add_command(serve)
