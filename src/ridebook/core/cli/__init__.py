"""Ridebook CLI: entry point for the zones report command."""

import click

from ridebook import __version__


@click.group()
@click.version_option(version=__version__, package_name="ridebook")
def main() -> None:
    """Ridebook: time in zone and ride metrics for recorded rides."""


# Register subcommands
from .zones_cmd import zones

main.add_command(zones)
