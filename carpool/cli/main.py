"""
Main CLI entry point for Carpool Core.

The CLI is a reference caller for the core: it reads event/carpool snapshots
from JSON files, runs the authority evaluator and removal executor, and
prints the results.
"""

import sys
from dataclasses import dataclass
from typing import Optional

import click

from carpool._version import __version__
from carpool.cli.removal import removal
from carpool.cli.roster import show
from carpool.config import CarpoolConfig, load_config
from carpool.exceptions import CarpoolError
from carpool.logging_config import setup_logging


@dataclass
class CLIContext:
    """Objects shared by all CLI commands."""
    config: CarpoolConfig
    config_path: Optional[str] = None


@click.group()
@click.version_option(version=__version__, prog_name="carpool")
@click.option(
    '--config',
    '-c',
    'config_path',
    default=None,
    envvar='CARPOOL_CONFIG',
    help='Path to configuration file (default: ~/.carpool/config.yaml)',
)
@click.option(
    '--log-level',
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'], case_sensitive=False),
    default=None,
    help='Override the configured log level',
)
@click.option(
    '--log-format',
    type=click.Choice(['json', 'console'], case_sensitive=False),
    default=None,
    help='Override the configured log format',
)
@click.pass_context
def cli(ctx, config_path: Optional[str], log_level: Optional[str], log_format: Optional[str]):
    """
    Carpool Core - driver removal authority for event carpools.

    Commands read a JSON snapshot holding an event and one of its carpools.
    """
    try:
        config = load_config(config_path)
    except CarpoolError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    json_format = config.logging.json_format
    if log_format is not None:
        json_format = log_format.lower() == 'json'

    setup_logging(
        level=log_level or config.logging.level,
        log_file=config.logging.file,
        json_format=json_format,
    )

    ctx.obj = CLIContext(config=config, config_path=config_path)


cli.add_command(show)
cli.add_command(removal)


if __name__ == '__main__':
    cli()
