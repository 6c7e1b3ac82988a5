"""CLI entry point for s3-db-sync."""

import click

from commands.db_list import db_list
from commands.db_sync import db_sync
from dbsync import __version__
from utils.logging import configure_logging


@click.group()
@click.version_option(__version__, prog_name="dbsync")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    help="Log level (default: WARNING)",
)
@click.option(
    "--log-format",
    default="console",
    type=click.Choice(["console", "json"], case_sensitive=False),
    help="Log format: 'console' for human-readable output, 'json' for structured logs (default: console)",
)
@click.option("--verbose", "-v", is_flag=True, help="Verbose output (same as --log-level DEBUG)")
def cli(log_level: str, log_format: str, verbose: bool) -> None:
    """Find and download database backups stored in S3.

    Backups are expected under date folders, e.g. 2024-02-29/db/app.sql.gz.
    """
    configure_logging(
        log_level="DEBUG" if verbose else log_level.upper(),
        log_format=log_format.lower(),
    )


cli.add_command(db_list)
cli.add_command(db_sync)


if __name__ == "__main__":
    cli()
