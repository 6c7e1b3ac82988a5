"""Command-line interface for s3-db-sync."""

from commands.main import cli

__all__ = ["cli"]
