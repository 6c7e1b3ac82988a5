"""Options and helpers shared by the CLI commands."""

import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Callable, Optional

import click
import structlog

from dbsync.config import DbSyncConfig, S3Config, load_config
from dbsync.exceptions import DbSyncError, S3Error
from dbsync.models import BucketSummary, ResolveResult
from dbsync.resolver import parse_date
from dbsync.s3_client import S3Client
from utils import format_size, format_timestamp
from utils.output import print_error, print_header, print_info, print_table, print_warning


def s3_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Attach the connection options every command accepts."""
    options = [
        click.option(
            "--config",
            "config_path",
            type=click.Path(exists=True, dir_okay=False, path_type=Path),
            envvar="DBSYNC_CONFIG",
            help="Path to YAML configuration file (env: DBSYNC_CONFIG)",
        ),
        click.option("--region", help="AWS region (default: from profile or environment)"),
        click.option("--profile", help="Named AWS profile to authenticate with"),
        click.option(
            "--endpoint-url",
            help="Custom endpoint for S3-compatible storage (e.g. http://localhost:9000)",
        ),
        click.option("--bucket", help="Bucket to search; lists all buckets when omitted"),
        click.option(
            "--max-keys",
            type=click.IntRange(min=0),
            default=None,
            help="Maximum number of objects to list (default: 25)",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


class InvalidDate(click.BadParameter):
    """Rejected ``--date`` value; exits 1 like every other input error."""

    exit_code = 1


def validate_date(ctx: click.Context, param: click.Parameter, value: Optional[str]) -> Optional[str]:
    """Click callback accepting only a real ``YYYY-MM-DD`` calendar date."""
    if value is None:
        return value
    try:
        parse_date(value)
    except ValueError as e:
        raise InvalidDate(str(e), ctx=ctx, param=param) from None
    return value


def resolve_settings(
    config_path: Optional[Path],
    *,
    bucket: Optional[str],
    region: Optional[str],
    profile: Optional[str],
    endpoint_url: Optional[str],
) -> tuple[DbSyncConfig, S3Config]:
    """Load the config file and apply command-line overrides."""
    config = load_config(config_path)
    s3_config = config.merged_s3(
        bucket=bucket,
        region=region,
        profile=profile,
        endpoint=endpoint_url,
    )
    return config, s3_config


@contextmanager
def command_errors(logger: structlog.BoundLogger) -> Iterator[None]:
    """Map failures to a labelled message and a non-zero exit code."""
    try:
        yield
    except (click.ClickException, click.Abort):
        raise
    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        sys.exit(130)
    except S3Error as e:
        logger.error("Object store request failed", error=str(e), **e.context)
        print_error(e.message, label="AWS Error")
        sys.exit(1)
    except (DbSyncError, ValueError) as e:
        logger.error("Command failed", error=str(e))
        print_error(getattr(e, "message", str(e)))
        sys.exit(1)
    except Exception as e:
        logger.error("Command failed", error=str(e), exc_info=True)
        print_error(getattr(e, "message", str(e)))
        sys.exit(1)


def show_buckets(s3_client: S3Client) -> list[BucketSummary]:
    """List every bucket in a table."""
    buckets = s3_client.list_buckets()
    print_header("S3 Buckets")
    if not buckets:
        print_warning("No buckets found")
        return buckets

    print_table(
        ["Name", "Created"],
        [[bucket.name, format_timestamp(bucket.creation_date)] for bucket in buckets],
    )
    click.echo()
    print_info(f"{len(buckets)} bucket(s). Pass --bucket to list backups in one of them.")
    return buckets


def show_objects(result: ResolveResult, bucket: str, max_keys: int) -> None:
    """Render resolved objects with their 1-based selection index."""
    print_header(f"Backups in s3://{bucket}")
    if not result.found:
        print_warning("No database backups found")
        return

    print_table(
        ["#", "Key", "Size", "Last Modified"],
        [
            [position, obj.key, format_size(obj.size), format_timestamp(obj.last_modified)]
            for position, obj in enumerate(result.objects, start=1)
        ],
        align=[">", "<", ">", "<"],
    )
    click.echo()
    if result.truncated:
        print_info(f"Showing the first {len(result.objects)} object(s); more are available (raise --max-keys)")
    elif result.hidden:
        print_info(
            f"Showing {len(result.objects)} of {result.total_seen} object(s) "
            f"({result.hidden} hidden by --max-keys {max_keys})"
        )
    else:
        print_info(f"{len(result.objects)} object(s)")
