"""db-list: show buckets or the database backups inside one."""

from pathlib import Path
from typing import Optional

import click

from commands.common import (
    command_errors,
    resolve_settings,
    s3_options,
    show_buckets,
    show_objects,
    validate_date,
)
from dbsync.resolver import PrefixResolver, ResolveMode, build_prefix
from dbsync.s3_client import S3Client
from utils.logging import get_logger


@click.command("db-list")
@s3_options
@click.option("--prefix", help="Server-side key prefix to list under (disables the date-folder probe)")
@click.option(
    "--date",
    "date",
    metavar="YYYY-MM-DD",
    callback=validate_date,
    help="Only list backups in this date folder",
)
@click.option(
    "--no-date",
    is_flag=True,
    help="List from the bucket root instead of probing date folders",
)
@click.option(
    "--all",
    "show_all",
    is_flag=True,
    help="Include every object, not only those under a db/ path",
)
def db_list(
    config_path: Optional[Path],
    region: Optional[str],
    profile: Optional[str],
    endpoint_url: Optional[str],
    bucket: Optional[str],
    max_keys: Optional[int],
    prefix: Optional[str],
    date: Optional[str],
    no_date: bool,
    show_all: bool,
) -> None:
    """List S3 buckets, or database backups in a bucket.

    Without --prefix, --date, --no-date or --all, date folders (YYYY-MM-DD/)
    are probed newest first for objects under their db/ path.

    Examples:

    \b
    # All buckets
    dbsync db-list --profile prod

    \b
    # Latest backups in a bucket
    dbsync db-list --bucket my-backups --max-keys 10

    \b
    # Backups of one day
    dbsync db-list --bucket my-backups --date 2024-02-29
    """
    logger = get_logger("db_list")

    with command_errors(logger):
        config, s3_config = resolve_settings(
            config_path,
            bucket=bucket,
            region=region,
            profile=profile,
            endpoint_url=endpoint_url,
        )
        s3_client = S3Client(s3_config, logger=logger)

        if not s3_config.bucket:
            show_buckets(s3_client)
            return

        limit = config.defaults.max_keys if max_keys is None else max_keys
        if show_all:
            mode = ResolveMode.LITERAL
        elif prefix or date or no_date:
            mode = ResolveMode.SUBSTRING
        else:
            mode = ResolveMode.FOLDER_PROBE
        server_prefix = build_prefix(date=date, prefix=prefix)

        logger.debug(
            "Listing backups",
            bucket=s3_config.bucket,
            mode=mode.value,
            prefix=server_prefix,
            max_keys=limit,
        )
        result = PrefixResolver(s3_client, logger=logger).resolve(
            limit,
            mode=mode,
            prefix=server_prefix,
        )
        show_objects(result, s3_config.bucket, limit)
