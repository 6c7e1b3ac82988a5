"""db-sync: pick the latest database backup and download it."""

from pathlib import Path
from typing import Optional

import click

from commands.common import command_errors, resolve_settings, s3_options, show_buckets, show_objects
from dbsync.downloader import Downloader
from dbsync.resolver import PrefixResolver
from dbsync.s3_client import S3Client
from dbsync.selection import (
    SelectionStatus,
    build_selection_index,
    prompt_for_selection,
    select_non_interactive,
)
from utils.logging import get_logger
from utils.output import print_info, print_success, print_warning


@click.command("db-sync")
@s3_options
@click.option(
    "--download-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory to download into, created if missing (default: current directory)",
)
@click.option(
    "--gunzip/--no-gunzip",
    default=None,
    help="Decompress gzip/zip backups after download",
)
@click.option(
    "--select",
    "select",
    type=int,
    default=None,
    help="Download the object with this list number without prompting",
)
def db_sync(
    config_path: Optional[Path],
    region: Optional[str],
    profile: Optional[str],
    endpoint_url: Optional[str],
    bucket: Optional[str],
    max_keys: Optional[int],
    download_dir: Optional[Path],
    gunzip: Optional[bool],
    select: Optional[int],
) -> None:
    """Download a database backup from the newest date folders.

    Examples:

    \b
    # Choose interactively, then decompress
    dbsync db-sync --bucket my-backups --download-dir ./restore --gunzip

    \b
    # Batch mode: take the first (newest) backup
    dbsync db-sync --bucket my-backups --select 1
    """
    logger = get_logger("db_sync")

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
        target_dir = download_dir or config.defaults.download_dir or Path.cwd()
        decompress = config.defaults.gunzip if gunzip is None else gunzip

        result = PrefixResolver(s3_client, logger=logger).resolve(limit)
        show_objects(result, s3_config.bucket, limit)
        if not result.found:
            return

        index = build_selection_index(result.objects)
        if select is not None:
            selection = select_non_interactive(select, index)
        else:
            click.echo()
            selection = prompt_for_selection(index, on_invalid=print_warning)

        if selection.status == SelectionStatus.SKIPPED:
            print_info("Nothing selected, skipping download")
            return

        logger.info("Object selected", key=selection.key, index=selection.index)
        download = Downloader(s3_client, logger=logger).fetch(
            selection.key,
            target_dir,
            decompress=decompress,
        )

        print_success(f"Downloaded s3://{s3_config.bucket}/{download.key} to {download.path}")
        if download.decompressed_path is not None:
            print_success(f"Decompressed to {download.decompressed_path}")
        elif decompress:
            print_info("File is not compressed, left as downloaded")
