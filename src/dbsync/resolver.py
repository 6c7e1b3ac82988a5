"""Resolve backup objects from date-named folders in a bucket.

Backups are laid out as ``YYYY-MM-DD/db/<file>``. The resolver supports three
modes:

* ``FOLDER_PROBE``: discover date folders at the bucket root and probe each
  one's ``db/`` path, newest first, until enough objects are found.
* ``SUBSTRING``: walk a server-side prefix (optionally a date folder) and keep
  only keys containing ``db/``.
* ``LITERAL``: walk a server-side prefix and keep every key.
"""

import re
from datetime import datetime
from enum import Enum
from itertools import islice
from typing import Optional

import structlog

from dbsync.models import ObjectSummary, ResolveResult
from dbsync.s3_client import MAX_PREFIX_LISTING, S3Client
from utils.logging import get_logger

DATE_FOLDER_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}/")
DATE_FORMAT = "%Y-%m-%d"
DB_PATH = "db/"


class ResolveMode(str, Enum):
    """How candidate objects are located."""

    FOLDER_PROBE = "folder-probe"
    SUBSTRING = "substring"
    LITERAL = "literal"


def is_date_folder(prefix: str) -> bool:
    """Return True if the prefix looks like ``YYYY-MM-DD/``.

    Only the digit layout is checked, not whether the date exists.
    """
    return DATE_FOLDER_PATTERN.match(prefix) is not None


def parse_date(value: str) -> datetime:
    """Parse a strict ``YYYY-MM-DD`` calendar date.

    Raises:
        ValueError: If the value is not a valid date in that format
    """
    if not re.fullmatch(r"\d{4}-\d{2}-\d{2}", value):
        raise ValueError(f"Invalid date '{value}', expected YYYY-MM-DD")
    try:
        return datetime.strptime(value, DATE_FORMAT)
    except ValueError:
        # e.g. 2024-13-01 or 2023-02-29
        raise ValueError(f"Invalid date '{value}', not a calendar date") from None


def build_prefix(date: Optional[str] = None, prefix: Optional[str] = None) -> str:
    """Combine an optional date folder and literal prefix into a server-side prefix."""
    parts = []
    if date:
        parts.append(f"{date}/")
    if prefix:
        parts.append(prefix.lstrip("/"))
    return "".join(parts)


class PrefixResolver:
    """Collects candidate backup objects from a bucket."""

    def __init__(
        self,
        s3_client: S3Client,
        logger: Optional[structlog.BoundLogger] = None,
    ) -> None:
        """Initialize resolver.

        Args:
            s3_client: Client bound to the bucket to search
            logger: Optional logger instance
        """
        self.s3_client = s3_client
        self.logger = logger or get_logger("resolver")

    def resolve(
        self,
        max_keys: int,
        *,
        mode: ResolveMode = ResolveMode.FOLDER_PROBE,
        prefix: str = "",
    ) -> ResolveResult:
        """Resolve up to ``max_keys`` objects using the given mode.

        Args:
            max_keys: Maximum number of objects to return
            mode: Resolution mode
            prefix: Server-side prefix (ignored in folder-probe mode)

        Returns:
            ResolveResult; ``found`` is False when nothing matched

        Raises:
            S3Error: If a listing call fails
        """
        if max_keys <= 0:
            self.logger.debug("No results requested", max_keys=max_keys)
            return ResolveResult()

        if mode == ResolveMode.FOLDER_PROBE:
            return self.probe_date_folders(max_keys)
        return self.scan_prefix(
            max_keys,
            prefix=prefix,
            substring=DB_PATH if mode == ResolveMode.SUBSTRING else None,
        )

    def date_folders(self) -> list[str]:
        """Return date folders at the bucket root, newest first."""
        prefixes = self.s3_client.list_common_prefixes(
            delimiter="/",
            max_keys=MAX_PREFIX_LISTING,
        )
        folders = sorted((p for p in prefixes if is_date_folder(p)), reverse=True)
        self.logger.debug(
            "Date folders discovered",
            total_prefixes=len(prefixes),
            date_folders=len(folders),
        )
        return folders

    def probe_date_folders(self, max_keys: int) -> ResolveResult:
        """Probe ``<folder>db/`` in each date folder, newest first.

        Scanning stops as soon as ``max_keys`` objects have been collected,
        so older folders are only listed when newer ones come up short.
        """
        result = ResolveResult()
        if max_keys <= 0:
            return result

        for folder in self.date_folders():
            result.folders.append(folder)
            matches = self.s3_client.list_objects(f"{folder}{DB_PATH}", max_keys)
            if not matches:
                self.logger.debug("No backups in folder", folder=folder)
                continue

            result.total_seen += len(matches)
            result.objects.extend(matches)
            if len(result.objects) >= max_keys:
                del result.objects[max_keys:]
                break

        self.logger.debug(
            "Folder probe finished",
            folders_scanned=len(result.folders),
            found=len(result.objects),
            total_seen=result.total_seen,
        )
        return result

    def scan_prefix(
        self,
        max_keys: int,
        *,
        prefix: str = "",
        substring: Optional[str] = None,
    ) -> ResolveResult:
        """Walk a prefix in listing order, optionally keeping only keys containing ``substring``."""
        result = ResolveResult()
        if max_keys <= 0:
            return result

        objects = self.s3_client.iter_objects(prefix=prefix, page_size=max_keys)
        matches = (obj for obj in objects if substring is None or substring in obj.key)

        # One extra entry tells us whether the listing went on
        collected: list[ObjectSummary] = list(islice(matches, max_keys + 1))
        result.truncated = len(collected) > max_keys
        result.objects = collected[:max_keys]
        # The lookahead entry is not counted as seen
        result.total_seen = len(result.objects)

        self.logger.debug(
            "Prefix scan finished",
            prefix=prefix,
            substring=substring,
            found=len(result.objects),
            truncated=result.truncated,
        )
        return result
