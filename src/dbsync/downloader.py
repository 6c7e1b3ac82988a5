"""Download a selected backup object and optionally decompress it."""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import structlog

from dbsync.decompressor import Decompressor
from dbsync.exceptions import ObjectNotFoundError
from dbsync.s3_client import S3Client
from utils.logging import get_logger


@dataclass
class DownloadResult:
    """Where a download ended up on disk."""

    key: str
    path: Path
    decompressed_path: Optional[Path] = None

    @property
    def final_path(self) -> Path:
        return self.decompressed_path or self.path


def local_filename(key: str) -> str:
    """Local file name for an object key (its last path segment).

    Keys ending in ``/`` and ``.``/``..`` segments have no usable name.
    """
    name = key.rsplit("/", 1)[-1]
    if name in ("", ".", ".."):
        raise ValueError(f"Cannot derive a file name from key '{key}'")
    return name


class Downloader:
    """Fetches objects into a local directory."""

    def __init__(
        self,
        s3_client: S3Client,
        decompressor: Optional[Decompressor] = None,
        logger: Optional[structlog.BoundLogger] = None,
    ) -> None:
        self.s3_client = s3_client
        self.logger = logger or get_logger("downloader")
        self.decompressor = decompressor or Decompressor(logger=self.logger)

    def fetch(self, key: str, download_dir: Path, *, decompress: bool = False) -> DownloadResult:
        """Download ``key`` into ``download_dir``.

        Args:
            key: Object key to download
            download_dir: Target directory, created if missing
            decompress: Inflate gzip/zip content after download

        Returns:
            DownloadResult describing the local files

        Raises:
            ObjectNotFoundError: If the key does not exist
            S3Error: If the download fails
            DecompressionError: If decompression fails
        """
        if not self.s3_client.object_exists(key):
            raise ObjectNotFoundError(
                f"Object not found: {key}",
                context={"bucket": self.s3_client.bucket, "key": key},
            )

        download_dir.mkdir(parents=True, exist_ok=True)
        local_path = download_dir / local_filename(key)
        self.s3_client.download_file(key, local_path)
        self.logger.info("Backup downloaded", key=key, path=str(local_path))

        result = DownloadResult(key=key, path=local_path)
        if decompress:
            result.decompressed_path = self.decompressor.decompress(local_path)
        return result
