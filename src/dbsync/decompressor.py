"""Decompression of downloaded backup archives."""

import gzip
import shutil
import zipfile
import zlib
from pathlib import Path
from typing import Optional

import structlog

from dbsync.exceptions import DecompressionError
from utils.logging import get_logger

GZIP_MAGIC = b"\x1f\x8b"
ZIP_MAGIC = b"PK\x03\x04"
# Appended when a gzip file does not end in .gz
DECOMPRESSED_SUFFIX = ".out"


def read_signature(path: Path, length: int = 4) -> bytes:
    """Return the first ``length`` bytes of a file."""
    with open(path, "rb") as f:
        return f.read(length)


def gunzip_target(path: Path) -> Path:
    """Sibling path a gzip file is decompressed to."""
    if path.suffix.lower() == ".gz":
        return path.with_suffix("")
    return path.with_name(path.name + DECOMPRESSED_SUFFIX)


class Decompressor:
    """Inflates gzip and zip archives next to the original file."""

    def __init__(
        self,
        chunk_size: int = 1024 * 1024,
        logger: Optional[structlog.BoundLogger] = None,
    ) -> None:
        """Initialize decompressor.

        Args:
            chunk_size: Bytes copied per read when streaming gzip content
            logger: Optional logger instance
        """
        if chunk_size <= 0:
            raise ValueError(f"Chunk size must be positive, got {chunk_size}")

        self.chunk_size = chunk_size
        self.logger = logger or get_logger("decompressor")

    def detect_format(self, path: Path) -> Optional[str]:
        """Return ``"gzip"``, ``"zip"`` or None from the file signature."""
        signature = read_signature(path)
        if signature[:2] == GZIP_MAGIC:
            return "gzip"
        if signature == ZIP_MAGIC:
            return "zip"
        return None

    def decompress(self, path: Path) -> Optional[Path]:
        """Decompress a file if it is a recognised archive.

        Returns:
            Path of the decompressed output, or None if the file is not compressed

        Raises:
            DecompressionError: If the archive cannot be decompressed
        """
        archive_format = self.detect_format(path)
        if archive_format == "gzip":
            return self.gunzip(path)
        if archive_format == "zip":
            return self.unzip(path)

        self.logger.debug("File is not compressed", path=str(path))
        return None

    def gunzip(self, path: Path) -> Path:
        """Stream-decompress a gzip file and remove it once fully inflated.

        A failure part way through may leave a partial output file behind,
        but the compressed original is never removed in that case.

        Raises:
            DecompressionError: If decompression fails
        """
        target = gunzip_target(path)
        try:
            with gzip.open(path, "rb") as source, open(target, "wb") as output:
                shutil.copyfileobj(source, output, self.chunk_size)
        except (OSError, EOFError, zlib.error) as e:
            raise DecompressionError(
                f"Decompression failed: {e}",
                context={"source": str(path), "target": str(target)},
            ) from e

        compressed_size = path.stat().st_size
        path.unlink()
        self.logger.debug(
            "Gzip decompression completed",
            source=str(path),
            target=str(target),
            compressed_size=compressed_size,
            uncompressed_size=target.stat().st_size,
        )
        return target

    def unzip(self, path: Path) -> Path:
        """Extract a zip archive into a sibling directory named after the file.

        Raises:
            DecompressionError: If extraction fails
        """
        target = path.with_suffix("") if path.suffix.lower() == ".zip" else path.with_name(path.name + "_extracted")
        try:
            with zipfile.ZipFile(path) as archive:
                archive.extractall(target)
                members = len(archive.namelist())
        except (OSError, zipfile.BadZipFile, zlib.error) as e:
            raise DecompressionError(
                f"Extraction failed: {e}",
                context={"source": str(path), "target": str(target)},
            ) from e

        path.unlink()
        self.logger.debug(
            "Zip extraction completed",
            source=str(path),
            target=str(target),
            members=members,
        )
        return target
