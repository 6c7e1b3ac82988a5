"""s3-db-sync - Locate and retrieve database backups stored in S3."""

__version__ = "0.1.0"

from dbsync.decompressor import Decompressor
from dbsync.downloader import Downloader
from dbsync.models import ResolveResult
from dbsync.resolver import PrefixResolver
from dbsync.s3_client import S3Client

__all__ = [
    "S3Client",
    "PrefixResolver",
    "ResolveResult",
    "Decompressor",
    "Downloader",
]
