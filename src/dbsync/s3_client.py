"""S3 client for listing and downloading backup objects."""

from collections.abc import Iterator
from pathlib import Path
from typing import Any, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from structlog import BoundLogger

from dbsync.config import S3Config
from dbsync.exceptions import ConfigurationError, ObjectNotFoundError, S3Error
from dbsync.models import BucketSummary, ObjectSummary
from utils.logging import get_logger

# ListObjectsV2 never returns more than this many entries per call.
MAX_PREFIX_LISTING = 1000


def _error_code(error: ClientError) -> str:
    return error.response.get("Error", {}).get("Code", "Unknown")


class S3Client:
    """Read-only S3 client bound to one bucket."""

    def __init__(
        self,
        config: S3Config,
        logger: Optional[BoundLogger] = None,
    ) -> None:
        """Initialize S3 client.

        Args:
            config: S3 configuration
            logger: Optional logger instance
        """
        self.config = config
        self.logger = logger or get_logger("s3")
        self._client: Optional[Any] = None

    @property
    def bucket(self) -> str:
        """Configured bucket name.

        Raises:
            ConfigurationError: If no bucket is configured
        """
        if not self.config.bucket:
            raise ConfigurationError("A bucket name is required for this operation")
        return self.config.bucket

    @property
    def client(self) -> Any:
        """Get or create the boto3 S3 client."""
        if self._client is None:
            try:
                # Default credential chain unless a named profile is given
                session = boto3.Session(**self.config.session_kwargs())

                s3_kwargs: dict[str, Any] = {"service_name": "s3"}
                if self.config.endpoint:
                    s3_kwargs["endpoint_url"] = self.config.endpoint

                self._client = session.client(**s3_kwargs)
                self.logger.debug(
                    "S3 client initialized",
                    bucket=self.config.bucket,
                    profile=self.config.profile,
                    region=self.config.region or session.region_name,
                    endpoint=self.config.endpoint or "AWS S3",
                )
            except BotoCoreError as e:
                raise S3Error(
                    f"Failed to create S3 client: {e}",
                    context={"profile": self.config.profile},
                ) from e

        return self._client

    def list_buckets(self) -> list[BucketSummary]:
        """List all buckets visible to the credentials.

        Raises:
            S3Error: If listing fails
        """
        try:
            response = self.client.list_buckets()
        except ClientError as e:
            raise S3Error(
                f"Failed to list buckets: {_error_code(e)}",
                context={"error_code": _error_code(e)},
            ) from e
        except BotoCoreError as e:
            raise S3Error(f"Boto3 error during list_buckets: {e}") from e

        buckets = [BucketSummary.from_response(entry) for entry in response.get("Buckets", [])]
        self.logger.debug("Buckets listed", count=len(buckets))
        return buckets

    def list_common_prefixes(
        self,
        prefix: str = "",
        delimiter: str = "/",
        max_keys: int = MAX_PREFIX_LISTING,
    ) -> list[str]:
        """Return the "folders" directly below a prefix.

        Only a single ListObjectsV2 call is made, so at most ``max_keys``
        prefixes are returned.

        Raises:
            S3Error: If listing fails
        """
        params: dict[str, Any] = {
            "Bucket": self.bucket,
            "Delimiter": delimiter,
            "MaxKeys": max_keys,
        }
        if prefix:
            params["Prefix"] = prefix

        try:
            response = self.client.list_objects_v2(**params)
        except ClientError as e:
            raise S3Error(
                f"Failed to list prefixes in S3: {_error_code(e)}",
                context={"bucket": self.bucket, "prefix": prefix, "error_code": _error_code(e)},
            ) from e
        except BotoCoreError as e:
            raise S3Error(
                f"Boto3 error during prefix listing: {e}",
                context={"bucket": self.bucket, "prefix": prefix},
            ) from e

        prefixes = [entry["Prefix"] for entry in response.get("CommonPrefixes", [])]
        self.logger.debug(
            "Common prefixes listed",
            bucket=self.bucket,
            prefix=prefix,
            count=len(prefixes),
        )
        return prefixes

    def list_objects(self, prefix: str, max_keys: int) -> list[ObjectSummary]:
        """List up to ``max_keys`` objects under a prefix with a single call.

        Raises:
            S3Error: If listing fails
        """
        if max_keys <= 0:
            return []

        try:
            response = self.client.list_objects_v2(
                Bucket=self.bucket,
                Prefix=prefix,
                MaxKeys=max_keys,
            )
        except ClientError as e:
            raise S3Error(
                f"Failed to list objects in S3: {_error_code(e)}",
                context={"bucket": self.bucket, "prefix": prefix, "error_code": _error_code(e)},
            ) from e
        except BotoCoreError as e:
            raise S3Error(
                f"Boto3 error during list_objects: {e}",
                context={"bucket": self.bucket, "prefix": prefix},
            ) from e

        objects = [ObjectSummary.from_response(entry) for entry in response.get("Contents", [])]
        self.logger.debug(
            "S3 objects listed",
            bucket=self.bucket,
            prefix=prefix,
            count=len(objects),
        )
        return objects

    def iter_objects(self, prefix: str = "", page_size: int = MAX_PREFIX_LISTING) -> Iterator[ObjectSummary]:
        """Yield objects under a prefix, fetching pages lazily.

        Raises:
            S3Error: If a page cannot be fetched
        """
        paginator = self.client.get_paginator("list_objects_v2")
        params: dict[str, Any] = {
            "Bucket": self.bucket,
            "PaginationConfig": {"PageSize": max(1, min(page_size, MAX_PREFIX_LISTING))},
        }
        if prefix:
            params["Prefix"] = prefix

        try:
            for page_number, page in enumerate(paginator.paginate(**params), start=1):
                self.logger.debug(
                    "Fetched listing page",
                    bucket=self.bucket,
                    prefix=prefix,
                    page=page_number,
                    count=page.get("KeyCount", len(page.get("Contents", []))),
                )
                for entry in page.get("Contents", []):
                    yield ObjectSummary.from_response(entry)
        except ClientError as e:
            raise S3Error(
                f"Failed to list objects in S3: {_error_code(e)}",
                context={"bucket": self.bucket, "prefix": prefix, "error_code": _error_code(e)},
            ) from e
        except BotoCoreError as e:
            raise S3Error(
                f"Boto3 error during paginated listing: {e}",
                context={"bucket": self.bucket, "prefix": prefix},
            ) from e

    def object_exists(self, key: str) -> bool:
        """Check if an object exists in the bucket.

        Raises:
            S3Error: For errors other than a missing object
        """
        try:
            self.client.head_object(Bucket=self.bucket, Key=key)
            return True
        except ClientError as e:
            if _error_code(e) in ("404", "NoSuchKey", "NotFound"):
                return False
            raise S3Error(
                f"Error checking object existence: {_error_code(e)}",
                context={"bucket": self.bucket, "key": key, "error_code": _error_code(e)},
            ) from e
        except BotoCoreError as e:
            raise S3Error(
                f"Boto3 error during head_object: {e}",
                context={"bucket": self.bucket, "key": key},
            ) from e

    def download_file(self, key: str, local_path: Path) -> None:
        """Download an object to a local path.

        Raises:
            ObjectNotFoundError: If the key does not exist
            S3Error: If the download fails
        """
        self.logger.debug(
            "Downloading file from S3",
            bucket=self.bucket,
            key=key,
            local_path=str(local_path),
        )

        try:
            self.client.download_file(
                Bucket=self.bucket,
                Key=key,
                Filename=str(local_path),
            )
        except ClientError as e:
            error_code = _error_code(e)
            context = {"bucket": self.bucket, "key": key, "error_code": error_code}
            if error_code in ("404", "NoSuchKey", "NotFound"):
                raise ObjectNotFoundError(f"Object not found: {key}", context=context) from e
            raise S3Error(f"Failed to download file from S3: {error_code}", context=context) from e
        except BotoCoreError as e:
            raise S3Error(
                f"Boto3 error during download: {e}",
                context={"bucket": self.bucket, "key": key, "local_path": str(local_path)},
            ) from e

        self.logger.debug(
            "File downloaded from S3",
            bucket=self.bucket,
            key=key,
            local_path=str(local_path),
        )
