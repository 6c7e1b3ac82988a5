"""Custom exception hierarchy for s3-db-sync."""

from typing import Any, Optional


class DbSyncError(Exception):
    """Base exception for all s3-db-sync errors."""

    def __init__(
        self,
        message: str,
        *,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        """Initialize error.

        Args:
            message: Error message
            context: Optional context dictionary with additional details
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        """Return formatted error message."""
        if self.context:
            return f"{self.message} [context={self.context}]"
        return self.message


class ConfigurationError(DbSyncError):
    """Configuration-related errors."""

    pass


class S3Error(DbSyncError):
    """Object store (S3 API) errors."""

    pass


class ObjectNotFoundError(S3Error):
    """Requested object key does not exist in the bucket."""

    pass


class SelectionError(DbSyncError):
    """Selection input does not map to a listed object."""

    pass


class DecompressionError(DbSyncError):
    """Downloaded archive could not be decompressed."""

    pass
