"""Pytest configuration and shared fixtures."""

from collections.abc import Callable
from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from dbsync.models import ObjectSummary


@pytest.fixture
def make_objects() -> Callable[..., list[ObjectSummary]]:
    """Build ``count`` objects under a prefix, named file-0, file-1, ..."""

    def _make(prefix: str, count: int, size: int = 1024) -> list[ObjectSummary]:
        return [
            ObjectSummary(
                key=f"{prefix}file-{i}.sql.gz",
                size=size,
                last_modified=datetime(2024, 1, 1, 12, 0, i, tzinfo=timezone.utc),
            )
            for i in range(count)
        ]

    return _make


@pytest.fixture
def fake_s3_client() -> Callable[..., MagicMock]:
    """Stand-in for S3Client serving fixed folders and listings.

    ``listings`` maps a prefix to the objects a single listing call returns.
    """

    def _make(
        folders: list[str],
        listings: dict[str, list[ObjectSummary]],
        bucket: str = "backups",
    ) -> MagicMock:
        client = MagicMock()
        client.bucket = bucket
        client.list_common_prefixes.return_value = list(folders)
        client.list_objects.side_effect = lambda prefix, max_keys: list(
            listings.get(prefix, [])
        )[:max_keys]
        client.iter_objects.side_effect = lambda prefix="", page_size=1000: iter(
            [obj for key, objs in listings.items() if key.startswith(prefix) for obj in objs]
        )
        return client

    return _make
