"""Unit tests for S3 client module."""

from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError

from dbsync.config import S3Config
from dbsync.exceptions import ConfigurationError, ObjectNotFoundError, S3Error
from dbsync.models import BucketSummary, ObjectSummary
from dbsync.s3_client import S3Client


@pytest.fixture
def s3_config() -> S3Config:
    """Create test S3 configuration."""
    return S3Config(bucket="test-bucket", region="us-east-1", profile="prod")


@pytest.fixture
def mock_session():
    """Patch boto3.Session and expose the S3 client it creates."""
    with patch("boto3.Session") as session_class:
        session_class.return_value.client.return_value = MagicMock()
        yield session_class


def test_s3_client_init(s3_config: S3Config) -> None:
    """Test S3 client initialization is lazy."""
    client = S3Client(s3_config)
    assert client.config == s3_config
    assert client._client is None


def test_s3_client_creation_uses_profile(mock_session: MagicMock, s3_config: S3Config) -> None:
    """Test session is created from profile and region."""
    client = S3Client(s3_config)
    _ = client.client

    mock_session.assert_called_once_with(profile_name="prod", region_name="us-east-1")
    mock_session.return_value.client.assert_called_once_with(service_name="s3")


def test_s3_client_with_custom_endpoint(mock_session: MagicMock) -> None:
    """Test S3 client with custom endpoint."""
    client = S3Client(S3Config(bucket="test-bucket", endpoint="http://localhost:9000"))
    _ = client.client

    call_kwargs = mock_session.return_value.client.call_args[1]
    assert call_kwargs["endpoint_url"] == "http://localhost:9000"


def test_bucket_required() -> None:
    """Test bucket-scoped calls fail without a bucket."""
    client = S3Client(S3Config())
    with pytest.raises(ConfigurationError, match="bucket name is required"):
        _ = client.bucket


def test_list_buckets(mock_session: MagicMock) -> None:
    """Test bucket listing."""
    created = datetime(2023, 5, 1, tzinfo=timezone.utc)
    s3 = mock_session.return_value.client.return_value
    s3.list_buckets.return_value = {
        "Buckets": [
            {"Name": "alpha", "CreationDate": created},
            {"Name": "beta", "CreationDate": created},
        ]
    }

    buckets = S3Client(S3Config()).list_buckets()

    assert buckets == [BucketSummary("alpha", created), BucketSummary("beta", created)]


def test_list_buckets_access_denied(mock_session: MagicMock) -> None:
    """Test ClientError is wrapped in S3Error."""
    s3 = mock_session.return_value.client.return_value
    s3.list_buckets.side_effect = ClientError(
        {"Error": {"Code": "AccessDenied", "Message": "Denied"}}, "ListBuckets"
    )

    with pytest.raises(S3Error, match="AccessDenied"):
        S3Client(S3Config()).list_buckets()


def test_list_common_prefixes(mock_session: MagicMock, s3_config: S3Config) -> None:
    """Test common prefixes are requested with a delimiter and fixed limit."""
    s3 = mock_session.return_value.client.return_value
    s3.list_objects_v2.return_value = {
        "CommonPrefixes": [{"Prefix": "2024-01-01/"}, {"Prefix": "logs/"}],
    }

    prefixes = S3Client(s3_config).list_common_prefixes()

    assert prefixes == ["2024-01-01/", "logs/"]
    s3.list_objects_v2.assert_called_once_with(Bucket="test-bucket", Delimiter="/", MaxKeys=1000)


def test_list_objects(mock_session: MagicMock, s3_config: S3Config) -> None:
    """Test a single listing call with a page size."""
    modified = datetime(2024, 1, 1, tzinfo=timezone.utc)
    s3 = mock_session.return_value.client.return_value
    s3.list_objects_v2.return_value = {
        "Contents": [{"Key": "2024-01-01/db/app.sql.gz", "Size": 2048, "LastModified": modified}],
    }

    objects = S3Client(s3_config).list_objects("2024-01-01/db/", 25)

    assert objects == [ObjectSummary("2024-01-01/db/app.sql.gz", 2048, modified)]
    s3.list_objects_v2.assert_called_once_with(
        Bucket="test-bucket", Prefix="2024-01-01/db/", MaxKeys=25
    )


def test_list_objects_empty_prefix(mock_session: MagicMock, s3_config: S3Config) -> None:
    """Test listing with no Contents returns nothing."""
    s3 = mock_session.return_value.client.return_value
    s3.list_objects_v2.return_value = {"KeyCount": 0}

    assert S3Client(s3_config).list_objects("2024-01-01/db/", 25) == []


def test_list_objects_zero_max_keys(mock_session: MagicMock, s3_config: S3Config) -> None:
    """Test no call is made when nothing is requested."""
    s3 = mock_session.return_value.client.return_value

    assert S3Client(s3_config).list_objects("x/", 0) == []
    s3.list_objects_v2.assert_not_called()


def test_list_objects_no_such_bucket(mock_session: MagicMock, s3_config: S3Config) -> None:
    """Test listing errors are wrapped."""
    s3 = mock_session.return_value.client.return_value
    s3.list_objects_v2.side_effect = ClientError(
        {"Error": {"Code": "NoSuchBucket", "Message": "Missing"}}, "ListObjectsV2"
    )

    with pytest.raises(S3Error, match="NoSuchBucket") as exc_info:
        S3Client(s3_config).list_objects("x/", 5)
    assert exc_info.value.context["bucket"] == "test-bucket"


def test_list_objects_connection_error(mock_session: MagicMock, s3_config: S3Config) -> None:
    """Test BotoCoreError is wrapped."""
    s3 = mock_session.return_value.client.return_value
    s3.list_objects_v2.side_effect = EndpointConnectionError(endpoint_url="http://nowhere")

    with pytest.raises(S3Error, match="Boto3 error"):
        S3Client(s3_config).list_objects("x/", 5)


def test_iter_objects_spans_pages(mock_session: MagicMock, s3_config: S3Config) -> None:
    """Test objects are yielded across pages in order."""
    s3 = mock_session.return_value.client.return_value
    s3.get_paginator.return_value.paginate.return_value = [
        {"Contents": [{"Key": "a", "Size": 1}, {"Key": "b", "Size": 2}]},
        {"Contents": [{"Key": "c", "Size": 3}]},
    ]

    keys = [obj.key for obj in S3Client(s3_config).iter_objects(prefix="p/", page_size=2)]

    assert keys == ["a", "b", "c"]
    s3.get_paginator.return_value.paginate.assert_called_once_with(
        Bucket="test-bucket", Prefix="p/", PaginationConfig={"PageSize": 2}
    )


def test_object_exists(mock_session: MagicMock, s3_config: S3Config) -> None:
    """Test existence check."""
    s3 = mock_session.return_value.client.return_value
    s3.head_object.return_value = {}

    assert S3Client(s3_config).object_exists("a/b") is True


def test_object_exists_missing(mock_session: MagicMock, s3_config: S3Config) -> None:
    """Test 404 means the object does not exist."""
    s3 = mock_session.return_value.client.return_value
    s3.head_object.side_effect = ClientError({"Error": {"Code": "404"}}, "HeadObject")

    assert S3Client(s3_config).object_exists("a/b") is False


def test_object_exists_forbidden(mock_session: MagicMock, s3_config: S3Config) -> None:
    """Test other errors propagate as S3Error."""
    s3 = mock_session.return_value.client.return_value
    s3.head_object.side_effect = ClientError({"Error": {"Code": "403"}}, "HeadObject")

    with pytest.raises(S3Error):
        S3Client(s3_config).object_exists("a/b")


def test_download_file(mock_session: MagicMock, s3_config: S3Config, tmp_path: Path) -> None:
    """Test download passes bucket, key and filename."""
    s3 = mock_session.return_value.client.return_value
    target = tmp_path / "app.sql.gz"

    S3Client(s3_config).download_file("2024-01-01/db/app.sql.gz", target)

    s3.download_file.assert_called_once_with(
        Bucket="test-bucket", Key="2024-01-01/db/app.sql.gz", Filename=str(target)
    )


def test_download_file_not_found(mock_session: MagicMock, s3_config: S3Config, tmp_path: Path) -> None:
    """Test a 404 during download raises ObjectNotFoundError."""
    s3 = mock_session.return_value.client.return_value
    s3.download_file.side_effect = ClientError({"Error": {"Code": "404"}}, "HeadObject")

    with pytest.raises(ObjectNotFoundError):
        S3Client(s3_config).download_file("missing", tmp_path / "missing")
