# tests/unit/test_clients.py

"""
Unit tests for the S3Client wrapper in src/object_compressor/clients.py.

These tests ensure that our custom S3Client correctly interacts with the
underlying boto3 client, passing the expected arguments for reads and writes
with and without KMS, and that botocore failures are mapped onto FetchError
and PutError.
"""

from unittest.mock import MagicMock

import pytest
from botocore.exceptions import (
    ClientError,
    ConnectionClosedError,
    ConnectTimeoutError,
    EndpointConnectionError,
    NoCredentialsError,
    ReadTimeoutError,
)

from object_compressor.clients import S3Client
from object_compressor.exceptions import FetchError, PutError


def _client_error(code: str, operation: str = "GetObject") -> ClientError:
    return ClientError(
        {"Error": {"Code": code, "Message": f"{code} happened"}}, operation
    )


# -----------------------------------------------------------------------------
# Fixtures for setting up clients with mock dependencies
# -----------------------------------------------------------------------------


@pytest.fixture
def mock_boto_s3_client() -> MagicMock:
    """Yields a MagicMock for the boto3 S3 client."""
    return MagicMock()


@pytest.fixture
def s3_client(mock_boto_s3_client: MagicMock) -> S3Client:
    """Yields an instance of our S3Client wrapper without KMS."""
    return S3Client(s3_client=mock_boto_s3_client)


@pytest.fixture
def s3_client_with_kms(mock_boto_s3_client: MagicMock) -> S3Client:
    """Yields an instance of our S3Client wrapper with KMS enabled."""
    return S3Client(s3_client=mock_boto_s3_client, kms_key_id="test-kms-key")


# -----------------------------------------------------------------------------
# Reads
# -----------------------------------------------------------------------------


def test_get_file_content_stream(s3_client: S3Client, mock_boto_s3_client: MagicMock):
    """
    Verifies that get_file_content_stream calls get_object correctly and returns the body.
    """
    # Arrange
    mock_stream = MagicMock()
    mock_boto_s3_client.get_object.return_value = {"Body": mock_stream}

    # Act
    result = s3_client.get_file_content_stream(bucket="test-bucket", key="test-key")

    # Assert
    mock_boto_s3_client.get_object.assert_called_once_with(
        Bucket="test-bucket", Key="test-key"
    )
    assert result is mock_stream


def test_get_file_content_stream_without_body(
    s3_client: S3Client, mock_boto_s3_client: MagicMock
):
    mock_boto_s3_client.get_object.return_value = {"ContentLength": 0}
    assert s3_client.get_file_content_stream("test-bucket", "test-key") is None


@pytest.mark.parametrize(
    "aws_code, expected_code, retryable",
    [
        ("NoSuchKey", "S3_NOT_FOUND", False),
        ("NoSuchBucket", "S3_NOT_FOUND", False),
        ("AccessDenied", "S3_ACCESS_DENIED", False),
        ("SlowDown", "S3_THROTTLING", True),
        ("RequestTimeout", "S3_TIMEOUT", True),
        ("InternalError", "S3_CLIENT_ERROR", False),
    ],
)
def test_get_file_content_stream_maps_client_errors(
    s3_client, mock_boto_s3_client, aws_code, expected_code, retryable
):
    mock_boto_s3_client.get_object.side_effect = _client_error(aws_code)

    with pytest.raises(FetchError) as exc_info:
        s3_client.get_file_content_stream("test-bucket", "test-key")

    error = exc_info.value
    assert error.error_code == expected_code
    assert error.retryable is retryable
    assert error.context["bucket"] == "test-bucket"
    assert error.context["aws_error_code"] == aws_code
    assert isinstance(error.cause, ClientError)


@pytest.mark.parametrize(
    "exc, expected_code",
    [
        (ReadTimeoutError(endpoint_url="https://s3"), "S3_READ_TIMEOUT"),
        (EndpointConnectionError(endpoint_url="https://s3"), "S3_CONNECTION_ERROR"),
    ],
)
def test_get_file_content_stream_maps_transport_errors(
    s3_client, mock_boto_s3_client, exc, expected_code
):
    mock_boto_s3_client.get_object.side_effect = exc

    with pytest.raises(FetchError) as exc_info:
        s3_client.get_file_content_stream("test-bucket", "test-key")

    assert exc_info.value.error_code == expected_code
    assert exc_info.value.retryable is True


@pytest.mark.parametrize(
    "exc, expected_code, retryable",
    [
        (ConnectTimeoutError(endpoint_url="https://s3"), "S3_TRANSPORT_ERROR", True),
        (ConnectionClosedError(endpoint_url="https://s3"), "S3_TRANSPORT_ERROR", True),
        (NoCredentialsError(), "S3_TRANSPORT_ERROR", False),
    ],
)
def test_get_file_content_stream_maps_other_botocore_errors(
    s3_client, mock_boto_s3_client, exc, expected_code, retryable
):
    """Any botocore failure leaves the wrapper as a FetchError."""
    mock_boto_s3_client.get_object.side_effect = exc

    with pytest.raises(FetchError) as exc_info:
        s3_client.get_file_content_stream("test-bucket", "test-key")

    assert exc_info.value.error_code == expected_code
    assert exc_info.value.retryable is retryable
    assert exc_info.value.cause is exc


# -----------------------------------------------------------------------------
# Writes
# -----------------------------------------------------------------------------


def test_put_compressed_object(s3_client: S3Client, mock_boto_s3_client: MagicMock):
    """
    Verifies that put_compressed_object issues a single put_object call
    when no KMS key is configured.
    """
    s3_client.put_compressed_object(
        bucket="test-bucket", key="test.gz", body=b"\x1f\x8b...", content_hash="abc"
    )

    mock_boto_s3_client.put_object.assert_called_once_with(
        Bucket="test-bucket",
        Key="test.gz",
        Body=b"\x1f\x8b...",
        Metadata={"content-sha256": "abc"},
        ContentType="application/gzip",
    )
    mock_boto_s3_client.upload_fileobj.assert_not_called()


def test_put_compressed_object_with_kms(
    s3_client_with_kms: S3Client, mock_boto_s3_client: MagicMock
):
    """
    Verifies that put_compressed_object includes KMS arguments when a KMS key
    is configured.
    """
    s3_client_with_kms.put_compressed_object(
        bucket="test-bucket", key="test.gz", body=b"data", content_hash="abc"
    )

    mock_boto_s3_client.put_object.assert_called_once_with(
        Bucket="test-bucket",
        Key="test.gz",
        Body=b"data",
        Metadata={"content-sha256": "abc"},
        ContentType="application/gzip",
        ServerSideEncryption="aws:kms",
        SSEKMSKeyId="test-kms-key",
    )


@pytest.mark.parametrize(
    "aws_code, expected_code, retryable",
    [
        ("AccessDenied", "S3_UPLOAD_ACCESS_DENIED", False),
        ("NoSuchBucket", "S3_UPLOAD_NOT_FOUND", False),
        ("ThrottlingException", "S3_UPLOAD_THROTTLING", True),
        ("RequestTimeoutException", "S3_UPLOAD_TIMEOUT", True),
        ("EntityTooLarge", "S3_UPLOAD_CLIENT_ERROR", False),
    ],
)
def test_put_compressed_object_maps_client_errors(
    s3_client, mock_boto_s3_client, aws_code, expected_code, retryable
):
    mock_boto_s3_client.put_object.side_effect = _client_error(aws_code, "PutObject")

    with pytest.raises(PutError) as exc_info:
        s3_client.put_compressed_object("dest", "a.gz", b"data", "abc")

    error = exc_info.value
    assert error.error_code == expected_code
    assert error.retryable is retryable
    assert error.context["content_hash"] == "abc"
    assert "s3://dest/a.gz" in str(error)


def test_put_compressed_object_maps_connection_error(s3_client, mock_boto_s3_client):
    mock_boto_s3_client.put_object.side_effect = EndpointConnectionError(
        endpoint_url="https://s3"
    )

    with pytest.raises(PutError) as exc_info:
        s3_client.put_compressed_object("dest", "a.gz", b"data", "abc")

    assert exc_info.value.error_code == "S3_UPLOAD_CONNECTION_ERROR"


@pytest.mark.parametrize(
    "exc, expected_code, retryable",
    [
        (ConnectTimeoutError(endpoint_url="https://s3"), "S3_UPLOAD_TRANSPORT_ERROR", True),
        (ConnectionClosedError(endpoint_url="https://s3"), "S3_UPLOAD_TRANSPORT_ERROR", True),
        (NoCredentialsError(), "S3_UPLOAD_TRANSPORT_ERROR", False),
    ],
)
def test_put_compressed_object_maps_other_botocore_errors(
    s3_client, mock_boto_s3_client, exc, expected_code, retryable
):
    """Any botocore failure on the write leaves the wrapper as a PutError."""
    mock_boto_s3_client.put_object.side_effect = exc

    with pytest.raises(PutError) as exc_info:
        s3_client.put_compressed_object("dest", "a.gz", b"data", "abc")

    error = exc_info.value
    assert error.error_code == expected_code
    assert error.retryable is retryable
    assert error.context["content_hash"] == "abc"
    assert error.cause is exc
