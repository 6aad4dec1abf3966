# src/object_compressor/clients.py

"""
Client wrapper for interacting with S3.

The class provides a clean, abstracted interface over the raw boto3 client,
making the core application logic easier to read, test, and maintain. It is
the only place that knows about botocore exceptions; everything leaving it is
a FetchError or a PutError.
"""

import logging
from typing import TYPE_CHECKING, Any, BinaryIO, cast

from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    EndpointConnectionError,
    HTTPClientError,
    ReadTimeoutError,
)
from botocore.exceptions import ConnectionError as BotoConnectionError

from .exceptions import FetchError, PutError

if TYPE_CHECKING:
    from mypy_boto3_s3.client import S3Client as S3ClientType

logger = logging.getLogger(__name__)

GZIP_CONTENT_TYPE = "application/gzip"

_NOT_FOUND_CODES = {"NoSuchKey", "NoSuchBucket", "404"}
_THROTTLING_CODES = {"Throttling", "ThrottlingException", "RequestLimitExceeded", "SlowDown"}
_TIMEOUT_CODES = {"RequestTimeout", "RequestTimeoutException"}


def _classify_client_error(e: ClientError, prefix: str) -> tuple[str, str, bool]:
    """
    Maps a botocore ClientError to (error_code, aws_error_message, retryable).
    *prefix* distinguishes read ("S3") from write ("S3_UPLOAD") failures.
    """
    error = e.response.get("Error", {})
    aws_code = error.get("Code", "Unknown")
    aws_message = error.get("Message", str(e))

    if aws_code in _NOT_FOUND_CODES:
        return f"{prefix}_NOT_FOUND", aws_message, False
    elif aws_code == "AccessDenied":
        return f"{prefix}_ACCESS_DENIED", aws_message, False
    elif aws_code in _THROTTLING_CODES:
        return f"{prefix}_THROTTLING", aws_message, True
    elif aws_code in _TIMEOUT_CODES:
        return f"{prefix}_TIMEOUT", aws_message, True
    else:
        return f"{prefix}_CLIENT_ERROR", aws_message, False


def _is_transient(e: BotoCoreError) -> bool:
    """Connection and HTTP-level failures are retryable; credential errors are not."""
    return isinstance(e, (HTTPClientError, BotoConnectionError))


class S3Client:
    """
    A wrapper for S3 client operations: streaming reads of source objects and
    single-request writes of compressed payloads.
    """

    def __init__(self, s3_client: "S3ClientType", kms_key_id: str | None = None):
        """
        Initializes the S3Client.

        Args:
            s3_client: A typed boto3 S3 client.
            kms_key_id: Optional KMS key ID for server-side encryption.
        """
        self._client = s3_client
        self._kms_key_id = kms_key_id
        if self._kms_key_id:
            logger.debug(
                "S3Client initialized with SSE-KMS enabled.",
                extra={"kms_key_id": self._kms_key_id},
            )

    def get_file_content_stream(self, bucket: str, key: str) -> BinaryIO | None:
        """
        Retrieves an S3 object's body as a file-like streaming object, or None
        when the response carries no body. Raises FetchError on failure.
        """
        try:
            response = self._client.get_object(Bucket=bucket, Key=key)
            return cast(BinaryIO | None, response.get("Body"))
        except ClientError as e:
            error_code, aws_message, retryable = _classify_client_error(e, "S3")
            raise FetchError(
                bucket,
                key,
                aws_message,
                error_code=error_code,
                retryable=retryable,
                context={"aws_error_code": e.response.get("Error", {}).get("Code")},
            ) from e
        except ReadTimeoutError as e:
            raise FetchError(
                bucket,
                key,
                "S3 read timeout while retrieving object",
                error_code="S3_READ_TIMEOUT",
                retryable=True,
            ) from e
        except EndpointConnectionError as e:
            raise FetchError(
                bucket,
                key,
                "S3 endpoint connection error",
                error_code="S3_CONNECTION_ERROR",
                retryable=True,
            ) from e
        except BotoCoreError as e:
            raise FetchError(
                bucket,
                key,
                f"S3 transport error: {e}",
                error_code="S3_TRANSPORT_ERROR",
                retryable=_is_transient(e),
            ) from e

    def put_compressed_object(
        self, bucket: str, key: str, body: bytes, content_hash: str
    ) -> None:
        """
        Writes a fully buffered gzip payload with a single PutObject request.
        Raises PutError on failure.
        """
        extra_args: dict[str, Any] = {
            "Metadata": {"content-sha256": content_hash},
            "ContentType": GZIP_CONTENT_TYPE,
        }
        if self._kms_key_id:
            extra_args.update(
                {"ServerSideEncryption": "aws:kms", "SSEKMSKeyId": self._kms_key_id}
            )
        logger.info(
            "Uploading compressed object",
            extra={
                "bucket": bucket,
                "key": key,
                "size_bytes": len(body),
                "kms_enabled": bool(self._kms_key_id),
            },
        )

        try:
            self._client.put_object(Bucket=bucket, Key=key, Body=body, **extra_args)
            logger.debug(
                "Upload (PUT) completed successfully",
                extra={"bucket": bucket, "key": key},
            )
        except ClientError as e:
            error_code, aws_message, retryable = _classify_client_error(e, "S3_UPLOAD")
            raise PutError(
                bucket,
                key,
                aws_message,
                error_code=error_code,
                retryable=retryable,
                context={
                    "content_hash": content_hash,
                    "kms_enabled": bool(self._kms_key_id),
                    "aws_error_code": e.response.get("Error", {}).get("Code"),
                },
            ) from e
        except ReadTimeoutError as e:
            raise PutError(
                bucket,
                key,
                "S3 upload read timeout",
                error_code="S3_UPLOAD_READ_TIMEOUT",
                retryable=True,
                context={"content_hash": content_hash},
            ) from e
        except EndpointConnectionError as e:
            raise PutError(
                bucket,
                key,
                "S3 upload connection error",
                error_code="S3_UPLOAD_CONNECTION_ERROR",
                retryable=True,
                context={"content_hash": content_hash},
            ) from e
        except BotoCoreError as e:
            raise PutError(
                bucket,
                key,
                f"S3 upload transport error: {e}",
                error_code="S3_UPLOAD_TRANSPORT_ERROR",
                retryable=_is_transient(e),
                context={"content_hash": content_hash},
            ) from e
