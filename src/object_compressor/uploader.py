# src/object_compressor/uploader.py

"""
Writes compressed payloads to the destination bucket.

The destination bucket name is handed to the Uploader when it is built. It is
validated on every upload, before any network call, so a missing or malformed
value fails each record's upload with a ConfigError. A source key with no
usable file name (``/``, ``a/..``) fails that record's upload with a PutError.
"""

import logging
import re
from dataclasses import dataclass

from .clients import S3Client
from .compressor import CompressedPayload
from .exceptions import ConfigError, PutError
from .keys import derive_destination_key
from .schemas import S3EventNotificationRecord

logger = logging.getLogger(__name__)

DESTINATION_BUCKET_SETTING = "DESTINATION_BUCKET_NAME"

# S3 general purpose bucket naming rules.
_BUCKET_NAME = re.compile(r"^[a-z0-9][a-z0-9.-]{1,61}[a-z0-9]$")
_IP_ADDRESS = re.compile(r"^\d{1,3}(\.\d{1,3}){3}$")


@dataclass(frozen=True, slots=True)
class DestinationTarget:
    bucket: str
    key: str


def validate_bucket_name(value: str | None) -> str:
    """Returns *value* if it is a usable bucket name, otherwise raises ConfigError."""
    if value is None or not value.strip():
        raise ConfigError(
            DESTINATION_BUCKET_SETTING,
            "destination bucket is not configured",
            error_code="MISSING_DESTINATION_BUCKET",
        )
    if not _BUCKET_NAME.match(value) or ".." in value or _IP_ADDRESS.match(value):
        raise ConfigError(
            DESTINATION_BUCKET_SETTING,
            "not a valid S3 bucket name",
            value=value,
            error_code="INVALID_DESTINATION_BUCKET",
        )
    return value


class Uploader:
    """Uploads one compressed payload per record under its derived key."""

    def __init__(self, s3_client: S3Client, destination_bucket: str | None):
        self._s3_client = s3_client
        self._destination_bucket = destination_bucket

    def target_for(self, record: S3EventNotificationRecord) -> DestinationTarget:
        """Resolves the destination bucket and key for *record*."""
        bucket = validate_bucket_name(self._destination_bucket)
        try:
            key = derive_destination_key(record.source_key)
        except ValueError as e:
            raise PutError(
                bucket,
                record.source_key,
                str(e),
                error_code="INVALID_DESTINATION_KEY",
            ) from e
        return DestinationTarget(bucket=bucket, key=key)

    def upload(self, target: DestinationTarget, payload: CompressedPayload) -> None:
        """Single PutObject of the whole payload. Raises PutError on failure."""
        self._s3_client.put_compressed_object(
            bucket=target.bucket,
            key=target.key,
            body=payload.data,
            content_hash=payload.sha256,
        )

    def upload_record(
        self, record: S3EventNotificationRecord, payload: CompressedPayload
    ) -> DestinationTarget:
        target = self.target_for(record)
        self.upload(target, payload)
        logger.info(
            "Stored compressed object",
            extra={
                "source": f"s3://{record.source_bucket}/{record.source_key}",
                "destination": f"s3://{target.bucket}/{target.key}",
                "compressed_size_bytes": payload.size,
            },
        )
        return target
