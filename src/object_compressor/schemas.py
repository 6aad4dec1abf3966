# In src/object_compressor/schemas.py

from typing import Any
from urllib.parse import unquote_plus

import pydantic
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .exceptions import DeserializationError

# --- Runtime Validation (using Pydantic) ---


class S3BucketModel(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)


class S3ObjectModel(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: str = Field(..., min_length=1)
    size: int | None = None

    # S3 notifications URL-encode object keys (a space arrives as '+').
    # GetObject needs the real key.
    @field_validator("key")
    @classmethod
    def decode_s3_key(cls, value: str) -> str:
        return unquote_plus(value)


class S3DataModel(BaseModel):
    model_config = ConfigDict(frozen=True)

    bucket: S3BucketModel
    object: S3ObjectModel


class S3EventNotificationRecord(BaseModel):
    """
    Pydantic model for runtime parsing and validation of an S3 event record.
    Immutable once parsed.
    """

    model_config = ConfigDict(frozen=True)

    s3: S3DataModel

    @property
    def source_bucket(self) -> str:
        return self.s3.bucket.name

    @property
    def source_key(self) -> str:
        return self.s3.object.key


class S3ChangeEvent(BaseModel):
    """
    One invocation's notification: an ordered list of object records.
    The wire name is ``Records``; ``records`` is accepted as well.
    """

    model_config = ConfigDict(populate_by_name=True)

    records: list[S3EventNotificationRecord] = Field(..., alias="Records")


def parse_event(payload: Any) -> S3ChangeEvent:
    """
    Parses an inbound notification (a mapping, or a JSON document as str/bytes)
    into an S3ChangeEvent. The whole event is valid or DeserializationError is
    raised; records are never partially accepted.
    """
    try:
        if isinstance(payload, (str, bytes, bytearray)):
            return S3ChangeEvent.model_validate_json(payload)
        return S3ChangeEvent.model_validate(payload)
    except pydantic.ValidationError as e:
        raise DeserializationError(
            f"Malformed S3 event notification: {e.error_count()} validation error(s)",
            context={
                "validation_errors": e.errors(
                    include_url=False, include_context=False
                )
            },
        ) from e
