# src/object_compressor/compressor.py

"""
Streaming gzip compression of a single S3 object.

The object body is read in bounded chunks and fed, in order, into one gzip
encoder. The encoder keeps its sliding window across chunks, so the output is
a single gzip member identical to compressing the whole body in one write.
Everything stays in memory; nothing is written to /tmp.
"""

import gzip
import hashlib
import io
import logging
import zlib
from contextlib import closing
from dataclasses import dataclass
from typing import BinaryIO, Iterator

from botocore.exceptions import BotoCoreError

from .clients import S3Client
from .exceptions import EncodeError, FetchError
from .schemas import S3EventNotificationRecord

logger = logging.getLogger(__name__)

READ_CHUNK_SIZE = 512 * 1024
COMPRESSION_LEVEL = 6  # zlib's default level


@dataclass(frozen=True, slots=True)
class CompressedPayload:
    """A complete gzip stream, ready for a single upload."""

    data: bytes
    source_size: int
    sha256: str

    @property
    def size(self) -> int:
        return len(self.data)


class HashingBuffer(io.BytesIO):
    """In-memory gzip sink that keeps a running SHA-256 of what it holds."""

    def __init__(self) -> None:
        super().__init__()
        self._sha256 = hashlib.sha256()

    def write(self, data) -> int:  # type: ignore[override]
        self._sha256.update(data)
        return super().write(data)

    def hexdigest(self) -> str:
        return self._sha256.hexdigest()


def _iter_chunks(
    stream: BinaryIO, chunk_size: int, bucket: str, key: str
) -> Iterator[bytes]:
    """Yields at most *chunk_size* bytes per read until end-of-stream."""
    while True:
        try:
            chunk = stream.read(chunk_size)
        except (BotoCoreError, OSError) as e:
            raise FetchError(
                bucket,
                key,
                f"error while reading object body: {e}",
                error_code="S3_STREAM_ERROR",
                retryable=True,
            ) from e
        if not chunk:
            return
        yield chunk


def compress_object(
    s3_client: S3Client,
    record: S3EventNotificationRecord,
    chunk_size: int = READ_CHUNK_SIZE,
) -> CompressedPayload:
    """
    Fetches the record's object and gzip-compresses it chunk by chunk.

    An absent or empty body still produces a valid, empty gzip stream.
    Raises FetchError if the object cannot be read and EncodeError if the
    encoder fails. Neither is retried here.
    """
    if chunk_size <= 0:
        raise ValueError("chunk_size must be a positive integer.")

    bucket = record.source_bucket
    key = record.source_key

    stream = s3_client.get_file_content_stream(bucket, key)

    output = HashingBuffer()
    source_size = 0
    chunks = 0

    try:
        with gzip.GzipFile(
            fileobj=output,
            mode="wb",
            compresslevel=COMPRESSION_LEVEL,
            mtime=0,
        ) as encoder:
            if stream is None:
                logger.debug("Object has no body.", extra={"key": key})
            else:
                with closing(stream):
                    for chunk in _iter_chunks(stream, chunk_size, bucket, key):
                        encoder.write(chunk)
                        source_size += len(chunk)
                        chunks += 1
    except (zlib.error, OSError) as e:
        raise EncodeError(
            key, str(e), context={"bytes_read": source_size}
        ) from e
    except MemoryError as e:
        raise EncodeError(
            key,
            "insufficient memory",
            error_code="MEMORY_LIMIT_EXCEEDED",
            context={"bytes_read": source_size},
        ) from e

    payload = CompressedPayload(
        data=output.getvalue(),
        source_size=source_size,
        sha256=output.hexdigest(),
    )
    logger.info(
        "Compressed object",
        extra={
            "bucket": bucket,
            "key": key,
            "chunks": chunks,
            "source_size_bytes": source_size,
            "compressed_size_bytes": payload.size,
        },
    )
    return payload
