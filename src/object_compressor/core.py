# src/object_compressor/core.py

"""
Core orchestration: compress and re-upload every object named in an event.

Records are handled one at a time, first to last. The two halves of the
pipeline fail differently:

* A FetchError or EncodeError aborts the event. The error propagates to the
  caller and later records are not attempted.
* A ConfigError or PutError from the upload step is logged and recorded in
  the summary, and processing moves on to the next record.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from .clients import S3Client
from .compressor import READ_CHUNK_SIZE, compress_object
from .exceptions import ConfigError, PutError, get_error_context
from .schemas import S3ChangeEvent
from .uploader import DestinationTarget, Uploader

logger = logging.getLogger(__name__)


@dataclass
class DispatchSummary:
    uploaded: list[DestinationTarget] = field(default_factory=list)
    failed_uploads: list[dict[str, Any]] = field(default_factory=list)


def process_event(
    event: S3ChangeEvent,
    s3_client: S3Client,
    uploader: Uploader,
    chunk_size: int = READ_CHUNK_SIZE,
) -> DispatchSummary:
    """
    Runs fetch -> compress -> upload for each record in *event*, in order.

    Raises FetchError / EncodeError from the first record that fails to
    compress. Upload failures never raise; they are listed in the returned
    summary.
    """
    summary = DispatchSummary()
    logger.debug(f"Starting to process an event of {len(event.records)} records.")

    for index, record in enumerate(event.records):
        payload = compress_object(s3_client, record, chunk_size=chunk_size)

        try:
            target = uploader.upload_record(record, payload)
        except (ConfigError, PutError) as e:
            error_details = get_error_context(e)
            logger.warning(
                f"Upload failed, continuing with next record: {e}",
                extra={
                    "record_index": index,
                    "bucket": record.source_bucket,
                    "key": record.source_key,
                    "error": error_details,
                },
            )
            summary.failed_uploads.append(error_details)
            continue

        summary.uploaded.append(target)

    logger.info(
        f"Finished processing event. Uploaded {len(summary.uploaded)} objects.",
        extra={
            "records": len(event.records),
            "uploaded": len(summary.uploaded),
            "failed_uploads": len(summary.failed_uploads),
        },
    )
    return summary
