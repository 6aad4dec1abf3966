"""
The Lambda Adapter for the Object Compressor service.

This module is the main entry point for the AWS Lambda function. It is
responsible for:
1.  Initializing and configuring AWS Lambda Powertools (Logger, Tracer, Metrics).
2.  Parsing and validating the incoming S3 event notification.
3.  Invoking the core pipeline (`process_event`) that compresses each new
    object and uploads it to the destination bucket.
4.  Reporting the outcome: compression failures are re-raised so the runtime
    marks the invocation as failed; contained upload failures are only counted.
"""

from typing import Any

import boto3
from aws_lambda_powertools import Logger, Metrics, Tracer
from aws_lambda_powertools.metrics import MetricUnit
from aws_lambda_powertools.utilities.typing import LambdaContext

from .clients import S3Client
from .config import get_config
from .core import process_event
from .exceptions import (
    DeserializationError,
    EncodeError,
    FetchError,
    get_error_context,
)
from .schemas import parse_event
from .uploader import Uploader

# --- Global & Reusable Components ---
CONFIG = get_config()

logger = Logger(service=CONFIG.service_name, level=CONFIG.log_level)
tracer = Tracer(service=CONFIG.service_name)
metrics = Metrics(
    namespace="ObjectCompressor",
    service=CONFIG.service_name,
)

s3_boto_client = boto3.client("s3")
s3_client = S3Client(s3_client=s3_boto_client, kms_key_id=CONFIG.kms_key_id)
uploader = Uploader(s3_client=s3_client, destination_bucket=CONFIG.destination_bucket)


@logger.inject_lambda_context()
@tracer.capture_lambda_handler
@metrics.log_metrics(capture_cold_start_metric=True)
def handler(event: dict, context: LambdaContext) -> dict[str, Any]:
    """Main Lambda handler for S3 object-created notifications."""
    metrics.add_dimension("environment", CONFIG.environment)

    try:
        change_event = parse_event(event)
    except DeserializationError as e:
        metrics.add_metric(name="InvalidEvents", unit=MetricUnit.Count, value=1)
        logger.error(
            "Invalid S3 event notification.",
            extra={"error": get_error_context(e)},
        )
        raise

    if not change_event.records:
        logger.warning("Event did not contain any S3 records. Exiting gracefully.")
        return {"uploaded": [], "failed_uploads": 0}

    logger.info(
        "Starting event processing",
        extra={
            "records_count": len(change_event.records),
            "s3_keys": [
                f"{r.source_bucket}/{r.source_key}" for r in change_event.records
            ],
            "request_id": context.aws_request_id,
        },
    )

    try:
        summary = process_event(
            change_event,
            s3_client=s3_client,
            uploader=uploader,
            chunk_size=CONFIG.read_chunk_size_bytes,
        )
    except (FetchError, EncodeError) as e:
        metrics.add_metric(
            name="CompressionFailures", unit=MetricUnit.Count, value=1
        )
        logger.error(
            f"Compression failed, aborting event: {e}",
            extra={"error": get_error_context(e)},
        )
        raise

    metrics.add_metric(
        name="CompressedObjects",
        unit=MetricUnit.Count,
        value=len(summary.uploaded),
    )
    if summary.failed_uploads:
        metrics.add_metric(
            name="UploadFailures",
            unit=MetricUnit.Count,
            value=len(summary.failed_uploads),
        )

    return {
        "uploaded": [target.key for target in summary.uploaded],
        "failed_uploads": len(summary.failed_uploads),
    }
