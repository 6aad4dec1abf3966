"""
Shared fixtures for unit tests.
"""

from __future__ import annotations

import os
import types
import uuid
from datetime import datetime, timezone

import pytest

# The Lambda module builds its config, Powertools objects and boto3 client at
# import time, so the environment has to be in place before collection.
os.environ.setdefault("SERVICE_NAME", "object-compressor-test")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DESTINATION_BUCKET_NAME", "compressed-bucket")
os.environ.setdefault("AWS_DEFAULT_REGION", "ap-northeast-1")
os.environ.setdefault("POWERTOOLS_TRACE_DISABLED", "true")


def _s3_record(key: str, bucket: str = "source-bucket", size: int = 123) -> dict:
    """A realistic S3 ObjectCreated record."""
    return {
        "eventVersion": "2.1",
        "eventSource": "aws:s3",
        "awsRegion": "ap-northeast-1",
        "eventTime": datetime.now(timezone.utc).isoformat(),
        "eventName": "ObjectCreated:Put",
        "s3": {
            "s3SchemaVersion": "1.0",
            "bucket": {"name": bucket, "arn": f"arn:aws:s3:::{bucket}"},
            "object": {"key": key, "size": size, "sequencer": "0055AED6DCD90281E5"},
        },
    }


# ---------- Minimal, realistic dummy events ---------- #
@pytest.fixture
def make_s3_record():
    """Factory for single S3 notification records."""
    return _s3_record


@pytest.fixture
def s3_event() -> dict:
    """One S3 PUT notification with a single record."""
    return {"Records": [_s3_record("input/report.csv")]}


@pytest.fixture
def two_record_event() -> dict:
    return {
        "Records": [
            _s3_record("input/first.json"),
            _s3_record("input/second.json"),
        ]
    }


@pytest.fixture
def lambda_context():
    """A *very* small stand-in for the LambdaContext object."""
    return types.SimpleNamespace(
        function_name="object-compressor",
        memory_limit_in_mb=128,
        aws_request_id="req-" + uuid.uuid4().hex,
        invoked_function_arn="arn:aws:lambda:ap-northeast-1:000000000000:function:dummy",
        get_remaining_time_in_millis=lambda: 30000,
    )
