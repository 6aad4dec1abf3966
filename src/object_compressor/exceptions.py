# src/object_compressor/exceptions.py

"""
Shared custom exceptions for the Object Compressor service.

Centralizing exception definitions in a separate module prevents circular
import errors between other modules that need to raise or catch them.

Exception Hierarchy:
- CompressorError (base)
  - DeserializationError   malformed inbound event, nothing is processed
  - FetchError             source object could not be read
  - EncodeError            gzip encoding failed
  - ConfigError            destination bucket missing or malformed
  - PutError               destination object could not be written

Fetch and encode errors abort the whole event. Config and put errors are
contained by the dispatcher and only logged.

The ``retryable`` flag is a hint for operators and for the invoking runtime
(which may redeliver the event). Nothing in this service retries in-process.
"""

from typing import Any, Dict, Optional


class CompressorError(Exception):
    """Base exception for all Object Compressor service errors."""

    default_error_code = "COMPRESSOR_ERROR"

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        retryable: bool = False,
        correlation_id: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.default_error_code
        self.context = dict(context) if context else {}  # Copy context to prevent mutation
        self.retryable = retryable
        self.correlation_id = correlation_id

    @property
    def cause(self) -> Optional[BaseException]:
        """The underlying failure this error wraps, if any."""
        return self.__cause__

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for structured logging."""
        cause = self.cause
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "context": self.context,
            "correlation_id": self.correlation_id,
            "retryable": self.retryable,
            "cause": f"{type(cause).__name__}: {cause}" if cause else None,
        }


# === Inbound Event Errors ===


class DeserializationError(CompressorError):
    """Raised when the inbound notification does not match the expected shape."""

    default_error_code = "DESERIALIZATION_ERROR"


# === Source (fetch) and Encoding Errors ===


class FetchError(CompressorError):
    """Raised when the source object cannot be read from S3."""

    default_error_code = "FETCH_ERROR"

    def __init__(self, bucket: str, key: str, reason: str, **kwargs):
        message = f"Failed to fetch s3://{bucket}/{key}: {reason}"
        context = {"bucket": bucket, "key": key}
        context.update(kwargs.pop("context", None) or {})
        super().__init__(message, context=context, **kwargs)


class EncodeError(CompressorError):
    """Raised when the gzip encoder fails."""

    default_error_code = "ENCODE_ERROR"

    def __init__(self, key: str, reason: str, **kwargs):
        message = f"Failed to compress {key}: {reason}"
        context = {"key": key}
        context.update(kwargs.pop("context", None) or {})
        super().__init__(message, context=context, **kwargs)


# === Destination (upload) Errors ===


class ConfigError(CompressorError):
    """Raised when the destination bucket is not configured or is invalid."""

    default_error_code = "CONFIG_ERROR"

    def __init__(self, config_field: str, reason: str, value: Any = None, **kwargs):
        message = f"Invalid configuration for {config_field}: {reason}"
        context = {
            "config_field": config_field,
            "value": str(value) if value is not None else None,
        }
        super().__init__(message, context=context, **kwargs)


class PutError(CompressorError):
    """Raised when the compressed object cannot be written to S3."""

    default_error_code = "PUT_ERROR"

    def __init__(self, bucket: str, key: str, reason: str, **kwargs):
        message = f"Failed to upload s3://{bucket}/{key}: {reason}"
        context = {"bucket": bucket, "key": key}
        context.update(kwargs.pop("context", None) or {})
        super().__init__(message, context=context, **kwargs)


# === Utility Functions ===


def is_retryable_error(error: Exception) -> bool:
    """Check if an error is flagged as retryable."""
    return isinstance(error, CompressorError) and error.retryable


def get_error_context(error: Exception) -> Dict[str, Any]:
    """Extract error context for logging."""
    if isinstance(error, CompressorError):
        return error.to_dict()
    else:
        return {
            "error_type": error.__class__.__name__,
            "message": str(error),
            "retryable": False,  # Unknown errors default to non-retryable
        }
