import logging
import os
from dataclasses import dataclass
from functools import lru_cache

logger = logging.getLogger(__name__)


class ConfigurationError(Exception):
    """Custom exception for configuration-related errors."""

    pass


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application configuration loaded from environment variables."""

    # --- Required Variables ---
    service_name: str
    environment: str

    # --- Optional Variables with Defaults ---
    # The destination bucket is validated per upload, not at load time, so a
    # missing value fails each upload instead of every cold start.
    destination_bucket: str | None
    log_level: str
    read_chunk_size_kb: int
    kms_key_id: str | None

    # --- Derived Properties ---
    @property
    def read_chunk_size_bytes(self) -> int:
        return self.read_chunk_size_kb * 1024

    @classmethod
    def load_from_env(cls) -> "AppConfig":
        """
        Loads configuration from environment variables, performing validation and type casting.
        Fails fast with a ConfigurationError if anything is invalid.
        """
        try:
            # --- Handle required string variables ---
            service_name = os.environ["SERVICE_NAME"]
            environment = os.environ["ENVIRONMENT"]

            # --- Handle optional variables ---
            destination_bucket = os.getenv("DESTINATION_BUCKET_NAME") or None
            kms_key_id = os.getenv("KMS_KEY_ID") or None

            read_chunk_size_kb = int(os.getenv("READ_CHUNK_SIZE_KB", "512"))
            if read_chunk_size_kb <= 0:
                raise ValueError("READ_CHUNK_SIZE_KB must be a positive integer.")

            # --- Handle special-case variables like log level ---
            log_level = os.getenv("LOG_LEVEL", "INFO").upper()
            allowed_log_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
            if log_level not in allowed_log_levels:
                raise ValueError(
                    f"LOG_LEVEL must be one of {allowed_log_levels}, not '{log_level}'"
                )

        except KeyError as e:
            raise ConfigurationError(
                f"Missing required environment variable: {e.args[0]}"
            ) from e
        except (ValueError, TypeError) as e:
            raise ConfigurationError(
                f"Invalid value for an environment variable: {e}"
            ) from e

        return cls(
            service_name=service_name,
            environment=environment,
            destination_bucket=destination_bucket,
            log_level=log_level,
            read_chunk_size_kb=read_chunk_size_kb,
            kms_key_id=kms_key_id,
        )


# --- Singleton Factory Function (Lazy-loaded and Cached) ---
@lru_cache(maxsize=1)
def get_config() -> AppConfig:
    """
    Loads the application configuration from environment variables.
    The result is cached using lru_cache, so the environment is only read once
    on the first call. This avoids import-time side effects.
    """
    logger.info("Loading application configuration from environment...")
    return AppConfig.load_from_env()
