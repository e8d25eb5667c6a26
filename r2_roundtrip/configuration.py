"""
Configuration for the R2 round-trip workflow.

This module contains:
- Environment variable names and defaults
- S3 client timeouts and connection settings
- The immutable StoreConfig built once at startup
"""

import os
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Optional
from urllib.parse import urlparse

from r2_roundtrip.errors import ConfigError

logger = logging.getLogger(__name__)

# =============================================================================
# ENVIRONMENT VARIABLES
# =============================================================================

ENV_BUCKET_NAME: str = "CLOUDFLARE_R2_BUCKET_NAME"
ENV_ACCESS_KEY_ID: str = "CLOUDFLARE_R2_Access_Key_ID"
ENV_SECRET_ACCESS_KEY: str = "CLOUDFLARE_R2_Secret_Access_Key"
ENV_ENDPOINT_URL: str = "CLOUDFLARE_R2_S3_API"
ENV_OBJECT_KEY: str = "CLOUDFLARE_R2_OBJECT_KEY"
ENV_OPERATION: str = "CLOUDFLARE_R2_OPERATION"
ENV_REGION: str = "CLOUDFLARE_R2_REGION"
ENV_LOG_LEVEL: str = "R2_ROUNDTRIP_LOG_LEVEL"

# Values of these variables never reach the log
SECRET_ENV_VARS = frozenset({ENV_SECRET_ACCESS_KEY})

# =============================================================================
# DEFAULTS
# =============================================================================

DEFAULT_REGION: str = "auto"  # R2 ignores the region but SigV4 needs one
DEFAULT_LOG_LEVEL: str = "INFO"
DEFAULT_KEY_FORMAT: str = "%Y%m%d_%H%M%S.json"
DEFAULT_EVENTS_DIR: str = "results"

# =============================================================================
# S3 CLIENT SETTINGS
# =============================================================================

CONNECT_TIMEOUT_SECONDS: int = 5
READ_TIMEOUT_SECONDS: int = 60
REQUEST_TIMEOUT_SECONDS: int = 120  # Deadline for a whole request, body included
SDK_MAX_ATTEMPTS: int = 3  # Retries stay inside botocore, the workflow never retries

# =============================================================================
# S3 ERROR CODES
# =============================================================================

# Creating a bucket that already exists is success
BUCKET_EXISTS_CODES = frozenset({"BucketAlreadyOwnedByYou", "BucketAlreadyExists"})
NOT_FOUND_CODES = frozenset({"NoSuchKey", "NoSuchBucket", "NotFound", "404"})
AUTH_CODES = frozenset({
    "AccessDenied",
    "InvalidAccessKeyId",
    "SignatureDoesNotMatch",
    "Unauthorized",
    "403",
})
CONFLICT_CODES = frozenset({"Conflict", "OperationAborted", "BucketNotEmpty", "409"})


class Operation(Enum):
    """Workflow mode. READ_ONLY skips the write step."""

    READ_WRITE = "READ_WRITE"
    READ_ONLY = "READ_ONLY"

    @classmethod
    def parse(cls, value: Optional[str]) -> "Operation":
        """Parse an operation name. Anything unrecognised means read-write."""
        if value and value.strip().upper() == cls.READ_ONLY.value:
            return cls.READ_ONLY
        return cls.READ_WRITE


@dataclass(frozen=True)
class StoreConfig:
    """Everything needed to reach one bucket on one S3-compatible endpoint."""

    endpoint_url: str
    access_key_id: str
    access_key_secret: str
    bucket_name: str
    object_key: Optional[str] = None
    operation: Operation = Operation.READ_WRITE
    region: str = DEFAULT_REGION
    request_timeout_seconds: float = REQUEST_TIMEOUT_SECONDS

    @property
    def read_only(self) -> bool:
        return self.operation is Operation.READ_ONLY

    def __repr__(self) -> str:
        return (
            f"StoreConfig(endpoint_url='{self.endpoint_url}', bucket_name='{self.bucket_name}', "
            f"object_key={self.object_key!r}, operation={self.operation.value}, region='{self.region}')"
        )


def getenv(environ: Mapping[str, str], name: str, default: str = "") -> str:
    """Read one variable and log what was read."""
    value = environ.get(name, default)
    shown = "***" if name in SECRET_ENV_VARS and value else value
    logger.debug(f"env {name}={shown}")
    return value


def load_store_config(
    environ: Optional[Mapping[str, str]] = None,
    object_key: Optional[str] = None,
    operation: Optional[str] = None,
) -> StoreConfig:
    """Build the StoreConfig from environment-style input.

    Args:
        environ: Key/value source (default: ``os.environ``)
        object_key: Overrides the object key variable when given
        operation: Overrides the operation variable when given

    Returns:
        The validated StoreConfig

    Raises:
        ConfigError: If a required value is missing or empty, or the endpoint is not an http(s) URL
    """
    if environ is None:
        environ = os.environ

    required = {
        "bucket_name": ENV_BUCKET_NAME,
        "access_key_id": ENV_ACCESS_KEY_ID,
        "access_key_secret": ENV_SECRET_ACCESS_KEY,
        "endpoint_url": ENV_ENDPOINT_URL,
    }
    values = {field: getenv(environ, name).strip() for field, name in required.items()}

    missing = [required[field] for field, value in values.items() if not value]
    if missing:
        raise ConfigError(f"Missing required configuration: {', '.join(missing)}")

    endpoint = urlparse(values["endpoint_url"])
    if endpoint.scheme not in ("http", "https") or not endpoint.netloc:
        raise ConfigError(f"{ENV_ENDPOINT_URL} must be an http(s) URL with a host, got {values['endpoint_url']!r}")

    if object_key is None:
        object_key = getenv(environ, ENV_OBJECT_KEY).strip() or None
    if operation is None:
        operation = getenv(environ, ENV_OPERATION)

    return StoreConfig(
        endpoint_url=values["endpoint_url"],
        access_key_id=values["access_key_id"],
        access_key_secret=values["access_key_secret"],
        bucket_name=values["bucket_name"],
        object_key=object_key or None,
        operation=Operation.parse(operation),
        region=getenv(environ, ENV_REGION, DEFAULT_REGION).strip() or DEFAULT_REGION,
    )
