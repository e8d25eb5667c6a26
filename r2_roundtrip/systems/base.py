"""
Async base class for S3-compatible object storage systems.
"""

import asyncio
import logging
from typing import Any, Awaitable, BinaryIO, Callable, List, Optional, TypeVar

import aioboto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from r2_roundtrip.configuration import (
    AUTH_CODES,
    CONFLICT_CODES,
    CONNECT_TIMEOUT_SECONDS,
    NOT_FOUND_CODES,
    READ_TIMEOUT_SECONDS,
    SDK_MAX_ATTEMPTS,
    StoreConfig,
)
from r2_roundtrip.errors import StoreError
from r2_roundtrip.models import BucketSummary, ObjectSummary

logger = logging.getLogger(__name__)

T = TypeVar("T")


def classify_client_error(error: ClientError, operation: str, key: Optional[str] = None) -> StoreError:
    """Turn a botocore ClientError into a StoreError with a kind."""
    code = error.response.get("Error", {}).get("Code", "Unknown")
    status_code = error.response.get("ResponseMetadata", {}).get("HTTPStatusCode", 0)
    detail = error.response.get("Error", {}).get("Message") or str(error)

    if code in NOT_FOUND_CODES or status_code == 404:
        kind, message = "not_found", f"not found: {code}"
    elif code in AUTH_CODES or status_code in (401, 403):
        kind, message = "auth", f"access denied: {code}"
    elif code in CONFLICT_CODES or status_code == 409:
        kind, message = "conflict", f"conflict: {code}"
    else:
        kind, message = "api", f"S3 error {code} (HTTP {status_code}): {detail}"

    return StoreError(message, operation=operation, key=key, kind=kind, code=code, http_status=status_code)


class ObjectStorageSystem:
    """Async S3 client bound to one bucket on one endpoint.

    Use as an async context manager; the S3 client only exists inside it.
    Every failure leaves this class as a StoreError.
    """

    addressing_style: str = "virtual"

    def __init__(self, config: StoreConfig):
        self.config = config
        self.endpoint = config.endpoint_url
        self.bucket_name = config.bucket_name

        self._config = self._create_config()

        self.session = aioboto3.Session(
            aws_access_key_id=config.access_key_id,
            aws_secret_access_key=config.access_key_secret,
            region_name=config.region,
        )

        self.client = None

        logger.info(f"Initialized storage for {self.endpoint} (bucket={self.bucket_name})")

    def _create_config(self) -> Config:
        """Create the botocore config shared by every request."""
        return Config(
            connect_timeout=CONNECT_TIMEOUT_SECONDS,
            read_timeout=READ_TIMEOUT_SECONDS,
            retries={
                "max_attempts": SDK_MAX_ATTEMPTS,
                "mode": "standard",
            },
            s3={"addressing_style": self.addressing_style},
        )

    async def __aenter__(self):
        self.client = await self.session.client(
            "s3",
            endpoint_url=self.endpoint,
            config=self._config,
        ).__aenter__()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self.client:
            await self.client.__aexit__(exc_type, exc_val, exc_tb)
            self.client = None

    def _require_client(self):
        if not self.client:
            raise RuntimeError("Storage client not initialized. Use async context manager.")
        return self.client

    async def _call(self, operation: str, key: Optional[str], request: Callable[[], Awaitable[T]]) -> T:
        """Run one store request under the request deadline and translate failures."""
        self._require_client()
        try:
            return await asyncio.wait_for(request(), timeout=self.config.request_timeout_seconds)
        except asyncio.TimeoutError as e:
            raise StoreError(
                f"timed out after {self.config.request_timeout_seconds}s",
                operation=operation, key=key, kind="timeout",
            ) from e
        except ClientError as e:
            raise classify_client_error(e, operation, key) from e
        except BotoCoreError as e:
            raise StoreError(f"transport error: {e}", operation=operation, key=key, kind="io") from e
        except OSError as e:
            raise StoreError(f"I/O error: {e}", operation=operation, key=key, kind="io") from e

    async def create_bucket(self) -> Any:
        """Create the configured bucket. Returns the raw response."""
        async def request():
            return await self.client.create_bucket(Bucket=self.bucket_name)

        return await self._call("CreateBucket", None, request)

    async def put_object(self, key: str, body: BinaryIO, content_length: int) -> Any:
        """Upload ``content_length`` bytes from ``body`` under ``key``."""
        async def request():
            return await self.client.put_object(
                Bucket=self.bucket_name,
                Key=key,
                Body=body,
                ContentLength=content_length,
            )

        return await self._call("PutObject", key, request)

    async def get_object(self, key: str) -> bytes:
        """Download the full body of ``key`` into memory."""
        async def request():
            response = await self.client.get_object(Bucket=self.bucket_name, Key=key)
            async with response["Body"] as body:
                return await body.read()

        return await self._call("GetObject", key, request)

    async def list_objects(self, prefix: Optional[str] = None) -> List[ObjectSummary]:
        """List every object in the bucket, following continuation tokens.

        Entries keep the order the store returned them in.
        """
        summaries: List[ObjectSummary] = []
        params = {"Bucket": self.bucket_name}
        if prefix:
            params["Prefix"] = prefix

        while True:
            async def request():
                return await self.client.list_objects_v2(**params)

            page = await self._call("ListObjectsV2", prefix, request)
            summaries.extend(ObjectSummary.from_dict(entry) for entry in page.get("Contents", []))

            token = page.get("NextContinuationToken")
            if not page.get("IsTruncated") or not token:
                break
            params["ContinuationToken"] = token

        return summaries

    async def list_buckets(self) -> List[BucketSummary]:
        """List every bucket visible to the credentials."""
        async def request():
            return await self.client.list_buckets()

        response = await self._call("ListBuckets", None, request)
        return [BucketSummary.from_dict(entry) for entry in response.get("Buckets", [])]
