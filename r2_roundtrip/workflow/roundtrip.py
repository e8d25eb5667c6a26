"""
Round-trip workflow: ensure bucket, write, read back, list.

Each step awaits the store before the next one starts. The first failure
stops the run; nothing is retried and finished steps are not undone, so a
created bucket with a failed write is a valid end state.
"""

import os
import time
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from r2_roundtrip.common.staging import staged_payload
from r2_roundtrip.common.state_manager import StateManager, WorkflowState
from r2_roundtrip.configuration import BUCKET_EXISTS_CODES, StoreConfig
from r2_roundtrip.errors import StoreError, WorkflowError
from r2_roundtrip.models import (
    BucketHandle,
    BucketSummary,
    ObjectSummary,
    TransferRequest,
    TransferResult,
    build_sample_payload,
)
from r2_roundtrip.observability.events import EventEmitter
from r2_roundtrip.persistence.record import (
    STATUS_FAILED,
    STATUS_IDEMPOTENT,
    STATUS_OK,
    STATUS_SKIPPED,
    WorkflowEvent,
)

logger = logging.getLogger(__name__)


@dataclass
class WorkflowReport:
    """Outcome of one run. ``error`` is set exactly when ``state`` is FAILED."""

    state: WorkflowState = WorkflowState.INIT
    bucket: Optional[BucketHandle] = None
    write_skipped: bool = False
    transfer: Optional[TransferResult] = None
    objects: List[ObjectSummary] = field(default_factory=list)
    buckets: List[BucketSummary] = field(default_factory=list)
    error: Optional[WorkflowError] = None

    @property
    def succeeded(self) -> bool:
        return self.state is WorkflowState.DONE


class ObjectStoreWorkflow:
    """Runs the round-trip against one store through one storage system.

    Args:
        storage: An entered ObjectStorageSystem
        config: The StoreConfig the storage system was built from
        emitter: Receives an event at every checkpoint (default: log only)
        scratch_dir: Where upload payloads are staged (default: system temp dir)
    """

    def __init__(self, storage, config: StoreConfig, emitter: Optional[EventEmitter] = None,
                 scratch_dir: Optional[str] = None):
        self.storage = storage
        self.config = config
        self.emitter = emitter or EventEmitter()
        self.scratch_dir = scratch_dir
        self.states = StateManager()

    def _emit(self, operation: str, status: str, key: Optional[str] = None, bytes_transferred: int = 0,
              start: Optional[float] = None, error: Optional[WorkflowError] = None, message: str = "") -> None:
        self.emitter.emit(WorkflowEvent(
            operation=operation,
            status=status,
            state=self.states.state.value,
            key=key,
            bytes_transferred=bytes_transferred,
            elapsed_seconds=time.time() - start if start else 0.0,
            error_kind=error.kind if error else None,
            message=str(error) if error else message,
        ))

    async def ensure_bucket(self) -> BucketHandle:
        """Create the configured bucket, treating "already exists" as success.

        Raises:
            StoreError: If creation fails for any other reason
        """
        bucket_name = self.config.bucket_name
        start = time.time()
        try:
            await self.storage.create_bucket()
        except StoreError as e:
            if e.code not in BUCKET_EXISTS_CODES:
                self._emit("CreateBucket", STATUS_FAILED, key=bucket_name, start=start, error=e)
                raise
            self._emit("CreateBucket", STATUS_IDEMPOTENT, key=bucket_name, start=start,
                       message=f"bucket already exists ({e.code})")
            return BucketHandle(name=bucket_name, created=False)

        self._emit("CreateBucket", STATUS_OK, key=bucket_name, start=start)
        return BucketHandle(name=bucket_name, created=True)

    async def write_object(self, handle: BucketHandle, request: TransferRequest) -> bool:
        """Stage the payload in a scratch file and upload it.

        Returns:
            True if the object was written, False if read-only mode skipped it

        Raises:
            StoreError: If staging or the upload fails
        """
        if self.config.read_only:
            self._emit("PutObject", STATUS_SKIPPED, key=request.key, message="read-only mode")
            return False

        start = time.time()
        try:
            with staged_payload(request.payload, self.scratch_dir) as path:
                size = os.stat(path).st_size
                logger.debug(f"Uploading {path} ({size} bytes) to {handle.name}/{request.key}")
                with open(path, "rb") as body:
                    await self.storage.put_object(request.key, body, size)
        except OSError as e:
            error = StoreError(f"staging failed: {e}", operation="PutObject", key=request.key, kind="io")
            self._emit("PutObject", STATUS_FAILED, key=request.key, start=start, error=error)
            raise error from e
        except StoreError as e:
            self._emit("PutObject", STATUS_FAILED, key=request.key, start=start, error=e)
            raise

        self._emit("PutObject", STATUS_OK, key=request.key, bytes_transferred=request.content_length, start=start)
        return True

    async def read_object(self, handle: BucketHandle, key: str) -> TransferResult:
        """Read the whole object into memory and time it.

        Raises:
            StoreError: If the key does not exist or the transfer fails
        """
        start = time.time()
        try:
            body = await self.storage.get_object(key)
        except StoreError as e:
            self._emit("GetObject", STATUS_FAILED, key=key, start=start, error=e)
            raise

        result = TransferResult(key=key, byte_count=len(body), elapsed_seconds=time.time() - start, body=body)
        self._emit("GetObject", STATUS_OK, key=key, bytes_transferred=result.byte_count, start=start)
        return result

    async def list_objects(self, handle: BucketHandle) -> List[ObjectSummary]:
        start = time.time()
        try:
            objects = await self.storage.list_objects()
        except StoreError as e:
            self._emit("ListObjectsV2", STATUS_FAILED, key=handle.name, start=start, error=e)
            raise

        self._emit("ListObjectsV2", STATUS_OK, key=handle.name, start=start, message=f"{len(objects)} objects")
        return objects

    async def list_buckets(self) -> List[BucketSummary]:
        start = time.time()
        try:
            buckets = await self.storage.list_buckets()
        except StoreError as e:
            self._emit("ListBuckets", STATUS_FAILED, start=start, error=e)
            raise

        self._emit("ListBuckets", STATUS_OK, start=start, message=f"{len(buckets)} buckets")
        return buckets

    async def run(self, request: Optional[TransferRequest] = None) -> WorkflowReport:
        """Run every step in order and report how far it got.

        Args:
            request: Object to write (default: sample JSON payload under the
                configured or a timestamp-derived key)

        Returns:
            A DONE report, or a FAILED report carrying the first error
        """
        if self.states.state is not WorkflowState.INIT:
            raise RuntimeError("Workflow has already run; create a new one")

        if request is None:
            request = TransferRequest.for_payload(build_sample_payload(), self.config.object_key)

        report = WorkflowReport()
        start = time.time()
        logger.info(f"Starting round-trip on {self.config.bucket_name} "
                    f"(key={request.key}, operation={self.config.operation.value})")
        try:
            report.bucket = await self.ensure_bucket()
            self.states.advance(WorkflowState.BUCKET_ENSURED)

            written = await self.write_object(report.bucket, request)
            report.write_skipped = not written
            self.states.advance(WorkflowState.OBJECT_WRITTEN if written else WorkflowState.WRITE_SKIPPED)

            report.transfer = await self.read_object(report.bucket, request.key)
            self.states.advance(WorkflowState.OBJECT_READ)

            report.objects = await self.list_objects(report.bucket)
            report.buckets = await self.list_buckets()
            self.states.advance(WorkflowState.LISTED)

            self.states.advance(WorkflowState.DONE)
        except WorkflowError as e:
            self.states.fail()
            report.error = e
            report.state = self.states.state
            self._emit("Workflow", STATUS_FAILED, key=request.key, start=start, error=e)
            logger.debug(f"Workflow state info: {self.states.get_state_info()}")
            return report

        report.state = self.states.state
        self._emit("Workflow", STATUS_OK, key=request.key, start=start)
        logger.debug(f"Workflow state info: {self.states.get_state_info()}")
        return report
