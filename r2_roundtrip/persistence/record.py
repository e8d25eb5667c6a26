"""
Basic data structures for workflow events.
"""

import time
from typing import Any, Dict, Optional

STATUS_OK = "ok"
STATUS_SKIPPED = "skipped"
STATUS_IDEMPOTENT = "idempotent"
STATUS_FAILED = "failed"


class WorkflowEvent:
    """One checkpoint of the workflow: an operation and how it ended."""

    def __init__(self, operation: str, status: str, state: str, key: Optional[str] = None,
                 bytes_transferred: int = 0, elapsed_seconds: float = 0.0,
                 error_kind: Optional[str] = None, message: str = "", ts: float = None):
        self.ts = ts or time.time()
        self.operation = operation
        self.status = status
        self.state = state
        self.key = key
        self.bytes = bytes_transferred
        self.elapsed_seconds = elapsed_seconds
        self.error_kind = error_kind
        self.message = message

    @property
    def failed(self) -> bool:
        return self.status == STATUS_FAILED

    def to_dict(self) -> Dict[str, Any]:
        return {
            'ts': self.ts,
            'operation': self.operation,
            'status': self.status,
            'state': self.state,
            'key': self.key,
            'bytes': self.bytes,
            'elapsed_seconds': self.elapsed_seconds,
            'error_kind': self.error_kind,
            'message': self.message,
        }

    def __repr__(self) -> str:
        return f"WorkflowEvent(operation='{self.operation}', status='{self.status}', key={self.key!r})"
