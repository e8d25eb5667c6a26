"""
Error types for the R2 round-trip workflow.

Every failure carries a kind, a message and, where known, the operation
and object key it happened on. The underlying exception is chained as
``__cause__`` by raising with ``from``.
"""

from typing import Optional


class WorkflowError(Exception):
    """Base class for all workflow failures."""

    kind: str = "workflow"

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        key: Optional[str] = None,
        kind: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.operation = operation
        self.key = key
        if kind is not None:
            self.kind = kind

    @property
    def cause(self) -> Optional[BaseException]:
        return self.__cause__

    def __str__(self) -> str:
        context = []
        if self.operation:
            context.append(f"operation={self.operation}")
        if self.key:
            context.append(f"key={self.key}")
        if context:
            return f"{self.message} ({', '.join(context)})"
        return self.message


class ConfigError(WorkflowError):
    """Required configuration input is missing or invalid."""

    kind = "config"


class StoreError(WorkflowError):
    """A call to the object store failed.

    ``kind`` is one of ``not_found``, ``conflict``, ``auth``, ``timeout``,
    ``io`` or ``api``. ``code`` is the S3 error code when the store sent one.
    """

    kind = "api"

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        key: Optional[str] = None,
        kind: Optional[str] = None,
        code: Optional[str] = None,
        http_status: int = 0,
    ):
        super().__init__(message, operation=operation, key=key, kind=kind)
        self.code = code
        self.http_status = http_status
