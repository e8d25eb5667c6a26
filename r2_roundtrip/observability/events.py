"""
Event emission at workflow checkpoints.
"""

import logging
from typing import List, Optional

from r2_roundtrip.persistence.record import STATUS_FAILED, WorkflowEvent

logger = logging.getLogger(__name__)


class LoggingSink:
    """Writes each event as one log line."""

    def __init__(self, log: Optional[logging.Logger] = None):
        self.log = log or logger

    def handle(self, event: WorkflowEvent) -> None:
        details = [f"state={event.state}"]
        if event.key:
            details.append(f"key={event.key}")
        if event.bytes:
            details.append(f"bytes={event.bytes}")
        if event.elapsed_seconds:
            details.append(f"elapsed={event.elapsed_seconds:.3f}s")

        if event.status == STATUS_FAILED:
            self.log.error(f"{event.operation} failed [{event.error_kind}]: {event.message} ({', '.join(details)})")
        else:
            suffix = f": {event.message}" if event.message else ""
            self.log.info(f"{event.operation} {event.status}{suffix} ({', '.join(details)})")


class EventEmitter:
    """Fans workflow events out to every registered sink.

    A sink that raises is logged and skipped; it never stops the workflow.
    """

    def __init__(self, sinks: Optional[List] = None):
        self.sinks = list(sinks) if sinks is not None else [LoggingSink()]

    def add_sink(self, sink) -> None:
        self.sinks.append(sink)

    def emit(self, event: WorkflowEvent) -> None:
        for sink in self.sinks:
            try:
                sink.handle(event)
            except Exception as e:
                logger.error(f"Event sink {type(sink).__name__} failed: {e}")
